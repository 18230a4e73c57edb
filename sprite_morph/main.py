#!/usr/bin/env python
"""
Sprite Morph CLI - SDF shapeshift between two pixel art sprites

Usage:
    python -m sprite_morph.main <source_image> <target_image> [options]

Examples:
    sprite-morph slime.png knight.png                 # 15-frame strip
    sprite-morph slime.png knight.png --format gif    # Animated preview
    sprite-morph slime.png knight.png --ping-pong     # There and back
    sprite-morph slime.png knight.png --analyze       # Just show analysis
"""

import argparse
import sys
from pathlib import Path


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='sprite-morph',
        description="Silhouette-aware morph between two pixel art sprites",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Output Formats:
  strip     - One-row spritesheet PNG plus JSON metadata
  gif       - Animated GIF preview
  frames    - Directory of numbered PNG frames

Palette Staging:
  The in-between frames snap their colors to the source palette first,
  then to the union of both palettes, then to the target palette.
  Tune with --from-fraction / --union-fraction.

Examples:
  %(prog)s slime.png knight.png
  %(prog)s slime.png knight.png -f 30 --format gif
  %(prog)s slime.png knight.png --preset smooth
  %(prog)s slime.png knight.png --config morph.yaml
  %(prog)s --list-presets
        """
    )

    parser.add_argument(
        'source',
        type=str,
        nargs='?',  # Optional for --list-presets
        default=None,
        help='Starting sprite image (PNG, GIF, etc.)'
    )

    parser.add_argument(
        'target',
        type=str,
        nargs='?',
        default=None,
        help='Ending sprite image'
    )

    parser.add_argument(
        '-o', '--output',
        type=str,
        default=None,
        help='Output path (auto-generated if not specified)'
    )

    parser.add_argument(
        '--format',
        type=str,
        default='strip',
        choices=['strip', 'gif', 'frames'],
        help='Output format (default: strip)'
    )

    parser.add_argument(
        '-f', '--frames',
        type=int,
        default=None,
        help='Number of frames including both endpoints (default: 15)'
    )

    parser.add_argument(
        '--fps',
        type=int,
        default=None,
        help='Playback rate for GIF output and strip metadata (default: 20)'
    )

    parser.add_argument(
        '-c', '--colors',
        dest='palette_size',
        type=int,
        default=None,
        help='Dominant colors kept per sprite (default: 6)'
    )

    parser.add_argument(
        '--alpha-threshold',
        type=int,
        default=None,
        help='Alpha above this counts as part of the silhouette, 0-255 (default: 20)'
    )

    parser.add_argument(
        '--from-fraction',
        dest='from_palette_fraction',
        type=float,
        default=None,
        help='Share of frames quantized to the source palette (default: 0.4)'
    )

    parser.add_argument(
        '--union-fraction',
        dest='union_palette_fraction',
        type=float,
        default=None,
        help='Share of frames up to which the union palette is used (default: 0.6)'
    )

    parser.add_argument(
        '--sdf-method',
        type=str,
        default=None,
        choices=['edt', 'brute'],
        help='Distance transform: edt (fast, exact) or brute (reference)'
    )

    parser.add_argument(
        '--reverse',
        action='store_true',
        help='Morph from target to source'
    )

    parser.add_argument(
        '--ping-pong',
        action='store_true',
        help='Morph there and back in one loop'
    )

    parser.add_argument(
        '--preset',
        type=str,
        default=None,
        metavar='NAME',
        help='Use a preset configuration (e.g., quick, smooth, hard_swap)'
    )

    parser.add_argument(
        '--config',
        type=str,
        default=None,
        metavar='FILE',
        help='Load settings from a YAML file (flags still override it)'
    )

    parser.add_argument(
        '--list-presets',
        action='store_true',
        help='List all available presets and exit'
    )

    parser.add_argument(
        '--analyze',
        action='store_true',
        help="Only analyze both sprites, don't morph"
    )

    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Show tracebacks on error'
    )

    return parser


def print_analysis(info: dict) -> None:
    print(f"{info['name']}: {info['width']}x{info['height']}")
    print(f"  Inside pixels:   {info['inside_pixels']}")
    print(f"  Boundary pixels: {info['boundary_pixels']}")
    print(f"  Palette ({len(info['palette'])} colors):")
    for r, g, b, a in info['palette']:
        print(f"    #{r:02x}{g:02x}{b:02x}{a:02x}  ({r}, {g}, {b}, {a})")


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    from .core import MorphConfig, get_preset_manager, get_preset, load_config

    if args.list_presets:
        manager = get_preset_manager()
        print("Available presets:")
        for name in manager.list_all():
            preset = manager.get(name)
            print(f"  {name:<12} {preset.description}")
        return

    if not args.source or not args.target:
        parser.error("source and target images are required")

    try:
        from . import analyze, morph

        if args.config:
            config = load_config(args.config)
        elif args.preset:
            config = get_preset(args.preset)
        else:
            config = MorphConfig()

        config = config.merged({
            'frame_count': args.frames,
            'fps': args.fps,
            'palette_size': args.palette_size,
            'alpha_threshold': args.alpha_threshold,
            'from_palette_fraction': args.from_palette_fraction,
            'union_palette_fraction': args.union_palette_fraction,
            'sdf_method': args.sdf_method,
            'reverse': args.reverse or None,
        }).validate()

        for path in (args.source, args.target):
            if not Path(path).exists():
                print(f"Error: File not found: {path}")
                sys.exit(1)

        if args.analyze:
            print_analysis(analyze(args.source, config))
            print_analysis(analyze(args.target, config))
            return

        print(f"Morphing {args.source} -> {args.target} "
              f"({config.frame_count} frames, {config.palette_size} colors)...")

        output = morph(
            args.source,
            args.target,
            output_path=args.output,
            format=args.format,
            config=config,
            ping_pong=args.ping_pong
        )

        if isinstance(output, list):
            print(f"Output: {len(output)} frames in {output[0].parent if output else args.output}")
        else:
            print(f"Output: {output}")
        print("Done!")

    except Exception as e:
        print(f"Error: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)


if __name__ == '__main__':
    main()

"""
Sprite Morph - Silhouette-aware shapeshift animations for pixel art sprites
"""

from .core import (
    SpriteParser, SpriteAsset, SpriteExporter, MorphConfig,
    render_frame, render_sequence, render_ping_pong,
)

__version__ = "0.1.0"
__all__ = [
    'SpriteParser',
    'SpriteAsset',
    'SpriteExporter',
    'MorphConfig',
    'render_frame',
    'render_sequence',
    'render_ping_pong',
    'analyze',
    'morph',
]


def analyze(image_path: str, config: MorphConfig = None) -> dict:
    """
    Analyze a sprite the way the morph engine sees it.

    Args:
        image_path: Path to the sprite image
        config: Palette size / alpha threshold / SDF method to use

    Returns:
        Dictionary with size, silhouette stats and ranked palette
    """
    config = (config or MorphConfig()).validate()
    asset = SpriteParser.parse(
        image_path,
        palette_size=config.palette_size,
        alpha_threshold=config.alpha_threshold,
        sdf_method=config.sdf_method
    )

    return {
        'name': asset.name,
        'width': asset.width,
        'height': asset.height,
        'inside_pixels': asset.inside_count,
        'boundary_pixels': asset.boundary_count,
        'palette': [tuple(c) for c in asset.palette],
    }


def morph(
    source_path: str,
    target_path: str,
    output_path: str = None,
    format: str = 'strip',
    config: MorphConfig = None,
    ping_pong: bool = False
):
    """
    Morph one sprite into another and export the result.

    Args:
        source_path: Path to the starting sprite
        target_path: Path to the ending sprite
        output_path: Output path (auto-generated if None)
        format: Output format ('strip', 'gif', 'frames')
        config: Morph configuration (defaults to the reference settings)
        ping_pong: Morph there and back instead of one way

    Returns:
        Path to the output file, or list of paths for 'frames'
    """
    from pathlib import Path

    if format not in ('strip', 'gif', 'frames'):
        raise ValueError(f"Unknown format: {format}")

    config = (config or MorphConfig()).validate()

    options = dict(
        palette_size=config.palette_size,
        alpha_threshold=config.alpha_threshold,
        sdf_method=config.sdf_method
    )
    source = SpriteParser.parse(source_path, **options)
    target = SpriteParser.parse(target_path, **options)

    if ping_pong:
        frames = render_ping_pong(source, target, config)
    else:
        frames = render_sequence(source, target, config)

    if output_path is None:
        src = Path(source_path)
        suffix = {'strip': '.png', 'gif': '.gif', 'frames': ''}.get(format, '')
        output_path = src.parent / f"{src.stem}_to_{Path(target_path).stem}{suffix}"

    if format == 'strip':
        path, meta = SpriteExporter.to_strip(frames, output_path, fps=config.fps)
        return path
    elif format == 'gif':
        return SpriteExporter.to_gif(frames, output_path, fps=config.fps)
    else:
        return SpriteExporter.to_frames(frames, output_path)

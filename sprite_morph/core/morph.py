"""
SDF Morph - Silhouette-aware transitions between two sprites

Instead of cross-fading pixels, the two sprites' signed distance fields are
blended so the outline itself moves from one shape to the other. Colors are
blended with the same weights and snapped onto a small palette, which keeps
the in-between frames looking like pixel art rather than smooth gradients.

Layout:
- Both sprites are anchored bottom-center on a shared canvas
  (canvas = elementwise max of their sizes)
- Off-sprite pixels count as far outside and fully transparent

Palette staging across a sequence:
- First ~40% of the frames: source palette
- Middle ~20%: union of both palettes
- Last ~40%: target palette
The first and last frames are the sprites themselves, untouched.
"""

import numpy as np
from typing import List, Optional, Tuple

from .palette import RGBA, Palette, quantize_to_palette, union_palettes
from .parser import SpriteAsset
from .presets import MorphConfig
from .sdf import OUTSIDE_DISTANCE


CanvasSize = Tuple[int, int]


# =============================================================================
# Canvas Layout
# =============================================================================

def canvas_size_for(source: SpriteAsset, target: SpriteAsset) -> CanvasSize:
    """Shared canvas (width, height) for two sprites"""
    return (max(source.width, target.width), max(source.height, target.height))


def anchor_offset(asset: SpriteAsset, canvas_size: CanvasSize) -> Tuple[int, int]:
    """Bottom-center (x, y) offset of a sprite on the canvas"""
    cw, ch = canvas_size
    return ((cw - asset.width) // 2, ch - asset.height)


def _resolve_canvas(
    assets: Tuple[SpriteAsset, ...],
    canvas_size: Optional[CanvasSize]
) -> CanvasSize:
    needed = (max(a.width for a in assets), max(a.height for a in assets))
    if canvas_size is None:
        return needed

    cw, ch = canvas_size
    if cw < needed[0] or ch < needed[1]:
        raise ValueError(
            f"Canvas {cw}x{ch} is smaller than the sprites ({needed[0]}x{needed[1]})"
        )
    return (cw, ch)


def _place(asset: SpriteAsset, canvas_size: CanvasSize) -> Tuple[np.ndarray, np.ndarray]:
    """Sprite SDF and colors laid out on the canvas, with off-sprite fill"""
    cw, ch = canvas_size
    ox, oy = anchor_offset(asset, canvas_size)

    sdf = np.full((ch, cw), OUTSIDE_DISTANCE, dtype=np.float64)
    colors = np.zeros((ch, cw, 4), dtype=np.float64)

    sdf[oy:oy + asset.height, ox:ox + asset.width] = asset.sdf
    colors[oy:oy + asset.height, ox:ox + asset.width] = asset.colors

    return sdf, colors


def composite_sprite(asset: SpriteAsset, canvas_size: Optional[CanvasSize] = None) -> np.ndarray:
    """
    Paste a sprite onto a transparent canvas at its bottom-center anchor.

    No blending or quantization: used for the first and last frames.
    """
    cw, ch = _resolve_canvas((asset,), canvas_size)
    ox, oy = anchor_offset(asset, (cw, ch))

    frame = np.zeros((ch, cw, 4), dtype=np.uint8)
    frame[oy:oy + asset.height, ox:ox + asset.width] = asset.colors
    return frame


# =============================================================================
# Frame Rendering
# =============================================================================

def render_frame(
    source: SpriteAsset,
    target: SpriteAsset,
    t: float,
    palette: Palette,
    canvas_size: Optional[CanvasSize] = None
) -> np.ndarray:
    """
    Render one morph frame.

    Args:
        source: Sprite at t = 0
        target: Sprite at t = 1
        t: Blend factor in [0, 1]; values outside raise ValueError
        palette: Colors the blended pixels snap to (empty = no snapping)
        canvas_size: (width, height), defaults to the max of both sprites

    Returns:
        RGBA frame (H, W, 4) uint8
    """
    if not 0.0 <= t <= 1.0:
        raise ValueError(f"Blend factor t must be within [0, 1], got {t}")

    cw, ch = _resolve_canvas((source, target), canvas_size)

    sdf_a, colors_a = _place(source, (cw, ch))
    sdf_b, colors_b = _place(target, (cw, ch))

    d = sdf_a * (1.0 - t) + sdf_b * t
    visible = d < 0

    frame = np.zeros((ch, cw, 4), dtype=np.uint8)
    if not visible.any():
        return frame

    mix = colors_a[visible] * (1.0 - t) + colors_b[visible] * t
    frame[visible] = quantize_to_palette(mix, palette)

    return frame


# =============================================================================
# Sequences
# =============================================================================

def frame_times(frame_count: int) -> List[float]:
    """t for frames 1..frame_count, evenly spaced from 0 to 1"""
    if frame_count < 2:
        raise ValueError(f"frame_count must be >= 2, got {frame_count}")
    return [(f - 1) / (frame_count - 1) for f in range(1, frame_count + 1)]


def select_palette(
    source: SpriteAsset,
    target: SpriteAsset,
    frame: int,
    config: Optional[MorphConfig] = None
) -> Tuple[RGBA, ...]:
    """
    Palette governing quantization of a 1-based frame index.

    With the reference 15 frames: frames up to 6 use the source palette,
    7-9 the union, 10 onward the target palette.
    """
    config = config or MorphConfig()

    if frame <= config.from_palette_until:
        return tuple(source.palette)
    if frame <= config.union_palette_until:
        return union_palettes(source.palette, target.palette)
    return tuple(target.palette)


def render_sequence(
    source: SpriteAsset,
    target: SpriteAsset,
    config: Optional[MorphConfig] = None,
    canvas_size: Optional[CanvasSize] = None
) -> List[np.ndarray]:
    """
    Render a full morph from source to target.

    Frame 1 is the source and the last frame is the target, both copied
    verbatim. ``config.reverse`` swaps the direction.
    """
    config = (config or MorphConfig()).validate()

    if config.reverse:
        source, target = target, source

    size = _resolve_canvas((source, target), canvas_size)
    frame_count = config.frame_count

    frames = []
    for f, t in enumerate(frame_times(frame_count), start=1):
        if f == 1:
            frames.append(composite_sprite(source, size))
        elif f == frame_count:
            frames.append(composite_sprite(target, size))
        else:
            palette = select_palette(source, target, f, config)
            frames.append(render_frame(source, target, t, palette, size))

    return frames


def render_ping_pong(
    source: SpriteAsset,
    target: SpriteAsset,
    config: Optional[MorphConfig] = None,
    canvas_size: Optional[CanvasSize] = None
) -> List[np.ndarray]:
    """
    Morph there and back: source -> target -> source.

    The target frame is shown once at the turnaround, and the closing
    source frame is dropped so the sequence loops cleanly.
    """
    config = config or MorphConfig()
    size = canvas_size or canvas_size_for(source, target)

    forward = render_sequence(source, target, config, size)
    backward = render_sequence(target, source, config, size)

    return forward + backward[1:-1]

"""
Palette Ranking & Quantization

Pixel-art morphs keep their look by snapping every blended color onto a
handful of representative colors instead of letting gradients appear.

Techniques:
1. Ranking - Most frequent RGBA values among the sprite's inside pixels
2. Union - Merge two palettes for the middle of a transition
3. Quantization - Nearest palette entry in 4D (R, G, B, A) space

Ties always go to the earliest candidate (first-seen color when ranking,
first palette entry when quantizing).
"""

import numpy as np
from typing import List, NamedTuple, Sequence, Tuple, Union


DEFAULT_PALETTE_SIZE = 6


# =============================================================================
# Color Type
# =============================================================================

class RGBA(NamedTuple):
    """A single RGBA color, channels 0-255"""
    r: int
    g: int
    b: int
    a: int

    @classmethod
    def from_sequence(cls, values: Sequence[float]) -> 'RGBA':
        """Build from any 4-item sequence, truncating toward zero"""
        if len(values) != 4:
            raise ValueError(f"RGBA needs 4 channels, got {len(values)}")
        return cls(*(int(v) for v in values))


ColorLike = Union[RGBA, Tuple[float, float, float, float], Sequence[float]]
Palette = Sequence[RGBA]

TRANSPARENT = RGBA(0, 0, 0, 0)


def _palette_array(palette: Palette) -> np.ndarray:
    """Palette as a (k, 4) float64 array"""
    return np.asarray([tuple(c) for c in palette], dtype=np.float64).reshape(-1, 4)


# =============================================================================
# Palette Ranking
# =============================================================================

def _pack_rgba(pixels: np.ndarray) -> np.ndarray:
    """Pack (..., 4) uint8 colors into single uint32 keys (exact per channel)"""
    p = pixels.astype(np.uint32)
    return (p[..., 0] << 24) | (p[..., 1] << 16) | (p[..., 2] << 8) | p[..., 3]


def _unpack_rgba(key: int) -> RGBA:
    key = int(key)
    return RGBA((key >> 24) & 0xFF, (key >> 16) & 0xFF, (key >> 8) & 0xFF, key & 0xFF)


def rank_palette(
    pixels: np.ndarray,
    inside: np.ndarray,
    max_colors: int = DEFAULT_PALETTE_SIZE
) -> Tuple[RGBA, ...]:
    """
    Rank the dominant colors of a sprite.

    Args:
        pixels: RGBA image (H, W, 4) with values 0-255
        inside: Silhouette mask (H, W); only these pixels are counted
        max_colors: Palette cutoff N

    Returns:
        Up to ``max_colors`` RGBA tuples sorted by descending frequency.
        Equal counts keep the order in which the colors were first met
        scanning top-to-bottom, left-to-right.
    """
    inside = np.asarray(inside, dtype=bool)

    if max_colors < 1:
        raise ValueError(f"max_colors must be >= 1, got {max_colors}")
    if pixels.ndim != 3 or pixels.shape[2] != 4:
        raise ValueError(f"Pixels must be an HxWx4 array, got shape {pixels.shape}")
    if inside.shape != pixels.shape[:2]:
        raise ValueError(
            f"Mask shape {inside.shape} does not match image shape {pixels.shape[:2]}"
        )

    # Boolean indexing walks the grid in raster order
    keys = _pack_rgba(pixels[inside])
    if keys.size == 0:
        return ()

    unique, first_index, counts = np.unique(keys, return_index=True, return_counts=True)

    # lexsort: last key is primary -> descending count, then first occurrence
    order = np.lexsort((first_index, -counts))

    return tuple(_unpack_rgba(unique[i]) for i in order[:max_colors])


# =============================================================================
# Palette Union
# =============================================================================

def union_palettes(a: Palette, b: Palette) -> Tuple[RGBA, ...]:
    """Concatenate two palettes, dropping exact duplicates (first one wins)"""
    seen = set()
    merged: List[RGBA] = []
    for color in list(a) + list(b):
        color = RGBA(*color)
        if color not in seen:
            seen.add(color)
            merged.append(color)
    return tuple(merged)


# =============================================================================
# Quantization
# =============================================================================

def nearest_color_in_palette(color: ColorLike, palette: Palette) -> RGBA:
    """
    Snap one (possibly fractional) color to its nearest palette entry.

    Distance is squared Euclidean over all four channels. With an empty
    palette the color is passed through, truncated to integers.
    """
    if len(palette) == 0:
        return RGBA.from_sequence(color)

    query = np.asarray(tuple(color), dtype=np.float64)
    diff = _palette_array(palette) - query
    distances = np.sum(diff * diff, axis=1)

    # argmin returns the first minimum
    return RGBA(*palette[int(np.argmin(distances))])


def quantize_to_palette(colors: np.ndarray, palette: Palette) -> np.ndarray:
    """
    Vectorized ``nearest_color_in_palette`` for an (N, 4) array of colors.

    Returns:
        (N, 4) uint8 array
    """
    colors = np.asarray(colors, dtype=np.float64).reshape(-1, 4)

    if len(palette) == 0:
        return np.trunc(colors).astype(np.uint8)

    palette_arr = _palette_array(palette)
    diff = colors[:, None, :] - palette_arr[None, :, :]
    distances = np.sum(diff * diff, axis=2)
    nearest = np.argmin(distances, axis=1)

    return palette_arr[nearest].astype(np.uint8)

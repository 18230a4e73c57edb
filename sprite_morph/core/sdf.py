"""
Signed Distance Fields (SDF)

Distance fields used to morph one silhouette into another:
- Silhouette from alpha (inside = alpha above a threshold)
- Boundary pixels (8-neighbour class changes)
- Per-pixel distance to the nearest boundary pixel

SDF Basics:
- Each pixel stores distance to the nearest boundary pixel center
- Negative = inside sprite, Positive = outside
- Boundary pixels sit half a pixel from the edge, so their sign survives
- Blending two SDFs moves the zero level set smoothly between shapes
"""

import numpy as np
from scipy import ndimage as scipy_ndimage
from typing import List, Optional, Tuple


DEFAULT_ALPHA_THRESHOLD = 20

# Distance used where no boundary exists (uniform sprites, off-sprite pixels)
OUTSIDE_DISTANCE = 1e9

# The edge runs between a boundary pixel and its opposite-class neighbour
BOUNDARY_DISTANCE = 0.5

SDF_METHODS = ('edt', 'brute')

# Pixel-to-boundary pairs evaluated per chunk by the brute-force builder
_BRUTE_PAIRS = 1 << 22


# =============================================================================
# Geometry Checks
# =============================================================================

def _check_rgba(pixels: np.ndarray) -> None:
    if pixels.ndim != 3 or pixels.shape[2] != 4:
        raise ValueError(f"Pixels must be an HxWx4 array, got shape {pixels.shape}")
    if pixels.shape[0] == 0 or pixels.shape[1] == 0:
        raise ValueError(f"Image has zero size: {pixels.shape[1]}x{pixels.shape[0]}")


def _check_mask(mask: np.ndarray, name: str = "mask") -> None:
    if mask.ndim != 2:
        raise ValueError(f"{name} must be a 2D array, got shape {mask.shape}")
    if mask.shape[0] == 0 or mask.shape[1] == 0:
        raise ValueError(f"{name} has zero size: {mask.shape[1]}x{mask.shape[0]}")


# =============================================================================
# Silhouette & Boundary
# =============================================================================

def extract_silhouette(
    pixels: np.ndarray,
    threshold: int = DEFAULT_ALPHA_THRESHOLD
) -> np.ndarray:
    """
    Classify pixels as inside/outside the sprite.

    Args:
        pixels: RGBA image (H, W, 4) with values 0-255
        threshold: Alpha must be strictly greater than this to count as inside

    Returns:
        Boolean mask (H, W)
    """
    _check_rgba(pixels)
    return pixels[:, :, 3] > threshold


def detect_boundary(inside: np.ndarray) -> np.ndarray:
    """
    Find pixels whose 8-neighbourhood contains the opposite class.

    Neighbours outside the image are skipped. Edge padding only repeats
    values that are already in-bounds neighbours, so it never adds a
    class change that isn't there.
    """
    inside = np.asarray(inside, dtype=bool)
    _check_mask(inside, "inside")

    h, w = inside.shape
    padded = np.pad(inside, 1, mode='edge')
    boundary = np.zeros((h, w), dtype=bool)

    for dy in (-1, 0, 1):
        for dx in (-1, 0, 1):
            if dx == 0 and dy == 0:
                continue
            neighbour = padded[1 + dy:1 + dy + h, 1 + dx:1 + dx + w]
            boundary |= neighbour != inside

    return boundary


def boundary_points(boundary: np.ndarray) -> List[Tuple[int, int]]:
    """Boundary pixels as (x, y) in raster order (top-to-bottom, left-to-right)"""
    ys, xs = np.nonzero(boundary)
    return [(int(x), int(y)) for y, x in zip(ys, xs)]


# =============================================================================
# Distance Transforms
# =============================================================================

def _distance_edt(boundary: np.ndarray) -> np.ndarray:
    """Exact Euclidean distance from every pixel to the nearest boundary pixel"""
    # distance_transform_edt measures distance to the nearest zero element
    return scipy_ndimage.distance_transform_edt(~boundary).astype(np.float64)


def _distance_brute(boundary: np.ndarray) -> np.ndarray:
    """
    Brute-force nearest boundary distance, O(W*H*B).

    Reference implementation; each chunk holds at most _BRUTE_PAIRS
    pixel-to-boundary pairs.
    """
    h, w = boundary.shape
    by, bx = np.nonzero(boundary)
    bx = bx.astype(np.float64)
    by = by.astype(np.float64)

    ys, xs = np.indices((h, w))
    xs = xs.ravel().astype(np.float64)
    ys = ys.ravel().astype(np.float64)

    chunk = max(1, _BRUTE_PAIRS // len(bx))

    min_sq = np.empty(h * w, dtype=np.float64)
    for start in range(0, h * w, chunk):
        stop = start + chunk
        dx = bx[None, :] - xs[start:stop, None]
        dy = by[None, :] - ys[start:stop, None]
        min_sq[start:stop] = np.min(dx * dx + dy * dy, axis=1)

    return np.sqrt(min_sq).reshape(h, w)


def build_sdf(
    inside: np.ndarray,
    boundary: Optional[np.ndarray] = None,
    method: str = 'edt'
) -> np.ndarray:
    """
    Build a signed distance field from a silhouette.

    Args:
        inside: Boolean silhouette mask (H, W)
        boundary: Precomputed boundary mask (computed if not provided)
        method: 'edt' (exact transform, fast) or 'brute' (reference)

    Returns:
        SDF array (H, W) float64 where:
        - Negative values = inside sprite
        - Positive values = outside sprite
        - Magnitude = distance to the nearest boundary pixel center,
          except on boundary pixels, which get BOUNDARY_DISTANCE

        A silhouette without any boundary (fully opaque or fully
        transparent) gets OUTSIDE_DISTANCE everywhere, signed by class.
    """
    inside = np.asarray(inside, dtype=bool)
    _check_mask(inside, "inside")

    if boundary is None:
        boundary = detect_boundary(inside)
    else:
        boundary = np.asarray(boundary, dtype=bool)
        if boundary.shape != inside.shape:
            raise ValueError(
                f"Boundary shape {boundary.shape} does not match silhouette shape {inside.shape}"
            )

    if method not in SDF_METHODS:
        raise ValueError(f"Unknown SDF method: {method} (expected one of {SDF_METHODS})")

    if not boundary.any():
        distance = np.full(inside.shape, OUTSIDE_DISTANCE, dtype=np.float64)
    elif method == 'edt':
        distance = _distance_edt(boundary)
    else:
        distance = _distance_brute(boundary)

    # -0.0 would read as outside
    distance[boundary] = BOUNDARY_DISTANCE

    return np.where(inside, -distance, distance)


def generate_sdf(
    sprite: np.ndarray,
    threshold: int = DEFAULT_ALPHA_THRESHOLD,
    method: str = 'edt'
) -> np.ndarray:
    """
    Generate a Signed Distance Field straight from sprite alpha.

    Args:
        sprite: RGBA image (H, W, 4) with values 0-255
        threshold: Alpha threshold for the silhouette (0-255)
        method: Distance transform method, see build_sdf
    """
    return build_sdf(extract_silhouette(sprite, threshold), method=method)

"""
Sprite Parser - Reads image files and builds morphable sprite assets
Supports: PNG, GIF, JPEG, BMP, WebP and raw RGBA buffers
"""

from PIL import Image
import numpy as np
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional, Tuple

from .palette import RGBA, DEFAULT_PALETTE_SIZE, rank_palette
from .sdf import (
    DEFAULT_ALPHA_THRESHOLD,
    build_sdf,
    detect_boundary,
    extract_silhouette,
)


def _frozen(arr: np.ndarray) -> np.ndarray:
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True, eq=False)
class SpriteAsset:
    """A sprite analysed for morphing: colors, signed distance field and palette"""
    width: int
    height: int
    colors: np.ndarray  # (H, W, 4) uint8
    sdf: np.ndarray  # (H, W) float64, negative inside
    inside: np.ndarray  # (H, W) bool
    palette: Tuple[RGBA, ...] = field(default_factory=tuple)
    name: str = "sprite"
    source_path: Optional[Path] = None

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Sprite has zero size: {self.width}x{self.height}")
        expected = (self.height, self.width)
        if self.colors.shape != expected + (4,):
            raise ValueError(f"colors shape {self.colors.shape} does not match {self.width}x{self.height}")
        if self.sdf.shape != expected:
            raise ValueError(f"sdf shape {self.sdf.shape} does not match {self.width}x{self.height}")
        if self.inside.shape != expected:
            raise ValueError(f"inside shape {self.inside.shape} does not match {self.width}x{self.height}")

    @classmethod
    def build(
        cls,
        pixels: np.ndarray,
        palette_size: int = DEFAULT_PALETTE_SIZE,
        alpha_threshold: int = DEFAULT_ALPHA_THRESHOLD,
        sdf_method: str = 'edt',
        name: str = "sprite",
        source_path: Optional[Path] = None
    ) -> 'SpriteAsset':
        """
        Analyse an RGBA image into a SpriteAsset.

        Args:
            pixels: RGBA image (H, W, 4) with values 0-255 (copied)
            palette_size: Number of dominant colors to keep
            alpha_threshold: Alpha above this counts as inside the silhouette
            sdf_method: 'edt' or 'brute', see build_sdf
        """
        pixels = np.asarray(pixels)
        if pixels.size and pixels.dtype != np.uint8:
            if not np.all(np.isfinite(pixels)) or pixels.min() < 0 or pixels.max() > 255:
                raise ValueError("Pixel channels must be finite values within 0-255")

        colors = np.array(pixels, dtype=np.uint8, copy=True)
        inside = extract_silhouette(colors, alpha_threshold)
        boundary = detect_boundary(inside)
        sdf = build_sdf(inside, boundary, method=sdf_method)
        palette = rank_palette(colors, inside, palette_size)

        return cls(
            width=colors.shape[1],
            height=colors.shape[0],
            colors=_frozen(colors),
            sdf=_frozen(sdf),
            inside=_frozen(inside),
            palette=palette,
            name=name,
            source_path=source_path
        )

    @property
    def size(self) -> Tuple[int, int]:
        """(width, height)"""
        return (self.width, self.height)

    @property
    def inside_count(self) -> int:
        return int(np.count_nonzero(self.inside))

    @property
    def boundary_count(self) -> int:
        return int(np.count_nonzero(detect_boundary(self.inside)))


class SpriteParser:
    """Parses images and pixel buffers into SpriteAsset objects"""

    SUPPORTED_FORMATS = {'.png', '.gif', '.jpg', '.jpeg', '.bmp', '.webp'}

    @classmethod
    def parse(
        cls,
        path: str | Path,
        palette_size: int = DEFAULT_PALETTE_SIZE,
        alpha_threshold: int = DEFAULT_ALPHA_THRESHOLD,
        sdf_method: str = 'edt'
    ) -> SpriteAsset:
        """Parse an image file into a SpriteAsset

        Args:
            path: Path to the image file
            palette_size: Palette cutoff N (default: 6)
            alpha_threshold: Silhouette alpha threshold (default: 20)
            sdf_method: Distance transform method (default: 'edt')
        """
        path = Path(path)

        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")

        suffix = path.suffix.lower()
        if suffix not in cls.SUPPORTED_FORMATS:
            raise ValueError(f"Unsupported format: {suffix}")

        pixels = cls._read_rgba(path)

        return SpriteAsset.build(
            pixels,
            palette_size=palette_size,
            alpha_threshold=alpha_threshold,
            sdf_method=sdf_method,
            name=path.stem,
            source_path=path
        )

    @classmethod
    def _read_rgba(cls, path: Path) -> np.ndarray:
        """Decode an image file to an (H, W, 4) uint8 array"""
        with Image.open(path) as img:
            if img.mode != 'RGBA':
                img = img.convert('RGBA')
            return np.array(img, dtype=np.uint8)

    @classmethod
    def from_array(cls, pixels: np.ndarray, name: str = "sprite", **options) -> SpriteAsset:
        """Create a SpriteAsset from a numpy array (HxWx3 gets opaque alpha)"""
        pixels = np.asarray(pixels)
        if pixels.ndim != 3 or pixels.shape[2] not in (3, 4):
            raise ValueError("Pixels must be HxWx3 or HxWx4 array")

        if pixels.shape[2] == 3:
            alpha = np.full((*pixels.shape[:2], 1), 255, dtype=pixels.dtype)
            pixels = np.concatenate([pixels, alpha], axis=2)

        return SpriteAsset.build(pixels, name=name, **options)

    @classmethod
    def from_buffer(
        cls,
        data: bytes,
        width: int,
        height: int,
        name: str = "sprite",
        **options
    ) -> SpriteAsset:
        """Create a SpriteAsset from a flat, row-major RGBA byte buffer"""
        if width <= 0 or height <= 0:
            raise ValueError(f"Invalid buffer geometry: {width}x{height}")

        expected = width * height * 4
        if len(data) != expected:
            raise ValueError(
                f"Buffer holds {len(data)} bytes, expected {expected} for {width}x{height} RGBA"
            )

        pixels = np.frombuffer(bytes(data), dtype=np.uint8).reshape(height, width, 4)
        return SpriteAsset.build(pixels, name=name, **options)

"""
Sprite Exporter - Exports morph frames to spritesheet strips, GIFs and PNGs
"""

from PIL import Image
import numpy as np
import json
from pathlib import Path
from typing import List, Sequence, Tuple


Frame = np.ndarray

GIF_TRANSPARENT = 255


def _check_frames(frames: Sequence[Frame]) -> Tuple[int, int]:
    """Common (height, width) of a frame list"""
    if not frames:
        raise ValueError("No frames to export")

    height, width = frames[0].shape[:2]
    for i, frame in enumerate(frames):
        if frame.ndim != 3 or frame.shape[2] != 4:
            raise ValueError(f"Frame {i} must be an HxWx4 array, got shape {frame.shape}")
        if frame.shape[:2] != (height, width):
            raise ValueError(
                f"Frame {i} is {frame.shape[1]}x{frame.shape[0]}, expected {width}x{height}"
            )
    return height, width


class SpriteExporter:
    """Exports morph frames to various formats"""

    @classmethod
    def to_png(cls, frame: Frame, path: str | Path) -> Path:
        """Export a single frame to PNG"""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        img = Image.fromarray(frame.astype(np.uint8), 'RGBA')
        img.save(path, 'PNG')

        return path

    @classmethod
    def build_strip(cls, frames: Sequence[Frame], padding: int = 0) -> np.ndarray:
        """Lay frames out left-to-right in a single row"""
        frame_height, frame_width = _check_frames(frames)

        sheet_width = len(frames) * (frame_width + padding) - padding
        sheet = np.zeros((frame_height, sheet_width, 4), dtype=np.uint8)

        for i, frame in enumerate(frames):
            x = i * (frame_width + padding)
            sheet[:, x:x + frame_width] = frame

        return sheet

    @classmethod
    def to_strip(
        cls,
        frames: Sequence[Frame],
        path: str | Path,
        padding: int = 0,
        fps: int = 20
    ) -> Tuple[Path, dict]:
        """Export frames to a one-row spritesheet PNG with JSON metadata"""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        sheet = cls.build_strip(frames, padding)
        frame_height, frame_width = frames[0].shape[:2]

        Image.fromarray(sheet, 'RGBA').save(path, 'PNG')

        metadata = {
            'frames': len(frames),
            'frame_width': frame_width,
            'frame_height': frame_height,
            'columns': len(frames),
            'rows': 1,
            'padding': padding,
            'fps': fps,
            'sheet_width': int(sheet.shape[1]),
            'sheet_height': int(sheet.shape[0])
        }

        meta_path = path.with_suffix('.json')
        with open(meta_path, 'w') as f:
            json.dump(metadata, f, indent=2)

        return path, metadata

    @staticmethod
    def _gif_frame(frame: Frame) -> Image.Image:
        """Palette image of one frame, mostly-transparent pixels on GIF_TRANSPARENT"""
        rgba = np.asarray(frame, dtype=np.uint8)
        clear = Image.fromarray(np.where(rgba[:, :, 3] < 128, 255, 0).astype(np.uint8))

        # 255 colors leaves the last index free
        img = Image.fromarray(np.ascontiguousarray(rgba[:, :, :3]))
        img = img.convert('P', palette=Image.Palette.ADAPTIVE, colors=255)
        img.paste(GIF_TRANSPARENT, clear)
        return img

    @classmethod
    def to_gif(
        cls,
        frames: Sequence[Frame],
        path: str | Path,
        fps: int = 20,
        loop: int = 0
    ) -> Path:
        """Export frames to an animated GIF"""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        _check_frames(frames)

        images = [cls._gif_frame(frame) for frame in frames]

        images[0].save(
            path,
            save_all=True,
            append_images=images[1:],
            duration=int(1000 / fps),
            loop=loop,
            transparency=GIF_TRANSPARENT,
            disposal=2
        )

        return path

    @classmethod
    def to_frames(
        cls,
        frames: Sequence[Frame],
        directory: str | Path,
        prefix: str = "frame"
    ) -> List[Path]:
        """Export frames as individual PNGs"""
        _check_frames(frames)

        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)

        paths = []
        for i, frame in enumerate(frames):
            frame_path = directory / f"{prefix}_{i:04d}.png"
            cls.to_png(frame, frame_path)
            paths.append(frame_path)

        return paths

from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path

import numpy as np
from numpy.testing import assert_array_equal
from PIL import Image

from sprite_morph import analyze, morph
from sprite_morph.core.exporter import SpriteExporter
from sprite_morph.core.morph import render_sequence
from sprite_morph.core.palette import RGBA
from sprite_morph.core.parser import SpriteAsset, SpriteParser
from sprite_morph.core.presets import MorphConfig
from sprite_morph.main import main


def write_sprite(path: Path, pixels: np.ndarray) -> Path:
    Image.fromarray(pixels, 'RGBA').save(path)
    return path


def sample_pixels() -> np.ndarray:
    pixels = np.zeros((4, 3, 4), dtype=np.uint8)
    pixels[1:, :] = (200, 40, 40, 255)
    pixels[3, 1] = (20, 20, 200, 255)
    return pixels


class SpriteAssetTests(unittest.TestCase):
    def test_build_bundles_analysis(self) -> None:
        asset = SpriteAsset.build(sample_pixels(), palette_size=1)
        self.assertEqual(asset.size, (3, 4))
        self.assertEqual(asset.colors.shape, (4, 3, 4))
        self.assertEqual(asset.sdf.shape, (4, 3))
        self.assertEqual(asset.palette, (RGBA(200, 40, 40, 255),))
        assert_array_equal(asset.sdf < 0, asset.inside)
        self.assertEqual(asset.inside_count, 9)

    def test_assets_are_read_only(self) -> None:
        pixels = sample_pixels()
        asset = SpriteAsset.build(pixels)

        pixels[:] = 0
        self.assertEqual(int(asset.colors[1, 0, 0]), 200)

        with self.assertRaises(ValueError):
            asset.colors[0, 0] = 1
        with self.assertRaises(ValueError):
            asset.sdf[0, 0] = 1.0
        with self.assertRaises(AttributeError):
            asset.width = 10

    def test_mismatched_grids_raise(self) -> None:
        with self.assertRaises(ValueError):
            SpriteAsset(
                width=3, height=4,
                colors=np.zeros((4, 3, 4), dtype=np.uint8),
                sdf=np.zeros((3, 4)),
                inside=np.zeros((4, 3), dtype=bool),
            )

    def test_zero_size_raises(self) -> None:
        with self.assertRaises(ValueError):
            SpriteAsset.build(np.zeros((0, 3, 4), dtype=np.uint8))

    def test_out_of_range_channels_raise(self) -> None:
        with self.assertRaises(ValueError):
            SpriteParser.from_array(np.full((1, 1, 4), 256, dtype=np.int64))
        with self.assertRaises(ValueError):
            SpriteAsset.build(np.full((1, 1, 4), -1, dtype=np.int16))

        pixels = np.full((1, 2, 4), 255.0)
        pixels[0, 1, 2] = np.nan
        with self.assertRaises(ValueError):
            SpriteAsset.build(pixels)

    def test_wide_dtypes_within_range_accepted(self) -> None:
        asset = SpriteParser.from_array(sample_pixels().astype(np.float64))
        assert_array_equal(asset.colors, sample_pixels())
        self.assertEqual(asset.colors.dtype, np.uint8)


class SpriteParserTests(unittest.TestCase):
    def test_parse_png(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = write_sprite(Path(td) / "blob.png", sample_pixels())
            asset = SpriteParser.parse(path)
            self.assertEqual(asset.name, "blob")
            self.assertEqual(asset.source_path, path)
            assert_array_equal(asset.colors, sample_pixels())

    def test_parse_converts_rgb(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "flat.png"
            Image.new('RGB', (2, 2), (10, 20, 30)).save(path)
            asset = SpriteParser.parse(path)
            self.assertEqual(asset.palette, (RGBA(10, 20, 30, 255),))

    def test_parse_errors(self) -> None:
        with self.assertRaises(FileNotFoundError):
            SpriteParser.parse("/nonexistent/sprite.png")
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "notes.txt"
            path.write_text("x", encoding="utf-8")
            with self.assertRaises(ValueError):
                SpriteParser.parse(path)

    def test_from_buffer(self) -> None:
        pixels = sample_pixels()
        asset = SpriteParser.from_buffer(pixels.tobytes(), 3, 4)
        assert_array_equal(asset.colors, pixels)

        with self.assertRaises(ValueError):
            SpriteParser.from_buffer(pixels.tobytes(), 4, 4)
        with self.assertRaises(ValueError):
            SpriteParser.from_buffer(b"", 0, 4)

    def test_from_array_adds_alpha(self) -> None:
        asset = SpriteParser.from_array(np.full((2, 2, 3), 7, dtype=np.uint8))
        self.assertTrue(asset.inside.all())
        self.assertEqual(asset.palette, (RGBA(7, 7, 7, 255),))


class ExporterTests(unittest.TestCase):
    def setUp(self) -> None:
        a = SpriteAsset.build(sample_pixels())
        b = SpriteAsset.build(np.full((2, 5, 4), (0, 90, 0, 255), dtype=np.uint8))
        self.frames = render_sequence(a, b, MorphConfig(frame_count=4))

    def test_strip_layout_and_metadata(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path, meta = SpriteExporter.to_strip(self.frames, Path(td) / "sheet.png")

            with Image.open(path) as img:
                self.assertEqual(img.size, (5 * 4, 4))
                sheet = np.array(img.convert('RGBA'))

            for i, frame in enumerate(self.frames):
                assert_array_equal(sheet[:, i * 5:(i + 1) * 5], frame)

            saved = json.loads(path.with_suffix('.json').read_text(encoding="utf-8"))
            self.assertEqual(saved, meta)
            self.assertEqual(meta['frames'], 4)
            self.assertEqual(meta['rows'], 1)

    def test_gif_and_frames(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            # Distinct frames so the GIF writer keeps all of them
            distinct = [np.full((3, 2, 4), (40 * i, 0, 0, 255), dtype=np.uint8) for i in range(4)]
            gif = SpriteExporter.to_gif(distinct, Path(td) / "morph.gif", fps=10)
            with Image.open(gif) as img:
                self.assertEqual(img.n_frames, 4)
                self.assertEqual(img.info["duration"], 100)

            paths = SpriteExporter.to_frames(self.frames, Path(td) / "frames")
            self.assertEqual([p.name for p in paths],
                             ["frame_0000.png", "frame_0001.png", "frame_0002.png", "frame_0003.png"])

    def test_gif_keeps_transparent_pixels(self) -> None:
        frame = np.zeros((2, 3, 4), dtype=np.uint8)
        frame[:, 1:] = (30, 160, 60, 255)
        frame[1, 2] = (30, 160, 60, 100)

        indices = np.array(SpriteExporter._gif_frame(frame))
        assert_array_equal(indices == 255, [[True, False, False], [True, False, True]])

        with tempfile.TemporaryDirectory() as td:
            gif = SpriteExporter.to_gif([frame, frame[::-1].copy()], Path(td) / "clear.gif")
            with Image.open(gif) as img:
                first = np.array(img.convert('RGBA'))

        assert_array_equal(first[:, :, 3], [[0, 255, 255], [0, 255, 0]])
        assert_array_equal(first[0, 1, :3], (30, 160, 60))

    def test_rejects_empty_or_mixed_frames(self) -> None:
        with self.assertRaises(ValueError):
            SpriteExporter.build_strip([])
        with self.assertRaises(ValueError):
            SpriteExporter.build_strip([np.zeros((2, 2, 4), np.uint8), np.zeros((3, 2, 4), np.uint8)])


class MorphApiTests(unittest.TestCase):
    def test_morph_and_analyze(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            src = write_sprite(Path(td) / "a.png", sample_pixels())
            dst = write_sprite(Path(td) / "b.png", np.full((2, 5, 4), (0, 90, 0, 255), dtype=np.uint8))

            out = morph(str(src), str(dst), config=MorphConfig(frame_count=5))
            self.assertEqual(out, Path(td) / "a_to_b.png")
            with Image.open(out) as img:
                self.assertEqual(img.size, (25, 4))

            info = analyze(str(src))
            self.assertEqual((info['width'], info['height']), (3, 4))
            self.assertEqual(info['palette'][0], (200, 40, 40, 255))

    def test_package_exports_only_its_api(self) -> None:
        import sprite_morph

        for name in sprite_morph.__all__:
            self.assertTrue(hasattr(sprite_morph, name), name)
        self.assertFalse(hasattr(sprite_morph, 'get_preset'))

    def test_unknown_format(self) -> None:
        with self.assertRaises(ValueError):
            morph("a.png", "b.png", format="webm")


class CliTests(unittest.TestCase):
    def test_cli_writes_strip(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            src = write_sprite(Path(td) / "a.png", sample_pixels())
            dst = write_sprite(Path(td) / "b.png", sample_pixels()[::-1].copy())
            out = Path(td) / "out.png"

            main([str(src), str(dst), "-o", str(out), "-f", "6", "--preset", "quick"])
            with Image.open(out) as img:
                self.assertEqual(img.size, (18, 4))
            self.assertEqual(json.loads(out.with_suffix(".json").read_text(encoding="utf-8"))["fps"], 16)

    def test_cli_missing_file_exits(self) -> None:
        with self.assertRaises(SystemExit) as ctx:
            main(["/nonexistent/a.png", "/nonexistent/b.png"])
        self.assertEqual(ctx.exception.code, 1)


if __name__ == "__main__":
    unittest.main()

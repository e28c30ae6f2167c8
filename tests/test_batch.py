"""Tests for the batch runner."""

import json
from pathlib import Path

from PIL import Image

from helpers import BLUE, RED, paint, save_png
from visual_parity.batch import BatchRunner, ImagePair, pairs_from_dirs
from visual_parity.models.pixel_buffer import PixelBuffer


def _dirs(tmp_path):
    reference_dir, actual_dir = tmp_path / "reference", tmp_path / "actual"
    reference_dir.mkdir()
    actual_dir.mkdir()
    return reference_dir, actual_dir


class TestPairsFromDirs:
    """Tests for pairs_from_dirs."""

    def test_pairs_same_names(self, tmp_path):
        reference_dir, actual_dir = _dirs(tmp_path)
        red = PixelBuffer.solid(8, 8, RED)
        for name in ("b.png", "a.png"):
            save_png(red, reference_dir / name)
            save_png(red, actual_dir / name)

        pairs = pairs_from_dirs(reference_dir, actual_dir)
        assert [p.name for p in pairs] == ["a", "b"]
        assert pairs[0].actual_path == actual_dir / "a.png"

    def test_skips_unmatched_and_non_images(self, tmp_path):
        reference_dir, actual_dir = _dirs(tmp_path)
        red = PixelBuffer.solid(8, 8, RED)
        save_png(red, reference_dir / "only_ref.png")
        save_png(red, reference_dir / "both.png")
        save_png(red, actual_dir / "both.png")
        (reference_dir / "notes.txt").write_text("hi")

        pairs = pairs_from_dirs(reference_dir, actual_dir)
        assert [p.name for p in pairs] == ["both"]


class TestBatchRunner:
    """Tests for BatchRunner."""

    def test_runs_all_pairs(self, tmp_path, parity_config):
        reference_dir, actual_dir = _dirs(tmp_path)
        red = PixelBuffer.solid(20, 20, RED)
        save_png(red, reference_dir / "same.png")
        save_png(red, actual_dir / "same.png")
        save_png(red, reference_dir / "changed.png")
        save_png(paint(red, 0, 0, 4, 4, BLUE), actual_dir / "changed.png")

        items = BatchRunner(parity_config).run(pairs_from_dirs(reference_dir, actual_dir))

        by_name = {item.name: item for item in items}
        assert set(by_name) == {"same", "changed"}
        assert all(item.error is None for item in items)
        assert by_name["same"].result.identical
        assert by_name["same"].heatmap_path is None
        assert by_name["changed"].result.pixel_difference_count == 16

        report = json.loads(Path(by_name["changed"].report_path).read_text())
        assert report["pixel_difference_count"] == 16
        assert report["heatmap_path"] == by_name["changed"].heatmap_path
        assert (tmp_path / "reports" / "changed_diff.png").exists()

    def test_heatmaps_can_be_disabled(self, tmp_path, parity_config):
        reference_dir, actual_dir = _dirs(tmp_path)
        red = PixelBuffer.solid(20, 20, RED)
        save_png(red, reference_dir / "changed.png")
        save_png(paint(red, 0, 0, 4, 4, BLUE), actual_dir / "changed.png")
        parity_config.write_heatmaps = False

        items = BatchRunner(parity_config).run(pairs_from_dirs(reference_dir, actual_dir))
        assert items[0].heatmap_path is None
        assert not (tmp_path / "reports" / "changed_diff.png").exists()

    def test_corrupt_image_becomes_error_item(self, tmp_path, parity_config):
        reference_dir, actual_dir = _dirs(tmp_path)
        save_png(PixelBuffer.solid(8, 8, RED), reference_dir / "broken.png")
        (actual_dir / "broken.png").write_bytes(b"not a png")

        items = BatchRunner(parity_config).run(pairs_from_dirs(reference_dir, actual_dir))

        assert len(items) == 1
        assert items[0].result is None
        assert items[0].error
        assert items[0].report_path is None

    def test_unwritable_report_dir_becomes_error_item(self, tmp_path, parity_config):
        reference_dir, actual_dir = _dirs(tmp_path)
        red = PixelBuffer.solid(8, 8, RED)
        for name in ("home", "about"):
            save_png(red, reference_dir / f"{name}.png")
            save_png(paint(red, 0, 0, 2, 2, BLUE), actual_dir / f"{name}.png")
        blocker = tmp_path / "not_a_dir"
        blocker.write_text("occupied")
        parity_config.report_output_dir = str(blocker)

        items = BatchRunner(parity_config).run(pairs_from_dirs(reference_dir, actual_dir))

        assert [item.name for item in items] == ["about", "home"]
        for item in items:
            assert item.error.startswith("Report write failed")
            assert item.report_path is None
            assert item.result.pixel_difference_count == 4

    def test_heatmap_dims_reference(self, tmp_path, parity_config):
        reference_dir, actual_dir = _dirs(tmp_path)
        red = PixelBuffer.solid(10, 10, RED)
        save_png(red, reference_dir / "page.png")
        save_png(paint(red, 0, 0, 2, 2, BLUE), actual_dir / "page.png")

        items = BatchRunner(parity_config).run(pairs_from_dirs(reference_dir, actual_dir))

        with Image.open(items[0].heatmap_path) as image:
            heatmap = image.convert("RGBA")
            assert heatmap.getpixel((0, 0)) == (255, 0, 0, 255)
            assert heatmap.getpixel((9, 9)) == (127, 0, 0, 255)

    def test_missing_file_becomes_error_item(self, tmp_path, parity_config):
        pair = ImagePair(name="ghost", reference_path=tmp_path / "a.png", actual_path=tmp_path / "b.png")
        items = BatchRunner(parity_config).run([pair])
        assert "not found" in items[0].error

    def test_preserves_input_order(self, tmp_path, parity_config):
        reference_dir, actual_dir = _dirs(tmp_path)
        red = PixelBuffer.solid(8, 8, RED)
        names = [f"page_{i}" for i in range(5)]
        for name in names:
            save_png(red, reference_dir / f"{name}.png")
            save_png(red, actual_dir / f"{name}.png")

        items = BatchRunner(parity_config).run(pairs_from_dirs(reference_dir, actual_dir))
        assert [item.name for item in items] == names

    def test_no_pairs(self, parity_config):
        assert BatchRunner(parity_config).run([]) == []

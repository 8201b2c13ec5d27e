"""
Unit tests for the PaddleOCR adapter.
The OCR engine is always replaced with a fake; no models are downloaded.
"""
from unittest.mock import Mock, patch

import numpy as np
import pytest
from PIL import Image

from models.config import OCRConfig
from services import ocr_adapter
from services.ocr_adapter import (
    ScreenshotOCR,
    lines_from_ocr_output,
    normalize_ocr_output,
    polygon_to_box,
)

TOP_POLY = [[10, 10], [90, 10], [90, 30], [10, 30]]
BOTTOM_POLY = [[110, 160], [190, 160], [190, 180], [110, 180]]


class FakeEngine3x:
    """Mimics PaddleOCR 3.x: predict() returns a list of mapping results."""

    def __init__(self, texts=("Top line", "Bottom line"), scores=(0.99, 0.95)):
        self.calls = []
        self.texts = list(texts)
        self.scores = list(scores)

    def predict(self, pixels):
        self.calls.append(pixels)
        return [{
            "rec_texts": self.texts,
            "rec_scores": np.array(self.scores),
            "rec_polys": [np.array(TOP_POLY), np.array(BOTTOM_POLY)][:len(self.texts)],
        }]


class FakeEngine2x:
    """Mimics PaddleOCR 2.x: ocr() returns [[poly, (text, score)], ...] per image."""

    def __init__(self, result=None):
        self.result = result

    def ocr(self, pixels, cls=False):
        return self.result


@pytest.mark.unit
class TestNormalizeOcrOutput:
    def test_empty_results(self):
        assert normalize_ocr_output(None) == []
        assert normalize_ocr_output([]) == []
        assert normalize_ocr_output([None]) == []

    def test_3x_mapping(self):
        raw = {"rec_texts": ["hi"], "rec_scores": [0.9], "rec_polys": [TOP_POLY]}
        records = normalize_ocr_output(raw)
        assert records == [(TOP_POLY, "hi", 0.9)]

    def test_3x_boxes_used_when_polys_missing(self):
        raw = [{"rec_texts": ["hi"], "rec_scores": [0.9], "rec_boxes": [[10, 10, 90, 30]]}]
        records = normalize_ocr_output(raw)
        assert records[0][0] == [10, 10, 90, 30]

    def test_2x_wrapped(self):
        raw = [[[TOP_POLY, ("hello", 0.88)], [BOTTOM_POLY, ("world", 0.77)]]]
        records = normalize_ocr_output(raw)
        assert [(r[1], r[2]) for r in records] == [("hello", 0.88), ("world", 0.77)]

    def test_2x_unwrapped(self):
        raw = [[TOP_POLY, ("hello", 0.88)]]
        assert normalize_ocr_output(raw)[0][1] == "hello"


@pytest.mark.unit
class TestPolygonToBox:
    def test_flips_vertical_axis(self):
        box = polygon_to_box(TOP_POLY, 200, 200)
        assert box.x == pytest.approx(0.05)
        assert box.width == pytest.approx(0.4)
        assert box.y == pytest.approx(0.85)
        assert box.height == pytest.approx(0.1)
        assert box.mid_y == pytest.approx(0.9)

    def test_four_value_box(self):
        box = polygon_to_box([10, 10, 90, 30], 200, 200)
        assert box.mid_x == pytest.approx(0.25)
        assert box.mid_y == pytest.approx(0.9)

    def test_invalid_input(self):
        assert polygon_to_box(None, 100, 100) is None
        assert polygon_to_box(TOP_POLY, 0, 100) is None
        assert polygon_to_box([1, 2, 3], 100, 100) is None


@pytest.mark.unit
def test_lines_from_ocr_output_orders_and_filters():
    raw = [[
        [BOTTOM_POLY, ("bottom", 0.9)],
        [TOP_POLY, ("top", 0.9)],
        [[[0, 100], [50, 100], [50, 110], [0, 110]], ("blurry", 0.2)],
        [[[0, 120], [50, 120], [50, 130], [0, 130]], ("   ", 0.99)],
    ]]
    lines = lines_from_ocr_output(raw, (200, 200), min_confidence=0.5)
    assert [ln.text for ln in lines] == ["top", "bottom"]
    assert lines[0].confidence == 0.9


@pytest.mark.unit
class TestScreenshotOCR:
    def setup_method(self):
        self.image = Image.new("RGB", (200, 200), color="white")

    def test_recognize_with_3x_engine(self):
        engine = FakeEngine3x()
        ocr = ScreenshotOCR(OCRConfig(confidence_threshold=0.5), engine=engine)
        lines = ocr.recognize(self.image)
        assert [ln.text for ln in lines] == ["Top line", "Bottom line"]
        pixels = engine.calls[0]
        assert isinstance(pixels, np.ndarray) and pixels.shape == (200, 200, 3)

    def test_channels_are_reversed_to_bgr(self):
        engine = FakeEngine3x()
        ocr = ScreenshotOCR(engine=engine)
        ocr.recognize(Image.new("RGB", (4, 4), color=(255, 0, 0)))
        assert tuple(engine.calls[0][0, 0]) == (0, 0, 255)

    def test_recognize_from_ndarray(self):
        engine = FakeEngine3x()
        pixels = np.zeros((200, 100, 3), dtype=np.uint8)
        lines = ScreenshotOCR(engine=engine).recognize(pixels)
        assert len(lines) == 2
        assert engine.calls[0].shape == (200, 100, 3)

    def test_recognize_with_2x_engine(self):
        engine = FakeEngine2x([[[TOP_POLY, ("legacy", 0.9)]]])
        lines = ScreenshotOCR(engine=engine).recognize(self.image)
        assert [ln.text for ln in lines] == ["legacy"]

    def test_recognize_from_file(self, tmp_path):
        path = tmp_path / "shot.png"
        self.image.save(path)
        lines = ScreenshotOCR(engine=FakeEngine3x()).recognize(str(path))
        assert len(lines) == 2

    def test_unreadable_file_yields_empty_batch(self, tmp_path):
        path = tmp_path / "broken.png"
        path.write_bytes(b"not an image")
        assert ScreenshotOCR(engine=FakeEngine3x()).recognize(str(path)) == []

    def test_blank_screenshot(self):
        lines = ScreenshotOCR(engine=FakeEngine2x([None])).recognize(self.image)
        assert lines == []

    def test_recognize_batches_keeps_order(self):
        ocr = ScreenshotOCR(engine=FakeEngine3x(texts=("only",), scores=(0.9,)))
        batches = ocr.recognize_batches([self.image, self.image])
        assert len(batches) == 2
        assert all(b[0].text == "only" for b in batches)

    def test_initialize_engine_uses_config(self):
        fake_cls = Mock(return_value=FakeEngine3x())
        with patch.object(ocr_adapter, "PaddleOCR", fake_cls):
            ocr = ScreenshotOCR(OCRConfig(language="ch", use_angle_cls=True))
            assert ocr.initialize_engine()
        fake_cls.assert_called_once_with(lang="ch", use_angle_cls=True)
        assert ocr.is_engine_ready()

    def test_initialize_engine_failure(self):
        fake_cls = Mock(side_effect=RuntimeError("no model"))
        with patch.object(ocr_adapter, "PaddleOCR", fake_cls):
            ocr = ScreenshotOCR()
            assert not ocr.initialize_engine()
            assert ocr.recognize(self.image) == []

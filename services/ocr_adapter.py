"""
Adapter between the PaddleOCR engine and the screenshot reconstructor.

PaddleOCR reports pixel polygons with the origin at the top-left corner.
The reconstructor expects normalized boxes with the origin at the
bottom-left and lines ordered top-to-bottom, so every result passes through
``lines_from_ocr_output`` before it reaches ``ScreenshotReconstructor``.
"""
import logging
import os
from typing import Any, List, Optional, Sequence, Tuple, Union

import numpy as np
from PIL import Image

from models.config import OCRConfig
from models.data_models import BoundingBox, RecognizedLine
from services.screenshot_parser import sort_top_to_bottom

# Resolved lazily in ScreenshotOCR.initialize_engine; tests may patch it
PaddleOCR = None

RawLine = Tuple[Any, str, float]


def _sequence(result: Any, key: str) -> list:
    # values may be numpy arrays, which refuse truth-testing
    value = result.get(key)
    return [] if value is None else list(value)


def _records_from_mapping(result: Any) -> List[RawLine]:
    texts = _sequence(result, "rec_texts")
    scores = _sequence(result, "rec_scores")
    polys = _sequence(result, "rec_polys") or _sequence(result, "rec_boxes")
    records: List[RawLine] = []
    for i, (text, score) in enumerate(zip(texts, scores)):
        poly = polys[i] if i < len(polys) else None
        records.append((poly, text, float(score)))
    return records


def normalize_ocr_output(raw: Any) -> List[RawLine]:
    """Flatten the result shapes of PaddleOCR 2.x and 3.x into (poly, text, score).

    Supported shapes:
      - mapping with ``rec_texts``/``rec_scores``/``rec_polys`` (3.x ``predict``)
      - list of such mappings
      - ``[[poly, (text, score)], ...]`` optionally wrapped in one more list
        (2.x ``ocr``)
    """
    if not raw:
        return []
    if hasattr(raw, "get") and not isinstance(raw, (list, tuple)):
        return _records_from_mapping(raw)

    records: List[RawLine] = []
    first = raw[0]
    if hasattr(first, "get") and not isinstance(first, (list, tuple)):
        for item in raw:
            records.extend(_records_from_mapping(item))
        return records

    # 2.x wraps the per-image line list in an outer list; None for blank images
    if _is_line_entry(first):
        entries = raw
    elif isinstance(first, (list, tuple)):
        entries = first
    else:
        return []

    for entry in entries:
        if _is_line_entry(entry):
            poly, (text, score) = entry[0], entry[1][:2]
            records.append((poly, str(text), float(score)))
    return records


def _is_line_entry(entry: Any) -> bool:
    return (
        isinstance(entry, (list, tuple))
        and len(entry) >= 2
        and isinstance(entry[1], (list, tuple))
        and len(entry[1]) >= 2
        and isinstance(entry[1][0], str)
    )


def polygon_to_box(poly: Any, image_width: int, image_height: int) -> Optional[BoundingBox]:
    """Convert a pixel polygon (or [x1, y1, x2, y2] box) to a normalized box."""
    if poly is None or image_width <= 0 or image_height <= 0:
        return None
    points = np.asarray(poly, dtype=float)
    if points.ndim == 1 and points.size == 4:
        points = points.reshape(2, 2)
    if points.ndim != 2 or points.shape[1] < 2 or points.shape[0] == 0:
        return None

    x_min, x_max = points[:, 0].min(), points[:, 0].max()
    y_min, y_max = points[:, 1].min(), points[:, 1].max()
    left = float(np.clip(x_min / image_width, 0.0, 1.0))
    right = float(np.clip(x_max / image_width, 0.0, 1.0))
    # flip vertically: pixel rows grow downwards, normalized y grows upwards
    bottom = float(np.clip(1.0 - y_max / image_height, 0.0, 1.0))
    top = float(np.clip(1.0 - y_min / image_height, 0.0, 1.0))
    return BoundingBox(x=left, y=bottom, width=right - left, height=top - bottom)


def lines_from_ocr_output(raw: Any, image_size: Tuple[int, int],
                          min_confidence: float = 0.0) -> List[RecognizedLine]:
    """Build the top-to-bottom RecognizedLine list for one screenshot."""
    width, height = image_size
    lines: List[RecognizedLine] = []
    for poly, text, score in normalize_ocr_output(raw):
        if not text or not text.strip() or score < min_confidence:
            continue
        box = polygon_to_box(poly, width, height)
        if box is None:
            continue
        lines.append(RecognizedLine(text=text, bounding_box=box, confidence=score))
    return sort_top_to_bottom(lines)


ImageSource = Union[str, os.PathLike, Image.Image, np.ndarray]


class ScreenshotOCR:
    """
    Runs PaddleOCR over screenshots and yields normalized line batches.
    """

    def __init__(self, config: Optional[OCRConfig] = None, engine: Any = None):
        self.config = config or OCRConfig()
        self.ocr_engine = engine
        self.logger = logging.getLogger(__name__)

    def is_engine_ready(self) -> bool:
        return self.ocr_engine is not None

    def initialize_engine(self) -> bool:
        """Create the PaddleOCR engine; returns False when it is unavailable."""
        if self.ocr_engine is not None:
            return True
        engine_cls = PaddleOCR
        if engine_cls is None:
            try:
                from paddleocr import PaddleOCR as engine_cls
            except ImportError as e:
                self.logger.error(f"PaddleOCR is not installed: {e}")
                return False
        try:
            self.ocr_engine = engine_cls(lang=self.config.language, use_angle_cls=self.config.use_angle_cls)
        except (TypeError, ValueError, RuntimeError) as e:
            self.logger.error(f"Failed to initialize PaddleOCR (lang={self.config.language}): {e}")
            return False
        self.logger.info(f"PaddleOCR ready (lang={self.config.language})")
        return True

    def _run_engine(self, pixels: np.ndarray) -> Any:
        # 3.x exposes predict(); 2.x only ocr()
        if hasattr(self.ocr_engine, "predict"):
            return self.ocr_engine.predict(pixels)
        return self.ocr_engine.ocr(pixels, cls=self.config.use_angle_cls)

    def recognize(self, source: ImageSource) -> List[RecognizedLine]:
        """Recognize one screenshot; failures yield an empty batch."""
        if not self.is_engine_ready() and not self.initialize_engine():
            return []
        try:
            if isinstance(source, Image.Image):
                image = source.convert("RGB")
            elif isinstance(source, np.ndarray):
                # RGB pixel rows, e.g. a frame decoded elsewhere
                image = Image.fromarray(source).convert("RGB")
            else:
                with Image.open(source) as opened:
                    image = opened.convert("RGB")
            # PaddleOCR expects BGR channel order for ndarray input
            pixels = np.asarray(image)[:, :, ::-1].copy()
            raw = self._run_engine(pixels)
        except (OSError, ValueError, RuntimeError) as e:
            self.logger.warning(f"OCR failed for {source!r}: {e}")
            return []

        lines = lines_from_ocr_output(raw, image.size, self.config.confidence_threshold)
        self.logger.debug(f"OCR recognized {len(lines)} lines")
        return lines

    def recognize_batches(self, sources: Sequence[ImageSource]) -> List[List[RecognizedLine]]:
        """Recognize screenshots, keeping the caller's (newest-first) order."""
        return [self.recognize(src) for src in sources]

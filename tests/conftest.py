"""
Pytest configuration and shared fixtures for the reconstruction tests.
"""
import logging
import os
import sys
from datetime import datetime

import pytest

# Ensure project root is on sys.path so tests can import local packages
ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

from models.config import AppConfig, StorageConfig  # noqa: E402
from models.data_models import BoundingBox, RecognizedLine  # noqa: E402

FIXED_NOW = datetime(2025, 3, 21, 14, 0, 0)


@pytest.fixture(autouse=True)
def setup_logging():
    """Setup logging for tests."""
    logging.basicConfig(
        level=logging.DEBUG,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def fixed_clock(fixed_now):
    """Clock returning the same instant on every call."""
    return lambda: fixed_now


@pytest.fixture
def make_line():
    """Factory for recognized lines positioned by their center point."""
    def _make(text, mid_x=0.5, mid_y=0.5):
        return RecognizedLine(text=text, bounding_box=BoundingBox.centered_at(mid_x, mid_y, 0.2, 0.02))
    return _make


@pytest.fixture
def app_config(tmp_path):
    """Default configuration with storage and logs redirected into tmp_path."""
    cfg = AppConfig(storage=StorageConfig(directory=str(tmp_path / "data")))
    cfg.logging.file = str(tmp_path / "logs" / "test.log")
    return cfg


@pytest.fixture
def sample_transcript():
    return "\n".join([
        "[03/21/25, 2:14 PM] Alice: Hey, are you free tonight?",
        "[03/21/25, 2:15\u202fPM] You: Sure, what time?",
        "this line is not part of the export format",
        "[03/21/25, 2:20 PM] Alice: How about 7:30 at Luigi's?",
        "[03/22/25, 9:05 AM] You: Running late!",
    ])

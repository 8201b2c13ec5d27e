"""
Simple progress reporter for CLI/console imports.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class ProgressState:
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    status: str = "idle"
    screenshots_total: int = 0
    screenshots_done: int = 0
    lines_recognized: int = 0
    empty_screenshots: int = 0


class ProgressReporter:
    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)
        self.state = ProgressState()

    def start(self, total: int) -> None:
        self.state = ProgressState(started_at=datetime.now(), status="running", screenshots_total=total)
        self.logger.info(f"Screenshot OCR started: {total} images")

    def update(self, lines: int, source: str = "") -> None:
        self.state.screenshots_done += 1
        self.state.lines_recognized += max(0, lines)
        if lines == 0:
            self.state.empty_screenshots += 1
            self.logger.warning(f"No text recognized in {source or 'screenshot'}")
        self.logger.info(
            f"[{self.state.screenshots_done}/{self.state.screenshots_total}] "
            f"{source}: {lines} lines"
        )

    def finish(self, success: bool = True) -> None:
        self.state.finished_at = datetime.now()
        self.state.status = "success" if success else "failed"
        duration = (self.state.finished_at - self.state.started_at).total_seconds() if self.state.started_at else 0.0
        self.logger.info(
            f"Screenshot OCR finished, status: {self.state.status}, took {duration:.2f}s, "
            f"lines: {self.state.lines_recognized}, empty screenshots: {self.state.empty_screenshots}"
        )

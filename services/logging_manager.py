"""
Logging manager to configure Python logging according to AppConfig.logging.
"""
import logging
from logging.handlers import RotatingFileHandler
from typing import Iterable, Optional
import os

from models.config import LoggingConfig, AppConfig

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# PaddleOCR and its model loader log every inference at INFO/DEBUG
NOISY_LOGGERS = ("ppocr", "paddle", "paddlex", "PIL")


class LoggingManager:
    def __init__(self):
        self._configured = False
        self._handlers: list = []

    def setup(self, cfg: AppConfig, level_override: Optional[str] = None,
              quiet_loggers: Iterable[str] = NOISY_LOGGERS) -> None:
        """Install console and rotating file handlers on the root logger.

        ``level_override`` (e.g. from a ``--log-level`` flag) wins over the
        configured level. Third-party loggers in ``quiet_loggers`` are capped
        at WARNING so OCR runs do not drown the import summary.
        """
        if self._configured:
            return

        log_cfg: LoggingConfig = cfg.logging
        level_name = (level_override or log_cfg.level).upper()
        level = getattr(logging, level_name, logging.INFO)

        root_logger = logging.getLogger()
        root_logger.setLevel(level)
        formatter = logging.Formatter(LOG_FORMAT)

        console = logging.StreamHandler()
        console.setLevel(level)
        console.setFormatter(formatter)
        handlers = [console]

        if log_cfg.file:
            log_dir = os.path.dirname(log_cfg.file)
            if log_dir:
                os.makedirs(log_dir, exist_ok=True)
            rotating = RotatingFileHandler(
                log_cfg.file,
                maxBytes=self.parse_size(log_cfg.max_size),
                backupCount=3,
                encoding="utf-8",
            )
            rotating.setLevel(level)
            rotating.setFormatter(formatter)
            handlers.append(rotating)

        root_logger.handlers.clear()
        for handler in handlers:
            root_logger.addHandler(handler)
        self._handlers = handlers

        for name in quiet_loggers:
            logging.getLogger(name).setLevel(max(level, logging.WARNING))

        self._configured = True

    def reset(self) -> None:
        """Detach and close the handlers installed by setup()."""
        root_logger = logging.getLogger()
        for handler in self._handlers:
            root_logger.removeHandler(handler)
            handler.close()
        self._handlers = []
        self._configured = False

    @staticmethod
    def parse_size(size_str: str) -> int:
        """Parse human-readable size (e.g., '10MB') into bytes."""
        s = size_str.strip().upper()
        units = {"KB": 1024, "MB": 1024 ** 2, "GB": 1024 ** 3}
        try:
            for suffix, factor in units.items():
                if s.endswith(suffix):
                    return int(float(s[:-2]) * factor)
            return int(s)
        except ValueError:
            return 10 * 1024 * 1024  # default 10MB

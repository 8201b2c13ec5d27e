import argparse
import logging
import sys
from typing import List, Optional

from controllers.import_controller import ImportController
from services.config_manager import ConfigManager
from services.logging_manager import LoggingManager
from services.ocr_adapter import ScreenshotOCR
from ui.progress import ProgressReporter


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Rebuild a conversation from chat screenshots")
    parser.add_argument("images", nargs="+", help="screenshot files, newest first")
    parser.add_argument("--label", help="contact label (default: detected from the screenshots)")
    parser.add_argument("--ocr-lang", help="override OCR language code (e.g. en, ch, japan)")
    parser.add_argument("--config", help="path to YAML/JSON configuration")
    parser.add_argument("--log-level", help="override configured log level")
    parser.add_argument("--no-progress", action="store_true", help="disable progress reporter")
    parser.add_argument("--dry-run", action="store_true", help="print reconstructed messages without saving")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Screenshot import CLI entry.

    Screenshots are given newest first, the order they are usually captured
    in. Each image is OCR'd, then the whole set is reconstructed into one
    chronological conversation and merged into the contact.
    """
    args = build_parser().parse_args(argv)

    app_cfg = ConfigManager(args.config).get_config()
    if args.ocr_lang:
        app_cfg.ocr.language = args.ocr_lang.strip()
    LoggingManager().setup(app_cfg, level_override=args.log_level)
    logger = logging.getLogger(__name__)

    ocr = ScreenshotOCR(app_cfg.ocr)
    if not ocr.initialize_engine():
        logger.error("OCR engine unavailable, nothing imported.")
        return 1

    reporter = None if args.no_progress else ProgressReporter(logging.getLogger("progress"))
    if reporter:
        reporter.start(len(args.images))
    batches = []
    for path in args.images:
        lines = ocr.recognize(path)
        batches.append(lines)
        if reporter:
            reporter.update(len(lines), path)
    if reporter:
        reporter.finish(success=any(batches))

    controller = ImportController(app_cfg, ocr=ocr)
    if args.dry_run:
        result = controller.reconstruct(batches)
        logger.info(f"Dry-run: contact {result.contact_name!r}, {len(result.messages)} messages, nothing saved.")
        for m in result.messages:
            print(f"{m.sender}: {m.body}")
        return 0

    contact = controller.import_screenshot_batches(batches, args.label)
    logger.info(f"Contact '{contact.label}' now has {len(contact.messages)} messages")
    return 0


if __name__ == "__main__":
    sys.exit(main())

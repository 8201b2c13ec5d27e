import argparse
import logging
import sys
from datetime import datetime
from typing import List, Optional

from controllers.import_controller import ImportController
from services.config_manager import ConfigManager
from services.contact_store import ContactStore
from services.logging_manager import LoggingManager
from services.transcript_parser import TranscriptParser


def iso_datetime(value: str) -> datetime:
    """argparse type for --start/--end; a typo must abort before anything is merged."""
    try:
        return datetime.fromisoformat(value.strip())
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an ISO datetime: {value!r} (e.g. 2025-03-01T09:30)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Import a bracketed conversation export into a contact")
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--file", help="transcript file to import (default: stdin)")
    source.add_argument("--pending", action="store_true", help="import the pending share hand-off instead of --file")
    parser.add_argument("--stash", action="store_true",
                        help="store the transcript as the pending share hand-off instead of importing it")
    parser.add_argument("--label", default="", help="contact label to merge into")
    parser.add_argument("--handle", help="phone number or handle stored on a new contact")
    parser.add_argument("--start", type=iso_datetime, help="ISO datetime lower bound, e.g. 2025-03-01T00:00")
    parser.add_argument("--end", type=iso_datetime, help="ISO datetime upper bound, e.g. 2025-03-31T23:59")
    parser.add_argument("--config", help="path to YAML/JSON configuration")
    parser.add_argument("--log-level", help="override configured log level")
    parser.add_argument("--dry-run", action="store_true", help="parse and report without saving")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Transcript import CLI entry.

    - reads the export from --file, stdin, or the pending share hand-off;
    - --stash only queues the text for a later --pending run;
    - --start/--end narrow the imported messages to a timeframe;
    - --dry-run only reports what would be imported.
    """
    args = build_parser().parse_args(argv)

    app_cfg = ConfigManager(args.config).get_config()
    LoggingManager().setup(app_cfg, level_override=args.log_level)
    logger = logging.getLogger(__name__)

    if args.stash:
        if args.pending or args.dry_run:
            logger.error("--stash cannot be combined with --pending or --dry-run")
            return 2
        if not ContactStore(app_cfg.storage).save_import(_read_text(args.file)):
            return 1
        logger.info("Transcript queued for the next --pending import")
        return 0

    if args.dry_run:
        if args.pending:
            logger.error("--dry-run cannot be combined with --pending (the hand-off is consumed on read)")
            return 2
        messages = TranscriptParser().parse(_read_text(args.file), start=args.start, end=args.end)
        logger.info(f"Dry-run: parsed {len(messages)} messages, nothing saved.")
        for m in messages:
            print(f"{m.timestamp.isoformat()}  {m.sender}: {m.body}")
        return 0

    controller = ImportController(app_cfg)
    if args.pending:
        contact = controller.process_pending_import(args.label, args.handle)
        if contact is None:
            logger.info("No pending import found.")
            return 0
    else:
        contact = controller.import_transcript(_read_text(args.file), args.label, args.handle, args.start, args.end)

    logger.info(f"Contact '{contact.label}' now has {len(contact.messages)} messages")
    return 0


def _read_text(path: Optional[str]) -> str:
    if not path:
        return sys.stdin.read()
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


if __name__ == "__main__":
    sys.exit(main())

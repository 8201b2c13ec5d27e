import argparse
import logging
import sys
from typing import List, Optional

from cli.import_transcript import iso_datetime
from services.config_manager import ConfigManager
from services.contact_merge import find_contact
from services.contact_store import ContactStore
from services.logging_manager import LoggingManager
from services.message_filters import MessageQuery
from services.transcript_parser import format_transcript


def main(argv: Optional[List[str]] = None) -> int:
    """Write a stored contact's history back out in the bracketed export format."""
    parser = argparse.ArgumentParser(description="Export a contact's messages as a transcript")
    parser.add_argument("label", help="contact label")
    parser.add_argument("--output", help="output file (default: stdout)")
    parser.add_argument("--sender", help="only messages whose sender contains this text")
    parser.add_argument("--contains", help="only messages whose body contains this text")
    parser.add_argument("--start", type=iso_datetime, help="ISO datetime lower bound")
    parser.add_argument("--end", type=iso_datetime, help="ISO datetime upper bound")
    parser.add_argument("--config", help="path to YAML/JSON configuration")
    parser.add_argument("--log-level", help="override configured log level")
    args = parser.parse_args(argv)

    app_cfg = ConfigManager(args.config).get_config()
    LoggingManager().setup(app_cfg, level_override=args.log_level)
    logger = logging.getLogger(__name__)

    contact = find_contact(ContactStore(app_cfg.storage).load(), args.label)
    if contact is None:
        logger.error(f"No contact labelled '{args.label}'")
        return 1

    query = MessageQuery(sender=args.sender, start=args.start, end=args.end, contains=args.contains)
    messages = query.apply(contact.messages)
    text = format_transcript(messages)
    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(text + "\n")
        logger.info(f"Exported {len(messages)} messages to {args.output}")
    else:
        print(text)
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""
Parser for plain-text conversation exports.

Recognizes one message per line in the bracketed export format::

    [03/21/25, 2:14 PM] Alice: Hey, are you free tonight?
    [03/21/25, 2:15 PM] You: Sure, what time?

Lines that do not match, or whose timestamp cannot be parsed, are dropped.
Multi-line bodies are not supported.
"""
from datetime import datetime
import logging
import re
from typing import Iterable, List, Optional

from models.data_models import Message
from services.message_filters import MessageQuery, sort_chronologically

LINE_PATTERN = re.compile(r"^\[(.+?),\s*(.+?)\]\s*(.+?):\s*(.+)$")
# h:mm followed by an AM/PM marker; parsed by hand so the result never
# depends on the process locale
TIME_PATTERN = re.compile(r"^(\d{1,2}:\d{2})\s?([AP]M)$", re.IGNORECASE)
NARROW_NO_BREAK_SPACE = "\u202f"


def parse_export_timestamp(date_text: str, time_text: str) -> Optional[datetime]:
    """Parse ``MM/dd/yy`` plus ``h:mm a`` into a naive datetime, or None."""
    combined = f"{date_text}, {time_text}".replace(NARROW_NO_BREAK_SPACE, " ")
    date_part, _, time_part = combined.partition(", ")
    match = TIME_PATTERN.match(time_part.strip())
    if not match:
        return None
    clock, marker = match.groups()
    try:
        parsed = datetime.strptime(f"{date_part.strip()} {clock}", "%m/%d/%y %I:%M")
    except ValueError:
        return None
    hour = parsed.hour % 12
    if marker.upper() == "PM":
        hour += 12
    return parsed.replace(hour=hour)


class TranscriptParser:
    """Converts exported transcript text into chronologically sorted messages."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def parse(self, text: str, start: Optional[datetime] = None,
              end: Optional[datetime] = None) -> List[Message]:
        """Parse the raw export into messages.

        Args:
            text: The entire contents of the exported conversation.
            start: Messages earlier than this are dropped.
            end: Messages later than this are dropped.

        Returns:
            List[Message]: messages sorted ascending by timestamp; ties keep
            the order in which they appeared in the text.
        """
        messages: List[Message] = []
        dropped = 0
        for line in text.splitlines():
            match = LINE_PATTERN.match(line)
            if not match:
                if line.strip():
                    dropped += 1
                continue
            date_text, time_text, sender, body = match.groups()
            timestamp = parse_export_timestamp(date_text, time_text)
            if timestamp is None:
                self.logger.debug(f"Unparseable timestamp, line dropped: {date_text!r}, {time_text!r}")
                dropped += 1
                continue
            if not body.strip():
                dropped += 1
                continue
            messages.append(Message(timestamp=timestamp, sender=sender, body=body))

        if dropped:
            self.logger.debug(f"Transcript lines dropped: {dropped}")

        messages = MessageQuery(start=start, end=end).apply(messages)
        return sort_chronologically(messages)


def format_transcript_line(message: Message) -> str:
    """Render a message in the bracketed export format (minute precision)."""
    ts = message.timestamp
    hour = ts.hour % 12 or 12
    marker = "AM" if ts.hour < 12 else "PM"
    return f"[{ts:%m/%d/%y}, {hour}:{ts:%M} {marker}] {message.sender}: {message.body}"


def format_transcript(messages: Iterable[Message]) -> str:
    return "\n".join(format_transcript_line(m) for m in messages)

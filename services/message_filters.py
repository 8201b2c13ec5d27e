"""
Selection of stored or freshly parsed messages.

A ``MessageQuery`` is built once from CLI flags or import bounds and then
applied to any message list; every criterion left as None matches all.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional

from models.data_models import Message


@dataclass(frozen=True)
class MessageQuery:
    """Conjunction of optional criteria over Message fields.

    ``sender`` and ``contains`` are case-insensitive substrings of the
    sender label and the body. ``start``/``end`` are inclusive bounds.
    """
    sender: Optional[str] = None
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    contains: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not (self.sender or self.contains) and self.start is None and self.end is None

    def in_timeframe(self, timestamp: datetime) -> bool:
        if self.start is not None and timestamp < self.start:
            return False
        return self.end is None or timestamp <= self.end

    def matches(self, message: Message) -> bool:
        if not self.in_timeframe(message.timestamp):
            return False
        if self.sender and self.sender.lower() not in message.sender.lower():
            return False
        return not self.contains or self.contains.lower() in message.body.lower()

    def apply(self, messages: Iterable[Message]) -> List[Message]:
        """Matching messages in their original order."""
        if self.is_empty:
            return list(messages)
        return [m for m in messages if self.matches(m)]


def sort_chronologically(messages: Iterable[Message]) -> List[Message]:
    """Stable ascending sort by timestamp; ties keep their relative order."""
    return sorted(messages, key=lambda m: m.timestamp)

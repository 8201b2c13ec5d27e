"""
Static vocabulary and patterns for recognizing screenshot UI chrome.

Status-bar labels, keyboard hints, delivery receipts, timestamps, avatar
initials and location lines show up in OCR output but are never part of
the conversation itself.
"""
from dataclasses import dataclass, field
import re
from typing import FrozenSet, Iterable, Optional, Pattern, Tuple


DEFAULT_NOISE_WORDS: FrozenSet[str] = frozenset({
    "delivered", "imessage", "i message", "read", "sms", "return", "space", "search", "send",
    "back", "forward", "delete", "copy", "more", "reply", "i'm", "i’m",
    "123", "456", "789", "abc", "emoji", "camera", "microphone", "app", "messages",
    # keyboard suggestion bar
    "the", "i",
})

# "4:06", "4:06 PM", "4:06PM"
CLOCK_PATTERN = r"^[0-9]{1,2}:[0-9]{2}(?:\s?[AP]M)?$"
# "4:06 P" when OCR drops the trailing M
CLOCK_TRUNCATED_PATTERN = r"^[0-9]{1,2}:[0-9]{2}\s?[A-Z]$"
CLOCK_BARE_PATTERN = r"^[0-9]{1,2}:[0-9]{2}$"

# "Florida City, FL" or "Miami, FL 33101"
LOCATION_PATTERN = r"^[A-Za-z .]+,\s*[A-Za-z]{2}(?:\s+\d{5})?$"

REACTION_PREFIXES: Tuple[str, ...] = ("liked", "loved", "reacted")

NAME_FORBIDDEN_CHARS: FrozenSet[str] = frozenset(",!?@#$%^&*()+={}[]|\\/;:'")

PHONE_CHARS: FrozenSet[str] = frozenset("0123456789+()-. ")


def _compile(pattern: str) -> Pattern:
    return re.compile(pattern, re.IGNORECASE)


@dataclass(frozen=True)
class NoiseLexicon:
    """Immutable lookup tables shared by the contact detector and line scanner."""
    words: FrozenSet[str] = DEFAULT_NOISE_WORDS
    timestamp_patterns: Tuple[Pattern, ...] = field(default_factory=lambda: (
        _compile(CLOCK_PATTERN),
        _compile(CLOCK_TRUNCATED_PATTERN),
        _compile(CLOCK_BARE_PATTERN),
    ))
    location_pattern: Pattern = field(default_factory=lambda: _compile(LOCATION_PATTERN))

    @classmethod
    def build(cls, extra_words: Optional[Iterable[str]] = None) -> "NoiseLexicon":
        """Create a lexicon with caller-supplied words merged into the defaults."""
        extra = {w.strip().lower() for w in (extra_words or []) if w and w.strip()}
        return cls(words=DEFAULT_NOISE_WORDS | frozenset(extra))

    def is_noise_word(self, text: str) -> bool:
        return text.lower() in self.words

    def is_timestamp(self, text: str) -> bool:
        return any(p.match(text) for p in self.timestamp_patterns)

    def is_location(self, text: str) -> bool:
        return self.location_pattern.match(text) is not None

    @staticmethod
    def is_avatar_initials(text: str) -> bool:
        """One or two characters, at least one letter, no whitespace."""
        return (
            len(text) <= 2
            and any(c.isalpha() for c in text)
            and not any(c.isspace() for c in text)
        )

    @staticmethod
    def is_reaction(body: str) -> bool:
        return body.lower().startswith(REACTION_PREFIXES)

    @staticmethod
    def has_name_forbidden_chars(text: str) -> bool:
        return any(c in NAME_FORBIDDEN_CHARS for c in text)

    @staticmethod
    def is_phone_shaped(text: str, min_digits: int) -> bool:
        return all(c in PHONE_CHARS for c in text) and sum(c.isdigit() for c in text) >= min_digits

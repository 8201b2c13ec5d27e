"""
Reconstruct conversations from OCR'd chat screenshots.

The OCR collaborator hands over, per screenshot, the recognized text lines
with normalized bounding boxes. Nothing in that output says who wrote what,
where one bubble ends, or who the conversation is with, so this module
infers all three:

- the contact name is the first short, centered, name-like line of the
  reference screenshot (a phone number is used when no name shows up);
- sender attribution comes from bubble placement: right-aligned bubbles are
  the user's own messages, left-aligned ones belong to the other party;
  ``Name: text`` lines carry an explicit sender and take precedence;
- consecutive lines on the same side are joined into one message.

OCR carries no real timestamps, so messages get a synthetic clock that only
guarantees relative order.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta
import logging
from typing import Callable, List, Optional, Sequence

from models.config import ReconstructionConfig
from models.data_models import Message, RecognizedLine, ReconstructionResult
from services.noise_lexicon import NoiseLexicon

Clock = Callable[[], datetime]


def sort_top_to_bottom(lines: Sequence[RecognizedLine]) -> List[RecognizedLine]:
    """Order lines by descending vertical center (origin is bottom-left)."""
    return sorted(lines, key=lambda ln: -ln.bounding_box.mid_y)


def _has_letter(text: str) -> bool:
    return any(c.isalpha() for c in text)


def _has_digit(text: str) -> bool:
    return any(c.isdigit() for c in text)


def _word_count(text: str) -> int:
    return len([w for w in text.replace("\t", " ").split(" ") if w])


class ContactNameDetector:
    """Picks the contact label out of a screenshot's header area."""

    def __init__(self, config: Optional[ReconstructionConfig] = None,
                 lexicon: Optional[NoiseLexicon] = None):
        self.config = config or ReconstructionConfig()
        self.lexicon = lexicon or NoiseLexicon.build(self.config.extra_noise_words)

    def normalize(self, text: str) -> str:
        """Strip '>' disclosure arrows and collapse whitespace runs."""
        return " ".join(text.replace(">", "").split())

    def detect(self, lines: Sequence[RecognizedLine]) -> Optional[str]:
        """Return the first name-like candidate, else a phone-shaped one, else None."""
        cfg = self.config
        numeric_candidate: Optional[str] = None

        for line in lines:
            candidate = line.text.strip()
            if not candidate:
                continue
            mid_x = line.bounding_box.mid_x
            if mid_x < cfg.contact_min_mid_x or mid_x > cfg.contact_max_mid_x:
                continue
            if self.lexicon.is_noise_word(candidate):
                continue
            if self.lexicon.is_avatar_initials(candidate):
                continue

            cleaned = self.normalize(candidate)
            if not cleaned:
                continue
            if self.lexicon.is_timestamp(cleaned):
                continue
            if _word_count(cleaned) > cfg.contact_max_words or len(cleaned) > cfg.contact_max_chars:
                continue
            if self.lexicon.has_name_forbidden_chars(cleaned) or ":" in cleaned:
                continue

            if _has_letter(cleaned):
                return cleaned
            if numeric_candidate is None and self.lexicon.is_phone_shaped(cleaned, cfg.phone_min_digits):
                numeric_candidate = cleaned

        return numeric_candidate


@dataclass(frozen=True)
class Accumulation:
    """The message currently being assembled from consecutive lines."""
    orientation: str
    body: str
    sender: Optional[str] = None


class LineAccumulator:
    """State machine assembling messages line by line within one screenshot.

    States are ``Idle`` (``current is None``) and ``Accumulating``. Finalized
    messages are stamped from the shared synthetic clock and collected in
    ``messages``.
    """

    def __init__(self, config: ReconstructionConfig, lexicon: NoiseLexicon,
                 start_time: datetime):
        self.config = config
        self.lexicon = lexicon
        self.time = start_time
        self.step = timedelta(seconds=config.synthetic_step_seconds)
        self.current: Optional[Accumulation] = None
        self.messages: List[Message] = []
        self.logger = logging.getLogger(__name__)

    @property
    def is_idle(self) -> bool:
        return self.current is None

    def orientation_of(self, line: RecognizedLine) -> str:
        if line.bounding_box.mid_x > self.config.orientation_split_x:
            return self.config.self_label
        return self.config.other_label

    def should_skip(self, text: str, line_index: int) -> bool:
        """UI chrome and cut-off lines that never contribute to a message."""
        lex = self.lexicon
        if lex.is_location(text) or lex.is_noise_word(text) or lex.is_timestamp(text):
            return True
        if lex.is_avatar_initials(text) or ">" in text:
            return True
        # Screenshots often cut a line in half at the very top
        if (self.is_idle and line_index < self.config.truncated_top_lines
                and _word_count(text) > self.config.truncated_min_words):
            return True
        return False

    def feed(self, line: RecognizedLine, line_index: int) -> None:
        text = line.text.strip()
        if not text or self.should_skip(text, line_index):
            return

        orientation = self.orientation_of(line)
        if ":" in text:
            self._feed_delimited(text, orientation)
        else:
            self._feed_plain(text, orientation)

    def _feed_delimited(self, text: str, orientation: str) -> None:
        sender_part, _, body_part = text.partition(":")
        sender_part = sender_part.strip()
        body_part = body_part.strip()

        # "4:06" style artifacts that slipped past the timestamp patterns
        if _has_digit(sender_part) and _has_digit(body_part):
            self.logger.debug(f"Numeric delimited line discarded: {text!r}")
            return
        if self.lexicon.is_reaction(body_part):
            self.logger.debug(f"Reaction notification discarded: {text!r}")
            return

        self.finalize()
        if body_part:
            self.current = Accumulation(
                orientation=orientation,
                body=body_part,
                sender=sender_part or orientation,
            )

    def _feed_plain(self, text: str, orientation: str) -> None:
        if len(text) <= self.config.short_token_max_chars and not _has_letter(text):
            return

        if self.current is None:
            self.current = Accumulation(orientation=orientation, body=text, sender=orientation)
        elif self.current.orientation == orientation:
            self.current = Accumulation(
                orientation=orientation,
                body=f"{self.current.body} {text}",
                sender=self.current.sender,
            )
        else:
            self.finalize()
            self.current = Accumulation(orientation=orientation, body=text, sender=orientation)

    def finalize(self) -> None:
        """Emit the open accumulation, if any, and advance the clock."""
        if self.current is None:
            return
        acc = self.current
        sender = acc.sender or acc.orientation or self.config.other_label
        self.messages.append(Message(timestamp=self.time, sender=sender, body=acc.body))
        self.time += self.step
        self.current = None


class ScreenshotReconstructor:
    """Turns per-screenshot OCR line batches into an ordered conversation."""

    def __init__(self, config: Optional[ReconstructionConfig] = None,
                 clock: Clock = datetime.now):
        self.config = config or ReconstructionConfig()
        self.clock = clock
        self.lexicon = NoiseLexicon.build(self.config.extra_noise_words)
        self.detector = ContactNameDetector(self.config, self.lexicon)
        self.logger = logging.getLogger(__name__)

    def reconstruct(self, batches: Sequence[Sequence[RecognizedLine]]) -> ReconstructionResult:
        """Rebuild the conversation.

        Args:
            batches: one list of recognized lines per screenshot, ordered from
                newest screenshot to oldest.

        Returns:
            ReconstructionResult: messages in chronological order and the
            detected contact name (None when nothing name-like was found).
        """
        step = timedelta(seconds=self.config.synthetic_step_seconds)
        start_time = self.clock() - step * len(batches)
        accumulator = LineAccumulator(self.config, self.lexicon, start_time)
        contact_name: Optional[str] = None

        for index, batch in enumerate(reversed(batches)):
            lines = sort_top_to_bottom(batch)
            if index == 0 and contact_name is None:
                contact_name = self.detector.detect(lines)
                self.logger.debug(f"Detected contact name: {contact_name!r}")

            produced = len(accumulator.messages)
            for line_index, line in enumerate(lines):
                accumulator.feed(line, line_index)
            accumulator.finalize()
            self.logger.debug(
                f"Screenshot {index + 1}/{len(batches)}: {len(lines)} lines, "
                f"{len(accumulator.messages) - produced} messages"
            )

        self.logger.info(f"Reconstructed {len(accumulator.messages)} messages from {len(batches)} screenshots")
        return ReconstructionResult(messages=accumulator.messages, contact_name=contact_name)

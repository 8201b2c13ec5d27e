"""
Tests for the bracketed transcript parser and formatter.
"""
from datetime import datetime

import pytest

from models.data_models import Message
from services.transcript_parser import (
    TranscriptParser,
    format_transcript,
    format_transcript_line,
    parse_export_timestamp,
)


@pytest.mark.unit
class TestTranscriptParser:
    def setup_method(self):
        self.parser = TranscriptParser()

    def test_empty_input(self):
        assert self.parser.parse("") == []

    def test_parses_well_formed_lines(self, sample_transcript):
        messages = self.parser.parse(sample_transcript)
        assert [m.sender for m in messages] == ["Alice", "You", "Alice", "You"]
        assert messages[0].timestamp == datetime(2025, 3, 21, 14, 14)
        assert messages[0].body == "Hey, are you free tonight?"
        assert messages[3].timestamp == datetime(2025, 3, 22, 9, 5)

    def test_body_keeps_later_colons(self, sample_transcript):
        messages = self.parser.parse(sample_transcript)
        assert messages[2].body == "How about 7:30 at Luigi's?"

    def test_malformed_lines_are_dropped(self):
        text = "\n".join([
            "no brackets here",
            "[03/21/25, 2:14 PM] missing the colon",
            "[13/45/25, 2:14 PM] Alice: impossible date",
            "[03/21/25, 25:99 PM] Alice: impossible time",
            "[03/21/25, 2:14 PM] Alice: kept",
        ])
        messages = self.parser.parse(text)
        assert len(messages) == 1
        assert messages[0].body == "kept"

    def test_narrow_no_break_space_before_marker(self):
        messages = self.parser.parse("[03/21/25, 2:14\u202fPM] Alice: hello")
        assert len(messages) == 1
        assert messages[0].timestamp == datetime(2025, 3, 21, 14, 14)

    def test_midnight_and_noon(self):
        assert parse_export_timestamp("01/02/25", "12:05 AM") == datetime(2025, 1, 2, 0, 5)
        assert parse_export_timestamp("01/02/25", "12:05 PM") == datetime(2025, 1, 2, 12, 5)
        assert parse_export_timestamp("01/02/25", "12:05") is None

    def test_output_sorted_and_stable(self):
        text = "\n".join([
            "[03/21/25, 3:00 PM] Bob: later",
            "[03/21/25, 2:00 PM] Alice: first tie",
            "[03/21/25, 2:00 PM] Bob: second tie",
        ])
        messages = self.parser.parse(text)
        assert [m.body for m in messages] == ["first tie", "second tie", "later"]

    def test_timeframe_bounds_are_inclusive(self):
        text = "\n".join([
            "[03/20/25, 9:00 AM] A: before",
            "[03/21/25, 9:00 AM] A: at start",
            "[03/21/25, 6:00 PM] A: at end",
            "[03/22/25, 9:00 AM] A: after",
        ])
        messages = self.parser.parse(
            text,
            start=datetime(2025, 3, 21, 9, 0),
            end=datetime(2025, 3, 21, 18, 0),
        )
        assert [m.body for m in messages] == ["at start", "at end"]


@pytest.mark.unit
def test_format_transcript_line():
    msg = Message(timestamp=datetime(2025, 3, 21, 14, 5), sender="Alice", body="hi there")
    assert format_transcript_line(msg) == "[03/21/25, 2:05 PM] Alice: hi there"
    early = Message(timestamp=datetime(2025, 3, 21, 0, 30), sender="You", body="late night")
    assert format_transcript_line(early) == "[03/21/25, 12:30 AM] You: late night"


@pytest.mark.unit
def test_formatted_transcript_parses_back(sample_transcript):
    parser = TranscriptParser()
    original = parser.parse(sample_transcript)
    again = parser.parse(format_transcript(original))
    assert [(m.timestamp, m.sender, m.body) for m in again] == \
        [(m.timestamp, m.sender, m.body) for m in original]

import pytest

from models.config import ReconstructionConfig
from services.screenshot_parser import ContactNameDetector


@pytest.mark.unit
class TestContactNameDetector:
    def setup_method(self):
        self.detector = ContactNameDetector()

    def test_no_lines(self):
        assert self.detector.detect([]) is None

    def test_clock_is_never_a_name(self, make_line):
        assert self.detector.detect([make_line("4:06 PM", mid_x=0.5)]) is None

    def test_name_preferred_over_number(self, make_line):
        lines = [
            make_line("555-123-4567", mid_x=0.5, mid_y=0.95),
            make_line("Alex Johnson", mid_x=0.5, mid_y=0.9),
        ]
        assert self.detector.detect(lines) == "Alex Johnson"

    def test_phone_number_fallback(self, make_line):
        lines = [
            make_line("555-123-4567", mid_x=0.5, mid_y=0.95),
            make_line("how was your day today", mid_x=0.5, mid_y=0.8),
        ]
        assert self.detector.detect(lines) == "555-123-4567"

    def test_short_digit_runs_are_not_phone_numbers(self, make_line):
        assert self.detector.detect([make_line("1234", mid_x=0.5)]) is None

    def test_off_center_lines_are_ignored(self, make_line):
        lines = [
            make_line("Left Side", mid_x=0.1),
            make_line("Right Side", mid_x=0.9),
        ]
        assert self.detector.detect(lines) is None

    def test_ui_words_and_initials_are_ignored(self, make_line):
        lines = [
            make_line("Messages", mid_x=0.5, mid_y=0.99),
            make_line("AJ", mid_x=0.5, mid_y=0.97),
            make_line("Alex", mid_x=0.5, mid_y=0.95),
        ]
        assert self.detector.detect(lines) == "Alex"

    def test_disclosure_arrow_is_stripped(self, make_line):
        lines = [make_line("Alex  Johnson >", mid_x=0.5)]
        assert self.detector.detect(lines) == "Alex Johnson"

    def test_long_or_punctuated_lines_are_rejected(self, make_line):
        lines = [
            make_line("see you at the park", mid_x=0.5, mid_y=0.95),
            make_line("Wait, what?", mid_x=0.5, mid_y=0.9),
            make_line("Alex: hi", mid_x=0.5, mid_y=0.85),
        ]
        assert self.detector.detect(lines) is None

    def test_bounds_follow_config(self, make_line):
        detector = ContactNameDetector(ReconstructionConfig(contact_min_mid_x=0.0, contact_max_mid_x=1.0))
        assert detector.detect([make_line("Left Side", mid_x=0.1)]) == "Left Side"

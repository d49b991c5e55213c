"""
Tests for key normalization and HTML break stripping.
"""

import pytest

from rsvp_sheets.normalize import normalize_key, strip_html_breaks


class TestNormalizeKey:
    """Tests for normalize_key."""

    def test_guest_count_label(self):
        """Parentheses are dropped, spaces become underscores."""
        assert normalize_key("Number of Guest(s)") == "number_of_guests"

    def test_lowercases(self):
        """Test uppercase input is lowered."""
        assert normalize_key("NAME") == "name"

    def test_space_runs_collapse(self):
        """Test several consecutive spaces become one underscore."""
        assert normalize_key("Can   Attend") == "can_attend"

    def test_surrounding_spaces(self):
        """Leading/trailing spaces turn into underscores, not removed."""
        assert normalize_key(" Name ") == "_name_"

    def test_tabs_and_carriage_returns_removed(self):
        """Test non-space whitespace is dropped, not converted."""
        assert normalize_key("Email\r") == "email"
        assert normalize_key("E\tmail") == "email"

    def test_punctuation_removed(self):
        """Test punctuation outside [a-z0-9_] is removed."""
        assert normalize_key("E-mail!") == "email"

    def test_digits_and_underscores_kept(self):
        """Test digits and underscores survive."""
        assert normalize_key("Guest_2") == "guest_2"

    def test_non_ascii_removed(self):
        """Test accented characters are dropped."""
        assert normalize_key("Événements") == "vnements"

    def test_empty_string(self):
        """Test empty string handling."""
        assert normalize_key("") == ""

    @pytest.mark.parametrize("raw", [
        "Number of Guest(s)",
        "  Can  Attend  ",
        "E-mail Address",
        "",
        "ÀÉÎ õü",
        "already_normal",
    ])
    def test_idempotent(self, raw):
        """Normalizing twice gives the same result as once."""
        once = normalize_key(raw)
        assert normalize_key(once) == once


class TestStripHtmlBreaks:
    """Tests for strip_html_breaks."""

    def test_removes_breaks(self):
        """Test every literal <br /> is removed."""
        body = "Name: John<br />\nEmail: j@example.com<br />\n"
        assert strip_html_breaks(body) == "Name: John\nEmail: j@example.com\n"

    def test_no_breaks_is_noop(self):
        """Test body without breaks is unchanged."""
        assert strip_html_breaks("Name: John") == "Name: John"

    def test_other_break_forms_untouched(self):
        """Only the exact "<br />" form is removed; this is not a regex."""
        assert strip_html_breaks("a<br>b<br/>c") == "a<br>b<br/>c"

    def test_empty_string(self):
        """Test empty string handling."""
        assert strip_html_breaks("") == ""

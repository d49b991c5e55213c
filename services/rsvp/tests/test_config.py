"""Tests for environment-driven settings."""

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from rsvp_sheets.config import (
    DEFAULT_LABEL,
    Settings,
    parse_bool,
    parse_cutoff,
    parse_max_threads,
    runs_dir_from_env,
)


class TestParseCutoff:
    """Test cutoff timestamp parsing."""

    def test_naive_is_local_and_aware(self):
        """Naive timestamps keep their wall clock and gain the local zone."""
        cutoff = parse_cutoff("2015-08-22T00:00:00")
        assert cutoff.tzinfo is not None
        assert cutoff.replace(tzinfo=None) == datetime(2015, 8, 22, 0, 0, 0)

    def test_explicit_offset_kept(self):
        """Test an explicit offset is preserved."""
        cutoff = parse_cutoff("2015-08-22T00:00:00-04:00")
        assert cutoff.utcoffset() == timedelta(hours=-4)

    def test_date_only(self):
        """Test a bare date means midnight."""
        assert parse_cutoff("2015-08-22").replace(tzinfo=None) == datetime(2015, 8, 22)

    def test_invalid(self):
        """Test garbage is rejected."""
        with pytest.raises(ValueError, match="cutoff"):
            parse_cutoff("August 22nd")


class TestParseBool:
    """Test boolean env values."""

    @pytest.mark.parametrize("value", ["1", "true", "TRUE", "yes", "on", " True "])
    def test_true(self, value):
        assert parse_bool(value) is True

    @pytest.mark.parametrize("value", ["0", "false", "No", "off"])
    def test_false(self, value):
        assert parse_bool(value) is False

    def test_invalid(self):
        with pytest.raises(ValueError):
            parse_bool("maybe")


class TestParseMaxThreads:
    """Test the thread cap."""

    def test_integer(self):
        assert parse_max_threads("2") == 2

    def test_negative_rejected(self):
        with pytest.raises(ValueError, match=">= 0"):
            parse_max_threads("-1")

    def test_non_integer_rejected(self):
        with pytest.raises(ValueError, match="integer"):
            parse_max_threads("two")


class TestSettingsFromEnv:
    """Test Settings.from_env."""

    def test_defaults(self):
        """Test only the spreadsheet id is required."""
        settings = Settings.from_env({"RSVP_SPREADSHEET_ID": "abc"})

        assert settings.spreadsheet_id == "abc"
        assert settings.label == DEFAULT_LABEL
        assert settings.cutoff.replace(tzinfo=None) == datetime(2015, 8, 22)
        assert settings.max_threads == 0
        assert settings.logging_enabled is True
        assert settings.runs_dir == settings.config_dir / "runs"

    def test_all_values(self, tmp_path: Path):
        """Test every variable is honored."""
        settings = Settings.from_env({
            "RSVP_SPREADSHEET_ID": "abc",
            "RSVP_LABEL": "RSVPs 2016",
            "RSVP_CUTOFF": "2016-01-01T12:00:00+00:00",
            "RSVP_MAX_THREADS": "5",
            "RSVP_LOGGING_ENABLED": "false",
            "RSVP_CONFIG_DIR": str(tmp_path),
            "RSVP_RUNS_DIR": str(tmp_path / "logs"),
        })

        assert settings.label == "RSVPs 2016"
        assert settings.cutoff == datetime(2016, 1, 1, 12, tzinfo=timezone.utc)
        assert settings.max_threads == 5
        assert settings.logging_enabled is False
        assert settings.config_dir == tmp_path
        assert settings.runs_dir == tmp_path / "logs"

    def test_runs_dir_follows_config_dir(self, tmp_path: Path):
        """Test the runs dir defaults to a subdirectory of the config dir."""
        settings = Settings.from_env({
            "RSVP_SPREADSHEET_ID": "abc",
            "RSVP_CONFIG_DIR": str(tmp_path),
        })
        assert settings.runs_dir == tmp_path / "runs"

    def test_runs_dir_without_spreadsheet_id(self, tmp_path: Path):
        """Test the runs dir resolves on its own, for commands that never sync."""
        assert runs_dir_from_env({"RSVP_CONFIG_DIR": str(tmp_path)}) == tmp_path / "runs"
        assert runs_dir_from_env({"RSVP_RUNS_DIR": str(tmp_path)}) == tmp_path

    def test_missing_spreadsheet_id(self):
        """Test the spreadsheet id is required."""
        with pytest.raises(ValueError, match="RSVP_SPREADSHEET_ID"):
            Settings.from_env({})

    def test_blank_spreadsheet_id(self):
        """Test a whitespace-only id counts as missing."""
        with pytest.raises(ValueError, match="RSVP_SPREADSHEET_ID"):
            Settings.from_env({"RSVP_SPREADSHEET_ID": "  "})

    def test_bad_value_propagates(self):
        """Test malformed values raise instead of falling back."""
        with pytest.raises(ValueError):
            Settings.from_env({"RSVP_SPREADSHEET_ID": "abc", "RSVP_MAX_THREADS": "lots"})

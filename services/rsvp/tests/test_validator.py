"""Tests for RSVP record schema validation."""

import pytest

from rsvp_sheets.models import RsvpRecord
from rsvp_sheets.validator import (
    CONTRACTS_DIR,
    ValidationError,
    load_schema,
    validate_record,
)


def _valid() -> dict:
    return RsvpRecord(
        date="9/1/2015 10:5:3",
        name="John Doe & Jane Doe",
        email="jdoe123@gmail.com",
        number_of_guests="1",
        events="",
        can_attend="No",
    ).to_dict()


class TestLoadSchema:
    """Test schema loading."""

    def test_schema_ships_with_package(self):
        assert (CONTRACTS_DIR / "rsvp_record.schema.json").exists()

    def test_load_is_cached(self):
        assert load_schema("rsvp_record") is load_schema("rsvp_record")

    def test_missing_schema(self):
        with pytest.raises(FileNotFoundError):
            load_schema("does_not_exist")


class TestValidateRecord:
    """Test record validation."""

    def test_valid_record(self):
        validate_record(_valid())

    def test_empty_fields_allowed(self):
        """Only date must be filled in; every other field may be empty."""
        record = RsvpRecord(date="12/31/2015 0:0:0").to_dict()
        validate_record(record)

    def test_missing_field(self):
        data = _valid()
        del data["can_attend"]
        with pytest.raises(ValidationError):
            validate_record(data)

    def test_extra_field_rejected(self):
        data = _valid()
        data["dietary_needs"] = "none"
        with pytest.raises(ValidationError):
            validate_record(data)

    def test_bad_date(self):
        data = _valid()
        data["date"] = "2015-09-01"
        with pytest.raises(ValidationError):
            validate_record(data)

    def test_non_string_value(self):
        data = _valid()
        data["number_of_guests"] = 1
        with pytest.raises(ValidationError):
            validate_record(data)

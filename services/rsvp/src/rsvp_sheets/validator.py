"""JSON Schema validator for RSVP records.

Validates records against schemas in the contracts/ directory.
Every record is validated before it is appended to the sheet.

Usage:
    from rsvp_sheets.validator import validate_record

    try:
        validate_record(record.to_dict())
    except ValidationError as e:
        print(f"Invalid record: {e.message}")
"""

import json
from pathlib import Path
from typing import Any

from jsonschema import Draft202012Validator, ValidationError, validate

# Schemas ship inside the package: rsvp_sheets/contracts/
CONTRACTS_DIR = Path(__file__).parent / "contracts"

# Cache loaded schemas to avoid repeated file reads
_schema_cache: dict[str, dict[str, Any]] = {}


def load_schema(name: str) -> dict[str, Any]:
    """Load a JSON Schema from the contracts directory.

    Args:
        name: Schema name without .schema.json suffix
              (e.g., "rsvp_record" loads "rsvp_record.schema.json")

    Returns:
        Parsed JSON Schema as dict

    Raises:
        FileNotFoundError: If schema file doesn't exist
        json.JSONDecodeError: If schema file is invalid JSON
    """
    if name in _schema_cache:
        return _schema_cache[name]

    schema_path = CONTRACTS_DIR / f"{name}.schema.json"
    schema = json.loads(schema_path.read_text(encoding="utf-8"))
    _schema_cache[name] = schema
    return schema


def validate_record(data: dict[str, Any]) -> None:
    """Validate an RSVP record against the schema.

    Args:
        data: Record fields (RsvpRecord.to_dict())

    Raises:
        ValidationError: If data doesn't match schema
    """
    schema = load_schema("rsvp_record")
    validate(data, schema, cls=Draft202012Validator)


# Re-export ValidationError for convenience
__all__ = [
    "load_schema",
    "validate_record",
    "ValidationError",
]

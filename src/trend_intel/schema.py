"""JSON schema check for the decoded trend analysis response."""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict

from jsonschema import Draft202012Validator

SCHEMA_FILE = Path(__file__).resolve().parent / "schemas" / "analysis_schema.json"


def load_schema() -> Dict[str, Any]:
    return json.loads(SCHEMA_FILE.read_text(encoding="utf-8"))


@lru_cache(maxsize=1)
def analysis_validator() -> Draft202012Validator:
    schema = load_schema()
    Draft202012Validator.check_schema(schema)
    return Draft202012Validator(schema)


def validate_analysis_payload(payload: Any) -> Dict[str, Any]:
    """Return the payload unchanged, or raise ValueError naming each bad field."""
    errors = sorted(analysis_validator().iter_errors(payload), key=lambda e: e.json_path)
    if errors:
        details = "; ".join(f"{err.json_path}: {err.message}" for err in errors)
        raise ValueError(f"Malformed analysis response: {details}")
    return payload

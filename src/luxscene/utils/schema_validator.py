"""Lightweight helpers for validating scene descriptions against schemas."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from jsonschema import Draft7Validator

SCHEMA_DIR = Path(__file__).resolve().parents[1] / "schemas"


def load_schema(schema_path: str | Path) -> dict[str, Any]:
    path = Path(schema_path)
    return json.loads(path.read_text(encoding="utf-8"))


def validate_payload(payload: dict[str, Any], schema_path: str | Path) -> dict[str, Any]:
    """Validate a payload against the provided JSON schema."""

    schema = load_schema(schema_path)
    validator = Draft7Validator(schema)
    errors = sorted(validator.iter_errors(payload), key=lambda e: [str(p) for p in e.path])

    return {
        "valid": len(errors) == 0,
        "errors": [f"{'/'.join([str(p) for p in error.path])}: {error.message}" for error in errors],
    }


def validate_description(payload: dict[str, Any]) -> dict[str, Any]:
    """Validate a declarative scene description using the packaged schema."""

    return validate_payload(payload, SCHEMA_DIR / "scene_description_schema.json")

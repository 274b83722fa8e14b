from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List

import jsonschema

_SCHEMA_PATH = Path(__file__).resolve().parent / "data" / "form_template.schema.json"


@lru_cache(maxsize=1)
def load_template_schema() -> Dict[str, Any]:
    if not _SCHEMA_PATH.exists():
        raise FileNotFoundError(f"Template schema not found at {_SCHEMA_PATH}")
    return json.loads(_SCHEMA_PATH.read_text(encoding="utf-8"))


@lru_cache(maxsize=1)
def _validator() -> jsonschema.Validator:
    schema = load_template_schema()
    jsonschema.Draft202012Validator.check_schema(schema)
    return jsonschema.Draft202012Validator(schema)


def schema_version() -> str:
    return str(load_template_schema().get("schemaVersion") or "")


def _format_path(path: Any) -> str:
    parts = [str(p) for p in path]
    return "/".join(parts) if parts else "<root>"


def validate_template_payload(payload: Any) -> List[str]:
    """
    Check a persisted template payload against the JSON contract.

    Returns human-readable violations (`"fields/0/required: 'yes' is not of type 'boolean'"`),
    ordered by location; an empty list means the payload conforms.
    """
    errors = sorted(_validator().iter_errors(payload), key=lambda e: [str(p) for p in e.absolute_path])
    return [f"{_format_path(e.absolute_path)}: {e.message}" for e in errors]


__all__ = ["load_template_schema", "schema_version", "validate_template_payload"]

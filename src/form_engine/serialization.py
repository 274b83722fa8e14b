from __future__ import annotations

import json
import re
from typing import Any, Dict, Union

from pydantic import ValidationError as PydanticValidationError

from form_engine.contract import validate_template_payload
from form_engine.errors import TemplateFormatError
from form_engine.schemas.template import FormTemplate

_WHITESPACE_RE = re.compile(r"\s+")


def template_to_dict(template: FormTemplate) -> Dict[str, Any]:
    """The persisted shape: camelCase field keys, unset optionals omitted."""
    return template.model_dump(mode="json", by_alias=True, exclude_none=True)


def template_to_json(template: FormTemplate, *, indent: int = 2) -> str:
    return json.dumps(template_to_dict(template), ensure_ascii=False, indent=indent)


def template_from_dict(payload: Dict[str, Any], *, strict: bool = False) -> FormTemplate:
    """
    Build a `FormTemplate` from its persisted shape.

    With `strict=True` the payload must also satisfy the JSON contract
    (`data/form_template.schema.json`); otherwise only model parsing applies.
    """
    if not isinstance(payload, dict):
        raise TemplateFormatError(f"Template payload must be an object, got {type(payload).__name__}")
    if strict:
        violations = validate_template_payload(payload)
        if violations:
            raise TemplateFormatError("Template payload does not match the template contract", violations)
    try:
        return FormTemplate.model_validate(payload)
    except PydanticValidationError as e:
        violations = [f"{'/'.join(str(p) for p in err.get('loc') or ())}: {err.get('msg')}" for err in e.errors()]
        raise TemplateFormatError("Invalid template payload", violations) from e


def template_from_json(text: Union[str, bytes], *, strict: bool = False) -> FormTemplate:
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        raise TemplateFormatError(f"Template is not valid JSON: {e}") from e
    return template_from_dict(payload, strict=strict)


def export_filename(template: FormTemplate) -> str:
    return f"{_WHITESPACE_RE.sub('_', template.name)}_template.json"


__all__ = ["export_filename", "template_from_dict", "template_from_json", "template_to_dict", "template_to_json"]

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional, Union

from form_engine.catalog import is_layout_type
from form_engine.config import EngineSettings
from form_engine.schema_generator import generate
from form_engine.schemas.submission import SubmissionResult
from form_engine.schemas.template import FormTemplate, coerce_template
from form_engine.visibility import is_visible

logger = logging.getLogger("form_engine.submission")


def _log_submission(template: FormTemplate, result: SubmissionResult) -> None:
    # Values are user data and never logged.
    record = {
        "template_id": template.id,
        "ok": result.ok,
        "errors": len(result.errors),
        "error_fields": sorted(result.errors.keys()),
        "hidden": len(result.hidden_field_ids),
    }
    try:
        logger.info(json.dumps(record, ensure_ascii=False, separators=(",", ":")))
    except (TypeError, ValueError):
        logger.info("submit template=%s ok=%s errors=%d", template.id, result.ok, len(result.errors))


def submit(
    template: Union[FormTemplate, Dict[str, Any]],
    form_values: Optional[Dict[str, Any]],
    *,
    settings: Optional[EngineSettings] = None,
) -> SubmissionResult:
    """
    Validate a filled-in form against its template.

    - Visibility is computed from `form_values` first; hidden fields are not
      validated, but a value already stored for one is passed through verbatim.
    - Visible, non-layout fields are validated all at once; every failing field
      is reported.
    - On success `data` maps field id to the coerced value. On failure only
      `errors` is returned.

    The template is never modified.
    """
    tpl = coerce_template(template)
    values = dict(form_values or {})
    validator = generate(tpl, settings=settings)

    ids = set(tpl.field_ids())
    visible: List[str] = []
    hidden: List[str] = []
    for f in tpl.fields:
        if is_layout_type(f.type):
            continue
        if is_visible(f, values, ids):
            visible.append(f.id)
        else:
            hidden.append(f.id)

    data, errors = validator.validate(values, only=visible)
    if errors:
        result = SubmissionResult(ok=False, errors=errors, hidden_field_ids=hidden)
        _log_submission(tpl, result)
        return result

    out: Dict[str, Any] = {}
    for f in tpl.fields:
        if f.id in data:
            out[f.id] = data[f.id]
        elif f.id in hidden and f.id in values:
            out[f.id] = values[f.id]
    result = SubmissionResult(ok=True, data=out, hidden_field_ids=hidden)
    _log_submission(tpl, result)
    return result


def validate_values(
    template: Union[FormTemplate, Dict[str, Any]],
    form_values: Optional[Dict[str, Any]],
    *,
    settings: Optional[EngineSettings] = None,
) -> Dict[str, str]:
    return submit(template, form_values, settings=settings).errors


def initial_values(template: Union[FormTemplate, Dict[str, Any]]) -> Dict[str, Any]:
    """
    Starting values for a fresh form: declared defaults, plus the controlled
    inputs' empty states (unchecked checkbox/toggle, empty checkbox group).
    """
    tpl = coerce_template(template)
    out: Dict[str, Any] = {}
    for f in tpl.fields:
        if is_layout_type(f.type):
            continue
        if f.default_value is not None:
            out[f.id] = list(f.default_value) if isinstance(f.default_value, list) else f.default_value
        elif f.type in {"checkbox", "toggle"}:
            out[f.id] = False
        elif f.type == "checkboxGroup":
            out[f.id] = []
    return out


__all__ = ["initial_values", "submit", "validate_values"]

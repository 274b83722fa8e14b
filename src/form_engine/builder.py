"""
Builder mutations over a form template.

Every operation takes the template plus explicit ids/indexes and returns a new
`FormTemplate`; the input is never modified. Invalid calls (unknown field id,
index out of range, unknown width/type) raise a `BuilderError` before anything
is built, so a caller either gets a complete new template or keeps the old one.
"""

from __future__ import annotations

import json
import logging
import random
import string
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import ValidationError as PydanticValidationError

from form_engine.catalog import default_options, field_type_label, is_known_type, is_options_type
from form_engine.config import EngineSettings, load_settings
from form_engine.errors import FieldNotFoundError, InvalidMutationError
from form_engine.layout import WIDTH_UNITS
from form_engine.schemas.template import (
    FieldDefinition,
    FieldLayout,
    FieldPatch,
    FormTemplate,
    TemplateSettings,
)

logger = logging.getLogger("form_engine.builder")

_ID_ALPHABET = string.digits + string.ascii_lowercase


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _random_suffix(length: int = 9) -> str:
    return "".join(random.choice(_ID_ALPHABET) for _ in range(length))


def generate_field_id() -> str:
    return f"field_{int(time.time() * 1000)}_{_random_suffix()}"


def generate_template_id() -> str:
    return f"template_{int(time.time() * 1000)}_{_random_suffix()}"


def _log(op: str, template: FormTemplate, **extra: Any) -> None:
    record: Dict[str, Any] = {"op": op, "template_id": template.id, "fields": len(template.fields)}
    record.update(extra)
    try:
        logger.info(json.dumps(record, ensure_ascii=False, separators=(",", ":")))
    except (TypeError, ValueError):
        logger.info("%s template=%s", op, template.id)


def _renumbered(fields: List[FieldDefinition]) -> List[FieldDefinition]:
    out: List[FieldDefinition] = []
    for i, f in enumerate(fields):
        if f.layout.order == i:
            out.append(f)
        else:
            out.append(f.model_copy(update={"layout": f.layout.model_copy(update={"order": i})}))
    return out


def _commit(template: FormTemplate, fields: List[FieldDefinition]) -> FormTemplate:
    return template.model_copy(update={"fields": _renumbered(fields), "updated_at": _now_iso()})


def _index_or_raise(template: FormTemplate, field_id: str) -> int:
    idx = template.index_of(field_id)
    if idx < 0:
        raise FieldNotFoundError(field_id, template.id)
    return idx


def _check_width(width: Any) -> str:
    w = str(width or "")
    if w not in WIDTH_UNITS:
        raise InvalidMutationError(f"Unknown field width {width!r}; expected one of {sorted(WIDTH_UNITS)}")
    return w


def _normalized_options(field_type: str, options: Optional[List[str]], count: int) -> Optional[List[str]]:
    if not is_options_type(field_type):
        return None
    if options:
        return list(options)
    return default_options(count)


def add_field(
    template: FormTemplate,
    field_type: str,
    *,
    settings: Optional[EngineSettings] = None,
) -> Tuple[FormTemplate, FieldDefinition]:
    if not is_known_type(field_type):
        raise InvalidMutationError(f"Unknown field type {field_type!r}")
    s = settings or load_settings()
    field = FieldDefinition(
        id=generate_field_id(),
        type=field_type,
        label=f"New {field_type_label(field_type)}",
        required=False,
        placeholder="",
        description="",
        options=_normalized_options(field_type, None, s.default_option_count),
        layout=FieldLayout(width="full", order=len(template.fields)),
    )
    out = _commit(template, [*template.fields, field])
    _log("add_field", out, field_id=field.id, type=field_type)
    return out, out.fields[-1]


def edit_field(
    template: FormTemplate,
    field_id: str,
    patch: Union[FieldPatch, Dict[str, Any]],
    *,
    settings: Optional[EngineSettings] = None,
) -> FormTemplate:
    """
    Replace the mutable attributes present in `patch`.

    The field id and position are kept. Leaving an option-bearing type drops
    `options`; entering one (or keeping one with an empty list) seeds defaults.
    """
    idx = _index_or_raise(template, field_id)
    if isinstance(patch, FieldPatch):
        p = patch
    else:
        try:
            p = FieldPatch.model_validate(patch)
        except PydanticValidationError as e:
            raise InvalidMutationError(f"Invalid patch for field {field_id!r}: {e.errors()[0].get('msg')}") from e
    changes = p.model_dump(exclude_unset=True)
    s = settings or load_settings()

    current = template.fields[idx]
    data = current.model_dump()
    width = changes.pop("width", None)
    if "type" in changes:
        if changes["type"] is None or not is_known_type(changes["type"]):
            raise InvalidMutationError(f"Unknown field type {changes['type']!r}")
    if width is not None:
        data["layout"] = {**data["layout"], "width": _check_width(width)}
    data.update(changes)
    data["id"] = current.id
    data["options"] = _normalized_options(str(data.get("type") or ""), data.get("options"), s.default_option_count)

    try:
        updated = FieldDefinition.model_validate(data)
    except PydanticValidationError as e:
        raise InvalidMutationError(f"Invalid patch for field {field_id!r}: {e.errors()[0].get('msg')}") from e
    fields = list(template.fields)
    fields[idx] = updated
    out = _commit(template, fields)
    _log("edit_field", out, field_id=field_id, changed=sorted(changes.keys()) + (["width"] if width else []))
    return out


def duplicate_field(template: FormTemplate, field_id: str) -> Tuple[FormTemplate, FieldDefinition]:
    idx = _index_or_raise(template, field_id)
    source = template.fields[idx]
    clone = source.model_copy(
        deep=True,
        update={"id": generate_field_id(), "label": f"{source.label} (Copy)"},
    )
    fields = list(template.fields)
    fields.insert(idx + 1, clone)
    out = _commit(template, fields)
    _log("duplicate_field", out, field_id=field_id, clone_id=clone.id)
    return out, out.fields[idx + 1]


def delete_field(template: FormTemplate, field_id: str) -> FormTemplate:
    """
    Remove a field. Rules on other fields that depend on it are left as they are
    (they now never match, see `visibility.dangling_dependencies`).
    """
    idx = _index_or_raise(template, field_id)
    fields = [f for i, f in enumerate(template.fields) if i != idx]
    out = _commit(template, fields)
    _log("delete_field", out, field_id=field_id)
    return out


def reorder_field(template: FormTemplate, source_index: int, dest_index: int) -> FormTemplate:
    n = len(template.fields)
    for name, value in (("source_index", source_index), ("dest_index", dest_index)):
        if not isinstance(value, int) or isinstance(value, bool) or value < 0 or value >= n:
            raise InvalidMutationError(f"{name} {value!r} out of range for {n} fields")
    fields = list(template.fields)
    moved = fields.pop(source_index)
    fields.insert(dest_index, moved)
    out = _commit(template, fields)
    _log("reorder_field", out, field_id=moved.id, source=source_index, dest=dest_index)
    return out


def change_field_width(template: FormTemplate, field_id: str, width: str) -> FormTemplate:
    idx = _index_or_raise(template, field_id)
    w = _check_width(width)
    current = template.fields[idx]
    fields = list(template.fields)
    fields[idx] = current.model_copy(update={"layout": current.layout.model_copy(update={"width": w})})
    out = _commit(template, fields)
    _log("change_field_width", out, field_id=field_id, width=w)
    return out


def _options_field(template: FormTemplate, field_id: str) -> Tuple[int, FieldDefinition, List[str]]:
    idx = _index_or_raise(template, field_id)
    field = template.fields[idx]
    if not is_options_type(field.type):
        raise InvalidMutationError(f"Field {field_id!r} of type {field.type!r} has no options")
    return idx, field, list(field.options or [])


def _replace_options(template: FormTemplate, idx: int, field: FieldDefinition, options: List[str]) -> FormTemplate:
    fields = list(template.fields)
    fields[idx] = field.model_copy(update={"options": options})
    return _commit(template, fields)


def add_option(template: FormTemplate, field_id: str) -> FormTemplate:
    idx, field, options = _options_field(template, field_id)
    options.append(f"Option {len(options) + 1}")
    out = _replace_options(template, idx, field, options)
    _log("add_option", out, field_id=field_id, options=len(options))
    return out


def remove_option(template: FormTemplate, field_id: str, index: int) -> FormTemplate:
    idx, field, options = _options_field(template, field_id)
    if index < 0 or index >= len(options):
        raise InvalidMutationError(f"Option index {index} out of range for field {field_id!r}")
    if len(options) == 1:
        raise InvalidMutationError(f"Field {field_id!r} must keep at least one option")
    options.pop(index)
    out = _replace_options(template, idx, field, options)
    _log("remove_option", out, field_id=field_id, options=len(options))
    return out


def update_option(template: FormTemplate, field_id: str, index: int, value: str) -> FormTemplate:
    idx, field, options = _options_field(template, field_id)
    if index < 0 or index >= len(options):
        raise InvalidMutationError(f"Option index {index} out of range for field {field_id!r}")
    options[index] = str(value)
    out = _replace_options(template, idx, field, options)
    _log("update_option", out, field_id=field_id, index=index)
    return out


def _clean_name(name: Any) -> str:
    n = str(name or "").strip()
    if not n:
        raise InvalidMutationError("Please enter a form name")
    return n


def new_template(name: str, *, created_by: Optional[str] = None, description: str = "") -> FormTemplate:
    now = _now_iso()
    tpl = FormTemplate(
        id=generate_template_id(),
        name=_clean_name(name),
        description=description or "",
        fields=[],
        settings=TemplateSettings(),
        created_at=now,
        updated_at=now,
        created_by=created_by,
    )
    _log("new_template", tpl)
    return tpl


def update_template_details(
    template: FormTemplate,
    *,
    name: Optional[str] = None,
    description: Optional[str] = None,
    settings: Optional[Union[TemplateSettings, Dict[str, Any]]] = None,
) -> FormTemplate:
    update: Dict[str, Any] = {"updated_at": _now_iso()}
    if name is not None:
        update["name"] = _clean_name(name)
    if description is not None:
        update["description"] = description
    if settings is not None:
        update["settings"] = (
            settings if isinstance(settings, TemplateSettings) else TemplateSettings.model_validate(settings)
        )
    out = template.model_copy(update=update)
    _log("update_template_details", out, changed=sorted(k for k in update if k != "updated_at"))
    return out


def duplicate_template(template: FormTemplate) -> FormTemplate:
    now = _now_iso()
    out = template.model_copy(
        deep=True,
        update={
            "id": generate_template_id(),
            "name": f"{template.name} (Copy)",
            "created_at": now,
            "updated_at": now,
        },
    )
    _log("duplicate_template", out, source_id=template.id)
    return out


__all__ = [
    "add_field",
    "add_option",
    "change_field_width",
    "delete_field",
    "duplicate_field",
    "duplicate_template",
    "edit_field",
    "generate_field_id",
    "generate_template_id",
    "new_template",
    "remove_option",
    "reorder_field",
    "update_option",
    "update_template_details",
]

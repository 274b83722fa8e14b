from __future__ import annotations

import hashlib
import json
import logging
from collections import OrderedDict
from typing import Annotated, Any, Dict, FrozenSet, Iterable, List, Optional, Tuple, Type, Union

from pydantic import BaseModel, ConfigDict, Field, PlainValidator, create_model
from pydantic import ValidationError as PydanticValidationError

from form_engine.config import EngineSettings, load_settings
from form_engine.constraints import REQUIRED_MESSAGE, FieldConstraint, check_value, constraint_for_field, is_absent
from form_engine.schemas.template import FormTemplate, coerce_template

logger = logging.getLogger("form_engine.schema")

_VALIDATOR_CACHE: "OrderedDict[str, TemplateValidator]" = OrderedDict()
# Sub-models per visible-field subset kept by each validator.
_MAX_SUBSET_MODELS = 32


def _compact_json(obj: Any) -> str:
    try:
        return json.dumps(obj, separators=(",", ":"), ensure_ascii=True, sort_keys=True)
    except Exception:
        return json.dumps(str(obj), separators=(",", ":"), ensure_ascii=True)


def template_fingerprint(template: FormTemplate, *, phone_min_length: int = 10) -> str:
    """
    Structural hash of everything that influences the generated validator.

    Timestamps and presentation settings are left out so that a save that only
    bumps `updated_at` keeps hitting the cache.
    """
    fields = [f.model_dump(mode="json", by_alias=True, exclude_none=True) for f in template.fields]
    raw = _compact_json({"id": template.id, "fields": fields, "phoneMinLength": phone_min_length})
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


def _plain_validator(constraint: Any):
    def _validate(value: Any) -> Any:
        return check_value(constraint, value)

    return PlainValidator(_validate)


def _build_model(name: str, rules: List[FieldConstraint]) -> Type[BaseModel]:
    definitions: Dict[str, Any] = {}
    for i, rule in enumerate(rules):
        annotation = Annotated[Any, _plain_validator(rule.constraint)]
        default: Any = ... if rule.required else None
        definitions[f"field_{i}"] = (annotation, Field(default=default, alias=rule.field_id))
    return create_model(
        name,
        __config__=ConfigDict(extra="ignore", populate_by_name=False),
        **definitions,
    )


class TemplateValidator:
    """
    Runtime validator for one template.

    Wraps a pydantic model built from the template's field constraints. Every
    field is checked independently and all failures are reported together.
    """

    def __init__(self, template_id: str, rules: List[FieldConstraint]) -> None:
        self.template_id = template_id
        self.rules = rules
        self._by_id: Dict[str, FieldConstraint] = {r.field_id: r for r in rules}
        self._models: "OrderedDict[FrozenSet[str], Tuple[Type[BaseModel], Dict[str, str]]]" = OrderedDict()

    @property
    def field_ids(self) -> List[str]:
        return [r.field_id for r in self.rules]

    def rule_for(self, field_id: str) -> Optional[FieldConstraint]:
        return self._by_id.get(field_id)

    def _model_for(self, only: FrozenSet[str]) -> Tuple[Type[BaseModel], Dict[str, str]]:
        cached = self._models.get(only)
        if cached is not None:
            self._models.move_to_end(only)
            return cached
        rules = [r for r in self.rules if r.field_id in only]
        model = _build_model("TemplateSubmission", rules)
        # Error locations are reported by alias, which is the field id.
        loc_to_id = {rule.field_id: rule.field_id for rule in rules}
        self._models[only] = (model, loc_to_id)
        while len(self._models) > _MAX_SUBSET_MODELS:
            self._models.popitem(last=False)
        return model, loc_to_id

    def validate(
        self,
        values: Dict[str, Any],
        only: Optional[Iterable[str]] = None,
    ) -> Tuple[Dict[str, Any], Dict[str, str]]:
        """
        Validate `values` against the constraints of `only` (default: all fields).

        Returns `(data, errors)`. `data` holds coerced values for the present
        fields and is empty whenever `errors` is not.
        """
        selected = frozenset(self.field_ids if only is None else [i for i in only if i in self._by_id])
        model, loc_to_id = self._model_for(selected)

        payload = {
            key: value
            for key, value in (values or {}).items()
            if key in selected and not is_absent(value)
        }
        try:
            instance = model.model_validate(payload)
        except PydanticValidationError as e:
            return {}, _errors_by_field(e, loc_to_id)
        return instance.model_dump(by_alias=True, exclude_unset=True), {}


def _errors_by_field(exc: PydanticValidationError, loc_to_id: Dict[str, str]) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    for err in exc.errors():
        loc = err.get("loc") or ()
        if not loc:
            continue
        field_id = loc_to_id.get(str(loc[0]))
        if field_id is None or field_id in errors:
            continue
        if err.get("type") == "missing":
            errors[field_id] = REQUIRED_MESSAGE
        else:
            errors[field_id] = str(err.get("msg") or "Invalid value")
    return errors


def _derive_rules(template: FormTemplate, settings: EngineSettings) -> List[FieldConstraint]:
    rules: List[FieldConstraint] = []
    seen: set[str] = set()
    for field in template.fields:
        if field.id in seen:
            continue
        rule = constraint_for_field(field, phone_min_length=settings.phone_min_length)
        if rule is None:
            continue
        seen.add(field.id)
        rules.append(rule)
    return rules


def generate(
    template: Union[FormTemplate, Dict[str, Any]],
    *,
    settings: Optional[EngineSettings] = None,
) -> TemplateValidator:
    """
    Build (or reuse) the runtime validator for a template. Never raises for
    template content; only submitted values can fail.
    """
    tpl = coerce_template(template)
    s = settings or load_settings()
    if s.schema_cache_size <= 0:
        return TemplateValidator(tpl.id, _derive_rules(tpl, s))

    key = template_fingerprint(tpl, phone_min_length=s.phone_min_length)
    cached = _VALIDATOR_CACHE.get(key)
    if cached is not None:
        _VALIDATOR_CACHE.move_to_end(key)
        logger.debug("validator cache hit template=%s key=%s", tpl.id, key[:12])
        return cached

    validator = TemplateValidator(tpl.id, _derive_rules(tpl, s))
    _VALIDATOR_CACHE[key] = validator
    while len(_VALIDATOR_CACHE) > s.schema_cache_size:
        _VALIDATOR_CACHE.popitem(last=False)
    logger.debug("validator built template=%s key=%s rules=%d", tpl.id, key[:12], len(validator.rules))
    return validator


def clear_validator_cache() -> None:
    _VALIDATOR_CACHE.clear()


__all__ = ["TemplateValidator", "clear_validator_cache", "generate", "template_fingerprint"]

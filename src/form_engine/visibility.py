from __future__ import annotations

from typing import Any, Collection, Dict, List, Optional, Set, Tuple, Union

from form_engine.schemas.template import FieldDefinition, FormTemplate, coerce_template

_ABSENT = object()


def is_visible(
    field: FieldDefinition,
    values: Optional[Dict[str, Any]],
    field_ids: Optional[Collection[str]] = None,
) -> bool:
    """
    Whether `field` is shown for `values`.

    When `field_ids` is given, a rule naming an id outside it resolves to
    absent, so a deleted dependency keeps the field hidden even if a stale
    value is still present.
    """
    rule = field.conditional
    if rule is None:
        return True
    if field_ids is not None and rule.depends_on not in field_ids:
        return False
    current = (values or {}).get(rule.depends_on, _ABSENT)
    if current is _ABSENT:
        return False
    # Strict comparison: no str/number coercion and True never equals "true".
    return type(current) is str and current == rule.value


def visible_fields(template: Union[FormTemplate, Dict[str, Any]], values: Optional[Dict[str, Any]]) -> List[FieldDefinition]:
    tpl = coerce_template(template)
    ids = set(tpl.field_ids())
    return [f for f in tpl.fields if is_visible(f, values, ids)]


def visible_field_ids(template: Union[FormTemplate, Dict[str, Any]], values: Optional[Dict[str, Any]]) -> Set[str]:
    """
    Ids of the fields that should be rendered and validated for `values`.

    A rule compares another field's current *value*, never its visibility, so
    chains (C depends on B depends on A) need no fixpoint and cannot cycle. A
    rule pointing at a field that no longer exists never matches, which keeps
    the dependent hidden instead of raising.
    """
    return {f.id for f in visible_fields(template, values)}


def hidden_field_ids(template: Union[FormTemplate, Dict[str, Any]], values: Optional[Dict[str, Any]]) -> List[str]:
    tpl = coerce_template(template)
    ids = set(tpl.field_ids())
    return [f.id for f in tpl.fields if not is_visible(f, values, ids)]


def dangling_dependencies(template: Union[FormTemplate, Dict[str, Any]]) -> List[Tuple[str, str]]:
    """`(field_id, missing_dependency_id)` for every rule naming a field that does not exist."""
    tpl = coerce_template(template)
    ids = set(tpl.field_ids())
    out: List[Tuple[str, str]] = []
    for f in tpl.fields:
        if f.conditional is not None and f.conditional.depends_on not in ids:
            out.append((f.id, f.conditional.depends_on))
    return out


__all__ = ["dangling_dependencies", "hidden_field_ids", "is_visible", "visible_field_ids", "visible_fields"]

"""
Deterministic lint rules for template authoring defects.

None of these stop a template from rendering or accepting submissions; each
defect already has a safe runtime behaviour (hidden field, free text, ignored
bound). Lint exists so the builder can point the author at the problem.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Union

from form_engine.catalog import is_known_type, is_layout_type, is_options_type
from form_engine.schemas.submission import LintIssue
from form_engine.schemas.template import FormTemplate, coerce_template


def _issue(field_id: str, code: str, message: str, severity: str = "warning") -> LintIssue:
    return LintIssue(field_id=field_id, code=code, severity=severity, message=message)


def lint_template(template: Union[FormTemplate, Dict[str, Any]]) -> List[LintIssue]:
    tpl = coerce_template(template)
    issues: List[LintIssue] = []
    ids = tpl.field_ids()
    id_set = set(ids)
    seen: set[str] = set()

    for position, f in enumerate(tpl.fields):
        if f.id in seen:
            issues.append(_issue(f.id, "duplicate_id", f"Field id {f.id!r} is used more than once", "error"))
        seen.add(f.id)

        if f.layout.order != position:
            issues.append(
                _issue(f.id, "order_mismatch", f"layout.order is {f.layout.order} but the field is at position {position}")
            )

        if not is_known_type(f.type):
            issues.append(_issue(f.id, "unknown_type", f"Unknown field type {f.type!r}; treated as optional text"))

        if is_options_type(f.type) and not f.options:
            issues.append(_issue(f.id, "empty_options", "Choice field has no options; it accepts free text"))
        elif f.options and not is_options_type(f.type):
            issues.append(_issue(f.id, "unexpected_options", f"Options are ignored for {f.type!r} fields"))

        rule = f.conditional
        if rule is not None:
            if rule.depends_on not in id_set:
                issues.append(
                    _issue(
                        f.id,
                        "dangling_conditional",
                        f"Depends on missing field {rule.depends_on!r}; the field will always be hidden",
                    )
                )
            elif rule.depends_on == f.id:
                issues.append(_issue(f.id, "self_conditional", "Depends on its own value; the field will always be hidden"))
            else:
                target = tpl.field_by_id(rule.depends_on)
                if target is not None and is_layout_type(target.type):
                    issues.append(
                        _issue(
                            f.id,
                            "layout_conditional",
                            f"Depends on layout field {rule.depends_on!r}, which never has a value",
                        )
                    )

        v = f.validation
        if v is None:
            continue
        if v.pattern:
            try:
                re.compile(v.pattern)
            except re.error:
                issues.append(_issue(f.id, "invalid_pattern", f"Pattern {v.pattern!r} does not compile; it is ignored"))
        if v.min is not None and v.max is not None and v.min > v.max:
            issues.append(_issue(f.id, "min_gt_max", f"min {v.min} is greater than max {v.max}; no value can pass"))
        if v.min_length and v.max_length and v.min_length > v.max_length:
            issues.append(
                _issue(f.id, "min_length_gt_max_length", f"minLength {v.min_length} is greater than maxLength {v.max_length}")
            )

    return issues


def has_errors(issues: List[LintIssue]) -> bool:
    return any(i.severity == "error" for i in issues)


__all__ = ["has_errors", "lint_template"]

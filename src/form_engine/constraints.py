"""
Per-field value constraints.

Each non-layout field maps to exactly one constraint variant. Variants are plain
pydantic models tagged by `kind`, so a generated validator can be inspected,
serialized and compared; `check_value` is the single dispatch point that applies
a variant to a submitted value and returns the coerced value.
"""

from __future__ import annotations

import logging
import math
import re
from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import AnyUrl, BaseModel, ConfigDict, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import PydanticCustomError

from form_engine.catalog import is_known_type, is_layout_type
from form_engine.schemas.template import FieldDefinition

logger = logging.getLogger("form_engine.schema")

REQUIRED_MESSAGE = "This field is required"

_EMAIL_RE = re.compile(
    r"^(?!\.)(?!.*\.\.)[A-Z0-9_'+\-.]*[A-Z0-9_+\-]@(?:[A-Z0-9][A-Z0-9\-]*\.)+[A-Z]{2,}$",
    re.IGNORECASE,
)
_URL_ADAPTER = TypeAdapter(AnyUrl)
_TRUE_STRINGS = {"true", "1", "yes", "y", "on"}
_FALSE_STRINGS = {"false", "0", "no", "n", "off"}


class _ConstraintBase(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class EmailConstraint(_ConstraintBase):
    kind: Literal["email"] = "email"


class PhoneConstraint(_ConstraintBase):
    kind: Literal["phone"] = "phone"
    min_length: int = 10


class UrlConstraint(_ConstraintBase):
    kind: Literal["url"] = "url"


class NumericConstraint(_ConstraintBase):
    kind: Literal["numeric"] = "numeric"
    min: Optional[Union[int, float]] = None
    max: Optional[Union[int, float]] = None


class BoundedConstraint(_ConstraintBase):
    """Whole numbers within an inclusive range (ratings)."""

    kind: Literal["bounded"] = "bounded"
    min: int = 1
    max: int = 5


class TextConstraint(_ConstraintBase):
    kind: Literal["text"] = "text"
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    pattern: Optional[str] = None


class StringArrayConstraint(_ConstraintBase):
    kind: Literal["string_array"] = "string_array"


class BooleanConstraint(_ConstraintBase):
    kind: Literal["boolean"] = "boolean"


class UnconstrainedConstraint(_ConstraintBase):
    kind: Literal["unconstrained"] = "unconstrained"


Constraint = Annotated[
    Union[
        EmailConstraint,
        PhoneConstraint,
        UrlConstraint,
        NumericConstraint,
        BoundedConstraint,
        TextConstraint,
        StringArrayConstraint,
        BooleanConstraint,
        UnconstrainedConstraint,
    ],
    Field(discriminator="kind"),
]


class FieldConstraint(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    field_id: str
    field_type: str
    required: bool
    constraint: Constraint


def _compilable(pattern: Optional[str]) -> Optional[str]:
    if not pattern:
        return None
    try:
        re.compile(pattern)
    except re.error as e:
        logger.debug("dropping invalid pattern %r: %s", pattern, e)
        return None
    return pattern


def constraint_for_field(field: FieldDefinition, *, phone_min_length: int = 10) -> Optional[FieldConstraint]:
    """
    Derive the constraint for one field, or `None` for layout-only fields.

    Never raises: unknown types become optional free text and an invalid
    `validation.pattern` is ignored.
    """
    field_type = str(field.type or "")
    if is_layout_type(field_type):
        return None

    rules = field.validation
    required = bool(field.required)
    constraint: Any

    if not is_known_type(field_type):
        return FieldConstraint(field_id=field.id, field_type=field_type, required=False, constraint=TextConstraint())

    if field_type == "email":
        constraint = EmailConstraint()
    elif field_type == "phone":
        constraint = PhoneConstraint(min_length=phone_min_length)
    elif field_type == "number":
        constraint = NumericConstraint(
            min=rules.min if rules else None,
            max=rules.max if rules else None,
        )
    elif field_type == "url":
        constraint = UrlConstraint()
    elif field_type in {"date", "datetime", "time"}:
        constraint = TextConstraint()
    elif field_type in {"checkbox", "toggle"}:
        constraint = BooleanConstraint()
    elif field_type in {"checkboxGroup", "multiselect"}:
        constraint = StringArrayConstraint()
    elif field_type in {"file", "image"}:
        constraint = UnconstrainedConstraint()
    elif field_type == "rating":
        constraint = BoundedConstraint(min=1, max=5)
    else:
        # A zero length bound is treated as "no bound".
        constraint = TextConstraint(
            min_length=(rules.min_length or None) if rules else None,
            max_length=(rules.max_length or None) if rules else None,
            pattern=_compilable(rules.pattern) if rules else None,
        )

    return FieldConstraint(field_id=field.id, field_type=field_type, required=required, constraint=constraint)


def is_absent(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, set)):
        return len(value) == 0
    return False


def _fail(error_type: str, message: str) -> PydanticCustomError:
    return PydanticCustomError(error_type, message)


def _format_number(n: Union[int, float]) -> str:
    if isinstance(n, float) and n.is_integer():
        return str(int(n))
    return str(n)


def _parse_number(value: Any) -> Union[int, float]:
    if isinstance(value, bool):
        raise _fail("number_type", "Please enter a number")
    if isinstance(value, (int, float)):
        n: Union[int, float] = value
    elif isinstance(value, str):
        raw = value.strip()
        try:
            n = int(raw)
        except ValueError:
            try:
                n = float(raw)
            except ValueError:
                raise _fail("number_type", "Please enter a number") from None
    else:
        raise _fail("number_type", "Please enter a number")
    if isinstance(n, float) and (math.isnan(n) or math.isinf(n)):
        raise _fail("number_type", "Please enter a number")
    return n


def _check_bounds(n: Union[int, float], lo: Optional[Union[int, float]], hi: Optional[Union[int, float]]) -> None:
    if lo is not None and n < lo:
        raise _fail("number_min", f"Must be at least {_format_number(lo)}")
    if hi is not None and n > hi:
        raise _fail("number_max", f"Must be at most {_format_number(hi)}")


def _as_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return _format_number(value)
    raise _fail("string_type", "Please enter text")


def _check_text(c: TextConstraint, value: Any) -> str:
    text = _as_text(value)
    if c.min_length is not None and len(text) < c.min_length:
        raise _fail("string_too_short", f"Must be at least {c.min_length} characters")
    if c.max_length is not None and len(text) > c.max_length:
        raise _fail("string_too_long", f"Must be at most {c.max_length} characters")
    if c.pattern and re.search(c.pattern, text) is None:
        raise _fail("string_pattern_mismatch", "Invalid format")
    return text


def _check_bounded(c: BoundedConstraint, value: Any) -> int:
    n = _parse_number(value)
    if isinstance(n, float):
        if not n.is_integer():
            raise _fail("int_type", "Please enter a whole number")
        n = int(n)
    _check_bounds(n, c.min, c.max)
    return n


def _check_boolean(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        v = value.strip().lower()
        if v in _TRUE_STRINGS:
            return True
        if v in _FALSE_STRINGS:
            return False
    raise _fail("bool_type", "Please choose yes or no")


def _check_string_array(value: Any) -> List[str]:
    if isinstance(value, str):
        return [value]
    if not isinstance(value, (list, tuple)):
        raise _fail("list_type", "Please select one or more options")
    out: List[str] = []
    for item in value:
        if not isinstance(item, str):
            raise _fail("list_type", "Please select one or more options")
        out.append(item)
    return out


def _check_url(value: Any) -> str:
    text = _as_text(value)
    try:
        _URL_ADAPTER.validate_python(text)
    except PydanticValidationError:
        raise _fail("url", "Please enter a valid URL") from None
    return text


def check_value(constraint: Any, value: Any) -> Any:
    """Apply one constraint variant to a present value; returns the coerced value."""
    kind = constraint.kind
    if kind == "email":
        text = _as_text(value)
        if not _EMAIL_RE.match(text):
            raise _fail("email", "Please enter a valid email address")
        return text
    if kind == "phone":
        text = _as_text(value)
        if len(text) < constraint.min_length:
            raise _fail("phone", "Please enter a valid phone number")
        return text
    if kind == "url":
        return _check_url(value)
    if kind == "numeric":
        n = _parse_number(value)
        _check_bounds(n, constraint.min, constraint.max)
        return n
    if kind == "bounded":
        return _check_bounded(constraint, value)
    if kind == "text":
        return _check_text(constraint, value)
    if kind == "string_array":
        return _check_string_array(value)
    if kind == "boolean":
        return _check_boolean(value)
    if kind == "unconstrained":
        return value
    raise ValueError(f"Unknown constraint kind: {kind!r}")


__all__ = [
    "BooleanConstraint",
    "BoundedConstraint",
    "Constraint",
    "EmailConstraint",
    "FieldConstraint",
    "NumericConstraint",
    "PhoneConstraint",
    "REQUIRED_MESSAGE",
    "StringArrayConstraint",
    "TextConstraint",
    "UnconstrainedConstraint",
    "UrlConstraint",
    "check_value",
    "constraint_for_field",
    "is_absent",
]

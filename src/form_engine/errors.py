from __future__ import annotations

from typing import List, Optional


class FormEngineError(Exception):
    """Base class for every error the engine raises."""


class BuilderError(FormEngineError):
    """
    A builder mutation was called incorrectly.

    These indicate caller bugs (stale ids, bad indexes), not user input problems,
    so they are raised immediately instead of being collected.
    """


class FieldNotFoundError(BuilderError, KeyError):
    def __init__(self, field_id: str, template_id: Optional[str] = None) -> None:
        self.field_id = field_id
        self.template_id = template_id
        where = f" in template {template_id!r}" if template_id else ""
        super().__init__(f"Field {field_id!r} not found{where}")

    def __str__(self) -> str:
        return str(self.args[0])


class InvalidMutationError(BuilderError, ValueError):
    pass


class TemplateFormatError(FormEngineError, ValueError):
    """Raised when a persisted template payload does not match the template contract."""

    def __init__(self, message: str, violations: Optional[List[str]] = None) -> None:
        super().__init__(message)
        self.violations = list(violations or [])


class TemplateNotFoundError(FormEngineError, KeyError):
    def __init__(self, template_id: str) -> None:
        self.template_id = template_id
        super().__init__(f"Template {template_id!r} not found")

    def __str__(self) -> str:
        return str(self.args[0])


__all__ = [
    "BuilderError",
    "FieldNotFoundError",
    "FormEngineError",
    "InvalidMutationError",
    "TemplateFormatError",
    "TemplateNotFoundError",
]

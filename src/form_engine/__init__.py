"""
Dynamic form definition & rendering engine.

Templates are plain pydantic models (`form_engine.schemas`). Everything else is
a function of a template and, where relevant, the current input values:

- Builder mutations: `form_engine.builder`
- Runtime validators: `form_engine.schema_generator`
- Row packing: `form_engine.layout`
- Conditional visibility: `form_engine.visibility`
- Submissions: `form_engine.submission`
"""

from form_engine.builder import (
    add_field,
    change_field_width,
    delete_field,
    duplicate_field,
    edit_field,
    reorder_field,
)
from form_engine.layout import pack_rows
from form_engine.schema_generator import generate
from form_engine.schemas import FieldDefinition, FormTemplate, SubmissionResult
from form_engine.submission import submit
from form_engine.visibility import visible_field_ids

__version__ = "0.1.0"

__all__ = [
    "FieldDefinition",
    "FormTemplate",
    "SubmissionResult",
    "add_field",
    "change_field_width",
    "delete_field",
    "duplicate_field",
    "edit_field",
    "generate",
    "pack_rows",
    "reorder_field",
    "submit",
    "visible_field_ids",
]

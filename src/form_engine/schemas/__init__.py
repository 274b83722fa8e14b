"""
Schema package for template and submission data models.
"""

from .submission import LintIssue, SubmissionResult  # noqa: F401
from .template import (  # noqa: F401
    ConditionalRule,
    FieldDefinition,
    FieldLayout,
    FieldPatch,
    FieldValidation,
    FieldWidth,
    FormTemplate,
    TemplateSettings,
    coerce_template,
)

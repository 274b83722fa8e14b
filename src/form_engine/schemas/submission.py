from __future__ import annotations

from typing import Any, Dict, List, Literal

from pydantic import BaseModel, ConfigDict, Field


class SubmissionResult(BaseModel):
    """
    Outcome of `submission.submit`.

    Exactly one of `data` / `errors` is populated: a failed submission never
    carries partial data.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    ok: bool
    data: Dict[str, Any] = Field(default_factory=dict)
    errors: Dict[str, str] = Field(default_factory=dict)
    hidden_field_ids: List[str] = Field(default_factory=list, alias="hiddenFieldIds")


class LintIssue(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    field_id: str = Field(alias="fieldId")
    code: str
    severity: Literal["warning", "error"] = "warning"
    message: str = ""

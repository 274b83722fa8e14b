from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

FieldWidth = Literal["full", "half", "third"]


class FieldValidation(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    min_length: Optional[int] = Field(default=None, alias="minLength")
    max_length: Optional[int] = Field(default=None, alias="maxLength")
    min: Optional[Union[int, float]] = None
    max: Optional[Union[int, float]] = None
    pattern: Optional[str] = None


class ConditionalRule(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    depends_on: str = Field(alias="dependsOn")
    value: str = ""


class FieldLayout(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    width: FieldWidth = "full"
    order: int = 0


class FieldDefinition(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str
    type: str
    label: str = ""
    placeholder: Optional[str] = None
    required: bool = False
    options: Optional[List[str]] = None
    validation: Optional[FieldValidation] = None
    conditional: Optional[ConditionalRule] = None
    description: Optional[str] = None
    default_value: Optional[Union[bool, List[str], str]] = Field(default=None, alias="defaultValue")
    layout: FieldLayout = Field(default_factory=FieldLayout)


class FieldPatch(BaseModel):
    """
    Mutable attributes accepted by `builder.edit_field`.

    Only keys that were explicitly set are applied, so a caller can send the whole
    editor form or a single attribute. `width` is the editor's flat spelling of
    `layout.width`.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    type: Optional[str] = None
    label: Optional[str] = None
    placeholder: Optional[str] = None
    required: Optional[bool] = None
    options: Optional[List[str]] = None
    validation: Optional[FieldValidation] = None
    conditional: Optional[ConditionalRule] = None
    description: Optional[str] = None
    default_value: Optional[Union[bool, List[str], str]] = Field(default=None, alias="defaultValue")
    width: Optional[FieldWidth] = None


class TemplateSettings(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    multi_page: bool = Field(default=False, alias="multiPage")
    progress_bar: bool = Field(default=True, alias="progressBar")
    save_progress: bool = Field(default=True, alias="saveProgress")
    theme: str = "default"


class FormTemplate(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str
    name: str
    description: str = ""
    fields: List[FieldDefinition] = Field(default_factory=list)
    settings: TemplateSettings = Field(default_factory=TemplateSettings)
    created_at: str = ""
    updated_at: str = ""
    created_by: Optional[str] = None

    def field_by_id(self, field_id: str) -> Optional[FieldDefinition]:
        for f in self.fields:
            if f.id == field_id:
                return f
        return None

    def index_of(self, field_id: str) -> int:
        for i, f in enumerate(self.fields):
            if f.id == field_id:
                return i
        return -1

    def field_ids(self) -> List[str]:
        return [f.id for f in self.fields]


def coerce_template(value: Union[FormTemplate, Dict[str, Any]]) -> FormTemplate:
    if isinstance(value, FormTemplate):
        return value
    return FormTemplate.model_validate(value)

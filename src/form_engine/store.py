from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Protocol

from form_engine.errors import TemplateNotFoundError
from form_engine.schemas.template import FormTemplate


class TemplateStore(Protocol):
    """
    Persistence collaborator. The engine only ever hands complete templates to
    `save`, so implementations never see a half-edited template.
    """

    def load(self, template_id: str) -> FormTemplate: ...

    def save(self, template: FormTemplate) -> None: ...

    def delete(self, template_id: str) -> None: ...

    def list(self) -> List[FormTemplate]: ...


class InMemoryTemplateStore:
    """Dict-backed store for tests, scripts and the CLI."""

    def __init__(self, templates: Optional[Iterable[FormTemplate]] = None) -> None:
        self._templates: Dict[str, FormTemplate] = {}
        for t in templates or []:
            self.save(t)

    def load(self, template_id: str) -> FormTemplate:
        tpl = self._templates.get(template_id)
        if tpl is None:
            raise TemplateNotFoundError(template_id)
        return tpl.model_copy(deep=True)

    def save(self, template: FormTemplate) -> None:
        self._templates[template.id] = template.model_copy(deep=True)

    def delete(self, template_id: str) -> None:
        if template_id not in self._templates:
            raise TemplateNotFoundError(template_id)
        del self._templates[template_id]

    def list(self) -> List[FormTemplate]:
        return [t.model_copy(deep=True) for t in self._templates.values()]

    def __contains__(self, template_id: object) -> bool:
        return template_id in self._templates

    def __len__(self) -> int:
        return len(self._templates)


def search_templates(templates: Iterable[FormTemplate], term: Optional[str] = None) -> List[FormTemplate]:
    """
    Case-insensitive substring match on name or description, most recently
    updated first. An empty term matches everything.
    """
    needle = str(term or "").strip().lower()
    matched = [
        t
        for t in templates
        if not needle or needle in (t.name or "").lower() or needle in (t.description or "").lower()
    ]
    return sorted(matched, key=lambda t: t.updated_at or "", reverse=True)


__all__ = ["InMemoryTemplateStore", "TemplateStore", "search_templates"]

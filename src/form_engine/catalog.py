from __future__ import annotations

from typing import Any, Dict, List, Optional

CATEGORIES: List[str] = ["input", "choice", "media", "layout"]

FIELD_TYPES: List[Dict[str, str]] = [
    # Input fields
    {"type": "text", "label": "Text Input", "category": "input"},
    {"type": "textarea", "label": "Text Area", "category": "input"},
    {"type": "email", "label": "Email", "category": "input"},
    {"type": "phone", "label": "Phone", "category": "input"},
    {"type": "number", "label": "Number", "category": "input"},
    {"type": "date", "label": "Date", "category": "input"},
    {"type": "datetime", "label": "Date & Time", "category": "input"},
    {"type": "time", "label": "Time", "category": "input"},
    {"type": "url", "label": "URL", "category": "input"},
    {"type": "address", "label": "Address", "category": "input"},
    # Choice fields
    {"type": "select", "label": "Dropdown", "category": "choice"},
    {"type": "multiselect", "label": "Multi-Select", "category": "choice"},
    {"type": "radio", "label": "Radio Buttons", "category": "choice"},
    {"type": "checkbox", "label": "Checkbox", "category": "choice"},
    {"type": "checkboxGroup", "label": "Checkbox Group", "category": "choice"},
    {"type": "rating", "label": "Rating", "category": "choice"},
    {"type": "toggle", "label": "Toggle", "category": "choice"},
    # Media fields
    {"type": "file", "label": "File Upload", "category": "media"},
    {"type": "image", "label": "Image Upload", "category": "media"},
    {"type": "signature", "label": "Signature", "category": "media"},
    # Layout fields
    {"type": "heading", "label": "Heading", "category": "layout"},
    {"type": "paragraph", "label": "Paragraph", "category": "layout"},
    {"type": "divider", "label": "Divider", "category": "layout"},
]

_BY_TYPE: Dict[str, Dict[str, str]] = {entry["type"]: entry for entry in FIELD_TYPES}

# Choice types that render a list of options. `checkbox`, `rating` and `toggle`
# sit in the choice category but carry no options.
OPTION_TYPES = frozenset({"select", "multiselect", "radio", "checkboxGroup"})
LAYOUT_TYPES = frozenset(entry["type"] for entry in FIELD_TYPES if entry["category"] == "layout")


def get_field_type(field_type: str) -> Optional[Dict[str, str]]:
    entry = _BY_TYPE.get(str(field_type or ""))
    return dict(entry) if entry else None


def is_known_type(field_type: Any) -> bool:
    return str(field_type or "") in _BY_TYPE


def field_type_label(field_type: str) -> str:
    entry = _BY_TYPE.get(str(field_type or ""))
    return entry["label"] if entry else str(field_type or "")


def category_for(field_type: str) -> Optional[str]:
    entry = _BY_TYPE.get(str(field_type or ""))
    return entry["category"] if entry else None


def is_layout_type(field_type: Any) -> bool:
    return str(field_type or "") in LAYOUT_TYPES


def is_options_type(field_type: Any) -> bool:
    return str(field_type or "") in OPTION_TYPES


def types_by_category() -> Dict[str, List[Dict[str, str]]]:
    """
    Group the catalog for the builder palette, preserving catalog order:
      { "input": [...], "choice": [...], "media": [...], "layout": [...] }
    """
    out: Dict[str, List[Dict[str, str]]] = {c: [] for c in CATEGORIES}
    for entry in FIELD_TYPES:
        out[entry["category"]].append(dict(entry))
    return out


def default_options(count: int = 3) -> List[str]:
    return [f"Option {i}" for i in range(1, max(1, int(count)) + 1)]


__all__ = [
    "CATEGORIES",
    "FIELD_TYPES",
    "LAYOUT_TYPES",
    "OPTION_TYPES",
    "category_for",
    "default_options",
    "field_type_label",
    "get_field_type",
    "is_known_type",
    "is_layout_type",
    "is_options_type",
    "types_by_category",
]

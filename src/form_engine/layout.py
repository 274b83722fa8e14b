from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from form_engine.schemas.template import FieldDefinition, FormTemplate
from form_engine.visibility import visible_fields

GRID_UNITS = 12
WIDTH_UNITS: Dict[str, int] = {"full": 12, "half": 6, "third": 4}


def width_units(field: FieldDefinition) -> int:
    width = field.layout.width if field.layout else "full"
    return WIDTH_UNITS.get(str(width or "full"), GRID_UNITS)


def _is_full(field: FieldDefinition) -> bool:
    return width_units(field) >= GRID_UNITS


def pack_rows(fields: Sequence[FieldDefinition]) -> List[List[FieldDefinition]]:
    """
    Greedy left-to-right packing of fields into 12-unit display rows.

    Fields are never reordered to get a tighter fit: a half field followed by a
    third and another half leaves the first row at 10 units. Full-width fields
    always get a row of their own.
    """
    rows: List[List[FieldDefinition]] = []
    current: List[FieldDefinition] = []
    current_width = 0

    for field in fields:
        units = width_units(field)
        if _is_full(field) or current_width + units > GRID_UNITS:
            if current:
                rows.append(current)
                current = []
                current_width = 0

        current.append(field)
        current_width += units

        if current_width >= GRID_UNITS:
            rows.append(current)
            current = []
            current_width = 0

    if current:
        rows.append(current)
    return rows


def row_widths(rows: Sequence[Sequence[FieldDefinition]]) -> List[int]:
    return [sum(width_units(f) for f in row) for row in rows]


def pack_visible_rows(template: FormTemplate, values: Optional[Dict[str, Any]] = None) -> List[List[FieldDefinition]]:
    """Rows as a renderer shows them: hidden fields removed before packing."""
    return pack_rows(visible_fields(template, values or {}))


def rows_to_ids(rows: Sequence[Sequence[FieldDefinition]]) -> List[List[str]]:
    return [[f.id for f in row] for row in rows]


__all__ = ["GRID_UNITS", "WIDTH_UNITS", "pack_rows", "pack_visible_rows", "row_widths", "rows_to_ids", "width_units"]

"""Parsing of properties.txt into property definitions."""

from __future__ import annotations
from typing import Dict, Iterable, List, Mapping, Optional

from domain.models import PropertyDef, TxtProperty
from .tsv_parser import parse_tsv, parse_number


def read_property(
    row: Mapping[str, str], code_col: str, param_col: str, min_col: str, max_col: str
) -> Optional[TxtProperty]:
    """Build a property from four sibling columns; ``None`` when the code column is blank.

    Used by every table that encodes modifiers as (code, param, min, max)
    column groups: gems, runes, uniqueitems, sets and setitems.
    """
    code = (row.get(code_col) or "").strip()
    if not code:
        return None
    return TxtProperty(
        code=code,
        param=(row.get(param_col) or "").strip(),
        min=parse_number(row.get(min_col)),
        max=parse_number(row.get(max_col)),
    )


def parse_properties_txt(text: str) -> List[PropertyDef]:
    """Rows lacking a code or a tooltip are internal properties and are skipped."""
    out: List[PropertyDef] = []
    for row in parse_tsv(text):
        code = row.get("code", "")
        tooltip = row.get("*Tooltip", "")
        if code and tooltip:
            out.append(PropertyDef(code=code, tooltip=tooltip, parameter=row.get("*Parameter", "")))
    return out


def build_property_map(properties: Iterable[PropertyDef]) -> Dict[str, PropertyDef]:
    return {p.code: p for p in properties}

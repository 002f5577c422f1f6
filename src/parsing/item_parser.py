"""Parsing of item tables: uniqueitems, sets, setitems, weapons/armor/misc, itemtypes.

All functions drop rows missing their key columns instead of raising; an
empty or header-only input yields an empty list.
"""

from __future__ import annotations
import logging
from typing import AbstractSet, Iterable, List, Mapping, Optional, Tuple

from domain.models import (
    ItemSet,
    ItemType,
    ItemTypeDef,
    PartialBonus,
    PropertyDef,
    SetItem,
    SetItemBonus,
    TxtProperty,
    UniqueItem,
)
from domain.property_translator import PropertyTranslator
from .property_parser import read_property
from .tsv_parser import parse_boolean, parse_number, parse_tsv

_log = logging.getLogger(__name__)

# ore = Uni Ore, ast = Ascendancy Stone
EXCLUDED_ITEM_CODES = frozenset({"ore", "ast"})
# Internal flags not meant for display
EXCLUDED_PROPERTY_CODES = frozenset({"tinkerflag", "tinkerflag2"})
INVALID_TYPE_CODES = frozenset({"", "none", "xxx"})


def _numbered_properties(
    row: Mapping[str, str], count: int, *, exclude: AbstractSet[str] = frozenset()
) -> Tuple[TxtProperty, ...]:
    props = []
    for i in range(1, count + 1):
        prop = read_property(row, f"prop{i}", f"par{i}", f"min{i}", f"max{i}")
        if prop is None or prop.code.lower() in exclude:
            continue
        props.append(prop)
    return tuple(props)


def parse_unique_items_txt(
    text: str,
    coupon_items: Optional[AbstractSet[str]] = None,
    property_defs: Optional[Iterable[PropertyDef]] = None,
    *,
    translator: Optional[PropertyTranslator] = None,
) -> List[UniqueItem]:
    """Parse uniqueitems.txt.

    ``coupon_items`` marks items obtainable from Ancient Coupons (matched on
    the ``index`` column). Properties are pre-translated when either
    ``translator`` or ``property_defs`` is supplied.
    """
    coupons = coupon_items or frozenset()
    if translator is None and property_defs is not None:
        translator = PropertyTranslator(property_defs)
    out: List[UniqueItem] = []
    for row in parse_tsv(text):
        index, raw_id = row.get("index", ""), row.get("*ID", "")
        if not index or not raw_id:
            continue
        code = row.get("code", "")
        if code.lower() in EXCLUDED_ITEM_CODES:
            continue
        props = _numbered_properties(row, 12, exclude=EXCLUDED_PROPERTY_CODES)
        resolved = tuple(t.text for t in translator.translate_all(props)) if translator else ()
        out.append(
            UniqueItem(
                index=index,
                id=parse_number(raw_id),
                version=parse_number(row.get("version")),
                enabled=parse_boolean(row.get("enabled")),
                level=parse_number(row.get("lvl")),
                level_req=parse_number(row.get("lvl req")),
                item_code=code,
                item_name=row.get("*ItemName", ""),
                properties=props,
                resolved_properties=resolved,
                is_ancient_coupon=index in coupons,
            )
        )
    _log.debug("Parsed %d unique items", len(out))
    return out


def parse_sets_txt(text: str) -> List[ItemSet]:
    out: List[ItemSet] = []
    for row in parse_tsv(text):
        index, name = row.get("index", ""), row.get("name", "")
        if not index or not name:
            continue
        partials = []
        # PCode2a..PCode5b: bonuses unlocked at 2..5 equipped items
        for count in range(2, 6):
            props = []
            for suffix in ("a", "b"):
                k = f"{count}{suffix}"
                prop = read_property(row, f"PCode{k}", f"PParam{k}", f"PMin{k}", f"PMax{k}")
                if prop is not None:
                    props.append(prop)
            if props:
                partials.append(PartialBonus(item_count=count, properties=tuple(props)))
        full = []
        for i in range(1, 9):
            prop = read_property(row, f"FCode{i}", f"FParam{i}", f"FMin{i}", f"FMax{i}")
            if prop is not None:
                full.append(prop)
        out.append(
            ItemSet(
                index=index, name=name, partial_bonuses=tuple(partials), full_set_bonuses=tuple(full)
            )
        )
    return out


def parse_set_items_txt(text: str) -> List[SetItem]:
    out: List[SetItem] = []
    for row in parse_tsv(text):
        index, raw_id = row.get("index", ""), row.get("*ID", "")
        if not index or not raw_id:
            continue
        bonuses = []
        for slot in range(1, 6):
            a = read_property(row, f"aprop{slot}a", f"apar{slot}a", f"amin{slot}a", f"amax{slot}a")
            b = read_property(row, f"aprop{slot}b", f"apar{slot}b", f"amin{slot}b", f"amax{slot}b")
            if a is None and b is None:
                continue
            bonuses.append(SetItemBonus(slot=slot, property_a=a, property_b=b))
        out.append(
            SetItem(
                index=index,
                id=parse_number(raw_id),
                set_name=row.get("set", ""),
                item_code=row.get("item", ""),
                item_name=row.get("*item", ""),
                level=parse_number(row.get("lvl")),
                level_req=parse_number(row.get("lvl req")),
                properties=_numbered_properties(row, 9),
                partial_bonuses=tuple(bonuses),
            )
        )
    return out


def parse_item_types_txt(weapons: str, armor: str, misc: str) -> List[ItemType]:
    """Map base item codes to their type code; first occurrence of a code wins."""
    out: List[ItemType] = []
    seen: set[str] = set()
    for text in (weapons, armor, misc):
        for row in parse_tsv(text):
            code = row.get("code", "").lower()
            type_code = row.get("type", "").lower()
            if not code or not type_code or code in seen:
                continue
            seen.add(code)
            out.append(ItemType(code=code, type=type_code, name=row.get("name", "")))
    return out


def parse_item_type_defs_txt(text: str) -> List[ItemTypeDef]:
    out: List[ItemTypeDef] = []
    for row in parse_tsv(text):
        code = row.get("Code", "").lower()
        if code in INVALID_TYPE_CODES:
            continue
        out.append(
            ItemTypeDef(
                code=code,
                name=row.get("ItemType", ""),
                equiv1=row.get("Equiv1", "").lower(),
                equiv2=row.get("Equiv2", "").lower(),
                store_page=row.get("StorePage", "").lower(),
            )
        )
    return out


__all__ = [
    "EXCLUDED_ITEM_CODES",
    "EXCLUDED_PROPERTY_CODES",
    "parse_unique_items_txt",
    "parse_sets_txt",
    "parse_set_items_txt",
    "parse_item_types_txt",
    "parse_item_type_defs_txt",
]

"""Cross-reference tables: cube recipe coupons, monster names, skill classes.

These tables mostly feed lookup maps used while translating properties of
other tables. Lookups are keyed loosely; a miss is expected and never fatal.
"""

from __future__ import annotations
from typing import Dict, Iterable, List, Set

from domain.models import Monster, Skill
from domain.property_translator import CHAR_CLASS_NAMES
from .tsv_parser import parse_number, parse_tsv

COUPON_DESCRIPTION = "Coupon"
SKILL_SECTION_MARKER = "Expansion"
VALID_CHAR_CLASSES = frozenset(CHAR_CLASS_NAMES)


def parse_ancient_coupon_items(text: str) -> Set[str]:
    """Unique item names obtainable from Ancient Coupon cube recipes.

    Outputs starting with a digit are internal item codes, not names.
    """
    items: Set[str] = set()
    for row in parse_tsv(text):
        output = row.get("output", "")
        if row.get("description", "") != COUPON_DESCRIPTION:
            continue
        if output and not "0" <= output[0] <= "9":
            items.add(output)
    return items


def parse_monstats_txt(text: str) -> List[Monster]:
    out: List[Monster] = []
    for row in parse_tsv(text):
        raw_idx, name = row.get("*hcIdx", ""), row.get("NameStr", "")
        if not raw_idx or not name:
            continue
        idx = parse_number(raw_idx)
        if idx > 0:
            out.append(Monster(hc_idx=idx, name_str=name))
    return out


def build_monster_name_map(monsters: Iterable[Monster]) -> Dict[int, str]:
    return {m.hc_idx: m.name_str for m in monsters}


def parse_skills_txt(text: str) -> List[Skill]:
    out: List[Skill] = []
    for row in parse_tsv(text):
        skill = row.get("skill", "")
        if not skill or skill == SKILL_SECTION_MARKER:
            continue
        char_class = row.get("charclass", "")
        out.append(Skill(skill=skill, char_class=char_class if char_class in VALID_CHAR_CLASSES else ""))
    return out


def build_skill_class_map(skills: Iterable[Skill]) -> Dict[str, str]:
    """Skill name -> class code, only for class-bound skills."""
    return {s.skill: s.char_class for s in skills if s.char_class}


__all__ = [
    "parse_ancient_coupon_items",
    "parse_monstats_txt",
    "build_monster_name_map",
    "parse_skills_txt",
    "build_skill_class_map",
]

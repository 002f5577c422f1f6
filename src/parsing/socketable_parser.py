"""Parsing of gems.txt (socketables) and runes.txt (runeword recipes)."""

from __future__ import annotations
import logging
from typing import Dict, Iterable, List, Mapping, Tuple

from domain.models import RuneRef, Socketable, TxtProperty, TxtRuneword
from .property_parser import read_property
from .tsv_parser import collect_column_values, parse_boolean, parse_tsv

_log = logging.getLogger(__name__)


def _mods(row: Mapping[str, str], slot: str) -> Tuple[TxtProperty, ...]:
    mods = []
    for i in range(1, 4):
        p = f"{slot}Mod{i}"
        prop = read_property(row, f"{p}Code", f"{p}Param", f"{p}Min", f"{p}Max")
        if prop is not None:
            mods.append(prop)
    return tuple(mods)


def parse_socketables_txt(text: str) -> List[Socketable]:
    out: List[Socketable] = []
    for row in parse_tsv(text):
        name, code = row.get("name", ""), row.get("code", "")
        if not name or not code:
            continue
        out.append(
            Socketable(
                name=name,
                code=code,
                letter=row.get("letter", ""),
                weapon_mods=_mods(row, "weapon"),
                helm_mods=_mods(row, "helm"),
                shield_mods=_mods(row, "shield"),
            )
        )
    _log.debug("Parsed %d socketables", len(out))
    return out


def build_code_to_name_map(socketables: Iterable[Socketable]) -> Dict[str, str]:
    return {s.code: s.name for s in socketables}


def parse_runewords_txt(text: str, code_to_name: Mapping[str, str]) -> List[TxtRuneword]:
    """Parse complete runeword recipes.

    Rune codes are resolved to socketable names through ``code_to_name``; an
    unknown code keeps the code itself as the name.
    """
    out: List[TxtRuneword] = []
    for row in parse_tsv(text):
        name = row.get("Name", "")
        if not name or not parse_boolean(row.get("complete")):
            continue
        runes = tuple(
            RuneRef(code=code, name=code_to_name.get(code, code))
            for code in collect_column_values(row, "Rune", 6)
        )
        props = []
        for i in range(1, 8):
            prop = read_property(row, f"T1Code{i}", f"T1Param{i}", f"T1Min{i}", f"T1Max{i}")
            if prop is not None:
                props.append(prop)
        out.append(
            TxtRuneword(
                id=name,
                display_name=row.get("*Rune Name") or name,
                complete=True,
                item_types=collect_column_values(row, "itype", 6),
                exclude_types=collect_column_values(row, "etype", 3),
                runes=runes,
                properties=tuple(props),
            )
        )
    _log.debug("Parsed %d TXT runewords", len(out))
    return out


__all__ = [
    "parse_socketables_txt",
    "build_code_to_name_map",
    "parse_runewords_txt",
]

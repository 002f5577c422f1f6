"""Affix and header-cell helpers for the gems.htm / runewords.htm reference pages.

Page structure (gems.htm), one block per socketable::

    <tr><td colspan="3"><font><b><font color="WHITE">I Rune</font></b>
        <br>Req Lvl: 11</font></td></tr>
    <tr><td>Weapons/Gloves</td><td>Helms/Boots</td><td>Armor/Shields/Belts</td></tr>
    <tr><td>affix<br>affix</td><td>...</td><td>...</td></tr>

The bonus row is the second row after the header row. Each cell lists one
affix per <br>-separated line.
"""

from __future__ import annotations

import re
from typing import List, Optional

from bs4 import Tag

from domain.models import Affix, AffixValue, SocketableBonuses
from utils import html_utils

REQ_LEVEL_RE = re.compile(r"Req Lvl:\s*(\d+)", re.IGNORECASE)
RANGE_RE = re.compile(r"(\d+)-(\d+)")
NUMBER_RE = re.compile(r"[+-]?(\d+)")
SIGNED_NUMBER_RE = re.compile(r"[+-]?\d+")
RUNE_POINTS_RE = re.compile(r"^(.+?)\s*\((\d+)\s*points?\)$", re.IGNORECASE)
INNER_FONT_SELECTOR = "b font[color]"


def parse_req_level(text: str) -> int:
    m = REQ_LEVEL_RE.search(text)
    return int(m.group(1)) if m else 0


def extract_value(text: str) -> AffixValue:
    """Range ``(lo, hi)`` for "10-20", otherwise the first number, else ``None``."""
    m = RANGE_RE.search(text)
    if m:
        return (int(m.group(1)), int(m.group(2)))
    m = NUMBER_RE.search(text)
    if m:
        return int(m.group(1))
    return None


def detect_value_type(text: str) -> str:
    if RANGE_RE.search(text):
        return "range"
    if "%" in text:
        return "percent"
    if SIGNED_NUMBER_RE.search(text):
        return "flat"
    return "none"


def make_affix(raw_text: str) -> Affix:
    return Affix(
        raw_text=raw_text,
        pattern=SIGNED_NUMBER_RE.sub("#", raw_text),
        value=extract_value(raw_text),
        value_type=detect_value_type(raw_text),
    )


def parse_affixes(cell: Optional[Tag]) -> tuple[Affix, ...]:
    if cell is None:
        return ()
    return tuple(make_affix(line) for line in html_utils.split_br_lines(cell.decode_contents()))


def parse_runeword_affixes(cell: Optional[Tag]) -> tuple[Affix, ...]:
    """Runeword cells read ``[runeword bonuses]<br><br>[rune bonuses]``; keep the first part."""
    if cell is None:
        return ()
    head = html_utils.before_double_br(cell.decode_contents())
    return tuple(make_affix(line) for line in html_utils.split_br_lines(head))


def parse_bonuses(header_row: Optional[Tag]) -> SocketableBonuses:
    if header_row is None:
        return SocketableBonuses()
    following = header_row.find_next_siblings("tr", limit=2)
    if len(following) < 2:
        return SocketableBonuses()
    cells: List[Tag] = following[1].find_all("td")
    padded = cells + [None] * (3 - len(cells))
    return SocketableBonuses(
        weapons_gloves=parse_affixes(padded[0]),
        helms_boots=parse_affixes(padded[1]),
        armor_shields_belts=parse_affixes(padded[2]),
    )


def get_inner_font_color(header_cell: Tag) -> Optional[str]:
    font = header_cell.select_one(INNER_FONT_SELECTOR)
    if font is None:
        return None
    color = font.get("color")
    return color.upper() if color else None


def get_item_name(header_cell: Tag) -> str:
    font = header_cell.select_one(INNER_FONT_SELECTOR)
    if font is not None:
        name = font.get_text().strip()
        if name:
            return name
    b = header_cell.find("b")
    return b.get_text().strip() if b is not None else ""


def normalize_rune_name(raw_name: str) -> tuple[str, Optional[int]]:
    """``"I Rune (1 points)"`` -> ``("I Rune", 1)``; names without a suffix give ``None`` points."""
    m = RUNE_POINTS_RE.match(raw_name.strip())
    if m:
        return m.group(1).strip(), int(m.group(2))
    return raw_name.strip(), None


__all__ = [
    "parse_req_level",
    "extract_value",
    "detect_value_type",
    "make_affix",
    "parse_affixes",
    "parse_runeword_affixes",
    "parse_bonuses",
    "get_inner_font_color",
    "get_item_name",
    "normalize_rune_name",
]

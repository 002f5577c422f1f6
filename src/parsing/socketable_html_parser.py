"""Parsing of gems.htm into gems, crystals and the three rune families.

Every socketable on the page is anchored by a ``td[colspan=3]`` header cell.
Classification is driven by the name and the color of the inner font:

 - LoD runes: plain (uncolored) name, one of the 33 classic rune names
 - Kanji runes: BLUE name ending in " Rune"
 - ESR runes: any other color, name ending in " Rune", not a LoD rune, gem or crystal
 - Gems / crystals: name contains a known gem / crystal type

A page without header cells yields empty lists; nothing here raises on
missing markup.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple

from bs4 import BeautifulSoup, Tag

from domain.models import Crystal, EsrRune, Gem, KanjiRune, LodRune
from .affix_parser import (
    get_inner_font_color,
    get_item_name,
    normalize_rune_name,
    parse_bonuses,
    parse_req_level,
)

_log = logging.getLogger(__name__)

HEADER_SELECTOR = 'td[colspan="3"]'
RUNE_SUFFIX = " Rune"
KANJI_COLOR = "BLUE"

GEM_TYPES = ("Amethyst", "Sapphire", "Emerald", "Ruby", "Diamond", "Topaz", "Skull", "Obsidian")
GEM_QUALITIES = ("Chipped", "Flawed", "Standard", "Flawless", "Blemished", "Perfect")

CRYSTAL_TYPES = (
    "Shadow Quartz",
    "Frozen Soul",
    "Bleeding Stone",
    "Burning Sulphur",
    "Dark Azurite",
    "Bitter Peridot",
    "Pulsing Opal",
    "Enigmatic Cinnabar",
    "Tomb Jade",
    "Solid Mercury",
    "Storm Amber",
    "Tainted Tourmaline",
)
CRYSTAL_QUALITIES = ("Chipped", "Flawed", "Standard")

LOD_RUNE_NAMES = (
    "El", "Eld", "Tir", "Nef", "Eth", "Ith", "Tal", "Ral", "Ort", "Thul", "Amn",
    "Sol", "Shael", "Dol", "Hel", "Io", "Lum", "Ko", "Fal", "Lem", "Pul", "Um",
    "Mal", "Ist", "Gul", "Vex", "Ohm", "Lo", "Sur", "Ber", "Jah", "Cham", "Zod",
)
# Low El-Dol, Mid Hel-Gul, High Vex-Zod (1-based order bounds)
LOD_TIER_BOUNDS = ((14, 1), (25, 2), (33, 3))

ESR_COLOR_TO_TIER: Dict[str, int] = {
    "WHITE": 1,
    "RED": 2,
    "YELLOW": 3,
    "ORANGE": 4,
    "GREEN": 5,
    "GOLD": 6,
    "PURPLE": 7,
}


@dataclass(slots=True, frozen=True)
class HeaderEntry:
    """One socketable header cell with the values every parser needs."""

    name: str
    color: Optional[str]
    req_level: int
    row: Optional[Tag]


def iter_header_entries(html: str) -> Iterator[HeaderEntry]:
    soup = BeautifulSoup(html, "html.parser")
    for cell in soup.select(HEADER_SELECTOR):
        name = get_item_name(cell)
        if not name:
            continue
        yield HeaderEntry(
            name=name,
            color=get_inner_font_color(cell),
            req_level=parse_req_level(cell.get_text()),
            row=cell.find_parent("tr"),
        )


def _type_and_quality(
    name: str, types: Tuple[str, ...], qualities: Tuple[str, ...]
) -> Optional[Tuple[str, str]]:
    for kind in types:
        if kind not in name:
            continue
        for quality in qualities:
            if quality == "Standard":
                # Standard quality has no prefix: the name is the bare type
                if name == kind:
                    return kind, "Standard"
            elif name.startswith(quality):
                return kind, quality
    return None


def is_gem_name(name: str) -> bool:
    return any(t in name for t in GEM_TYPES)


def is_crystal_name(name: str) -> bool:
    return any(t in name for t in CRYSTAL_TYPES)


def is_lod_rune_name(name: str) -> bool:
    return name.endswith(RUNE_SUFFIX) and name[: -len(RUNE_SUFFIX)] in LOD_RUNE_NAMES


def lod_rune_order(name: str) -> int:
    base = name[: -len(RUNE_SUFFIX)] if name.endswith(RUNE_SUFFIX) else name
    return LOD_RUNE_NAMES.index(base) + 1 if base in LOD_RUNE_NAMES else 0


def lod_rune_tier(order: int) -> int:
    for upper, tier in LOD_TIER_BOUNDS:
        if order <= upper:
            return tier
    return LOD_TIER_BOUNDS[-1][1]


def is_kanji_rune_name(name: str, color: Optional[str]) -> bool:
    return name.endswith(RUNE_SUFFIX) and color == KANJI_COLOR


def is_esr_rune_name(name: str, color: Optional[str]) -> bool:
    if not name.endswith(RUNE_SUFFIX) or not color or color == KANJI_COLOR:
        return False
    return not (is_lod_rune_name(name) or is_gem_name(name) or is_crystal_name(name))


def parse_gems_html(html: str) -> List[Gem]:
    gems: List[Gem] = []
    for entry in iter_header_entries(html):
        if not is_gem_name(entry.name):
            continue
        tq = _type_and_quality(entry.name, GEM_TYPES, GEM_QUALITIES)
        if tq is None:
            continue
        gems.append(
            Gem(
                name=entry.name,
                type=tq[0],
                quality=tq[1],
                color=entry.color or "",
                req_level=entry.req_level,
                bonuses=parse_bonuses(entry.row),
            )
        )
    _log.debug("Parsed %d gems", len(gems))
    return gems


def parse_crystals_html(html: str) -> List[Crystal]:
    crystals: List[Crystal] = []
    for entry in iter_header_entries(html):
        if not is_crystal_name(entry.name):
            continue
        tq = _type_and_quality(entry.name, CRYSTAL_TYPES, CRYSTAL_QUALITIES)
        if tq is None:
            continue
        crystals.append(
            Crystal(
                name=entry.name,
                type=tq[0],
                quality=tq[1],
                color=entry.color or "",
                req_level=entry.req_level,
                bonuses=parse_bonuses(entry.row),
            )
        )
    _log.debug("Parsed %d crystals", len(crystals))
    return crystals


def parse_lod_runes_html(html: str) -> List[LodRune]:
    runes: List[LodRune] = []
    for entry in iter_header_entries(html):
        # classic runes are the only uncolored rune headers
        if entry.color is not None:
            continue
        name, points = normalize_rune_name(entry.name)
        order = lod_rune_order(name) if is_lod_rune_name(name) else 0
        if order == 0:
            continue
        runes.append(
            LodRune(
                name=name,
                order=order,
                tier=lod_rune_tier(order),
                req_level=entry.req_level,
                points=points,
                bonuses=parse_bonuses(entry.row),
            )
        )
    runes.sort(key=lambda r: r.order)
    _log.debug("Parsed %d LoD runes", len(runes))
    return runes


def parse_kanji_runes_html(html: str) -> List[KanjiRune]:
    runes: List[KanjiRune] = []
    for entry in iter_header_entries(html):
        if not is_kanji_rune_name(entry.name, entry.color):
            continue
        runes.append(
            KanjiRune(name=entry.name, req_level=entry.req_level, bonuses=parse_bonuses(entry.row))
        )
    _log.debug("Parsed %d Kanji runes", len(runes))
    return runes


def parse_esr_runes_html(html: str) -> List[EsrRune]:
    runes: List[EsrRune] = []
    for entry in iter_header_entries(html):
        name, points = normalize_rune_name(entry.name)
        if not is_esr_rune_name(name, entry.color):
            continue
        runes.append(
            EsrRune(
                name=name,
                order=len(runes) + 1,
                tier=ESR_COLOR_TO_TIER.get(entry.color, 1),
                color=entry.color,
                req_level=entry.req_level,
                points=points,
                bonuses=parse_bonuses(entry.row),
            )
        )
    _log.debug("Parsed %d ESR runes", len(runes))
    return runes


@dataclass(slots=True, frozen=True)
class ExtractedSocketable:
    name: str
    color: Optional[str]
    is_rune: bool


def extract_all_socketable_names(html: str) -> List[ExtractedSocketable]:
    """Every header on the page, used to verify no socketable was missed by the parsers."""
    return [
        ExtractedSocketable(
            name=e.name,
            color=e.color,
            is_rune=normalize_rune_name(e.name)[0].endswith(RUNE_SUFFIX),
        )
        for e in iter_header_entries(html)
    ]


def categorize_socketables(items: List[ExtractedSocketable]) -> Dict[str, List[str]]:
    groups: Dict[str, List[str]] = {"lod_runes": [], "kanji_runes": [], "esr_runes": [], "non_runes": []}
    for item in items:
        if not item.is_rune:
            groups["non_runes"].append(item.name)
        elif item.color is None:
            groups["lod_runes"].append(item.name)
        elif item.color == KANJI_COLOR:
            groups["kanji_runes"].append(item.name)
        else:
            groups["esr_runes"].append(item.name)
    return groups


__all__ = [
    "GEM_TYPES",
    "GEM_QUALITIES",
    "CRYSTAL_TYPES",
    "CRYSTAL_QUALITIES",
    "LOD_RUNE_NAMES",
    "ESR_COLOR_TO_TIER",
    "is_gem_name",
    "is_crystal_name",
    "is_lod_rune_name",
    "is_kanji_rune_name",
    "is_esr_rune_name",
    "parse_gems_html",
    "parse_crystals_html",
    "parse_lod_runes_html",
    "parse_kanji_runes_html",
    "parse_esr_runes_html",
    "extract_all_socketable_names",
    "categorize_socketables",
]

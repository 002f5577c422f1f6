"""Parsing stage of a sync round.

Turns the raw resources fetched by ``scraping.remote_sources`` into one
``GameDataSnapshot``. Lookup maps (socketable code -> name, monster index ->
name, skill -> class) are rebuilt from the tables of THIS round only and are
never merged with what a previous round produced.

Everything here is synchronous and CPU bound; the orchestrator calls it once
all fetches completed. Row level anomalies are dropped by the individual
parsers; a table missing its header line raises ``HeaderMissingError`` so a
truncated download never replaces good data with an empty table.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Mapping

from domain.models import (
    Affix,
    AffixPattern,
    GameDataSnapshot,
    SocketableBonuses,
)
from domain.property_translator import PropertyTranslator
from domain.rune_points import build_rune_points_lookup
from parsing import (
    item_parser,
    lookup_parser,
    property_parser,
    runeword_html_parser,
    socketable_html_parser,
    socketable_parser,
)
from parsing.tsv_parser import parse_tsv, require_headers
from scraping.remote_sources import ReferencePages

_log = logging.getLogger(__name__)

# Every TXT table must arrive with its header line for the round to proceed
REQUIRED_HEADERS: Mapping[str, tuple[str, ...]] = {
    "properties": ("code", "*Tooltip"),
    "gems": ("name", "code"),
    "runes": ("Name", "complete"),
    "unique_items": ("index", "*ID"),
    "sets": ("index", "name"),
    "set_items": ("index", "*ID"),
    "item_types": ("Code",),
    "weapons": ("code", "type"),
    "armor": ("code", "type"),
    "misc": ("code", "type"),
    "cubemain": ("description", "output"),
    "monstats": ("*hcIdx", "NameStr"),
    "skills": ("skill", "charclass"),
}


def _check_headers(raw: Mapping[str, str]) -> None:
    for name, headers in REQUIRED_HEADERS.items():
        require_headers(parse_tsv(raw.get(name, "")), *headers, source=name)


def parse_txt_tables(raw: Mapping[str, str]) -> GameDataSnapshot:
    """Parse the TXT tables (keyed by logical name) into a partial snapshot."""
    _check_headers(raw)
    snap = GameDataSnapshot()
    snap.properties = property_parser.parse_properties_txt(raw["properties"])
    snap.socketables = socketable_parser.parse_socketables_txt(raw["gems"])
    code_to_name = socketable_parser.build_code_to_name_map(snap.socketables)
    snap.txt_runewords = socketable_parser.parse_runewords_txt(raw["runes"], code_to_name)

    snap.monsters = lookup_parser.parse_monstats_txt(raw["monstats"])
    snap.skills = lookup_parser.parse_skills_txt(raw["skills"])
    translator = PropertyTranslator(
        snap.properties,
        monster_names=lookup_parser.build_monster_name_map(snap.monsters),
        skill_classes=lookup_parser.build_skill_class_map(snap.skills),
    )
    coupons = lookup_parser.parse_ancient_coupon_items(raw["cubemain"])
    snap.unique_items = item_parser.parse_unique_items_txt(
        raw["unique_items"], coupons, translator=translator
    )
    snap.sets = item_parser.parse_sets_txt(raw["sets"])
    snap.set_items = item_parser.parse_set_items_txt(raw["set_items"])
    snap.item_types = item_parser.parse_item_types_txt(
        raw["weapons"], raw["armor"], raw["misc"]
    )
    snap.item_type_defs = item_parser.parse_item_type_defs_txt(raw["item_types"])
    _log.debug(
        "TXT stage: %d properties, %d socketables, %d runewords, %d uniques, %d coupons",
        len(snap.properties),
        len(snap.socketables),
        len(snap.txt_runewords),
        len(snap.unique_items),
        len(coupons),
    )
    return snap


def _bonus_affixes(bonuses: SocketableBonuses) -> Iterable[Affix]:
    yield from bonuses.weapons_gloves
    yield from bonuses.helms_boots
    yield from bonuses.armor_shields_belts


def collect_affix_patterns(affixes: Iterable[Affix]) -> List[AffixPattern]:
    """Distinct affix patterns, first occurrence wins."""
    seen: Dict[str, AffixPattern] = {}
    for affix in affixes:
        if affix.pattern and affix.pattern not in seen:
            seen[affix.pattern] = AffixPattern(pattern=affix.pattern, value_type=affix.value_type)
    return list(seen.values())


def parse_reference_pages(
    pages: ReferencePages, into: GameDataSnapshot | None = None
) -> GameDataSnapshot:
    """Parse gems.htm / runewords.htm into ``into`` (or a fresh snapshot)."""
    snap = into if into is not None else GameDataSnapshot()
    html = pages.gems_html
    snap.gems = socketable_html_parser.parse_gems_html(html)
    snap.crystals = socketable_html_parser.parse_crystals_html(html)
    snap.lod_runes = socketable_html_parser.parse_lod_runes_html(html)
    snap.kanji_runes = socketable_html_parser.parse_kanji_runes_html(html)
    snap.esr_runes = socketable_html_parser.parse_esr_runes_html(html)

    lookup = build_rune_points_lookup(snap.esr_runes, snap.lod_runes)
    snap.runewords = runeword_html_parser.parse_runewords_html(pages.runewords_html, lookup)

    affixes: List[Affix] = []
    for rw in snap.runewords:
        affixes.extend(rw.affixes)
    for group in (snap.gems, snap.crystals, snap.lod_runes, snap.kanji_runes, snap.esr_runes):
        for item in group:
            affixes.extend(_bonus_affixes(item.bonuses))
    snap.affixes = collect_affix_patterns(affixes)
    _log.debug(
        "HTML stage: %d gems, %d crystals, %d LoD, %d kanji, %d ESR runes, %d runewords, %d affixes",
        len(snap.gems),
        len(snap.crystals),
        len(snap.lod_runes),
        len(snap.kanji_runes),
        len(snap.esr_runes),
        len(snap.runewords),
        len(snap.affixes),
    )
    return snap


def build_snapshot(txt_tables: Mapping[str, str], pages: ReferencePages) -> GameDataSnapshot:
    return parse_reference_pages(pages, into=parse_txt_tables(txt_tables))


__all__ = [
    "REQUIRED_HEADERS",
    "parse_txt_tables",
    "collect_affix_patterns",
    "parse_reference_pages",
    "build_snapshot",
]

"""Parsing of runewords.htm (BeautifulSoup).

Heuristic: each recipe is a ``tr.recipeRow`` with at least six cells::

    0 name + "(N Socket)"   1 rune ingredients   2 allowed item types
    3..5 bonuses per item class, "[runeword bonuses]<br><br>[rune bonuses]"

Rows without a recognizable name are skipped. A runeword listed on several
rows (one per item class) is merged into one record with the union of
allowed items, keeping first-seen order.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional

from bs4 import BeautifulSoup, Tag

from domain.models import Affix, Runeword
from domain.rune_points import RunePointsLookup, compute_tier_point_totals
from utils import html_utils
from .affix_parser import parse_runeword_affixes

_log = logging.getLogger(__name__)

ROW_SELECTOR = "tr.recipeRow"
NAME_SELECTOR = 'font[color="#908858"] b'
SOCKETS_RE = re.compile(r"\((\d+)\s*Socket\)", re.IGNORECASE)
MIN_CELLS = 6


def extract_name(cell: Tag) -> str:
    tag = cell.select_one(NAME_SELECTOR)
    return tag.get_text().strip() if tag is not None else ""


def extract_sockets(cell: Tag) -> int:
    m = SOCKETS_RE.search(cell.get_text())
    return int(m.group(1)) if m else 0


def extract_runes(cell: Tag) -> List[str]:
    runes: List[str] = []
    for font in cell.find_all("font", color=True):
        # wrapper fonts contain the actual rune fonts
        if font.find("font") is not None:
            continue
        name = font.get_text().strip()
        if name.endswith(" Rune"):
            runes.append(name)
    return runes


def extract_allowed_items(cell: Tag) -> List[str]:
    return html_utils.split_br_lines(cell.decode_contents())


def extract_affixes(cells: List[Tag]) -> tuple[Affix, ...]:
    for cell in cells[3:6]:
        affixes = parse_runeword_affixes(cell)
        if affixes:
            return affixes
    return ()


def parse_runewords_html(
    html: str, rune_points: Optional[RunePointsLookup] = None
) -> List[Runeword]:
    """Parse all recipe rows; ``rune_points`` enables per-tier point totals."""
    soup = BeautifulSoup(html, "html.parser")
    merged: Dict[str, dict] = {}
    row_count = 0
    for tr in soup.select(ROW_SELECTOR):
        cells = tr.find_all("td")
        if len(cells) < MIN_CELLS:
            continue
        name = extract_name(cells[0])
        if not name:
            continue
        row_count += 1
        allowed = extract_allowed_items(cells[2])
        existing = merged.get(name)
        if existing is not None:
            existing["allowed_items"] = html_utils.dedupe(existing["allowed_items"] + allowed)
            continue
        merged[name] = {
            "sockets": extract_sockets(cells[0]),
            "runes": extract_runes(cells[1]),
            "allowed_items": allowed,
            "affixes": extract_affixes(cells),
        }

    runewords = [
        Runeword(
            name=name,
            variant=1,
            sockets=raw["sockets"],
            runes=tuple(raw["runes"]),
            allowed_items=tuple(raw["allowed_items"]),
            affixes=raw["affixes"],
            tier_point_totals=(
                compute_tier_point_totals(raw["runes"], rune_points) if rune_points else ()
            ),
        )
        for name, raw in merged.items()
    ]
    _log.debug("Parsed %d runewords (from %d rows)", len(runewords), row_count)
    return runewords


__all__ = [
    "extract_name",
    "extract_sockets",
    "extract_runes",
    "extract_allowed_items",
    "extract_affixes",
    "parse_runewords_html",
]

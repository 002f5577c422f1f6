"""Rune point values and per-runeword tier totals.

Points double within each tier. The HTML reference page may carry the value
as a ``(N points)`` suffix; when it does not, the defaults below apply. Kanji
runes have no point system and never contribute to totals.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Mapping, Tuple

from .models import EsrRune, LodRune, TierPointTotal

ESR_CATEGORY = "esr_runes"
LOD_CATEGORY = "lod_runes"

DEFAULT_ESR_RUNE_POINTS: Mapping[str, int] = {
    # T1 WHITE
    "I Rune": 1, "U Rune": 2, "Shi Rune": 4, "Ka Rune": 8, "N Rune": 16, "Ku Rune": 32, "Yo Rune": 64,
    # T2 RED
    "Ki Rune": 1, "Ri Rune": 2, "Mi Rune": 4, "Ya Rune": 8, "A Rune": 16, "Tsu Rune": 32, "Chi Rune": 64,
    # T3 YELLOW
    "Sa Rune": 1, "Yu Rune": 2, "Ke Rune": 4, "E Rune": 8, "Ko Rune": 16, "Ra Rune": 32, "O Rune": 64,
    # T4 ORANGE
    "Ho Rune": 1, "Me Rune": 2, "Ru Rune": 4, "Ta Rune": 8, "To Rune": 16, "Wa Rune": 32, "Ha Rune": 64,
    # T5 GREEN
    "Na Rune": 1, "Ni Rune": 2, "Se Rune": 4, "Fu Rune": 8, "Ma Rune": 16, "Hi Rune": 32, "Mo Rune": 64,
    # T6 GOLD
    "No Rune": 1, "Te Rune": 2, "Ro Rune": 4, "So Rune": 8, "Mu Rune": 16, "Ne Rune": 32, "Re Rune": 64,
    # T7 PURPLE
    "Su Rune": 1, "He Rune": 2, "Nu Rune": 4, "Wo Rune": 8, "Null Rune": 16,
}

_LOD_ORDERED = (
    "El", "Eld", "Tir", "Nef", "Eth", "Ith", "Tal", "Ral", "Ort", "Thul", "Amn",
    "Sol", "Shael", "Dol", "Hel", "Io", "Lum", "Ko", "Fal", "Lem", "Pul", "Um",
    "Mal", "Ist", "Gul", "Vex", "Ohm", "Lo", "Sur", "Ber", "Jah", "Cham", "Zod",
)
# 11 runes per band, 1..1024 within each band
DEFAULT_LOD_RUNE_POINTS: Mapping[str, int] = {
    f"{name} Rune": 2 ** (i % 11) for i, name in enumerate(_LOD_ORDERED)
}


@dataclass(slots=True, frozen=True)
class RunePointInfo:
    points: int
    tier: int
    category: str


RunePointsLookup = Mapping[str, RunePointInfo]


def build_rune_points_lookup(
    esr_runes: Iterable[EsrRune], lod_runes: Iterable[LodRune]
) -> Dict[str, RunePointInfo]:
    """Rune name -> points info. ESR entries win when a name exists in both sets."""
    lookup: Dict[str, RunePointInfo] = {}
    for lod in lod_runes:
        points = lod.points if lod.points is not None else DEFAULT_LOD_RUNE_POINTS.get(lod.name)
        if points is not None:
            lookup[lod.name] = RunePointInfo(points, lod.tier, LOD_CATEGORY)
    for esr in esr_runes:
        points = esr.points if esr.points is not None else DEFAULT_ESR_RUNE_POINTS.get(esr.name)
        if points is not None:
            lookup[esr.name] = RunePointInfo(points, esr.tier, ESR_CATEGORY)
    return lookup


def compute_tier_point_totals(
    runes: Iterable[str], lookup: RunePointsLookup
) -> Tuple[TierPointTotal, ...]:
    totals: Dict[Tuple[str, int], int] = {}
    for name in runes:
        info = lookup.get(name)
        if info is None:
            continue
        key = (info.category, info.tier)
        totals[key] = totals.get(key, 0) + info.points
    return tuple(
        TierPointTotal(tier=tier, category=category, total_points=total)
        for (category, tier), total in sorted(totals.items())
    )


__all__ = [
    "ESR_CATEGORY",
    "LOD_CATEGORY",
    "DEFAULT_ESR_RUNE_POINTS",
    "DEFAULT_LOD_RUNE_POINTS",
    "RunePointInfo",
    "RunePointsLookup",
    "build_rune_points_lookup",
    "compute_tier_point_totals",
]

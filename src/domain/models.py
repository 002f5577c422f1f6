"""Domain models for the ESR game-data sync pipeline.

Records are immutable and reference each other only by natural key (item
code, rune name, monster index, ...). Sequences are tuples so records can be
hashed and compared structurally.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union

AffixValue = Union[int, Tuple[int, int], None]


# ---------------------------------------------------------------------------
# TXT sourced records
# ---------------------------------------------------------------------------
@dataclass(slots=True, frozen=True)
class PropertyDef:
    code: str
    tooltip: str
    parameter: str = ""


@dataclass(slots=True, frozen=True)
class TxtProperty:
    code: str
    param: str
    min: int
    max: int


@dataclass(slots=True, frozen=True)
class Socketable:
    name: str
    code: str
    letter: str
    weapon_mods: Tuple[TxtProperty, ...] = ()
    helm_mods: Tuple[TxtProperty, ...] = ()
    shield_mods: Tuple[TxtProperty, ...] = ()


@dataclass(slots=True, frozen=True)
class RuneRef:
    code: str
    name: str


@dataclass(slots=True, frozen=True)
class TxtRuneword:
    id: str
    display_name: str
    complete: bool
    item_types: Tuple[str, ...]
    exclude_types: Tuple[str, ...]
    runes: Tuple[RuneRef, ...]
    properties: Tuple[TxtProperty, ...]


@dataclass(slots=True, frozen=True)
class UniqueItem:
    index: str
    id: int
    version: int
    enabled: bool
    level: int
    level_req: int
    item_code: str
    item_name: str
    properties: Tuple[TxtProperty, ...]
    resolved_properties: Tuple[str, ...] = ()
    is_ancient_coupon: bool = False


@dataclass(slots=True, frozen=True)
class PartialBonus:
    item_count: int
    properties: Tuple[TxtProperty, ...]


@dataclass(slots=True, frozen=True)
class ItemSet:
    index: str
    name: str
    partial_bonuses: Tuple[PartialBonus, ...]
    full_set_bonuses: Tuple[TxtProperty, ...]


@dataclass(slots=True, frozen=True)
class SetItemBonus:
    slot: int
    property_a: Optional[TxtProperty]
    property_b: Optional[TxtProperty]


@dataclass(slots=True, frozen=True)
class SetItem:
    index: str
    id: int
    set_name: str
    item_code: str
    item_name: str
    level: int
    level_req: int
    properties: Tuple[TxtProperty, ...]
    partial_bonuses: Tuple[SetItemBonus, ...]


@dataclass(slots=True, frozen=True)
class ItemType:
    code: str
    type: str
    name: str


@dataclass(slots=True, frozen=True)
class ItemTypeDef:
    code: str
    name: str
    equiv1: str
    equiv2: str
    store_page: str


@dataclass(slots=True, frozen=True)
class Monster:
    hc_idx: int
    name_str: str


@dataclass(slots=True, frozen=True)
class Skill:
    skill: str
    char_class: str


# ---------------------------------------------------------------------------
# HTML sourced records (gems.htm / runewords.htm)
# ---------------------------------------------------------------------------
@dataclass(slots=True, frozen=True)
class Affix:
    raw_text: str
    pattern: str
    value: AffixValue
    value_type: str  # flat | percent | range | none


@dataclass(slots=True, frozen=True)
class AffixPattern:
    pattern: str
    value_type: str


@dataclass(slots=True, frozen=True)
class SocketableBonuses:
    weapons_gloves: Tuple[Affix, ...] = ()
    helms_boots: Tuple[Affix, ...] = ()
    armor_shields_belts: Tuple[Affix, ...] = ()


@dataclass(slots=True, frozen=True)
class Gem:
    name: str
    type: str
    quality: str
    color: str
    req_level: int
    bonuses: SocketableBonuses = field(default_factory=SocketableBonuses)


@dataclass(slots=True, frozen=True)
class Crystal:
    name: str
    type: str
    quality: str
    color: str
    req_level: int
    bonuses: SocketableBonuses = field(default_factory=SocketableBonuses)


@dataclass(slots=True, frozen=True)
class LodRune:
    name: str
    order: int
    tier: int
    req_level: int
    points: Optional[int] = None
    bonuses: SocketableBonuses = field(default_factory=SocketableBonuses)


@dataclass(slots=True, frozen=True)
class KanjiRune:
    name: str
    req_level: int
    bonuses: SocketableBonuses = field(default_factory=SocketableBonuses)


@dataclass(slots=True, frozen=True)
class EsrRune:
    name: str
    order: int
    tier: int
    color: str
    req_level: int
    points: Optional[int] = None
    bonuses: SocketableBonuses = field(default_factory=SocketableBonuses)


@dataclass(slots=True, frozen=True)
class TierPointTotal:
    tier: int
    category: str  # esr_runes | lod_runes
    total_points: int


@dataclass(slots=True, frozen=True)
class Runeword:
    name: str
    variant: int
    sockets: int
    runes: Tuple[str, ...]
    allowed_items: Tuple[str, ...]
    excluded_items: Tuple[str, ...] = ()
    affixes: Tuple[Affix, ...] = ()
    tier_point_totals: Tuple[TierPointTotal, ...] = ()


@dataclass(slots=True, frozen=True)
class ChangelogVersion:
    version: str
    full_string: str
    date: str


@dataclass(slots=True)
class GameDataSnapshot:
    """Everything one sync round parsed, ready for a single atomic write."""

    properties: List[PropertyDef] = field(default_factory=list)
    socketables: List[Socketable] = field(default_factory=list)
    txt_runewords: List[TxtRuneword] = field(default_factory=list)
    unique_items: List[UniqueItem] = field(default_factory=list)
    sets: List[ItemSet] = field(default_factory=list)
    set_items: List[SetItem] = field(default_factory=list)
    item_types: List[ItemType] = field(default_factory=list)
    item_type_defs: List[ItemTypeDef] = field(default_factory=list)
    monsters: List[Monster] = field(default_factory=list)
    skills: List[Skill] = field(default_factory=list)
    gems: List[Gem] = field(default_factory=list)
    crystals: List[Crystal] = field(default_factory=list)
    lod_runes: List[LodRune] = field(default_factory=list)
    kanji_runes: List[KanjiRune] = field(default_factory=list)
    esr_runes: List[EsrRune] = field(default_factory=list)
    runewords: List[Runeword] = field(default_factory=list)
    affixes: List[AffixPattern] = field(default_factory=list)

    def counts(self) -> Dict[str, int]:
        return {name: len(getattr(self, name)) for name in self.__dataclass_fields__}

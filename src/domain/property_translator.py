"""Translate (code, param, min, max) modifiers into human readable text.

Tooltip templates come from properties.txt (``*Tooltip``). ``#`` is replaced
by the rolled value (``min`` or ``min-max``); the parameter either replaces the
first ``[...]`` placeholder or is appended in parentheses. Codes without a
tooltip fall back to a raw ``code param: value`` rendering.

Optional lookups enrich the parameter:
 - ``monster_names`` resolves the numeric monster id of reanimate properties
 - ``skill_classes`` resolves ``[Class]`` placeholders for class skill bonuses
Missing keys leave the raw parameter in place.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, List, Mapping, Optional

from .models import PropertyDef, TxtProperty

FALLBACK_TOOLTIPS: Mapping[str, str] = {
    "strpercent": "+#% Bonus to Strength",
    "dexpercent": "+#% Bonus to Dexterity",
    "vitpercent": "+#% Bonus to Vitality",
    "enepercent": "+#% Bonus to Energy",
}

CHAR_CLASS_NAMES: Mapping[str, str] = {
    "ama": "Amazon",
    "sor": "Sorceress",
    "nec": "Necromancer",
    "pal": "Paladin",
    "bar": "Barbarian",
    "dru": "Druid",
    "ass": "Assassin",
    "": "",
}

REANIMATE_CODES = frozenset({"reanimate"})
_PLACEHOLDER_RE = re.compile(r"\[.*?\]")


@dataclass(slots=True, frozen=True)
class TranslatedProperty:
    text: str
    raw_code: str
    param: str
    min: int
    max: int


class PropertyTranslator:
    def __init__(
        self,
        properties: Iterable[PropertyDef],
        *,
        monster_names: Optional[Mapping[int, str]] = None,
        skill_classes: Optional[Mapping[str, str]] = None,
    ) -> None:
        self._defs = {p.code: p for p in properties}
        self._monsters = monster_names or {}
        self._skill_classes = skill_classes or {}

    def has_property(self, code: str) -> bool:
        return code in self._defs

    def get_definition(self, code: str) -> Optional[PropertyDef]:
        return self._defs.get(code)

    def translate(self, prop: TxtProperty) -> TranslatedProperty:
        definition = self._defs.get(prop.code)
        tooltip = definition.tooltip if definition else FALLBACK_TOOLTIPS.get(prop.code)
        text = self._format_tooltip(tooltip, prop) if tooltip else self._format_raw(prop)
        return TranslatedProperty(
            text=text, raw_code=prop.code, param=prop.param, min=prop.min, max=prop.max
        )

    def translate_all(self, props: Iterable[TxtProperty]) -> List[TranslatedProperty]:
        return [self.translate(p) for p in props]

    # ------------------------------------------------------------------
    def _display_param(self, prop: TxtProperty) -> str:
        if prop.code in REANIMATE_CODES and prop.param.isdecimal():
            return self._monsters.get(int(prop.param), prop.param)
        return prop.param

    def _format_tooltip(self, tooltip: str, prop: TxtProperty) -> str:
        text = tooltip
        if prop.min == prop.max:
            text = text.replace("#", str(prop.min), 1)
        elif prop.min != 0 or prop.max != 0:
            text = text.replace("#", f"{prop.min}-{prop.max}", 1)

        if "[Class]" in text and prop.param in self._skill_classes:
            class_name = CHAR_CLASS_NAMES.get(self._skill_classes[prop.param], "")
            if class_name:
                text = text.replace("[Class]", class_name)

        param = self._display_param(prop)
        if param:
            if "[" in text:
                text = _PLACEHOLDER_RE.sub(lambda _m: param, text, count=1)
            elif param not in text:
                text = f"{text} ({param})"
        return text

    def _format_raw(self, prop: TxtProperty) -> str:
        text = prop.code
        if prop.param:
            text += f" {self._display_param(prop)}"
        if prop.min == prop.max and prop.min != 0:
            text += f": {prop.min}"
        elif prop.min != 0 or prop.max != 0:
            text += f": {prop.min}-{prop.max}"
        return text


def get_char_class_name(code: str) -> str:
    return CHAR_CLASS_NAMES.get(code, "")


__all__ = [
    "FALLBACK_TOOLTIPS",
    "CHAR_CLASS_NAMES",
    "TranslatedProperty",
    "PropertyTranslator",
    "get_char_class_name",
]

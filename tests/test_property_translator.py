from __future__ import annotations

from domain.models import PropertyDef, TxtProperty
from domain.property_translator import PropertyTranslator


DEFS = [
    PropertyDef("str", "+# to Strength"),
    PropertyDef("oskill", "+# to [Skill]", "Skill"),
    PropertyDef("skilltab", "+# to [Class] Skill Levels", "Skill"),
    PropertyDef("reanimate", "#% Reanimate as: [Monster]", "Monster"),
    PropertyDef("charged", "Level # Charges", ""),
]


def _t(**kwargs) -> PropertyTranslator:
    return PropertyTranslator(DEFS, **kwargs)


def test_single_value_and_range():
    tr = _t()
    assert tr.translate(TxtProperty("str", "", 5, 5)).text == "+5 to Strength"
    assert tr.translate(TxtProperty("str", "", 5, 10)).text == "+5-10 to Strength"


def test_param_replaces_first_placeholder():
    assert _t().translate(TxtProperty("oskill", "Teleport", 1, 1)).text == "+1 to Teleport"


def test_param_appended_without_placeholder():
    assert _t().translate(TxtProperty("charged", "Frost Nova", 3, 3)).text == "Level 3 Charges (Frost Nova)"


def test_fallback_tooltip_table():
    assert _t().translate(TxtProperty("dexpercent", "", 4, 4)).text == "+4% Bonus to Dexterity"


def test_unknown_code_raw_format():
    tr = _t()
    assert tr.translate(TxtProperty("weird", "p", 2, 4)).text == "weird p: 2-4"
    assert tr.translate(TxtProperty("weird", "", 3, 3)).text == "weird: 3"
    assert tr.translate(TxtProperty("flag", "", 0, 0)).text == "flag"


def test_reanimate_monster_lookup_and_miss():
    tr = _t(monster_names={5: "Zombie"})
    assert tr.translate(TxtProperty("reanimate", "5", 10, 10)).text == "10% Reanimate as: Zombie"
    assert tr.translate(TxtProperty("reanimate", "9", 10, 10)).text == "10% Reanimate as: 9"


def test_class_placeholder_resolved_from_skill():
    tr = _t(skill_classes={"Blizzard": "sor"})
    text = tr.translate(TxtProperty("skilltab", "Blizzard", 2, 2)).text
    assert text.startswith("+2 to Sorceress Skill Levels")


def test_translate_all_keeps_raw_fields():
    out = _t().translate_all([TxtProperty("str", "", 1, 1), TxtProperty("zzz", "", 0, 0)])
    assert [p.raw_code for p in out] == ["str", "zzz"]
    assert out[0].min == 1 and out[1].text == "zzz"
    assert _t().has_property("str") and not _t().has_property("zzz")
    assert _t().get_definition("oskill").parameter == "Skill"

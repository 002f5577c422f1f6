from __future__ import annotations

from domain.property_translator import get_char_class_name
from parsing import lookup_parser
from tests.factories import CUBEMAIN_TXT, MONSTATS_TXT, SKILLS_TXT, tsv


def test_coupon_items_from_cube_recipes():
    assert lookup_parser.parse_ancient_coupon_items(CUBEMAIN_TXT) == {"The Gnasher"}


def test_coupon_items_empty_input():
    assert lookup_parser.parse_ancient_coupon_items("") == set()
    assert lookup_parser.parse_ancient_coupon_items(tsv(("description", "output"))) == set()


def test_coupon_outputs_skip_only_ascii_digit_codes():
    text = tsv(("description", "output"), ("Coupon", "²Foo"), ("Coupon", "0xyz"))
    assert lookup_parser.parse_ancient_coupon_items(text) == {"²Foo"}


def test_monsters_exclude_index_zero_and_nameless():
    monsters = lookup_parser.parse_monstats_txt(MONSTATS_TXT)
    assert [(m.hc_idx, m.name_str) for m in monsters] == [(1, "Skeleton"), (5, "Zombie")]
    assert lookup_parser.build_monster_name_map(monsters) == {1: "Skeleton", 5: "Zombie"}


def test_skills_skip_section_marker_and_unknown_classes():
    skills = lookup_parser.parse_skills_txt(SKILLS_TXT)
    assert [s.skill for s in skills] == ["Attack", "Blizzard", "Zeal", "Odd"]
    assert skills[-1].char_class == ""
    assert lookup_parser.build_skill_class_map(skills) == {"Blizzard": "sor", "Zeal": "pal"}


def test_char_class_names():
    assert get_char_class_name("ass") == "Assassin"
    assert get_char_class_name("") == ""
    assert get_char_class_name("xyz") == ""

from __future__ import annotations

from bs4 import BeautifulSoup

from parsing import affix_parser
from parsing.socketable_html_parser import (
    categorize_socketables,
    extract_all_socketable_names,
    is_esr_rune_name,
    is_lod_rune_name,
    lod_rune_order,
    lod_rune_tier,
    parse_crystals_html,
    parse_esr_runes_html,
    parse_gems_html,
    parse_kanji_runes_html,
    parse_lod_runes_html,
)
from tests.factories import GEMS_HTML, page, socketable_block


def test_gems_type_quality_and_bonuses():
    gems = parse_gems_html(GEMS_HTML)
    assert [(g.name, g.type, g.quality) for g in gems] == [
        ("Chipped Amethyst", "Amethyst", "Chipped"),
        ("Amethyst", "Amethyst", "Standard"),
        ("Flawless Skull", "Skull", "Flawless"),
    ]
    chipped = gems[0]
    assert chipped.color == "#FF00FF"
    assert chipped.req_level == 1
    assert [a.raw_text for a in chipped.bonuses.weapons_gloves] == ["+10 to Attack Rating"]
    assert [a.raw_text for a in chipped.bonuses.helms_boots] == ["+3 to Strength"]
    assert [a.raw_text for a in chipped.bonuses.armor_shields_belts] == ["+8 to Defense"]
    assert gems[1].req_level == 12


def test_crystals():
    crystals = parse_crystals_html(GEMS_HTML)
    assert len(crystals) == 1
    assert crystals[0].type == "Shadow Quartz" and crystals[0].quality == "Chipped"


def test_lod_runes_uncolored_sorted_by_order():
    runes = parse_lod_runes_html(GEMS_HTML)
    assert [(r.name, r.order, r.tier) for r in runes] == [("El Rune", 1, 1), ("Tir Rune", 3, 1)]
    assert runes[0].points is None
    assert [a.raw_text for a in runes[0].bonuses.weapons_gloves] == [
        "+50 to Attack Rating",
        "+1 to Light Radius",
    ]


def test_lod_rune_tiers():
    assert lod_rune_tier(lod_rune_order("Dol Rune")) == 1
    assert lod_rune_tier(lod_rune_order("Hel Rune")) == 2
    assert lod_rune_tier(lod_rune_order("Gul Rune")) == 2
    assert lod_rune_tier(lod_rune_order("Vex Rune")) == 3
    assert lod_rune_order("Zod Rune") == 33
    assert lod_rune_order("Moon Rune") == 0


def test_kanji_runes_are_blue():
    runes = parse_kanji_runes_html(GEMS_HTML)
    assert [r.name for r in runes] == ["Moon Rune"]
    assert runes[0].req_level == 40


def test_esr_runes_color_tier_points_and_order():
    runes = parse_esr_runes_html(GEMS_HTML)
    # "Ko Rune" shares its name with a classic rune and is not an ESR rune
    assert [(r.name, r.tier, r.order, r.points) for r in runes] == [
        ("I Rune", 1, 1, None),
        ("Ki Rune", 2, 2, 3),
    ]
    assert runes[0].color == "WHITE"


def test_esr_name_predicate():
    assert is_esr_rune_name("Ri Rune", "RED")
    assert not is_esr_rune_name("Ri Rune", "BLUE")
    assert not is_esr_rune_name("Ri Rune", None)
    assert not is_esr_rune_name("El Rune", "WHITE")
    assert not is_esr_rune_name("Amethyst", "RED")
    assert is_lod_rune_name("Ber Rune") and not is_lod_rune_name("Ber")


def test_page_without_headers_yields_nothing():
    html = "<html><body><p>maintenance</p></body></html>"
    assert parse_gems_html(html) == []
    assert parse_esr_runes_html(html) == []
    assert parse_lod_runes_html(html) == []


def test_missing_bonus_row_gives_empty_bonuses():
    html = '<table><tr><td colspan="3"><b><font color="RED">Ri Rune</font></b> Req Lvl: 3</td></tr></table>'
    rune = parse_esr_runes_html(html)[0]
    assert rune.req_level == 3
    assert rune.bonuses.weapons_gloves == () and rune.bonuses.armor_shields_belts == ()


def test_completeness_helpers_cover_every_header():
    items = extract_all_socketable_names(GEMS_HTML)
    assert len(items) == 10
    groups = categorize_socketables(items)
    assert groups["lod_runes"] == ["Tir Rune", "El Rune"]
    assert groups["kanji_runes"] == ["Moon Rune"]
    assert groups["esr_runes"] == ["I Rune", "Ki Rune (3 points)", "Ko Rune"]
    assert groups["non_runes"] == ["Chipped Amethyst", "Amethyst", "Flawless Skull", "Chipped Shadow Quartz"]


def test_affix_helpers():
    affix = affix_parser.make_affix("+20% Enhanced Damage")
    assert affix.pattern == "#% Enhanced Damage"
    assert affix.value == 20 and affix.value_type == "percent"
    ranged = affix_parser.make_affix("Adds 10-20 Cold Damage")
    assert ranged.value == (10, 20) and ranged.value_type == "range"
    flat = affix_parser.make_affix("-15 to Enemy Defense")
    assert flat.value == 15 and flat.value_type == "flat" and flat.pattern == "# to Enemy Defense"
    assert affix_parser.make_affix("Indestructible").value is None
    assert affix_parser.make_affix("Indestructible").value_type == "none"


def test_runeword_affixes_stop_at_double_break():
    cell = BeautifulSoup("<td>+1 to A<br>+2 to B<br><br>+3 to C</td>", "html.parser").td
    assert [a.raw_text for a in affix_parser.parse_runeword_affixes(cell)] == ["+1 to A", "+2 to B"]
    assert [a.raw_text for a in affix_parser.parse_affixes(cell)] == ["+1 to A", "+2 to B", "+3 to C"]


def test_affix_text_entities_and_tags_cleaned():
    html = page(socketable_block("Ri Rune", color="RED", weapons=["<i>+5&nbsp;to&amp;Life</i>"]))
    rune = parse_esr_runes_html(html)[0]
    assert rune.bonuses.weapons_gloves[0].raw_text == "+5 to&Life"


def test_normalize_rune_name():
    assert affix_parser.normalize_rune_name("I Rune (1 points)") == ("I Rune", 1)
    assert affix_parser.normalize_rune_name(" Ru Rune ") == ("Ru Rune", None)
    assert affix_parser.normalize_rune_name("Ki Rune (1 point)") == ("Ki Rune", 1)


def test_header_cell_helpers_and_bonus_rows():
    soup = BeautifulSoup(
        page(socketable_block("Moon Rune", color="blue", req=40, armor=["+1 to All Skills"])), "html.parser"
    )
    header = soup.find("td", attrs={"colspan": "3"})
    assert affix_parser.get_item_name(header) == "Moon Rune"
    assert affix_parser.get_inner_font_color(header) == "BLUE"
    assert affix_parser.parse_req_level(header.get_text()) == 40
    bonuses = affix_parser.parse_bonuses(header.find_parent("tr"))
    assert bonuses.weapons_gloves == ()
    assert [a.raw_text for a in bonuses.armor_shields_belts] == ["+1 to All Skills"]

    plain = BeautifulSoup(page(socketable_block("Tir Rune")), "html.parser").find("td", attrs={"colspan": "3"})
    assert affix_parser.get_item_name(plain) == "Tir Rune"
    assert affix_parser.get_inner_font_color(plain) is None
    # header row without the two following rows
    assert affix_parser.parse_bonuses(None).helms_boots == ()

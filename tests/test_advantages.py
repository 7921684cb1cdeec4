import logging

import pytest

from sheetsmith.character_sheet.model import (
    Advantage,
    CharacterData,
    ChoiceSlot,
    ResolvedReferences,
    SourceType,
    TraitChoice,
)
from sheetsmith.character_sheet.services.advantages import (
    aggregate_advantages,
    brightness,
    build_style,
    parse_hex_color,
    sort_advantages,
)
from sheetsmith.character_sheet.services.traits import collect_traits
from sheetsmith.core.errors import UnknownCatalogKeyError
from sheetsmith.core.services.diagnostics import Diagnostics

from conftest import make_document, make_trait_data


def test_white_background_gets_black_text():
    assert build_style("#FFFFFF") == "background-color: #FFFFFF;color: black;"


def test_black_background_gets_white_text():
    assert build_style("#000000") == "background-color: #000000;color: white;"


def test_brightness_boundary():
    assert brightness(125, 125, 125) == 125
    assert build_style("#7D7D7D").endswith("color: white;")
    assert build_style("#7E7E7E").endswith("color: black;")


def test_short_hex_and_missing_color():
    assert parse_hex_color("#fff") == (255, 255, 255)
    assert parse_hex_color("teal") is None
    assert build_style(None) is None
    assert build_style("") is None


def test_unparsable_color_keeps_background_only():
    diagnostics = Diagnostics()

    assert build_style("teal", diagnostics) == "background-color: teal;"
    assert len(diagnostics) == 1


def test_manual_entries(catalog):
    data = CharacterData(proficiencies=["stealth"], languages=["common"])

    result = aggregate_advantages(data, (), (), catalog)

    assert result.proficiencies == (
        Advantage(source="Manual", source_type=SourceType.MANUAL, value="stealth", label="Stealth"),
    )
    assert result.languages[0].style is None
    assert result.resistances == ()
    assert result.save_advantages == ()


def test_unknown_manual_value_is_a_contract_violation(catalog):
    with pytest.raises(UnknownCatalogKeyError) as excinfo:
        aggregate_advantages(CharacterData(resistances=["psychic"]), (), (), catalog)

    assert excinfo.value.key == "psychic"
    assert isinstance(excinfo.value, KeyError)


def test_innate_entries_carry_source_and_style(catalog, sailor, mountain):
    traits = collect_traits(ResolvedReferences(background=sailor, heritage=mountain))

    result = aggregate_advantages(CharacterData(), traits, (), catalog)

    (athletics,) = result.proficiencies
    assert athletics == Advantage(
        source="Sailor (Sea Legs)",
        source_type=SourceType.INNATE,
        value="athletics",
        label="Athletics",
        source_id="bg-sailor",
        style="background-color: #202020;color: white;",
    )
    (dwarvish,) = result.languages
    assert dwarvish.style == "background-color: #FFFFFF;color: black;"


def test_unknown_innate_key_is_logged_and_skipped(catalog, mountain, caplog):
    traits = collect_traits(ResolvedReferences(heritage=mountain))
    diagnostics = Diagnostics()

    with caplog.at_level(logging.WARNING, logger="sheetsmith"):
        result = aggregate_advantages(CharacterData(), traits, (), catalog, diagnostics)

    assert [a.value for a in result.resistances] == ["poison"]
    assert diagnostics.messages == ("Unknown type acid in Mountain Clan (Hardy)",)
    assert "Unknown type acid" in caplog.text


def _choice_with(category, values, color="#000000"):
    slot = ChoiceSlot(
        key="pick",
        label="Pick",
        category=category,
        options=frozenset(values),
        chosen_values=frozenset(values),
    )
    return TraitChoice(id="t", name="Ports of Call", source="Sailor", source_id="bg-sailor", color=color, choices=(slot,))


def test_choice_entries(catalog):
    choice = _choice_with("LANGUAGE_TYPES", ["giant", "elvish"])

    result = aggregate_advantages(CharacterData(), (), (choice,), catalog)

    assert [(a.label, a.source_type, a.source) for a in result.languages] == [
        ("Elvish", SourceType.CHOICE, "Sailor (Ports of Call)"),
        ("Giant", SourceType.CHOICE, "Sailor (Ports of Call)"),
    ]
    assert result.languages[0].style == "background-color: #000000;color: white;"
    assert result.proficiencies == ()


def test_choice_values_only_land_in_their_category(catalog):
    choice = _choice_with("DAMAGE_TYPES", ["fire"])

    result = aggregate_advantages(CharacterData(), (), (choice,), catalog)

    assert [a.value for a in result.resistances] == ["fire"]
    assert result.languages == ()


def test_unknown_chosen_value_is_skipped(catalog):
    diagnostics = Diagnostics()
    choice = _choice_with("SAVE_TYPES", ["charmed", "sleep"])

    result = aggregate_advantages(CharacterData(), (), (choice,), catalog, diagnostics)

    assert [a.value for a in result.save_advantages] == ["charmed"]
    assert diagnostics.messages == ("Unknown type sleep in Sailor (Ports of Call)",)


def test_tiers_stack_without_cross_tier_dedup(catalog, sailor):
    traits = collect_traits(ResolvedReferences(background=sailor))
    choice = _choice_with("PROFICIENCY_TYPES", ["athletics"])

    result = aggregate_advantages(CharacterData(proficiencies=["athletics"]), traits, (choice,), catalog)

    assert [a.source_type for a in result.proficiencies] == [SourceType.MANUAL, SourceType.INNATE, SourceType.CHOICE]
    assert {a.value for a in result.proficiencies} == {"athletics"}


def test_identical_entries_collapse(catalog):
    doc = make_document("bg", "Twin", "background", traits=[make_trait_data("Echo", languages=["giant", "giant"])])
    traits = collect_traits(ResolvedReferences(background=doc))

    result = aggregate_advantages(CharacterData(languages=["giant", "giant"]), traits, (), catalog)

    assert len(result.languages) == 2


def test_sets_are_sorted_by_label(catalog):
    data = CharacterData(languages=["giant", "common", "elvish", "dwarvish"])

    result = aggregate_advantages(data, (), (), catalog)

    assert [a.label for a in result.languages] == ["Common", "Dwarvish", "Elvish", "Giant"]


def test_sort_is_case_and_accent_insensitive():
    entries = [
        Advantage(source="Manual", source_type=SourceType.MANUAL, value=v, label=v)
        for v in ("zebra", "Émeraude", "apple", "Banana")
    ]

    assert [a.label for a in sort_advantages(entries)] == ["apple", "Banana", "Émeraude", "zebra"]

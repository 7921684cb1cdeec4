import pytest

from sheetsmith.compendium.catalog import CatalogEntry, Category, RuleCatalog


def test_lookup_accepts_enum_and_name(catalog):
    by_enum = catalog.lookup(Category.LANGUAGE_TYPES, "elvish")
    by_name = catalog.lookup("language_types", "elvish")

    assert by_enum == CatalogEntry(key="elvish", label="Elvish")
    assert by_name == by_enum


def test_lookup_unknown_key_or_category(catalog):
    assert catalog.lookup(Category.DAMAGE_TYPES, "psychic") is None
    assert catalog.lookup("SKILL_TYPES", "arcana") is None


def test_keys_preserve_authoring_order(catalog):
    assert catalog.keys(Category.SAVE_TYPES) == ("charmed", "frightened")
    assert catalog.keys("MISSING") == ()


def test_plain_string_entries_and_extra_fields():
    catalog = RuleCatalog.from_payload({"SKILL_TYPES": {"arcana": "Arcana", "history": {"label": "History", "ability": "int"}}})

    assert catalog.lookup("SKILL_TYPES", "arcana").label == "Arcana"
    history = catalog.lookup("SKILL_TYPES", "history")
    assert history.label == "History"
    assert history.extra == {"ability": "int"}


def test_invalid_payload_rejected():
    with pytest.raises(ValueError):
        RuleCatalog.from_payload({"SKILL_TYPES": ["arcana"]})


def test_merged_overlay_wins(catalog):
    overlay = RuleCatalog.from_payload({"LANGUAGE_TYPES": {"common": "Trade Common", "orc": "Orc"}})

    merged = catalog.merged(overlay)

    assert merged.lookup(Category.LANGUAGE_TYPES, "common").label == "Trade Common"
    assert merged.lookup(Category.LANGUAGE_TYPES, "orc").label == "Orc"
    assert merged.lookup(Category.LANGUAGE_TYPES, "elvish").label == "Elvish"
    # The base catalog is untouched.
    assert catalog.lookup(Category.LANGUAGE_TYPES, "orc") is None

import math

import pytest

from sheetsmith.character_sheet.model import AbilityScore
from sheetsmith.character_sheet.services.abilities import ability_modifier, derive_abilities


@pytest.mark.parametrize(
    "value, expected",
    [(1, -5), (2, -4), (3, -4), (9, -1), (10, 0), (11, 0), (12, 1), (15, 2), (20, 5), (30, 10)],
)
def test_modifier_table(value, expected):
    assert ability_modifier(value) == expected


def test_modifier_matches_floor_for_full_range():
    for value in range(1, 31):
        assert ability_modifier(value) == math.floor((value - 10) / 2)


def test_derive_abilities_keeps_every_key():
    derived = derive_abilities({"str": 15, "dex": 8, "luck": 11})

    assert derived == {
        "str": AbilityScore(value=15, modifier=2),
        "dex": AbilityScore(value=8, modifier=-1),
        "luck": AbilityScore(value=11, modifier=0),
    }


def test_derive_abilities_empty():
    assert derive_abilities({}) == {}

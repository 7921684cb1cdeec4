"""Ability score modifiers."""

from __future__ import annotations

from typing import Dict, Mapping

from sheetsmith.character_sheet.model import AbilityScore


def ability_modifier(value: int) -> int:
    """
    1 = -5, 2-3 = -4, 4-5 = -3, 6-7 = -2, 8-9 = -1, 10-11 = 0,
    12-13 = +1, 14-15 = +2, 16-17 = +3, 18-19 = +4, 20-21 = +5
    """
    # Floor division rounds toward negative infinity, matching floor((v - 10) / 2).
    return (int(value) - 10) // 2


def derive_abilities(raw_scores: Mapping[str, int]) -> Dict[str, AbilityScore]:
    return {key: AbilityScore(value=int(value), modifier=ability_modifier(value)) for key, value in raw_scores.items()}


__all__ = ["ability_modifier", "derive_abilities"]

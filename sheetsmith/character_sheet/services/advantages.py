"""Proficiencies, resistances, languages and save advantages with provenance."""

from __future__ import annotations

import logging
import re
from typing import Dict, Iterable, List, Optional, Tuple

from sheetsmith.character_sheet.model import (
    Advantage,
    AdvantageSets,
    CharacterData,
    SourceType,
    Trait,
    TraitChoice,
    make_advantage,
)
from sheetsmith.compendium.catalog import Category, RuleCatalog, category_name
from sheetsmith.core.errors import UnknownCatalogKeyError
from sheetsmith.core.services.diagnostics import Diagnostics
from sheetsmith.core.text import locale_key

logger = logging.getLogger(__name__)

# (catalog category, attribute name on CharacterData / InnateGrants / AdvantageSets)
ADVANTAGE_CATEGORIES: Tuple[Tuple[Category, str], ...] = (
    (Category.PROFICIENCY_TYPES, "proficiencies"),
    (Category.DAMAGE_TYPES, "resistances"),
    (Category.LANGUAGE_TYPES, "languages"),
    (Category.SAVE_TYPES, "save_advantages"),
)

_HEX_COLOR = re.compile(r"^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


def brightness(red: int, green: int, blue: int) -> int:
    """Perceived brightness on a 0-255 scale."""
    return round((red * 299 + green * 587 + blue * 114) / 1000)


def parse_hex_color(color: str) -> Optional[Tuple[int, int, int]]:
    match = _HEX_COLOR.match(color.strip())
    if not match:
        return None
    digits = match.group(1)
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)
    return int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16)


def build_style(color: Optional[str], diagnostics: Diagnostics | None = None) -> Optional[str]:
    """Background style for a trait color, with black or white text for contrast."""

    if not color:
        return None
    style = f"background-color: {color};"
    rgb = parse_hex_color(color)
    if rgb is None:
        if diagnostics is None:
            diagnostics = Diagnostics(logger)
        diagnostics.log(f"Cannot compute text color for {color!r}")
        return style
    return style + f"color: {'black' if brightness(*rgb) > 125 else 'white'};"


def aggregate_advantages(
    data: CharacterData,
    traits: Iterable[Trait],
    trait_choices: Iterable[TraitChoice],
    catalog: RuleCatalog,
    diagnostics: Diagnostics | None = None,
) -> AdvantageSets:
    if diagnostics is None:
        diagnostics = Diagnostics(logger)
    traits = tuple(traits)
    trait_choices = tuple(trait_choices)

    merged: Dict[str, Tuple[Advantage, ...]] = {}
    for category, attribute in ADVANTAGE_CATEGORIES:
        entries: List[Advantage] = []
        entries.extend(_manual(getattr(data, attribute), category, catalog))
        for trait in traits:
            entries.extend(_innate(trait, getattr(trait.innate, attribute), category, catalog, diagnostics))
        for choice in trait_choices:
            entries.extend(_chosen(choice, category, catalog, diagnostics))
        merged[attribute] = sort_advantages(entries)
    return AdvantageSets(**merged)


def sort_advantages(entries: Iterable[Advantage]) -> Tuple[Advantage, ...]:
    """Order by label and collapse structurally identical entries."""
    ordered = sorted(entries, key=lambda advantage: locale_key(advantage.label))
    return tuple(dict.fromkeys(ordered))


def _manual(values: Iterable[str], category: Category, catalog: RuleCatalog) -> List[Advantage]:
    result: List[Advantage] = []
    for value in values:
        entry = catalog.lookup(category, value)
        if entry is None:
            raise UnknownCatalogKeyError(category.value, value)
        result.append(make_advantage(value, entry.label, source_type=SourceType.MANUAL))
    return result


def _innate(
    trait: Trait,
    values: Iterable[str],
    category: Category,
    catalog: RuleCatalog,
    diagnostics: Diagnostics,
) -> List[Advantage]:
    result: List[Advantage] = []
    for value in values:
        entry = catalog.lookup(category, value)
        if entry is None:
            diagnostics.log(f"Unknown type {value} in {trait.display_source}")
            continue
        result.append(
            make_advantage(
                value,
                entry.label,
                source_type=SourceType.INNATE,
                source=trait.display_source,
                source_id=trait.source_id,
                style=build_style(trait.color, diagnostics),
            )
        )
    return result


def _chosen(
    choice: TraitChoice,
    category: Category,
    catalog: RuleCatalog,
    diagnostics: Diagnostics,
) -> List[Advantage]:
    result: List[Advantage] = []
    for slot in choice.choices:
        if not slot.category or category_name(slot.category) != category.value:
            continue
        for value in sorted(slot.chosen_values):
            entry = catalog.lookup(category, value)
            if entry is None:
                diagnostics.log(f"Unknown type {value} in {choice.display_source}")
                continue
            result.append(
                make_advantage(
                    value,
                    entry.label,
                    source_type=SourceType.CHOICE,
                    source=choice.display_source,
                    source_id=choice.source_id,
                    style=build_style(choice.color, diagnostics),
                )
            )
    return result


__all__ = [
    "ADVANTAGE_CATEGORIES",
    "aggregate_advantages",
    "brightness",
    "build_style",
    "parse_hex_color",
    "sort_advantages",
]

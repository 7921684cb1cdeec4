"""Character-builder choices: slot expansion and fulfillment policy."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import FrozenSet, Iterable, List, Optional, Union

from sheetsmith.character_sheet.model import (
    BuilderOption,
    ChoiceSlot,
    FulfillmentMode,
    TraitChoice,
    parse_mode,
)
from sheetsmith.compendium.catalog import RuleCatalog
from sheetsmith.core.errors import InvalidChoiceError, UnknownChoiceSlotError
from sheetsmith.core.services.diagnostics import Diagnostics

logger = logging.getLogger(__name__)


def evaluate_fulfillment(
    choice: TraitChoice,
    catalog: RuleCatalog,
    diagnostics: Diagnostics | None = None,
) -> TraitChoice:
    """Expand a record's builder options into slots and decide if it is complete.

    Existing slots keep the player's selections; their label, category, options
    and amount follow the current configuration. An option without candidate
    values leaves its stored slot as it was and never counts as made.
    """

    if diagnostics is None:
        diagnostics = Diagnostics(logger)
    builder = choice.builder_info
    if builder is None or not builder.options:
        return replace(choice, choices_fulfilled=True)

    slots: List[ChoiceSlot] = []
    made = 0
    for option in builder.options:
        values = _candidate_values(option, catalog)
        if values is None:
            diagnostics.log(
                f"Unknown type {option.values_type or '(none)'} for option {option.key} "
                f"in {choice.display_source}"
            )
            stored = choice.slot(option.key)
            if stored is not None:
                slots.append(stored)
            continue

        slot = _build_slot(option, values, choice.slot(option.key))
        if slot.is_made:
            made += 1
        slots.append(slot)

    fulfilled = _is_fulfilled(builder.mode, made, len(builder.options))
    if fulfilled is None:
        diagnostics.log(f"Unknown choice mode {builder.mode} in {choice.display_source}")
        fulfilled = False

    return replace(choice, choices=tuple(slots), choices_fulfilled=fulfilled)


def select_choice(choice: TraitChoice, slot_key: str, values: Iterable[str]) -> TraitChoice:
    """Record the player's selection for one slot.

    Fulfillment is not recomputed here; the next derivation pass does that.
    """

    slot = choice.slot(slot_key)
    if slot is None:
        raise UnknownChoiceSlotError(choice.id, slot_key)

    chosen = frozenset(values)
    invalid = chosen - slot.options
    if invalid:
        raise InvalidChoiceError(f"{', '.join(sorted(invalid))} not offered by {slot.label}")
    if len(chosen) > slot.amount:
        raise InvalidChoiceError(f"{slot.label} allows {slot.amount} choice(s), got {len(chosen)}")

    updated = replace(slot, chosen_values=chosen)
    return replace(choice, choices=tuple(updated if s.key == slot_key else s for s in choice.choices))


def _candidate_values(option: BuilderOption, catalog: RuleCatalog) -> Optional[FrozenSet[str]]:
    if option.values:
        return frozenset(option.values)
    if option.values_type and catalog.has_category(option.values_type):
        return frozenset(catalog.keys(option.values_type))
    return None


def _build_slot(option: BuilderOption, values: FrozenSet[str], current: Optional[ChoiceSlot]) -> ChoiceSlot:
    chosen: FrozenSet[str] = frozenset()
    if current is not None:
        chosen = current.chosen_values & values
        stale = current.chosen_values - values
        if stale:
            logger.debug("Dropping %s from %s: no longer offered", sorted(stale), option.key)
    return ChoiceSlot(
        key=option.key,
        label=option.label or option.key,
        category=option.category,
        options=values,
        chosen_values=chosen,
        amount=option.amount,
    )


def _is_fulfilled(mode: Union[FulfillmentMode, str], made: int, total: int) -> Optional[bool]:
    mode = parse_mode(mode)
    if mode is FulfillmentMode.ALL:
        return made == total
    if mode is FulfillmentMode.ANY:
        return made > 0
    if mode is FulfillmentMode.CHOOSE_ONE:
        return made == 1
    return None


__all__ = ["evaluate_fulfillment", "select_choice"]

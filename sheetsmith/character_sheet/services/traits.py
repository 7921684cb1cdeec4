"""Trait collection and trait-choice reconciliation."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Dict, Iterable, List, Tuple

from sheetsmith.character_sheet.model import ResolvedReferences, Trait, TraitChoice, make_trait, make_trait_choice

logger = logging.getLogger(__name__)


def collect_traits(references: ResolvedReferences) -> Tuple[Trait, ...]:
    """Copy the traits of the background, heritage and lineage, in that order.

    Traits sharing an id across documents are kept as separate entries.
    """

    traits: List[Trait] = []
    for document in references.trait_sources():
        traits.extend(make_trait(template, document) for template in document.traits)
    return tuple(traits)


def reconcile_trait_choices(traits: Iterable[Trait], existing: Iterable[TraitChoice]) -> Tuple[TraitChoice, ...]:
    """Keep one choice record per active trait id.

    Records for traits that just appeared are created empty; records whose
    trait is gone (e.g. the background changed) are dropped along with any
    selections they held.
    """

    traits = tuple(traits)
    choices: List[TraitChoice] = list(existing)
    known_ids = {choice.id for choice in choices}

    for trait in traits:
        if not trait.id or trait.id in known_ids:
            continue
        choices.append(make_trait_choice(trait))
        known_ids.add(trait.id)

    # First occurrence wins when several documents grant the same trait id.
    active: Dict[str, Trait] = {}
    for trait in traits:
        if trait.id:
            active.setdefault(trait.id, trait)

    kept = tuple(_refresh(choice, active[choice.id]) for choice in choices if choice.id in active)
    dropped = len(choices) - len(kept)
    if dropped:
        logger.debug("Discarded %d trait choice record(s) for inactive traits", dropped)
    return kept


def _refresh(choice: TraitChoice, trait: Trait) -> TraitChoice:
    """Carry the trait's current content onto a stored record, keeping its slots."""

    return replace(
        choice,
        name=trait.name,
        source=trait.source,
        source_id=trait.source_id,
        color=trait.color,
        innate=trait.innate,
        builder_info=trait.builder_info,
    )


__all__ = ["collect_traits", "reconcile_trait_choices"]

"""
Rules Engine for derived character data.
Responsible for rehydrating a full CharacterSheet from CharacterData (decisions).
This enforces the "Event Sourcing" pattern where the Sheet is a read-only result.
"""

from __future__ import annotations

import logging

from sheetsmith.character_sheet.model import CharacterData, CharacterSheet
from sheetsmith.character_sheet.services.abilities import derive_abilities
from sheetsmith.character_sheet.services.advantages import aggregate_advantages
from sheetsmith.character_sheet.services.choices import evaluate_fulfillment
from sheetsmith.character_sheet.services.references import resolve_references
from sheetsmith.character_sheet.services.traits import collect_traits, reconcile_trait_choices
from sheetsmith.compendium.catalog import RuleCatalog
from sheetsmith.compendium.foreign_documents import ForeignDocumentCache
from sheetsmith.compendium.service import Compendium
from sheetsmith.core.services.diagnostics import Diagnostics

logger = logging.getLogger(__name__)

PLAYER_CHARACTER = "pc"


class RulesEngine:
    def __init__(self, documents: ForeignDocumentCache, catalog: RuleCatalog):
        self.documents = documents
        self.catalog = catalog

    @classmethod
    def from_compendium(cls, compendium: Compendium) -> "RulesEngine":
        return cls(ForeignDocumentCache(compendium), compendium.catalog)

    async def hydrate(self, data: CharacterData) -> CharacterSheet:
        """
        Reconstruct a CharacterSheet from raw decisions (CharacterData).
        The only suspension point is the first load of referenced documents.
        """
        if data.actor_type != PLAYER_CHARACTER:
            logger.debug("No derived data for %s actor %s", data.actor_type, data.id)
            return CharacterSheet()

        await self.documents.ensure_loaded()
        return self.derive(data)

    def derive(self, data: CharacterData) -> CharacterSheet:
        """Synchronous derivation pass; the document cache must already be warm."""
        logger.debug("Preparing derived data for %s", data.name or data.id)
        diagnostics = Diagnostics(logger)

        # 1. Ability modifiers
        abilities = derive_abilities(data.abilities)

        # 2. Background, heritage, lineage and class documents
        references = resolve_references(data, self.documents)

        # 3. Traits and the choice records that track them
        traits = collect_traits(references)
        trait_choices = reconcile_trait_choices(traits, data.trait_choices)

        # 4. Character builder choices
        trait_choices = tuple(evaluate_fulfillment(choice, self.catalog, diagnostics) for choice in trait_choices)

        # 5. Proficiencies, resistances, languages, save advantages
        advantages = aggregate_advantages(data, traits, trait_choices, self.catalog, diagnostics)

        return CharacterSheet(
            abilities=abilities,
            references=references,
            traits=traits,
            trait_choices=trait_choices,
            advantages=advantages,
            diagnostics=diagnostics.messages,
        )


__all__ = ["PLAYER_CHARACTER", "RulesEngine"]

"""Derived character state for tabletop role-playing sheets."""

from sheetsmith.character_sheet.model import CharacterData, CharacterSheet
from sheetsmith.character_sheet.services.rules_engine import RulesEngine
from sheetsmith.compendium import Compendium, ForeignDocumentCache, RuleCatalog

__version__ = "0.1.0"

__all__ = [
    "CharacterData",
    "CharacterSheet",
    "Compendium",
    "ForeignDocumentCache",
    "RuleCatalog",
    "RulesEngine",
    "__version__",
]

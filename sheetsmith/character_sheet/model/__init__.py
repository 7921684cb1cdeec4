from .model import (
    ABILITY_NAMES,
    TRACKED_SUBTYPES,
    AbilityScore,
    Advantage,
    AdvantageSets,
    BuilderInfo,
    BuilderOption,
    CharacterSheet,
    FulfillmentMode,
    InnateGrants,
    ResolvedReferences,
    SourceDocument,
    SourceType,
    Trait,
    TraitTemplate,
    make_advantage,
    make_trait,
    parse_mode,
)
from .schema import CharacterData, ChoiceSlot, TraitChoice, make_trait_choice

__all__ = [
    "ABILITY_NAMES",
    "TRACKED_SUBTYPES",
    "AbilityScore",
    "Advantage",
    "AdvantageSets",
    "BuilderInfo",
    "BuilderOption",
    "CharacterData",
    "CharacterSheet",
    "ChoiceSlot",
    "FulfillmentMode",
    "InnateGrants",
    "ResolvedReferences",
    "SourceDocument",
    "SourceType",
    "Trait",
    "TraitChoice",
    "TraitTemplate",
    "make_advantage",
    "make_trait",
    "make_trait_choice",
    "parse_mode",
]

"""
Persistence Schema for Character Data.
This module defines the "Source of Truth" data structures that represent
user decisions, independent of the calculated Character Sheet results.
Trait choices live here because the player's selections must survive
between derivation passes.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple

from sheetsmith.character_sheet.model.model import ABILITY_NAMES, BuilderInfo, InnateGrants, Trait


@dataclass(frozen=True)
class ChoiceSlot:
    """One concrete selection the player has to make for a trait."""

    key: str
    label: str
    category: Optional[str]
    options: FrozenSet[str] = frozenset()
    chosen_values: FrozenSet[str] = frozenset()
    amount: int = 1

    @property
    def is_made(self) -> bool:
        return len(self.chosen_values) == self.amount

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ChoiceSlot:
        key = str(data.get("key", ""))
        return cls(
            key=key,
            label=str(data.get("label") or key),
            category=data.get("category"),
            options=frozenset(str(v) for v in data.get("options") or ()),
            chosen_values=frozenset(str(v) for v in data.get("chosenValues", data.get("chosen_values")) or ()),
            amount=int(data.get("amount", 1) or 1),
        )

    def to_dict(self) -> Dict[str, Any]:
        # Sets are written sorted so saved files diff cleanly.
        return {
            "key": self.key,
            "label": self.label,
            "category": self.category,
            "options": sorted(self.options),
            "chosenValues": sorted(self.chosen_values),
            "amount": self.amount,
        }


@dataclass(frozen=True)
class TraitChoice:
    """The player's in-progress or completed decisions for one trait."""

    id: str
    name: str = ""
    source: str = ""
    source_id: str = ""
    color: Optional[str] = None
    innate: InnateGrants = field(default_factory=InnateGrants)
    builder_info: Optional[BuilderInfo] = None
    choices: Tuple[ChoiceSlot, ...] = ()
    choices_fulfilled: bool = False

    @property
    def display_source(self) -> str:
        return f"{self.source} ({self.name})"

    def slot(self, key: str) -> Optional[ChoiceSlot]:
        return next((slot for slot in self.choices if slot.key == key), None)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TraitChoice:
        color = data.get("color")
        return cls(
            id=str(data.get("id", "")),
            name=str(data.get("name", "")),
            source=str(data.get("source", "")),
            source_id=str(data.get("sourceId", data.get("source_id", ""))),
            color=str(color) if color else None,
            innate=InnateGrants.from_dict(data.get("innate")),
            builder_info=BuilderInfo.from_dict(data.get("builderInfo", data.get("builder_info"))),
            choices=tuple(ChoiceSlot.from_dict(c) for c in data.get("choices") or () if isinstance(c, Mapping)),
            choices_fulfilled=bool(data.get("choicesFulfilled", data.get("choices_fulfilled", False))),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "source": self.source,
            "sourceId": self.source_id,
            "color": self.color,
            "innate": self.innate.to_dict(),
            "builderInfo": self.builder_info.to_dict() if self.builder_info else None,
            "choices": [slot.to_dict() for slot in self.choices],
            "choicesFulfilled": self.choices_fulfilled,
        }


def make_trait_choice(trait: Trait) -> TraitChoice:
    """Start an empty choice record for a trait that just became active."""

    if not trait.id:
        raise ValueError(f"Trait {trait.name!r} has no id and cannot carry choices")
    return TraitChoice(
        id=trait.id,
        name=trait.name,
        source=trait.source,
        source_id=trait.source_id,
        color=trait.color,
        innate=trait.innate,
        builder_info=trait.builder_info,
        choices=(),
        choices_fulfilled=False,
    )


def _default_abilities() -> Dict[str, int]:
    return {name: 10 for name in ABILITY_NAMES}


@dataclass
class CharacterData:
    """
    The root Save File object.
    Contains ONLY decisions, no computed results.
    """
    version: str = "1.0"
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    name: str = ""
    actor_type: str = "pc"

    # Raw scores, e.g. {"str": 15, "dex": 14, ...}
    abilities: Dict[str, int] = field(default_factory=_default_abilities)

    # Compendium document ids
    background: Optional[str] = None
    heritage: Optional[str] = None
    lineage: Optional[str] = None
    class_id: Optional[str] = None

    # Manually entered advantages (catalog keys)
    proficiencies: List[str] = field(default_factory=list)
    resistances: List[str] = field(default_factory=list)
    languages: List[str] = field(default_factory=list)
    save_advantages: List[str] = field(default_factory=list)

    trait_choices: List[TraitChoice] = field(default_factory=list)

    def with_trait_choices(self, choices: Iterable[TraitChoice]) -> CharacterData:
        """Copy of this record holding the reconciled choices of a derivation pass."""
        return replace(self, trait_choices=list(choices))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> CharacterData:
        return cls(
            version=data.get("version", "1.0"),
            id=data.get("id", str(uuid.uuid4())),
            name=data.get("name", ""),
            actor_type=data.get("type", data.get("actor_type", "pc")),
            abilities={str(k): int(v) for k, v in (data.get("abilities") or _default_abilities()).items()},
            background=data.get("background") or None,
            heritage=data.get("heritage") or None,
            lineage=data.get("lineage") or None,
            class_id=data.get("class", data.get("class_id")) or None,
            proficiencies=_manual_values(data.get("proficiencies")),
            resistances=_manual_values(data.get("resistances")),
            languages=_manual_values(data.get("languages")),
            save_advantages=_manual_values(data.get("saveAdvantages", data.get("save_advantages"))),
            trait_choices=[
                TraitChoice.from_dict(choice)
                for choice in data.get("traitChoices", data.get("trait_choices")) or []
                if isinstance(choice, Mapping)
            ],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "id": self.id,
            "name": self.name,
            "type": self.actor_type,
            "abilities": dict(self.abilities),
            "background": self.background,
            "heritage": self.heritage,
            "lineage": self.lineage,
            "class": self.class_id,
            "proficiencies": list(self.proficiencies),
            "resistances": list(self.resistances),
            "languages": list(self.languages),
            "saveAdvantages": list(self.save_advantages),
            "traitChoices": [choice.to_dict() for choice in self.trait_choices],
        }


def _manual_values(entries: Iterable[Any] | None) -> List[str]:
    # Older saves stored {"value": key} records instead of bare keys.
    values: List[str] = []
    for entry in entries or []:
        if isinstance(entry, Mapping):
            entry = entry.get("value")
        if entry:
            values.append(str(entry))
    return values

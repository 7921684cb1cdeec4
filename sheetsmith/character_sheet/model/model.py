"""Content records read from the compendium and the derived sheet records.

Everything here is rebuilt on each derivation pass. Records are frozen so a
stage can only produce new values, never patch the previous stage's output.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

if TYPE_CHECKING:
    from sheetsmith.character_sheet.model.schema import TraitChoice

ABILITY_NAMES = ("str", "dex", "con", "int", "wis", "cha")

TRACKED_SUBTYPES = ("lineage", "heritage", "background", "talent", "class")


class FulfillmentMode(str, Enum):
    ALL = "ALL"
    ANY = "ANY"
    CHOOSE_ONE = "CHOOSE_ONE"

    def __str__(self) -> str:
        return self.value


def parse_mode(raw: Any) -> Union[FulfillmentMode, str]:
    """Normalise a builder mode; unrecognised modes come back as plain strings."""

    if isinstance(raw, FulfillmentMode):
        return raw
    text = str(raw or "").strip().upper()
    if not text:
        return FulfillmentMode.ALL
    try:
        return FulfillmentMode(text)
    except ValueError:
        return text


class SourceType(str, Enum):
    MANUAL = "manual"
    INNATE = "innate"
    CHOICE = "choice"

    def __str__(self) -> str:
        return self.value


# --- Content records -----------------------------------------------------


@dataclass(frozen=True)
class InnateGrants:
    proficiencies: Tuple[str, ...] = ()
    resistances: Tuple[str, ...] = ()
    languages: Tuple[str, ...] = ()
    save_advantages: Tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> InnateGrants:
        data = data or {}
        return cls(
            proficiencies=_str_tuple(data.get("proficiencies")),
            resistances=_str_tuple(data.get("resistances")),
            languages=_str_tuple(data.get("languages")),
            save_advantages=_str_tuple(data.get("saveAdvantages", data.get("save_advantages"))),
        )

    def to_dict(self) -> Dict[str, List[str]]:
        return {
            "proficiencies": list(self.proficiencies),
            "resistances": list(self.resistances),
            "languages": list(self.languages),
            "saveAdvantages": list(self.save_advantages),
        }


@dataclass(frozen=True)
class BuilderOption:
    """One named option of a trait's builder configuration."""

    key: str
    amount: int = 1
    category: Optional[str] = None
    values: Tuple[str, ...] = ()
    values_type: Optional[str] = None
    label: Optional[str] = None

    @classmethod
    def from_dict(cls, key: str, data: Mapping[str, Any] | None) -> BuilderOption:
        data = data or {}
        amount = data.get("amount")
        category = data.get("category")
        values_type = data.get("valuesType", data.get("values_type"))
        label = data.get("label")
        return cls(
            key=key,
            amount=max(1, int(amount)) if amount is not None else 1,
            category=str(category) if category else None,
            values=_str_tuple(data.get("values")),
            values_type=str(values_type) if values_type else None,
            label=str(label) if label else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"amount": self.amount}
        if self.category:
            payload["category"] = self.category
        if self.values:
            payload["values"] = list(self.values)
        if self.values_type:
            payload["valuesType"] = self.values_type
        if self.label:
            payload["label"] = self.label
        return payload


@dataclass(frozen=True)
class BuilderInfo:
    """Declarative description of the choices a trait asks the player to make.

    Authored as::

        {"mode": "ALL",
         "options": {"additionalLanguage": {"amount": 1, "category": "LANGUAGE_TYPES",
                                            "valuesType": "LANGUAGE_TYPES"}}}
    """

    mode: Union[FulfillmentMode, str] = FulfillmentMode.ALL
    options: Tuple[BuilderOption, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> Optional[BuilderInfo]:
        if not data:
            return None
        raw_options = data.get("options") or {}
        if not isinstance(raw_options, Mapping):
            raise ValueError("builderInfo.options must be a mapping of option key to option")
        options = tuple(BuilderOption.from_dict(str(key), value) for key, value in raw_options.items())
        return cls(mode=parse_mode(data.get("mode")), options=options)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mode": str(self.mode),
            "options": {option.key: option.to_dict() for option in self.options},
        }


@dataclass(frozen=True)
class TraitTemplate:
    name: str
    id: Optional[str] = None
    color: Optional[str] = None
    innate: InnateGrants = field(default_factory=InnateGrants)
    builder_info: Optional[BuilderInfo] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TraitTemplate:
        trait_id = data.get("id")
        color = data.get("color")
        return cls(
            name=str(data.get("name") or ""),
            id=str(trait_id) if trait_id else None,
            color=str(color) if color else None,
            innate=InnateGrants.from_dict(data.get("innate")),
            builder_info=BuilderInfo.from_dict(data.get("builderInfo", data.get("builder_info"))),
        )


@dataclass(frozen=True)
class SourceDocument:
    """A background, heritage, lineage, class or talent from the compendium."""

    id: str
    name: str
    subtype: str
    document_type: str = "Item"
    color: Optional[str] = None
    traits: Tuple[TraitTemplate, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], *, document_type: str = "Item") -> SourceDocument:
        # Exported documents nest gameplay data under "system".
        system = data.get("system") if isinstance(data.get("system"), Mapping) else data
        doc_id = data.get("id", data.get("_id"))
        subtype = data.get("subtype", data.get("type"))
        if not doc_id or not data.get("name") or not subtype:
            raise ValueError("Source documents require 'id', 'name' and 'type'")
        color = system.get("color")
        traits = system.get("traits") or []
        return cls(
            id=str(doc_id),
            name=str(data["name"]),
            subtype=str(subtype),
            document_type=str(data.get("document_type", document_type)),
            color=str(color) if color else None,
            traits=tuple(TraitTemplate.from_dict(trait) for trait in traits if isinstance(trait, Mapping)),
        )


# --- Derived records -----------------------------------------------------


@dataclass(frozen=True)
class AbilityScore:
    value: int
    modifier: int


@dataclass(frozen=True)
class Trait:
    """A trait template attached to a character through one of its documents."""

    name: str
    source: str
    source_id: str
    id: Optional[str] = None
    color: Optional[str] = None
    innate: InnateGrants = field(default_factory=InnateGrants)
    builder_info: Optional[BuilderInfo] = None

    @property
    def display_source(self) -> str:
        return f"{self.source} ({self.name})"


def make_trait(template: TraitTemplate, document: SourceDocument) -> Trait:
    return Trait(
        name=template.name,
        source=document.name,
        source_id=document.id,
        id=template.id,
        color=document.color,
        innate=template.innate,
        builder_info=template.builder_info,
    )


@dataclass(frozen=True)
class Advantage:
    source: str
    source_type: SourceType
    value: str
    label: str
    source_id: Optional[str] = None
    style: Optional[str] = None


def make_advantage(
    value: str,
    label: str,
    *,
    source_type: SourceType,
    source: str = "Manual",
    source_id: Optional[str] = None,
    style: Optional[str] = None,
) -> Advantage:
    return Advantage(
        source=source,
        source_type=source_type,
        value=value,
        label=label,
        source_id=source_id,
        style=style or None,
    )


@dataclass(frozen=True)
class AdvantageSets:
    proficiencies: Tuple[Advantage, ...] = ()
    resistances: Tuple[Advantage, ...] = ()
    languages: Tuple[Advantage, ...] = ()
    save_advantages: Tuple[Advantage, ...] = ()


@dataclass(frozen=True)
class ResolvedReferences:
    background_id: Optional[str] = None
    background: Optional[SourceDocument] = None
    heritage_id: Optional[str] = None
    heritage: Optional[SourceDocument] = None
    lineage_id: Optional[str] = None
    lineage: Optional[SourceDocument] = None
    class_id: Optional[str] = None
    class_document: Optional[SourceDocument] = None

    def trait_sources(self) -> Tuple[SourceDocument, ...]:
        """Documents that contribute traits, in display order."""
        return tuple(doc for doc in (self.background, self.heritage, self.lineage) if doc is not None)


@dataclass(frozen=True)
class CharacterSheet:
    """Read-only result of a derivation pass."""

    abilities: Dict[str, AbilityScore] = field(default_factory=dict, hash=False)
    references: ResolvedReferences = field(default_factory=ResolvedReferences)
    traits: Tuple[Trait, ...] = ()
    trait_choices: Tuple["TraitChoice", ...] = ()
    advantages: AdvantageSets = field(default_factory=AdvantageSets)
    diagnostics: Tuple[str, ...] = ()

    @property
    def background_id(self) -> Optional[str]:
        return self.references.background_id

    @property
    def background(self) -> Optional[SourceDocument]:
        return self.references.background

    @property
    def heritage_id(self) -> Optional[str]:
        return self.references.heritage_id

    @property
    def heritage(self) -> Optional[SourceDocument]:
        return self.references.heritage

    @property
    def lineage_id(self) -> Optional[str]:
        return self.references.lineage_id

    @property
    def lineage(self) -> Optional[SourceDocument]:
        return self.references.lineage

    @property
    def class_id(self) -> Optional[str]:
        return self.references.class_id

    @property
    def class_document(self) -> Optional[SourceDocument]:
        return self.references.class_document

    @property
    def proficiencies(self) -> Tuple[Advantage, ...]:
        return self.advantages.proficiencies

    @property
    def resistances(self) -> Tuple[Advantage, ...]:
        return self.advantages.resistances

    @property
    def languages(self) -> Tuple[Advantage, ...]:
        return self.advantages.languages

    @property
    def save_advantages(self) -> Tuple[Advantage, ...]:
        return self.advantages.save_advantages


def _str_tuple(values: Iterable[Any] | None) -> Tuple[str, ...]:
    if not values or isinstance(values, (str, bytes)):
        return ()
    return tuple(str(value) for value in values)

"""
Pytest configuration and shared fixtures.

Content is built in memory; tests that need files on disk write them under
``tmp_path``.
"""

from typing import Any, Dict, Iterable, List, Optional

import pytest

from sheetsmith.character_sheet.model import SourceDocument
from sheetsmith.compendium.catalog import RuleCatalog
from sheetsmith.compendium.foreign_documents import ForeignDocumentCache
from sheetsmith.compendium.provider import InMemoryDocumentProvider, InMemoryPackage
from sheetsmith.compendium.service import clear_compendium_cache


CATALOG_PAYLOAD: Dict[str, Any] = {
    "PROFICIENCY_TYPES": {
        "athletics": {"label": "Athletics"},
        "stealth": {"label": "Stealth"},
        "smithing": {"label": "Smith's Tools"},
        "P1": {"label": "Perception"},
    },
    "DAMAGE_TYPES": {
        "fire": {"label": "Fire"},
        "cold": {"label": "Cold"},
        "poison": {"label": "Poison"},
    },
    "LANGUAGE_TYPES": {
        "common": {"label": "Common"},
        "elvish": {"label": "Elvish"},
        "dwarvish": {"label": "Dwarvish"},
        "giant": {"label": "Giant"},
    },
    "SAVE_TYPES": {
        "charmed": {"label": "Charmed"},
        "frightened": {"label": "Frightened"},
    },
}


def make_trait_data(
    name: str,
    *,
    trait_id: Optional[str] = None,
    proficiencies: Iterable[str] = (),
    resistances: Iterable[str] = (),
    languages: Iterable[str] = (),
    save_advantages: Iterable[str] = (),
    builder_info: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "name": name,
        "innate": {
            "proficiencies": list(proficiencies),
            "resistances": list(resistances),
            "languages": list(languages),
            "saveAdvantages": list(save_advantages),
        },
    }
    if trait_id:
        data["id"] = trait_id
    if builder_info:
        data["builderInfo"] = builder_info
    return data


def make_document(
    doc_id: str,
    name: str,
    subtype: str,
    *,
    color: Optional[str] = None,
    traits: Iterable[Dict[str, Any]] = (),
) -> SourceDocument:
    return SourceDocument.from_dict(
        {"id": doc_id, "name": name, "type": subtype, "color": color, "traits": list(traits)}
    )


class FlakyPackage(InMemoryPackage):
    """Package whose fetches fail for selected ids."""

    def __init__(self, name: str, documents: Iterable[SourceDocument], failing: Iterable[str]) -> None:
        super().__init__(name, documents)
        self.failing = set(failing)

    async def fetch_by_id(self, document_id: str) -> Optional[SourceDocument]:
        if document_id in self.failing:
            self.fetch_count += 1
            raise OSError(f"cannot read {document_id}")
        return await super().fetch_by_id(document_id)


@pytest.fixture(autouse=True)
def _fresh_compendium_cache():
    clear_compendium_cache()
    yield
    clear_compendium_cache()


@pytest.fixture
def catalog() -> RuleCatalog:
    return RuleCatalog.from_payload(CATALOG_PAYLOAD)


@pytest.fixture
def sailor() -> SourceDocument:
    return make_document(
        "bg-sailor",
        "Sailor",
        "background",
        color="#202020",
        traits=[
            make_trait_data("Sea Legs", trait_id="sea-legs", proficiencies=["athletics"]),
            make_trait_data(
                "Ports of Call",
                trait_id="ports-of-call",
                builder_info={
                    "mode": "ALL",
                    "options": {
                        "language": {"amount": 1, "category": "LANGUAGE_TYPES", "valuesType": "LANGUAGE_TYPES"},
                    },
                },
            ),
        ],
    )


@pytest.fixture
def mountain() -> SourceDocument:
    return make_document(
        "her-mountain",
        "Mountain Clan",
        "heritage",
        color="#FFFFFF",
        traits=[
            make_trait_data("Stone Speech", trait_id="stone-speech", languages=["dwarvish"]),
            make_trait_data("Hardy", resistances=["poison", "acid"]),
        ],
    )


@pytest.fixture
def dwarf() -> SourceDocument:
    return make_document(
        "lin-dwarf",
        "Dwarf",
        "lineage",
        traits=[make_trait_data("Dwarven Resilience", trait_id="resilience", save_advantages=["frightened"])],
    )


@pytest.fixture
def fighter() -> SourceDocument:
    return make_document("cls-fighter", "Fighter", "class")


@pytest.fixture
def documents(sailor, mountain, dwarf, fighter) -> List[SourceDocument]:
    return [sailor, mountain, dwarf, fighter]


@pytest.fixture
def package(documents) -> InMemoryPackage:
    return InMemoryPackage("core-rules", documents)


@pytest.fixture
def provider(package) -> InMemoryDocumentProvider:
    return InMemoryDocumentProvider(packages=[package])


@pytest.fixture
def cache(provider) -> ForeignDocumentCache:
    return ForeignDocumentCache(provider)

"""Document Provider contracts consumed by the foreign-document cache.

A provider exposes a *local* collection (documents loaded directly into the
application) and any number of content *packages* whose documents are fetched
one at a time by id.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Protocol, Sequence

from sheetsmith.character_sheet.model import SourceDocument


@dataclass(frozen=True)
class IndexEntry:
    id: str
    subtype: str
    name: str = ""


class ContentPackage(Protocol):
    name: str
    document_type: str

    def index_entries(self, document_type: str, subtype: str) -> Sequence[IndexEntry]:
        ...

    async def fetch_by_id(self, document_id: str) -> Optional[SourceDocument]:
        ...


class DocumentProvider(Protocol):
    def get_local_collection(self, document_type: str) -> Sequence[SourceDocument]:
        ...

    def list_packages(self) -> Sequence[ContentPackage]:
        ...


class InMemoryPackage:
    """Package backed by already-built documents."""

    def __init__(self, name: str, documents: Iterable[SourceDocument], *, document_type: str = "Item") -> None:
        self.name = name
        self.document_type = document_type
        self._documents: Dict[str, SourceDocument] = {doc.id: doc for doc in documents}
        self.fetch_count = 0

    def index_entries(self, document_type: str, subtype: str) -> List[IndexEntry]:
        if document_type != self.document_type:
            return []
        return [
            IndexEntry(id=doc.id, subtype=doc.subtype, name=doc.name)
            for doc in self._documents.values()
            if doc.subtype == subtype
        ]

    async def fetch_by_id(self, document_id: str) -> Optional[SourceDocument]:
        self.fetch_count += 1
        return self._documents.get(document_id)


class InMemoryDocumentProvider:
    def __init__(
        self,
        local: Iterable[SourceDocument] | None = None,
        packages: Iterable[ContentPackage] | None = None,
    ) -> None:
        self._local: List[SourceDocument] = list(local or [])
        self._packages: List[ContentPackage] = list(packages or [])

    def get_local_collection(self, document_type: str) -> List[SourceDocument]:
        return [doc for doc in self._local if doc.document_type == document_type]

    def list_packages(self) -> List[ContentPackage]:
        return list(self._packages)


__all__ = [
    "ContentPackage",
    "DocumentProvider",
    "InMemoryDocumentProvider",
    "InMemoryPackage",
    "IndexEntry",
]

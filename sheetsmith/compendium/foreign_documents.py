"""Process-wide cache of compendium documents referenced by characters.

Each tracked subtype (lineage, heritage, background, talent, class) is loaded
once into an id-keyed collection sorted by name. Loading is lazy and
single-flight: concurrent derivation passes that find a subtype cold share
one in-flight task instead of fetching the same package entries twice.
"""

from __future__ import annotations

import asyncio
import logging
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from sheetsmith.character_sheet.model import TRACKED_SUBTYPES, SourceDocument
from sheetsmith.compendium.provider import DocumentProvider
from sheetsmith.core.text import locale_key

logger = logging.getLogger(__name__)


class ForeignDocumentCache:
    def __init__(
        self,
        provider: DocumentProvider,
        *,
        document_type: str = "Item",
        subtypes: Sequence[str] = TRACKED_SUBTYPES,
    ) -> None:
        self._provider = provider
        self._document_type = document_type
        self._subtypes = tuple(subtypes)
        self._collections: Dict[str, Dict[str, SourceDocument]] = {}
        self._in_flight: Dict[str, asyncio.Future] = {}
        self._generation = 0

    @property
    def subtypes(self) -> Sequence[str]:
        return self._subtypes

    def is_warm(self, subtype: Optional[str] = None) -> bool:
        if subtype is not None:
            return subtype in self._collections
        return all(name in self._collections for name in self._subtypes)

    async def ensure_loaded(self) -> None:
        """Load every subtype that is not warm yet."""

        cold = [subtype for subtype in self._subtypes if subtype not in self._collections]
        # A load invalidated mid-flight leaves its subtype cold, so check again.
        while cold:
            await asyncio.gather(*(self._load_once(subtype) for subtype in cold))
            cold = [subtype for subtype in self._subtypes if subtype not in self._collections]

    async def load_catalog(self) -> Mapping[str, Mapping[str, SourceDocument]]:
        await self.ensure_loaded()
        return MappingProxyType({subtype: self.collection(subtype) for subtype in self._subtypes})

    async def reload(self) -> Mapping[str, Mapping[str, SourceDocument]]:
        self.invalidate()
        return await self.load_catalog()

    def invalidate(self, subtype: Optional[str] = None) -> None:
        """Forget warm collections; the next pass reloads them."""

        self._generation += 1
        if subtype is None:
            self._collections.clear()
            self._in_flight.clear()
        else:
            self._collections.pop(subtype, None)
            self._in_flight.pop(subtype, None)

    def collection(self, subtype: str) -> Mapping[str, SourceDocument]:
        try:
            return MappingProxyType(self._collections[subtype])
        except KeyError:
            raise RuntimeError(f"{subtype!r} documents are not loaded; await ensure_loaded() first") from None

    def get(self, subtype: str, document_id: Optional[str]) -> Optional[SourceDocument]:
        if not document_id:
            return None
        return self.collection(subtype).get(document_id)

    # --- Internal ----------------------------------------------------
    def _load_once(self, subtype: str) -> asyncio.Future:
        pending = self._in_flight.get(subtype)
        if pending is None:
            pending = asyncio.ensure_future(self._load_subtype(subtype, self._generation))
            self._in_flight[subtype] = pending
            pending.add_done_callback(lambda _task, key=subtype: self._forget(key, _task))
        return pending

    def _forget(self, subtype: str, task: asyncio.Future) -> None:
        if self._in_flight.get(subtype) is task:
            del self._in_flight[subtype]

    async def _load_subtype(self, subtype: str, generation: int) -> None:
        documents: List[SourceDocument] = [
            doc for doc in self._provider.get_local_collection(self._document_type) if doc.subtype == subtype
        ]
        local_count = len(documents)

        # Iterate through the packages, fetching each matching entry
        for package in self._provider.list_packages():
            if package.document_type != self._document_type:
                continue
            for entry in package.index_entries(self._document_type, subtype):
                try:
                    document = await package.fetch_by_id(entry.id)
                except Exception:
                    logger.warning(
                        "Skipping %s %r from package %s: fetch failed",
                        subtype,
                        entry.id,
                        package.name,
                        exc_info=True,
                    )
                    continue
                if document is None:
                    logger.warning("Package %s has no document %r listed in its index", package.name, entry.id)
                    continue
                documents.append(document)

        collection = {doc.id: doc for doc in sorted(_dedupe(documents), key=lambda d: locale_key(d.name))}

        if generation != self._generation:
            logger.debug("Discarding stale %s load after invalidation", subtype)
            return
        self._collections[subtype] = collection
        logger.info(
            "Loaded %d %s document(s) (%d local, %d packaged)",
            len(collection),
            subtype,
            local_count,
            len(documents) - local_count,
        )


def _dedupe(documents: Iterable[SourceDocument]) -> List[SourceDocument]:
    seen: Dict[str, SourceDocument] = {}
    for doc in documents:
        seen.setdefault(doc.id, doc)
    return list(seen.values())


__all__ = ["ForeignDocumentCache"]

"""Resolution of a character's stored document ids against the warm cache."""

from __future__ import annotations

import logging

from sheetsmith.character_sheet.model import CharacterData, ResolvedReferences
from sheetsmith.compendium.foreign_documents import ForeignDocumentCache

logger = logging.getLogger(__name__)


def resolve_references(data: CharacterData, cache: ForeignDocumentCache) -> ResolvedReferences:
    """Look up background, heritage, lineage and class by id.

    The cache must already be loaded. An id that resolves to nothing is a valid
    empty state, not an error.
    """

    resolved = ResolvedReferences(
        background_id=data.background,
        background=cache.get("background", data.background),
        heritage_id=data.heritage,
        heritage=cache.get("heritage", data.heritage),
        lineage_id=data.lineage,
        lineage=cache.get("lineage", data.lineage),
        class_id=data.class_id,
        class_document=cache.get("class", data.class_id),
    )
    for subtype, ref_id, document in (
        ("background", resolved.background_id, resolved.background),
        ("heritage", resolved.heritage_id, resolved.heritage),
        ("lineage", resolved.lineage_id, resolved.lineage),
        ("class", resolved.class_id, resolved.class_document),
    ):
        if ref_id and document is None:
            logger.debug("Character %s references unknown %s %r", data.id, subtype, ref_id)
    return resolved


__all__ = ["resolve_references"]

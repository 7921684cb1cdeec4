"""Static rule lookup tables (proficiency, damage, language and save types)."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union


class Category(str, Enum):
    """Catalog categories that feed the advantage sets."""

    PROFICIENCY_TYPES = "PROFICIENCY_TYPES"
    DAMAGE_TYPES = "DAMAGE_TYPES"
    LANGUAGE_TYPES = "LANGUAGE_TYPES"
    SAVE_TYPES = "SAVE_TYPES"

    def __str__(self) -> str:
        return self.value


CategoryName = Union[Category, str]


@dataclass(frozen=True)
class CatalogEntry:
    key: str
    label: str
    extra: Mapping[str, Any] = field(default_factory=dict, compare=False, hash=False)


def category_name(category: CategoryName) -> str:
    if isinstance(category, Category):
        return category.value
    return str(category).strip().upper()


class RuleCatalog:
    """Read-only ``category -> key -> entry`` tables.

    Builder configuration may reference categories beyond :class:`Category`
    (e.g. ``SKILL_TYPES``), so tables are keyed by category name.
    """

    def __init__(self, tables: Mapping[str, Mapping[str, CatalogEntry]] | None = None) -> None:
        self._tables: Dict[str, Dict[str, CatalogEntry]] = {}
        for name, entries in (tables or {}).items():
            self._tables[category_name(name)] = dict(entries)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "RuleCatalog":
        """Build a catalog from ``{category: {key: {label, ...} | label}}``."""

        tables: Dict[str, Dict[str, CatalogEntry]] = {}
        for name, raw_entries in payload.items():
            if not isinstance(raw_entries, Mapping):
                raise ValueError(f"Catalog category {name!r} must map keys to entries")
            entries: Dict[str, CatalogEntry] = {}
            for key, raw in raw_entries.items():
                entries[str(key)] = _entry_from(str(key), raw)
            tables[category_name(name)] = entries
        return cls(tables)

    def lookup(self, category: CategoryName, key: str) -> Optional[CatalogEntry]:
        table = self._tables.get(category_name(category))
        if table is None:
            return None
        return table.get(key)

    def has_category(self, category: CategoryName) -> bool:
        return category_name(category) in self._tables

    def keys(self, category: CategoryName) -> Tuple[str, ...]:
        return tuple(self._tables.get(category_name(category), ()))

    def categories(self) -> List[str]:
        return list(self._tables)

    def merged(self, other: "RuleCatalog") -> "RuleCatalog":
        """Return a catalog where ``other``'s entries override this one's."""

        tables: Dict[str, Dict[str, CatalogEntry]] = {name: dict(entries) for name, entries in self._tables.items()}
        for name, entries in other._tables.items():
            tables.setdefault(name, {}).update(entries)
        return RuleCatalog(tables)


def _entry_from(key: str, raw: Any) -> CatalogEntry:
    if isinstance(raw, str):
        return CatalogEntry(key=key, label=raw)
    if isinstance(raw, Mapping):
        label = raw.get("label")
        extra = {k: v for k, v in raw.items() if k != "label"}
        return CatalogEntry(key=key, label=str(label) if label else key, extra=extra)
    raise ValueError(f"Catalog entry {key!r} must be a label or a mapping")


__all__ = ["CatalogEntry", "Category", "CategoryName", "RuleCatalog", "category_name"]

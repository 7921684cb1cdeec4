"""File-backed compendium: local documents, content packages and rule tables.

Expected layout under the data root::

    local/**/*.{json,yaml,yml,md}        documents loaded directly
    packs/<pack>/metadata.{json,yaml}    {"name": ..., "type": "Item"}
    packs/<pack>/**/*.{json,yaml,yml,md} packaged documents
    rules/<category>.{json,yaml,yml}     catalog tables, e.g. language_types.yaml

A package may ship its own ``rules/`` directory; its tables overlay the root
tables. Package documents are only indexed at load time and parsed on fetch.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set, Tuple

import yaml

from sheetsmith.character_sheet.model import SourceDocument
from sheetsmith.compendium.catalog import RuleCatalog
from sheetsmith.compendium.provider import IndexEntry
from sheetsmith.core.errors import CompendiumLoadError
from sheetsmith.core.services.settings import get_settings

logger = logging.getLogger(__name__)

DOCUMENT_SUFFIXES = (".json", ".yaml", ".yml", ".md")
RULE_SUFFIXES = (".json", ".yaml", ".yml")

# Module-level cache for Compendium instances to avoid redundant disk I/O
_COMPENDIUM_CACHE: Dict[tuple, "Compendium"] = {}


def clear_compendium_cache() -> None:
    """Clear the cached compendium instances (e.g. after settings change)."""
    _COMPENDIUM_CACHE.clear()


@dataclass(frozen=True)
class _IndexedFile:
    entry: IndexEntry
    path: Path


class FilePackage:
    """A content package on disk, indexed by document id."""

    def __init__(self, name: str, document_type: str, root: Path, index: Mapping[str, _IndexedFile]) -> None:
        self.name = name
        self.document_type = document_type
        self.root = root
        self._index = dict(index)

    @classmethod
    def open(cls, root: Path) -> "FilePackage":
        metadata = _read_metadata(root)
        name = str(metadata.get("name") or root.name)
        document_type = str(metadata.get("type") or "Item")

        index: Dict[str, _IndexedFile] = {}
        for file_path in _collect_document_files(root, skip={"rules"}):
            data = _read_record(file_path)
            record_id, record_name, subtype = _require_identity(data, file_path)
            if record_id in index:
                raise CompendiumLoadError(
                    f"Duplicate id {record_id!r} in package {name}: {index[record_id].path} and {file_path}"
                )
            index[record_id] = _IndexedFile(IndexEntry(id=record_id, subtype=subtype, name=record_name), file_path)
        return cls(name, document_type, root, index)

    def __len__(self) -> int:
        return len(self._index)

    def index_entries(self, document_type: str, subtype: str) -> List[IndexEntry]:
        if document_type != self.document_type:
            return []
        return [item.entry for item in self._index.values() if item.entry.subtype == subtype]

    async def fetch_by_id(self, document_id: str) -> Optional[SourceDocument]:
        item = self._index.get(document_id)
        if item is None:
            return None
        data = await asyncio.to_thread(_read_record, item.path)
        return _parse_document(data, item.path, self.document_type)


class Compendium:
    """Document provider and rule catalog backed by a data directory."""

    def __init__(
        self,
        root: Path,
        local: Iterable[SourceDocument],
        packages: Iterable[FilePackage],
        catalog: RuleCatalog,
    ) -> None:
        self.root = root
        self._local = list(local)
        self._packages = list(packages)
        self.catalog = catalog

    @classmethod
    def load(cls, root: Path | str | None = None, packages: Iterable[str] | None = None) -> "Compendium":
        settings = get_settings()
        target = Path(root) if root is not None else settings.data_path
        if not target.is_dir():
            raise CompendiumLoadError(f"Unable to locate compendium data at {target}")

        # Note: an explicitly empty package list loads no packages at all.
        active = set(packages) if packages is not None else settings.active_packages

        cache_key = (str(target.resolve()), frozenset(active) if active is not None else None)
        if cache_key in _COMPENDIUM_CACHE:
            return _COMPENDIUM_CACHE[cache_key]

        instance = cls._build(target, active)
        _COMPENDIUM_CACHE[cache_key] = instance
        return instance

    @classmethod
    def _build(cls, target: Path, active: Optional[Set[str]]) -> "Compendium":
        local = [_load_document(path) for path in _collect_document_files(target / "local")]

        packages: List[FilePackage] = []
        catalog = _collect_rule_tables(target / "rules")
        packs_dir = target / "packs"
        if packs_dir.is_dir():
            # Sort directories to ensure deterministic load order.
            for pack_dir in sorted(packs_dir.iterdir()):
                if not pack_dir.is_dir() or pack_dir.name.startswith("_"):
                    continue
                package = FilePackage.open(pack_dir)
                if active is not None and package.name not in active and pack_dir.name not in active:
                    continue
                packages.append(package)
                catalog = catalog.merged(_collect_rule_tables(pack_dir / "rules"))

        logger.info(
            "Compendium at %s: %d local document(s), %d package(s), %d rule categories",
            target,
            len(local),
            len(packages),
            len(catalog.categories()),
        )
        return cls(target, local, packages, catalog)

    def get_local_collection(self, document_type: str) -> List[SourceDocument]:
        return [doc for doc in self._local if doc.document_type == document_type]

    def list_packages(self) -> List[FilePackage]:
        return list(self._packages)

    def package(self, name: str) -> Optional[FilePackage]:
        return next((p for p in self._packages if p.name == name), None)


# --- Internal ----------------------------------------------------


def _collect_document_files(directory: Path, skip: Set[str] | None = None) -> List[Path]:
    if not directory.is_dir():
        return []
    skip = skip or set()
    files = [
        path
        for path in directory.rglob("*")
        if path.is_file()
        and path.suffix.lower() in DOCUMENT_SUFFIXES
        and not path.name.startswith("_")
        and path.stem != "metadata"
        and not (set(path.relative_to(directory).parts[:-1]) & skip)
    ]
    return sorted(files, key=lambda p: (len(p.parts), p.as_posix()))


def _load_document(path: Path) -> SourceDocument:
    data = _read_record(path)
    _require_identity(data, path)
    return _parse_document(data, path)


def _parse_document(data: Mapping[str, Any], path: Path, document_type: str = "Item") -> SourceDocument:
    try:
        return SourceDocument.from_dict(data, document_type=document_type)
    except (TypeError, ValueError) as exc:
        raise CompendiumLoadError(f"Invalid document in file {path}: {exc}") from exc


def _require_identity(data: Mapping[str, Any], path: Path) -> Tuple[str, str, str]:
    record_id = data.get("id", data.get("_id"))
    name = data.get("name")
    subtype = data.get("subtype", data.get("type"))
    if not record_id:
        raise CompendiumLoadError(f"Document {path} missing required field 'id'")
    if not name:
        raise CompendiumLoadError(f"Document {path} missing required field 'name'")
    if not subtype:
        raise CompendiumLoadError(f"Document {path} missing required field 'type'")
    return str(record_id), str(name), str(subtype)


def _read_metadata(root: Path) -> Dict[str, Any]:
    for candidate in ("metadata.json", "metadata.yaml", "metadata.yml"):
        path = root / candidate
        if path.exists():
            data = _read_record(path)
            return dict(data)
    raise CompendiumLoadError(f"Package {root} has no metadata file")


def _collect_rule_tables(directory: Path) -> RuleCatalog:
    if not directory.is_dir():
        return RuleCatalog()
    payload: Dict[str, Any] = {}
    for file_path in sorted(directory.iterdir()):
        if not file_path.is_file() or file_path.suffix.lower() not in RULE_SUFFIXES:
            continue
        if file_path.name.startswith("_"):
            continue
        payload[file_path.stem.upper()] = _read_record(file_path)
    try:
        return RuleCatalog.from_payload(payload)
    except ValueError as exc:
        raise CompendiumLoadError(f"Invalid rule tables in {directory}: {exc}") from exc


def _read_record(path: Path) -> Dict[str, Any]:
    suffix = path.suffix.lower()
    try:
        if suffix == ".json":
            data = json.loads(path.read_text(encoding="utf-8"))
        elif suffix == ".md":
            data = _read_markdown_document(path)
        else:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, ValueError, yaml.YAMLError) as exc:
        raise CompendiumLoadError(f"Invalid data in file {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise CompendiumLoadError(f"File {path} must contain a JSON object or YAML frontmatter")
    return data


def _read_markdown_document(path: Path) -> Dict[str, Any]:
    content = path.read_text(encoding="utf-8")

    # YAML frontmatter carries the document fields; the body is its description.
    if not content.startswith("---"):
        raise ValueError("Markdown documents need YAML frontmatter")
    parts = content.split("---", 2)
    if len(parts) < 3:
        raise ValueError("Unterminated YAML frontmatter")
    data = yaml.safe_load(parts[1]) or {}
    if isinstance(data, dict) and "description" not in data:
        data["description"] = parts[2].strip()
    return data


__all__ = ["Compendium", "FilePackage", "clear_compendium_cache"]

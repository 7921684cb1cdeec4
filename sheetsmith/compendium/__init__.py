from .catalog import CatalogEntry, Category, RuleCatalog
from .foreign_documents import ForeignDocumentCache
from .provider import ContentPackage, DocumentProvider, InMemoryDocumentProvider, InMemoryPackage, IndexEntry
from .service import Compendium, FilePackage, clear_compendium_cache

__all__ = [
    "CatalogEntry",
    "Category",
    "Compendium",
    "ContentPackage",
    "DocumentProvider",
    "FilePackage",
    "ForeignDocumentCache",
    "InMemoryDocumentProvider",
    "InMemoryPackage",
    "IndexEntry",
    "RuleCatalog",
    "clear_compendium_cache",
]

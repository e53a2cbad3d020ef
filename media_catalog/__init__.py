"""Normalized music catalog built from a media index."""

from .catalog_builder import CatalogBuilder
from .errors import CatalogError, IndexUnavailable, MissingFolderReference, ScanFailed
from .folder_scan import FolderScanFilter, derive_folder_label
from .identifiers import assign_id
from .media_index import InMemoryMediaIndex, MediaIndex, SQLiteMediaIndex, TrackPathFilter
from .models import Album, Artist, Catalog, FolderScanResult, RecordKind, Track
from .normalizer import MetadataNormalizer
from .scan_service import CatalogService

__all__ = [
    "Album",
    "Artist",
    "Catalog",
    "CatalogBuilder",
    "CatalogError",
    "CatalogService",
    "FolderScanFilter",
    "FolderScanResult",
    "InMemoryMediaIndex",
    "IndexUnavailable",
    "MediaIndex",
    "MetadataNormalizer",
    "MissingFolderReference",
    "RecordKind",
    "SQLiteMediaIndex",
    "ScanFailed",
    "Track",
    "TrackPathFilter",
    "assign_id",
    "derive_folder_label",
]

"""
Catalog Service - The two scan operations exposed to host bridges

Wraps CatalogBuilder and FolderScanFilter, renders their results in the wire
shape, and turns failures into rejections whose message embeds the cause.
Each call is an independent transaction; a failed scan leaves nothing behind
that could affect the next one.
"""
import logging
from typing import Any, Dict, Optional

from media_catalog.catalog_builder import CatalogBuilder
from media_catalog.catalog_views import link_catalog, summarize_folder
from media_catalog.config_loader import Config
from media_catalog.errors import CatalogError, MissingFolderReference, ScanFailed
from media_catalog.folder_scan import FolderScanFilter
from media_catalog.logging_utils import ScanSummary, redact
from media_catalog.media_index import MediaIndex, SQLiteMediaIndex
from media_catalog.normalizer import MetadataNormalizer

logger = logging.getLogger(__name__)


def _cause_message(error: Exception) -> str:
    if isinstance(error, CatalogError):
        return error.message
    return str(error) or type(error).__name__


class CatalogService:
    """Host-facing facade for full and folder-scoped scans"""

    def __init__(
        self,
        index: MediaIndex,
        normalizer: MetadataNormalizer,
        parallel: bool = True,
        max_workers: int = 3,
    ):
        self.index = index
        self.normalizer = normalizer
        self.builder = CatalogBuilder(index, normalizer, parallel=parallel, max_workers=max_workers)
        self.folder_filter = FolderScanFilter(index, normalizer)

    @classmethod
    def from_config(cls, config: Config, parallel: Optional[bool] = None) -> "CatalogService":
        """Build a service over the SQLite media index named in the config."""
        return cls(
            index=SQLiteMediaIndex(config.index_database_path),
            normalizer=MetadataNormalizer(config.content_base, config.artwork_base),
            parallel=config.parallel_queries if parallel is None else parallel,
            max_workers=config.max_workers,
        )

    def scan_music(self, with_links: bool = False) -> Dict[str, Any]:
        """
        Full scan.

        Args:
            with_links: Add "trackIds" and "artistId" to every album

        Returns:
            {"tracks": [...], "albums": [...], "artists": [...]}

        Raises:
            ScanFailed: "Failed to scan music: <cause>"
        """
        summary = ScanSummary("Music scan", logger)
        try:
            catalog = self.builder.build_catalog()
        except Exception as e:
            logger.error(f"Music scan failed: {_cause_message(e)}")
            raise ScanFailed(f"Failed to scan music: {_cause_message(e)}") from e

        summary.add("tracks", len(catalog.tracks))
        summary.add("albums", len(catalog.albums))
        summary.add("artists", len(catalog.artists))
        summary.log()
        return link_catalog(catalog) if with_links else catalog.to_dict()

    def scan_folder(self, folder_uri: Optional[str], with_breakdown: bool = False) -> Dict[str, Any]:
        """
        Folder-scoped scan.

        Args:
            folder_uri: Folder reference from the folder-picker collaborator
            with_breakdown: Also derive albums/artists from the matched tracks

        Returns:
            {"tracks": [...], "folder": label} (plus "albums"/"artists" with breakdown)

        Raises:
            MissingFolderReference: "Folder URI is required", before any query
            ScanFailed: "Folder scan failed: <cause>"
        """
        summary = ScanSummary("Folder scan", logger)
        try:
            result = self.folder_filter.scan_folder(folder_uri)
        except MissingFolderReference as e:
            logger.warning(f"Folder scan rejected: {e.message}")
            raise
        except Exception as e:
            logger.error(f"Folder scan of {redact(folder_uri)} failed: {_cause_message(e)}")
            raise ScanFailed(f"Folder scan failed: {_cause_message(e)}") from e

        summary.add("folder", redact(result.folder_label))
        summary.add("tracks", len(result.tracks))
        summary.log()
        return summarize_folder(result) if with_breakdown else result.to_dict()

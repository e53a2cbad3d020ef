"""
Catalog Builder - Full scan of tracks, albums and artists

The three record kinds are queried independently (no join) and each stream is
normalized into its own collection. The build is all-or-nothing: if any
query fails the whole build fails and no partial catalog is returned.
"""
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Dict, List, Sequence

from media_catalog.logging_utils import format_count, stage_timer
from media_catalog.media_index import MediaIndex
from media_catalog.models import Catalog, RecordKind
from media_catalog.normalizer import MetadataNormalizer

logger = logging.getLogger(__name__)

CATALOG_KINDS: Sequence[RecordKind] = (
    RecordKind.TRACKS,
    RecordKind.ALBUMS,
    RecordKind.ARTISTS,
)


class CatalogBuilder:
    """Builds a full catalog from a media index"""

    def __init__(
        self,
        index: MediaIndex,
        normalizer: MetadataNormalizer,
        parallel: bool = False,
        max_workers: int = 3,
    ):
        """
        Initialize catalog builder

        Args:
            index: Media index to query
            normalizer: Row normalizer (also assigns catalog ids)
            parallel: Dispatch the three queries to a thread pool
            max_workers: Thread pool size when parallel
        """
        self.index = index
        self.normalizer = normalizer
        self.parallel = parallel
        self.max_workers = max(1, max_workers)

    def load_kind(self, kind: RecordKind) -> List:
        """Query one record kind and normalize every row."""
        with stage_timer(f"{kind.value.capitalize()} query", logger):
            with self.index.query(kind) as rows:
                records = [self.normalizer.normalize(row, kind) for row in rows]
        logger.debug(f"Loaded {format_count(len(records), kind.value[:-1])}")
        return records

    def _load_sequential(self) -> Dict[RecordKind, List]:
        return {kind: self.load_kind(kind) for kind in CATALOG_KINDS}

    def _load_parallel(self) -> Dict[RecordKind, List]:
        results: Dict[RecordKind, List] = {}
        workers = min(self.max_workers, len(CATALOG_KINDS))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="catalog-query") as executor:
            futures = {executor.submit(self.load_kind, kind): kind for kind in CATALOG_KINDS}
            try:
                for future in as_completed(futures):
                    results[futures[future]] = future.result()
            except Exception as e:
                logger.debug(f"{futures[future].value} query failed, abandoning catalog build: {e}")
                for pending in futures:
                    pending.cancel()
                raise
        return results

    def build_catalog(self) -> Catalog:
        """
        Query, normalize and assemble tracks, albums and artists.

        Returns:
            Catalog with three independently populated collections

        Raises:
            IndexUnavailable: if any of the three queries fails
        """
        if self.parallel and self.max_workers > 1:
            results = self._load_parallel()
        else:
            results = self._load_sequential()

        catalog = Catalog(
            tracks=results[RecordKind.TRACKS],
            albums=results[RecordKind.ALBUMS],
            artists=results[RecordKind.ARTISTS],
        )
        logger.info(
            f"Catalog built: {format_count(len(catalog.tracks), 'track')}, "
            f"{format_count(len(catalog.albums), 'album')}, "
            f"{format_count(len(catalog.artists), 'artist')}"
        )
        return catalog

"""
Folder Scan - Track subset for one folder, matched heuristically by path

The media index has no hierarchical containment query, so a folder is reduced
to a label (its last path segment, minus any volume prefix) and tracks are
kept when either path field contains that label. This over-matches when
unrelated folders share a substring; albums and artists are not recomputed
for the subset.
"""
import logging
from typing import Optional
from urllib.parse import unquote, urlsplit

from media_catalog.errors import MissingFolderReference
from media_catalog.logging_utils import format_count, redact, stage_timer
from media_catalog.media_index import MediaIndex, TrackPathFilter
from media_catalog.models import FolderScanResult, RecordKind
from media_catalog.normalizer import MetadataNormalizer

logger = logging.getLogger(__name__)

VOLUME_SEPARATOR = ":"


def _last_segment(folder_reference: str) -> str:
    if "://" in folder_reference:
        # Split the still-encoded path so an encoded "/" stays inside its segment
        segments = [s for s in urlsplit(folder_reference).path.split("/") if s]
        return unquote(segments[-1]) if segments else ""
    segments = [s for s in folder_reference.replace("\\", "/").split("/") if s]
    return segments[-1] if segments else ""


def derive_folder_label(folder_reference: Optional[str]) -> str:
    """
    Derive the path-matching label for a folder reference.

    The label is the final path segment; a volume prefix such as "primary:"
    is dropped, so ".../tree/primary%3AMusic%2FMyTracks" gives "Music/MyTracks".

    Raises:
        MissingFolderReference: reference is absent or yields an empty label
    """
    if folder_reference is None or not str(folder_reference).strip():
        raise MissingFolderReference("Folder URI is required")

    segment = _last_segment(str(folder_reference).strip())
    if VOLUME_SEPARATOR in segment:
        segment = segment.split(VOLUME_SEPARATOR, 1)[1]

    if not segment:
        raise MissingFolderReference(
            f"Folder URI has no usable path segment: {redact(folder_reference)}"
        )
    return segment


class FolderScanFilter:
    """Scans the tracks belonging (heuristically) to one folder"""

    def __init__(self, index: MediaIndex, normalizer: MetadataNormalizer):
        self.index = index
        self.normalizer = normalizer

    def scan_folder(self, folder_reference: Optional[str]) -> FolderScanResult:
        """
        Return the tracks whose source or relative path contains the folder label.

        Raises:
            MissingFolderReference: before any query, if the reference is absent
            IndexUnavailable: if the track query fails
        """
        label = derive_folder_label(folder_reference)
        logger.info(f"Scanning folder {redact(folder_reference)} (label '{redact(label)}')")

        with stage_timer("Folder track query", logger):
            with self.index.query(RecordKind.TRACKS, row_filter=TrackPathFilter(label)) as rows:
                tracks = [self.normalizer.normalize_track(row) for row in rows]

        logger.info(f"Folder '{redact(label)}' matched {format_count(len(tracks), 'track')}")
        return FolderScanResult(tracks=tracks, folder_label=label)

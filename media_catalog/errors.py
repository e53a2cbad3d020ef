"""
Catalog Errors - Failure kinds surfaced by scan operations

Per-field data anomalies (missing text, sentinel values, unparsable years)
are never raised; they are normalized to fallback values instead.
"""
from typing import Optional


class CatalogError(Exception):
    """Base exception for catalog scan failures"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class IndexUnavailable(CatalogError):
    """Raised when a media index query cannot complete (I/O or provider fault)"""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class MissingFolderReference(CatalogError):
    """Raised when a folder scan is requested without a usable folder reference"""
    pass


class ScanFailed(CatalogError):
    """Host-facing rejection carrying a human-readable message"""
    pass

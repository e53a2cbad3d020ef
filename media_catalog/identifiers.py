"""Namespaced catalog identifiers."""
from media_catalog.models import RecordKind

ID_PREFIXES = {
    RecordKind.TRACKS: "t_",
    RecordKind.ALBUMS: "a_",
    RecordKind.ARTISTS: "ar_",
}


def assign_id(numeric_id: int, kind: RecordKind) -> str:
    """
    Build the catalog id for an index-local numeric id.

    Ids from different record kinds never collide because each kind has its
    own prefix: 42 -> "t_42" / "a_42" / "ar_42".

    Raises:
        ValueError: if numeric_id is not a non-negative integer
    """
    if isinstance(numeric_id, bool) or not isinstance(numeric_id, int):
        raise ValueError(f"Index id must be an integer, got {numeric_id!r}")
    if numeric_id < 0:
        raise ValueError(f"Index id must be non-negative, got {numeric_id}")
    return f"{ID_PREFIXES[RecordKind(kind)]}{numeric_id}"

"""
Caller-side views over scanned tracks.

A folder scan returns tracks only; these helpers rebuild the album/artist
breakdown for such a subset and link albums to their tracks. Everything is
derived from the track records themselves, so ids line up with the ones a
full scan assigns.
"""
from __future__ import annotations

from collections import OrderedDict
from typing import Any, Dict, Iterable, List

from media_catalog.models import Album, Artist, Catalog, FolderScanResult, Track


def album_track_ids(tracks: Iterable[Track]) -> Dict[str, List[str]]:
    """Map album id -> track ids, in track order."""
    mapping: Dict[str, List[str]] = OrderedDict()
    for track in tracks:
        mapping.setdefault(track.album_id, []).append(track.id)
    return mapping


def album_artist_ids(tracks: Iterable[Track]) -> Dict[str, str]:
    """Map album id -> artist id of the first track seen on that album."""
    mapping: Dict[str, str] = {}
    for track in tracks:
        mapping.setdefault(track.album_id, track.artist_id)
    return mapping


def derive_albums(tracks: Iterable[Track]) -> List[Album]:
    """Build album records from a track subset, ordered by title."""
    albums: Dict[str, Album] = {}
    for track in tracks:
        album = albums.get(track.album_id)
        if album is None:
            # year is not carried on track records
            album = Album(
                id=track.album_id,
                title=track.album,
                artist=track.artist,
                cover_reference=track.cover_reference,
            )
            albums[track.album_id] = album
        album.num_songs += 1
    return sorted(albums.values(), key=lambda a: (a.title, a.id))


def derive_artists(tracks: Iterable[Track]) -> List[Artist]:
    """Build artist records from a track subset, ordered by name."""
    artists: Dict[str, Artist] = {}
    album_sets: Dict[str, set] = {}
    for track in tracks:
        artist = artists.get(track.artist_id)
        if artist is None:
            artist = Artist(id=track.artist_id, name=track.artist)
            artists[track.artist_id] = artist
            album_sets[track.artist_id] = set()
        artist.num_tracks += 1
        album_sets[track.artist_id].add(track.album_id)
    for artist_id, album_ids in album_sets.items():
        artists[artist_id].num_albums = len(album_ids)
    return sorted(artists.values(), key=lambda a: (a.name, a.id))


def link_albums(albums: Iterable[Album], tracks: List[Track]) -> List[Dict[str, Any]]:
    """
    Album dictionaries with "trackIds" and the "artistId" of their first track.

    Albums without any of the given tracks get an empty list and a None artist.
    """
    track_ids = album_track_ids(tracks)
    artist_ids = album_artist_ids(tracks)
    return [
        dict(a.to_dict(), trackIds=track_ids.get(a.id, []), artistId=artist_ids.get(a.id))
        for a in albums
    ]


def link_catalog(catalog: Catalog) -> Dict[str, Any]:
    """Full-scan dictionary whose albums are linked to the scanned tracks."""
    linked = catalog.to_dict()
    linked["albums"] = link_albums(catalog.albums, catalog.tracks)
    return linked


def summarize_folder(result: FolderScanResult) -> Dict[str, Any]:
    """Catalog-shaped dictionary for a folder scan, with derived and linked albums and artists."""
    summary = result.to_dict()
    summary["albums"] = link_albums(derive_albums(result.tracks), result.tracks)
    summary["artists"] = [a.to_dict() for a in derive_artists(result.tracks)]
    return summary

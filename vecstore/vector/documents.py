"""
Turn catalog entities (tracks, artists, playlists) into embedding-ready records.
"""

from dataclasses import dataclass, field
from typing import List

from .types import ItemType, VectorRecord

PLAYLIST_SAMPLE_TRACKS = 10


@dataclass
class TrackData:
    id: str
    name: str
    artists: List[str] = field(default_factory=list)
    album: str = ""
    genres: List[str] = field(default_factory=list)
    duration_ms: int = 0


@dataclass
class ArtistData:
    id: str
    name: str
    genres: List[str] = field(default_factory=list)


@dataclass
class PlaylistData:
    id: str
    name: str
    description: str = ""
    owner: str = ""
    track_count: int = 0
    track_names: List[str] = field(default_factory=list)


def track_to_record(track: TrackData) -> VectorRecord:
    """Build a searchable record describing a track."""
    artists = ", ".join(track.artists)
    genres = ", ".join(track.genres)

    content = f"{track.name} by {artists}"
    if track.album:
        content += f" from album {track.album}"
    if genres:
        content += f". Genres: {genres}"

    return VectorRecord(
        id=f"track:{track.id}",
        type=ItemType.TRACK,
        vector=None,
        content=content,
        metadata={
            "id": track.id,
            "name": track.name,
            "artists": artists,
            "album": track.album,
            "genres": genres,
        },
    )


def artist_to_record(artist: ArtistData) -> VectorRecord:
    """Build a searchable record describing an artist."""
    genres = ", ".join(artist.genres)

    content = artist.name
    if genres:
        content += f". Genres: {genres}"

    return VectorRecord(
        id=f"artist:{artist.id}",
        type=ItemType.ARTIST,
        vector=None,
        content=content,
        metadata={
            "id": artist.id,
            "name": artist.name,
            "genres": genres,
        },
    )


def playlist_to_record(playlist: PlaylistData) -> VectorRecord:
    """Build a searchable record describing a playlist and a sample of its tracks."""
    content = f"Playlist: {playlist.name}"
    if playlist.description:
        content += f". {playlist.description}"
    if playlist.track_names:
        sample = playlist.track_names[:PLAYLIST_SAMPLE_TRACKS]
        content += f". Contains tracks like: {', '.join(sample)}"

    return VectorRecord(
        id=f"playlist:{playlist.id}",
        type=ItemType.PLAYLIST,
        vector=None,
        content=content,
        metadata={
            "id": playlist.id,
            "name": playlist.name,
            "description": playlist.description,
            "owner": playlist.owner,
            "track_count": str(playlist.track_count),
        },
    )

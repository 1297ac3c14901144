from dataclasses import dataclass


@dataclass(frozen=True)
class Artist:
    id: int
    name: str


@dataclass(frozen=True)
class SongArtist:
    artist_name: str
    album_name: str
    track: int


@dataclass(frozen=True)
class Contact:
    name: str
    phone: int
    email: str

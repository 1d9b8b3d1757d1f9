"""Data passed between the parser, the catalog clients and the converter."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class Catalog(str, Enum):
    SPOTIFY = "spotify"
    APPLE = "apple"


class ItemType(str, Enum):
    TRACK = "track"
    ALBUM = "album"
    ARTIST = "artist"
    SHOW = "show"
    EPISODE = "episode"


DEFAULT_COUNTRY = "us"


@dataclass(frozen=True)
class ParsedLink:
    """A catalog link reduced to what is needed to look the item up.

    ``id`` is the lookup id. ``show_id`` is only set for Apple podcast
    episodes, where the path carries the parent show and ``?i=`` the episode.
    """

    source: Catalog
    type: ItemType
    id: str
    original_url: str
    show_id: Optional[str] = None
    country: str = DEFAULT_COUNTRY


def _name(value: Any) -> Optional[str]:
    if isinstance(value, dict):
        name = value.get("name")
        return name if isinstance(name, str) and name else None
    return None


@dataclass
class SpotifyItem:
    """The fields of a Spotify Web API object that matching relies on."""

    id: Optional[str] = None
    name: Optional[str] = None
    artists: List[str] = field(default_factory=list)
    album_name: Optional[str] = None
    show_name: Optional[str] = None
    publisher: Optional[str] = None
    url: Optional[str] = None

    @classmethod
    def from_json(cls, data: Optional[Dict[str, Any]]) -> "SpotifyItem":
        data = data or {}
        show = data.get("show") if isinstance(data.get("show"), dict) else {}
        artists = [n for n in (_name(a) for a in data.get("artists") or []) if n]
        return cls(
            id=data.get("id"),
            name=data.get("name") or None,
            artists=artists,
            album_name=_name(data.get("album")),
            show_name=_name(show),
            publisher=data.get("publisher") or show.get("publisher") or None,
            url=(data.get("external_urls") or {}).get("spotify"),
        )

    @property
    def artist(self) -> Optional[str]:
        """Joined artist names, or the podcast publisher for shows/episodes."""
        if self.artists:
            return ", ".join(self.artists)
        return self.publisher

    @property
    def collection(self) -> Optional[str]:
        return self.album_name or self.show_name

    def summary(self, item_type: ItemType) -> Dict[str, Any]:
        return {
            "type": item_type.value,
            "id": self.id,
            "name": self.name,
            "artist": self.artist,
            "collection": self.collection,
            "url": self.url,
        }


@dataclass
class AppleItem:
    """An iTunes Search/Lookup API result, limited to the fields we read."""

    wrapper_type: Optional[str] = None
    kind: Optional[str] = None
    collection_type: Optional[str] = None
    artist_type: Optional[str] = None
    track_id: Optional[str] = None
    collection_id: Optional[str] = None
    artist_id: Optional[str] = None
    track_name: Optional[str] = None
    collection_name: Optional[str] = None
    artist_name: Optional[str] = None
    track_view_url: Optional[str] = None
    collection_view_url: Optional[str] = None
    artist_view_url: Optional[str] = None
    feed_url: Optional[str] = None

    @classmethod
    def from_json(cls, data: Optional[Dict[str, Any]]) -> "AppleItem":
        data = data or {}

        def ident(key: str) -> Optional[str]:
            value = data.get(key)
            return str(value) if value is not None else None

        return cls(
            wrapper_type=data.get("wrapperType"),
            kind=data.get("kind"),
            collection_type=data.get("collectionType"),
            artist_type=data.get("artistType"),
            track_id=ident("trackId"),
            collection_id=ident("collectionId"),
            artist_id=ident("artistId"),
            track_name=data.get("trackName") or None,
            collection_name=data.get("collectionName") or None,
            artist_name=data.get("artistName") or None,
            track_view_url=data.get("trackViewUrl"),
            collection_view_url=data.get("collectionViewUrl"),
            artist_view_url=data.get("artistViewUrl"),
            feed_url=data.get("feedUrl"),
        )

    @property
    def display_name(self) -> Optional[str]:
        return self.track_name or self.collection_name or self.artist_name

    @property
    def item_id(self) -> Optional[str]:
        return self.track_id or self.collection_id or self.artist_id

    def summary(self, item_type: ItemType, url: Optional[str] = None) -> Dict[str, Any]:
        return {
            "type": item_type.value,
            "kind": self.kind or self.wrapper_type,
            "id": self.item_id,
            "name": self.display_name,
            "artist": self.artist_name,
            "collection": self.collection_name,
            "url": url,
        }


@dataclass
class ConversionResult:
    source: Catalog
    target: Catalog
    input_url: str
    output_url: Optional[str]
    source_item: Dict[str, Any]
    target_item: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sourceCatalog": self.source.value,
            "targetCatalog": self.target.value,
            "inputUrl": self.input_url,
            "outputUrl": self.output_url,
            "details": {
                "sourceItem": self.source_item,
                "targetItem": self.target_item,
            },
        }

"""Search-query construction and candidate selection between the two catalogs.

Selection is intentionally asymmetric. Apple results are scanned for the
first one whose kind matches the requested type, because the iTunes search
mixes result kinds. Spotify results are already bucketed by type, so the
first item is taken as-is.
"""

from __future__ import annotations

import logging
import re
from typing import Callable, Dict, Iterable, List, Optional

from .models import AppleItem, ItemType, SpotifyItem

logger = logging.getLogger(__name__)

_QUERY_BREAKERS = re.compile(r"[:\"']")

APPLE_KIND_CHECKS: Dict[ItemType, Callable[[AppleItem], bool]] = {
    ItemType.TRACK: lambda r: r.kind == "song",
    ItemType.ALBUM: lambda r: r.wrapper_type == "collection" and r.collection_type == "Album",
    ItemType.ARTIST: lambda r: r.wrapper_type == "artist" and r.artist_type in ("Artist", "MusicArtist"),
    ItemType.SHOW: lambda r: r.kind == "podcast",
    ItemType.EPISODE: lambda r: r.kind == "podcast-episode",
}


def clean_query(parts: Iterable[Optional[str]]) -> str:
    """Join the non-empty parts and drop characters that break search syntax."""
    joined = " ".join(p for p in parts if p)
    return re.sub(r"\s+", " ", _QUERY_BREAKERS.sub("", joined)).strip()


def build_apple_term(item: SpotifyItem, item_type: ItemType) -> str:
    """Search term for the iTunes API built from a Spotify item."""
    if item_type is ItemType.TRACK:
        parts = [item.name, *item.artists, item.album_name]
    elif item_type is ItemType.ALBUM:
        parts = [item.name, *item.artists]
    elif item_type is ItemType.EPISODE:
        parts = [item.name, item.show_name]
    else:
        parts = [item.name]
    return clean_query(parts)


def build_spotify_query(item: AppleItem, item_type: ItemType) -> str:
    """Search query for Spotify built from Apple metadata.

    For episodes whose title could not be resolved, this degrades to a
    show-level query (show name and publisher).
    """
    if item_type is ItemType.TRACK:
        parts = [item.track_name, item.artist_name, item.collection_name]
    elif item_type is ItemType.ALBUM:
        parts = [item.collection_name, item.artist_name]
    elif item_type is ItemType.ARTIST:
        parts = [item.artist_name]
    elif item_type is ItemType.EPISODE and item.track_name:
        parts = [item.track_name, item.collection_name]
    else:
        parts = [item.collection_name, item.artist_name]
    return clean_query(parts)


def pick_apple_match(results: List[AppleItem], item_type: ItemType) -> Optional[AppleItem]:
    """First result of the requested kind; never falls back to another kind."""
    check = APPLE_KIND_CHECKS[item_type]
    for result in results:
        if check(result):
            logger.info("Apple match found: %s", result.display_name)
            return result
    if results:
        logger.warning("No %s among %d Apple results", item_type.value, len(results))
    else:
        logger.info("No results found on Apple")
    return None


def pick_spotify_match(items: List[SpotifyItem]) -> Optional[SpotifyItem]:
    if not items:
        logger.info("No results found on Spotify")
        return None
    logger.info("Spotify match found: %s", items[0].name)
    return items[0]


def apple_url_for(item: Optional[AppleItem], item_type: ItemType) -> Optional[str]:
    if item is None:
        return None
    if item_type in (ItemType.TRACK, ItemType.EPISODE):
        return item.track_view_url
    if item_type is ItemType.ARTIST:
        return item.artist_view_url
    if item_type is ItemType.SHOW:
        return item.collection_view_url or item.feed_url
    return item.collection_view_url


def spotify_url_for(item: Optional[SpotifyItem], item_type: ItemType) -> Optional[str]:
    if item is None or not item.id:
        return None
    return f"https://open.spotify.com/{item_type.value}/{item.id}"

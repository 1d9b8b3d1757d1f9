"""Recognise Spotify and Apple Music / Apple Podcasts links.

Spotify links are regular: ``open.spotify.com/<type>/<id>``. Apple links come
in several shapes, for example::

    https://music.apple.com/us/album/some-album/1440857781
    https://music.apple.com/us/album/some-album/1440857781?i=1440857790
    https://music.apple.com/gb/artist/someone/136975
    https://podcasts.apple.com/us/podcast/some-show/id1535809341
    https://podcasts.apple.com/us/podcast/some-show/id1535809341?i=1000582936530
    https://itunes.apple.com/us/album/some-album/id1440857781

The kind of item an Apple link points to is decided by the ordered rule
tables below; the first rule whose predicate holds wins. The parser never
raises: anything it cannot make sense of is reported as ``None``.
"""

from __future__ import annotations

import logging
import re
from typing import Callable, NamedTuple, Optional, Tuple
from urllib.parse import parse_qs, urlparse

from .models import DEFAULT_COUNTRY, Catalog, ItemType, ParsedLink

logger = logging.getLogger(__name__)

SPOTIFY_HOST = "open.spotify.com"
SPOTIFY_TYPES = {t.value: t for t in ItemType}

APPLE_MUSIC_HOST = "music.apple.com"
APPLE_PODCASTS_HOST = "podcasts.apple.com"
ITUNES_HOST = "itunes.apple.com"
APPLE_HOSTS = {APPLE_MUSIC_HOST, APPLE_PODCASTS_HOST, ITUNES_HOST}

_COUNTRY_RE = re.compile(r"^[a-zA-Z]{2}$")
_NUMERIC_ID_RE = re.compile(r"^(?:id)?(\d+)$")


class _Rule(NamedTuple):
    """One row of an Apple decision table.

    ``matches`` receives ``(type_token, query_id, path_id)``. When the rule
    fires, ``keep_query_id``/``keep_path_id`` say which of the two ids the
    link may still use.
    """

    matches: Callable[[Optional[str], Optional[str], Optional[str]], bool]
    item_type: ItemType
    keep_query_id: bool = True
    keep_path_id: bool = True


# ?i= on a podcast link always names an episode; the path id is its show.
PODCAST_RULES: Tuple[_Rule, ...] = (
    _Rule(lambda token, query_id, path_id: bool(query_id), ItemType.EPISODE),
    _Rule(lambda token, query_id, path_id: bool(path_id), ItemType.SHOW),
)

MUSIC_RULES: Tuple[_Rule, ...] = (
    _Rule(lambda token, query_id, path_id: token == "album" and bool(query_id), ItemType.TRACK),
    _Rule(lambda token, query_id, path_id: token == "album", ItemType.ALBUM),
    _Rule(lambda token, query_id, path_id: token == "artist", ItemType.ARTIST, keep_query_id=False),
    _Rule(lambda token, query_id, path_id: token in ("song", "track"), ItemType.TRACK),
    # Playlists, stations and the like: best effort, treat ?i= as a song.
    _Rule(lambda token, query_id, path_id: bool(query_id), ItemType.TRACK, keep_path_id=False),
)


def _path_parts(path: str) -> list:
    return [p for p in path.split("/") if p]


def parse_spotify_url(url: str) -> Optional[ParsedLink]:
    """Parse ``open.spotify.com/<type>/<id>`` links.

    Locale prefixes such as ``/intl-es/`` and query strings are ignored.
    """
    try:
        parsed = urlparse(url)
        if (parsed.hostname or "").lower() != SPOTIFY_HOST:
            return None
        parts = _path_parts(parsed.path)
        type_index = next((i for i, part in enumerate(parts) if part in SPOTIFY_TYPES), None)
        if type_index is None or type_index + 1 >= len(parts):
            return None
        item_id = parts[type_index + 1]
        if not item_id:
            return None
        return ParsedLink(
            source=Catalog.SPOTIFY,
            type=SPOTIFY_TYPES[parts[type_index]],
            id=item_id,
            original_url=url,
        )
    except Exception as exc:
        logger.warning("Could not parse Spotify URL %r: %s", url, exc)
        return None


def _numeric_id(segment: Optional[str]) -> Optional[str]:
    if not segment:
        return None
    match = _NUMERIC_ID_RE.match(segment)
    return match.group(1) if match else segment


def _first_rule(rules: Tuple[_Rule, ...], token, query_id, path_id) -> Optional[_Rule]:
    for rule in rules:
        if rule.matches(token, query_id, path_id):
            return rule
    return None


def parse_apple_url(url: str) -> Optional[ParsedLink]:
    """Parse Apple Music, Apple Podcasts and legacy iTunes links."""
    try:
        parsed = urlparse(url)
        host = (parsed.hostname or "").lower()
        if host not in APPLE_HOSTS:
            return None
        parts = _path_parts(parsed.path)
        query_id = (parse_qs(parsed.query).get("i") or [None])[0] or None

        country = DEFAULT_COUNTRY
        type_index = 0
        if parts and _COUNTRY_RE.match(parts[0]):
            country = parts[0].lower()
            type_index = 1
        token = parts[type_index] if type_index < len(parts) else None

        if host == APPLE_PODCASTS_HOST or token == "podcast":
            rules = PODCAST_RULES
            path_id = next(
                (m.group(1) for m in (_NUMERIC_ID_RE.match(p) for p in parts[type_index + 1:]) if m),
                None,
            )
        else:
            rules = MUSIC_RULES
            # type/name/id
            id_index = type_index + 2
            path_id = _numeric_id(parts[id_index]) if id_index < len(parts) else None

        rule = _first_rule(rules, token, query_id, path_id)
        if rule is None:
            logger.info("Apple URL %r has no recognizable item type", url)
            return None
        if not rule.keep_query_id:
            query_id = None
        if not rule.keep_path_id:
            path_id = None

        show_id = None
        if rule.item_type in (ItemType.EPISODE, ItemType.TRACK):
            # Falling back to the path id is a guess; it is usually right for
            # /song/ links and harmless elsewhere.
            lookup_id = query_id or path_id
            if rule.item_type is ItemType.EPISODE:
                show_id = path_id
        else:
            lookup_id = path_id

        if not lookup_id:
            logger.info("Apple URL %r has no usable id", url)
            return None

        return ParsedLink(
            source=Catalog.APPLE,
            type=rule.item_type,
            id=lookup_id,
            original_url=url,
            show_id=show_id,
            country=country,
        )
    except Exception as exc:
        logger.warning("Could not parse Apple URL %r: %s", url, exc)
        return None


def parse_url(url: str) -> Optional[ParsedLink]:
    """Return the first dialect that recognises ``url``, or ``None``."""
    return parse_spotify_url(url) or parse_apple_url(url)

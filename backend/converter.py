"""Runs a parsed link through lookup, search and URL building."""

from __future__ import annotations

import logging

from .errors import NotFoundError
from .itunes import ITunesAPI
from .matcher import (
    apple_url_for,
    build_apple_term,
    build_spotify_query,
    pick_apple_match,
    pick_spotify_match,
    spotify_url_for,
)
from .models import AppleItem, Catalog, ConversionResult, ItemType, ParsedLink
from .spotify import SpotifyAPI

logger = logging.getLogger(__name__)


class Converter:
    """Converts links in both directions between Spotify and Apple."""

    def __init__(self, spotify: SpotifyAPI, itunes: ITunesAPI) -> None:
        self.spotify = spotify
        self.itunes = itunes

    async def convert(self, parsed: ParsedLink, country: str) -> ConversionResult:
        """Convert ``parsed`` to the other catalog.

        ``country`` is the Apple storefront to search when converting from
        Spotify; Apple links carry their own storefront.
        """
        if parsed.source is Catalog.SPOTIFY:
            return await self.spotify_to_apple(parsed, country)
        return await self.apple_to_spotify(parsed)

    async def spotify_to_apple(self, parsed: ParsedLink, country: str) -> ConversionResult:
        logger.info("Converting Spotify -> Apple: type=%s id=%s", parsed.type.value, parsed.id)
        source = await self.spotify.get_details(parsed.type, parsed.id)
        term = build_apple_term(source, parsed.type)
        match = pick_apple_match(await self.itunes.search(term, parsed.type, country), parsed.type)
        summary = source.summary(parsed.type)
        summary["id"] = summary["id"] or parsed.id
        return ConversionResult(
            source=Catalog.SPOTIFY,
            target=Catalog.APPLE,
            input_url=parsed.original_url,
            output_url=apple_url_for(match, parsed.type),
            source_item=summary,
            target_item=match.summary(parsed.type, apple_url_for(match, parsed.type)) if match else None,
        )

    async def _resolve_episode(self, parsed: ParsedLink) -> AppleItem:
        """Show metadata plus, when it can be found, the episode title."""
        show = await self.itunes.lookup(ItemType.SHOW, parsed.show_id, parsed.country)
        if show is None:
            raise NotFoundError(
                f"Apple show not found ({parsed.show_id}).",
                details={"type": ItemType.SHOW.value, "id": parsed.show_id},
            )
        episode_name = await self.itunes.find_episode_name(
            parsed.show_id, show.collection_name or "", parsed.id, parsed.country
        )
        if not episode_name:
            logger.warning(
                "Could not determine the name of episode %s; Spotify search will use the show only",
                parsed.id,
            )
        return AppleItem(
            kind="podcast-episode",
            track_id=parsed.id,
            collection_id=parsed.show_id,
            track_name=episode_name,
            collection_name=show.collection_name,
            artist_name=show.artist_name,
        )

    async def apple_to_spotify(self, parsed: ParsedLink) -> ConversionResult:
        logger.info(
            "Converting Apple -> Spotify: type=%s id=%s show_id=%s country=%s",
            parsed.type.value, parsed.id, parsed.show_id, parsed.country,
        )
        if parsed.type is ItemType.EPISODE and parsed.show_id:
            source = await self._resolve_episode(parsed)
        else:
            source = await self.itunes.lookup(parsed.type, parsed.id, parsed.country)
            if source is None:
                raise NotFoundError(
                    f"Apple item not found ({parsed.type.value}/{parsed.id}).",
                    details={"type": parsed.type.value, "id": parsed.id},
                )

        query = build_spotify_query(source, parsed.type)
        match = pick_spotify_match(await self.spotify.search(query, parsed.type))

        summary = source.summary(parsed.type, apple_url_for(source, parsed.type))
        summary["id"] = parsed.id
        summary["showId"] = parsed.show_id
        return ConversionResult(
            source=Catalog.APPLE,
            target=Catalog.SPOTIFY,
            input_url=parsed.original_url,
            output_url=spotify_url_for(match, parsed.type),
            source_item=summary,
            target_item=match.summary(parsed.type) if match else None,
        )

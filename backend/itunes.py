"""Client for the unauthenticated iTunes Search and Lookup APIs."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests
from starlette.concurrency import run_in_threadpool

from .errors import UpstreamCommunicationError
from .models import AppleItem, ItemType

logger = logging.getLogger(__name__)

# (entity, media) pairs understood by the iTunes APIs.
ITUNES_ENTITIES = {
    ItemType.TRACK: ("song", "music"),
    ItemType.ALBUM: ("album", "music"),
    ItemType.ARTIST: ("musicArtist", "music"),
    ItemType.SHOW: ("podcast", "podcast"),
    ItemType.EPISODE: ("podcastEpisode", "podcast"),
}


class ITunesAPI:
    """Helper class to query the iTunes Search API."""

    SEARCH_URL = "https://itunes.apple.com/search"
    LOOKUP_URL = "https://itunes.apple.com/lookup"

    def __init__(self, timeout: float = 10.0) -> None:
        self.timeout = timeout

    async def _get_results(self, url: str, params: Dict[str, Any], operation: str) -> List[Dict[str, Any]]:
        try:
            resp = await run_in_threadpool(requests.get, url, params=params, timeout=self.timeout)
            resp.raise_for_status()
            data = resp.json()
        except (requests.RequestException, ValueError) as exc:
            logger.error("iTunes %s failed (params=%s): %s", operation, params, exc)
            raise UpstreamCommunicationError(f"Error communicating with the Apple API ({operation}).") from exc
        return data.get("results") or []

    async def lookup(self, item_type: ItemType, item_id: str, country: str) -> Optional[AppleItem]:
        """Return the first lookup result for ``item_id``, or None when there is none."""
        entity, _ = ITUNES_ENTITIES[item_type]
        logger.info("Looking up Apple item id=%s entity=%s country=%s", item_id, entity, country)
        results = await self._get_results(
            self.LOOKUP_URL,
            {"id": item_id, "country": country, "entity": entity},
            "lookup",
        )
        if not results:
            logger.info("No Apple details for %s/%s", item_type.value, item_id)
            return None
        item = AppleItem.from_json(results[0])
        logger.info("Apple details found: %s", item.display_name)
        return item

    async def search(self, term: str, item_type: ItemType, country: str, limit: int = 5) -> List[AppleItem]:
        entity, media = ITUNES_ENTITIES[item_type]
        params = {"term": term, "country": country, "media": media, "entity": entity, "limit": limit}
        logger.info("Searching Apple: %s", params)
        results = await self._get_results(self.SEARCH_URL, params, "search")
        return [AppleItem.from_json(r) for r in results]

    async def find_episode_name(
        self, show_id: str, show_name: str, episode_id: str, country: str
    ) -> Optional[str]:
        """Recover an episode's title by searching within its show.

        Lookup by episode id does not reliably return episode metadata, so we
        search the show's episodes and pick the one whose trackId matches.
        Returns None if the episode is not among the results.
        """
        params = {
            "term": show_name,
            "id": show_id,
            "entity": "podcastEpisode",
            "media": "podcast",
            "country": country,
            "limit": 200,
        }
        results = await self._get_results(self.SEARCH_URL, params, "episode search")
        for result in results:
            episode = AppleItem.from_json(result)
            if episode.kind == "podcast-episode" and episode.track_id == str(episode_id) and episode.track_name:
                logger.info("Found episode name via search: %s", episode.track_name)
                return episode.track_name
        logger.warning("Episode %s not found in search results for show %s", episode_id, show_id)
        return None

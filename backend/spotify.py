"""Spotify Web API client (client-credentials flow)."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

import requests
from starlette.concurrency import run_in_threadpool

from .errors import AuthError, NotFoundError, UpstreamCommunicationError
from .models import ItemType, SpotifyItem

logger = logging.getLogger(__name__)

# Refresh this long before the token actually expires.
EXPIRY_MARGIN_SECONDS = 5 * 60

SPOTIFY_PATHS = {
    ItemType.TRACK: "tracks",
    ItemType.ALBUM: "albums",
    ItemType.ARTIST: "artists",
    ItemType.SHOW: "shows",
    ItemType.EPISODE: "episodes",
}


@dataclass(frozen=True)
class AccessToken:
    value: str
    expires_at: float

    def is_fresh(self, now: float) -> bool:
        return now < self.expires_at - EXPIRY_MARGIN_SECONDS


class TokenProvider:
    """Caches a client-credentials token for the life of the process.

    Concurrent callers that find the token stale wait on one refresh instead
    of each hitting the token endpoint.
    """

    TOKEN_URL = "https://accounts.spotify.com/api/token"

    def __init__(
        self,
        client_id: Optional[str],
        client_secret: Optional[str],
        timeout: float = 10.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.client_id = client_id
        self.client_secret = client_secret
        self.timeout = timeout
        self._clock = clock
        self._token: Optional[AccessToken] = None
        self._lock: Optional[asyncio.Lock] = None
        self._lock_loop: Optional[asyncio.AbstractEventLoop] = None

    def _refresh_lock(self) -> asyncio.Lock:
        # Bound to the running loop; the provider may be built before the server loop exists.
        loop = asyncio.get_running_loop()
        if self._lock is None or self._lock_loop is not loop:
            self._lock = asyncio.Lock()
            self._lock_loop = loop
        return self._lock

    async def get_valid_token(self) -> str:
        token = self._token
        if token and token.is_fresh(self._clock()):
            return token.value
        async with self._refresh_lock():
            # Another task may have refreshed while we waited.
            token = self._token
            if token and token.is_fresh(self._clock()):
                return token.value
            self._token = await run_in_threadpool(self._request_token)
            return self._token.value

    def _request_token(self) -> AccessToken:
        if not (self.client_id and self.client_secret):
            raise AuthError("Spotify credentials are not configured.")
        logger.info("Requesting a new Spotify access token")
        now = self._clock()
        try:
            resp = requests.post(
                self.TOKEN_URL,
                data={"grant_type": "client_credentials"},
                auth=(self.client_id, self.client_secret),
                timeout=self.timeout,
            )
            resp.raise_for_status()
            data = resp.json()
            return AccessToken(
                value=data["access_token"],
                expires_at=now + float(data.get("expires_in", 3600)),
            )
        except (requests.RequestException, ValueError, KeyError) as exc:
            logger.error("Spotify token request failed: %s", exc)
            raise AuthError("Could not authenticate with Spotify.") from exc


class SpotifyAPI:
    """Lookups and searches against the Spotify Web API."""

    BASE_URL = "https://api.spotify.com/v1"
    SEARCH_URL = "https://api.spotify.com/v1/search"

    def __init__(self, tokens: TokenProvider, timeout: float = 10.0) -> None:
        self.tokens = tokens
        self.timeout = timeout

    async def _get(self, url: str, params: Optional[Dict[str, Any]] = None) -> requests.Response:
        token = await self.tokens.get_valid_token()
        headers = {"Authorization": f"Bearer {token}"}
        return await run_in_threadpool(
            requests.get, url, headers=headers, params=params, timeout=self.timeout
        )

    async def get_details(self, item_type: ItemType, item_id: str) -> SpotifyItem:
        """Fetch a track, album, artist, show or episode by id."""
        url = f"{self.BASE_URL}/{SPOTIFY_PATHS[item_type]}/{item_id}"
        try:
            resp = await self._get(url)
            if resp.status_code == 404:
                logger.error("Spotify %s/%s not found", item_type.value, item_id)
                raise NotFoundError(
                    f"Spotify item not found ({item_type.value}/{item_id}).",
                    details={"type": item_type.value, "id": item_id},
                )
            resp.raise_for_status()
            return SpotifyItem.from_json(resp.json())
        except (requests.RequestException, ValueError) as exc:
            logger.error("Error fetching Spotify details (%s/%s): %s", item_type.value, item_id, exc)
            raise UpstreamCommunicationError("Error communicating with the Spotify API.") from exc

    async def search(self, query: str, item_type: ItemType, limit: int = 5) -> List[SpotifyItem]:
        """Run a search restricted to one item type; results keep Spotify's order."""
        params = {"q": query, "type": item_type.value, "limit": limit}
        logger.info("Searching Spotify: q=%r type=%s", query, item_type.value)
        try:
            resp = await self._get(self.SEARCH_URL, params=params)
            resp.raise_for_status()
            data = resp.json()
        except (requests.RequestException, ValueError) as exc:
            logger.error("Error searching Spotify (%s, %r): %s", item_type.value, query, exc)
            raise UpstreamCommunicationError("Error communicating with the Spotify search API.") from exc
        items = (data.get(f"{item_type.value}s") or {}).get("items") or []
        # The API occasionally returns null placeholders in show/episode results.
        return [SpotifyItem.from_json(item) for item in items if item]

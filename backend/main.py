"""
Songbridge backend

This FastAPI application exposes a single endpoint (`/convert`) that accepts a
Spotify or Apple Music / Apple Podcasts link and answers with the equivalent
link on the other service. Tracks, albums, artists, podcast shows and podcast
episodes are supported.

The Spotify Web API requires an OAuth token, which we obtain via the
client-credentials flow. The iTunes Search and Lookup APIs
(``https://itunes.apple.com/search`` and ``/lookup``) need no authentication.

Environment variables used:

* ``SPOTIFY_CLIENT_ID`` and ``SPOTIFY_CLIENT_SECRET`` – credentials for the
  Spotify API.
* ``PORT``, ``DEFAULT_COUNTRY``, ``HTTP_TIMEOUT`` and ``LOG_LEVEL`` – see
  ``backend/config.py``.

A conversion that completes but finds no equivalent item is still a 200; its
``outputUrl`` is null.

To run the development server locally:

    uvicorn backend.main:app --reload --port 3000
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import Settings
from .converter import Converter
from .errors import AuthError, ConversionError, UnrecognizedLinkError
from .itunes import ITunesAPI
from .parser import parse_url
from .spotify import SpotifyAPI, TokenProvider

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    logging.basicConfig(level=settings.log_level)

    tokens = TokenProvider(
        settings.spotify_client_id, settings.spotify_client_secret, timeout=settings.http_timeout
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        try:
            await tokens.get_valid_token()
        except AuthError as exc:
            logger.warning("Initial Spotify token request failed, will retry on demand: %s", exc.message)
        yield

    app = FastAPI(title="Songbridge", lifespan=lifespan)
    app.state.settings = settings
    app.state.converter = Converter(
        SpotifyAPI(tokens, timeout=settings.http_timeout),
        ITunesAPI(timeout=settings.http_timeout),
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ConversionError)
    async def conversion_error_handler(request: Request, exc: ConversionError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.get("/health")
    async def health_check():
        return {"status": "healthy", "service": "songbridge"}

    @app.get("/convert")
    async def convert(
        request: Request,
        url: Optional[str] = None,
        country: Optional[str] = None,
        converter: Converter = Depends(get_converter),
    ):
        """Convert ``url`` to the other catalog.

        :param url: The Spotify or Apple link to convert.
        :param country: Apple storefront to search when converting from Spotify.
        """
        if not url:
            raise UnrecognizedLinkError(url, 'Query parameter "url" is required.')
        parsed = parse_url(url)
        if parsed is None:
            raise UnrecognizedLinkError(url)
        logger.info("Detected %s %s link: %s", parsed.source.value, parsed.type.value, url)

        try:
            result = await converter.convert(parsed, country or request.app.state.settings.default_country)
        except ConversionError:
            raise
        except Exception:
            logger.exception("Unexpected error converting %s", url)
            return JSONResponse(
                status_code=500,
                content={"error": "InternalError", "message": "Conversion failed."},
            )
        return result.to_dict()

    return app


def get_converter(request: Request) -> Converter:
    return request.app.state.converter


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=app.state.settings.port)

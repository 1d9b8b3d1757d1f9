"""Shared pytest fixtures for the backend tests."""
from __future__ import annotations

from typing import Any, Optional
from unittest.mock import MagicMock

import pytest
import requests

from backend.config import Settings


def _make_response(status_code: int = 200, data: Optional[Any] = None) -> MagicMock:
    """Stand-in for ``requests.Response`` with the bits the clients use."""
    resp = MagicMock(spec=requests.Response)
    resp.status_code = status_code
    resp.json.return_value = data if data is not None else {}
    if status_code >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(f"{status_code} error")
    else:
        resp.raise_for_status.return_value = None
    return resp


@pytest.fixture
def settings() -> Settings:
    return Settings(spotify_client_id="client-id", spotify_client_secret="client-secret")


@pytest.fixture
def token_response() -> MagicMock:
    return _make_response(200, {"access_token": "tok-1", "expires_in": 3600})


@pytest.fixture(name="make_response")
def make_response_fixture():
    return _make_response

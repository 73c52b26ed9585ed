"""Shared fixtures: an app wired to in‑memory stores and an authenticated client."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from wellness_api.app.core.blob_store import InMemoryBlobStore
from wellness_api.app.core.config import Settings
from wellness_api.app.core.kv_store import InMemoryKVStore
from wellness_api.app.main import create_app

API_TOKEN = "test-token"
PREFIX = "/api/v1"


@pytest.fixture
def kv():
    return InMemoryKVStore()


@pytest.fixture
def blobs():
    return InMemoryBlobStore()


@pytest.fixture
def test_settings():
    return Settings(api_token=API_TOKEN, api_prefix=PREFIX)


@pytest.fixture
def app(test_settings, kv, blobs):
    return create_app(test_settings, kv=kv, blobs=blobs)


@pytest.fixture
def client(app):
    with TestClient(app, headers={"Authorization": f"Bearer {API_TOKEN}"}) as c:
        yield c


@pytest.fixture
def anon_client(app):
    with TestClient(app) as c:
        yield c

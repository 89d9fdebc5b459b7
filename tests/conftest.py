"""Pytest configuration and fixtures."""

from __future__ import annotations

import datetime as dt
import json
import os
from typing import Any

import pytest
from fastapi.testclient import TestClient

from listing_api.auth import AuthService
from listing_api.catalog import PropertyCatalog
from listing_api.db import make_engine, make_session_factory
from listing_api.main import create_app
from listing_api.models import Base
from listing_api.search import SearchIndex
from listing_api.security import TokenSigner
from listing_api.utils.cloudinary_storage import MediaUploader
from listing_api.views import ViewPolicy

TEST_SECRET = "test-secret"


class FakeClock:
    """Controllable replacement for the view policy's `now`."""

    def __init__(self, start: dt.datetime) -> None:
        self.now = start

    def __call__(self) -> dt.datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + dt.timedelta(**kwargs)


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None, text: str | None = None) -> None:
        self.status_code = status_code
        self._payload = payload
        self.text = text if text is not None else json.dumps(payload)

    def json(self) -> Any:
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


class FakeHttp:
    """
    Records calls the way a `requests.Session` would receive them. `routes`
    maps (method, url) to a canned response; anything else gets `response`.
    """

    def __init__(
        self,
        response: FakeResponse | None = None,
        error: Exception | None = None,
        routes: dict[tuple[str, str], FakeResponse] | None = None,
    ) -> None:
        self.response = response or FakeResponse(200, {"hits": []})
        self.error = error
        self.routes = routes or {}
        self.calls: list[tuple[str, str, dict[str, Any]]] = []

    def _call(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append((method, url, kwargs))
        if self.error is not None:
            raise self.error
        return self.routes.get((method, url), self.response)

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        return self._call("GET", url, **kwargs)

    def post(self, url: str, **kwargs: Any) -> FakeResponse:
        return self._call("POST", url, **kwargs)


class FakeCloudinary:
    """Stands in for `cloudinary.uploader.upload`; remembers the temp path it was given."""

    def __init__(self, result: dict[str, Any] | None = None, error: Exception | None = None) -> None:
        self.result = result if result is not None else {"secure_url": "https://res.cloudinary.com/demo/image/upload/v1/property_uploads/a.jpg"}
        self.error = error
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.seen_existing: list[bool] = []

    def __call__(self, path: str, **kwargs: Any) -> dict[str, Any]:
        self.calls.append((path, kwargs))
        self.seen_existing.append(os.path.exists(path))
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def session_factory():
    engine = make_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    yield make_session_factory(engine)
    engine.dispose()


@pytest.fixture
def signer() -> TokenSigner:
    return TokenSigner(TEST_SECRET, exp_hours=24)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(dt.datetime(2026, 1, 1, 12, 0, tzinfo=dt.timezone.utc))


@pytest.fixture
def auth(session_factory, signer) -> AuthService:
    return AuthService(session_factory, signer)


@pytest.fixture
def catalog(session_factory) -> PropertyCatalog:
    return PropertyCatalog(session_factory)


@pytest.fixture
def view_policy(session_factory, clock) -> ViewPolicy:
    return ViewPolicy(session_factory, clock=clock)


@pytest.fixture
def fake_cloudinary() -> FakeCloudinary:
    return FakeCloudinary()


@pytest.fixture
def fake_http() -> FakeHttp:
    return FakeHttp()


@pytest.fixture
def search_index(fake_http) -> SearchIndex:
    return SearchIndex(base_url="https://search.test", api_key="k", collection="properties", http=fake_http)


@pytest.fixture
def client(session_factory, signer, view_policy, fake_cloudinary, search_index) -> TestClient:
    app = create_app(
        session_factory=session_factory,
        signer=signer,
        uploader=MediaUploader(folder="property_uploads", enabled=True, upload_fn=fake_cloudinary),
        search_index=search_index,
        view_policy=view_policy,
        configure_logging=False,
    )
    return TestClient(app)


@pytest.fixture
def registration() -> dict[str, str]:
    return {
        "firstName": "Ada",
        "lastName": "Lovelace",
        "phoneNumber": "+44 20 7946 0000",
        "email": "ada@example.com",
        "password": "s3cret-pass",
    }

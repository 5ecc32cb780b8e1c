"""Pytest configuration and fixtures."""

import httpx
import pytest

from sbi_extract.config import reset_settings
from tests.fixtures.dom_fixtures import RecordingChannel, png_bytes


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Keep tests independent of the environment and of each other."""
    for name in ("SBI_IMG_FULL_PARSE", "SBI_TARGET_ENV", "SBI_URL_ENGINES", "SBI_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def channel():
    """Provide a recording message channel."""
    return RecordingChannel()


@pytest.fixture
def red_png():
    """Provide a small opaque red PNG."""
    return png_bytes()


@pytest.fixture
def image_server(red_png):
    """
    Provide an httpx client serving images from a route table.

    The returned factory takes ``{path: response_or_exception}`` and returns
    ``(client, requests)``; unknown paths answer 404.
    """

    def factory(routes: dict | None = None):
        routes = routes if routes is not None else {"/image.png": red_png}
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            outcome = routes.get(request.url.path)
            if outcome is None:
                return httpx.Response(404)
            if isinstance(outcome, Exception):
                raise outcome
            if isinstance(outcome, httpx.Response):
                return outcome
            return httpx.Response(200, content=outcome, headers={"content-type": "image/png"})

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return client, requests

    return factory

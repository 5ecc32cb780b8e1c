"""
Remote image resolution.

Remote candidates are either fetched and embedded (when the search mode
requires an upload or the engine cannot take an image URL) or reduced to a
bare URL reference for the engine to fetch itself.
"""

from __future__ import annotations

import httpx

from ..collaborators import MessageChannel, TokenFactory, new_token
from ..dom.node import PageDocument
from ..exceptions import FetchError
from ..imaging.normalize import filename_from_url, normalize_filename, normalize_image
from ..logging import get_logger
from ..messages import SetRequestReferrer
from ..models import Candidate

logger = get_logger(__name__)

DEFAULT_FETCH_TIMEOUT = 120.0
TOKEN_HEADER = "x-sbi-token"

# Platforms whose fetches need the referrer applied by the privileged side
REFERRER_TOKEN_ENVS = frozenset({"firefox"})


class RemoteImageFetcher:
    """Fetches image bytes with the page's credentials."""

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        timeout_seconds: float = DEFAULT_FETCH_TIMEOUT,
    ):
        """
        Initialize the fetcher.

        Args:
            client: Optional shared HTTP client.
            timeout_seconds: Timeout for a single fetch.
        """
        self._client = client
        self._timeout = timeout_seconds

    async def fetch(
        self,
        url: str,
        cookies: dict[str, str] | None = None,
        token: str | None = None,
    ) -> bytes | None:
        """
        GET an image.

        Args:
            url: Absolute http(s) URL.
            cookies: Cookies the page holds for the URL.
            token: Referrer token sent in the ``x-sbi-token`` header.

        Returns:
            Response body, or None on any failure or an empty body.
        """
        headers = {}
        if cookies:
            headers["Cookie"] = "; ".join(f"{name}={value}" for name, value in cookies.items())
        if token:
            headers[TOKEN_HEADER] = token

        try:
            return await self._get(url, headers)
        except FetchError as e:
            logger.info("fetch_failed", url=url, error=str(e))
            return None

    async def _get(self, url: str, headers: dict[str, str]) -> bytes:
        try:
            if self._client is not None:
                response = await self._client.get(
                    url, headers=headers, timeout=self._timeout, follow_redirects=True
                )
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.get(url, headers=headers, follow_redirects=True)
        except httpx.TimeoutException as e:
            raise FetchError(f"timed out after {self._timeout}s") from e
        except httpx.HTTPError as e:
            raise FetchError(f"request failed: {e}") from e

        if not response.is_success:
            raise FetchError(f"status {response.status_code}")
        if not response.content:
            raise FetchError("empty body")
        return response.content


class RemoteResolver:
    """Resolves candidates whose ``data`` is a remote URL."""

    def __init__(
        self,
        document: PageDocument,
        fetcher: RemoteImageFetcher,
        channel: MessageChannel,
        target_env: str = "chrome",
        token_factory: TokenFactory = new_token,
    ):
        self.document = document
        self.fetcher = fetcher
        self.channel = channel
        self.target_env = target_env
        self.token_factory = token_factory

    async def resolve(self, candidate: Candidate, must_upload: bool, url_support: bool) -> Candidate | None:
        """
        Resolve one remote candidate.

        Args:
            candidate: Candidate whose ``data`` is a validated URL.
            must_upload: The search mode requires uploading the image.
            url_support: The engine accepts image URLs.

        Returns:
            Embedded candidate, bare URL candidate, or None when the fetch failed.
        """
        url = candidate.data or ""
        if not must_upload and url_support:
            return Candidate(url=url)

        body = await self._fetch(url)
        if body is None:
            return None

        image = normalize_image(blob=body)
        if image is None:
            logger.debug("fetched_body_not_image", url=url)
            return None

        return Candidate(
            url=url,
            data=image.data,
            filename=normalize_filename(filename_from_url(url), image.ext),
            must_upload=must_upload,
        )

    async def _fetch(self, url: str) -> bytes | None:
        cookies = await self.document.cookies_for(url)

        if self.target_env not in REFERRER_TOKEN_ENVS:
            return await self.fetcher.fetch(url, cookies=cookies)

        token = self.token_factory()
        await self.channel.send(
            SetRequestReferrer(referrer=self.document.location, token=token, url=url)
        )
        return await self.fetcher.fetch(url, cookies=cookies, token=token)

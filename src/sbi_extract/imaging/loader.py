"""
Image loading for probes and scheme conversion.

Resolves an image reference of any supported scheme to a decoded Pillow
image. Loading never raises: an unreadable, undecodable or slow resource is
reported as "not an image".
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from urllib.parse import urlsplit
from urllib.request import url2pathname

import httpx
from PIL import Image

from ..dom.node import PageDocument
from ..exceptions import ExtractionTimeoutError, ImageLoadError, with_timeout
from ..logging import get_logger
from ..models import Scheme
from .normalize import open_image, parse_data_url

logger = get_logger(__name__)

DEFAULT_PROBE_TIMEOUT = 30.0


class ImageLoader:
    """
    Loads referenced images the way an image element would.

    Handles:
    - ``data:`` references, decoded in process
    - ``file:`` references, read from disk
    - ``blob:`` references, read through the page that owns them
    - ``http(s):`` references, fetched with httpx
    """

    def __init__(
        self,
        document: PageDocument,
        client: httpx.AsyncClient | None = None,
        timeout_seconds: float = DEFAULT_PROBE_TIMEOUT,
    ):
        """
        Initialize the loader.

        Args:
            document: Document that owns blob references.
            client: Optional shared HTTP client.
            timeout_seconds: Timeout for a single load.
        """
        self.document = document
        self._client = client
        self._timeout = timeout_seconds

    async def load(self, url: str) -> Image.Image | None:
        """
        Load and decode the image at a reference.

        Args:
            url: Image reference of any supported scheme.

        Returns:
            Decoded image, or None if the reference is not a loadable image.
        """
        try:
            data = await with_timeout(self._read(url), self._timeout, f"load {url[:80]}")
        except (ImageLoadError, ExtractionTimeoutError) as e:
            logger.debug("image_load_failed", url=url, error=str(e))
            return None
        return open_image(data)

    async def is_image(self, url: str) -> bool:
        return await self.load(url) is not None

    async def _read(self, url: str) -> bytes:
        scheme = Scheme.of(url)

        if scheme is Scheme.EMBEDDED:
            try:
                return parse_data_url(url)[1]
            except ValueError as e:
                raise ImageLoadError(str(e)) from e

        if scheme is Scheme.LOCAL_FILE:
            return await self._read_file(url)

        if scheme is Scheme.BLOB:
            data = await self.document.read_blob(url)
            if not data:
                raise ImageLoadError(f"blob not readable: {url}")
            return data

        if scheme is Scheme.REMOTE:
            return await self._read_remote(url)

        raise ImageLoadError(f"unsupported reference: {url[:80]}")

    async def _read_file(self, url: str) -> bytes:
        path = Path(url2pathname(urlsplit(url).path))
        try:
            return await asyncio.to_thread(path.read_bytes)
        except OSError as e:
            raise ImageLoadError(f"cannot read {path}: {e}") from e

    async def _read_remote(self, url: str) -> bytes:
        try:
            if self._client is not None:
                response = await self._client.get(url, follow_redirects=True)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.get(url, follow_redirects=True)
        except httpx.HTTPError as e:
            raise ImageLoadError(f"request failed: {e}") from e

        if not response.is_success:
            raise ImageLoadError(f"status {response.status_code} for {url}")
        return response.content

"""
Per-node image discovery.

Inspects a single structural node (never its descendants) and yields the raw
image references it carries: element sources, probed embeds and frames,
canvas and video snapshots, and ``url(...)`` tokens of image-bearing style
properties, including those of the ``::before`` and ``::after`` pseudo states.

Extraction rules are registered per ``NodeKind``; every node additionally
gets the style scan.
"""

from __future__ import annotations

import re
from collections.abc import AsyncIterator, Callable
from urllib.parse import urljoin

from ..dom.node import REPLACED_KINDS, DocumentNode, NodeKind, PageDocument, node_kind
from ..imaging.canvas import OffscreenCanvas, matches_blank_canvas
from ..imaging.loader import ImageLoader
from ..imaging.normalize import open_image, parse_data_url
from ..logging import get_logger
from ..models import Candidate

logger = get_logger(__name__)

CSS_IMAGE_PROPERTIES = ("background-image", "border-image-source", "mask-image")
LIST_ITEM_PROPERTIES = ("list-style-image",)
PSEUDO_CONTENT_PROPERTIES = ("content",)
PSEUDO_ELEMENTS = ("::before", "::after")

CSS_URL_RE = re.compile(r"""url\(['"]?([^'")]+)['"]?\)""", re.IGNORECASE)

# HTMLMediaElement.HAVE_CURRENT_DATA
HAVE_CURRENT_DATA = 2

Rule = Callable[[DocumentNode], AsyncIterator[Candidate]]


def css_urls(value: str | None) -> list[str]:
    """URL tokens of every ``url(...)`` function in a style value."""
    if not value or value == "none":
        return []
    return CSS_URL_RE.findall(value)


class NodeExtractor:
    """Discovers raw image candidates on one node at a time."""

    def __init__(self, document: PageDocument, loader: ImageLoader):
        """
        Initialize the extractor.

        Args:
            document: Document the nodes belong to, used to resolve relative URLs.
            loader: Image loader used to probe embedded resources.
        """
        self.document = document
        self.loader = loader
        self._rules: dict[NodeKind, Rule] = {
            NodeKind.IMG: self._image_element,
            NodeKind.SVG_IMAGE: self._svg_image,
            NodeKind.EMBED: self._embed,
            NodeKind.OBJECT: self._object,
            NodeKind.IFRAME: self._iframe,
            NodeKind.CANVAS: self._canvas,
            NodeKind.VIDEO: self._video,
        }

    async def extract(self, node: DocumentNode) -> list[Candidate]:
        return [candidate async for candidate in self.iter_candidates(node)]

    async def iter_candidates(self, node: DocumentNode) -> AsyncIterator[Candidate]:
        """
        Yield the raw candidates of a node in discovery order.

        Args:
            node: Node to inspect.

        Yields:
            Candidates whose ``data`` holds a raw image reference.
        """
        kind = node_kind(node)

        rule = self._rules.get(kind)
        if rule is not None:
            async for candidate in rule(node):
                yield candidate

        properties = CSS_IMAGE_PROPERTIES
        if kind is NodeKind.LIST_ITEM:
            properties += LIST_ITEM_PROPERTIES

        for candidate in await self._style_images(node, properties):
            yield candidate

        if kind not in REPLACED_KINDS:
            for pseudo in PSEUDO_ELEMENTS:
                for candidate in await self._style_images(
                    node, properties + PSEUDO_CONTENT_PROPERTIES, pseudo
                ):
                    yield candidate

    async def _style_images(
        self, node: DocumentNode, properties: tuple[str, ...], pseudo: str | None = None
    ) -> list[Candidate]:
        results = []
        for prop in properties:
            value = await node.computed_style(prop, pseudo)
            results.extend(Candidate(data=url) for url in css_urls(value))
        return results

    async def _image_element(self, node: DocumentNode) -> AsyncIterator[Candidate]:
        src = await node.get_property("currentSrc")
        if src:
            yield Candidate(data=src)

    async def _svg_image(self, node: DocumentNode) -> AsyncIterator[Candidate]:
        href = await node.get_attribute("href") or await node.get_attribute("xlink:href")
        if href:
            url = self._absolute_url(href)
            if url:
                yield Candidate(data=url)

    async def _embed(self, node: DocumentNode) -> AsyncIterator[Candidate]:
        src = await node.get_property("src")
        if src and await self.loader.is_image(src):
            yield Candidate(data=src)

    async def _object(self, node: DocumentNode) -> AsyncIterator[Candidate]:
        data = await node.get_property("data")
        if data and await self.loader.is_image(data):
            yield Candidate(data=data)

    async def _iframe(self, node: DocumentNode) -> AsyncIterator[Candidate]:
        src = await node.get_property("src")
        if src and not await node.get_property("srcdoc") and await self.loader.is_image(src):
            yield Candidate(data=src)

    async def _canvas(self, node: DocumentNode) -> AsyncIterator[Candidate]:
        data = await node.capture_frame()
        width = int(await node.get_property("width") or 0)
        height = int(await node.get_property("height") or 0)
        if data and not matches_blank_canvas(data, width, height):
            yield Candidate(data=data)

    async def _video(self, node: DocumentNode) -> AsyncIterator[Candidate]:
        if (await node.get_property("readyState") or 0) >= HAVE_CURRENT_DATA:
            data = await self._video_frame(node)
            if data:
                yield Candidate(data=data)

        poster = await node.get_property("poster")
        if poster:
            yield Candidate(data=poster)

    async def _video_frame(self, node: DocumentNode) -> str | None:
        frame_url = await node.capture_frame()
        if not frame_url:
            return None
        try:
            frame = open_image(parse_data_url(frame_url)[1])
        except ValueError:
            return None
        if frame is None:
            return None

        width = int(await node.get_property("videoWidth") or 0)
        height = int(await node.get_property("videoHeight") or 0)
        canvas = OffscreenCanvas(width, height)
        if not canvas.draw_image(frame):
            return None
        return canvas.to_data_url()

    def _absolute_url(self, url: str) -> str | None:
        try:
            return urljoin(self.document.base_url, url.strip())
        except ValueError:
            logger.debug("url_resolution_failed", url=url)
            return None

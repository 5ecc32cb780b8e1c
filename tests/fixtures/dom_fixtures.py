"""
In-memory document fixtures for testing extraction components.

Provides a small fake DOM implementing the ``DocumentNode`` and
``PageDocument`` protocols, recording collaborators, and synthetic image
payloads built with Pillow.

Example usage:
    >>> from tests.fixtures.dom_fixtures import FakeDocument, FakeNode, html_page
    >>>
    >>> img = FakeNode("img", box=(10, 10, 50, 50), properties={"currentSrc": "https://x/a.png"})
    >>> document = FakeDocument(html_page(img))
"""

from __future__ import annotations

import base64
import io
import struct
import zlib
from typing import Any

from PIL import Image

from sbi_extract.collaborators import ParseOptions
from sbi_extract.messages import Message
from sbi_extract.models import BoundingBox

RED = (255, 0, 0, 255)
BLUE = (0, 0, 255, 255)


def png_bytes(size: tuple[int, int] = (4, 4), color: tuple[int, int, int, int] = RED) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGBA", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


def jpeg_bytes(size: tuple[int, int] = (4, 4), color: tuple[int, int, int] = (0, 128, 0)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="JPEG")
    return buffer.getvalue()


def tiff_bytes(size: tuple[int, int] = (4, 4)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, (10, 20, 30)).save(buffer, format="TIFF")
    return buffer.getvalue()


def _png_chunk(kind: bytes, body: bytes) -> bytes:
    return struct.pack(">I", len(body)) + kind + body + struct.pack(">I", zlib.crc32(kind + body))


def oversized_png_bytes(width: int = 20000, height: int = 20000) -> bytes:
    """A PNG whose header declares a size Pillow refuses to decode."""
    header = struct.pack(">IIBBBBB", width, height, 8, 6, 0, 0, 0)
    return (
        b"\x89PNG\r\n\x1a\n"
        + _png_chunk(b"IHDR", header)
        + _png_chunk(b"IDAT", zlib.compress(b"\x00"))
        + _png_chunk(b"IEND", b"")
    )


def data_url(data: bytes, mime: str = "image/png") -> str:
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"


def decode_data_url(url: str) -> Image.Image:
    payload = url.split(",", 1)[1]
    return Image.open(io.BytesIO(base64.b64decode(payload)))


class FakeNode:
    """In-memory element, document or shadow root."""

    def __init__(
        self,
        tag: str,
        box: tuple[float, float, float, float] = (0, 0, 0, 0),
        attributes: dict[str, str] | None = None,
        properties: dict[str, Any] | None = None,
        styles: dict[Any, str] | None = None,
        children: list[FakeNode] | None = None,
        shadow: FakeNode | None = None,
        frame: str | None = None,
    ):
        """
        Build a node.

        Args:
            tag: Node name.
            box: Viewport bounding box as (x, y, width, height).
            attributes: Element attributes.
            properties: Element properties such as ``currentSrc``.
            styles: Computed style values keyed by property name, or by
                ``(property, pseudo)`` for pseudo states.
            children: Child nodes in document order.
            shadow: Attached shadow root.
            frame: Data URL returned as the current canvas or video pixels.
        """
        self._tag = tag.lower()
        self.box = BoundingBox(*box)
        self.attributes = attributes or {}
        self.properties = properties or {}
        self.styles = {
            (key if isinstance(key, tuple) else (key, None)): value
            for key, value in (styles or {}).items()
        }
        self.children = list(children or [])
        self.shadow = shadow
        self.frame = frame
        self.style_reads: list[tuple[str, str | None]] = []

    def __repr__(self) -> str:
        return f"FakeNode({self._tag!r})"

    @property
    def tag(self) -> str:
        return self._tag

    async def get_attribute(self, name: str) -> str | None:
        return self.attributes.get(name)

    async def get_property(self, name: str) -> Any:
        return self.properties.get(name)

    async def computed_style(self, prop: str, pseudo: str | None = None) -> str:
        self.style_reads.append((prop, pseudo))
        return self.styles.get((prop, pseudo), "none")

    async def bounding_box(self) -> BoundingBox:
        return self.box

    async def child_nodes(self) -> list[FakeNode]:
        return list(self.children)

    async def shadow_root(self) -> FakeNode | None:
        return self.shadow

    async def capture_frame(self) -> str | None:
        return self.frame


def html_page(*body_children: FakeNode, box: tuple[float, float, float, float] = (0, 0, 1000, 1000)) -> FakeNode:
    """Document node holding ``html > body > children``."""
    body = FakeNode("body", box=box, children=list(body_children))
    html = FakeNode("html", box=box, children=[body])
    return FakeNode("#document", children=[html])


class FakeDocument:
    """In-memory page hosting a fake node tree."""

    def __init__(
        self,
        root: FakeNode,
        location: str = "https://example.com/page.html",
        base_url: str | None = None,
        scroll: tuple[float, float] = (0.0, 0.0),
        blobs: dict[str, bytes] | None = None,
        cookies: dict[str, str] | None = None,
        node_at: FakeNode | None = None,
    ):
        self._root = root
        self._location = location
        self._base_url = base_url or location
        self.scroll = scroll
        self.blobs = blobs or {}
        self.cookies = cookies or {}
        self.node_at = node_at

    @property
    def location(self) -> str:
        return self._location

    @property
    def base_url(self) -> str:
        return self._base_url

    async def root(self) -> FakeNode:
        return self._root

    async def document_element(self) -> FakeNode | None:
        return self._root.children[0] if self._root.children else None

    async def scroll_offset(self) -> tuple[float, float]:
        return self.scroll

    async def read_blob(self, url: str) -> bytes | None:
        return self.blobs.get(url)

    async def cookies_for(self, url: str) -> dict[str, str]:
        return dict(self.cookies)

    async def node_at_point(self, x: float, y: float) -> FakeNode | None:
        return self.node_at


class RecordingChannel:
    """Message channel keeping every message it is sent."""

    def __init__(self) -> None:
        self.messages: list[Message] = []

    async def send(self, message: Message) -> None:
        self.messages.append(message)

    def kinds(self) -> list[str]:
        return [message.kind for message in self.messages]


class StaticOptions:
    """Options source returning fixed options."""

    def __init__(self, options: ParseOptions | None = None):
        self.options = options or ParseOptions()
        self.reads = 0

    async def read_options(self) -> ParseOptions:
        self.reads += 1
        return self.options


class FixedEngines:
    """Engine capabilities answering the same for every engine."""

    def __init__(self, url_support: bool = False):
        self.url_support = url_support

    async def has_url_support(self, engine: str) -> bool:
        return self.url_support

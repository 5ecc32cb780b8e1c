"""
Playwright implementation of the document surface.

Each ``PlaywrightNode`` wraps an ``ElementHandle`` (elements, the document
node and shadow roots are all handles to DOM nodes) and answers the
``DocumentNode`` protocol with small ``evaluate`` snippets run in the page.
"""

from __future__ import annotations

import base64
from typing import Any

from playwright.async_api import ElementHandle, JSHandle, Page

from ..exceptions import DocumentAccessError
from ..logging import get_logger
from ..models import BoundingBox

logger = get_logger(__name__)

_STYLE_JS = """
(el, [prop, pseudo]) => window.getComputedStyle(el, pseudo).getPropertyValue(prop)
"""

_RECT_JS = """
(el) => {
    const rect = el.getBoundingClientRect();
    return {x: rect.left, y: rect.top, width: rect.width, height: rect.height};
}
"""

_SHADOW_JS = "(el) => el.openOrClosedShadowRoot || el.shadowRoot || null"

_CAPTURE_JS = """
(el) => {
    try {
        if (el instanceof HTMLCanvasElement) {
            return el.toDataURL('image/png');
        }
        if (el instanceof HTMLVideoElement) {
            const cnv = document.createElement('canvas');
            cnv.width = el.videoWidth;
            cnv.height = el.videoHeight;
            cnv.getContext('2d').drawImage(el, 0, 0);
            return cnv.toDataURL('image/png');
        }
    } catch (e) {
        // Tainted or detached surfaces cannot be read
    }
    return null;
}
"""

_READ_BLOB_JS = """
async (url) => {
    try {
        const rsp = await fetch(url);
        const buffer = new Uint8Array(await rsp.arrayBuffer());
        let binary = '';
        for (let i = 0; i < buffer.length; i += 0x8000) {
            binary += String.fromCharCode.apply(null, buffer.subarray(i, i + 0x8000));
        }
        return btoa(binary);
    } catch (e) {
        return null;
    }
}
"""

_NODE_AT_POINT_JS = """
([x, y]) => document.elementFromPoint(x - window.scrollX, y - window.scrollY)
"""


class PlaywrightNode:
    """DocumentNode backed by a Playwright element handle."""

    def __init__(self, handle: ElementHandle, tag: str):
        self.handle = handle
        self._tag = tag

    @classmethod
    async def wrap(cls, handle: JSHandle) -> PlaywrightNode | None:
        """Wrap a handle to a DOM node, None when the handle is not a node."""
        element = handle.as_element()
        if element is None:
            return None
        tag = await element.evaluate("(el) => el.nodeName.toLowerCase()")
        return cls(element, tag)

    @property
    def tag(self) -> str:
        return self._tag

    async def get_attribute(self, name: str) -> str | None:
        return await self.handle.evaluate(
            "(el, name) => (el.getAttribute ? el.getAttribute(name) : null)", name
        )

    async def get_property(self, name: str) -> Any:
        value = await self.handle.get_property(name)
        try:
            return await value.json_value()
        finally:
            await value.dispose()

    async def computed_style(self, prop: str, pseudo: str | None = None) -> str:
        return await self.handle.evaluate(_STYLE_JS, [prop, pseudo])

    async def bounding_box(self) -> BoundingBox:
        rect = await self.handle.evaluate(_RECT_JS)
        return BoundingBox.from_dict(rect)

    async def child_nodes(self) -> list[PlaywrightNode]:
        array = await self.handle.evaluate_handle("(el) => Array.from(el.children || [])")
        try:
            properties = await array.get_properties()
            indexed = [(int(key), child) for key, child in properties.items() if key.isdigit()]
            children = []
            for _, child in sorted(indexed, key=lambda item: item[0]):
                node = await PlaywrightNode.wrap(child)
                if node is not None:
                    children.append(node)
            return children
        finally:
            await array.dispose()

    async def shadow_root(self) -> PlaywrightNode | None:
        handle = await self.handle.evaluate_handle(_SHADOW_JS)
        return await PlaywrightNode.wrap(handle)

    async def capture_frame(self) -> str | None:
        return await self.handle.evaluate(_CAPTURE_JS)

    def __repr__(self) -> str:
        return f"PlaywrightNode({self._tag!r})"


class PlaywrightDocument:
    """PageDocument backed by a Playwright page."""

    def __init__(self, page: Page):
        self.page = page
        self._base_url: str | None = None

    @classmethod
    async def create(cls, page: Page) -> PlaywrightDocument:
        document = cls(page)
        document._base_url = await page.evaluate("document.baseURI")
        return document

    @property
    def location(self) -> str:
        return self.page.url

    @property
    def base_url(self) -> str:
        return self._base_url or self.page.url

    async def root(self) -> PlaywrightNode:
        node = await PlaywrightNode.wrap(await self.page.evaluate_handle("document"))
        if node is None:
            raise DocumentAccessError(f"document node is not accessible on {self.page.url}")
        return node

    async def document_element(self) -> PlaywrightNode | None:
        return await PlaywrightNode.wrap(
            await self.page.evaluate_handle("document.documentElement")
        )

    async def scroll_offset(self) -> tuple[float, float]:
        x, y = await self.page.evaluate("[window.scrollX, window.scrollY]")
        return float(x), float(y)

    async def read_blob(self, url: str) -> bytes | None:
        encoded = await self.page.evaluate(_READ_BLOB_JS, url)
        if encoded is None:
            logger.debug("blob_read_failed", url=url)
            return None
        return base64.b64decode(encoded)

    async def cookies_for(self, url: str) -> dict[str, str]:
        cookies = await self.page.context.cookies([url])
        return {cookie["name"]: cookie["value"] for cookie in cookies}

    async def node_at_point(self, x: float, y: float) -> PlaywrightNode | None:
        handle = await self.page.evaluate_handle(_NODE_AT_POINT_JS, [x, y])
        return await PlaywrightNode.wrap(handle)

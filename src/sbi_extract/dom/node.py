"""
Document surface consumed by the extraction pipeline.

The pipeline reads a rendered page through two narrow protocols so that it
can run against a live browser page or an in-memory tree alike:

- ``DocumentNode``: one structural node (element, document or shadow root).
- ``PageDocument``: the document hosting the nodes.

Node kinds are classified once into ``NodeKind`` so extraction rules can be
registered per kind instead of comparing tag names.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Protocol, runtime_checkable

from ..models import BoundingBox


class NodeKind(Enum):
    """Node-kind variants with dedicated extraction behaviour."""

    IMG = "img"
    SVG_IMAGE = "image"
    EMBED = "embed"
    OBJECT = "object"
    IFRAME = "iframe"
    CANVAS = "canvas"
    VIDEO = "video"
    LIST_ITEM = "li"
    HTML = "html"
    SVG = "svg"
    OTHER = "other"

    @classmethod
    def from_tag(cls, tag: str) -> NodeKind:
        try:
            return cls(tag.lower())
        except ValueError:
            return cls.OTHER


# Elements whose content is replaced; their pseudo states are not rendered
REPLACED_KINDS = frozenset({NodeKind.IMG, NodeKind.VIDEO, NodeKind.IFRAME, NodeKind.EMBED})

# Document roots that can be scanned
PAGE_ROOT_KINDS = frozenset({NodeKind.HTML, NodeKind.SVG})


@runtime_checkable
class DocumentNode(Protocol):
    """A structural node of a rendered document."""

    @property
    def tag(self) -> str:
        """Lower-case node name."""
        ...

    async def get_attribute(self, name: str) -> str | None: ...

    async def get_property(self, name: str) -> Any: ...

    async def computed_style(self, prop: str, pseudo: str | None = None) -> str: ...

    async def bounding_box(self) -> BoundingBox:
        """Bounding rectangle in viewport coordinates."""
        ...

    async def child_nodes(self) -> list[DocumentNode]:
        """Element children in document order."""
        ...

    async def shadow_root(self) -> DocumentNode | None:
        """The open or closed shadow root attached to this node."""
        ...

    async def capture_frame(self) -> str | None:
        """Data URL of the current pixels of a canvas or video, if readable."""
        ...


@runtime_checkable
class PageDocument(Protocol):
    """The document a touch target lives in."""

    @property
    def location(self) -> str: ...

    @property
    def base_url(self) -> str: ...

    async def root(self) -> DocumentNode: ...

    async def document_element(self) -> DocumentNode | None: ...

    async def scroll_offset(self) -> tuple[float, float]: ...

    async def read_blob(self, url: str) -> bytes | None: ...

    async def cookies_for(self, url: str) -> dict[str, str]: ...

    async def node_at_point(self, x: float, y: float) -> DocumentNode | None: ...


def node_kind(node: DocumentNode) -> NodeKind:
    return NodeKind.from_tag(node.tag)


async def expand_children(node: DocumentNode, isolated: bool = False) -> list[DocumentNode]:
    """Children of a node, or of the isolated sub-tree it hosts.

    Args:
        node: Node to expand.
        isolated: Expand the attached shadow root instead of the plain children.

    Returns:
        Child nodes in document order, empty when there is nothing to expand.
    """
    if not isolated:
        return await node.child_nodes()

    shadow = await node.shadow_root()
    if shadow is None:
        return []
    return await shadow.child_nodes()

"""
Spatially bounded document traversal.

Visits every element below a root in document order, extracts candidates
from the nodes whose box meets the region, and descends into the isolated
sub-tree of every visited host right after the host's own candidates.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

from ..dom.node import DocumentNode, PageDocument, expand_children
from ..logging import get_logger
from ..models import Candidate, SpatialRegion
from .node_extractor import NodeExtractor

logger = get_logger(__name__)


async def iter_descendants(nodes: list[DocumentNode]) -> AsyncIterator[DocumentNode]:
    """Pre-order walk over the plain children of the given nodes."""
    stack = list(reversed(nodes))
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(await expand_children(node)))


class SpatialTreeWalker:
    """Collects candidates from the nodes of a (sub-)tree that meet a region."""

    def __init__(self, document: PageDocument, extractor: NodeExtractor):
        self.document = document
        self.extractor = extractor

    async def walk(self, root: DocumentNode, region: SpatialRegion) -> list[Candidate]:
        """
        Extract candidates below a root within a region.

        Args:
            root: Document, element or shadow root to walk below.
            region: Document-space region nodes must meet.

        Returns:
            Candidates in traversal order.
        """
        scroll = await self.document.scroll_offset()
        return await self._walk(await expand_children(root), region, scroll)

    async def _walk(
        self,
        nodes: list[DocumentNode],
        region: SpatialRegion,
        scroll: tuple[float, float],
    ) -> list[Candidate]:
        results: list[Candidate] = []
        visited = 0

        async for node in iter_descendants(nodes):
            box = (await node.bounding_box()).translate(*scroll)
            if not region.intersects(box):
                continue

            visited += 1
            results.extend(await self.extractor.extract(node))

            shadow_children = await expand_children(node, isolated=True)
            if shadow_children:
                results.extend(await self._walk(shadow_children, region, scroll))

        logger.debug("walk_complete", visited=visited, candidates=len(results))
        return results

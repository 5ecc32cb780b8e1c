"""
Document access for image extraction.

``node`` defines the protocols the pipeline reads a page through;
``playwright_dom`` implements them for a live Playwright page.
"""

from .node import (
    PAGE_ROOT_KINDS,
    REPLACED_KINDS,
    DocumentNode,
    NodeKind,
    PageDocument,
    expand_children,
    node_kind,
)

__all__ = [
    "DocumentNode",
    "NodeKind",
    "PAGE_ROOT_KINDS",
    "PageDocument",
    "REPLACED_KINDS",
    "expand_children",
    "node_kind",
]

"""Tests for the spatially bounded tree walker."""

import pytest

from sbi_extract.extraction.node_extractor import NodeExtractor
from sbi_extract.extraction.walker import SpatialTreeWalker, iter_descendants
from sbi_extract.imaging.loader import ImageLoader
from sbi_extract.models import SpatialRegion
from tests.fixtures.dom_fixtures import FakeDocument, FakeNode, html_page

REGION = SpatialRegion.around(100, 100, margin=10)


def img(name: str, box: tuple[float, float, float, float] = (80, 80, 40, 40), **kwargs) -> FakeNode:
    return FakeNode("img", box=box, properties={"currentSrc": f"https://example.com/{name}.png"}, **kwargs)


async def walk(root: FakeNode, region: SpatialRegion = REGION, **document_kwargs) -> list[str]:
    document = FakeDocument(root, **document_kwargs)
    walker = SpatialTreeWalker(document, NodeExtractor(document, ImageLoader(document)))
    return [candidate.data.rsplit("/", 1)[-1] for candidate in await walker.walk(root, region)]


class TestIterDescendants:
    """Tests for iter_descendants."""

    @pytest.mark.asyncio
    async def test_pre_order(self) -> None:
        leaf = FakeNode("b")
        tree = [FakeNode("div", children=[FakeNode("p", children=[leaf]), FakeNode("i")]), FakeNode("a")]

        tags = [node.tag async for node in iter_descendants(tree)]

        assert tags == ["div", "p", "b", "i", "a"]


class TestSpatialTreeWalker:
    """Tests for SpatialTreeWalker.walk."""

    @pytest.mark.asyncio
    async def test_document_order(self) -> None:
        root = html_page(img("first"), FakeNode("div", box=(0, 0, 500, 500), children=[img("second")]))

        assert await walk(root) == ["first.png", "second.png"]

    @pytest.mark.asyncio
    async def test_nodes_outside_region_are_skipped(self) -> None:
        root = html_page(img("near"), img("far", box=(400, 400, 10, 10)))

        assert await walk(root) == ["near.png"]

    @pytest.mark.asyncio
    async def test_descendants_of_skipped_nodes_are_considered(self) -> None:
        collapsed = FakeNode("div", box=(0, 0, 0, 0), children=[img("overflowing")])

        assert await walk(html_page(collapsed)) == ["overflowing.png"]

    @pytest.mark.asyncio
    async def test_boxes_are_translated_by_scroll(self) -> None:
        # Viewport box at (80, 80) is at (80, 580) in the document
        root = html_page(img("scrolled"), box=(0, 0, 1000, 2000))

        assert await walk(root, SpatialRegion.around(100, 600, 10), scroll=(0, 500)) == ["scrolled.png"]
        assert await walk(root, REGION, scroll=(0, 500)) == []

    @pytest.mark.asyncio
    async def test_shadow_tree_follows_host_candidates(self) -> None:
        host = FakeNode(
            "div",
            box=(0, 0, 500, 500),
            styles={"background-image": "url(https://example.com/host.png)"},
            children=[img("light")],
            shadow=FakeNode("#shadow-root", children=[img("shadow")]),
        )

        assert await walk(html_page(host, img("after"))) == [
            "host.png",
            "shadow.png",
            "light.png",
            "after.png",
        ]

    @pytest.mark.asyncio
    async def test_nested_shadow_trees(self) -> None:
        inner_host = FakeNode(
            "span", box=(0, 0, 500, 500), shadow=FakeNode("#shadow-root", children=[img("deep")])
        )
        outer_host = FakeNode(
            "div", box=(0, 0, 500, 500), shadow=FakeNode("#shadow-root", children=[inner_host])
        )

        assert await walk(html_page(outer_host)) == ["deep.png"]

    @pytest.mark.asyncio
    async def test_shadow_tree_of_host_outside_region_is_not_entered(self) -> None:
        host = FakeNode(
            "div", box=(400, 400, 10, 10), shadow=FakeNode("#shadow-root", children=[img("hidden")])
        )

        assert await walk(html_page(host)) == []

    @pytest.mark.asyncio
    async def test_empty_document(self) -> None:
        assert await walk(FakeNode("#document")) == []

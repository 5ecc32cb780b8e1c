"""
Scheme-specific candidate normalization.

Embedded, local-file and blob references only make sense inside the page
that produced them. Each pass converts the candidates of one scheme into
self-contained data URLs, or drops them, and leaves every other candidate
untouched.

A pass first computes an outcome for each matching candidate and then
rebuilds the list once, so the list is never mutated while it is read.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import replace

from ..dom.node import PageDocument
from ..imaging.canvas import OffscreenCanvas
from ..imaging.loader import ImageLoader
from ..imaging.normalize import (
    filename_ext_from_url,
    filename_from_url,
    normalize_filename,
    normalize_image,
)
from ..logging import get_logger
from ..models import Candidate, Scheme

logger = get_logger(__name__)

JPEG_EXTENSIONS = ("jpg", "jpeg", "jpe")

Transform = Callable[[Candidate], Awaitable[Candidate | None]]


async def apply_pass(
    candidates: list[Candidate],
    matches: Callable[[Candidate], bool],
    transform: Transform,
) -> list[Candidate]:
    """
    Transform the matching candidates and rebuild the list.

    Args:
        candidates: Current candidate list.
        matches: Selects the candidates this pass handles.
        transform: Returns the replacement candidate, or None to drop it.

    Returns:
        New list with replaced candidates in place and dropped ones removed.
    """
    outcomes: dict[int, Candidate | None] = {}
    for index, candidate in enumerate(candidates):
        if matches(candidate):
            outcomes[index] = await transform(candidate)
            if outcomes[index] is None:
                logger.debug("candidate_dropped", reference=candidate.data)

    rebuilt = []
    for index, candidate in enumerate(candidates):
        outcome = outcomes[index] if index in outcomes else candidate
        if outcome is not None:
            rebuilt.append(outcome)
    return rebuilt


def has_scheme(scheme: Scheme) -> Callable[[Candidate], bool]:
    return lambda candidate: candidate.scheme is scheme


class SchemeNormalizer:
    """Embedded, local-file and blob passes, to be run in that order."""

    def __init__(self, document: PageDocument, loader: ImageLoader):
        self.document = document
        self.loader = loader

    @property
    def is_local_document(self) -> bool:
        return self.document.location.startswith("file://")

    async def normalize_embedded(self, candidates: list[Candidate]) -> list[Candidate]:
        async def transform(candidate: Candidate) -> Candidate | None:
            image = normalize_image(data_url=candidate.data)
            if image is None:
                return None
            return replace(
                candidate,
                data=image.data,
                filename=normalize_filename(candidate.filename, image.ext),
            )

        return await apply_pass(candidates, has_scheme(Scheme.EMBEDDED), transform)

    async def normalize_local_files(self, candidates: list[Candidate]) -> list[Candidate]:
        """Re-encode ``file:`` images, only for documents that are files themselves."""
        if not self.is_local_document:
            return candidates

        canvas = OffscreenCanvas()

        async def transform(candidate: Candidate) -> Candidate | None:
            url = candidate.data or ""
            _, ext = filename_ext_from_url(url)
            if ext in JPEG_EXTENSIONS:
                mime, ext = "image/jpeg", "jpg"
            else:
                mime, ext = "image/png", "png"

            data = await self._redraw(canvas, url, mime)
            if data is None:
                return None
            return Candidate(data=data, filename=normalize_filename(filename_from_url(url), ext))

        return await apply_pass(candidates, has_scheme(Scheme.LOCAL_FILE), transform)

    async def normalize_blobs(self, candidates: list[Candidate]) -> list[Candidate]:
        canvas = OffscreenCanvas()

        async def transform(candidate: Candidate) -> Candidate | None:
            data = await self._redraw(canvas, candidate.data or "", "image/png")
            if data is None:
                return None
            return Candidate(data=data, filename=normalize_filename(ext="png"))

        return await apply_pass(candidates, has_scheme(Scheme.BLOB), transform)

    async def _redraw(self, canvas: OffscreenCanvas, url: str, mime: str) -> str | None:
        """Load an image, draw it at its natural size and encode it."""
        image = await self.loader.load(url)
        if image is None:
            return None

        canvas.resize(image.width, image.height)
        if not canvas.draw_image(image):
            return None
        return canvas.to_data_url(mime)

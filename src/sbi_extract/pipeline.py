"""
Image extraction pipeline.

Coordinates node extraction, the spatial document walk, deduplication and
the scheme normalization passes, then reports the result to the channel.

States run in a fixed order:

    init -> initial-node-scan -> full-document-scan -> dedup
         -> embedded -> local-file -> blob -> remote
         -> final-validation -> report

Usage::

    pipeline = ImageParsePipeline(document, channel, options, engines)
    images = await pipeline.run(touch_target, ParseContext(engine="google"))
"""

from __future__ import annotations

from enum import Enum

import httpx

from .collaborators import (
    EngineCapabilities,
    MessageChannel,
    OptionsSource,
    TokenFactory,
    UrlValidator,
    new_token,
    validate_url,
)
from .config import ExtractSettings, get_settings
from .dom.node import PAGE_ROOT_KINDS, NodeKind, PageDocument, node_kind
from .exceptions import TouchTargetMissingError, UnsupportedDocumentError
from .extraction.node_extractor import NodeExtractor
from .extraction.normalizer import SchemeNormalizer, apply_pass
from .extraction.remote import RemoteImageFetcher, RemoteResolver
from .extraction.walker import SpatialTreeWalker
from .imaging.loader import ImageLoader
from .logging import get_logger
from .messages import PageParseError, PageParseSubmit
from .models import Candidate, ParseContext, TouchTarget

logger = get_logger(__name__)


class ParseState(Enum):
    """Stages of a single extraction run."""

    INIT = "init"
    INITIAL_NODE_SCAN = "initial_node_scan"
    FULL_DOCUMENT_SCAN = "full_document_scan"
    DEDUP = "dedup"
    NORMALIZE_EMBEDDED = "normalize_embedded"
    NORMALIZE_LOCAL_FILE = "normalize_local_file"
    NORMALIZE_BLOB = "normalize_blob"
    NORMALIZE_REMOTE = "normalize_remote"
    FINAL_VALIDATION = "final_validation"
    REPORT = "report"


def deduplicate(candidates: list[Candidate]) -> list[Candidate]:
    """Keep the first candidate of every raw reference."""
    seen: set[str | None] = set()
    unique = []
    for candidate in candidates:
        if candidate.data in seen:
            continue
        seen.add(candidate.data)
        unique.append(candidate)
    return unique


def is_valid_candidate(candidate: Candidate) -> bool:
    """A candidate with data must carry it embedded."""
    return candidate.data is None or candidate.is_embedded


class ImageParsePipeline:
    """
    Extracts the images around a touch point of a page.

    One instance serves any number of invocations; every invocation receives
    its touch target and context explicitly and keeps no state afterwards.
    """

    def __init__(
        self,
        document: PageDocument,
        channel: MessageChannel,
        options: OptionsSource,
        engines: EngineCapabilities,
        settings: ExtractSettings | None = None,
        client: httpx.AsyncClient | None = None,
        url_validator: UrlValidator = validate_url,
        token_factory: TokenFactory = new_token,
    ):
        """
        Initialize the pipeline.

        Args:
            document: Page to extract from.
            channel: Receives the result or failure message.
            options: Source of the stored search options.
            engines: Engine capability lookup.
            settings: Extraction settings, defaults to the global settings.
            client: Optional shared HTTP client for probes and fetches.
            url_validator: Predicate for fetchable absolute URLs.
            token_factory: Generates referrer tokens.
        """
        self.settings = settings or get_settings()
        self.document = document
        self.channel = channel
        self.options = options
        self.engines = engines
        self.url_validator = url_validator

        loader = ImageLoader(document, client=client, timeout_seconds=self.settings.probe_timeout)
        self.extractor = NodeExtractor(document, loader)
        self.walker = SpatialTreeWalker(document, self.extractor)
        self.normalizer = SchemeNormalizer(document, loader)
        self.resolver = RemoteResolver(
            document,
            RemoteImageFetcher(client=client, timeout_seconds=self.settings.fetch_timeout),
            channel,
            target_env=self.settings.target_env,
            token_factory=token_factory,
        )

        self.state = ParseState.INIT

    def _enter(self, state: ParseState, **context: object) -> None:
        self.state = state
        logger.debug("parse_state", state=state.value, **context)

    async def parse(self, target: TouchTarget | None, context: ParseContext) -> list[Candidate]:
        """
        Run the pipeline and return the final candidates.

        Args:
            target: Interaction target and its document coordinates.
            context: Engine and invocation origin.

        Returns:
            Candidates that are embedded, or bare URL references.

        Raises:
            TouchTargetMissingError: If no touch target was registered.
        """
        self._enter(ParseState.INIT)
        if target is None or target.node is None:
            raise TouchTargetMissingError("Touch target missing")

        try:
            await self._check_document()
        except UnsupportedDocumentError as e:
            logger.info("unsupported_document", reason=str(e))
            return []

        region = target.region(self.settings.touch_margin)

        self._enter(ParseState.INITIAL_NODE_SCAN, tag=target.node.tag)
        results = await self.extractor.extract(target.node)

        options = await self.options.read_options()

        if node_kind(target.node) is not NodeKind.IMG or options.img_full_parse:
            self._enter(ParseState.FULL_DOCUMENT_SCAN, x=target.x, y=target.y)
            scanned = await self.walker.walk(await self.document.root(), region)
            results.extend(reversed(scanned))

        self._enter(ParseState.DEDUP, candidates=len(results))
        results = deduplicate(results)

        self._enter(ParseState.NORMALIZE_EMBEDDED, candidates=len(results))
        results = await self.normalizer.normalize_embedded(results)

        self._enter(ParseState.NORMALIZE_LOCAL_FILE, candidates=len(results))
        results = await self.normalizer.normalize_local_files(results)

        self._enter(ParseState.NORMALIZE_BLOB, candidates=len(results))
        results = await self.normalizer.normalize_blobs(results)

        self._enter(ParseState.NORMALIZE_REMOTE, candidates=len(results))
        must_upload = options.search_mode(context.event_origin).requires_upload
        results = await self._resolve_remote(results, must_upload, context.engine)

        self._enter(ParseState.FINAL_VALIDATION, candidates=len(results))
        return [candidate for candidate in results if is_valid_candidate(candidate)]

    async def run(self, target: TouchTarget | None, context: ParseContext) -> list[Candidate] | None:
        """
        Run the pipeline and report the outcome to the channel.

        Returns:
            The reported candidates, or None if the run failed.
        """
        try:
            images = await self.parse(target, context)
        except Exception as e:
            logger.exception("parse_failed", error=str(e))
            self._enter(ParseState.REPORT, outcome="error")
            await self.channel.send(PageParseError())
            return None

        self._enter(ParseState.REPORT, outcome="submit", images=len(images))
        await self.channel.send(
            PageParseSubmit(engine=context.engine, images=[image.to_dict() for image in images])
        )
        return images

    async def _check_document(self) -> None:
        element = await self.document.document_element()
        if element is None or node_kind(element) not in PAGE_ROOT_KINDS:
            raise UnsupportedDocumentError(
                f"document root is {element.tag if element is not None else 'missing'}"
            )

    async def _resolve_remote(
        self, candidates: list[Candidate], must_upload: bool, engine: str
    ) -> list[Candidate]:
        url_support = await self.engines.has_url_support(engine)

        async def transform(candidate: Candidate) -> Candidate | None:
            return await self.resolver.resolve(candidate, must_upload, url_support)

        return await apply_pass(
            candidates,
            lambda candidate: candidate.data is not None and self.url_validator(candidate.data),
            transform,
        )

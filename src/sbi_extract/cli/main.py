"""sbi-extract CLI - Main entry point.

Opens a page in a headless browser and extracts the images around a point,
printing every outbound message as one JSON line on stdout.

Exit codes:
    0: Success
    1: Extraction failed
    2: Configuration error
    3: Runtime (browser) error
"""

import asyncio
import json
import sys

import click
from pydantic import ValidationError

from .. import __version__
from ..collaborators import SettingsOptionsSource, StaticEngineCapabilities
from ..config import ExtractSettings, get_settings
from ..logging import get_logger, setup_logging
from ..messages import Message, PageParseError
from ..models import EventOrigin, ParseContext, TouchTarget

# Exit codes
EXIT_SUCCESS = 0
EXIT_EXTRACTION_FAILED = 1
EXIT_CONFIG_ERROR = 2
EXIT_RUNTIME_ERROR = 3

logger = get_logger(__name__)


class JsonLinesChannel:
    """Message channel writing each message as a JSON line."""

    def __init__(self) -> None:
        self.messages: list[Message] = []

    async def send(self, message: Message) -> None:
        self.messages.append(message)
        click.echo(message.model_dump_json())

    @property
    def failed(self) -> bool:
        return any(isinstance(message, PageParseError) for message in self.messages)


async def extract_page(
    url: str,
    x: float,
    y: float,
    context: ParseContext,
    settings: ExtractSettings,
    channel: JsonLinesChannel,
) -> None:
    """Open a page, resolve the node at a document point and run the pipeline."""
    from playwright.async_api import async_playwright

    from ..dom.playwright_dom import PlaywrightDocument
    from ..pipeline import ImageParsePipeline

    async with async_playwright() as playwright:
        browser = await playwright.chromium.launch(headless=settings.headless)
        try:
            page = await browser.new_page()
            await page.goto(
                url, wait_until="networkidle", timeout=settings.navigation_timeout * 1000
            )
            document = await PlaywrightDocument.create(page)
            node = await document.node_at_point(x, y)
            logger.info("touch_target", url=url, x=x, y=y, tag=node.tag if node else None)

            pipeline = ImageParsePipeline(
                document,
                channel,
                SettingsOptionsSource(settings),
                StaticEngineCapabilities(settings.url_engines),
                settings=settings,
            )
            await pipeline.run(TouchTarget(node=node, x=x, y=y), context)
        finally:
            await browser.close()


@click.group()
@click.version_option(version=__version__, prog_name="sbi-extract")
def main() -> None:
    """sbi-extract CLI - image candidates for search by image."""


@main.command()
@click.argument("url")
@click.option("--x", "x", type=float, required=True, help="Document X coordinate of the touch")
@click.option("--y", "y", type=float, required=True, help="Document Y coordinate of the touch")
@click.option("--engine", default="google", show_default=True, help="Destination engine")
@click.option(
    "--origin",
    type=click.Choice([origin.value for origin in EventOrigin]),
    default=EventOrigin.CONTEXT_MENU.value,
    show_default=True,
    help="Where the search was started from",
)
@click.option("--full-parse/--no-full-parse", default=None, help="Scan the page for image targets too")
@click.option("--headed", is_flag=True, help="Show the browser window")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
def extract(
    url: str,
    x: float,
    y: float,
    engine: str,
    origin: str,
    full_parse: bool | None,
    headed: bool,
    verbose: bool,
) -> None:
    """Extract the images around a point of a page.

    URL: Page to open
    """
    try:
        settings = get_settings()
    except ValidationError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(EXIT_CONFIG_ERROR)

    overrides: dict[str, object] = {}
    if full_parse is not None:
        overrides["img_full_parse"] = full_parse
    if headed:
        overrides["headless"] = False
    if verbose:
        overrides["debug_mode"] = True
    settings = settings.model_copy(update=overrides)

    setup_logging(level="DEBUG" if verbose else settings.log_level, structured=not verbose)

    channel = JsonLinesChannel()
    context = ParseContext(engine=engine, event_origin=EventOrigin(origin))
    try:
        asyncio.run(extract_page(url, x, y, context, settings, channel))
    except Exception as e:
        click.echo(f"Runtime error: {e}", err=True)
        sys.exit(EXIT_RUNTIME_ERROR)

    sys.exit(EXIT_EXTRACTION_FAILED if channel.failed else EXIT_SUCCESS)


@main.command()
def settings() -> None:
    """Show the resolved settings as JSON."""
    try:
        resolved = get_settings()
    except ValidationError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(EXIT_CONFIG_ERROR)

    click.echo(json.dumps(resolved.model_dump(mode="json"), indent=2))


if __name__ == "__main__":
    main()

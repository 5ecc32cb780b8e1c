"""sbi-extract: image candidates around a point of a rendered page, for search by image.

Usage:
    from sbi_extract import ImageParsePipeline, ParseContext, TouchTarget

    pipeline = ImageParsePipeline(document, channel, options, engines)
    images = await pipeline.run(TouchTarget(node, x, y), ParseContext(engine="google"))
"""

from .collaborators import (
    EngineCapabilities,
    MessageChannel,
    OptionsSource,
    ParseOptions,
    SettingsOptionsSource,
    StaticEngineCapabilities,
    validate_url,
)
from .exceptions import ImageExtractionError, TouchTargetMissingError
from .messages import PageParseError, PageParseSubmit, SetRequestReferrer
from .models import (
    BoundingBox,
    Candidate,
    EventOrigin,
    ParseContext,
    SearchMode,
    SpatialRegion,
    TouchTarget,
)
from .pipeline import ImageParsePipeline, ParseState

__version__ = "0.1.0"

__all__ = [
    "BoundingBox",
    "Candidate",
    "EngineCapabilities",
    "EventOrigin",
    "ImageExtractionError",
    "ImageParsePipeline",
    "MessageChannel",
    "OptionsSource",
    "PageParseError",
    "PageParseSubmit",
    "ParseContext",
    "ParseOptions",
    "ParseState",
    "SearchMode",
    "SetRequestReferrer",
    "SettingsOptionsSource",
    "SpatialRegion",
    "StaticEngineCapabilities",
    "TouchTarget",
    "TouchTargetMissingError",
    "validate_url",
]

"""
Data models for image extraction.

These models represent the candidates, regions and invocation inputs that
flow through a single extraction run.
"""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .dom.node import DocumentNode

# Margin added around the touch point to build the spatial region
TOUCH_MARGIN = 24.0


class SearchMode(Enum):
    """How the destination search is performed."""

    SELECT = "select"
    SELECT_UPLOAD = "selectUpload"
    URL = "url"
    UPLOAD = "upload"
    CAPTURE = "capture"

    @property
    def requires_upload(self) -> bool:
        return self is SearchMode.SELECT_UPLOAD


class EventOrigin(Enum):
    """Where the extraction was triggered from."""

    ACTION = "action"  # Toolbar button
    CONTEXT_MENU = "contextMenu"


class Scheme(Enum):
    """Addressing mechanism of a raw image reference."""

    EMBEDDED = "data"
    LOCAL_FILE = "file"
    BLOB = "blob"
    REMOTE = "remote"
    OTHER = "other"

    @classmethod
    def of(cls, reference: str | None) -> "Scheme":
        if not reference:
            return cls.OTHER
        if reference.startswith("data:"):
            return cls.EMBEDDED
        if reference.startswith("file://"):
            return cls.LOCAL_FILE
        if reference.startswith("blob:"):
            return cls.BLOB
        if reference.startswith(("http://", "https://")):
            return cls.REMOTE
        return cls.OTHER


@dataclass
class BoundingBox:
    """Bounding box of a node, in viewport or document coordinates."""

    x: float
    y: float
    width: float
    height: float

    @property
    def x2(self) -> float:
        return self.x + self.width

    @property
    def y2(self) -> float:
        return self.y + self.height

    def translate(self, dx: float, dy: float) -> "BoundingBox":
        return BoundingBox(x=self.x + dx, y=self.y + dy, width=self.width, height=self.height)

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}

    @classmethod
    def from_dict(cls, data: dict[str, float]) -> "BoundingBox":
        return cls(x=data["x"], y=data["y"], width=data["width"], height=data["height"])


@dataclass(frozen=True)
class SpatialRegion:
    """Axis-aligned rectangle in document coordinates."""

    top: float
    bottom: float
    left: float
    right: float

    @classmethod
    def around(cls, x: float, y: float, margin: float = TOUCH_MARGIN) -> "SpatialRegion":
        return cls(top=y - margin, bottom=y + margin, left=x - margin, right=x + margin)

    def intersects(self, box: BoundingBox) -> bool:
        """Whether a document-space box overlaps the region, edges included."""
        return not (
            self.bottom < box.y
            or self.top > box.y2
            or self.left > box.x2
            or self.right < box.x
        )


@dataclass(frozen=True)
class TouchTarget:
    """The node the user interacted with and the document point of the interaction."""

    node: "DocumentNode | None"
    x: float
    y: float

    def region(self, margin: float = TOUCH_MARGIN) -> SpatialRegion:
        return SpatialRegion.around(self.x, self.y, margin)


@dataclass(frozen=True)
class ParseContext:
    """Per-invocation context supplied by the caller."""

    engine: str
    event_origin: EventOrigin = EventOrigin.CONTEXT_MENU


@dataclass
class Candidate:
    """An image reference moving through the pipeline.

    ``data`` holds the raw reference until normalization, then an embedded
    data URL. A candidate with only ``url`` set is left for the destination
    to resolve by itself.
    """

    data: str | None = None
    url: str | None = None
    filename: str | None = None
    must_upload: bool | None = None

    @property
    def scheme(self) -> Scheme:
        return Scheme.of(self.data)

    @property
    def is_embedded(self) -> bool:
        return self.data is not None and self.data.startswith("data:")

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        if self.url is not None:
            result["url"] = self.url
        if self.data is not None:
            result["data"] = self.data
        if self.filename is not None:
            result["filename"] = self.filename
        if self.must_upload is not None:
            result["mustUpload"] = self.must_upload
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Candidate":
        return cls(
            data=data.get("data"),
            url=data.get("url"),
            filename=data.get("filename"),
            must_upload=data.get("mustUpload"),
        )

"""Outbound messages exchanged with the collaborating components."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field


class PageParseSubmit(BaseModel):
    """Extraction succeeded; carries the final candidate list."""

    kind: Literal["pageParseSubmit"] = "pageParseSubmit"
    engine: str
    images: list[dict[str, Any]] = Field(default_factory=list)


class PageParseError(BaseModel):
    """Extraction failed; no partial results are sent."""

    kind: Literal["pageParseError"] = "pageParseError"


class SetRequestReferrer(BaseModel):
    """Asks the privileged side to send ``referrer`` with the fetch tagged by ``token``."""

    kind: Literal["setRequestReferrer"] = "setRequestReferrer"
    referrer: str
    token: str
    url: str


Message = PageParseSubmit | PageParseError | SetRequestReferrer

"""Encyclopedia description of a route."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class RouteWikiInfo(BaseModel):
    """Route details scraped from the encyclopedia article.

    Every field is optional; the article may lack an infobox entry or
    an intro paragraph.
    """

    model_config = ConfigDict(frozen=True)

    endpoint_from: str | None = None
    endpoint_to: str | None = None
    length: str | None = None
    extract: str | None = None
    page_url: str | None = None

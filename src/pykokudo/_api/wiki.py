"""Route descriptions from the Japanese Wikipedia.

Endpoints (MediaWiki action API):
  - prop=revisions: raw wikitext, parsed for the infobox fields
    起点 (start), 終点 (end) and 総延長 (total length)
  - prop=extracts: plain-text intro paragraph
"""

from __future__ import annotations

import logging
import re
from typing import Any
from urllib.parse import quote

from pykokudo._constants import WIKI_PAGE_URL
from pykokudo._transport import Transport
from pykokudo.config import KokudoConfig
from pykokudo.exceptions import KokudoTransportError
from pykokudo.models.wiki import RouteWikiInfo

_logger = logging.getLogger(__name__)

_LINK_PASSES = 8
_TEMPLATE_PASSES = 5
_MIN_EXTRACT_LENGTH = 20

_PIPED_LINK_RE = re.compile(r"\[\[[^\[\]]*\|([^\[\]]*)\]\]")
_LINK_RE = re.compile(r"\[\[([^\[\]]*)\]\]")
_TEMPLATE_RE = re.compile(r"\{\{[^{}]*\}\}")
_BR_RE = re.compile(r"<br\s*/?>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")
_EMPTY_PARENS_RE = re.compile(r"（\s*）|\(\s*\)")
_STRAY_BRACKETS_RE = re.compile(r"[\[\]{}]")
_SPACES_RE = re.compile(r"[ \t\u3000]+")
_TRAILING_OPEN_PAREN_RE = re.compile(r"\s*[（(]\s*$")
_LENGTH_RE = re.compile(r"([\d,]+(?:\.\d+)?)\s*km")
_PARAGRAPH_SPLIT_RE = re.compile(r"\n\n+")


def route_title(route_id: int) -> str:
    return f"国道{route_id}号"


def route_page_url(route_id: int) -> str:
    return WIKI_PAGE_URL + quote(route_title(route_id))


def _substitute_until_stable(text: str, pattern: re.Pattern[str], repl: str, max_passes: int) -> str:
    # Nested markup unwraps one level per pass; the cap bounds malformed input.
    for _ in range(max_passes):
        updated = pattern.sub(repl, text)
        if updated == text:
            break
        text = updated
    return text


def clean_wikitext(text: str) -> str:
    """Reduce wikitext markup to plain text."""
    for _ in range(_LINK_PASSES):
        before = text
        text = _PIPED_LINK_RE.sub(r"\1", text)
        text = _LINK_RE.sub(r"\1", text)
        if text == before:
            break
    text = _substitute_until_stable(text, _TEMPLATE_RE, "", _TEMPLATE_PASSES)
    text = _BR_RE.sub(" ", text)
    text = _TAG_RE.sub("", text)
    text = _EMPTY_PARENS_RE.sub("", text)
    text = _STRAY_BRACKETS_RE.sub("", text)
    text = _SPACES_RE.sub(" ", text).strip()
    return _TRAILING_OPEN_PAREN_RE.sub("", text).strip()


def extract_infobox_field(wikitext: str, field: str) -> str | None:
    """Value of ``|field = ...`` up to the next parameter or blank line."""
    pattern = re.compile(rf"\|{re.escape(field)}\s*=\s*(.*?)(?=\n\s*\||\n\n|\Z)", re.DOTALL)
    match = pattern.search(wikitext)
    if match is None:
        return None
    return clean_wikitext(match.group(1).strip())


def normalize_length(raw: str | None) -> str | None:
    """``"1,234.5キロメートル"`` → ``"1234.5 km"``."""
    if not raw:
        return None
    match = _LENGTH_RE.search(raw.replace("キロメートル", "km"))
    if match is None:
        return None
    return match.group(1).replace(",", "") + " km"


def _first_page(data: Any) -> dict[str, Any] | None:
    if not isinstance(data, dict):
        return None
    pages = (data.get("query") or {}).get("pages")
    if not isinstance(pages, dict) or not pages:
        return None
    page = next(iter(pages.values()))
    return page if isinstance(page, dict) else None


def _page_wikitext(page: dict[str, Any]) -> str:
    revisions = page.get("revisions")
    if not isinstance(revisions, list) or not revisions:
        return ""
    main = ((revisions[0] or {}).get("slots") or {}).get("main") or {}
    content = main.get("*") or main.get("content") or ""
    return content if isinstance(content, str) else ""


def first_paragraph(extract: str | None) -> str | None:
    if not extract:
        return None
    paragraph = _PARAGRAPH_SPLIT_RE.split(extract)[0].strip()
    return paragraph if len(paragraph) > _MIN_EXTRACT_LENGTH else None


async def fetch_route_wiki_info(transport: Transport, config: KokudoConfig, route_id: int) -> RouteWikiInfo | None:
    """Fetch infobox details and the intro paragraph for a route.

    Returns ``None`` when the article does not exist. Transport errors on
    the article request propagate; a failed intro request only leaves
    ``extract`` empty.
    """
    title = route_title(route_id)
    revisions = await transport.get_json(
        config.wiki_api_url,
        params={
            "action": "query",
            "prop": "revisions",
            "rvprop": "content",
            "rvslots": "main",
            "redirects": "1",
            "titles": title,
            "format": "json",
        },
    )
    page = _first_page(revisions)
    if page is None or "missing" in page:
        _logger.debug("No article for %s", title)
        return None

    wikitext = _page_wikitext(page)
    endpoint_from = extract_infobox_field(wikitext, "起点")
    endpoint_to = extract_infobox_field(wikitext, "終点")
    length = normalize_length(extract_infobox_field(wikitext, "総延長"))

    extract: str | None = None
    try:
        extracts = await transport.get_json(
            config.wiki_api_url,
            params={
                "action": "query",
                "prop": "extracts",
                "exintro": "1",
                "explaintext": "1",
                "redirects": "1",
                "titles": title,
                "format": "json",
            },
        )
    except KokudoTransportError as exc:
        _logger.warning("Intro extract for %s failed: %s", title, exc)
    else:
        extract_page = _first_page(extracts) or {}
        raw_extract = extract_page.get("extract")
        extract = first_paragraph(raw_extract if isinstance(raw_extract, str) else None)

    return RouteWikiInfo(
        endpoint_from=endpoint_from or None,
        endpoint_to=endpoint_to or None,
        length=length,
        extract=extract,
        page_url=route_page_url(route_id),
    )

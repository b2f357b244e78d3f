from __future__ import annotations

import datetime as dt
import logging
import os
import re
from typing import Dict, List, Optional, Tuple

import httpx
from selectolax.parser import HTMLParser, Node

from castgraph.services.graph import FetchFailure, NodeKind

from ..base import PageFetcher, PageRecord, SourceMeta, now_iso, sha256_hexdigest

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://en.wikipedia.org"
SCALES = {"thousand": 10 ** 3, "million": 10 ** 6, "billion": 10 ** 9}
_AMOUNT_RE = re.compile(r"(\d+(?:\.\d+)?)(?:\s*[-\u2013]\s*\d+(?:\.\d+)?)?\s*(thousand|million|billion)?", re.IGNORECASE)


def human_to_number(text: str) -> Optional[float]:
    """'$1.2 billion' -> 1200000000.0; None when no amount is present."""
    cleaned = (text or "").replace("\u00a0", " ").replace(",", "")
    m = _AMOUNT_RE.search(cleaned)
    if not m:
        return None
    value = float(m.group(1))
    scale = (m.group(2) or "").lower()
    return value * SCALES.get(scale, 1)


def age_on(birthday: dt.date, today: Optional[dt.date] = None) -> int:
    today = today or dt.date.today()
    had_birthday = (today.month, today.day) >= (birthday.month, birthday.day)
    return today.year - birthday.year - (0 if had_birthday else 1)


def _next_element(node: Optional[Node]) -> Optional[Node]:
    node = node.next if node is not None else None
    while node is not None and node.tag in ("-text", "_comment", "-comment"):
        node = node.next
    return node


def _is_heading(node: Node) -> bool:
    if node.tag in ("h1", "h2"):
        return True
    classes = (node.attributes.get("class") or "").split()
    return node.tag == "div" and "mw-heading2" in classes


def _links(node: Node, selector: str) -> List[Tuple[str, str]]:
    out: List[Tuple[str, str]] = []
    for a in node.css(selector):
        href = a.attributes.get("href")
        text = a.text(strip=True)
        if href and text:
            out.append((text, href))
    return out


class WikipediaSpider(PageFetcher):
    """PageFetcher for English Wikipedia actor and film articles.

    Actor pages yield ``age`` and the italic film links of the Filmography
    section. Film pages yield ``box_office`` and ``year`` from the infobox and
    the cast from its "Starring" row.
    """

    name = "wikipedia"

    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        headers: Optional[Dict[str, str]] = None,
        transport: Optional[httpx.BaseTransport] = None,
        today: Optional[dt.date] = None,
    ) -> None:
        self.base_url = (base_url or os.getenv("CASTGRAPH_WIKI_BASE_URL") or DEFAULT_BASE_URL).rstrip("/")
        self.timeout = float(timeout if timeout is not None else os.getenv("CASTGRAPH_HTTP_TIMEOUT") or 12.0)
        self.headers = headers or {"User-Agent": "castgraph-crawler/0.1"}
        self.transport = transport
        self.today = today

    # --- Public API ---
    def fetch(self, kind: NodeKind, link: str) -> PageRecord:
        url = self._url(link)
        html = self._get(url)
        if NodeKind(kind) is NodeKind.ACTOR:
            return self.parse_actor_html(html, source_url=url)
        return self.parse_movie_html(html, source_url=url)

    def parse_actor_html(self, html: str, *, source_url: str) -> PageRecord:
        doc = self._document(html)
        birthday = self._bday(doc, source_url)
        anchor = doc.css_first("#Filmography")
        if anchor is None:
            raise FetchFailure(source_url, "no Filmography section")
        films = self._section_links(anchor, "i a[href]")
        return PageRecord(
            kind=NodeKind.ACTOR,
            attributes={"age": age_on(birthday, self.today)},
            neighbors=films,
            meta=self._meta(source_url, html),
        )

    def parse_movie_html(self, html: str, *, source_url: str) -> PageRecord:
        doc = self._document(html)
        infobox = doc.css_first(".infobox")
        if infobox is None:
            raise FetchFailure(source_url, "no infobox")
        box_cell = self._infobox_value(infobox, "Box office")
        box_text = box_cell.text(strip=True) if box_cell is not None else ""
        box_office = human_to_number(box_text)
        logger.debug("Human-readable box office: %r -> %s", box_text, box_office)
        if box_office is None:
            raise FetchFailure(source_url, "no box office figure")
        year = self._bday(doc, source_url).year
        starring = self._infobox_value(infobox, "Starring")
        if starring is None:
            raise FetchFailure(source_url, "no Starring row")
        return PageRecord(
            kind=NodeKind.MOVIE,
            attributes={"box_office": box_office, "year": year},
            neighbors=_links(starring, "a[href]"),
            meta=self._meta(source_url, html),
        )

    # --- Internals ---
    def _url(self, link: str) -> str:
        if link.startswith("http://") or link.startswith("https://"):
            return link
        return self.base_url + link

    def _get(self, url: str) -> str:
        try:
            with httpx.Client(
                timeout=self.timeout,
                headers=self.headers,
                follow_redirects=True,
                transport=self.transport,
            ) as client:
                r = client.get(url)
                r.raise_for_status()
                return r.text
        except httpx.HTTPError as exc:
            raise FetchFailure(url, str(exc) or type(exc).__name__) from exc

    @staticmethod
    def _document(html: str) -> HTMLParser:
        doc = HTMLParser(html or "")
        # Reference markers like [1] would leak into names and amounts.
        for sup in doc.css("sup"):
            sup.decompose()
        return doc

    @staticmethod
    def _bday(doc: HTMLParser, source_url: str) -> dt.date:
        node = doc.css_first(".bday")
        if node is None:
            raise FetchFailure(source_url, "no date")
        try:
            return dt.date.fromisoformat(node.text(strip=True)[:10])
        except ValueError as exc:
            raise FetchFailure(source_url, f"bad date {node.text(strip=True)!r}") from exc

    @staticmethod
    def _infobox_value(infobox: Node, label: str) -> Optional[Node]:
        for th in infobox.css("th"):
            if label in th.text(strip=True):
                return _next_element(th)
        return None

    @staticmethod
    def _section_links(anchor: Node, selector: str) -> List[Tuple[str, str]]:
        """Links from the elements following the heading that holds ``anchor``."""
        heading = anchor
        while heading.parent is not None and not _is_heading(heading):
            heading = heading.parent
        if heading.parent is not None and _is_heading(heading.parent):
            heading = heading.parent
        out: List[Tuple[str, str]] = []
        node = _next_element(heading)
        while node is not None and not _is_heading(node):
            out.extend(_links(node, selector))
            node = _next_element(node)
        return out

    def _meta(self, source_url: str, html: str) -> SourceMeta:
        return SourceMeta(
            source_site="wikipedia",
            source_url=source_url,
            fetched_at=now_iso(),
            parser=self.name,
            content_hash=sha256_hexdigest(html),
        )

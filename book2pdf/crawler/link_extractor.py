# book2pdf/crawler/link_extractor.py
"""
Extraction of documentation page links in navigation order.
"""
from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Sequence, Union

from bs4 import BeautifulSoup
from bs4.element import Tag

from book2pdf.logger import null_logger
from book2pdf.utils import is_page_href

__all__ = ("NAV_SELECTORS", "FALLBACK_SELECTOR", "collect_links", "collect_hrefs")

# Priority order: navbar, sidebar, generic menu, Docusaurus sidebar, any nav.
NAV_SELECTORS: Sequence[str] = (
    'nav.navbar a[href^="/"]',
    'aside a[href^="/"]',
    '.menu a[href^="/"]',
    '.theme-doc-sidebar-menu a[href^="/"]',
    'nav a[href^="/"]',
)
FALLBACK_SELECTOR = 'a[href^="/"]'


def _hrefs(tags: Iterable[Tag]) -> Iterable[str]:
    for tag in tags:
        if not isinstance(tag, Tag):
            continue
        href = tag.get("href")
        if isinstance(href, str):
            yield href


def collect_hrefs(hrefs: Iterable[str], seen: Optional[Dict[str, None]] = None) -> List[str]:
    """
    Accept page hrefs into an ordered-unique collection.

    *seen* is shared between calls so that the first occurrence wins across
    every selector group of one collection pass.
    """
    ordered: Dict[str, None] = {} if seen is None else seen
    accepted: List[str] = []
    for href in hrefs:
        if not is_page_href(href) or href in ordered:
            continue
        ordered[href] = None
        accepted.append(href)
    return accepted


def collect_links(
    page: Union[BeautifulSoup, str], logger: Optional[logging.Logger] = None
) -> List[str]:
    """
    Return unique relative page addresses in navigation order.

    Navigation landmarks are scanned first (see :data:`NAV_SELECTORS`), then
    every remaining internal anchor of the document as a fallback.
    """
    log = logger or null_logger()
    soup = page if isinstance(page, BeautifulSoup) else BeautifulSoup(page, "html.parser")
    seen: Dict[str, None] = {}

    for selector in NAV_SELECTORS:
        added = collect_hrefs(_hrefs(soup.select(selector)), seen)
        if added:
            log.debug("%d links from %s", len(added), selector)

    recovered = collect_hrefs(_hrefs(soup.select(FALLBACK_SELECTOR)), seen)
    if recovered:
        log.debug("%d links recovered by fallback pass", len(recovered))

    links = list(seen)
    log.debug("Collected %d unique links in navigation order", len(links))
    return links

# book2pdf/crawler/classifier.py
"""
Recognition of supported documentation frameworks (GitBook, Docusaurus)
from the rendered DOM.
"""
from __future__ import annotations

import logging
from typing import Callable, Optional, Sequence, Tuple

from bs4 import BeautifulSoup

from book2pdf.logger import null_logger

__all__ = ("MARKER_GROUPS", "detect_framework", "is_supported_site")

_Marker = Callable[[BeautifulSoup], bool]


def _any_selector(*selectors: str) -> _Marker:
    def check(soup: BeautifulSoup) -> bool:
        return any(soup.select_one(sel) is not None for sel in selectors)

    return check


def _theme_body_class(soup: BeautifulSoup) -> bool:
    body = soup.body
    if body is None:
        return False
    classes = body.get("class") or []
    if isinstance(classes, str):
        classes = classes.split()
    return any("theme-" in cls for cls in classes)


def _docusaurus_script(soup: BeautifulSoup) -> bool:
    for script in soup.find_all("script"):
        text = script.get_text()
        if "docusaurus" in text or "__DOCUSAURUS__" in text:
            return True
    return False


# Evaluated in order, first match wins.
MARKER_GROUPS: Sequence[Tuple[str, _Marker]] = (
    ("gitbook-legacy-root", _any_selector("body > .gitbook-root")),
    (
        "gitbook-landmarks",
        _any_selector(
            "body > div.scroll-nojump",
            'nav[role="navigation"]',
            'a[href*="gitbook.io"]',
        ),
    ),
    ("theme-body-class", _theme_body_class),
    (
        "docusaurus-root",
        _any_selector(
            "div#__docusaurus",
            "div.docusaurus-root",
            "nav.navbar--fixed-top",
            "div.navbar__logo",
            'script[src*="docusaurus"]',
        ),
    ),
    ("docusaurus-script", _docusaurus_script),
)


def detect_framework(
    soup: BeautifulSoup, logger: Optional[logging.Logger] = None
) -> Optional[str]:
    """Return the name of the first matching marker group, or None."""
    log = logger or null_logger()
    for name, marker in MARKER_GROUPS:
        if marker(soup):
            log.debug("Documentation site detected by marker group %s", name)
            return name
    return None


def is_supported_site(soup: BeautifulSoup, logger: Optional[logging.Logger] = None) -> bool:
    return detect_framework(soup, logger) is not None

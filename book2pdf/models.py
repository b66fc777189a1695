# book2pdf/models.py
"""
Data models shared by the crawler, the renderers and the engine.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional

from book2pdf.utils import INDEX_SLUG, page_filename

COVER_ORDINAL = 1
FIRST_PAGE_ORDINAL = 2


@dataclass(slots=True)
class DocumentSite:
    """Root address, classification verdict and the ordered set of page links."""

    url: str
    supported: bool = False
    links: List[str] = field(default_factory=list)


@dataclass(slots=True)
class PageArtifact:
    """One rendered page PDF on disk."""

    ordinal: int
    slug: str
    source: str
    path: Path

    def __post_init__(self) -> None:
        if not self.slug:
            self.slug = INDEX_SLUG

    @property
    def filename(self) -> str:
        return page_filename(self.ordinal, self.slug)

    def read_bytes(self) -> bytes:
        return self.path.read_bytes()


@dataclass(slots=True)
class SiteInfo:
    """Title/logo extracted from the site root for the cover page."""

    title: str
    url: str
    logo: Optional[str] = None

    @classmethod
    def decode(cls, raw: Any, fallback_url: str) -> "SiteInfo":
        """Validate the loosely typed value returned by the extraction script.

        Missing or blank title → ``"Documentation"``; missing logo → ``None``
        (the cover omits the image block); missing url → *fallback_url*.
        """
        data = raw if isinstance(raw, dict) else {}
        title = data.get("title")
        logo = data.get("logo")
        url = data.get("url")
        return cls(
            title=title.strip() if isinstance(title, str) and title.strip() else "Documentation",
            logo=logo if isinstance(logo, str) and logo else None,
            url=url if isinstance(url, str) and url else fallback_url,
        )


__all__ = ["DocumentSite", "PageArtifact", "SiteInfo", "COVER_ORDINAL", "FIRST_PAGE_ORDINAL"]

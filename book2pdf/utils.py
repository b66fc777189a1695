# File: book2pdf/utils.py
"""book2pdf.utils: Утилиты для адресов страниц: слаги, имена файлов, ссылки."""

from __future__ import annotations

from typing import Sequence
from urllib.parse import urljoin, urlparse

from slugify import slugify

__all__: Sequence[str] = (
    "INDEX_SLUG",
    "href_to_slug",
    "domain_slug",
    "page_filename",
    "resolve_href",
    "is_page_href",
)

INDEX_SLUG = "index"


def href_to_slug(href: str) -> str:
    """Превращает относительный адрес в ASCII-токен для имени файла.

    ``"/"`` и всё, что после нормализации становится пустым, даёт ``"index"``.
    """
    slug = slugify(href).replace("/", "-").strip()
    if href == "/" or not slug:
        return INDEX_SLUG
    return slug.rstrip("-") or INDEX_SLUG


def domain_slug(url: str) -> str:
    """Слаг хоста для имени склеенного файла (``docs.example.com`` → ``docs-example-com``)."""
    host = urlparse(url).hostname or "gitbook"
    return slugify(host.replace(".", "-")) or "gitbook"


def page_filename(ordinal: int, slug: str) -> str:
    """``NN_<slug>.pdf`` с двузначным порядковым номером."""
    return f"{ordinal:02d}_{slug}.pdf"


def resolve_href(base_url: str, href: str) -> str:
    """Абсолютный адрес страницы относительно корня сайта."""
    return urljoin(base_url, href)


def is_page_href(href: str) -> bool:
    """Внутренняя страница: начинается с ``/``, без фрагмента, не из ``/assets/``."""
    return href.startswith("/") and "#" not in href and "/assets/" not in href

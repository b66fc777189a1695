# File: book2pdf/render/cover.py
"""book2pdf.render.cover: Синтетическая обложка (логотип, заголовок, адрес сайта)."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, Optional

from jinja2 import Environment, PackageLoader, select_autoescape

from book2pdf.config import PrintOptions, SettleDelays
from book2pdf.errors import RenderError
from book2pdf.logger import null_logger
from book2pdf.models import SiteInfo
from book2pdf.render.page_renderer import evaluate, print_to_pdf
from book2pdf.render.scripts import SITE_INFO_JS

__all__ = ("COVER_TEMPLATE", "render_cover_html", "extract_site_info", "render_cover")

COVER_TEMPLATE = "cover.html.j2"

_env = Environment(
    loader=PackageLoader("book2pdf", "templates"),
    autoescape=select_autoescape(["html", "html.j2", "xml"]),
)


def render_cover_html(info: SiteInfo) -> str:
    """HTML обложки; блок логотипа опускается, если логотип не найден."""
    template = _env.get_template(COVER_TEMPLATE)
    return template.render(title=info.title, logo=info.logo, url=info.url)


async def extract_site_info(page: Any, root_url: str) -> SiteInfo:
    """Заголовок и логотип с главной страницы, с запасными значениями по полям."""
    raw = await evaluate(page, SITE_INFO_JS, "extract site info from", root_url)
    return SiteInfo.decode(raw, fallback_url=root_url)


async def render_cover(
    session: Any,
    root_url: str,
    path: Path,
    options: PrintOptions,
    settle: SettleDelays,
    logger: Optional[logging.Logger] = None,
) -> Path:
    """
    Открывает корень сайта, извлекает данные и печатает обложку в *path*.

    Любая ошибка приходит как RenderError; запуск продолжается без обложки.
    """
    log = logger or null_logger()
    log.info("Creating cover page with website logo...")
    page = await session.open_page(root_url, settle.navigation)
    try:
        info = await extract_site_info(page, root_url)
        log.debug("Cover info: title=%r logo=%r", info.title, info.logo)
        try:
            await page.set_content(render_cover_html(info))
        except Exception as exc:
            raise RenderError("set cover content for", root_url, exc) from exc
        await asyncio.sleep(settle.content)
        await print_to_pdf(page, path, options, root_url)
    finally:
        await session.close_page(page)
    log.info("Cover page created: %s", path)
    return path

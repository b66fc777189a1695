# File: book2pdf/engine.py
"""book2pdf.engine: Оркестрация запуска: обход навигации, рендеринг страниц, склейка и очистка."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, List, Optional

from bs4 import BeautifulSoup

from book2pdf.config import DownloadConfig
from book2pdf.crawler.classifier import detect_framework
from book2pdf.crawler.link_extractor import collect_links
from book2pdf.crawler.menu import expand_menus
from book2pdf.errors import RenderError, SessionError, UnsupportedSiteError
from book2pdf.logger import null_logger
from book2pdf.models import COVER_ORDINAL, FIRST_PAGE_ORDINAL, DocumentSite, PageArtifact
from book2pdf.pdf.merger import merge_files
from book2pdf.render.cover import render_cover
from book2pdf.render.page_renderer import render_page
from book2pdf.render.scripts import FIRST_DOC_LINK_JS
from book2pdf.render.session import RenderSession
from book2pdf.utils import href_to_slug, page_filename, resolve_href

__all__ = ["Downloader", "DownloadResult", "start_download"]

_WARM_UP_SUFFIXES = ("/", ".com", ".app")


@dataclass(slots=True)
class DownloadResult:
    """Итог запуска: найденный сайт, отрендеренные страницы и склеенный файл."""

    site: DocumentSite
    artifacts: List[PageArtifact] = field(default_factory=list)
    combined_path: Optional[Path] = None


class Downloader:
    """Последовательный конвейер одного запуска download."""

    def __init__(
        self,
        config: DownloadConfig,
        logger: Optional[logging.Logger] = None,
        session_factory: Callable[..., Any] = RenderSession,
    ) -> None:
        self.config = config
        self.logger = logger or null_logger()
        self.session_factory = session_factory

    async def run(self) -> DownloadResult:
        """Запускает весь конвейер; фатальные ошибки пробрасываются наружу."""
        self.logger.info('Visiting "%s"', self.config.url)
        async with self.session_factory(self.config, self.logger) as session:
            site = await self.discover(session)
            artifacts = await self.render_all(session, site)

        result = DownloadResult(site=site, artifacts=artifacts)
        if self.config.combine and artifacts:
            result.combined_path = self.combine(artifacts)
            if not self.config.preserve_pages:
                self.cleanup(artifacts)
        return result

    # ------------------------------------------------------------------ #
    # Discovery
    # ------------------------------------------------------------------ #

    async def discover(self, session: Any) -> DocumentSite:
        """Классификация сайта и сбор ссылок в порядке навигации."""
        url = self.config.url
        site = DocumentSite(url=url)
        try:
            page = await session.new_page()
        except RenderError as exc:
            raise SessionError(str(exc)) from exc

        try:
            await self._navigate_or_abort(session, page, url, self.config.settle.root)
            framework = detect_framework(await self._soup(page), self.logger)
            if framework is None:
                raise UnsupportedSiteError(url)
            site.supported = True
            self.logger.info("Detected documentation site (%s)", framework)

            await self._warm_up(session, page)
            try:
                await expand_menus(page, self.config.settle.menu, self.logger)
            except RenderError as exc:
                self.logger.warning("Menu expansion failed, continuing: %s", exc)

            site.links = collect_links(await self._soup(page), self.logger)
        finally:
            await session.close_page(page)

        self.logger.info("Found %d pages to download", len(site.links))
        self.logger.debug("Links collected: %s", site.links)
        return site

    async def _navigate_or_abort(self, session: Any, page: Any, url: str, settle: float) -> None:
        try:
            await session.navigate(page, url, settle)
        except RenderError as exc:
            raise SessionError(str(exc)) from exc

    async def _soup(self, page: Any) -> BeautifulSoup:
        try:
            html = await page.content()
        except Exception as exc:
            raise SessionError(f"Failed to get page content of {self.config.url}: {exc}") from exc
        return BeautifulSoup(html, "html.parser")

    async def _warm_up(self, session: Any, page: Any) -> None:
        """Переход на первую страницу документации, чтобы отрисовался сайдбар.

        Неудачный переход не фатален: страница возвращается на корень сайта.
        """
        if not self.config.url.endswith(_WARM_UP_SUFFIXES):
            return
        try:
            doc_link = await page.evaluate(FIRST_DOC_LINK_JS)
        except Exception as exc:
            self.logger.debug("First documentation link lookup failed: %s", exc)
            return
        if not isinstance(doc_link, str) or not doc_link:
            return
        self.logger.info("Navigating to documentation page to load sidebar: %s", doc_link)
        try:
            await session.navigate(page, doc_link, self.config.settle.navigation)
        except RenderError as exc:
            self.logger.warning("Warm-up navigation failed, collecting links from the root page: %s", exc)
            await self._navigate_or_abort(session, page, self.config.url, self.config.settle.root)

    # ------------------------------------------------------------------ #
    # Rendering
    # ------------------------------------------------------------------ #

    async def render_all(self, session: Any, site: DocumentSite) -> List[PageArtifact]:
        """Обложка и страницы строго по очереди; ошибки отдельных страниц пропускаются."""
        pages_dir = self.config.pages_dir
        pages_dir.mkdir(parents=True, exist_ok=True)
        options = self.config.print_options
        artifacts: List[PageArtifact] = []

        cover_path = pages_dir / page_filename(COVER_ORDINAL, "cover")
        try:
            await render_cover(session, site.url, cover_path, options, self.config.settle, self.logger)
        except RenderError as exc:
            self.logger.warning("Cover page skipped: %s", exc)
        else:
            artifacts.append(PageArtifact(COVER_ORDINAL, "cover", site.url, cover_path))

        for ordinal, href in enumerate(site.links, start=FIRST_PAGE_ORDINAL):
            slug = href_to_slug(href)
            url = resolve_href(site.url, href)
            path = pages_dir / page_filename(ordinal, slug)
            try:
                await render_page(
                    session, url, path, options, self.config.settle.navigation, self.logger
                )
            except RenderError as exc:
                self.logger.error("Failed to download %s: %s", url, exc)
                continue
            artifacts.append(PageArtifact(ordinal, slug, url, path))
        return artifacts

    # ------------------------------------------------------------------ #
    # Combine & cleanup
    # ------------------------------------------------------------------ #

    def combine(self, artifacts: List[PageArtifact]) -> Path:
        """Склеивает PDF в порядке рендеринга."""
        self.logger.info("Combining all PDFs into a single file...")
        combined = self.config.combined_path
        merge_files([a.path for a in artifacts], combined, self.logger)
        self.logger.info("Combined PDF saved to: %s", combined)
        return combined

    def cleanup(self, artifacts: List[PageArtifact]) -> None:
        """Удаляет постраничные PDF; каталог pages удаляется, только если он опустел."""
        self.logger.info("Cleaning up individual page files...")
        for artifact in artifacts:
            try:
                artifact.path.unlink()
            except OSError as exc:
                self.logger.warning("Failed to remove %s: %s", artifact.path, exc)

        pages_dir = self.config.pages_dir
        try:
            if pages_dir.is_dir() and not any(pages_dir.iterdir()):
                pages_dir.rmdir()
        except OSError as exc:
            self.logger.warning("Failed to remove %s: %s", pages_dir, exc)


async def start_download(
    config: DownloadConfig, logger: Optional[logging.Logger] = None
) -> DownloadResult:
    """
    Запускает Downloader с сессией Chromium и возвращает результат.

    Parameters
    ----------
    config : DownloadConfig
        Конфигурация запуска.
    logger : logging.Logger, optional
        Логгер проекта, созданный CLI.
    """
    return await Downloader(config, logger).run()

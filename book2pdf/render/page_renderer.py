# book2pdf/render/page_renderer.py
"""
Rendering of one documentation page into a single-page-document PDF artifact.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

from book2pdf.config import PrintOptions
from book2pdf.errors import RenderError
from book2pdf.logger import null_logger
from book2pdf.render.scripts import PREPARE_PAGE_JS

__all__ = ("evaluate", "print_to_pdf", "render_page")


async def evaluate(page: Any, script: str, operation: str, target: str) -> Any:
    """Run *script* in *page*; any failure is wrapped with operation and target."""
    try:
        return await page.evaluate(script)
    except Exception as exc:
        raise RenderError(operation, target, exc) from exc


async def print_to_pdf(page: Any, path: Path, options: PrintOptions, target: str) -> Path:
    """Print the loaded page with *options* and persist the bytes at *path*."""
    try:
        data = await page.pdf(**options.to_pdf_kwargs())
    except Exception as exc:
        raise RenderError("generate PDF for", target, exc) from exc
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
    except OSError as exc:
        raise RenderError("write PDF to", str(path), exc) from exc
    return path


async def render_page(
    session: Any,
    url: str,
    path: Path,
    options: PrintOptions,
    settle: float,
    logger: Optional[logging.Logger] = None,
) -> Path:
    """
    Navigate to *url*, clean the page up and print it to *path*.

    Raises :class:`~book2pdf.errors.RenderError` on any failure; the caller
    decides whether to skip the page.
    """
    log = logger or null_logger()
    log.info('Downloading "%s" into "%s"', url, path)
    page = await session.open_page(url, settle)
    try:
        await evaluate(page, PREPARE_PAGE_JS, "prepare page", url)
        return await print_to_pdf(page, path, options, url)
    finally:
        await session.close_page(page)

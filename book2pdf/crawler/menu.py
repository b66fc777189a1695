# book2pdf/crawler/menu.py
"""
Best-effort expansion of collapsed navigation before links are collected.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

from book2pdf.errors import RenderError
from book2pdf.logger import null_logger
from book2pdf.render.scripts import EXPAND_MENUS_JS


async def expand_menus(
    page: Any,
    settle: float = 2.0,
    logger: Optional[logging.Logger] = None,
) -> Optional[int]:
    """
    Click every collapsed navigation item once, then wait *settle* seconds.

    Returns the number of clicked elements when the page reports it (``None``
    otherwise). Zero matches is not an error; only a failing evaluation is.
    """
    log = logger or null_logger()
    try:
        clicked = await page.evaluate(EXPAND_MENUS_JS)
    except Exception as exc:
        raise RenderError("expand menus on", str(getattr(page, "url", "page")), exc) from exc

    count = clicked if isinstance(clicked, int) else None
    log.debug("Menu expansion clicked %s elements", "?" if count is None else count)
    await asyncio.sleep(settle)
    return count


__all__ = ["expand_menus"]

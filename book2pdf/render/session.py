# book2pdf/render/session.py
"""
Browser rendering session: one Chromium instance shared by the whole run.

The session exposes the two capabilities the rest of the package relies on:
opening a page at an address (navigation + settle delay) and evaluating a
script / printing a page through the returned Playwright ``Page``.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional, Tuple

from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright

from book2pdf.config import DownloadConfig
from book2pdf.errors import RenderError, SessionError
from book2pdf.logger import null_logger

__all__ = ("EventDrain", "RenderSession", "is_protocol_noise")

_NOISE_MARKERS: Tuple[str, ...] = (
    "data did not match any variant",
    "untagged enum",
    "deserializ",
    "unknown message",
)


def is_protocol_noise(text: str) -> bool:
    """Deserialisation mismatches of unrelated protocol traffic are never fatal."""
    lowered = text.lower()
    return any(marker in lowered for marker in _NOISE_MARKERS)


class EventDrain:
    """Background worker owning the inbound event stream of the session.

    Browser and page events are pushed from Playwright callbacks into a queue
    and consumed here, so unconsumed events never pile up behind the
    sequential command flow of the engine.
    """

    _ERROR_KINDS = frozenset({"crash", "disconnected"})

    def __init__(self, logger: logging.Logger) -> None:
        self.logger = logger
        self._queue: asyncio.Queue[Tuple[str, Any]] = asyncio.Queue()
        self._task: Optional[asyncio.Task[None]] = None
        self.handled = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self._run(), name="book2pdf-event-drain")

    def push(self, kind: str, payload: Any = None) -> None:
        self._queue.put_nowait((kind, payload))

    async def _run(self) -> None:
        while True:
            kind, payload = await self._queue.get()
            try:
                self._handle(kind, payload)
            finally:
                self.handled += 1
                self._queue.task_done()

    def _handle(self, kind: str, payload: Any) -> None:
        text = getattr(payload, "text", payload)
        text = "" if text is None else str(text)
        if is_protocol_noise(text):
            self.logger.debug("Browser protocol message ignored: %s", text)
        elif kind in self._ERROR_KINDS:
            self.logger.error("Browser %s: %s", kind, text or "no details")
        else:
            self.logger.debug("Browser %s: %s", kind, text)

    async def stop(self) -> None:
        """Cancel the worker; safe to call on any path, any number of times."""
        if self._task is None:
            return
        self._task.cancel()
        await asyncio.gather(self._task, return_exceptions=True)
        self._task = None


class RenderSession:
    """Async context manager around Playwright/Chromium for one run."""

    def __init__(self, config: DownloadConfig, logger: Optional[logging.Logger] = None) -> None:
        self.config = config
        self.logger = logger or null_logger()
        self.drain = EventDrain(self.logger)
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None

    async def __aenter__(self) -> RenderSession:
        self.drain.start()
        try:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(headless=self.config.headless)
            self._browser.on("disconnected", lambda _: self.drain.push("disconnected"))
            self._context = await self._browser.new_context(
                viewport={
                    "width": self.config.viewport_width,
                    "height": self.config.viewport_height,
                }
            )
        except Exception as exc:
            await self.close()
            raise SessionError(f"Failed to launch browser: {exc}") from exc
        self.logger.debug("Browser session started")
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        try:
            if self._context is not None:
                await self._context.close()
            if self._browser is not None:
                await self._browser.close()
            if self._playwright is not None:
                await self._playwright.stop()
        except Exception as exc:
            self.logger.warning("Error while closing browser session: %s", exc)
        finally:
            self._context = self._browser = self._playwright = None
            await self.drain.stop()

    async def new_page(self) -> Page:
        if self._context is None:
            raise SessionError("Session not initialized")
        try:
            page = await self._context.new_page()
        except Exception as exc:
            raise RenderError("create page for", self.config.url, exc) from exc
        page.on("console", lambda msg: self.drain.push("console", msg))
        page.on("pageerror", lambda err: self.drain.push("pageerror", err))
        page.on("crash", lambda _: self.drain.push("crash", page.url))
        return page

    async def navigate(self, page: Page, url: str, settle: float) -> None:
        """Go to *url*, wait for the load event, then *settle* seconds."""
        try:
            await page.goto(url, wait_until="load", timeout=self.config.timeout_ms)
        except Exception as exc:
            raise RenderError("navigate to", url, exc) from exc
        await asyncio.sleep(settle)

    async def open_page(self, url: str, settle: float) -> Page:
        page = await self.new_page()
        try:
            await self.navigate(page, url, settle)
        except RenderError:
            await self.close_page(page)
            raise
        return page

    async def close_page(self, page: Page) -> None:
        try:
            await page.close()
        except Exception as exc:
            self.logger.debug("Failed to close page: %s", exc)

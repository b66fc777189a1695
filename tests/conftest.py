# File: tests/conftest.py
from __future__ import annotations

from io import BytesIO
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Set

import pytest
from pypdf import PdfReader, PdfWriter

from book2pdf.config import DownloadConfig, SettleDelays
from book2pdf.errors import RenderError
from book2pdf.render.scripts import (
    EXPAND_MENUS_JS,
    FIRST_DOC_LINK_JS,
    PREPARE_PAGE_JS,
    SITE_INFO_JS,
)

DOCS_URL = "https://docs.example.com"

DOCUSAURUS_HTML = """
<html>
<head><title>Example Docs</title></head>
<body>
  <div id="__docusaurus">
    <nav class="navbar navbar--fixed-top">
      <a href="/docs/intro">Intro</a>
      <a href="https://github.com/example">GitHub</a>
    </nav>
    <aside>
      <ul class="menu theme-doc-sidebar-menu">
        <li><a href="/docs/intro">Intro</a></li>
        <li><a href="/docs/guide/setup">Setup</a></li>
        <li><a href="/docs/guide/setup#install">Install</a></li>
        <li><a href="/assets/files/manual.zip">Download</a></li>
      </ul>
    </aside>
    <main><a href="/blog/release">Release notes</a></main>
  </div>
</body>
</html>
"""

PLAIN_HTML = "<html><head><title>Blog</title></head><body><a href='/post'>Post</a></body></html>"


def pytest_configure(config):
    """Register custom markers so that `--strict-markers` does not fail."""
    config.addinivalue_line(
        "markers",
        "slow: launches a real browser (deselect with '-m \"not slow\"')",
    )


def make_pdf(*widths: float, height: float = 200) -> bytes:
    """PDF with one blank page per width (widths make page order observable)."""
    writer = PdfWriter()
    for width in widths:
        writer.add_blank_page(width=width, height=height)
    buf = BytesIO()
    writer.write(buf)
    return buf.getvalue()


def page_widths(data: bytes) -> List[float]:
    return [float(page.mediabox.width) for page in PdfReader(BytesIO(data)).pages]


def build_pdf(objects: Dict[int, str], root: int = 1) -> bytes:
    """Hand-written PDF with a correct xref table from ``{id: body}``."""
    out = bytearray(b"%PDF-1.4\n")
    offsets: Dict[int, int] = {}
    for num in sorted(objects):
        offsets[num] = len(out)
        out += f"{num} 0 obj\n{objects[num]}\nendobj\n".encode("ascii")
    size = max(objects) + 1
    xref = len(out)
    out += f"xref\n0 {size}\n".encode("ascii")
    out += b"0000000000 65535 f \n"
    for num in range(1, size):
        entry = f"{offsets[num]:010d} 00000 n \n" if num in offsets else "0000000000 65535 f \n"
        out += entry.encode("ascii")
    out += f"trailer\n<< /Size {size} /Root {root} 0 R >>\nstartxref\n{xref}\n%%EOF\n".encode("ascii")
    return bytes(out)


@pytest.fixture()
def nested_pdf() -> bytes:
    """Two pages under an intermediate Pages node; page 4 inherits its MediaBox."""
    return build_pdf(
        {
            1: "<< /Type /Catalog /Pages 2 0 R >>",
            2: "<< /Type /Pages /Kids [3 0 R] /Count 2 /MediaBox [0 0 400 500] >>",
            3: "<< /Type /Pages /Parent 2 0 R /Kids [4 0 R 5 0 R] /Count 2 >>",
            4: "<< /Type /Page /Parent 3 0 R >>",
            5: "<< /Type /Page /Parent 3 0 R /MediaBox [0 0 450 500] >>",
        }
    )


# --------------------------------------------------------------------------- #
#                       Fake rendering session / page                         #
# --------------------------------------------------------------------------- #


class FakePage:
    def __init__(self, session: "FakeSession") -> None:
        self.session = session
        self.url = "about:blank"
        self.scripts: List[str] = []
        self.content_set: Optional[str] = None
        self.closed = False

    async def evaluate(self, script: str):
        self.scripts.append(script)
        self.session.scripts.append(script)
        if script in self.session.failing_scripts:
            raise RuntimeError("Execution context was destroyed")
        return self.session.script_results.get(script)

    async def content(self) -> str:
        return self.session.site.get(self.url, "<html></html>")

    async def set_content(self, html: str) -> None:
        self.content_set = html

    async def pdf(self, **kwargs) -> bytes:
        self.session.pdf_calls.append((self.url, kwargs))
        if self.url in self.session.failing_pdf:
            raise RuntimeError("Printing failed")
        return make_pdf(100 + 10 * len(self.session.pdf_calls))

    async def close(self) -> None:
        self.closed = True


class FakeSession:
    """In-memory stand-in for RenderSession."""

    def __init__(
        self,
        site: Optional[Dict[str, str]] = None,
        failing_urls: Iterable[str] = (),
        failing_scripts: Iterable[str] = (),
        failing_pdf: Iterable[str] = (),
        script_results: Optional[Dict[str, object]] = None,
    ) -> None:
        self.site = site if site is not None else {DOCS_URL: DOCUSAURUS_HTML}
        self.failing_urls: Set[str] = set(failing_urls)
        self.failing_scripts: Set[str] = set(failing_scripts)
        self.failing_pdf: Set[str] = set(failing_pdf)
        self.script_results: Dict[str, object] = {
            EXPAND_MENUS_JS: 2,
            FIRST_DOC_LINK_JS: None,
            PREPARE_PAGE_JS: True,
            SITE_INFO_JS: {"title": "Example Docs", "logo": None, "url": DOCS_URL},
        }
        if script_results:
            self.script_results.update(script_results)
        self.pages: List[FakePage] = []
        self.visited: List[str] = []
        self.scripts: List[str] = []
        self.pdf_calls: List[tuple] = []
        self.entered = False
        self.exited = False

    async def __aenter__(self) -> "FakeSession":
        self.entered = True
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.exited = True

    async def new_page(self) -> FakePage:
        page = FakePage(self)
        self.pages.append(page)
        return page

    async def navigate(self, page: FakePage, url: str, settle: float) -> None:
        if url in self.failing_urls:
            raise RenderError("navigate to", url, RuntimeError("net::ERR_CONNECTION_REFUSED"))
        page.url = url
        self.visited.append(url)

    async def open_page(self, url: str, settle: float) -> FakePage:
        page = await self.new_page()
        await self.navigate(page, url, settle)
        return page

    async def close_page(self, page: FakePage) -> None:
        await page.close()


@pytest.fixture()
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture()
def session_factory() -> Callable[..., Callable[..., FakeSession]]:
    """Wrap a FakeSession into the ``(config, logger)`` factory Downloader expects."""

    def wrap(session: FakeSession):
        return lambda config, logger: session

    return wrap


@pytest.fixture()
def download_config(tmp_path: Path) -> DownloadConfig:
    return DownloadConfig(
        url=DOCS_URL,
        out_dir=tmp_path / "out",
        settle=SettleDelays(root=0, navigation=0, menu=0, content=0),
    )

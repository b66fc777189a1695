# File: tests/test_engine.py
"""Конвейер download на поддельной сессии: обход, рендеринг, склейка и очистка."""
from __future__ import annotations

import pytest

from book2pdf.engine import Downloader
from book2pdf.errors import RenderError, SessionError, UnsupportedSiteError
from book2pdf.render.scripts import EXPAND_MENUS_JS, FIRST_DOC_LINK_JS, SITE_INFO_JS
from conftest import DOCS_URL, DOCUSAURUS_HTML, PLAIN_HTML, FakeSession, page_widths

EXPECTED_LINKS = ["/docs/intro", "/docs/guide/setup", "/blog/release"]


def _downloader(config, session, session_factory, **update):
    if update:
        config = config.model_copy(update=update)
    return Downloader(config, session_factory=session_factory(session))


@pytest.mark.asyncio()
async def test_full_run_combines_and_cleans_up(download_config, session_factory):
    session = FakeSession()
    downloader = _downloader(download_config, session, session_factory)

    result = await downloader.run()

    assert result.site.supported
    assert result.site.links == EXPECTED_LINKS
    assert [a.ordinal for a in result.artifacts] == [1, 2, 3, 4]
    assert [a.filename for a in result.artifacts] == [
        "01_cover.pdf",
        "02_docs-intro.pdf",
        "03_docs-guide-setup.pdf",
        "04_blog-release.pdf",
    ]
    assert result.combined_path == download_config.out_dir / "docs-example-com-combined.pdf"
    assert page_widths(result.combined_path.read_bytes()) == [110, 120, 130, 140]
    assert not download_config.pages_dir.exists()
    assert session.entered and session.exited
    assert all(page.closed for page in session.pages)


@pytest.mark.asyncio()
async def test_pages_rendered_in_link_order(download_config, session_factory):
    session = FakeSession()

    await _downloader(download_config, session, session_factory).run()

    rendered = [url for url, _ in session.pdf_calls]
    assert rendered == [DOCS_URL] + [f"{DOCS_URL}{href}" for href in EXPECTED_LINKS]


@pytest.mark.asyncio()
async def test_unsupported_site_aborts_before_collection(download_config, session_factory):
    session = FakeSession(site={DOCS_URL: PLAIN_HTML})

    with pytest.raises(UnsupportedSiteError, match="Not a supported documentation website"):
        await _downloader(download_config, session, session_factory).run()

    assert EXPAND_MENUS_JS not in session.scripts
    assert session.pdf_calls == []
    assert not download_config.out_dir.exists()
    assert session.exited


@pytest.mark.asyncio()
async def test_root_navigation_failure_is_fatal(download_config, session_factory):
    session = FakeSession(failing_urls=[DOCS_URL])

    with pytest.raises(SessionError, match="navigate to"):
        await _downloader(download_config, session, session_factory).run()

    assert session.pdf_calls == []


@pytest.mark.asyncio()
async def test_failed_page_is_skipped(download_config, session_factory):
    broken = f"{DOCS_URL}/docs/guide/setup"
    session = FakeSession(failing_urls=[broken])

    result = await _downloader(download_config, session, session_factory, preserve_pages=True).run()

    assert [a.ordinal for a in result.artifacts] == [1, 2, 4]
    files = sorted(p.name for p in download_config.pages_dir.iterdir())
    assert files == ["01_cover.pdf", "02_docs-intro.pdf", "04_blog-release.pdf"]
    assert page_widths(result.combined_path.read_bytes()) == [110, 120, 130]


@pytest.mark.asyncio()
async def test_failed_print_is_skipped(download_config, session_factory):
    session = FakeSession(failing_pdf=[f"{DOCS_URL}/blog/release"])

    result = await _downloader(download_config, session, session_factory).run()

    assert [a.ordinal for a in result.artifacts] == [1, 2, 3]
    assert result.combined_path.is_file()


@pytest.mark.asyncio()
async def test_cover_failure_does_not_stop_run(download_config, session_factory):
    session = FakeSession(failing_scripts=[SITE_INFO_JS])

    result = await _downloader(download_config, session, session_factory, preserve_pages=True).run()

    assert [a.ordinal for a in result.artifacts] == [2, 3, 4]
    assert not (download_config.pages_dir / "01_cover.pdf").exists()
    assert result.combined_path.is_file()


@pytest.mark.asyncio()
async def test_menu_expansion_failure_is_not_fatal(download_config, session_factory):
    session = FakeSession(failing_scripts=[EXPAND_MENUS_JS])

    result = await _downloader(download_config, session, session_factory).run()

    assert result.site.links == EXPECTED_LINKS


@pytest.mark.asyncio()
async def test_no_combine_keeps_pages(download_config, session_factory):
    session = FakeSession()

    result = await _downloader(download_config, session, session_factory, combine=False).run()

    assert result.combined_path is None
    assert not download_config.combined_path.exists()
    assert len(list(download_config.pages_dir.glob("*.pdf"))) == 4


@pytest.mark.asyncio()
async def test_preserve_pages_keeps_pages(download_config, session_factory):
    session = FakeSession()

    result = await _downloader(download_config, session, session_factory, preserve_pages=True).run()

    assert result.combined_path.is_file()
    assert all(a.path.is_file() for a in result.artifacts)


@pytest.mark.asyncio()
async def test_nothing_rendered_skips_combine(download_config, session_factory):
    failing = [DOCS_URL] + [f"{DOCS_URL}{href}" for href in EXPECTED_LINKS]
    session = FakeSession(failing_pdf=failing)

    result = await _downloader(download_config, session, session_factory).run()

    assert result.artifacts == []
    assert result.combined_path is None
    assert not download_config.combined_path.exists()


@pytest.mark.asyncio()
async def test_warm_up_navigation_for_root_url(download_config, session_factory):
    root = f"{DOCS_URL}/"
    first_doc = f"{DOCS_URL}/docs/intro"
    session = FakeSession(
        site={root: "<html><body><div id='__docusaurus'></div></body></html>", first_doc: DOCUSAURUS_HTML},
        script_results={FIRST_DOC_LINK_JS: first_doc},
    )

    result = await _downloader(download_config, session, session_factory, url=root, combine=False).run()

    assert session.visited[:2] == [root, first_doc]
    assert result.site.links == EXPECTED_LINKS


@pytest.mark.asyncio()
async def test_no_warm_up_for_deep_url(download_config, session_factory):
    deep = f"{DOCS_URL}/docs/intro"
    session = FakeSession(site={deep: DOCUSAURUS_HTML}, script_results={FIRST_DOC_LINK_JS: f"{DOCS_URL}/x"})

    await _downloader(download_config, session, session_factory, url=deep, combine=False).run()

    assert FIRST_DOC_LINK_JS not in session.scripts
    assert session.visited[0] == deep
    assert f"{DOCS_URL}/x" not in session.visited


@pytest.mark.asyncio()
async def test_failed_warm_up_falls_back_to_root(download_config, session_factory):
    root = f"{DOCS_URL}/"
    first_doc = f"{DOCS_URL}/docs/intro"
    session = FakeSession(
        site={root: DOCUSAURUS_HTML},
        failing_urls=[first_doc],
        script_results={FIRST_DOC_LINK_JS: first_doc},
    )

    result = await _downloader(download_config, session, session_factory, url=root, combine=False).run()

    assert session.visited[:2] == [root, root]
    assert result.site.links == EXPECTED_LINKS
    assert [a.ordinal for a in result.artifacts] == [1, 3, 4]


@pytest.mark.asyncio()
async def test_failed_warm_up_and_root_return_is_fatal(download_config, session_factory):
    root = f"{DOCS_URL}/"
    first_doc = f"{DOCS_URL}/docs/intro"

    class FlakyRoot(FakeSession):
        async def navigate(self, page, url, settle):
            if url == root and root in self.visited:
                raise RenderError("navigate to", url, RuntimeError("net::ERR_CONNECTION_RESET"))
            await super().navigate(page, url, settle)

    session = FlakyRoot(
        site={root: DOCUSAURUS_HTML},
        failing_urls=[first_doc],
        script_results={FIRST_DOC_LINK_JS: first_doc},
    )

    with pytest.raises(SessionError, match="navigate to"):
        await _downloader(download_config, session, session_factory, url=root, combine=False).run()
    assert session.pdf_calls == []

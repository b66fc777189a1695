"""book2pdf.render: Chromium session, page and cover rendering."""

from book2pdf.render.cover import render_cover
from book2pdf.render.page_renderer import render_page
from book2pdf.render.session import RenderSession

__all__ = ["RenderSession", "render_page", "render_cover"]

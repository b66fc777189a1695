"""book2pdf.crawler: site classification, menu expansion and link collection."""

from book2pdf.crawler.classifier import detect_framework, is_supported_site
from book2pdf.crawler.link_extractor import collect_links
from book2pdf.crawler.menu import expand_menus

__all__ = ["detect_framework", "is_supported_site", "collect_links", "expand_menus"]

# File: book2pdf/errors.py
"""Exception hierarchy shared by the crawler, renderer and merger."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union


class Book2PdfError(RuntimeError):
    """Base class for every error surfaced by book2pdf."""


class SessionError(Book2PdfError):
    """The rendering session could not be started or lost its root page."""


class UnsupportedSiteError(Book2PdfError):
    def __init__(self, url: str) -> None:
        super().__init__(f"Not a supported documentation website (GitBook or Docusaurus): {url}")
        self.url = url


class RenderError(Book2PdfError):
    """A remote rendering capability failed for one unit of work."""

    def __init__(self, operation: str, target: str, cause: Optional[BaseException] = None) -> None:
        detail = f"{operation} {target}"
        if cause is not None:
            detail = f"{detail}: {cause}"
        super().__init__(detail)
        self.operation = operation
        self.target = target
        self.cause = cause


class ArtifactParseError(Book2PdfError):
    def __init__(self, source: Union[str, Path], cause: BaseException) -> None:
        super().__init__(f"Failed to parse PDF {source}: {cause}")
        self.source = str(source)
        self.cause = cause


class NothingToMergeError(Book2PdfError):
    def __init__(self, message: str = "nothing to merge: no PDF could be parsed") -> None:
        super().__init__(message)


class MergeInputError(Book2PdfError):
    """The ``merge`` command was pointed at an unusable directory."""


__all__ = [
    "Book2PdfError",
    "SessionError",
    "UnsupportedSiteError",
    "RenderError",
    "ArtifactParseError",
    "NothingToMergeError",
    "MergeInputError",
]

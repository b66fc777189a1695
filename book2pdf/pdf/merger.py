# book2pdf/pdf/merger.py
"""
Merging of independently rendered PDFs by rewriting their object graphs.

The first parsed document is the base: its ids, catalog and trailer are kept.
Every following document is renumbered above the running maximum id, copied
into the base arena, and its pages are appended to the base page tree.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple, Union

from pypdf.generic import ArrayObject, DictionaryObject, NameObject, NumberObject, PdfObject

from book2pdf.errors import ArtifactParseError, MergeInputError, NothingToMergeError
from book2pdf.logger import null_logger
from book2pdf.pdf.graph import ObjectGraph, ref
from book2pdf.pdf.writer import serialize

__all__ = (
    "MergedGraph",
    "MergeResult",
    "parse_artifacts",
    "merge_graphs",
    "merge_bytes",
    "merge_files",
    "find_pdf_files",
    "merge_directory",
)

PathLike = Union[str, Path]


@dataclass
class MergedGraph:
    """Base graph accumulating the objects and pages of the other graphs."""

    base: ObjectGraph
    objects: Dict[int, PdfObject] = field(init=False)
    page_ids: List[int] = field(init=False)
    contributions: List[Set[int]] = field(init=False)
    max_id: int = field(init=False)
    version: str = field(init=False)
    _inherited: Dict[int, Dict[str, PdfObject]] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.objects = dict(self.base.objects)
        self.page_ids = list(self.base.page_ids)
        self.contributions = [set(self.base.objects)]
        self.max_id = self.base.max_id
        self.version = self.base.version
        self._inherited = dict(self.base.inherited)

    def absorb(self, graph: ObjectGraph) -> ObjectGraph:
        """Renumber *graph* above :attr:`max_id` and copy it in; returns the renumbered graph."""
        moved = graph.renumber(graph.remap_table(start=self.max_id + 1))
        clash = self.objects.keys() & moved.objects.keys()
        if clash:
            raise RuntimeError(f"object id collision while merging {graph.source}: {sorted(clash)[:5]}")
        self.objects.update(moved.objects)
        self.page_ids.extend(moved.page_ids)
        self._inherited.update(moved.inherited)
        self.contributions.append(set(moved.objects))
        self.max_id = moved.max_id
        self.version = max(self.version, moved.version)
        return moved

    def finalize(self) -> None:
        """Point the base page-tree root at every collected page, in order."""
        pages_id = self.base.pages_id
        pages_root = self.objects[pages_id]
        if not isinstance(pages_root, DictionaryObject):
            raise RuntimeError("page tree root is not a dictionary")

        for page_id in self.page_ids:
            page = self.objects[page_id]
            if not isinstance(page, DictionaryObject):
                continue
            for key, value in self._inherited.get(page_id, {}).items():
                page[NameObject(key)] = value
            page[NameObject("/Parent")] = ref(pages_id)

        pages_root[NameObject("/Kids")] = ArrayObject(ref(page_id) for page_id in self.page_ids)
        pages_root[NameObject("/Count")] = NumberObject(len(self.page_ids))

    @property
    def kids(self) -> List[int]:
        node = self.objects[self.base.pages_id]
        return [k.idnum for k in node.get("/Kids", [])]

    @property
    def count(self) -> int:
        return int(self.objects[self.base.pages_id].get("/Count", 0))

    def to_bytes(self) -> bytes:
        return serialize(self.objects, self.base.trailer, version=self.version)


@dataclass(slots=True)
class MergeResult:
    """Output of one merge invocation."""

    data: bytes
    page_count: int
    sources: List[str]
    skipped: List[ArtifactParseError] = field(default_factory=list)


def parse_artifacts(
    artifacts: Iterable[Tuple[str, bytes]],
    logger: Optional[logging.Logger] = None,
) -> Tuple[List[ObjectGraph], List[ArtifactParseError]]:
    """Parse each ``(source, data)`` pair; failures are collected, not raised."""
    log = logger or null_logger()
    graphs: List[ObjectGraph] = []
    skipped: List[ArtifactParseError] = []
    for source, data in artifacts:
        try:
            graph = ObjectGraph.from_bytes(data, source=source)
        except Exception as exc:
            error = ArtifactParseError(source, exc)
            log.warning("Skipping %s", error)
            skipped.append(error)
            continue
        log.debug("Loaded PDF with %d pages from %s", graph.page_count, source)
        graphs.append(graph)
    return graphs, skipped


def merge_graphs(graphs: Sequence[ObjectGraph], logger: Optional[logging.Logger] = None) -> MergedGraph:
    """Merge two or more graphs into the first one."""
    log = logger or null_logger()
    if not graphs:
        raise NothingToMergeError()
    merged = MergedGraph(graphs[0])
    log.debug("First document has %d pages", merged.base.page_count)
    for position, graph in enumerate(graphs[1:], start=2):
        log.debug("Processing document %d: %s with %d pages", position, graph.source, graph.page_count)
        merged.absorb(graph)
    merged.finalize()
    log.info("Total pages collected: %d", len(merged.page_ids))
    return merged


def merge_bytes(
    artifacts: Sequence[Tuple[str, bytes]],
    logger: Optional[logging.Logger] = None,
) -> MergeResult:
    """
    Merge in-memory PDFs in the given order.

    A single parsable input is returned byte-for-byte unchanged. Raises
    :class:`NothingToMergeError` when no input can be parsed.
    """
    log = logger or null_logger()
    graphs, skipped = parse_artifacts(artifacts, log)
    if not graphs:
        raise NothingToMergeError()

    sources = [g.source for g in graphs]
    if len(graphs) == 1:
        only = graphs[0]
        return MergeResult(data=only.data, page_count=only.page_count, sources=sources, skipped=skipped)

    log.info("Starting PDF merge process with %d documents", len(graphs))
    merged = merge_graphs(graphs, log)
    data = merged.to_bytes()
    log.info("Finalizing merged PDF with %d total pages", merged.count)
    return MergeResult(data=data, page_count=merged.count, sources=sources, skipped=skipped)


def merge_files(
    paths: Sequence[PathLike],
    output: PathLike,
    logger: Optional[logging.Logger] = None,
) -> MergeResult:
    """Merge PDF files in the given order and write *output*.

    Unreadable files are skipped like unparsable ones. Nothing is written when
    no input can be parsed.
    """
    log = logger or null_logger()
    artifacts: List[Tuple[str, bytes]] = []
    unreadable: List[ArtifactParseError] = []
    for path in map(Path, paths):
        log.info("Adding: %s", path)
        try:
            artifacts.append((str(path), path.read_bytes()))
        except OSError as exc:
            error = ArtifactParseError(path, exc)
            log.warning("Skipping %s", error)
            unreadable.append(error)

    result = merge_bytes(artifacts, log)
    result.skipped[:0] = unreadable

    out = Path(output)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_bytes(result.data)
    log.info("Successfully merged %d PDFs into %s", len(result.sources), out)
    return result


def find_pdf_files(directory: PathLike) -> List[Path]:
    """``*.pdf`` files of *directory* sorted lexicographically by file name."""
    root = Path(directory)
    if not root.is_dir():
        raise MergeInputError(f"Input directory '{directory}' does not exist")
    files = sorted(
        (p for p in root.iterdir() if p.is_file() and p.suffix.lower() == ".pdf"),
        key=lambda p: p.name,
    )
    if not files:
        raise MergeInputError(f"No PDF files found in '{directory}'")
    return files


def merge_directory(
    directory: PathLike,
    output: PathLike,
    logger: Optional[logging.Logger] = None,
) -> MergeResult:
    log = logger or null_logger()
    log.info("Scanning directory: %s", directory)
    files = find_pdf_files(directory)
    log.info("Found %d PDF files to merge:", len(files))
    for position, path in enumerate(files, start=1):
        log.info("  %d: %s", position, path.name)
    return merge_files(files, output, log)

# book2pdf/pdf/graph.py
"""
Object graph of one PDF document.

A document is loaded into an *arena*: a mapping from integer object id to the
parsed object, holding every indirect object reachable from the trailer.
References inside the arena always point at arena ids. Renumbering goes
through an explicit ``{old_id: new_id}`` table and yields a new graph, so the
id space of every graph can be checked independently.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from io import BytesIO
from typing import Dict, Iterator, List, Mapping, Optional, Set

from pypdf import PdfReader
from pypdf.generic import (
    ArrayObject,
    DictionaryObject,
    IndirectObject,
    NameObject,
    NullObject,
    PdfObject,
)

__all__ = ("INHERITABLE_KEYS", "ObjectGraph", "iter_refs", "remap_refs", "ref")

# Page attributes a page may inherit from its ancestors in the page tree.
INHERITABLE_KEYS = ("/Resources", "/MediaBox", "/CropBox", "/Rotate")

_TRAILER_KEYS = ("/Root", "/Info")


def ref(obj_id: int) -> IndirectObject:
    """Reference to arena object *obj_id* (generation is always 0)."""
    return IndirectObject(obj_id, 0, None)


def _children(obj: PdfObject) -> Iterator[PdfObject]:
    if isinstance(obj, DictionaryObject):
        yield from dict.values(obj)
    elif isinstance(obj, ArrayObject):
        yield from list.__iter__(obj)


def iter_refs(obj: PdfObject) -> Iterator[IndirectObject]:
    """Yield every reference held directly (not through other references) by *obj*."""
    stack = [obj]
    while stack:
        current = stack.pop()
        if isinstance(current, IndirectObject):
            yield current
        else:
            stack.extend(_children(current))


def remap_refs(obj: PdfObject, table: Mapping[int, int]) -> PdfObject:
    """
    Rewrite the references inside *obj* through *table*, in place.

    Returns the replacement for *obj* itself (a new reference when *obj* is a
    reference). Dangling references become ``null``.
    """
    if isinstance(obj, IndirectObject):
        new_id = table.get(obj.idnum)
        return NullObject() if new_id is None else ref(new_id)

    visited: Set[int] = set()
    stack = [obj]
    while stack:
        current = stack.pop()
        if id(current) in visited:
            continue
        visited.add(id(current))
        if isinstance(current, DictionaryObject):
            for key, value in list(dict.items(current)):
                if isinstance(value, IndirectObject):
                    current[key] = remap_refs(value, table)
                elif isinstance(value, (DictionaryObject, ArrayObject)):
                    stack.append(value)
        elif isinstance(current, ArrayObject):
            for index, value in enumerate(list.__iter__(current)):
                if isinstance(value, IndirectObject):
                    current[index] = remap_refs(value, table)
                elif isinstance(value, (DictionaryObject, ArrayObject)):
                    stack.append(value)
    return obj


@dataclass
class ObjectGraph:
    """Arena of one document plus its catalog and page tree."""

    source: str
    objects: Dict[int, PdfObject]
    trailer: DictionaryObject
    version: str = "1.7"
    data: bytes = b""
    root_id: int = field(init=False)
    pages_id: int = field(init=False)
    page_ids: List[int] = field(init=False)
    inherited: Dict[int, Dict[str, PdfObject]] = field(init=False)

    def __post_init__(self) -> None:
        root = self.trailer.get("/Root")
        if not isinstance(root, IndirectObject) or root.idnum not in self.objects:
            raise ValueError("trailer has no document catalog")
        self.root_id = root.idnum
        catalog = self.objects[self.root_id]
        if not isinstance(catalog, DictionaryObject):
            raise ValueError("document catalog is not a dictionary")
        pages = catalog.get("/Pages")
        if not isinstance(pages, IndirectObject) or pages.idnum not in self.objects:
            raise ValueError("catalog has no page tree")
        self.pages_id = pages.idnum
        self.page_ids = []
        self.inherited = {}
        self._walk_page_tree(self.pages_id, {}, set())

    # ------------------------------------------------------------------ #
    # Loading
    # ------------------------------------------------------------------ #

    @classmethod
    def from_bytes(cls, data: bytes, source: str = "<memory>") -> ObjectGraph:
        """Parse *data*; raises on unreadable or encrypted documents."""
        reader = PdfReader(BytesIO(data), strict=False)
        if reader.is_encrypted:
            raise ValueError("encrypted documents are not supported")

        trailer = DictionaryObject()
        pending: List[IndirectObject] = []
        for key in _TRAILER_KEYS:
            value = reader.trailer.raw_get(key) if key in reader.trailer else None
            if isinstance(value, IndirectObject):
                trailer[NameObject(key)] = ref(value.idnum)
                pending.append(value)
        if "/ID" in reader.trailer:
            trailer[NameObject("/ID")] = reader.trailer["/ID"]

        objects: Dict[int, PdfObject] = {}
        while pending:
            reference = pending.pop()
            if reference.idnum in objects:
                continue
            obj = reader.get_object(reference)
            if obj is None:
                obj = NullObject()
            objects[reference.idnum] = obj
            pending.extend(iter_refs(obj))

        # Generations are normalised to 0 by an identity renumbering.
        identity = {obj_id: obj_id for obj_id in objects}
        for obj_id in objects:
            objects[obj_id] = remap_refs(objects[obj_id], identity)

        header = reader.pdf_header or ""
        version = header[5:] if header.startswith("%PDF-") else "1.7"
        return cls(source=source, objects=objects, trailer=trailer, version=version, data=data)

    # ------------------------------------------------------------------ #
    # Page tree
    # ------------------------------------------------------------------ #

    def _resolve(self, value: Optional[PdfObject]) -> Optional[PdfObject]:
        if isinstance(value, IndirectObject):
            return self.objects.get(value.idnum)
        return value

    def _walk_page_tree(
        self, node_id: int, inherited: Dict[str, PdfObject], seen: Set[int]
    ) -> None:
        if node_id in seen:
            return
        seen.add(node_id)
        node = self.objects.get(node_id)
        if not isinstance(node, DictionaryObject):
            return

        node_type = self._resolve(node.get("/Type"))
        kids = self._resolve(node.get("/Kids"))
        is_leaf = node_type == "/Page" or (node_type != "/Pages" and kids is None)
        if is_leaf:
            self.page_ids.append(node_id)
            missing = {k: v for k, v in inherited.items() if k not in node}
            if missing:
                self.inherited[node_id] = missing
            return

        scope = dict(inherited)
        for key in INHERITABLE_KEYS:
            if key in node:
                scope[key] = dict.__getitem__(node, key)
        if isinstance(kids, ArrayObject):
            for kid in list.__iter__(kids):
                if isinstance(kid, IndirectObject):
                    self._walk_page_tree(kid.idnum, scope, seen)

    @property
    def kids(self) -> List[int]:
        """Ids listed in the page-tree root's ``/Kids``."""
        node = self.objects[self.pages_id]
        kids = self._resolve(node.get("/Kids")) if isinstance(node, DictionaryObject) else None
        if not isinstance(kids, ArrayObject):
            return []
        return [k.idnum for k in list.__iter__(kids) if isinstance(k, IndirectObject)]

    @property
    def count(self) -> Optional[int]:
        """``/Count`` of the page-tree root as stored in the document."""
        node = self.objects[self.pages_id]
        value = self._resolve(node.get("/Count")) if isinstance(node, DictionaryObject) else None
        return int(value) if value is not None else None

    @property
    def page_count(self) -> int:
        return len(self.page_ids)

    @property
    def max_id(self) -> int:
        return max(self.objects)

    # ------------------------------------------------------------------ #
    # Renumbering
    # ------------------------------------------------------------------ #

    def remap_table(self, start: int) -> Dict[int, int]:
        """Sequential ids from *start*, in ascending order of the current ids."""
        return {old: start + offset for offset, old in enumerate(sorted(self.objects))}

    def renumber(self, table: Mapping[int, int]) -> ObjectGraph:
        """Graph with every object moved to ``table[id]`` and references rewritten.

        The objects are rewritten in place: the original graph must not be
        used afterwards.
        """
        missing = set(self.objects) - set(table)
        if missing:
            raise KeyError(f"remap table misses ids {sorted(missing)[:5]}")
        objects = {table[old]: remap_refs(obj, table) for old, obj in self.objects.items()}
        trailer = DictionaryObject()
        for key, value in dict.items(self.trailer):
            trailer[key] = remap_refs(value, table)
        return ObjectGraph(
            source=self.source,
            objects=objects,
            trailer=trailer,
            version=self.version,
            data=self.data,
        )

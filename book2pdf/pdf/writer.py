# book2pdf/pdf/writer.py
"""
Serialisation of an object arena into a PDF file with a classic xref table.
"""
from __future__ import annotations

from io import BytesIO
from typing import Dict, List, Mapping

from pypdf.generic import DictionaryObject, NameObject, NumberObject, PdfObject

__all__ = ("serialize",)

_BINARY_MARKER = b"%\xe2\xe3\xcf\xd3\n"


def _xref_entries(offsets: Mapping[int, int], size: int) -> List[bytes]:
    # Free objects form a linked list headed by object 0.
    free = [obj_id for obj_id in range(1, size) if obj_id not in offsets]
    next_free: Dict[int, int] = {}
    chain = [0] + free
    for current, following in zip(chain, chain[1:] + [0]):
        next_free[current] = following

    entries = []
    for obj_id in range(size):
        if obj_id in offsets:
            entries.append(b"%010d 00000 n \n" % offsets[obj_id])
        else:
            generation = 65535 if obj_id == 0 else 0
            entries.append(b"%010d %05d f \n" % (next_free[obj_id], generation))
    return entries


def serialize(
    objects: Mapping[int, PdfObject],
    trailer: DictionaryObject,
    version: str = "1.7",
) -> bytes:
    """Write *objects* (keyed by id, generation 0) and *trailer* as PDF bytes."""
    if not objects:
        raise ValueError("cannot serialise an empty object set")

    out = BytesIO()
    out.write(f"%PDF-{version}\n".encode("ascii"))
    out.write(_BINARY_MARKER)

    offsets: Dict[int, int] = {}
    for obj_id in sorted(objects):
        offsets[obj_id] = out.tell()
        out.write(b"%d 0 obj\n" % obj_id)
        objects[obj_id].write_to_stream(out)
        out.write(b"\nendobj\n")

    size = max(objects) + 1
    xref_offset = out.tell()
    out.write(b"xref\n0 %d\n" % size)
    out.writelines(_xref_entries(offsets, size))

    final_trailer = DictionaryObject()
    for key, value in dict.items(trailer):
        final_trailer[key] = value
    final_trailer[NameObject("/Size")] = NumberObject(size)
    out.write(b"trailer\n")
    final_trailer.write_to_stream(out)
    out.write(b"\nstartxref\n%d\n%%%%EOF\n" % xref_offset)
    return out.getvalue()

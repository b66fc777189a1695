"""book2pdf.pdf: object-graph level PDF merging."""

from book2pdf.pdf.graph import ObjectGraph
from book2pdf.pdf.merger import MergedGraph, MergeResult, merge_bytes, merge_directory, merge_files

__all__ = ["ObjectGraph", "MergedGraph", "MergeResult", "merge_bytes", "merge_files", "merge_directory"]

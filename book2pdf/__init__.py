# book2pdf/__init__.py
"""
book2pdf package initializer.
Defines package version; the CLI group lives in :mod:`book2pdf.cli`.
"""
__version__ = "0.1.0"

__all__ = ["__version__"]

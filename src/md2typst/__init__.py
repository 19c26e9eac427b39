"""md2typst - Markdown to Typst transpiler with PDF export."""

from __future__ import annotations

__version__ = "0.1.0"

from md2typst.converter import Converter
from md2typst.transpiler import transpile

__all__ = ["Converter", "transpile", "__version__"]

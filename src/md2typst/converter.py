"""High-level Markdown-to-Typst conversion orchestrator.

Ties together the transpiler, style manager and PDF exporter into a
single public API for converting Markdown text or files to Typst source
or PDF output.
"""

from __future__ import annotations

import logging
from pathlib import Path

from md2typst.exceptions import ExportError
from md2typst.pdf_export import compile_pdf, local_root, read_source
from md2typst.style_manager import DEFAULT_FONT_SIZE, StyleManager
from md2typst.transpiler import transpile

logger = logging.getLogger(__name__)

__all__ = ["Converter"]


class Converter:
    """Convert Markdown content to Typst markup or PDF.

    Usage::

        converter = Converter(style_preset="default", font_size=12)
        converter.convert_file("notes/input.md", "output.pdf")

        # or from string
        body = converter.convert_text("# Hello", base_dir="notes")
    """

    STYLE_PRESETS = StyleManager.PRESETS

    def __init__(self, style_preset: str = "default", font_size: float = DEFAULT_FONT_SIZE) -> None:
        self.style_manager = StyleManager(style_preset)
        self.font_size = StyleManager.validate_font_size(font_size)

    def convert_text(self, markdown_text: str, base_dir: str | Path = ".") -> str:
        """Convert Markdown text to a Typst body (no preamble).

        Args:
            markdown_text: Markdown source string.
            base_dir: Directory local image paths are resolved against.

        Returns:
            Typst markup.
        """
        return transpile(markdown_text, base_dir)

    def convert_document(self, markdown_text: str, base_dir: str | Path = ".") -> str:
        """Convert Markdown text to complete, compilable Typst source."""
        preamble = self.style_manager.build_preamble(self.font_size)
        return preamble + self.convert_text(markdown_text, base_dir)

    def convert_file(
        self,
        input_path: str | Path,
        output_path: str | Path,
        *,
        encoding: str = "utf-8",
    ) -> None:
        """Read a Markdown file and write Typst source or, for ``.pdf``, a PDF.

        Args:
            input_path: Path to the input ``.md`` file.
            output_path: Path for the output ``.typ`` or ``.pdf`` file.
            encoding: Text encoding of the source file.

        Raises:
            ExportError: If the source cannot be read, compiled or written.
        """
        input_path = Path(input_path)
        output_path = Path(output_path)

        md_text = read_source(input_path, encoding=encoding)
        source = self.convert_document(md_text, input_path.absolute().parent)

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            if output_path.suffix.lower() == ".pdf":
                output_path.write_bytes(compile_pdf(source, root=local_root(input_path)))
            else:
                output_path.write_text(source, encoding="utf-8")
        except OSError as exc:
            raise ExportError(f"Failed to write output: {exc}", original_error=exc) from exc
        logger.info("Converted %s -> %s", input_path, output_path)

"""PDF export through the Typst compiler.

Prepends the preset preamble to the transpiled body and hands the result
to the ``typst`` Python binding.  Every failure of an export attempt is
reported as a single :class:`~md2typst.exceptions.ExportError` message;
nothing is retried.
"""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path

import typst

from md2typst.exceptions import ExportError
from md2typst.style_manager import DEFAULT_FONT_SIZE, StyleManager
from md2typst.transpiler import transpile

logger = logging.getLogger(__name__)


def build_document(
    markdown_text: str,
    source_path: str | Path,
    *,
    style: str = "default",
    font_size: float = DEFAULT_FONT_SIZE,
) -> str:
    """Return the complete Typst source (preamble + body) for a document.

    Local images are resolved against the directory of *source_path*.
    """
    base_dir = Path(source_path).absolute().parent
    preamble = StyleManager(style).build_preamble(font_size)
    return preamble + transpile(markdown_text, base_dir)


def compile_pdf(typst_source: str, root: str | Path | None = None) -> bytes:
    """Compile *typst_source* to PDF bytes.

    *root* bounds every file the document can read.  Without one the
    document can only read inside its own temporary directory.
    """
    with tempfile.TemporaryDirectory(prefix="md2typst-") as tmp:
        main_file = Path(tmp) / "main.typ"
        main_file.write_text(typst_source, encoding="utf-8")
        compile_root = str(root) if root is not None else tmp
        try:
            pdf_bytes = typst.compile(str(main_file), root=compile_root, format="pdf")
        except typst.TypstError as exc:
            raise ExportError(f"Typst compilation error: {exc}", original_error=exc) from exc
    if not isinstance(pdf_bytes, bytes):
        raise ExportError("PDF generation error: compiler returned no document")
    return pdf_bytes


def local_root(base_dir: str | Path) -> str:
    """Return the compile root for a document read from the local disk.

    The renderer writes absolute image paths, so local documents compile
    against the root of the filesystem holding *base_dir*.
    """
    return Path(base_dir).absolute().anchor


def export_pdf(
    markdown_text: str,
    source_path: str | Path,
    output_path: str | Path,
    *,
    style: str = "default",
    font_size: float = DEFAULT_FONT_SIZE,
) -> None:
    """Render *markdown_text* to a PDF written at *output_path*."""
    source = build_document(markdown_text, source_path, style=style, font_size=font_size)
    pdf_bytes = compile_pdf(source, root=local_root(source_path))
    output_path = Path(output_path)
    try:
        output_path.write_bytes(pdf_bytes)
    except OSError as exc:
        raise ExportError(f"Failed to write PDF: {exc}", original_error=exc) from exc
    logger.info("Wrote %d bytes to %s", len(pdf_bytes), output_path)


def read_source(source_path: str | Path, *, encoding: str = "utf-8") -> str:
    """Read a Markdown file, mapping failures to :class:`ExportError`."""
    source_path = Path(source_path)
    if not source_path.is_file():
        raise ExportError(f"File not found: {source_path}")
    try:
        return source_path.read_text(encoding=encoding)
    except (OSError, UnicodeDecodeError) as exc:
        raise ExportError(f"Failed to read file: {exc}", original_error=exc) from exc


def export_pdf_file(
    source_path: str | Path,
    output_path: str | Path,
    *,
    style: str = "default",
    font_size: float = DEFAULT_FONT_SIZE,
    encoding: str = "utf-8",
) -> None:
    """Read the Markdown file at *source_path* and export it as PDF."""
    markdown_text = read_source(source_path, encoding=encoding)
    export_pdf(markdown_text, source_path, output_path, style=style, font_size=font_size)

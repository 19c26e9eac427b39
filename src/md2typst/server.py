"""FastAPI web service for Markdown to Typst conversion.

Endpoints::

    POST /convert       Upload a .md file and receive .typ source back.
    POST /convert/text  Send raw Markdown text, receive the Typst body.
    POST /export/pdf    Upload a .md file and receive a compiled PDF.
    GET  /health        Health check.
    GET  /styles        List available style presets.

Run::

    uvicorn md2typst.server:app --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

import logging
from urllib.parse import quote

from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from fastapi.responses import PlainTextResponse, Response

from md2typst import __version__
from md2typst.converter import Converter
from md2typst.exceptions import ExportError
from md2typst.pdf_export import compile_pdf
from md2typst.style_manager import DEFAULT_FONT_SIZE, StyleManager

logger = logging.getLogger(__name__)

app = FastAPI(
    title="md2typst",
    description="Markdown to Typst conversion service",
    version=__version__,
)

TYPST_MEDIA_TYPE = "text/vnd.typst"
PDF_MEDIA_TYPE = "application/pdf"


def _content_disposition(filename: str) -> str:
    """Build Content-Disposition header, RFC 5987 for non-ASCII names."""
    try:
        filename.encode("ascii")
        return f'attachment; filename="{filename}"'
    except UnicodeEncodeError:
        encoded = quote(filename)
        return f"attachment; filename*=UTF-8''{encoded}"


def _output_name(upload_name: str | None, suffix: str) -> str:
    return (upload_name or "document.md").rsplit(".", 1)[0] + suffix


def _make_converter(style: str, font_size: float) -> Converter:
    try:
        return Converter(style_preset=style, font_size=font_size)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


async def _read_upload(file: UploadFile, encoding: str) -> str:
    raw = await file.read()
    try:
        return raw.decode(encoding)
    except (UnicodeDecodeError, LookupError) as exc:
        raise HTTPException(status_code=422, detail=f"Failed to read file: {exc}") from exc


@app.get("/health")
async def health() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


@app.get("/styles")
async def list_styles() -> dict[str, list[str]]:
    """List available style presets."""
    return {"presets": StyleManager.PRESETS}


@app.post("/convert")
async def convert_file(
    file: UploadFile = File(...),
    style: str = Form("default"),
    font_size: float = Form(DEFAULT_FONT_SIZE),
    encoding: str = Form("utf-8"),
    base_dir: str = Form("."),
) -> Response:
    """Upload a Markdown file and receive complete Typst source back.

    - **file**: Markdown file (.md)
    - **style**: Style preset name (default, academic, compact, minimal)
    - **font_size**: Body font size in points
    - **encoding**: Source file encoding
    - **base_dir**: Directory local image paths are resolved against
    """
    converter = _make_converter(style, font_size)
    md_text = await _read_upload(file, encoding)
    source = converter.convert_document(md_text, base_dir)

    return Response(
        content=source.encode("utf-8"),
        media_type=TYPST_MEDIA_TYPE,
        headers={"Content-Disposition": _content_disposition(_output_name(file.filename, ".typ"))},
    )


@app.post("/convert/text", response_class=PlainTextResponse)
async def convert_text(
    markdown: str = Form(...),
    base_dir: str = Form("."),
) -> PlainTextResponse:
    """Send raw Markdown text and receive the Typst body (no preamble).

    - **markdown**: Markdown source text
    - **base_dir**: Directory local image paths are resolved against
    """
    return PlainTextResponse(Converter().convert_text(markdown, base_dir))


@app.post("/export/pdf")
async def export_pdf(
    file: UploadFile = File(...),
    style: str = Form("default"),
    font_size: float = Form(DEFAULT_FONT_SIZE),
    encoding: str = Form("utf-8"),
) -> Response:
    """Upload a Markdown file and receive the compiled PDF.

    The upload is compiled in an isolated root: it cannot read files from
    the server, so only remote images (rendered as placeholders) are
    supported.
    """
    converter = _make_converter(style, font_size)
    md_text = await _read_upload(file, encoding)
    try:
        pdf_bytes = compile_pdf(converter.convert_document(md_text))
    except ExportError as exc:
        logger.warning("PDF export failed: %s", exc.message)
        raise HTTPException(status_code=422, detail=exc.message) from exc

    return Response(
        content=pdf_bytes,
        media_type=PDF_MEDIA_TYPE,
        headers={"Content-Disposition": _content_disposition(_output_name(file.filename, ".pdf"))},
    )

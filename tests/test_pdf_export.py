"""Tests for PDF export through the Typst compiler."""

from __future__ import annotations

from pathlib import Path

import pytest
import typst

from md2typst.exceptions import ExportError, Md2TypstError
from md2typst.pdf_export import (
    build_document,
    compile_pdf,
    export_pdf,
    export_pdf_file,
    local_root,
    read_source,
)


class TestBuildDocument:
    def test_base_dir_is_source_parent(self, tmp_path):
        source = build_document("![a](a.png)", tmp_path / "note.md")
        assert f'#image("{(tmp_path / "a.png").as_posix()}")' in source

    def test_preamble_font_size(self, tmp_path):
        source = build_document("text", tmp_path / "n.md", font_size=9)
        assert "size: 9pt" in source

    def test_style_choice(self, tmp_path):
        source = build_document("text", tmp_path / "n.md", style="academic")
        assert '#set heading(numbering: "1.1")' in source

    def test_invalid_style(self, tmp_path):
        with pytest.raises(ValueError):
            build_document("text", tmp_path / "n.md", style="fancy")


class TestCompile:
    def test_compile_returns_pdf(self):
        assert compile_pdf("= Hello\n\nWorld\n").startswith(b"%PDF")

    def test_compile_error_is_export_error(self):
        with pytest.raises(ExportError, match="Typst compilation error") as info:
            compile_pdf("#this-function-does-not-exist()\n")
        assert isinstance(info.value, Md2TypstError)
        assert isinstance(info.value.original_error, typst.TypstError)

    def test_default_root_hides_host_files(self, tmp_path):
        secret = tmp_path / "secret.txt"
        secret.write_text("hidden-value", encoding="utf-8")
        with pytest.raises(ExportError) as info:
            compile_pdf(f'#panic(read("{secret.as_posix()}"))\n')
        assert "hidden-value" not in info.value.message
        assert "panicked" not in info.value.message

    def test_explicit_root_allows_reads(self, tmp_path):
        data = tmp_path / "data.txt"
        data.write_text("visible", encoding="utf-8")
        source = f'#read("{data.as_posix()}")\n'
        assert compile_pdf(source, root=local_root(tmp_path)).startswith(b"%PDF")

    def test_local_root_is_filesystem_anchor(self, tmp_path):
        assert local_root(tmp_path) == tmp_path.absolute().anchor

    def test_missing_local_image_fails_cleanly(self, tmp_path):
        with pytest.raises(ExportError):
            export_pdf("![x](missing.png)", tmp_path / "n.md", tmp_path / "n.pdf")


class TestExport:
    def test_export_pdf(self, tmp_path):
        out = tmp_path / "note.pdf"
        md = "# Title\n\n- [x] done\n- [ ] todo\n\n> quote\n\n---\n\nSee[^1].\n\n[^1]: Note.\n"
        export_pdf(md, tmp_path / "note.md", out, font_size=11)
        assert out.read_bytes().startswith(b"%PDF")

    def test_export_pdf_file(self, tmp_path):
        md_file = tmp_path / "doc.md"
        md_file.write_text("Hello *world*\n", encoding="utf-8")
        out = tmp_path / "doc.pdf"
        export_pdf_file(md_file, out)
        assert out.exists()

    def test_unwritable_output(self, tmp_path):
        out = tmp_path / "no-such-dir" / "doc.pdf"
        with pytest.raises(ExportError, match="Failed to write PDF"):
            export_pdf("text", tmp_path / "doc.md", out)


class TestReadSource:
    def test_missing_file(self, tmp_path):
        with pytest.raises(ExportError, match="File not found"):
            read_source(tmp_path / "nope.md")

    def test_directory_is_not_a_file(self, tmp_path):
        with pytest.raises(ExportError, match="File not found"):
            read_source(tmp_path)

    def test_reads_utf8(self, tmp_path: Path):
        md_file = tmp_path / "u.md"
        md_file.write_text("한글 ✓", encoding="utf-8")
        assert read_source(md_file) == "한글 ✓"

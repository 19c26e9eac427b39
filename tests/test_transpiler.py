"""End-to-end tests: Markdown text in, Typst markup out."""

from __future__ import annotations

import threading
from pathlib import Path

import pytest

from md2typst import transpile
from md2typst.footnotes import collect_footnotes
from md2typst.parser import ASTNode, NodeType
from md2typst.preprocess import preprocess_markdown

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def text(value: str) -> ASTNode:
    return ASTNode(type=NodeType.TEXT, text=value)


def para(*children: ASTNode) -> ASTNode:
    return ASTNode(type=NodeType.PARAGRAPH, children=list(children))


def footnote_def(name: str, body: str) -> ASTNode:
    return ASTNode(type=NodeType.FOOTNOTE_DEFINITION, name=name, children=[para(text(body))])


def footnote_ref(name: str) -> ASTNode:
    return ASTNode(type=NodeType.FOOTNOTE_REFERENCE, name=name)


# ---------------------------------------------------------------------------
# Preprocessor
# ---------------------------------------------------------------------------

class TestPreprocess:
    @pytest.mark.parametrize("source, expected", [
        ("- >= 5", "- \\>= 5"),
        ("* >= 5", "* \\>= 5"),
        ("+ >= 5", "+ \\>= 5"),
        ("1. >= 5", "1. \\>= 5"),
        ("12) >= 5", "12) \\>= 5"),
        ("  - >= nested", "  - \\>= nested"),
    ])
    def test_escapes_ge_after_list_marker(self, source: str, expected: str) -> None:
        assert preprocess_markdown(source) == expected

    @pytest.mark.parametrize("source", [
        "> quote",
        "- > quote",
        "text >= 5",
        "->= 5",
        "- a >= 5",
    ])
    def test_leaves_other_text_alone(self, source: str) -> None:
        assert preprocess_markdown(source) == source

    def test_only_matching_lines_change(self) -> None:
        source = "intro\n- >= 1\n- plain\n"
        assert preprocess_markdown(source) == "intro\n- \\>= 1\n- plain\n"

    def test_list_item_ge_is_not_a_blockquote(self) -> None:
        out = transpile("- >= 5\n- < 3\n")
        assert "#blockquote" not in out
        assert out.startswith("- \\>= 5\n")


# ---------------------------------------------------------------------------
# Footnote collection (pass 1)
# ---------------------------------------------------------------------------

class TestFootnoteCollector:
    def test_collects_trimmed_bodies(self) -> None:
        doc = ASTNode(type=NodeType.DOCUMENT, children=[footnote_def("n", "  body  ")])
        assert dict(collect_footnotes(doc)) == {"n": "body"}

    def test_bodies_are_escaped_once(self) -> None:
        doc = ASTNode(type=NodeType.DOCUMENT, children=[footnote_def("n", "a_b")])
        assert collect_footnotes(doc)["n"] == "a\\_b"

    def test_first_definition_wins(self) -> None:
        doc = ASTNode(type=NodeType.DOCUMENT, children=[
            footnote_def("dup", "first"),
            footnote_def("dup", "second"),
        ])
        assert collect_footnotes(doc)["dup"] == "first"

    def test_nested_definitions_are_found(self) -> None:
        wrapper = ASTNode(type=NodeType.GENERIC, children=[footnote_def("deep", "inside")])
        doc = ASTNode(type=NodeType.DOCUMENT, children=[wrapper])
        assert collect_footnotes(doc)["deep"] == "inside"

    def test_map_is_read_only(self) -> None:
        doc = ASTNode(type=NodeType.DOCUMENT, children=[footnote_def("n", "x")])
        notes = collect_footnotes(doc)
        with pytest.raises(TypeError):
            notes["n"] = "changed"  # type: ignore[index]

    def test_reference_before_definition_resolves(self) -> None:
        from md2typst.renderer import TypstRenderer

        doc = ASTNode(type=NodeType.DOCUMENT, children=[
            para(text("See"), footnote_ref("later"), text(".")),
            footnote_def("later", "Defined afterwards"),
        ])
        out = TypstRenderer(footnotes=collect_footnotes(doc)).render(doc)
        assert out == "See#footnote[Defined afterwards].\n\n"

    def test_definition_references_are_not_resolved(self) -> None:
        inner = ASTNode(
            type=NodeType.FOOTNOTE_DEFINITION,
            name="a",
            children=[para(text("cites"), footnote_ref("b"))],
        )
        doc = ASTNode(type=NodeType.DOCUMENT, children=[inner, footnote_def("b", "other")])
        assert collect_footnotes(doc)["a"] == "cites"


# ---------------------------------------------------------------------------
# Full pipeline
# ---------------------------------------------------------------------------

class TestTranspile:
    def test_title_and_footnote_example(self) -> None:
        out = transpile("# Title\n\nSee [^1].\n\n[^1]: Note text\n")
        assert out.startswith("= Title\n\n")
        assert "See #footnote[Note text]." in out
        assert out.count("Note text") == 1
        assert "[^1]" not in out

    def test_heading_levels(self) -> None:
        assert transpile("## Sub") == "== Sub\n\n"

    def test_paragraphs(self) -> None:
        assert transpile("one\n\ntwo") == "one\n\ntwo\n\n"

    def test_soft_and_hard_breaks(self) -> None:
        assert transpile("a\nb") == "a b\n\n"
        assert transpile("a  \nb") == "a\\\nb\n\n"

    def test_inline_formatting(self) -> None:
        out = transpile("**bold** and *it* and ~~gone~~")
        assert out == "*bold* and _it_ and #strike[gone]\n\n"

    def test_inline_code(self) -> None:
        assert transpile("Use `x` here") == "Use `x` here\n\n"

    def test_inline_code_with_backtick(self) -> None:
        assert transpile("``a`b``") == "``a`b``\n\n"

    def test_code_block(self) -> None:
        out = transpile("```python\nprint(1)\n```\n")
        assert out == "```python\nprint(1)\n```\n\n"

    def test_escaping_in_text(self) -> None:
        out = transpile("Email me @ home for $5 #1")
        assert out == "Email me \\@ home for \\$5 \\#1\n\n"

    def test_character_references(self) -> None:
        out = transpile("Fish &amp; Chips &copy; 2024 \\* star")
        assert out == "Fish & Chips © 2024 \\* star\n\n"

    def test_decoded_reference_is_escaped(self) -> None:
        assert transpile("&#35;tag &lt;x&gt;") == "\\#tag \\<x\\>\n\n"

    def test_code_keeps_references(self) -> None:
        assert transpile("`&amp;`") == "`&amp;`\n\n"

    def test_remote_image_alt_decoded(self) -> None:
        assert transpile("![a &amp; b](https://example.com/c.png)") == "[Image: a & b]\n\n"

    def test_link(self) -> None:
        out = transpile("[site](https://example.com)")
        assert out == '#link("https://example.com")[site]\n\n'

    def test_autolink_is_bare(self) -> None:
        out = transpile("<https://example.com>")
        assert out == '#link("https://example.com")\n\n'

    def test_blockquote(self) -> None:
        assert transpile("> quoted\n") == "#blockquote[quoted]\n\n"

    def test_thematic_break(self) -> None:
        assert transpile("a\n\n---\n\nb") == "a\n\n#hrule()\n\nb\n\n"

    def test_inline_html_allowlist(self) -> None:
        assert transpile("H<sub>2</sub>O x<sup>2</sup>") == "H#sub[2]O x#super[2]\n\n"

    def test_unsupported_inline_html_dropped(self) -> None:
        assert transpile("a <span>b</span> c") == "a b c\n\n"

    def test_unmatched_footnote_reference_stays_text(self) -> None:
        # The parser only creates references for defined footnotes.
        out = transpile("See [^nope].")
        assert "#footnote" not in out
        assert "nope" in out


class TestTranspileLists:
    def test_tight_list(self) -> None:
        out = transpile("- one\n- two\n- three\n")
        assert out == "- one\n- two\n- three\n\n"
        assert "\n\n-" not in out

    def test_ordered_list(self) -> None:
        assert transpile("1. x\n2. y\n") == "+ x\n+ y\n\n"

    def test_nested_list(self) -> None:
        assert transpile("- a\n  - b\n") == "- a\n  - b\n\n"

    def test_loose_multi_paragraph_item(self) -> None:
        out = transpile("- first\n\n  second\n- next\n")
        assert out == "- first\n\n  second\n- next\n\n"

    def test_task_list(self) -> None:
        out = transpile("- [x] done\n- [ ] todo\n")
        assert out == "#task(true)[done]\n#task(false)[todo]\n\n"

    def test_list_followed_by_paragraph(self) -> None:
        out = transpile("- a\n- b\n\nafter\n")
        assert out == "- a\n- b\n\nafter\n\n"


class TestTranspileTables:
    def test_table(self) -> None:
        md = "| a | b |\n|:--|--:|\n| 1 | 2 |\n| 3 | 4 |\n"
        assert transpile(md) == (
            "#table(\n"
            "  columns: 2,\n"
            "  align: (left, right),\n"
            "  table.header(\n"
            "    [a],\n"
            "    [b],\n"
            "  ),\n"
            "  [1],\n"
            "  [2],\n"
            "  [3],\n"
            "  [4],\n"
            ")\n\n"
        )


class TestTranspileImages:
    def test_local_image(self) -> None:
        out = transpile("![a](img/a.png)", "/docs/notes")
        assert out == '#image("/docs/notes/img/a.png")\n\n'

    def test_local_image_with_path_object(self) -> None:
        out = transpile("![a](img/a.png)", Path("/docs/notes"))
        assert '#image("/docs/notes/img/a.png")' in out

    def test_remote_image_alt(self) -> None:
        assert transpile("![chart](https://example.com/c.png)") == "[Image: chart]\n\n"

    def test_remote_image_no_alt(self) -> None:
        assert transpile("![](https://example.com/c.png)") == "[Image]\n\n"


class TestProperties:
    def test_deterministic(self) -> None:
        md = (FIXTURES_DIR / "sample.md").read_text(encoding="utf-8")
        assert transpile(md, "/notes") == transpile(md, "/notes")

    def test_output_is_not_re_escaped(self) -> None:
        out = transpile("a_b [^n]\n\n[^n]: x#y\n")
        assert "a\\_b #footnote[x\\#y]" in out
        assert "\\\\" not in out

    def test_concurrent_calls_are_independent(self) -> None:
        sources = {i: f"# Doc {i}\n\n- item {i}\n" for i in range(8)}
        results: dict[int, str] = {}

        def run(i: int) -> None:
            results[i] = transpile(sources[i])

        threads = [threading.Thread(target=run, args=(i,)) for i in sources]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        for i in sources:
            assert results[i] == f"= Doc {i}\n\n- item {i}\n\n"

    def test_sample_fixture(self) -> None:
        md = (FIXTURES_DIR / "sample.md").read_text(encoding="utf-8")
        out = transpile(md, "/notes")
        assert out.startswith("= Project Notes\n\n")
        assert "#task(true)[Draft the outline]" in out
        assert "table.header(" in out
        assert '#image("/notes/img/diagram.png")' in out
        assert '#link("https://example.com")[website]' in out
        assert "#footnote[The documentation lives in `docs/`.]" in out
        assert "\\$5 for \\#1 \\@ store\\_name" in out

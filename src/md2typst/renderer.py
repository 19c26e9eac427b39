"""Typst renderer - converts the AST to Typst markup.

This module turns an AST tree (produced by :mod:`md2typst.parser`) into
Typst source text.  Rendering is a pure, recursive walk: every handler
returns the text for its node and nothing is written to shared state.
The small amount of state that depends on ancestors (whether the nearest
list is tight) travels down as a :class:`RenderContext` value.

Footnote bodies are looked up in a read-only mapping built beforehand by
:func:`md2typst.footnotes.collect_footnotes`, so references may appear
before their definitions.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, replace
from pathlib import Path, PurePosixPath, PureWindowsPath
from types import MappingProxyType
from typing import Optional, Union
from urllib.parse import unquote

from md2typst.escaping import escape_typst, quote_string
from md2typst.parser import ASTNode, NodeType
from md2typst.table_handler import TableHandler

logger = logging.getLogger(__name__)

_EMPTY_FOOTNOTES: Mapping[str, str] = MappingProxyType({})

_HARD_BREAK = "\\\n"

_HTML_ALLOWLIST = {
    "<br>": _HARD_BREAK,
    "<br/>": _HARD_BREAK,
    "<br />": _HARD_BREAK,
    "<sup>": "#super[",
    "</sup>": "]",
    "<sub>": "#sub[",
    "</sub>": "]",
}

_REMOTE_PREFIXES = ("http://", "https://")


@dataclass(frozen=True)
class RenderContext:
    """State inherited from ancestors while rendering a node."""

    # True when the enclosing list item belongs to a tight list.
    tight: bool = False


DEFAULT_CONTEXT = RenderContext()


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------

def indent_continuation(text: str, prefix: str = "  ") -> str:
    """Indent all lines after the first by *prefix*.

    Typst then treats the continuation lines as part of the same list item.
    Empty lines are left as they are.
    """
    lines = text.splitlines()
    if not lines:
        return ""
    out = [lines[0]]
    for line in lines[1:]:
        out.append(prefix + line if line else line)
    return "\n".join(out)


def inline_code(literal: str) -> str:
    """Wrap *literal* in a raw span, doubling the fence if it holds a backtick."""
    ticks = "``" if "`" in literal else "`"
    return f"{ticks}{literal}{ticks}"


def resolve_image(url: str, alt: str, base_dir: Union[str, Path]) -> str:
    """Render an image reference.

    Remote images become a textual placeholder carrying *alt*.  Anything
    else is treated as a path relative to *base_dir* (the directory of the
    Markdown file) and emitted as an ``#image`` call on the joined path,
    written with forward slashes.
    """
    if url.startswith(_REMOTE_PREFIXES):
        return f"[Image: {alt}]" if alt else "[Image]"

    local = unquote(url).replace("\\", "/")
    if PureWindowsPath(local).is_absolute() or local.startswith("/"):
        resolved = local
    else:
        base = str(base_dir).replace("\\", "/")
        resolved = str(PurePosixPath(base) / local)
    return f"#image({quote_string(resolved)})"


# ---------------------------------------------------------------------------
# TypstRenderer
# ---------------------------------------------------------------------------

class TypstRenderer:
    """Render an :class:`~md2typst.parser.ASTNode` tree to Typst markup."""

    def __init__(
        self,
        base_dir: Union[str, Path] = ".",
        footnotes: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.base_dir = base_dir
        self.footnotes: Mapping[str, str] = (
            footnotes if footnotes is not None else _EMPTY_FOOTNOTES
        )
        self.tables = TableHandler()

    # ======================================================================
    # Public API
    # ======================================================================

    def render(self, node: ASTNode, context: RenderContext = DEFAULT_CONTEXT) -> str:
        """Return the Typst markup for *node* and its subtree."""
        handler = getattr(self, f"_render_{node.type.value}", None)
        if handler is None:
            return self.render_children(node)
        return handler(node, context)

    def render_children(self, node: ASTNode, context: RenderContext = DEFAULT_CONTEXT) -> str:
        return "".join(self.render(child, context) for child in node.children)

    # ======================================================================
    # Block nodes
    # ======================================================================

    def _render_heading(self, node: ASTNode, _ctx: RenderContext) -> str:
        return "=" * node.level + " " + self.render_children(node) + "\n\n"

    def _render_paragraph(self, node: ASTNode, ctx: RenderContext) -> str:
        return self.render_children(node) + ("\n" if ctx.tight else "\n\n")

    def _render_code_block(self, node: ASTNode, _ctx: RenderContext) -> str:
        parts = node.info.split()
        lang = parts[0] if parts else ""
        body = node.text if node.text.endswith("\n") else node.text + "\n"
        return f"```{lang}\n{body}```\n\n"

    def _render_blockquote(self, node: ASTNode, _ctx: RenderContext) -> str:
        body = self.render_children(node).strip()
        return f"#blockquote[{body}]\n\n"

    def _render_thematic_break(self, _node: ASTNode, _ctx: RenderContext) -> str:
        return "#hrule()\n\n"

    def _render_table(self, node: ASTNode, _ctx: RenderContext) -> str:
        return self.tables.render_table(
            node, lambda cell: self.render_children(cell).strip()
        )

    def _render_table_row(self, _node: ASTNode, _ctx: RenderContext) -> str:
        # Rows and cells are only meaningful inside a table.
        return ""

    def _render_table_cell(self, _node: ASTNode, _ctx: RenderContext) -> str:
        return ""

    def _render_html_block(self, node: ASTNode, _ctx: RenderContext) -> str:
        return self._render_html(node.text)

    # ======================================================================
    # Lists
    # ======================================================================

    def _render_list(self, node: ASTNode, ctx: RenderContext) -> str:
        item_ctx = replace(ctx, tight=node.tight)
        out = "".join(self._render_list_entry(item, node, item_ctx) for item in node.children)
        if not out.endswith("\n\n"):
            out += "\n"
        return out

    def _render_list_entry(self, item: ASTNode, owner: ASTNode, ctx: RenderContext) -> str:
        if item.type == NodeType.TASK_ITEM:
            return self._render_task_item(item, ctx)
        if item.type == NodeType.ITEM:
            marker = "+ " if owner.ordered else "- "
            return f"{marker}{self._item_body(item, ctx)}\n"
        return self.render(item, ctx)

    def _render_item(self, node: ASTNode, ctx: RenderContext) -> str:
        # An item outside a list has no ordering information.
        return f"- {self._item_body(node, ctx)}\n"

    def _render_task_item(self, node: ASTNode, ctx: RenderContext) -> str:
        checked = "true" if node.checked else "false"
        return f"#task({checked})[{self._item_body(node, ctx)}]\n"

    def _item_body(self, node: ASTNode, ctx: RenderContext) -> str:
        body = self.render_children(node, ctx).strip()
        return indent_continuation(body)

    # ======================================================================
    # Inline nodes
    # ======================================================================

    def _render_text(self, node: ASTNode, _ctx: RenderContext) -> str:
        return escape_typst(node.text)

    def _render_strong(self, node: ASTNode, _ctx: RenderContext) -> str:
        return f"*{self.render_children(node)}*"

    def _render_emph(self, node: ASTNode, _ctx: RenderContext) -> str:
        return f"_{self.render_children(node)}_"

    def _render_strikethrough(self, node: ASTNode, _ctx: RenderContext) -> str:
        return f"#strike[{self.render_children(node)}]"

    def _render_code(self, node: ASTNode, _ctx: RenderContext) -> str:
        return inline_code(node.text)

    def _render_link(self, node: ASTNode, _ctx: RenderContext) -> str:
        text = self.render_children(node)
        target = quote_string(node.url)
        if not text or text == escape_typst(node.url):
            return f"#link({target})"
        return f"#link({target})[{text}]"

    def _render_image(self, node: ASTNode, _ctx: RenderContext) -> str:
        alt = self.render_children(node)
        return resolve_image(node.url, alt, self.base_dir)

    def _render_soft_break(self, _node: ASTNode, _ctx: RenderContext) -> str:
        return " "

    def _render_line_break(self, _node: ASTNode, _ctx: RenderContext) -> str:
        return _HARD_BREAK

    def _render_html_inline(self, node: ASTNode, _ctx: RenderContext) -> str:
        return self._render_html(node.text)

    def _render_html(self, literal: str) -> str:
        tag = literal.strip().lower()
        markup = _HTML_ALLOWLIST.get(tag)
        if markup is None:
            logger.debug("Dropping unsupported HTML: %r", literal[:80])
            return ""
        return markup

    # ======================================================================
    # Footnotes
    # ======================================================================

    def _render_footnote_reference(self, node: ASTNode, _ctx: RenderContext) -> str:
        body = self.footnotes.get(node.name)
        if body is None:
            logger.debug("No definition for footnote %r; reference dropped", node.name)
            return ""
        return f"#footnote[{body}]"

    def _render_footnote_definition(self, _node: ASTNode, _ctx: RenderContext) -> str:
        # Bodies are collected up front and emitted at their references.
        return ""

"""Markdown parser that produces an intermediate AST for Typst conversion.

Uses mistune v3 to parse Markdown and converts the token stream into
a normalised AST representation defined by :class:`ASTNode`.
"""

from __future__ import annotations

import html
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

import mistune


# ---------------------------------------------------------------------------
# AST node definitions
# ---------------------------------------------------------------------------

class NodeType(Enum):
    DOCUMENT = "document"
    HEADING = "heading"
    PARAGRAPH = "paragraph"
    TEXT = "text"
    EMPH = "emph"
    STRONG = "strong"
    STRIKETHROUGH = "strikethrough"
    CODE = "code"
    CODE_BLOCK = "code_block"
    LINK = "link"
    IMAGE = "image"
    LIST = "list"
    ITEM = "item"
    TASK_ITEM = "task_item"
    BLOCKQUOTE = "blockquote"
    TABLE = "table"
    TABLE_ROW = "table_row"
    TABLE_CELL = "table_cell"
    THEMATIC_BREAK = "thematic_break"
    SOFT_BREAK = "soft_break"
    LINE_BREAK = "line_break"
    FOOTNOTE_DEFINITION = "footnote_definition"
    FOOTNOTE_REFERENCE = "footnote_reference"
    HTML_BLOCK = "html_block"
    HTML_INLINE = "html_inline"
    # Parser token without a dedicated kind; rendered through its children.
    GENERIC = "generic"


@dataclass
class ASTNode:
    type: NodeType
    children: list[ASTNode] = field(default_factory=list)
    # Text / code / HTML literal
    text: str = ""
    # Heading
    level: int = 0
    # Code block info string
    info: str = ""
    # Link / Image
    url: str = ""
    # Image
    title: str = ""
    # List
    ordered: bool = False
    tight: bool = False
    # Task item
    checked: bool = False
    # Table
    column_count: int = 0
    alignments: list[str] = field(default_factory=list)
    # Table row / cell
    is_header: bool = False
    # Footnote definition / reference
    name: str = ""


def iter_nodes(root: ASTNode) -> Iterator[ASTNode]:
    """Yield *root* and all its descendants in document order."""
    yield root
    for child in root.children:
        yield from iter_nodes(child)


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------

class MarkdownParser:
    """Parse Markdown text into an :class:`ASTNode` tree."""

    def __init__(self) -> None:
        self._md = mistune.create_markdown(
            renderer=None,  # AST mode
            plugins=["strikethrough", "table", "url", "task_lists", "footnotes"],
        )

    # -- public API ---------------------------------------------------------

    def parse(self, markdown_text: str) -> ASTNode:
        """Return a *DOCUMENT* ``ASTNode`` for *markdown_text*."""
        tokens: list[dict[str, Any]] = self._md(markdown_text)  # type: ignore[assignment]
        children = self._convert_tokens(tokens)
        return ASTNode(type=NodeType.DOCUMENT, children=children)

    # -- token conversion ---------------------------------------------------

    def _convert_tokens(self, tokens: list[dict[str, Any]]) -> list[ASTNode]:
        nodes: list[ASTNode] = []
        for tok in tokens:
            ttype = tok.get("type", "")
            # Flatten footnotes container into individual definitions
            if ttype == "footnotes":
                for child in tok.get("children", []):
                    if child.get("type") == "footnote_item":
                        nodes.append(self._handle_footnote_item(child))
                continue
            node = self._convert_token(tok)
            if node is not None:
                nodes.append(node)
        return nodes

    def _convert_token(self, tok: dict[str, Any]) -> Optional[ASTNode]:
        ttype = tok.get("type", "")
        handler = getattr(self, f"_handle_{ttype}", None)
        if handler:
            return handler(tok)
        children = tok.get("children")
        if isinstance(children, list):
            return ASTNode(type=NodeType.GENERIC, children=self._convert_tokens(children))
        raw = tok.get("raw", tok.get("text", ""))
        if raw:
            return ASTNode(type=NodeType.TEXT, text=str(raw))
        return None

    def _convert_children(self, tok: dict[str, Any]) -> list[ASTNode]:
        children = tok.get("children")
        if children is None:
            return []
        if isinstance(children, str):
            return [ASTNode(type=NodeType.TEXT, text=children)]
        return self._convert_tokens(children)

    # -- block handlers -----------------------------------------------------

    def _handle_heading(self, tok: dict) -> ASTNode:
        return ASTNode(
            type=NodeType.HEADING,
            level=tok.get("attrs", {}).get("level", 1),
            children=self._convert_children(tok),
        )

    def _handle_paragraph(self, tok: dict) -> ASTNode:
        return ASTNode(type=NodeType.PARAGRAPH, children=self._convert_children(tok))

    def _handle_block_text(self, tok: dict) -> ASTNode:
        """Block text is the paragraph body of a tight list item."""
        return self._handle_paragraph(tok)

    def _handle_thematic_break(self, _tok: dict) -> ASTNode:
        return ASTNode(type=NodeType.THEMATIC_BREAK)

    def _handle_block_code(self, tok: dict) -> ASTNode:
        """Fenced / indented code block."""
        attrs = tok.get("attrs", {})
        return ASTNode(
            type=NodeType.CODE_BLOCK,
            text=tok.get("raw", ""),
            info=attrs.get("info", "") or "",
        )

    def _handle_block_quote(self, tok: dict) -> ASTNode:
        return ASTNode(type=NodeType.BLOCKQUOTE, children=self._convert_children(tok))

    def _handle_block_html(self, tok: dict) -> ASTNode:
        return ASTNode(type=NodeType.HTML_BLOCK, text=tok.get("raw", ""))

    def _handle_blank_line(self, _tok: dict) -> Optional[ASTNode]:
        return None

    # -- inline handlers ----------------------------------------------------

    def _handle_text(self, tok: dict) -> ASTNode:
        # mistune leaves entity and numeric character references encoded
        return ASTNode(type=NodeType.TEXT, text=html.unescape(tok.get("raw", "")))

    def _handle_emphasis(self, tok: dict) -> ASTNode:
        return ASTNode(type=NodeType.EMPH, children=self._convert_children(tok))

    def _handle_strong(self, tok: dict) -> ASTNode:
        return ASTNode(type=NodeType.STRONG, children=self._convert_children(tok))

    def _handle_strikethrough(self, tok: dict) -> ASTNode:
        return ASTNode(type=NodeType.STRIKETHROUGH, children=self._convert_children(tok))

    def _handle_codespan(self, tok: dict) -> ASTNode:
        return ASTNode(type=NodeType.CODE, text=tok.get("raw", ""))

    def _handle_inline_html(self, tok: dict) -> ASTNode:
        return ASTNode(type=NodeType.HTML_INLINE, text=tok.get("raw", ""))

    def _handle_linebreak(self, _tok: dict) -> ASTNode:
        return ASTNode(type=NodeType.LINE_BREAK)

    def _handle_softbreak(self, _tok: dict) -> ASTNode:
        return ASTNode(type=NodeType.SOFT_BREAK)

    # -- link / image -------------------------------------------------------

    def _handle_link(self, tok: dict) -> ASTNode:
        attrs = tok.get("attrs", {})
        return ASTNode(
            type=NodeType.LINK,
            url=attrs.get("url", ""),
            children=self._convert_children(tok),
        )

    def _handle_image(self, tok: dict) -> ASTNode:
        attrs = tok.get("attrs", {})
        return ASTNode(
            type=NodeType.IMAGE,
            url=attrs.get("url", ""),
            title=attrs.get("title", "") or "",
            children=self._convert_children(tok),
        )

    # -- lists --------------------------------------------------------------

    def _handle_list(self, tok: dict) -> ASTNode:
        attrs = tok.get("attrs", {})
        return ASTNode(
            type=NodeType.LIST,
            ordered=bool(attrs.get("ordered", False)),
            tight=bool(tok.get("tight", False)),
            children=self._convert_children(tok),
        )

    def _handle_list_item(self, tok: dict) -> ASTNode:
        return ASTNode(type=NodeType.ITEM, children=self._convert_children(tok))

    def _handle_task_list_item(self, tok: dict) -> ASTNode:
        attrs = tok.get("attrs", {})
        return ASTNode(
            type=NodeType.TASK_ITEM,
            checked=bool(attrs.get("checked", False)),
            children=self._convert_children(tok),
        )

    # -- table --------------------------------------------------------------

    def _handle_table(self, tok: dict) -> ASTNode:
        rows: list[ASTNode] = []
        row_tokens: list[list[dict]] = []
        for child in tok.get("children", []):
            ctype = child.get("type", "")
            if ctype == "table_head":
                # table_head holds its cells directly (one implicit row)
                row_tokens.insert(0, child.get("children", []))
                rows.append(self._make_table_row(child.get("children", []), is_header=True))
            elif ctype == "table_body":
                for row_tok in child.get("children", []):
                    row_tokens.append(row_tok.get("children", []))
                    rows.append(self._make_table_row(row_tok.get("children", []), is_header=False))
            elif ctype == "table_row":
                row_tokens.append(child.get("children", []))
                rows.append(self._make_table_row(child.get("children", []), is_header=False))

        column_count = max((len(row.children) for row in rows), default=0)
        # Column alignment comes from the delimiter row, carried on the first row's cells
        first = row_tokens[0] if row_tokens else []
        alignments = [cell.get("attrs", {}).get("align") or "none" for cell in first]
        alignments += ["none"] * (column_count - len(alignments))

        return ASTNode(
            type=NodeType.TABLE,
            column_count=column_count,
            alignments=alignments,
            children=rows,
        )

    def _make_table_row(self, cell_tokens: list[dict], *, is_header: bool) -> ASTNode:
        cells: list[ASTNode] = []
        for cell_tok in cell_tokens:
            cells.append(ASTNode(
                type=NodeType.TABLE_CELL,
                is_header=is_header,
                children=self._convert_children(cell_tok),
            ))
        return ASTNode(type=NodeType.TABLE_ROW, is_header=is_header, children=cells)

    # -- footnotes ----------------------------------------------------------

    def _handle_footnote_ref(self, tok: dict) -> ASTNode:
        return ASTNode(type=NodeType.FOOTNOTE_REFERENCE, name=str(tok.get("raw", "")))

    def _handle_footnote_item(self, tok: dict) -> ASTNode:
        attrs = tok.get("attrs", {})
        return ASTNode(
            type=NodeType.FOOTNOTE_DEFINITION,
            name=str(attrs.get("key", "")),
            children=self._convert_children(tok),
        )

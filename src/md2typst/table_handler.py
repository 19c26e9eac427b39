"""Typst table handler for converting Markdown tables to ``#table`` calls.

This module converts TABLE ASTNodes (from the parser) into Typst markup.
It supports:
- A single ``table.header(...)`` holding every header row
- Per-column alignment (left, center, right, auto)
- Body cells as bracketed content groups in row-major order
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from md2typst.parser import ASTNode

from md2typst.parser import NodeType

_ALIGN_MAP = {
    "left": "left",
    "center": "center",
    "right": "right",
}


class TableHandler:
    """Converts Markdown TABLE ASTNodes to Typst ``#table`` markup."""

    def __init__(self, indent: str = "  ") -> None:
        self.indent = indent

    def render_table(self, table_node: ASTNode, render_cell: Callable[[ASTNode], str]) -> str:
        """Convert a TABLE ASTNode to a ``#table(...)`` call.

        Args:
            table_node: TABLE ASTNode containing TABLE_ROW children
            render_cell: Callback returning the trimmed Typst content of a
                TABLE_CELL node

        Returns:
            The table call followed by a blank line, or an empty string for
            a table without rows.

        Raises:
            ValueError: If table_node is not a TABLE type
        """
        if table_node.type != NodeType.TABLE:
            raise ValueError(f"Expected TABLE node, got {table_node.type}")

        rows = [row for row in table_node.children if row.type == NodeType.TABLE_ROW]
        if not rows:
            return ""

        header_rows = [row for row in rows if row.is_header]
        body_rows = [row for row in rows if not row.is_header]

        ind = self.indent
        lines = [
            "#table(",
            f"{ind}columns: {table_node.column_count},",
            f"{ind}align: {self.format_alignments(table_node.alignments)},",
        ]

        if header_rows:
            lines.append(f"{ind}table.header(")
            for row in header_rows:
                for cell in row.children:
                    lines.append(f"{ind}{ind}[{render_cell(cell)}],")
            lines.append(f"{ind}),")

        for row in body_rows:
            for cell in row.children:
                lines.append(f"{ind}[{render_cell(cell)}],")

        lines.append(")")
        return "\n".join(lines) + "\n\n"

    @staticmethod
    def format_alignments(alignments: list[str]) -> str:
        """Return the Typst array literal for per-column *alignments*."""
        values = [_ALIGN_MAP.get(a, "auto") for a in alignments]
        if len(values) == 1:
            # A one-element Typst array needs its trailing comma.
            return f"({values[0]},)"
        return f"({', '.join(values)})"

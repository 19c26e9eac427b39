"""Text rewriting applied before the Markdown source reaches the parser."""

from __future__ import annotations

import re

# A list marker directly followed by ``>=`` would otherwise open a
# blockquote inside the item; ``>=`` there is almost always an operator.
_LIST_ITEM_GE_RE = re.compile(r"(?m)^([ \t]*(?:[-*+]|\d+[.)])[ \t]+)>=")


def preprocess_markdown(text: str) -> str:
    """Escape ``>=`` at the start of list items so ``>`` stays literal."""
    return _LIST_ITEM_GE_RE.sub(r"\1\\>=", text)

"""Markdown to Typst transpilation entry point.

Runs the whole pipeline for one document::

    preprocess -> parse -> collect footnotes (pass 1) -> render (pass 2)

Each call builds its own tree, footnote map and renderer, so calls are
independent and may run concurrently from different threads.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

from md2typst.footnotes import collect_footnotes
from md2typst.parser import MarkdownParser
from md2typst.preprocess import preprocess_markdown
from md2typst.renderer import TypstRenderer

logger = logging.getLogger(__name__)


def transpile(markdown_text: str, base_dir: Union[str, Path] = ".") -> str:
    """Convert *markdown_text* to Typst markup.

    Args:
        markdown_text: Markdown source.
        base_dir: Directory of the Markdown file; local image paths are
            resolved against it.  It is only joined onto paths, never read.

    Returns:
        The Typst body, meant to follow a preamble from
        :class:`~md2typst.style_manager.StyleManager`.
    """
    doc = MarkdownParser().parse(preprocess_markdown(markdown_text))
    footnotes = collect_footnotes(doc, base_dir)
    out = TypstRenderer(base_dir=base_dir, footnotes=footnotes).render(doc)
    logger.debug("Transpiled %d chars of Markdown into %d chars of Typst",
                 len(markdown_text), len(out))
    return out

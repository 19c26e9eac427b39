"""First rendering pass: collect footnote bodies by name."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Union

from md2typst.parser import ASTNode, NodeType, iter_nodes
from md2typst.renderer import TypstRenderer

logger = logging.getLogger(__name__)


def collect_footnotes(root: ASTNode, base_dir: Union[str, Path] = ".") -> Mapping[str, str]:
    """Return a read-only mapping of footnote name to rendered body.

    Every FOOTNOTE_DEFINITION in the tree is rendered with no footnotes
    of its own and the default context.  When a name is defined more
    than once the first definition in document order wins.
    """
    renderer = TypstRenderer(base_dir=base_dir)
    bodies: dict[str, str] = {}
    for node in iter_nodes(root):
        if node.type != NodeType.FOOTNOTE_DEFINITION:
            continue
        if node.name in bodies:
            logger.debug("Ignoring duplicate definition of footnote %r", node.name)
            continue
        bodies[node.name] = renderer.render_children(node).strip()
    logger.debug("Collected %d footnote definition(s)", len(bodies))
    return MappingProxyType(bodies)

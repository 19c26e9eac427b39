"""Escaping helpers for Typst markup and string literals."""

from __future__ import annotations

import re

# Characters with markup meaning in Typst text.
_SPECIAL_RE = re.compile(r"([#*_@$<>\\])")


def escape_typst(text: str) -> str:
    """Prefix every Typst special character in *text* with a backslash.

    Only raw text literals go through here; markup produced by the
    renderer is never passed back in.
    """
    return _SPECIAL_RE.sub(r"\\\1", text)


def quote_string(value: str) -> str:
    """Return *value* as a double-quoted Typst string literal."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'

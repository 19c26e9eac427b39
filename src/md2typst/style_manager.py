"""Typst preamble and style preset manager.

Manages style presets (default, academic, compact, minimal) that describe
page setup, body typography and heading show rules.  The preamble built
from a preset is prepended to the transpiled body before compilation; it
always defines the ``blockquote``, ``task`` and ``hrule`` helpers that
the renderer emits calls to.
"""

from __future__ import annotations

from copy import deepcopy
from dataclasses import dataclass, field
from typing import Optional

MIN_FONT_SIZE = 6.0
MAX_FONT_SIZE = 28.0
DEFAULT_FONT_SIZE = 16.0


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------

@dataclass
class PageSpec:
    """Page setup."""

    paper: str = "a4"
    margin: str = "2.5cm"
    numbering: Optional[str] = "1"
    number_align: str = "center"

    def derive(self, **overrides) -> PageSpec:
        """Return a copy with selected fields overridden."""
        clone = deepcopy(self)
        for k, v in overrides.items():
            if hasattr(clone, k):
                setattr(clone, k, v)
        return clone


@dataclass
class TextSpec:
    """Body text and paragraph settings."""

    fonts: tuple[str, ...] = (
        "Helvetica Neue",
        "Segoe UI",
        "Noto Sans",
        "Libertinus Serif",
        "Apple Color Emoji",
        "Noto Color Emoji",
        "Segoe UI Emoji",
    )
    lang: str = "en"
    leading: str = "0.65em"
    justify: bool = True

    def derive(self, **overrides) -> TextSpec:
        clone = deepcopy(self)
        for k, v in overrides.items():
            if hasattr(clone, k):
                setattr(clone, k, v)
        return clone


@dataclass
class HeadingSpec:
    """Show rule for one heading level."""

    level: int
    size: str
    space_before: str
    space_after: str
    # Space after a horizontal rule drawn under the heading; no rule if None.
    rule_after: Optional[str] = None


@dataclass
class StyleDef:
    """Complete preset definition."""

    name: str
    page: PageSpec
    text: TextSpec
    headings: list[HeadingSpec] = field(default_factory=list)
    heading_numbering: Optional[str] = None
    link_color: Optional[str] = "#0969da"
    underline_links: bool = True
    boxed_code: bool = True


# ---------------------------------------------------------------------------
# Preset definitions
# ---------------------------------------------------------------------------

def _default_headings() -> list[HeadingSpec]:
    return [
        HeadingSpec(1, "1.6em", "0.8em", "0.4em"),
        HeadingSpec(2, "1.3em", "0.7em", "0.1em", rule_after="0.3em"),
        HeadingSpec(3, "1.15em", "0.6em", "0.2em"),
        HeadingSpec(4, "1.05em", "0.5em", "0.2em"),
    ]


def _build_default_style() -> StyleDef:
    """Build the **default** preset."""
    return StyleDef(
        name="default",
        page=PageSpec(),
        text=TextSpec(),
        headings=_default_headings(),
    )


def _build_academic_style() -> StyleDef:
    """Serif body, numbered headings, wider margins."""
    base = _build_default_style()
    return StyleDef(
        name="academic",
        page=base.page.derive(margin="3cm"),
        text=base.text.derive(
            fonts=("Libertinus Serif", "Noto Serif", "Times New Roman", "Noto Color Emoji"),
            leading="0.75em",
        ),
        headings=[
            HeadingSpec(1, "1.4em", "1em", "0.5em"),
            HeadingSpec(2, "1.2em", "0.8em", "0.3em"),
            HeadingSpec(3, "1.1em", "0.6em", "0.2em"),
        ],
        heading_numbering="1.1",
        link_color=None,
        underline_links=False,
    )


def _build_compact_style() -> StyleDef:
    """The default look with tighter margins and leading."""
    base = _build_default_style()
    return StyleDef(
        name="compact",
        page=base.page.derive(margin="1.5cm"),
        text=base.text.derive(leading="0.55em"),
        headings=[
            HeadingSpec(1, "1.4em", "0.5em", "0.3em"),
            HeadingSpec(2, "1.2em", "0.4em", "0.1em", rule_after="0.2em"),
            HeadingSpec(3, "1.1em", "0.4em", "0.1em"),
        ],
    )


def _build_minimal_style() -> StyleDef:
    """No heading decoration, ragged right, plain code and links."""
    base = _build_default_style()
    return StyleDef(
        name="minimal",
        page=base.page.derive(numbering=None),
        text=base.text.derive(justify=False),
        headings=[],
        link_color=None,
        underline_links=False,
        boxed_code=False,
    )


_PRESET_BUILDERS = {
    "default": _build_default_style,
    "academic": _build_academic_style,
    "compact": _build_compact_style,
    "minimal": _build_minimal_style,
}


# Helpers the renderer emits calls to; every preset must define them.
HELPER_DEFINITIONS = """\
#let blockquote(body) = block(
  width: 100%,
  inset: (left: 12pt, y: 4pt, right: 4pt),
  stroke: (left: 3pt + luma(200)),
  body,
)

#let task(checked, body) = {
  let marker = if checked { sym.ballot.check } else { sym.ballot }
  [#marker #body]
}

#let hrule() = {
  v(0.5em)
  line(length: 100%, stroke: 0.5pt + luma(180))
  v(0.5em)
}
"""

_CODE_RULES = """\
#show raw.where(block: true): block.with(
  fill: luma(245),
  stroke: 0.5pt + luma(210),
  inset: 10pt,
  radius: 4pt,
  width: 100%,
)

#show raw.where(block: false): box.with(
  fill: luma(240),
  inset: (x: 3pt, y: 0pt),
  outset: (y: 3pt),
  radius: 2pt,
)
"""


def _format_size(font_size: float) -> str:
    return f"{font_size:g}pt"


def _heading_rule(spec: HeadingSpec) -> str:
    lines = [
        f"#show heading.where(level: {spec.level}): it => {{",
        f'  set text(size: {spec.size}, weight: "bold")',
        f"  v({spec.space_before})",
        "  it",
        f"  v({spec.space_after})",
    ]
    if spec.rule_after is not None:
        lines.append("  line(length: 100%, stroke: 0.5pt + luma(200))")
        lines.append(f"  v({spec.rule_after})")
    lines.append("}")
    return "\n".join(lines) + "\n"


# ---------------------------------------------------------------------------
# StyleManager
# ---------------------------------------------------------------------------

class StyleManager:
    """Select a preset and build the matching Typst preamble."""

    PRESETS = list(_PRESET_BUILDERS.keys())

    def __init__(self, preset: str = "default") -> None:
        if preset not in _PRESET_BUILDERS:
            raise ValueError(
                f"Unknown preset {preset!r}. Choose from: {', '.join(_PRESET_BUILDERS)}"
            )
        self.preset = preset
        self.style: StyleDef = _PRESET_BUILDERS[preset]()

    # -- public API ---------------------------------------------------------

    @staticmethod
    def validate_font_size(font_size: float) -> float:
        """Return *font_size* as a float, raising ``ValueError`` if out of range."""
        size = float(font_size)
        if not MIN_FONT_SIZE <= size <= MAX_FONT_SIZE:
            raise ValueError(
                f"Font size {font_size} out of range "
                f"({MIN_FONT_SIZE:g}-{MAX_FONT_SIZE:g} pt)"
            )
        return size

    def build_preamble(self, font_size: float = DEFAULT_FONT_SIZE) -> str:
        """Return the Typst preamble for this preset at *font_size* points."""
        size = self.validate_font_size(font_size)
        style = self.style
        page, text = style.page, style.text

        page_args = [f'paper: "{page.paper}"', f"margin: {page.margin}"]
        if page.numbering:
            page_args.append(f'numbering: "{page.numbering}"')
            page_args.append(f"number-align: {page.number_align}")
        fonts = ", ".join(f'"{name}"' for name in text.fonts)
        numbering = f'"{style.heading_numbering}"' if style.heading_numbering else "none"

        sections = [
            "\n".join([
                f"#set page({', '.join(page_args)})",
                f'#set text(font: ({fonts}), size: {_format_size(size)}, lang: "{text.lang}")',
                f"#set par(leading: {text.leading}, justify: {'true' if text.justify else 'false'})",
                f"#set heading(numbering: {numbering})",
                "#set list(indent: 1em)",
                "#set enum(indent: 1em)",
            ]) + "\n",
        ]
        sections.extend(_heading_rule(h) for h in style.headings)
        if style.boxed_code:
            sections.append(_CODE_RULES)

        link_rules = []
        if style.link_color:
            link_rules.append(f'#show link: set text(fill: rgb("{style.link_color}"))')
        if style.underline_links:
            link_rules.append("#show link: underline")
        if link_rules:
            sections.append("\n".join(link_rules) + "\n")

        sections.append(HELPER_DEFINITIONS)
        return "\n" + "\n".join(sections) + "\n"

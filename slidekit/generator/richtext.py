"""Rich-text rendering - lightweight markdown into a python-pptx text frame.

Layouts treat this as an opaque collaborator: hand it a text frame and a
markdown string and it fills the frame. It never raises on any string;
markup it does not understand is kept as literal text.

Supported: ATX headings, **bold**, *italic*, `inline code`, [links](url),
![images](url) (shown as their alt text), bullet and numbered lists,
task-list checkboxes, pipe tables and fenced code blocks (monospace lines).
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Protocol

from pptx.util import Pt

from slidekit.schema.design_system import DesignSystem

_HEADING_RE = re.compile(r"^(#{1,6})\s+(.*)$")
_CHECKBOX_RE = re.compile(r"^(\s*)[-*+]\s+\[([ xX])\]\s+(.*)$")
_BULLET_RE = re.compile(r"^(\s*)[-*+]\s+(.*)$")
_NUMBERED_RE = re.compile(r"^(\s*)(\d+)[.)]\s+(.*)$")
_TABLE_SEP_RE = re.compile(r"^\s*\|?\s*:?-{2,}:?\s*(\|\s*:?-{2,}:?\s*)*\|?\s*$")
_INLINE_RE = re.compile(
    r"(!\[[^\]]*\]\([^)]*\))"        # image
    r"|(\[[^\]]+\]\([^)]*\))"        # link
    r"|(\*\*[^*]+\*\*|__[^_]+__)"    # bold
    r"|(\*[^*]+\*|_[^_]+_)"          # italic
    r"|(`[^`]+`)"                    # code
)
_LINK_PARTS_RE = re.compile(r"!?\[([^\]]*)\]\(([^)]*)\)")

_HEADING_SCALE = {1: 1.6, 2: 1.4, 3: 1.2, 4: 1.1, 5: 1.0, 6: 1.0}


@dataclass
class TextSpan:
    text: str
    bold: bool = False
    italic: bool = False
    code: bool = False
    link: str | None = None


@dataclass
class TextLine:
    """One paragraph of rendered output."""
    kind: str                       # heading, bullet, numbered, checkbox, table, code, text
    spans: list[TextSpan] = field(default_factory=list)
    level: int = 0
    heading_level: int = 0

    @property
    def text(self) -> str:
        return "".join(s.text for s in self.spans)


class RichTextRenderer(Protocol):
    def render(self, text_frame, markdown: str, design: DesignSystem) -> None:
        ...


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def parse_inline(text: str) -> list[TextSpan]:
    """Split one line of markdown into styled spans."""
    spans: list[TextSpan] = []
    pos = 0
    for match in _INLINE_RE.finditer(text):
        if match.start() > pos:
            spans.append(TextSpan(text[pos:match.start()]))
        token = match.group(0)
        image, link, bold, italic, code = match.groups()
        if image:
            alt, _ = _LINK_PARTS_RE.match(token).groups()
            spans.append(TextSpan(f"[image: {alt}]" if alt else "[image]",
                                  italic=True))
        elif link:
            label, url = _LINK_PARTS_RE.match(token).groups()
            spans.append(TextSpan(label, link=url or None))
        elif bold:
            spans.append(TextSpan(token[2:-2], bold=True))
        elif italic:
            spans.append(TextSpan(token[1:-1], italic=True))
        elif code:
            spans.append(TextSpan(token[1:-1], code=True))
        pos = match.end()
    if pos < len(text):
        spans.append(TextSpan(text[pos:]))
    return spans


def _indent_level(indent: str) -> int:
    return min(len(indent.replace("\t", "    ")) // 2, 4)


def parse_markdown(markdown: str) -> list[TextLine]:
    """Parse markdown into a flat list of TextLines."""
    lines: list[TextLine] = []
    in_code = False
    for raw in (markdown or "").splitlines():
        stripped = raw.strip()
        if stripped.startswith("```"):
            in_code = not in_code
            continue
        if in_code:
            lines.append(TextLine("code", [TextSpan(raw, code=True)]))
            continue
        if not stripped:
            continue

        m = _HEADING_RE.match(stripped)
        if m:
            lines.append(TextLine("heading", parse_inline(m.group(2)),
                                  heading_level=len(m.group(1))))
            continue
        if stripped.startswith("|"):
            if _TABLE_SEP_RE.match(stripped):
                continue
            cells = [c.strip() for c in stripped.strip("|").split("|")]
            lines.append(TextLine("table", [TextSpan("  |  ".join(cells),
                                                     code=True)]))
            continue
        m = _CHECKBOX_RE.match(raw)
        if m:
            mark = "☑ " if m.group(2).lower() == "x" else "☐ "
            lines.append(TextLine("checkbox",
                                  [TextSpan(mark)] + parse_inline(m.group(3)),
                                  level=_indent_level(m.group(1))))
            continue
        m = _BULLET_RE.match(raw)
        if m:
            lines.append(TextLine("bullet",
                                  [TextSpan("• ")] + parse_inline(m.group(2)),
                                  level=_indent_level(m.group(1))))
            continue
        m = _NUMBERED_RE.match(raw)
        if m:
            lines.append(TextLine("numbered",
                                  [TextSpan(f"{m.group(2)}. ")]
                                  + parse_inline(m.group(3)),
                                  level=_indent_level(m.group(1))))
            continue
        lines.append(TextLine("text", parse_inline(stripped)))
    return lines


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

class MarkdownTextRenderer:
    """Default RichTextRenderer backed by ``parse_markdown``."""

    def __init__(self, font_size_pt: float | None = None) -> None:
        self.font_size_pt = font_size_pt

    def render(self, text_frame, markdown: str, design: DesignSystem) -> None:
        base = self.font_size_pt or design.body_size_pt
        text_frame.clear()
        text_frame.word_wrap = True

        parsed = parse_markdown(markdown) or [TextLine("text", [TextSpan("")])]
        for idx, line in enumerate(parsed):
            p = text_frame.paragraphs[0] if idx == 0 else text_frame.add_paragraph()
            p.level = line.level
            size = base
            if line.kind == "heading":
                size = base * _HEADING_SCALE[line.heading_level]
                p.space_before = Pt(4)
            for span in line.spans:
                run = p.add_run()
                run.text = span.text
                run.font.size = Pt(size)
                run.font.name = design.mono_font if span.code else design.primary_font
                run.font.bold = span.bold or line.kind == "heading"
                run.font.italic = span.italic
                if span.link:
                    run.hyperlink.address = span.link

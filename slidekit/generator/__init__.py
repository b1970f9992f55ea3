"""Presentation generator package - draws normalized slides with python-pptx.

Modules:
    charts: Chart dispatch (bar, line, area, pie, scatter)
    diagrams: Asynchronous diagram compile lifecycle
    richtext: Markdown into text frames
    images: Image reference placement
    layouts: One renderer per built-in layout
    pptx_builder: Deck -> .pptx (import from slidekit.generator.pptx_builder)
"""

from .charts import ChartArtifact, ChartSpec, render_chart
from .diagrams import (
    DIAGRAM_ERROR_MESSAGE,
    DiagramRenderer,
    DiagramSpec,
    DiagramState,
    MemoryDisplaySlot,
    MermaidCliCompiler,
    PptxDisplaySlot,
)
from .images import LocalFileImagePlacer, PlaceholderImagePlacer
from .layouts import RenderContext, RenderResult, render_header
from .richtext import MarkdownTextRenderer, parse_markdown

__all__ = [
    "ChartArtifact",
    "ChartSpec",
    "render_chart",
    "DIAGRAM_ERROR_MESSAGE",
    "DiagramRenderer",
    "DiagramSpec",
    "DiagramState",
    "MemoryDisplaySlot",
    "MermaidCliCompiler",
    "PptxDisplaySlot",
    "LocalFileImagePlacer",
    "PlaceholderImagePlacer",
    "RenderContext",
    "RenderResult",
    "render_header",
    "MarkdownTextRenderer",
    "parse_markdown",
]

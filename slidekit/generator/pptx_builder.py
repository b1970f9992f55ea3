"""PPTX builder engine - renders a deck of layout entries to PowerPoint.

Every entry is normalized against its layout's schema before any slide is
drawn, so an invalid entry aborts the build with a precise field-level
error and no half-built file. Rendering then runs slide by slide on blank
slides; diagram layouts await their compiler, everything else is
synchronous.

Usage::

    from slidekit.generator.pptx_builder import PPTXBuilder
    from slidekit.processor import load_deck

    builder = PPTXBuilder()
    pptx_bytes = builder.build(load_deck("deck.yaml"))
"""

from __future__ import annotations

import asyncio
import inspect
import io
import logging
from dataclasses import dataclass, field
from pathlib import Path

from pptx import Presentation
from pptx.util import Inches

from slidekit.errors import DeckValidationError, ValidationError
from slidekit.processor.ingestion import DeckEntry
from slidekit.processor.normalize import SlideInstance, normalize
from slidekit.registry import Layout, LayoutRegistry, default_registry
from slidekit.schema.design_system import DesignSystem

from .diagrams import DiagramCompiler
from .images import ImagePlacer, PlaceholderImagePlacer
from .layouts import RenderContext, RenderResult
from .richtext import MarkdownTextRenderer, RichTextRenderer

logger = logging.getLogger(__name__)

_BLANK_LAYOUT = 6


@dataclass
class BuildResult:
    """The rendered file plus what each slide produced."""
    pptx_bytes: bytes
    results: list[RenderResult] = field(default_factory=list)

    @property
    def slide_count(self) -> int:
        return len(self.results)


class PPTXBuilder:
    """Builds a PowerPoint presentation from deck entries.

    Parameters
    ----------
    registry : LayoutRegistry | None
        Where layouts are looked up (built-in layouts by default).
    design : DesignSystem | None
        Colors, fonts, canvas size and diagram compiler settings.
    rich_text, images, diagram_compiler
        Collaborators handed to every layout renderer.
    """

    def __init__(self, registry: LayoutRegistry | None = None,
                 design: DesignSystem | None = None,
                 rich_text: RichTextRenderer | None = None,
                 images: ImagePlacer | None = None,
                 diagram_compiler: DiagramCompiler | None = None) -> None:
        self.registry = registry or default_registry()
        self.design = design or DesignSystem()
        self.rich_text = rich_text or MarkdownTextRenderer()
        self.images = images or PlaceholderImagePlacer()
        self.diagram_compiler = diagram_compiler

    def prepare(self, deck: list[DeckEntry]) -> list[tuple[Layout, SlideInstance]]:
        """Look up and normalize every entry, failing on the first bad one.

        Raises:
            LayoutNotFoundError: If an entry names an unknown layout.
            DeckValidationError: If an entry's data fails its schema.
        """
        prepared = []
        for idx, entry in enumerate(deck):
            layout = self.registry.get_layout(entry.layout_id)
            try:
                instance = normalize(layout.schema, entry.data)
            except ValidationError as exc:
                raise DeckValidationError(idx, entry.layout_id, exc) from exc
            prepared.append((layout, instance))
        return prepared

    async def render_async(self, deck: list[DeckEntry]) -> BuildResult:
        """Normalize and render ``deck``; returns bytes plus per-slide results."""
        prepared = self.prepare(deck)

        prs = Presentation()
        prs.slide_width = Inches(self.design.width_inches)
        prs.slide_height = Inches(self.design.height_inches)

        results: list[RenderResult] = []
        for layout, instance in prepared:
            slide = prs.slides.add_slide(prs.slide_layouts[_BLANK_LAYOUT])
            ctx = RenderContext(
                slide=slide,
                design=self.design,
                rich_text=self.rich_text,
                images=self.images,
                diagram_compiler=self.diagram_compiler,
            )
            result = layout.renderer(ctx, instance)
            if inspect.isawaitable(result):
                result = await result
            # Keep the compiler the context lazily created for later slides.
            self.diagram_compiler = ctx.diagram_compiler
            logger.debug("Rendered slide %d (%s)", len(results), layout.layout_id)
            results.append(result)

        buf = io.BytesIO()
        prs.save(buf)
        return BuildResult(pptx_bytes=buf.getvalue(), results=results)

    async def build_async(self, deck: list[DeckEntry]) -> bytes:
        return (await self.render_async(deck)).pptx_bytes

    def render(self, deck: list[DeckEntry]) -> BuildResult:
        """Synchronous wrapper around ``render_async``."""
        return asyncio.run(self.render_async(deck))

    def build(self, deck: list[DeckEntry]) -> bytes:
        """Build the PPTX and return it as bytes."""
        return self.render(deck).pptx_bytes

    def build_to_file(self, deck: list[DeckEntry], path: str | Path) -> None:
        """Build the PPTX and write it to a file path."""
        Path(path).write_bytes(self.build(deck))


def build_presentation(deck: list[DeckEntry], **kwargs) -> bytes:
    """One-shot convenience: build a PPTX from deck entries."""
    return PPTXBuilder(**kwargs).build(deck)

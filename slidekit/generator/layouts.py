"""Layout renderers - one function per built-in layout.

Each renderer receives a RenderContext (target slide plus collaborators)
and a normalized SlideInstance, and draws the shared header followed by its
own body. Renderers are plain functions except ``render_mermaid_with_caption``,
which awaits the diagram compiler.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from pptx.dml.color import RGBColor
from pptx.enum.shapes import MSO_CONNECTOR, MSO_SHAPE
from pptx.enum.text import MSO_ANCHOR, PP_ALIGN
from pptx.util import Inches, Pt

from slidekit.processor.normalize import SlideInstance
from slidekit.schema.design_system import DesignSystem, normalize_hex
from slidekit.schema.models import Position

from .charts import ChartArtifact, ChartSpec, render_chart
from .diagrams import (
    DiagramCompiler,
    DiagramRenderer,
    DiagramSpec,
    DiagramState,
    MermaidCliCompiler,
    PptxDisplaySlot,
)
from .images import ImagePlacer, PlaceholderImagePlacer
from .richtext import MarkdownTextRenderer, RichTextRenderer

_MARGIN = 0.5
_HEADER_TOP = 0.2
_HEADER_HEIGHT = 0.6
_BODY_TOP = 1.05


@dataclass
class RenderContext:
    """A target slide plus the collaborators layouts draw with."""
    slide: object
    design: DesignSystem = field(default_factory=DesignSystem)
    rich_text: RichTextRenderer = field(default_factory=MarkdownTextRenderer)
    images: ImagePlacer = field(default_factory=PlaceholderImagePlacer)
    diagram_compiler: DiagramCompiler | None = None

    @property
    def width(self) -> float:
        return self.design.width_inches

    @property
    def height(self) -> float:
        return self.design.height_inches

    def compiler(self) -> DiagramCompiler:
        if self.diagram_compiler is None:
            self.diagram_compiler = MermaidCliCompiler(
                command=self.design.diagram_command,
                timeout=self.design.diagram_timeout_s,
            )
        return self.diagram_compiler


@dataclass
class RenderResult:
    """What a layout renderer produced besides plain text shapes."""
    layout_id: str
    chart: ChartArtifact | None = None
    diagram_state: DiagramState | None = None


# ---------------------------------------------------------------------------
# Drawing helpers
# ---------------------------------------------------------------------------

def _rgb(hex_color: str) -> RGBColor:
    return RGBColor.from_string(normalize_hex(hex_color).lstrip("#").upper())


def _textbox(ctx: RenderContext, pos: Position, text: str, size_pt: float,
             bold: bool = False, color: str | None = None,
             align=PP_ALIGN.LEFT, anchor=MSO_ANCHOR.TOP, name: str = ""):
    design = ctx.design
    txbox = ctx.slide.shapes.add_textbox(
        Inches(pos.left), Inches(pos.top), Inches(pos.width), Inches(pos.height))
    if name:
        txbox.name = name
    tf = txbox.text_frame
    tf.word_wrap = True
    tf.vertical_anchor = anchor
    p = tf.paragraphs[0]
    p.alignment = align
    run = p.add_run()
    run.text = text
    run.font.name = design.primary_font
    run.font.size = Pt(size_pt)
    run.font.bold = bold
    run.font.color.rgb = _rgb(color or design.dark_text)
    return txbox


def _markdown_box(ctx: RenderContext, pos: Position, markdown: str,
                  name: str = ""):
    txbox = ctx.slide.shapes.add_textbox(
        Inches(pos.left), Inches(pos.top), Inches(pos.width), Inches(pos.height))
    if name:
        txbox.name = name
    ctx.rich_text.render(txbox.text_frame, markdown, ctx.design)
    return txbox


def _card(ctx: RenderContext, pos: Position, heading: str, description: str,
          prefix: str = ""):
    """Bordered card with a bold heading and a description paragraph."""
    design = ctx.design
    shape = ctx.slide.shapes.add_shape(
        MSO_SHAPE.ROUNDED_RECTANGLE,
        Inches(pos.left), Inches(pos.top), Inches(pos.width), Inches(pos.height))
    shape.fill.solid()
    shape.fill.fore_color.rgb = _rgb("#ffffff")
    shape.line.color.rgb = _rgb(design.rule_gray)
    tf = shape.text_frame
    tf.word_wrap = True
    tf.vertical_anchor = MSO_ANCHOR.TOP

    p = tf.paragraphs[0]
    p.alignment = PP_ALIGN.LEFT
    run = p.add_run()
    run.text = f"{prefix}{heading}"
    run.font.name = design.primary_font
    run.font.size = Pt(design.header_size_pt)
    run.font.bold = True
    run.font.color.rgb = _rgb(design.dark_text)

    p = tf.add_paragraph()
    p.alignment = PP_ALIGN.LEFT
    run = p.add_run()
    run.text = description
    run.font.name = design.primary_font
    run.font.size = Pt(design.body_size_pt)
    run.font.color.rgb = _rgb(design.muted_text)
    return shape


def _format_slide_number(value) -> str:
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return f"{value}."


def render_header(ctx: RenderContext, instance: SlideInstance) -> None:
    """Slide number + section title, content rating badge, logo, rule."""
    design = ctx.design
    width = ctx.width

    _textbox(
        ctx,
        Position(_MARGIN, _HEADER_TOP, width - 4.5, _HEADER_HEIGHT),
        f"{_format_slide_number(instance['slideNumber'])} {instance['sectionTitle']}",
        design.header_size_pt, bold=True, anchor=MSO_ANCHOR.MIDDLE,
        name="header-title",
    )

    rating = instance["contentRating"]
    badge = ctx.slide.shapes.add_shape(
        MSO_SHAPE.RECTANGLE,
        Inches(width - 3.6), Inches(_HEADER_TOP + 0.12),
        Inches(1.7), Inches(_HEADER_HEIGHT - 0.24),
    )
    badge.name = "content-rating"
    badge.fill.background()
    badge.line.color.rgb = _rgb(design.rating_color(rating))
    tf = badge.text_frame
    tf.vertical_anchor = MSO_ANCHOR.MIDDLE
    p = tf.paragraphs[0]
    p.alignment = PP_ALIGN.CENTER
    run = p.add_run()
    run.text = rating.upper()
    run.font.name = design.primary_font
    run.font.size = Pt(design.caption_size_pt)
    run.font.bold = True
    run.font.color.rgb = _rgb(design.rating_color(rating))

    ctx.images.place(
        ctx.slide, instance["companyLogo"],
        Position(width - 1.7, _HEADER_TOP, 1.2, _HEADER_HEIGHT), design,
    )

    rule = ctx.slide.shapes.add_connector(
        MSO_CONNECTOR.STRAIGHT,
        Inches(0), Inches(_HEADER_TOP + _HEADER_HEIGHT + 0.1),
        Inches(width), Inches(_HEADER_TOP + _HEADER_HEIGHT + 0.1),
    )
    rule.line.color.rgb = _rgb(design.rule_gray)
    rule.line.width = Pt(1.5)


def _body_width(ctx: RenderContext) -> float:
    return ctx.width - 2 * _MARGIN


# ---------------------------------------------------------------------------
# Layout renderers
# ---------------------------------------------------------------------------

def render_chart_with_caption(ctx: RenderContext,
                              instance: SlideInstance) -> RenderResult:
    render_header(ctx, instance)
    width = _body_width(ctx)
    _markdown_box(ctx, Position(_MARGIN, _BODY_TOP, width, 1.5),
                  instance["chartCaption"], name="caption")
    chart_top = _BODY_TOP + 1.7
    artifact = render_chart(
        ctx.slide,
        ChartSpec.from_instance(instance),
        Position(_MARGIN, chart_top, width, ctx.height - chart_top - 0.3),
        ctx.design,
    )
    return RenderResult(layout_id=instance.layout_id, chart=artifact)


def render_column_items(ctx: RenderContext,
                        instance: SlideInstance) -> RenderResult:
    render_header(ctx, instance)
    design = ctx.design
    width = _body_width(ctx)
    _textbox(ctx, Position(_MARGIN, _BODY_TOP + 0.2, width, 0.9),
             instance["title"], design.title_size_pt, bold=True,
             align=PP_ALIGN.CENTER, name="title")

    items = instance["items"]
    gap = 0.4
    card_w = (width - gap * (len(items) - 1)) / len(items)
    top = _BODY_TOP + 1.5
    for idx, item in enumerate(items):
        _card(ctx, Position(_MARGIN + idx * (card_w + gap), top, card_w, 3.0),
              item["heading"], item["description"])
    return RenderResult(layout_id=instance.layout_id)


def render_emphasis_text(ctx: RenderContext,
                         instance: SlideInstance) -> RenderResult:
    render_header(ctx, instance)
    design = ctx.design
    _textbox(
        ctx,
        Position(_MARGIN + 1.0, _BODY_TOP + 0.5, _body_width(ctx) - 2.0,
                 ctx.height - _BODY_TOP - 1.5),
        instance["emphasiseText"], design.emphasis_size_pt, bold=True,
        align=PP_ALIGN.CENTER, anchor=MSO_ANCHOR.MIDDLE, name="emphasis",
    )
    return RenderResult(layout_id=instance.layout_id)


def render_hero_image_with_text(ctx: RenderContext,
                                instance: SlideInstance) -> RenderResult:
    render_header(ctx, instance)
    width = _body_width(ctx)
    half = (width - 0.5) / 2
    body_height = ctx.height - _BODY_TOP - 0.5
    ctx.images.place(ctx.slide, instance["heroImage"],
                     Position(_MARGIN, _BODY_TOP + 0.2, half, body_height),
                     ctx.design)
    _markdown_box(ctx,
                  Position(_MARGIN + half + 0.5, _BODY_TOP + 0.2, half, body_height),
                  instance["bodyText"], name="body")
    return RenderResult(layout_id=instance.layout_id)


def render_key_points_with_summary(ctx: RenderContext,
                                   instance: SlideInstance) -> RenderResult:
    render_header(ctx, instance)
    design = ctx.design
    width = _body_width(ctx)
    half = (width - 0.6) / 2
    _textbox(ctx, Position(_MARGIN, _BODY_TOP + 0.6, half, 1.0),
             instance["title"], design.title_size_pt, bold=True, name="title")
    _textbox(ctx, Position(_MARGIN, _BODY_TOP + 1.8, half, 2.0),
             instance["description"], design.body_size_pt,
             color=design.muted_text, name="description")

    items = instance["items"]
    gap = 0.25
    card_h = (ctx.height - _BODY_TOP - 0.8 - gap * (len(items) - 1)) / len(items)
    for idx, item in enumerate(items):
        top = _BODY_TOP + 0.3 + idx * (card_h + gap)
        _card(ctx, Position(_MARGIN + half + 0.6, top, half, card_h),
              item["heading"], item["description"], prefix=f"{idx + 1}. ")
    return RenderResult(layout_id=instance.layout_id)


def render_markdown_renderer(ctx: RenderContext,
                             instance: SlideInstance) -> RenderResult:
    render_header(ctx, instance)
    _markdown_box(
        ctx,
        Position(_MARGIN + 0.5, _BODY_TOP + 0.3, _body_width(ctx) - 1.0,
                 ctx.height - _BODY_TOP - 0.8),
        instance["markdownContent"], name="markdown",
    )
    return RenderResult(layout_id=instance.layout_id)


async def render_mermaid_with_caption(ctx: RenderContext,
                                      instance: SlideInstance) -> RenderResult:
    render_header(ctx, instance)
    width = _body_width(ctx)
    _markdown_box(ctx, Position(_MARGIN, _BODY_TOP, width, 1.5),
                  instance["caption"], name="caption")
    top = _BODY_TOP + 1.7
    slot = PptxDisplaySlot(
        ctx.slide, Position(_MARGIN, top, width, ctx.height - top - 0.3),
        ctx.design,
    )
    renderer = DiagramRenderer(ctx.compiler(), slot, ctx.design)
    state = await renderer.render(
        DiagramSpec(source=instance["mermaidCode"], theme=instance["theme"]))
    return RenderResult(layout_id=instance.layout_id, diagram_state=state)

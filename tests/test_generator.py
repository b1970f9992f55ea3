"""Tests for the layout registry, layout renderers and the PPTX builder."""

import asyncio
import io

import pytest
from pptx import Presentation

from slidekit.errors import DeckValidationError, LayoutNotFoundError, SchemaDefinitionError
from slidekit.generator.diagrams import DIAGRAM_ERROR_MESSAGE, DiagramState
from slidekit.generator.layouts import (
    RenderContext,
    render_column_items,
    render_header,
    render_mermaid_with_caption,
)
from slidekit.generator.pptx_builder import PPTXBuilder, build_presentation
from slidekit.processor.ingestion import DeckEntry
from slidekit.processor.normalize import normalize
from slidekit.registry import Layout, LayoutRegistry, default_registry, get_layout
from slidekit.schema.design_system import DesignSystem
from slidekit.schema.layouts import (
    build_column_items_schema,
    build_mermaid_with_caption_schema,
)

from conftest import FakeCompiler


ALL_LAYOUTS = [
    "chart-with-caption",
    "column-items",
    "emphasis-text",
    "hero-image-with-text",
    "key-points-with-summary",
    "markdown-renderer",
    "mermaid-with-caption",
]


def _names(slide):
    return [shape.name for shape in slide.shapes]


def _text(slide):
    return " ".join(s.text_frame.text for s in slide.shapes if s.has_text_frame)


def _open(pptx_bytes):
    return Presentation(io.BytesIO(pptx_bytes))


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

class TestRegistry:
    def test_builtin_layouts(self):
        assert default_registry().layout_ids() == ALL_LAYOUTS

    def test_get_layout(self):
        layout = get_layout("emphasis-text")
        assert layout.name == "Emphasis Text"
        assert layout.schema.layout_id == "emphasis-text"
        assert not layout.is_async

    def test_mermaid_is_async(self):
        assert get_layout("mermaid-with-caption").is_async

    def test_unknown_layout(self):
        with pytest.raises(LayoutNotFoundError) as exc_info:
            default_registry().get_layout("nope")
        assert exc_info.value.layout_id == "nope"
        assert "Unknown layout: 'nope'" in str(exc_info.value)
        assert "column-items" in str(exc_info.value)

    def test_unknown_layout_is_key_error(self):
        with pytest.raises(KeyError):
            get_layout("nope")

    def test_duplicate_registration(self):
        layout = get_layout("column-items")
        registry = LayoutRegistry([layout])
        with pytest.raises(SchemaDefinitionError):
            registry.register(layout)

    def test_schema_id_must_match(self):
        layout = Layout("other", "Other", build_column_items_schema(),
                        render_column_items)
        with pytest.raises(SchemaDefinitionError):
            LayoutRegistry([layout])

    def test_describe(self):
        described = default_registry().describe()
        assert [d["layout_id"] for d in described] == ALL_LAYOUTS
        chart = described[0]
        assert chart["description"].startswith("Chart With Caption Layout")
        assert chart["schema"]["fields"][0]["name"] == "slideNumber"

    def test_container_protocol(self):
        registry = default_registry()
        assert "markdown-renderer" in registry
        assert "nope" not in registry
        assert len(registry) == 7


# ---------------------------------------------------------------------------
# Layout renderers
# ---------------------------------------------------------------------------

class TestRenderers:
    def test_header(self, slide):
        instance = normalize(build_column_items_schema(),
                             {"slideNumber": 3, "sectionTitle": "Roadmap",
                              "contentRating": "internal"})
        render_header(RenderContext(slide=slide), instance)
        names = _names(slide)
        assert "header-title" in names
        assert "content-rating" in names
        text = _text(slide)
        assert "3. Roadmap" in text
        assert "INTERNAL" in text

    def test_column_items_draws_one_card_per_item(self, slide):
        items = [{"heading": f"Card {n}",
                  "description": f"Description of card number {n}"}
                 for n in range(2)]
        instance = normalize(build_column_items_schema(), {"items": items})
        render_column_items(RenderContext(slide=slide), instance)
        text = _text(slide)
        assert "Card 0" in text and "Card 1" in text
        assert "Main Title" in text

    def test_mermaid_renders_picture(self, slide):
        instance = normalize(build_mermaid_with_caption_schema(), {})
        ctx = RenderContext(slide=slide, diagram_compiler=FakeCompiler())
        result = asyncio.run(render_mermaid_with_caption(ctx, instance))
        assert result.diagram_state == DiagramState.RENDERED
        assert "diagram" in _names(slide)

    def test_mermaid_failure_shows_placeholder(self, slide):
        instance = normalize(build_mermaid_with_caption_schema(),
                             {"mermaidCode": "invalid diagram source"})
        ctx = RenderContext(slide=slide, diagram_compiler=FakeCompiler())
        result = asyncio.run(render_mermaid_with_caption(ctx, instance))
        assert result.diagram_state == DiagramState.FAILED
        assert DIAGRAM_ERROR_MESSAGE in _text(slide)
        assert "diagram" not in _names(slide)

    def test_context_creates_cli_compiler_from_design(self, slide):
        design = DesignSystem(diagram_command="/usr/local/bin/mmdc",
                              diagram_timeout_s=5.0)
        compiler = RenderContext(slide=slide, design=design).compiler()
        assert compiler.command == "/usr/local/bin/mmdc"
        assert compiler.timeout == 5.0


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------

@pytest.fixture
def builder():
    return PPTXBuilder(diagram_compiler=FakeCompiler())


class TestPPTXBuilder:
    def test_every_layout_with_defaults(self, builder):
        deck = [DeckEntry(layout_id) for layout_id in ALL_LAYOUTS]
        result = builder.render(deck)
        assert result.slide_count == 7
        prs = _open(result.pptx_bytes)
        assert len(prs.slides) == 7
        for slide in prs.slides:
            assert "header-title" in _names(slide)

    def test_slide_size_from_design(self):
        design = DesignSystem(width_inches=10.0, height_inches=5.625)
        pptx_bytes = PPTXBuilder(design=design,
                                 diagram_compiler=FakeCompiler()).build(
            [DeckEntry("emphasis-text")])
        prs = _open(pptx_bytes)
        assert prs.slide_width.inches == pytest.approx(10.0)
        assert prs.slide_height.inches == pytest.approx(5.625, abs=1e-3)

    def test_pie_chart_slide(self, builder):
        deck = [DeckEntry("chart-with-caption", {
            "chartType": "pie",
            "data": [{"name": "A", "value": 1}, {"name": "B", "value": 3}],
        })]
        result = builder.render(deck)
        chart = result.results[0].chart
        assert chart.supported
        assert chart.labels == ["A 25%", "B 75%"]
        slide = _open(result.pptx_bytes).slides[0]
        assert any(s.has_chart for s in slide.shapes)

    def test_bad_chart_data_degrades(self, builder):
        # A data key no point has never aborts the build.
        deck = [DeckEntry("chart-with-caption", {"dataKey": "revenue"})]
        result = builder.render(deck)
        assert not result.results[0].chart.supported

    def test_validation_error_located(self, builder):
        deck = [
            DeckEntry("emphasis-text"),
            DeckEntry("column-items", {"items": [
                {"heading": "Only", "description": "A single card here"}]}),
        ]
        with pytest.raises(DeckValidationError) as exc_info:
            builder.build(deck)
        err = exc_info.value
        assert err.slide_index == 1
        assert err.layout_id == "column-items"
        assert err.error.field == "items"
        assert str(err).startswith("slides[1] (column-items): items:")

    def test_unknown_layout(self, builder):
        with pytest.raises(LayoutNotFoundError):
            builder.build([DeckEntry("nope")])

    def test_nothing_rendered_on_invalid_deck(self, builder):
        compiler = builder.diagram_compiler
        deck = [DeckEntry("mermaid-with-caption"),
                DeckEntry("emphasis-text", {"emphasiseText": 5})]
        with pytest.raises(DeckValidationError):
            builder.build(deck)
        assert compiler.calls == []

    def test_diagram_failure_does_not_abort(self, builder):
        deck = [DeckEntry("mermaid-with-caption",
                          {"mermaidCode": "invalid diagram source"}),
                DeckEntry("emphasis-text")]
        result = builder.render(deck)
        assert result.results[0].diagram_state == DiagramState.FAILED
        assert result.slide_count == 2

    def test_non_image_diagram_output_does_not_abort(self):
        class SvgCompiler:
            async def compile(self, source, theme, config):
                return b"<svg>not a png</svg>"

        deck = [DeckEntry("mermaid-with-caption"), DeckEntry("emphasis-text")]
        result = PPTXBuilder(diagram_compiler=SvgCompiler()).render(deck)
        assert result.slide_count == 2
        assert result.results[0].diagram_state == DiagramState.FAILED
        slide = _open(result.pptx_bytes).slides[0]
        assert "diagram" not in _names(slide)
        assert DIAGRAM_ERROR_MESSAGE in _text(slide)

    def test_build_async(self, builder):
        async def run():
            return await builder.build_async([DeckEntry("emphasis-text"),
                                              DeckEntry("mermaid-with-caption")])

        prs = _open(asyncio.run(run()))
        assert len(prs.slides) == 2
        assert "diagram" in _names(prs.slides[1])

    def test_build_to_file(self, builder, tmp_path):
        path = tmp_path / "deck.pptx"
        builder.build_to_file([DeckEntry("markdown-renderer")], path)
        assert path.read_bytes()[:2] == b"PK"

    def test_build_presentation(self):
        pptx_bytes = build_presentation([DeckEntry("emphasis-text")],
                                        diagram_compiler=FakeCompiler())
        assert len(_open(pptx_bytes).slides) == 1

    def test_unsupported_type_is_not_reachable_through_schema(self, builder):
        # chartType is an enum, so an unknown tag fails validation first.
        with pytest.raises(DeckValidationError):
            builder.build([DeckEntry("chart-with-caption", {"chartType": "radar"})])

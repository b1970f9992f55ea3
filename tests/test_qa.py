"""Tests for the QA validator."""

import io

import pytest
from pptx import Presentation

from slidekit.generator.pptx_builder import PPTXBuilder
from slidekit.processor.ingestion import DeckEntry
from slidekit.qa.validator import Issue, QAResult, QAValidator, validate_presentation

from conftest import FakeCompiler


@pytest.fixture
def validator():
    return QAValidator()


def _build(deck):
    return PPTXBuilder(diagram_compiler=FakeCompiler()).build(deck)


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

class TestQAResult:
    def test_empty_passes(self):
        result = QAResult()
        assert result.passed
        assert result.summary() == "QA PASS: 0 error(s), 0 warning(s)"

    def test_counts(self):
        result = QAResult()
        result.add("error", 0, "column-items", "header", "missing")
        result.add("warning", -1, "", "data", "odd")
        assert not result.passed
        assert result.error_count == 1
        assert result.warning_count == 1
        assert result.summary() == "QA FAIL: 1 error(s), 1 warning(s)"

    def test_report_lines(self):
        result = QAResult()
        result.add("error", 2, "emphasis-text", "header", "Header title missing")
        report = result.report().splitlines()
        assert report[1] == ("  [ERROR] slide 2 (emphasis-text): "
                             "Header title missing")

    def test_deck_level_issue_str(self):
        issue = Issue("error", -1, "", "slide_count", "Expected 2 slide(s)")
        assert str(issue) == "[ERROR] deck: Expected 2 slide(s)"


# ---------------------------------------------------------------------------
# Built presentations
# ---------------------------------------------------------------------------

class TestValidate:
    def test_clean_deck_passes(self, validator):
        deck = [DeckEntry("column-items"), DeckEntry("emphasis-text"),
                DeckEntry("chart-with-caption", {"chartType": "bar"}),
                DeckEntry("mermaid-with-caption")]
        result = validator.validate(_build(deck), deck)
        assert result.passed, result.report()
        assert result.warning_count == 0

    def test_slide_count_mismatch(self, validator):
        deck = [DeckEntry("emphasis-text")]
        pptx_bytes = _build(deck)
        result = validator.validate(pptx_bytes, deck + [DeckEntry("emphasis-text")])
        assert not result.passed
        assert result.errors[0].category == "slide_count"

    def test_degraded_chart_warns(self, validator):
        deck = [DeckEntry("chart-with-caption", {"dataKey": "revenue"})]
        result = validator.validate(_build(deck), deck)
        assert result.passed
        assert [i.category for i in result.warnings] == ["chart"]
        assert "Unsupported chart data" in result.warnings[0].message

    def test_failed_diagram_warns(self, validator):
        deck = [DeckEntry("mermaid-with-caption",
                          {"mermaidCode": "invalid diagram source"})]
        result = validator.validate(_build(deck), deck)
        assert result.passed
        assert [i.category for i in result.warnings] == ["diagram"]

    def test_missing_header_is_error(self, validator):
        deck = [DeckEntry("emphasis-text")]
        prs = Presentation(io.BytesIO(_build(deck)))
        slide = prs.slides[0]
        for shape in list(slide.shapes):
            if shape.name == "header-title":
                shape._element.getparent().remove(shape._element)
        buf = io.BytesIO()
        prs.save(buf)
        result = validator.validate(buf.getvalue(), deck)
        assert not result.passed
        assert result.errors[0].category == "header"

    def test_missing_chart_is_error(self, validator):
        chart_deck = [DeckEntry("chart-with-caption")]
        # Render a slide that has a header but no chart.
        pptx_bytes = _build([DeckEntry("emphasis-text")])
        result = validator.validate(pptx_bytes, chart_deck)
        assert [i.category for i in result.errors] == ["chart"]

    def test_convenience_function(self):
        deck = [DeckEntry("markdown-renderer")]
        assert validate_presentation(_build(deck), deck).passed


# ---------------------------------------------------------------------------
# Deck data only
# ---------------------------------------------------------------------------

class TestValidateDeck:
    def test_unknown_layout(self, validator):
        result = validator.validate_deck([DeckEntry("nope")])
        assert result.errors[0].category == "layout"

    def test_invalid_data(self, validator):
        result = validator.validate_deck(
            [DeckEntry("emphasis-text"),
             DeckEntry("column-items", {"title": 5})])
        assert result.error_count == 1
        assert result.errors[0].slide_index == 1
        assert "title: type-mismatch" in result.errors[0].message

    def test_unknown_fields_warn(self, validator):
        result = validator.validate_deck(
            [DeckEntry("emphasis-text", {"subtitle": "x", "emphasiseText": "Hi"})])
        assert result.passed
        assert result.warnings[0].message == "Ignored unknown field(s): subtitle"

    def test_reports_every_bad_slide(self, validator):
        result = validator.validate_deck(
            [DeckEntry("nope"), DeckEntry("emphasis-text", {"slideNumber": 0})])
        assert result.error_count == 2


class TestAuditRegistry:
    def test_builtin_registry_is_clean(self, validator):
        assert validator.audit_registry().passed

"""QA validator - inspects a built PPTX against the deck that produced it.

Checks that the presentation has one slide per deck entry, that every
slide carries its header, and that chart and diagram layouts produced
either their visual or the labelled fallback. Also audits a registry for
schema self-consistency and validates deck data without rendering.

Usage::

    from slidekit.qa.validator import QAValidator

    validator = QAValidator()
    result = validator.validate(pptx_bytes, deck)
    assert result.passed, result.summary()
"""

import io
from dataclasses import dataclass, field

from pptx import Presentation

from slidekit.errors import LayoutNotFoundError, ValidationError
from slidekit.generator.charts import UNSUPPORTED_CHART_DATA, UNSUPPORTED_CHART_TYPE
from slidekit.processor.ingestion import DeckEntry
from slidekit.processor.normalize import SlideInstance, normalize, unknown_fields
from slidekit.registry import LayoutRegistry, default_registry
from slidekit.schema.contract import schema_issues


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass
class Issue:
    """A single QA issue found during validation."""
    severity: str       # "error" or "warning"
    slide_index: int    # -1 for presentation-level issues
    layout_id: str
    category: str       # e.g. "slide_count", "header", "chart", "data"
    message: str

    def __str__(self) -> str:
        loc = f"slide {self.slide_index}" if self.slide_index >= 0 else "deck"
        if self.layout_id:
            loc += f" ({self.layout_id})"
        return f"[{self.severity.upper()}] {loc}: {self.message}"


@dataclass
class QAResult:
    """Aggregated result of QA validation."""
    issues: list[Issue] = field(default_factory=list)

    @property
    def errors(self) -> list[Issue]:
        return [i for i in self.issues if i.severity == "error"]

    @property
    def warnings(self) -> list[Issue]:
        return [i for i in self.issues if i.severity == "warning"]

    @property
    def passed(self) -> bool:
        return len(self.errors) == 0

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def warning_count(self) -> int:
        return len(self.warnings)

    def add(self, severity: str, slide_index: int, layout_id: str,
            category: str, message: str) -> None:
        self.issues.append(Issue(severity, slide_index, layout_id,
                                 category, message))

    def summary(self) -> str:
        """One-line summary string."""
        status = "PASS" if self.passed else "FAIL"
        return (
            f"QA {status}: {self.error_count} error(s), "
            f"{self.warning_count} warning(s)"
        )

    def report(self) -> str:
        """Multi-line report of all issues."""
        lines = [self.summary()]
        for issue in self.issues:
            lines.append(f"  {issue}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _shape_names(slide) -> set[str]:
    return {shape.name for shape in slide.shapes}


def _all_text_on_slide(slide) -> str:
    """Concatenate all text on a slide for content searches."""
    parts: list[str] = []
    for shape in slide.shapes:
        if shape.has_text_frame:
            parts.append(shape.text_frame.text)
    return " ".join(parts)


def _chart_shapes(slide) -> list:
    return [s for s in slide.shapes if s.has_chart]


# ---------------------------------------------------------------------------
# QAValidator
# ---------------------------------------------------------------------------

class QAValidator:
    """Validates deck data and generated PPTX output.

    Parameters
    ----------
    registry : LayoutRegistry | None
        Registry used to resolve layout ids (built-in layouts by default).
    """

    def __init__(self, registry: LayoutRegistry | None = None) -> None:
        self.registry = registry or default_registry()

    def validate(self, pptx_bytes: bytes, deck: list[DeckEntry]) -> QAResult:
        """Run all checks on a built PPTX."""
        prs = Presentation(io.BytesIO(pptx_bytes))
        result = QAResult()

        instances = self._normalize_all(deck, result)
        expected = len(deck)
        actual = len(prs.slides)
        if actual != expected:
            result.add("error", -1, "", "slide_count",
                       f"Expected {expected} slide(s), found {actual}")
            return result

        for idx, (entry, instance) in enumerate(zip(deck, instances)):
            if instance is not None:
                self._check_slide(prs.slides[idx], idx, entry, instance, result)
        return result

    def validate_deck(self, deck: list[DeckEntry]) -> QAResult:
        """Validate deck data against the layout schemas without rendering."""
        result = QAResult()
        self._normalize_all(deck, result)
        return result

    def audit_registry(self) -> QAResult:
        """Check every registered schema for self-consistency."""
        result = QAResult()
        for layout in self.registry:
            for issue in schema_issues(layout.schema):
                result.add("error", -1, layout.layout_id, "schema", issue)
        return result

    # ------------------------------------------------------------------
    # Data checks
    # ------------------------------------------------------------------

    def _normalize_all(self, deck: list[DeckEntry],
                       result: QAResult) -> list[SlideInstance | None]:
        instances: list[SlideInstance | None] = []
        for idx, entry in enumerate(deck):
            try:
                layout = self.registry.get_layout(entry.layout_id)
            except LayoutNotFoundError as exc:
                result.add("error", idx, entry.layout_id, "layout", str(exc))
                instances.append(None)
                continue
            try:
                instances.append(normalize(layout.schema, entry.data))
            except ValidationError as exc:
                result.add("error", idx, entry.layout_id, "data", str(exc))
                instances.append(None)
                continue
            extras = unknown_fields(layout.schema, entry.data or {})
            if extras:
                result.add("warning", idx, entry.layout_id, "data",
                           f"Ignored unknown field(s): {', '.join(extras)}")
        return instances

    # ------------------------------------------------------------------
    # Slide checks
    # ------------------------------------------------------------------

    def _check_slide(self, slide, idx: int, entry: DeckEntry,
                     instance: SlideInstance, result: QAResult) -> None:
        layout_id = entry.layout_id
        text = _all_text_on_slide(slide)
        names = _shape_names(slide)

        if "header-title" not in names:
            result.add("error", idx, layout_id, "header", "Header title missing")
        elif instance["sectionTitle"] not in text:
            result.add("error", idx, layout_id, "header",
                       f"Section title {instance['sectionTitle']!r} not rendered")
        if instance["contentRating"].upper() not in text:
            result.add("error", idx, layout_id, "header",
                       "Content rating badge missing")

        if layout_id == "chart-with-caption":
            self._check_chart(slide, idx, layout_id, text, names, result)
        elif layout_id == "mermaid-with-caption":
            self._check_diagram(idx, layout_id, names, result)

    def _check_chart(self, slide, idx: int, layout_id: str, text: str,
                     names: set[str], result: QAResult) -> None:
        if _chart_shapes(slide):
            return
        if "chart-unsupported" in names:
            reason = (UNSUPPORTED_CHART_TYPE if UNSUPPORTED_CHART_TYPE in text
                      else UNSUPPORTED_CHART_DATA)
            result.add("warning", idx, layout_id, "chart",
                       f"Chart degraded: {reason}")
            return
        result.add("error", idx, layout_id, "chart", "No chart rendered")

    def _check_diagram(self, idx: int, layout_id: str, names: set[str],
                       result: QAResult) -> None:
        if "diagram" in names:
            return
        if "diagram-error" in names:
            result.add("warning", idx, layout_id, "diagram",
                       "Diagram failed to compile (placeholder shown)")
            return
        result.add("error", idx, layout_id, "diagram", "No diagram rendered")


def validate_presentation(pptx_bytes: bytes, deck: list[DeckEntry],
                          registry: LayoutRegistry | None = None) -> QAResult:
    """One-shot convenience: validate a built PPTX against its deck."""
    return QAValidator(registry).validate(pptx_bytes, deck)

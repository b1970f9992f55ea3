"""Exception taxonomy for slidekit.

- SchemaDefinitionError: a layout's own schema is inconsistent (startup, fatal)
- ValidationError: candidate slide data does not satisfy its schema (per render)
- LayoutNotFoundError: unknown layout id requested from the registry
- DiagramCompileError: the external diagram compiler failed (caught locally)

Unsupported chart types are deliberately not represented here; they degrade
to a labelled artifact in the chart generator.
"""

from __future__ import annotations

from enum import Enum


class SlideKitError(Exception):
    """Base class for all slidekit errors."""


class SchemaDefinitionError(SlideKitError, ValueError):
    """Raised when a layout schema is internally inconsistent."""

    def __init__(self, issues: list[str], layout_id: str = ""):
        self.layout_id = layout_id
        self.issues = [str(i).strip() for i in issues if str(i).strip()]
        if not self.issues:
            self.issues = ["Invalid schema definition"]
        super().__init__(self._format())

    def _format(self) -> str:
        head = "Schema definition failed"
        if self.layout_id:
            head += f" for layout '{self.layout_id}'"
        lines = [head + ":"]
        for issue in self.issues:
            lines.append(f"- {issue}")
        return "\n".join(lines)


class ValidationReason(Enum):
    """Why a field failed validation."""
    MISSING = "missing"
    TYPE_MISMATCH = "type-mismatch"
    CONSTRAINT_VIOLATED = "constraint-violated"


class ValidationError(SlideKitError, ValueError):
    """Raised when candidate data fails a layout schema.

    ``field`` is a dotted path into the candidate (``items[1].heading``);
    ``<root>`` when the candidate itself is not a mapping.
    """

    def __init__(self, field: str, reason: ValidationReason, detail: str = ""):
        self.field = field
        self.reason = reason
        self.detail = detail
        msg = f"{field}: {reason.value}"
        if detail:
            msg += f" ({detail})"
        super().__init__(msg)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ValidationError):
            return NotImplemented
        return (self.field, self.reason, self.detail) == (
            other.field, other.reason, other.detail)

    def __hash__(self) -> int:
        return hash((self.field, self.reason, self.detail))

    def to_dict(self) -> dict:
        return {"field": self.field, "reason": self.reason.value,
                "detail": self.detail}


class LayoutNotFoundError(SlideKitError, KeyError):
    """Raised when a layout id is not present in the registry."""

    def __init__(self, layout_id: str, known: list[str] | None = None):
        self.layout_id = layout_id
        self.known = sorted(known or [])
        super().__init__(layout_id)

    def __str__(self) -> str:
        msg = f"Unknown layout: {self.layout_id!r}"
        if self.known:
            msg += f" (known: {', '.join(self.known)})"
        return msg


class DiagramCompileError(SlideKitError, RuntimeError):
    """Raised by a diagram compiler when source text cannot be compiled."""


class DeckValidationError(SlideKitError, ValueError):
    """A ValidationError located at one slide of a deck."""

    def __init__(self, slide_index: int, layout_id: str, error: ValidationError):
        self.slide_index = slide_index
        self.layout_id = layout_id
        self.error = error
        super().__init__(f"slides[{slide_index}] ({layout_id}): {error}")

"""slidekit - schema-driven slide layouts rendered to PowerPoint.

Each layout pairs a strict data schema with a deterministic renderer.
Candidate data is normalized against the schema (defaults filled,
constraints enforced) and then drawn as a chart, a diagram or rich text.
"""

from .errors import (
    DeckValidationError,
    DiagramCompileError,
    LayoutNotFoundError,
    SchemaDefinitionError,
    SlideKitError,
    ValidationError,
    ValidationReason,
)
from .processor import DeckEntry, SlideInstance, load_deck, normalize
from .registry import Layout, LayoutRegistry, default_registry, get_layout
from .schema import DesignSystem, FieldSpec, FieldType, LayoutSchema, define_schema
from .generator.pptx_builder import BuildResult, PPTXBuilder, build_presentation

__version__ = "0.1.0"

__all__ = [
    "BuildResult",
    "DeckEntry",
    "DeckValidationError",
    "DesignSystem",
    "DiagramCompileError",
    "FieldSpec",
    "FieldType",
    "Layout",
    "LayoutNotFoundError",
    "LayoutRegistry",
    "LayoutSchema",
    "PPTXBuilder",
    "SchemaDefinitionError",
    "SlideInstance",
    "SlideKitError",
    "ValidationError",
    "ValidationReason",
    "build_presentation",
    "default_registry",
    "define_schema",
    "get_layout",
    "load_deck",
    "normalize",
]

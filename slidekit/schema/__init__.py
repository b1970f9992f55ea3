"""Layout schema package - the typed data contract of every slide layout.

- models.py: FieldSpec, LayoutSchema, ImageRef and the layout enums
- constraints.py: type coercion and constraint checks per field
- contract.py: define_schema (definition-time self-consistency checks)
- design_system.py: DesignSystem and the chart color palette
- layouts.py: the built-in layout schemas
- loader.py: YAML serialization/deserialization
"""

from .constraints import coerce_value, normalize_record, thaw
from .contract import define_schema, schema_issues
from .design_system import CHART_COLORS, DesignSystem, palette_color
from .layouts import LAYOUT_SCHEMA_BUILDERS, header_fields
from .loader import dump_schema, load_design, load_schema, save_design, save_schema
from .models import (
    REQUIRED,
    ChartType,
    ContentRating,
    DiagramTheme,
    FieldSpec,
    FieldType,
    ImageRef,
    LayoutSchema,
    Position,
)

__all__ = [
    # Models
    "REQUIRED",
    "ChartType",
    "ContentRating",
    "DiagramTheme",
    "FieldSpec",
    "FieldType",
    "ImageRef",
    "LayoutSchema",
    "Position",
    # Contract
    "coerce_value",
    "define_schema",
    "normalize_record",
    "schema_issues",
    "thaw",
    # Design
    "CHART_COLORS",
    "DesignSystem",
    "palette_color",
    # Layouts
    "LAYOUT_SCHEMA_BUILDERS",
    "header_fields",
    # Loader
    "dump_schema",
    "load_design",
    "load_schema",
    "save_design",
    "save_schema",
]

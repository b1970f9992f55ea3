"""Layout schema models - the contract between the generation pipeline,
the normalizer, and the layout renderers.

A LayoutSchema is an ordered list of FieldSpecs. Each FieldSpec names a
semantic type, the constraints a value must satisfy, a default that is used
when the field is absent, and free-text metadata the generation pipeline
reads when deciding what content to produce.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class FieldType(Enum):
    """Semantic type of a schema field."""
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ENUM = "enum"          # String restricted to ``choices``
    IMAGE = "image"        # ImageRef (url + prompt)
    LIST = "list"          # Ordered list of records described by ``fields``
    RECORD = "record"      # Nested record described by ``fields``


class ContentRating(Enum):
    """Classification badge shown in every layout header."""
    INTERNAL = "internal"
    RESTRICTED = "restricted"
    UNCLASSIFIED = "unclassified"


class DiagramTheme(Enum):
    """Themes understood by the diagram compiler."""
    DEFAULT = "default"
    DARK = "dark"
    FOREST = "forest"
    NEUTRAL = "neutral"


class ChartType(Enum):
    """Chart types the chart dispatcher knows how to draw."""
    BAR = "bar"
    LINE = "line"
    PIE = "pie"
    AREA = "area"
    SCATTER = "scatter"


class _Required:
    """Sentinel for fields that have no default and must be supplied."""

    def __repr__(self) -> str:
        return "REQUIRED"

    def __reduce__(self):
        return "REQUIRED"


REQUIRED: Any = _Required()


# ---------------------------------------------------------------------------
# Image reference
# ---------------------------------------------------------------------------

IMAGE_URL_KEY = "__image_url__"
IMAGE_PROMPT_KEY = "__image_prompt__"


@dataclass(frozen=True)
class ImageRef:
    """A resolvable image URL plus the prompt used as alt text/regeneration."""
    url: str
    prompt: str = ""

    def to_dict(self) -> dict:
        return {IMAGE_URL_KEY: self.url, IMAGE_PROMPT_KEY: self.prompt}

    @classmethod
    def from_dict(cls, d: dict) -> "ImageRef":
        url = d.get(IMAGE_URL_KEY, d.get("url"))
        prompt = d.get(IMAGE_PROMPT_KEY, d.get("prompt", ""))
        return cls(url=url, prompt=prompt)


# ---------------------------------------------------------------------------
# FieldSpec
# ---------------------------------------------------------------------------

@dataclass
class FieldSpec:
    """Declarative description of one field in a layout schema."""
    name: str
    field_type: FieldType
    default: Any = REQUIRED
    optional: bool = False               # Absent -> None when no default

    # String constraints
    min_length: int | None = None
    max_length: int | None = None

    # Number constraints
    min_value: float | None = None
    max_value: float | None = None

    # List constraints
    min_items: int | None = None
    max_items: int | None = None

    # Enum constraint
    choices: tuple[str, ...] = ()

    # Sub-schema for LIST elements and RECORD values
    fields: list["FieldSpec"] = field(default_factory=list)

    # Metadata for the generation pipeline
    description: str = ""

    @property
    def has_default(self) -> bool:
        return self.default is not REQUIRED

    @property
    def is_required(self) -> bool:
        return not self.has_default and not self.optional

    def to_dict(self) -> dict:
        d: dict[str, Any] = {"name": self.name, "type": self.field_type.value}
        if self.has_default:
            d["default"] = _plain(self.default)
        if self.optional:
            d["optional"] = True
        for key in ("min_length", "max_length", "min_value", "max_value",
                    "min_items", "max_items"):
            value = getattr(self, key)
            if value is not None:
                d[key] = value
        if self.choices:
            d["choices"] = list(self.choices)
        if self.fields:
            d["fields"] = [f.to_dict() for f in self.fields]
        if self.description:
            d["description"] = self.description
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "FieldSpec":
        field_type = FieldType(d["type"])
        default = d.get("default", REQUIRED)
        if field_type == FieldType.IMAGE and isinstance(default, dict):
            default = ImageRef.from_dict(default)
        return cls(
            name=d["name"],
            field_type=field_type,
            default=default,
            optional=d.get("optional", False),
            min_length=d.get("min_length"),
            max_length=d.get("max_length"),
            min_value=d.get("min_value"),
            max_value=d.get("max_value"),
            min_items=d.get("min_items"),
            max_items=d.get("max_items"),
            choices=tuple(d.get("choices", ())),
            fields=[FieldSpec.from_dict(f) for f in d.get("fields", [])],
            description=d.get("description", ""),
        )


# ---------------------------------------------------------------------------
# LayoutSchema
# ---------------------------------------------------------------------------

@dataclass
class LayoutSchema:
    """The complete data contract of one slide layout.

    Build instances through ``define_schema`` so that every default is
    checked against its own constraints before the schema is used.
    """
    layout_id: str
    fields: list[FieldSpec]
    description: str = ""

    def get_field(self, name: str) -> FieldSpec | None:
        """Look up a field by name."""
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]

    def defaults(self) -> dict[str, Any]:
        """Declared defaults keyed by field name (fields without one omitted)."""
        return {f.name: f.default for f in self.fields if f.has_default}

    def to_dict(self) -> dict:
        d: dict[str, Any] = {"layout_id": self.layout_id}
        if self.description:
            d["description"] = self.description
        d["fields"] = [f.to_dict() for f in self.fields]
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "LayoutSchema":
        return cls(
            layout_id=d["layout_id"],
            fields=[FieldSpec.from_dict(f) for f in d.get("fields", [])],
            description=d.get("description", ""),
        )


def _plain(value: Any) -> Any:
    """Convert a default value into YAML/JSON friendly builtins."""
    if isinstance(value, ImageRef):
        return value.to_dict()
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


# ---------------------------------------------------------------------------
# Position - where a rendered element sits on the slide
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Position:
    """Shape position and dimensions in inches."""
    left: float
    top: float
    width: float
    height: float

"""Schema definition - builds a LayoutSchema and checks it is self-consistent.

``define_schema`` is the only supported way to create a LayoutSchema. It
collects every inconsistency it can find (rather than stopping at the first)
and raises a single SchemaDefinitionError listing all of them, so a broken
layout is reported in full at startup.
"""

from __future__ import annotations

from slidekit.errors import SchemaDefinitionError, ValidationError

from .constraints import coerce_value
from .models import FieldSpec, FieldType, LayoutSchema

_BOUNDS = (
    ("min_length", "max_length"),
    ("min_value", "max_value"),
    ("min_items", "max_items"),
)

_NESTED = (FieldType.LIST, FieldType.RECORD)


def _check_field(spec: FieldSpec, path: str, issues: list[str]) -> None:
    """Append every problem with ``spec`` (and its sub-fields) to ``issues``."""
    for low_name, high_name in _BOUNDS:
        low = getattr(spec, low_name)
        high = getattr(spec, high_name)
        if low is not None and high is not None and low > high:
            issues.append(f"{path}: {low_name} {low} > {high_name} {high}")
        if low_name != "min_value":
            for name, bound in ((low_name, low), (high_name, high)):
                if bound is not None and bound < 0:
                    issues.append(f"{path}: {name} must not be negative")

    if spec.field_type == FieldType.ENUM and not spec.choices:
        issues.append(f"{path}: enum field declares no choices")

    if spec.field_type in _NESTED:
        if not spec.fields:
            issues.append(
                f"{path}: {spec.field_type.value} field declares no sub-fields")
        _check_fields(spec.fields, path, issues)
    elif spec.fields:
        issues.append(
            f"{path}: sub-fields are only allowed on list and record fields")

    if spec.has_default:
        try:
            coerce_value(spec, spec.default, path)
        except ValidationError as exc:
            issues.append(f"default does not satisfy its own field: {exc}")


def _check_fields(fields: list[FieldSpec], prefix: str,
                  issues: list[str]) -> None:
    seen: set[str] = set()
    for spec in fields:
        path = f"{prefix}.{spec.name}" if prefix else spec.name
        if not spec.name:
            issues.append(f"{prefix or '<root>'}: field with empty name")
        if spec.name in seen:
            issues.append(f"{path}: duplicate field name")
        seen.add(spec.name)
        _check_field(spec, path, issues)


def schema_issues(schema: LayoutSchema) -> list[str]:
    """Return every self-consistency problem of an existing schema."""
    issues: list[str] = []
    if not schema.layout_id:
        issues.append("layout_id must not be empty")
    _check_fields(schema.fields, "", issues)
    return issues


def define_schema(layout_id: str, fields: list[FieldSpec],
                  description: str = "") -> LayoutSchema:
    """Declare a layout schema.

    Raises:
        SchemaDefinitionError: If any bound is inverted, any enum has no
            choices, or any default fails its own field's constraints.
    """
    schema = LayoutSchema(layout_id=layout_id, fields=list(fields),
                          description=description)
    issues = schema_issues(schema)
    if issues:
        raise SchemaDefinitionError(issues, layout_id=layout_id)
    return schema

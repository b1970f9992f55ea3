"""Validation & normalization - turns untyped candidate data into a SlideInstance.

The contract is reject, not repair: the first field (in schema order) that
cannot be coerced or violates a constraint raises ValidationError and no
partial result is returned. Absent fields take the schema default, which is
validated again here because defaults are author-editable.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from slidekit.errors import ValidationError, ValidationReason
from slidekit.schema.constraints import normalize_record, thaw
from slidekit.schema.models import LayoutSchema


@dataclass(frozen=True)
class SlideInstance(Mapping):
    """Validated, default-filled data for one slide render.

    Behaves as a read-only mapping of field name to normalized value.
    Lists are tuples and records are read-only mappings.
    """
    layout_id: str
    values: Mapping[str, Any]

    def __getitem__(self, key: str) -> Any:
        return self.values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self.values)

    def __len__(self) -> int:
        return len(self.values)

    def to_dict(self) -> dict[str, Any]:
        """Plain dict/list copy, suitable for JSON or YAML output."""
        return thaw(self.values)


def normalize(schema: LayoutSchema, candidate: Any) -> SlideInstance:
    """Validate ``candidate`` against ``schema`` and fill defaults.

    Args:
        schema: The layout's data contract.
        candidate: Untyped input, normally a dict decoded from JSON.

    Returns:
        A complete SlideInstance holding exactly the schema's fields.

    Raises:
        ValidationError: For the first offending field, in schema order.
    """
    if candidate is None:
        candidate = {}
    if not isinstance(candidate, Mapping):
        raise ValidationError(
            "<root>", ValidationReason.TYPE_MISMATCH,
            f"expected mapping, got {type(candidate).__name__}",
        )
    values = normalize_record(schema.fields, candidate)
    return SlideInstance(layout_id=schema.layout_id, values=values)


def validate_candidate(schema: LayoutSchema,
                       candidate: Any) -> list[ValidationError]:
    """Non-raising variant: ``[]`` when valid, else the fail-fast error."""
    try:
        normalize(schema, candidate)
    except ValidationError as exc:
        return [exc]
    return []


def unknown_fields(schema: LayoutSchema, candidate: Mapping[str, Any]) -> list[str]:
    """Top-level candidate keys the schema does not declare (dropped on normalize)."""
    declared = set(schema.field_names())
    return sorted(k for k in candidate if k not in declared)

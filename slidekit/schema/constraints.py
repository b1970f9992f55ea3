"""Field-level coercion and constraint checks.

Shared by schema definition (every default is pushed through the same path)
and by the normalizer. Everything here either returns a normalized value or
raises ValidationError; nothing is clamped, truncated or padded.

Normalized values are immutable: strings, numbers and booleans as-is,
ImageRef for images, tuples of read-only mappings for lists and read-only
mappings for records.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from slidekit.errors import ValidationError, ValidationReason

from .models import FieldSpec, FieldType, ImageRef

_TRUE_STRINGS = {"true", "yes", "1"}
_FALSE_STRINGS = {"false", "no", "0"}

# Plain decimal numerals only: no underscores, no inf or nan, ASCII digits.
_NUMERAL_RE = re.compile(
    r"[+-]?(?:[0-9]+(?P<frac>\.[0-9]*)?|(?P<lead>\.[0-9]+))"
    r"(?P<exp>[eE][+-]?[0-9]+)?")


def _mismatch(path: str, expected: str, value: Any) -> ValidationError:
    return ValidationError(
        path, ValidationReason.TYPE_MISMATCH,
        f"expected {expected}, got {type(value).__name__}",
    )


def _violated(path: str, detail: str) -> ValidationError:
    return ValidationError(path, ValidationReason.CONSTRAINT_VIOLATED, detail)


# ---------------------------------------------------------------------------
# Coercion per semantic type
# ---------------------------------------------------------------------------

def _coerce_string(spec: FieldSpec, value: Any, path: str) -> str:
    if not isinstance(value, str):
        raise _mismatch(path, "string", value)
    length = len(value)
    if spec.min_length is not None and length < spec.min_length:
        raise _violated(path, f"length {length} < min_length {spec.min_length}")
    if spec.max_length is not None and length > spec.max_length:
        raise _violated(path, f"length {length} > max_length {spec.max_length}")
    return value


def _coerce_number(spec: FieldSpec, value: Any, path: str) -> int | float:
    if isinstance(value, bool):
        raise _mismatch(path, "number", value)
    if isinstance(value, str):
        text = value.strip()
        match = _NUMERAL_RE.fullmatch(text)
        if match is None:
            raise _mismatch(path, "number", value)
        if not any(match.group("frac", "lead", "exp")):
            number: int | float = int(text)
        else:
            number = float(text)
    elif isinstance(value, (int, float)):
        number = value
    else:
        raise _mismatch(path, "number", value)

    if isinstance(number, float) and not math.isfinite(number):
        raise _violated(path, "value must be finite")
    if spec.min_value is not None and number < spec.min_value:
        raise _violated(path, f"value {number} < min_value {spec.min_value}")
    if spec.max_value is not None and number > spec.max_value:
        raise _violated(path, f"value {number} > max_value {spec.max_value}")
    return number


def _coerce_boolean(spec: FieldSpec, value: Any, path: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    raise _mismatch(path, "boolean", value)


def _coerce_enum(spec: FieldSpec, value: Any, path: str) -> str:
    if hasattr(value, "value") and isinstance(getattr(value, "value"), str):
        value = value.value
    if not isinstance(value, str):
        raise _mismatch(path, "string", value)
    if value not in spec.choices:
        raise _violated(
            path, f"{value!r} not in allowed values {list(spec.choices)}")
    return value


def _coerce_image(spec: FieldSpec, value: Any, path: str) -> ImageRef:
    if isinstance(value, Mapping):
        value = ImageRef.from_dict(dict(value))
    if not isinstance(value, ImageRef):
        raise _mismatch(path, "image reference", value)
    if not isinstance(value.url, str):
        raise _mismatch(f"{path}.url", "string", value.url)
    if not isinstance(value.prompt, str):
        raise _mismatch(f"{path}.prompt", "string", value.prompt)
    if not value.url.strip():
        raise _violated(f"{path}.url", "image url must not be empty")
    return value


def _coerce_list(spec: FieldSpec, value: Any, path: str) -> tuple:
    if not isinstance(value, (list, tuple)):
        raise _mismatch(path, "list", value)
    items = []
    for idx, element in enumerate(value):
        element_path = f"{path}[{idx}]"
        if not isinstance(element, Mapping):
            raise _mismatch(element_path, "record", element)
        items.append(normalize_record(spec.fields, element, element_path))
    count = len(items)
    if spec.min_items is not None and count < spec.min_items:
        raise _violated(path, f"{count} item(s) < min_items {spec.min_items}")
    if spec.max_items is not None and count > spec.max_items:
        raise _violated(path, f"{count} item(s) > max_items {spec.max_items}")
    return tuple(items)


def _coerce_record(spec: FieldSpec, value: Any, path: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise _mismatch(path, "record", value)
    return normalize_record(spec.fields, value, path)


_COERCERS = {
    FieldType.STRING: _coerce_string,
    FieldType.NUMBER: _coerce_number,
    FieldType.BOOLEAN: _coerce_boolean,
    FieldType.ENUM: _coerce_enum,
    FieldType.IMAGE: _coerce_image,
    FieldType.LIST: _coerce_list,
    FieldType.RECORD: _coerce_record,
}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def coerce_value(spec: FieldSpec, value: Any, path: str | None = None) -> Any:
    """Coerce ``value`` to the field's type and apply its constraints."""
    return _COERCERS[spec.field_type](spec, value, path or spec.name)


def normalize_field(spec: FieldSpec, candidate: Mapping[str, Any],
                    path: str | None = None) -> Any:
    """Resolve one field of a record: default substitution, then coercion.

    An explicit ``None`` counts as absent.
    """
    path = path or spec.name
    value = candidate.get(spec.name)
    if value is None:
        if spec.has_default:
            # Declared defaults are re-validated, never trusted.
            return coerce_value(spec, spec.default, path)
        if spec.optional:
            return None
        raise ValidationError(path, ValidationReason.MISSING,
                              "field is required")
    return coerce_value(spec, value, path)


def normalize_record(fields: list[FieldSpec], candidate: Mapping[str, Any],
                     path: str = "") -> Mapping[str, Any]:
    """Normalize a record against ``fields`` in order, failing fast.

    Keys not declared in ``fields`` are dropped.
    """
    out: dict[str, Any] = {}
    for spec in fields:
        field_path = f"{path}.{spec.name}" if path else spec.name
        out[spec.name] = normalize_field(spec, candidate, field_path)
    return MappingProxyType(out)


def thaw(value: Any) -> Any:
    """Convert a normalized value back into plain dicts/lists."""
    if isinstance(value, ImageRef):
        return value.to_dict()
    if isinstance(value, Mapping):
        return {k: thaw(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [thaw(v) for v in value]
    return value

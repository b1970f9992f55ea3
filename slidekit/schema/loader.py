"""Schema loader - YAML serialization for LayoutSchema and DesignSystem.

Schemas are saved so the generation pipeline (and reviewers) can read the
data contract of each layout without importing Python. Loaded schemas go
back through ``define_schema`` so a hand-edited file with a bad default is
rejected at load time.
"""

from pathlib import Path

import yaml

from .contract import define_schema
from .design_system import DesignSystem
from .models import LayoutSchema

_DESIGN_SECTIONS = ("dimensions", "colors", "typography", "diagram")


def _dump(data: dict, path: str | Path) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False,
                  allow_unicode=True, width=120)


def dump_schema(schema: LayoutSchema) -> str:
    """Serialize a LayoutSchema to a YAML string."""
    return yaml.dump(schema.to_dict(), default_flow_style=False,
                     sort_keys=False, allow_unicode=True, width=120)


def save_schema(schema: LayoutSchema, path: str | Path) -> None:
    """Serialize a LayoutSchema to a YAML file."""
    _dump(schema.to_dict(), path)


def load_schema(path: str | Path) -> LayoutSchema:
    """Deserialize and re-check a LayoutSchema from a YAML file."""
    with open(Path(path)) as f:
        data = yaml.safe_load(f)
    raw = LayoutSchema.from_dict(data)
    return define_schema(raw.layout_id, raw.fields, raw.description)


def save_design(design: DesignSystem, path: str | Path) -> None:
    """Serialize a DesignSystem to a YAML file."""
    _dump(design.to_dict(), path)


def load_design(path: str | Path) -> DesignSystem:
    """Deserialize a DesignSystem from a YAML file (missing keys -> defaults).

    Raises ValueError when the document or one of its sections is not a
    mapping. YAML syntax errors propagate as ``yaml.YAMLError``.
    """
    with open(Path(path)) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(
            f"Design file must be a mapping, got {type(data).__name__}")
    for section in _DESIGN_SECTIONS:
        if not isinstance(data.get(section, {}), dict):
            raise ValueError(f"Design section {section!r} must be a mapping")
    return DesignSystem.from_dict(data)

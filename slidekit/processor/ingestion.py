"""Deck ingestion - reads candidate slide data from JSON or YAML files.

A deck file is either a bare list of entries or a mapping with a ``slides``
list. Each entry names its layout and carries the candidate data::

    slides:
      - layout: chart-with-caption
        data:
          chartType: pie
          data: [{name: A, value: 1}, {name: B, value: 3}]

Only the file shape is checked here; the data itself is validated later by
``normalize`` against the layout's schema.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

SUPPORTED_SUFFIXES = (".json", ".yaml", ".yml")


class DeckFormatError(ValueError):
    """Raised when a deck file does not have the expected shape."""


@dataclass
class DeckEntry:
    """One requested slide: a layout id plus untyped candidate data."""
    layout_id: str
    data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {"layout": self.layout_id, "data": self.data}

    @classmethod
    def from_dict(cls, d: dict) -> "DeckEntry":
        return cls(layout_id=d["layout"], data=d.get("data") or {})


def read_document(path: str | Path) -> Any:
    """Decode a JSON or YAML document, chosen by file suffix."""
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise DeckFormatError(
            f"Unsupported deck file type {suffix!r} "
            f"(expected one of {', '.join(SUPPORTED_SUFFIXES)})"
        )
    text = path.read_text(encoding="utf-8")
    if suffix == ".json":
        return json.loads(text)
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise DeckFormatError(f"Invalid YAML: {exc}") from exc


def parse_deck(document: Any) -> list[DeckEntry]:
    """Convert a decoded deck document into DeckEntry objects."""
    if isinstance(document, dict):
        document = document.get("slides")
    if not isinstance(document, list):
        raise DeckFormatError("Deck must be a list of slides or a mapping "
                              "with a 'slides' list")

    entries: list[DeckEntry] = []
    for idx, raw in enumerate(document):
        if not isinstance(raw, dict):
            raise DeckFormatError(f"slides[{idx}] must be a mapping")
        layout = raw.get("layout")
        if not isinstance(layout, str) or not layout.strip():
            raise DeckFormatError(
                f"slides[{idx}].layout is required and must be a non-empty string")
        data = raw.get("data", {})
        if data is not None and not isinstance(data, dict):
            raise DeckFormatError(f"slides[{idx}].data must be a mapping")
        entries.append(DeckEntry.from_dict(raw))
    return entries


def load_deck(path: str | Path) -> list[DeckEntry]:
    """Read a deck file from disk."""
    return parse_deck(read_document(path))

"""Data processor module for slidekit."""

from .ingestion import (
    DeckEntry,
    DeckFormatError,
    load_deck,
    parse_deck,
    read_document,
)
from .normalize import (
    SlideInstance,
    normalize,
    unknown_fields,
    validate_candidate,
)

"""QA validation package for slidekit.

Validates deck data against layout schemas, audits registered schemas for
self-consistency, and checks built PPTX output for headers, charts and
diagrams.
"""

from .validator import (
    Issue,
    QAResult,
    QAValidator,
    validate_presentation,
)

__all__ = [
    "Issue",
    "QAResult",
    "QAValidator",
    "validate_presentation",
]

"""Layout registry - maps layout ids to (schema, renderer) pairs.

The generation pipeline calls ``describe()`` to learn which layouts exist
and what data each one expects, then the builder calls ``get_layout`` to
normalize and render each slide.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any, Callable, Iterator

from slidekit.errors import LayoutNotFoundError, SchemaDefinitionError
from slidekit.generator import layouts as renderers
from slidekit.schema import layouts as schemas
from slidekit.schema.models import LayoutSchema


@dataclass(frozen=True)
class Layout:
    """A named slide template: data contract plus render function."""
    layout_id: str
    name: str
    schema: LayoutSchema
    renderer: Callable[..., Any]

    @property
    def description(self) -> str:
        return self.schema.description

    @property
    def is_async(self) -> bool:
        return inspect.iscoroutinefunction(self.renderer)

    def to_dict(self) -> dict:
        return {
            "layout_id": self.layout_id,
            "name": self.name,
            "description": self.description,
            "schema": self.schema.to_dict(),
        }


class LayoutRegistry:
    """Lookup table of layouts keyed by id."""

    def __init__(self, layouts: list[Layout] | None = None) -> None:
        self._layouts: dict[str, Layout] = {}
        for layout in layouts or []:
            self.register(layout)

    def register(self, layout: Layout) -> None:
        if layout.layout_id in self._layouts:
            raise SchemaDefinitionError(
                [f"layout id {layout.layout_id!r} registered twice"],
                layout_id=layout.layout_id,
            )
        if layout.schema.layout_id != layout.layout_id:
            raise SchemaDefinitionError(
                [f"schema id {layout.schema.layout_id!r} does not match "
                 f"layout id {layout.layout_id!r}"],
                layout_id=layout.layout_id,
            )
        self._layouts[layout.layout_id] = layout

    def get_layout(self, layout_id: str) -> Layout:
        """Return the layout for ``layout_id``.

        Raises:
            LayoutNotFoundError: If the id is not registered.
        """
        try:
            return self._layouts[layout_id]
        except KeyError:
            raise LayoutNotFoundError(layout_id, list(self._layouts)) from None

    def layout_ids(self) -> list[str]:
        return list(self._layouts)

    def describe(self) -> list[dict]:
        """Ids, descriptions and schemas of every layout, in registration order."""
        return [layout.to_dict() for layout in self._layouts.values()]

    def __contains__(self, layout_id: object) -> bool:
        return layout_id in self._layouts

    def __iter__(self) -> Iterator[Layout]:
        return iter(self._layouts.values())

    def __len__(self) -> int:
        return len(self._layouts)


_BUILTIN: list[tuple[str, str, Callable]] = [
    ("chart-with-caption", "Chart With Caption",
     renderers.render_chart_with_caption),
    ("column-items", "Column Items", renderers.render_column_items),
    ("emphasis-text", "Emphasis Text", renderers.render_emphasis_text),
    ("hero-image-with-text", "Hero Image With Text",
     renderers.render_hero_image_with_text),
    ("key-points-with-summary", "Key Points With Summary",
     renderers.render_key_points_with_summary),
    ("markdown-renderer", "Markdown Renderer",
     renderers.render_markdown_renderer),
    ("mermaid-with-caption", "Mermaid With Caption",
     renderers.render_mermaid_with_caption),
]


def default_registry() -> LayoutRegistry:
    """A registry holding every built-in layout (schemas checked on build)."""
    return LayoutRegistry([
        Layout(layout_id=layout_id, name=name,
               schema=schemas.LAYOUT_SCHEMA_BUILDERS[layout_id](),
               renderer=render)
        for layout_id, name, render in _BUILTIN
    ])


_DEFAULT: LayoutRegistry | None = None


def get_layout(layout_id: str) -> Layout:
    """Look up a built-in layout by id."""
    global _DEFAULT
    if _DEFAULT is None:
        _DEFAULT = default_registry()
    return _DEFAULT.get_layout(layout_id)

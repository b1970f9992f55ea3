"""Design system - colors, typography and diagram styling shared by every layout.

CHART_COLORS is the process-wide palette used when a chart needs one color
per data point (pie slices). It is a tuple and never mutated.
"""

from dataclasses import dataclass, field
from typing import Any

CHART_COLORS: tuple[str, ...] = (
    "#3b82f6",
    "#ef4444",
    "#10b981",
    "#f59e0b",
    "#8b5cf6",
    "#06b6d4",
    "#84cc16",
    "#f97316",
    "#ec4899",
    "#6366f1",
)

DEFAULT_THEME_VARIABLES: dict[str, str] = {
    "primaryColor": "#3b82f6",
    "primaryTextColor": "#1f2937",
    "primaryBorderColor": "#e5e7eb",
    "lineColor": "#6b7280",
    "secondaryColor": "#f3f4f6",
    "tertiaryColor": "#ffffff",
}


def palette_color(index: int, palette: tuple[str, ...] = CHART_COLORS) -> str:
    """Return the palette entry for ``index``, cycling past the end."""
    return palette[index % len(palette)]


def normalize_hex(color: str) -> str:
    """Expand '#abc' to '#aabbcc' and lowercase; raise ValueError if invalid."""
    h = color.strip().lstrip("#")
    if len(h) == 3:
        h = "".join(c * 2 for c in h)
    if len(h) != 6:
        raise ValueError(f"Not a hex color: {color!r}")
    int(h, 16)
    return f"#{h.lower()}"


@dataclass
class DesignSystem:
    """Brand design system applied across all slides."""
    # Canvas
    width_inches: float = 13.333
    height_inches: float = 7.5

    # Colors
    dark_text: str = "#1f2937"
    muted_text: str = "#4b5563"
    rule_gray: str = "#d1d5db"
    error_red: str = "#ef4444"
    rating_colors: dict[str, str] = field(default_factory=lambda: {
        "restricted": "#dc2626",
        "internal": "#ca8a04",
        "unclassified": "#4b5563",
    })
    chart_palette: tuple[str, ...] = CHART_COLORS

    # Typography
    primary_font: str = "Arial"
    mono_font: str = "Courier New"
    header_size_pt: float = 18.0
    title_size_pt: float = 28.0
    body_size_pt: float = 14.0
    emphasis_size_pt: float = 40.0
    caption_size_pt: float = 10.0

    # Diagram compiler
    diagram_command: str = "mmdc"
    diagram_timeout_s: float | None = 30.0
    diagram_theme_variables: dict[str, str] = field(
        default_factory=lambda: dict(DEFAULT_THEME_VARIABLES))

    def rating_color(self, rating: str) -> str:
        return self.rating_colors.get(rating, self.muted_text)

    def diagram_config(self, theme: str) -> dict[str, Any]:
        """Compiler configuration sent with every diagram compile."""
        return {
            "theme": theme or "default",
            "themeVariables": dict(self.diagram_theme_variables),
            "flowchart": {
                "useMaxWidth": True,
                "htmlLabels": True,
                "curve": "basis",
            },
        }

    def to_dict(self) -> dict:
        return {
            "dimensions": {
                "width_inches": self.width_inches,
                "height_inches": self.height_inches,
            },
            "colors": {
                "dark_text": self.dark_text,
                "muted_text": self.muted_text,
                "rule_gray": self.rule_gray,
                "error_red": self.error_red,
                "rating_colors": dict(self.rating_colors),
                "chart_palette": list(self.chart_palette),
            },
            "typography": {
                "primary_font": self.primary_font,
                "mono_font": self.mono_font,
                "header_size_pt": self.header_size_pt,
                "title_size_pt": self.title_size_pt,
                "body_size_pt": self.body_size_pt,
                "emphasis_size_pt": self.emphasis_size_pt,
                "caption_size_pt": self.caption_size_pt,
            },
            "diagram": {
                "command": self.diagram_command,
                "timeout_s": self.diagram_timeout_s,
                "theme_variables": dict(self.diagram_theme_variables),
            },
        }

    @classmethod
    def from_dict(cls, d: dict) -> "DesignSystem":
        base = cls()
        dims = d.get("dimensions", {})
        colors = d.get("colors", {})
        typo = d.get("typography", {})
        diagram = d.get("diagram", {})
        return cls(
            width_inches=dims.get("width_inches", base.width_inches),
            height_inches=dims.get("height_inches", base.height_inches),
            dark_text=colors.get("dark_text", base.dark_text),
            muted_text=colors.get("muted_text", base.muted_text),
            rule_gray=colors.get("rule_gray", base.rule_gray),
            error_red=colors.get("error_red", base.error_red),
            rating_colors={**base.rating_colors,
                           **colors.get("rating_colors", {})},
            chart_palette=tuple(colors.get("chart_palette", base.chart_palette)),
            primary_font=typo.get("primary_font", base.primary_font),
            mono_font=typo.get("mono_font", base.mono_font),
            header_size_pt=typo.get("header_size_pt", base.header_size_pt),
            title_size_pt=typo.get("title_size_pt", base.title_size_pt),
            body_size_pt=typo.get("body_size_pt", base.body_size_pt),
            emphasis_size_pt=typo.get("emphasis_size_pt", base.emphasis_size_pt),
            caption_size_pt=typo.get("caption_size_pt", base.caption_size_pt),
            diagram_command=diagram.get("command", base.diagram_command),
            diagram_timeout_s=diagram.get("timeout_s", base.diagram_timeout_s),
            diagram_theme_variables={**base.diagram_theme_variables,
                                     **diagram.get("theme_variables", {})},
        )

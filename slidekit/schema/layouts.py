"""Built-in layout schemas.

Every layout shares the same header fields (slide number, section title,
content rating, company logo) and adds its own body fields. Defaults are
declared per layout and are authoritative for that layout; the header
helper only fixes their shape, not the section title default.

Layout ids:
    chart-with-caption       - chart (bar/line/pie/area/scatter) + markdown caption
    column-items             - title + 2-3 cards in a row
    emphasis-text            - one large statement
    hero-image-with-text     - hero image left, markdown right
    key-points-with-summary  - title/description left, 2-3 numbered cards right
    markdown-renderer        - full-slide markdown
    mermaid-with-caption     - diagram + markdown caption
"""

from .contract import define_schema
from .models import (
    ChartType,
    ContentRating,
    DiagramTheme,
    FieldSpec,
    FieldType,
    ImageRef,
    LayoutSchema,
)

PLACEHOLDER_COMPANY_URL = (
    "https://brandyhq.com/wp-content/uploads/2024/12/Hyundai-Logo.jpg"
)
PLACEHOLDER_HERO_IMAGE = "https://picsum.photos/seed/picsum/300/200"


# ---------------------------------------------------------------------------
# Shared header
# ---------------------------------------------------------------------------

def header_fields(section_title: str = "Background") -> list[FieldSpec]:
    """The four header fields every layout starts with."""
    return [
        FieldSpec(
            name="slideNumber",
            field_type=FieldType.NUMBER,
            default=1,
            min_value=1,
            description="Slide sequence number",
        ),
        FieldSpec(
            name="sectionTitle",
            field_type=FieldType.STRING,
            default=section_title,
            min_length=2,
            max_length=50,
            description="Section or slide title displayed in the header",
        ),
        FieldSpec(
            name="contentRating",
            field_type=FieldType.ENUM,
            default=ContentRating.RESTRICTED.value,
            choices=tuple(r.value for r in ContentRating),
            description="Content classification rating",
        ),
        FieldSpec(
            name="companyLogo",
            field_type=FieldType.IMAGE,
            default=ImageRef(url=PLACEHOLDER_COMPANY_URL, prompt="Company logo"),
            description="Brand or company logo",
        ),
    ]


def _card_items(default: list[dict], description: str) -> FieldSpec:
    """A 2-3 element list of heading/description cards."""
    return FieldSpec(
        name="items",
        field_type=FieldType.LIST,
        default=default,
        min_items=2,
        max_items=3,
        fields=[
            FieldSpec(name="heading", field_type=FieldType.STRING,
                      min_length=2, max_length=50,
                      description="Item heading"),
            FieldSpec(name="description", field_type=FieldType.STRING,
                      min_length=10, max_length=130,
                      description="Item description"),
        ],
        description=description,
    )


# ---------------------------------------------------------------------------
# Chart With Caption
# ---------------------------------------------------------------------------

CHART_CAPTION_DEFAULT = """## Findings

This chart **highlights** trends in performance across years.

Notice the steady increase in values, indicating positive growth."""


def build_chart_with_caption_schema() -> LayoutSchema:
    return define_schema(
        "chart-with-caption",
        header_fields("Background") + [
            FieldSpec(
                name="chartCaption",
                field_type=FieldType.STRING,
                default=CHART_CAPTION_DEFAULT,
                min_length=8,
                max_length=200,
                description="Markdown caption explaining the chart",
            ),
            FieldSpec(
                name="chartType",
                field_type=FieldType.ENUM,
                default=ChartType.LINE.value,
                choices=tuple(c.value for c in ChartType),
                description="Chart form: bar, line, pie, area or scatter",
            ),
            FieldSpec(
                name="data",
                field_type=FieldType.LIST,
                default=[
                    {"name": "2021", "value": 5},
                    {"name": "2022", "value": 12},
                    {"name": "2023", "value": 18},
                    {"name": "2024", "value": 23},
                    {"name": "2025", "value": 26},
                ],
                min_items=2,
                max_items=12,
                fields=[
                    FieldSpec(name="name", field_type=FieldType.STRING),
                    FieldSpec(name="value", field_type=FieldType.NUMBER),
                    FieldSpec(name="category", field_type=FieldType.STRING,
                              optional=True),
                    FieldSpec(name="x", field_type=FieldType.NUMBER,
                              optional=True,
                              description="Horizontal coordinate (scatter)"),
                    FieldSpec(name="y", field_type=FieldType.NUMBER,
                              optional=True,
                              description="Vertical coordinate (scatter)"),
                ],
                description="Data points (2-12)",
            ),
            FieldSpec(name="dataKey", field_type=FieldType.STRING,
                      default="value",
                      description="Data point field holding the numeric value"),
            FieldSpec(name="categoryKey", field_type=FieldType.STRING,
                      default="name",
                      description="Data point field holding the category label"),
            FieldSpec(name="color", field_type=FieldType.STRING,
                      default="#3b82f6",
                      description="Primary series color"),
            FieldSpec(name="showLegend", field_type=FieldType.BOOLEAN,
                      default=False),
            FieldSpec(name="showTooltip", field_type=FieldType.BOOLEAN,
                      default=True),
        ],
        description=(
            "Chart With Caption Layout: a prominent chart visualization "
            "(bar, line, area, pie or scatter) with a markdown caption above "
            "it. Ideal for data insights, trends and comparisons."
        ),
    )


# ---------------------------------------------------------------------------
# Column Items
# ---------------------------------------------------------------------------

def build_column_items_schema() -> LayoutSchema:
    return define_schema(
        "column-items",
        header_fields("Overview") + [
            FieldSpec(name="title", field_type=FieldType.STRING,
                      default="Main Title", min_length=3, max_length=50,
                      description="Main title of the slide"),
            _card_items(
                [
                    {"heading": "First Point",
                     "description": "Description for the first key point "
                                    "that explains important details"},
                    {"heading": "Second Point",
                     "description": "Description for the second key point "
                                    "with relevant information"},
                    {"heading": "Third Point",
                     "description": "Description for the third key point "
                                    "highlighting crucial aspects"},
                ],
                "List of content items (2-3 items)",
            ),
        ],
        description=(
            "Column Items Layout: up to 3 cards in a horizontal row, each "
            "with a short heading and description. Ideal for features, "
            "benefits or comparisons."
        ),
    )


# ---------------------------------------------------------------------------
# Emphasis Text
# ---------------------------------------------------------------------------

def build_emphasis_text_schema() -> LayoutSchema:
    return define_schema(
        "emphasis-text",
        header_fields("Background") + [
            FieldSpec(
                name="emphasiseText",
                field_type=FieldType.STRING,
                default="Driving Growth Through Innovation and Execution Excellence",
                max_length=150,
                description="Large central emphasised text (max 3 lines, 150 chars)",
            ),
        ],
        description=(
            "Emphasis Text Layout: a large, bold, centred text block for key "
            "facts, impactful statements or quotes."
        ),
    )


# ---------------------------------------------------------------------------
# Hero Image With Text
# ---------------------------------------------------------------------------

def build_hero_image_with_text_schema() -> LayoutSchema:
    return define_schema(
        "hero-image-with-text",
        header_fields("Overview") + [
            FieldSpec(
                name="heroImage",
                field_type=FieldType.IMAGE,
                default=ImageRef(url=PLACEHOLDER_HERO_IMAGE,
                                 prompt="Hero visual for the slide"),
                description="Main hero image shown on left side",
            ),
            FieldSpec(
                name="bodyText",
                field_type=FieldType.STRING,
                default=("This is where your key supporting message goes. "
                         "Keep it clear, concise, and aligned with the visual."),
                max_length=500,
                description="Markdown text displayed alongside the hero image",
            ),
        ],
        description=(
            "Hero Image With Text Content Layout: a large hero image on the "
            "left and a markdown text area on the right."
        ),
    )


# ---------------------------------------------------------------------------
# Key Points With Summary
# ---------------------------------------------------------------------------

def build_key_points_with_summary_schema() -> LayoutSchema:
    return define_schema(
        "key-points-with-summary",
        header_fields("Key Points") + [
            FieldSpec(name="title", field_type=FieldType.STRING,
                      default="Key Points", min_length=3, max_length=50,
                      description="Main title of the slide"),
            FieldSpec(
                name="description",
                field_type=FieldType.STRING,
                default=("Here is the main description that provides context "
                         "and introduction to the numbered points on the "
                         "right side."),
                min_length=10,
                max_length=130,
                description="Main description text",
            ),
            _card_items(
                [
                    {"heading": "First Key Point",
                     "description": "Detailed explanation of the first "
                                    "important point that supports the main topic"},
                    {"heading": "Second Key Point",
                     "description": "Detailed explanation of the second "
                                    "important point with relevant information"},
                    {"heading": "Third Key Point",
                     "description": "Detailed explanation of the third "
                                    "important point that concludes the discussion"},
                ],
                "List of numbered items (2-3 items)",
            ),
        ],
        description=(
            "Key Points With Summary Layout: title and description on the "
            "left, up to 3 numbered cards stacked on the right."
        ),
    )


# ---------------------------------------------------------------------------
# Markdown Renderer
# ---------------------------------------------------------------------------

MARKDOWN_DEFAULT = """- **Git** enables version control by tracking changes in source code across multiple locations.
- Developed by *Linus Torvalds* in **2005**.
- Trusted by more than *80%* of global software teams.
- Facilitates feature branching, change history, and team collaboration.
- Integrated with services such as **GitHub**, **GitLab**, and **Bitbucket**."""


def build_markdown_renderer_schema() -> LayoutSchema:
    return define_schema(
        "markdown-renderer",
        header_fields("Background") + [
            FieldSpec(
                name="markdownContent",
                field_type=FieldType.STRING,
                default=MARKDOWN_DEFAULT,
                max_length=500,
                description=("Markdown content to display in the slide "
                             "center, use for code snippets, tables etc..."),
            ),
        ],
        description=(
            "Markdown Renderer Layout: the whole slide body is rich markdown "
            "(code blocks, tables, lists, checkboxes, links)."
        ),
    )


# ---------------------------------------------------------------------------
# Mermaid With Caption
# ---------------------------------------------------------------------------

MERMAID_DEFAULT = """graph LR
    A[Start] --> B{Is it working?}
    B -->|Yes| C[Great!]
    B -->|No| D[Fix it]
    D --> B
    C --> E[End]"""


def build_mermaid_with_caption_schema() -> LayoutSchema:
    return define_schema(
        "mermaid-with-caption",
        header_fields("Background") + [
            FieldSpec(name="mermaidCode", field_type=FieldType.STRING,
                      default=MERMAID_DEFAULT, min_length=10,
                      description="Mermaid diagram source"),
            FieldSpec(
                name="theme",
                field_type=FieldType.ENUM,
                default=DiagramTheme.NEUTRAL.value,
                choices=tuple(t.value for t in DiagramTheme),
                description="Diagram theme",
            ),
            FieldSpec(
                name="caption",
                field_type=FieldType.STRING,
                default=("## Diagram Explanation\n\n"
                         "This Mermaid diagram **visualizes** the process flow."),
                min_length=8,
                max_length=200,
                description="Markdown caption explaining the diagram",
            ),
        ],
        description=(
            "Mermaid With Caption Layout: a Mermaid diagram (flowchart, "
            "sequence, class, state, gantt, ...) with a markdown caption."
        ),
    )


LAYOUT_SCHEMA_BUILDERS = {
    "chart-with-caption": build_chart_with_caption_schema,
    "column-items": build_column_items_schema,
    "emphasis-text": build_emphasis_text_schema,
    "hero-image-with-text": build_hero_image_with_text_schema,
    "key-points-with-summary": build_key_points_with_summary_schema,
    "markdown-renderer": build_markdown_renderer_schema,
    "mermaid-with-caption": build_mermaid_with_caption_schema,
}

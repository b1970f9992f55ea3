"""Image placement - draws ImageRef fields onto a slide.

The renderer never downloads images. ``PlaceholderImagePlacer`` draws a
labelled frame carrying the prompt (alt text) and keeps the URL on the shape
so a later export step can swap the real picture in. ``LocalFileImagePlacer``
inserts the picture when the URL points at a readable local file.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol
from urllib.parse import urlparse

from pptx.dml.color import RGBColor
from pptx.enum.shapes import MSO_SHAPE
from pptx.enum.text import MSO_ANCHOR, PP_ALIGN
from pptx.util import Inches, Pt

from slidekit.schema.design_system import DesignSystem, normalize_hex
from slidekit.schema.models import ImageRef, Position

logger = logging.getLogger(__name__)


class ImagePlacer(Protocol):
    def place(self, slide, image: ImageRef, position: Position,
              design: DesignSystem):
        ...


def _rgb(hex_color: str) -> RGBColor:
    return RGBColor.from_string(normalize_hex(hex_color).lstrip("#").upper())


class PlaceholderImagePlacer:
    """Draws a bordered box labelled with the image prompt."""

    def place(self, slide, image: ImageRef, position: Position,
              design: DesignSystem):
        shape = slide.shapes.add_shape(
            MSO_SHAPE.RECTANGLE,
            Inches(position.left), Inches(position.top),
            Inches(position.width), Inches(position.height),
        )
        # The URL rides on the shape name; descr holds the alt text.
        shape.name = f"image:{image.url}"
        shape._element.nvSpPr.cNvPr.set("descr", image.prompt)
        shape.fill.background()
        shape.line.color.rgb = _rgb(design.rule_gray)
        shape.shadow.inherit = False

        tf = shape.text_frame
        tf.word_wrap = True
        tf.vertical_anchor = MSO_ANCHOR.MIDDLE
        p = tf.paragraphs[0]
        p.alignment = PP_ALIGN.CENTER
        run = p.add_run()
        run.text = image.prompt or "Image"
        run.font.name = design.primary_font
        run.font.size = Pt(design.caption_size_pt)
        run.font.color.rgb = _rgb(design.muted_text)
        return shape


class LocalFileImagePlacer:
    """Inserts local image files; anything else becomes a placeholder."""

    def __init__(self, fallback: ImagePlacer | None = None) -> None:
        self.fallback = fallback or PlaceholderImagePlacer()

    @staticmethod
    def local_path(url: str) -> Path | None:
        parsed = urlparse(url)
        if parsed.scheme not in ("", "file"):
            return None
        path = Path(parsed.path if parsed.scheme == "file" else url)
        return path if path.is_file() else None

    def place(self, slide, image: ImageRef, position: Position,
              design: DesignSystem):
        path = self.local_path(image.url)
        if path is None:
            return self.fallback.place(slide, image, position, design)
        picture = slide.shapes.add_picture(
            str(path), Inches(position.left), Inches(position.top),
            height=Inches(position.height),
        )
        if picture.width > Inches(position.width):
            ratio = Inches(position.width) / picture.width
            picture.width = Inches(position.width)
            picture.height = int(picture.height * ratio)
        picture._element.nvPicPr.cNvPr.set("descr", image.prompt)
        logger.debug("Placed local image %s", path)
        return picture

import asyncio
import io

import pytest
from PIL import Image
from pptx import Presentation


def make_png(width=40, height=20, color=(59, 130, 246)):
    buf = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buf, format="PNG")
    return buf.getvalue()


class FakeCompiler:
    """Diagram compiler double: returns a PNG, or raises for bad source."""

    def __init__(self, image=None, fail_on="invalid"):
        self.image = image or make_png()
        self.fail_on = fail_on
        self.calls = []

    async def compile(self, source, theme, config):
        self.calls.append((source, theme, config))
        await asyncio.sleep(0)
        if self.fail_on and self.fail_on in source:
            raise RuntimeError("Parse error on line 1")
        return self.image


@pytest.fixture
def png_bytes():
    return make_png()


@pytest.fixture
def fake_compiler():
    return FakeCompiler()


@pytest.fixture
def slide():
    prs = Presentation()
    return prs.slides.add_slide(prs.slide_layouts[6])

"""Diagram render lifecycle - compiles diagram source text asynchronously.

State machine per display slot::

    IDLE -> COMPILING -> RENDERED
                      -> FAILED

Every ``render`` call is a fresh attempt tagged with the next sequence
number. The slot is cleared before the compiler is invoked, and a result
(or failure) is only installed if its attempt is still the latest one; a
late result from a superseded attempt is dropped. Compiler failures install
a fixed error placeholder and are never raised to the caller.

Usage::

    renderer = DiagramRenderer(MermaidCliCompiler(), PptxDisplaySlot(slide, pos))
    state = await renderer.render(DiagramSpec(source, theme="neutral"))
"""

from __future__ import annotations

import asyncio
import io
import json
import logging
import tempfile
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Protocol

from pptx.dml.color import RGBColor
from pptx.enum.text import MSO_ANCHOR, PP_ALIGN
from pptx.util import Inches, Pt

from slidekit.errors import DiagramCompileError
from slidekit.schema.design_system import DesignSystem, normalize_hex
from slidekit.schema.models import DiagramTheme, Position

logger = logging.getLogger(__name__)

DIAGRAM_ERROR_MESSAGE = "Error rendering diagram - check syntax"


class DiagramState(Enum):
    IDLE = "idle"
    COMPILING = "compiling"
    RENDERED = "rendered"
    FAILED = "failed"


@dataclass(frozen=True)
class DiagramSpec:
    """Diagram source text plus the theme to compile it with."""
    source: str
    theme: str = DiagramTheme.NEUTRAL.value


# ---------------------------------------------------------------------------
# Compiler
# ---------------------------------------------------------------------------

class DiagramCompiler(Protocol):
    """Turns diagram source into image bytes, or raises."""

    async def compile(self, source: str, theme: str,
                      config: dict[str, Any]) -> bytes:
        ...


class MermaidCliCompiler:
    """Compiles Mermaid source to PNG with the ``mmdc`` command line tool.

    Parameters
    ----------
    command : str
        Executable name or path of the Mermaid CLI.
    timeout : float | None
        Seconds to wait for one compile; None waits forever.
    scale : int
        Puppeteer scale factor, higher gives sharper pictures.
    background : str
        Background color passed to ``mmdc -b``.
    """

    def __init__(self, command: str = "mmdc", timeout: float | None = 30.0,
                 scale: int = 2, background: str = "white") -> None:
        self.command = command
        self.timeout = timeout
        self.scale = scale
        self.background = background

    def build_argv(self, input_path: Path, output_path: Path,
                   config_path: Path, theme: str) -> list[str]:
        return [
            self.command,
            "-i", str(input_path),
            "-o", str(output_path),
            "-c", str(config_path),
            "-t", theme,
            "-b", self.background,
            "-s", str(self.scale),
        ]

    @staticmethod
    async def _terminate(proc) -> None:
        try:
            proc.kill()
        except ProcessLookupError:
            pass
        await proc.wait()

    async def compile(self, source: str, theme: str,
                      config: dict[str, Any]) -> bytes:
        with tempfile.TemporaryDirectory(prefix="slidekit-diagram-") as tmp:
            tmp_dir = Path(tmp)
            input_path = tmp_dir / "diagram.mmd"
            output_path = tmp_dir / "diagram.png"
            config_path = tmp_dir / "config.json"
            input_path.write_text(source, encoding="utf-8")
            config_path.write_text(json.dumps(config), encoding="utf-8")

            argv = self.build_argv(input_path, output_path, config_path, theme)
            try:
                proc = await asyncio.create_subprocess_exec(
                    *argv,
                    stdout=asyncio.subprocess.PIPE,
                    stderr=asyncio.subprocess.PIPE,
                )
            except FileNotFoundError as exc:
                raise DiagramCompileError(
                    f"Diagram compiler not found: {self.command}") from exc

            try:
                _, stderr = await asyncio.wait_for(proc.communicate(),
                                                   self.timeout)
            except asyncio.TimeoutError as exc:
                await self._terminate(proc)
                raise DiagramCompileError(
                    f"Diagram compile timed out after {self.timeout}s") from exc
            except BaseException:
                # Cancelled: do not leave mmdc running.
                await self._terminate(proc)
                raise

            if proc.returncode != 0:
                detail = stderr.decode("utf-8", errors="replace").strip()
                raise DiagramCompileError(
                    detail or f"{self.command} exited with {proc.returncode}")
            if not output_path.exists():
                raise DiagramCompileError(f"{self.command} produced no output")
            return output_path.read_bytes()


# ---------------------------------------------------------------------------
# Display slots
# ---------------------------------------------------------------------------

class DisplaySlot(Protocol):
    """The area a diagram is drawn into."""

    def clear(self) -> None:
        ...

    def install(self, image: bytes) -> None:
        ...

    def install_error(self, message: str) -> None:
        ...


@dataclass
class MemoryDisplaySlot:
    """Keeps the displayed content in memory; used for previews and tests.

    ``content`` is the image bytes, the error message, or None when clear.
    ``events`` records every mutation in order.
    """
    content: bytes | str | None = None
    events: list[tuple[str, Any]] = field(default_factory=list)

    def clear(self) -> None:
        self.content = None
        self.events.append(("clear", None))

    def install(self, image: bytes) -> None:
        self.content = image
        self.events.append(("install", image))

    def install_error(self, message: str) -> None:
        self.content = message
        self.events.append(("error", message))


class PptxDisplaySlot:
    """A rectangular region of a python-pptx slide.

    Only shapes added by this slot are removed on ``clear``.
    """

    def __init__(self, slide, position: Position,
                 design: DesignSystem | None = None) -> None:
        self.slide = slide
        self.position = position
        self.design = design or DesignSystem()
        self.shapes: list = []

    def clear(self) -> None:
        for shape in self.shapes:
            element = shape._element
            parent = element.getparent()
            if parent is not None:
                parent.remove(element)
        self.shapes = []

    def install(self, image: bytes) -> None:
        pos = self.position
        picture = self.slide.shapes.add_picture(
            io.BytesIO(image), Inches(pos.left), Inches(pos.top))
        self.shapes.append(picture)
        # Fit inside the slot, keep aspect ratio, centre.
        box_w, box_h = Inches(pos.width), Inches(pos.height)
        scale = min(box_w / picture.width, box_h / picture.height)
        picture.width = int(picture.width * scale)
        picture.height = int(picture.height * scale)
        picture.left = int(Inches(pos.left) + (box_w - picture.width) / 2)
        picture.top = int(Inches(pos.top) + (box_h - picture.height) / 2)
        picture.name = "diagram"

    def install_error(self, message: str) -> None:
        pos = self.position
        txbox = self.slide.shapes.add_textbox(
            Inches(pos.left), Inches(pos.top),
            Inches(pos.width), Inches(pos.height),
        )
        txbox.name = "diagram-error"
        tf = txbox.text_frame
        tf.word_wrap = True
        tf.vertical_anchor = MSO_ANCHOR.MIDDLE
        p = tf.paragraphs[0]
        p.alignment = PP_ALIGN.CENTER
        run = p.add_run()
        run.text = message
        run.font.name = self.design.primary_font
        run.font.size = Pt(self.design.body_size_pt)
        run.font.bold = True
        run.font.color.rgb = RGBColor.from_string(
            normalize_hex(self.design.error_red).lstrip("#").upper())
        self.shapes.append(txbox)


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------

class DiagramRenderer:
    """Runs compile attempts for one display slot with supersession.

    Parameters
    ----------
    compiler : DiagramCompiler
        The external compiler.
    slot : DisplaySlot
        Where results and error placeholders are installed.
    design : DesignSystem | None
        Supplies the theme variables sent with every compile.
    """

    def __init__(self, compiler: DiagramCompiler, slot: DisplaySlot,
                 design: DesignSystem | None = None) -> None:
        self.compiler = compiler
        self.slot = slot
        self.design = design or DesignSystem()
        self.state = DiagramState.IDLE
        self._sequence = 0

    @property
    def sequence(self) -> int:
        """Number of the latest attempt issued (0 before the first)."""
        return self._sequence

    def _is_current(self, attempt: int) -> bool:
        return attempt == self._sequence

    async def render(self, spec: DiagramSpec) -> DiagramState | None:
        """Compile ``spec`` and install the result if still current.

        Returns the final state of this attempt, or None if a newer attempt
        superseded it before it finished.
        """
        self._sequence += 1
        attempt = self._sequence

        self.slot.clear()
        self.state = DiagramState.COMPILING
        config = self.design.diagram_config(spec.theme)

        try:
            image = await self.compiler.compile(spec.source, spec.theme, config)
        except Exception as exc:
            return self._fail(attempt, exc)

        if not self._is_current(attempt):
            logger.debug("Dropping result of superseded diagram attempt %d",
                         attempt)
            return None
        try:
            self.slot.install(image)
        except Exception as exc:
            # Output the slot cannot place (e.g. not a raster image).
            return self._fail(attempt, exc)
        self.state = DiagramState.RENDERED
        return self.state

    def _fail(self, attempt: int, exc: Exception) -> DiagramState | None:
        if not self._is_current(attempt):
            logger.debug("Dropping failure of superseded diagram attempt %d",
                         attempt)
            return None
        logger.warning("Diagram attempt %d failed: %s", attempt, exc)
        self.slot.clear()
        self.slot.install_error(DIAGRAM_ERROR_MESSAGE)
        self.state = DiagramState.FAILED
        return self.state

    def submit(self, spec: DiagramSpec) -> asyncio.Task:
        """Schedule ``render`` on the running loop and return its task."""
        return asyncio.ensure_future(self.render(spec))

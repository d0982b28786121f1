"""Progressive answer reveal.

An answer is revealed one character per tick. Every tick re-renders the
whole revealed prefix: as Markdown (plus the post-render enhancer) in rich
mode, verbatim in plain mode. The display mode is read once per tick, so
toggling it mid-reveal takes effect on the next character.

Only one reveal may write to the display at a time; RevealController
cancels and awaits the previous reveal before starting the next.
"""

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum

import markdown

from shniro.ui.enhance import enhance

logger = logging.getLogger(__name__)

DEFAULT_TICK_SECONDS = 0.01

MARKDOWN_EXTENSIONS = ["fenced_code", "tables", "sane_lists"]


class DisplayMode(str, Enum):
    """How the answer is displayed."""

    RICH = "rich"
    PLAIN = "plain"


class RevealState(str, Enum):
    """Lifecycle of one answer reveal."""

    IDLE = "idle"
    REVEALING = "revealing"
    SETTLED = "settled"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class Frame:
    """One visual state of the answer display.

    Attributes:
        revealed: Source text revealed so far.
        mode: Mode the frame was rendered in.
        content: HTML in rich mode, the revealed text itself in plain mode.
        final: True for the closing full render pass.
    """

    revealed: str
    mode: DisplayMode
    content: str
    final: bool = False


FrameHandler = Callable[[Frame], Awaitable[None] | None]


def normalize_answer(text: str) -> str:
    """Turn literal backslash-n sequences into real newlines."""
    return text.replace("\\n", "\n")


def render_markdown(source: str) -> str:
    """Render Markdown to HTML and decorate it."""
    return enhance(markdown.markdown(source, extensions=MARKDOWN_EXTENSIONS))


def render_frame(revealed: str, mode: DisplayMode, final: bool = False) -> Frame:
    if mode is DisplayMode.RICH:
        content = render_markdown(revealed)
    else:
        content = revealed
    return Frame(revealed=revealed, mode=mode, content=content, final=final)


class ProgressiveRenderer:
    """Reveals a single answer, emitting one frame per tick."""

    def __init__(
        self,
        text: str,
        on_frame: FrameHandler,
        mode: Callable[[], DisplayMode],
        tick: float = DEFAULT_TICK_SECONDS,
    ) -> None:
        self.source = normalize_answer(text)
        self.state = RevealState.IDLE
        self._on_frame = on_frame
        self._mode = mode
        self._tick = tick

    async def _emit(self, frame: Frame) -> None:
        result = self._on_frame(frame)
        if inspect.isawaitable(result):
            await result

    async def run(self) -> None:
        """Reveal the answer until settled or cancelled."""
        self.state = RevealState.REVEALING
        try:
            for end in range(1, len(self.source) + 1):
                await self._emit(render_frame(self.source[:end], self._mode()))
                await asyncio.sleep(self._tick)
            if self._mode() is DisplayMode.RICH:
                await self._emit(render_frame(self.source, DisplayMode.RICH, final=True))
        except asyncio.CancelledError:
            self.state = RevealState.CANCELLED
            raise
        self.state = RevealState.SETTLED


class RevealController:
    """Owns the active reveal for one display surface."""

    def __init__(
        self,
        on_frame: FrameHandler,
        mode: Callable[[], DisplayMode],
        tick: float = DEFAULT_TICK_SECONDS,
    ) -> None:
        self._on_frame = on_frame
        self._mode = mode
        self._tick = tick
        self.current: ProgressiveRenderer | None = None
        self._task: asyncio.Task[None] | None = None

    async def start(self, text: str) -> ProgressiveRenderer:
        """Cancel any running reveal, then start revealing ``text``."""
        await self.cancel()
        renderer = ProgressiveRenderer(text, self._on_frame, self._mode, self._tick)
        self.current = renderer
        self._task = asyncio.create_task(renderer.run())
        return renderer

    async def cancel(self) -> None:
        """Cancel the running reveal and wait for it to stop."""
        task, self._task = self._task, None
        if task is None or task.done():
            return
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)
        logger.debug("Cancelled previous reveal")

    async def wait(self) -> None:
        """Wait for the running reveal to finish."""
        if self._task is not None:
            await self._task

"""Freehand scratchpad.

A fixed-size RGB surface filled with a background colour. The pen paints
a thin dark stroke; the eraser paints a wider stroke in the background
colour (it covers, it does not remove). No stroke history is kept: the
only externally visible state is the PNG snapshot emitted when a stroke
ends, encoded as a ``data:image/png;base64,...`` URI.

Stroke state machine:

    Idle --begin_stroke--> Drawing(last)
    Drawing --extend_stroke--> Drawing(new last)
    Drawing --end_stroke--> Idle        (emits snapshot)
    extend_stroke / end_stroke in Idle are ignored
"""

from __future__ import annotations

import base64
import binascii
import io
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Union

import structlog
from PIL import Image, ImageDraw, UnidentifiedImageError

logger = structlog.get_logger(__name__)

DATA_URI_PREFIX = "data:image/png;base64,"

DEFAULT_WIDTH = 800
DEFAULT_HEIGHT = 500
DEFAULT_BACKGROUND = "#ffffff"
DEFAULT_PEN_COLOR = "#1a1a2e"
DEFAULT_PEN_WIDTH = 2
DEFAULT_ERASER_WIDTH = 20


class ScratchpadError(Exception):
    """Raised for undecodable snapshots or malformed input events."""


class Tool(str, Enum):
    PEN = "pen"
    ERASER = "eraser"


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class Bounds:
    """Bounding box of the surface in client coordinates."""

    left: float = 0.0
    top: float = 0.0


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Drawing:
    last: Point


StrokeState = Union[Idle, Drawing]

SnapshotListener = Callable[[Union[str, None]], None]


def point_from_event(event: dict[str, Any], bounds: Bounds = Bounds()) -> Point:
    """Surface-local position of a pointer or touch event.

    Touch events carry their coordinates in ``touches[0]``; pointer events
    carry ``clientX``/``clientY`` directly.

    Raises:
        ScratchpadError: If the event has no usable coordinates
    """
    source = event
    touches = event.get("touches")
    if touches:
        source = touches[0]
    try:
        x = float(source["clientX"])
        y = float(source["clientY"])
    except (KeyError, TypeError, ValueError) as e:
        raise ScratchpadError(f"Event has no client coordinates: {event!r}") from e
    return Point(x - bounds.left, y - bounds.top)


def encode_snapshot(image: Image.Image) -> str:
    """Encode a surface as a PNG data URI."""
    buf = io.BytesIO()
    image.save(buf, format="PNG")
    return DATA_URI_PREFIX + base64.b64encode(buf.getvalue()).decode("ascii")


def decode_snapshot(data_uri: str) -> Image.Image:
    """Decode a data URI produced by encode_snapshot (or any browser canvas).

    Raises:
        ScratchpadError: If the string is not a decodable image data URI
    """
    header, sep, payload = data_uri.partition(",")
    if not sep or not header.startswith("data:image/") or ";base64" not in header:
        raise ScratchpadError("Snapshot is not a base64 image data URI")
    try:
        raw = base64.b64decode(payload, validate=True)
        image = Image.open(io.BytesIO(raw))
        image.load()
    except (binascii.Error, UnidentifiedImageError, OSError) as e:
        raise ScratchpadError(f"Snapshot could not be decoded: {e}") from e
    return image


class Scratchpad:
    """A drawing surface with pen/eraser tools and snapshot capture.

    Args:
        width: Surface width in pixels
        height: Surface height in pixels
        saved_snapshot: Data URI drawn onto the fresh surface at (0, 0)
        on_snapshot: Called with each emitted snapshot (None after a clear)
    """

    def __init__(
        self,
        width: int = DEFAULT_WIDTH,
        height: int = DEFAULT_HEIGHT,
        *,
        background: str = DEFAULT_BACKGROUND,
        pen_color: str = DEFAULT_PEN_COLOR,
        pen_width: int = DEFAULT_PEN_WIDTH,
        eraser_width: int = DEFAULT_ERASER_WIDTH,
        saved_snapshot: str | None = None,
        on_snapshot: SnapshotListener | None = None,
    ):
        self.width = width
        self.height = height
        self.background = background
        self.pen_color = pen_color
        self.pen_width = pen_width
        self.eraser_width = eraser_width
        self.on_snapshot = on_snapshot
        self.tool = Tool.PEN
        self._state: StrokeState = Idle()
        self._image = Image.new("RGB", (width, height), background)
        self._blank = True

        if saved_snapshot:
            self.load_snapshot(saved_snapshot)

    @property
    def state(self) -> StrokeState:
        return self._state

    @property
    def is_drawing(self) -> bool:
        return isinstance(self._state, Drawing)

    @property
    def is_blank(self) -> bool:
        """True until something is drawn or loaded after the last clear."""
        return self._blank

    def select_tool(self, tool: Tool | str) -> None:
        self.tool = Tool(tool)

    def load_snapshot(self, data_uri: str) -> None:
        """Draw a saved snapshot onto the surface at the top-left corner.

        Raises:
            ScratchpadError: If the snapshot cannot be decoded
        """
        saved = decode_snapshot(data_uri).convert("RGBA")
        self._image.paste(saved, (0, 0), saved)
        self._blank = False

    def begin_stroke(self, point: Point) -> None:
        """Record the starting position and enter the drawing state."""
        self._state = Drawing(last=point)

    def extend_stroke(self, point: Point) -> None:
        """Paint a segment from the last position to point.

        Ignored unless a stroke is in progress.
        """
        state = self._state
        if not isinstance(state, Drawing):
            return

        if self.tool is Tool.ERASER:
            color, width = self.background, self.eraser_width
        else:
            color, width = self.pen_color, self.pen_width

        _round_line(ImageDraw.Draw(self._image), state.last, point, color, width)
        self._blank = False
        self._state = Drawing(last=point)

    def end_stroke(self) -> str | None:
        """Finish the stroke and emit the snapshot.

        Returns:
            The emitted snapshot; None if the surface is blank or no stroke
            was in progress (in which case nothing is emitted)
        """
        if not isinstance(self._state, Drawing):
            return None

        self._state = Idle()
        snapshot = None if self._blank else self.snapshot()
        self._emit(snapshot)
        return snapshot

    def clear(self) -> None:
        """Refill the surface with the background and emit an absent snapshot."""
        self._image = Image.new("RGB", (self.width, self.height), self.background)
        self._blank = True
        self._emit(None)

    def snapshot(self) -> str:
        """Current surface as a PNG data URI."""
        return encode_snapshot(self._image)

    def image(self) -> Image.Image:
        """Copy of the current surface."""
        return self._image.copy()

    def _emit(self, snapshot: str | None) -> None:
        if self.on_snapshot is not None:
            self.on_snapshot(snapshot)


# Browser event names accepted alongside the plain stroke actions
_EVENT_ACTIONS = {
    "begin": "begin",
    "mousedown": "begin",
    "pointerdown": "begin",
    "touchstart": "begin",
    "extend": "extend",
    "mousemove": "extend",
    "pointermove": "extend",
    "touchmove": "extend",
    "end": "end",
    "mouseup": "end",
    "mouseleave": "end",
    "pointerup": "end",
    "touchend": "end",
    "clear": "clear",
    "tool": "tool",
}


def apply_event(pad: Scratchpad, event: dict[str, Any], bounds: Bounds = Bounds()) -> None:
    """Feed one input event to the scratchpad.

    ``event["type"]`` is a stroke action (begin, extend, end, clear, tool)
    or the matching mouse/pointer/touch event name. Tool events carry
    ``event["tool"]``.

    Raises:
        ScratchpadError: On an unknown event type, tool or missing coordinates
    """
    action = _EVENT_ACTIONS.get(str(event.get("type", "")).lower())
    if action is None:
        raise ScratchpadError(f"Unknown scratchpad event: {event.get('type')!r}")

    if action == "begin":
        pad.begin_stroke(point_from_event(event, bounds))
    elif action == "extend":
        if pad.is_drawing:
            pad.extend_stroke(point_from_event(event, bounds))
    elif action == "end":
        pad.end_stroke()
    elif action == "clear":
        pad.clear()
    else:
        try:
            pad.select_tool(event.get("tool", ""))
        except ValueError as e:
            raise ScratchpadError(f"Unknown tool: {event.get('tool')!r}") from e


def _round_line(
    draw: ImageDraw.ImageDraw,
    start: Point,
    end: Point,
    color: str,
    width: int,
) -> None:
    """Straight segment with round caps, like a canvas ``lineCap='round'``."""
    draw.line([(start.x, start.y), (end.x, end.y)], fill=color, width=width)
    if width > 2:
        r = width / 2
        for p in (start, end):
            draw.ellipse([p.x - r, p.y - r, p.x + r, p.y + r], fill=color)

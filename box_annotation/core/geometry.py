"""
Geometry primitives for rectangle annotation.

Pure functions and small value types shared by the drawing state machine,
the annotation store and the render pipeline. Coordinates are image pixels
with the origin at the top-left corner.
"""

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class Point:
    """A position on the canvas, in image pixels."""

    x: float
    y: float


@dataclass(frozen=True)
class Rectangle:
    """
    Axis-aligned rectangle.

    Width and height may be negative while a drag is in progress (the
    pointer can move towards any of the four quadrants of the origin).
    Use `normalize` before storing it.
    """

    x: float
    y: float
    width: float
    height: float

    @property
    def area(self) -> float:
        return abs(self.width * self.height)

    @property
    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0

    @property
    def is_normalized(self) -> bool:
        return self.width >= 0 and self.height >= 0

    def corners(self) -> Tuple[Point, Point]:
        """Return the (top-left, bottom-right) corners of the covered area."""
        rect = normalize(self)
        return (
            Point(rect.x, rect.y),
            Point(rect.x + rect.width, rect.y + rect.height),
        )

    def to_dict(self):
        """Convert to dictionary for serialization."""
        return {
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
        }

    @classmethod
    def from_dict(cls, data: dict):
        """Create from dictionary."""
        return cls(
            x=data["x"],
            y=data["y"],
            width=data.get("width", 0),
            height=data.get("height", 0),
        )


@dataclass(frozen=True)
class PointerEvent:
    """Pointer position reported by the host, in viewport coordinates."""

    client_x: float
    client_y: float


@dataclass(frozen=True)
class CanvasElement:
    """
    Placement of the drawing surface inside its container.

    `width`/`height` are the intrinsic canvas size, which always matches the
    natural size of the loaded image. `display_width`/`display_height` are
    the size the host actually shows it at; leave them unset when the canvas
    is shown at 1:1.
    """

    left: float = 0
    top: float = 0
    width: Optional[int] = None
    height: Optional[int] = None
    display_width: Optional[float] = None
    display_height: Optional[float] = None

    @property
    def scale(self) -> Tuple[float, float]:
        sx = sy = 1.0
        if self.width and self.display_width:
            sx = self.width / self.display_width
        if self.height and self.display_height:
            sy = self.height / self.display_height
        return (sx, sy)


def normalize(rect: Rectangle) -> Rectangle:
    """
    Canonicalize a rectangle to non-negative width/height.

    The covered area is unchanged; only the origin moves to the top-left
    corner when the rectangle was dragged leftwards or upwards.
    """
    x, width = rect.x, rect.width
    y, height = rect.y, rect.height
    if width < 0:
        x, width = x + width, -width
    if height < 0:
        y, height = y + height, -height
    return Rectangle(x=x, y=y, width=width, height=height)


def rectangle_from_points(origin: Point, pos: Point) -> Rectangle:
    """Raw (unnormalized) rectangle spanned by a drag from `origin` to `pos`."""
    return Rectangle(
        x=origin.x,
        y=origin.y,
        width=pos.x - origin.x,
        height=pos.y - origin.y,
    )


def to_canvas_coordinates(event: PointerEvent, canvas: CanvasElement) -> Point:
    """
    Convert a pointer event's viewport position into canvas coordinates.

    Args:
        event: Pointer event in viewport coordinates
        canvas: Canvas placement within its container

    Returns:
        Point in image pixels (1 canvas pixel = 1 image pixel)
    """
    sx, sy = canvas.scale
    return Point(
        x=(event.client_x - canvas.left) * sx,
        y=(event.client_y - canvas.top) * sy,
    )


def clip_to_bounds(rect: Rectangle, width: int, height: int) -> Optional[Rectangle]:
    """
    Clip a rectangle to the image bounds.

    Returns:
        Normalized clipped rectangle, or None if nothing is left inside
    """
    rect = normalize(rect)
    x0 = min(max(rect.x, 0), width)
    y0 = min(max(rect.y, 0), height)
    x1 = min(max(rect.x + rect.width, 0), width)
    y1 = min(max(rect.y + rect.height, 0), height)
    if x1 <= x0 or y1 <= y0:
        return None
    return Rectangle(x=x0, y=y0, width=x1 - x0, height=y1 - y0)

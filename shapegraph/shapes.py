"""Shape records and the ordered drawing that the graph builder consumes."""

from __future__ import annotations

import json
import logging
import math
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, ClassVar, Dict, List, Mapping, Optional, Union

logger = logging.getLogger(__name__)

_LINE_TOLERANCE = 5.0


def _new_shape_id(shape: "Shape") -> str:
    return f"{type(shape).__name__}_{uuid.uuid4().hex[:12]}"


class Shape:
    """Common interface of drawable shapes.

    ``kind`` is the discriminant used by the graph builder for centers and
    labels. ``x``/``y`` is the anchor point: the center for circles, the
    top-left corner for rectangles and the start point for lines.
    """

    kind: ClassVar[str] = "shape"

    x: float
    y: float
    id: str

    def contains(self, px: float, py: float) -> bool:
        raise NotImplementedError

    @property
    def area(self) -> float:
        raise NotImplementedError

    @property
    def perimeter(self) -> float:
        raise NotImplementedError

    @property
    def type_name(self) -> str:
        return type(self).__name__


@dataclass(eq=False)
class Circle(Shape):
    kind: ClassVar[str] = "circle"

    x: float
    y: float
    radius: float
    color: str = "#000000"
    stroke_width: float = 2.0
    id: str = ""

    def __post_init__(self) -> None:
        if not self.id:
            self.id = _new_shape_id(self)

    def contains(self, px: float, py: float) -> bool:
        return math.hypot(px - self.x, py - self.y) <= self.radius

    @property
    def area(self) -> float:
        return math.pi * self.radius * self.radius

    @property
    def perimeter(self) -> float:
        return 2.0 * math.pi * self.radius


@dataclass(eq=False)
class Rectangle(Shape):
    kind: ClassVar[str] = "rectangle"

    x: float
    y: float
    width: float
    height: float
    color: str = "#000000"
    stroke_width: float = 2.0
    id: str = ""

    def __post_init__(self) -> None:
        if not self.id:
            self.id = _new_shape_id(self)

    def contains(self, px: float, py: float) -> bool:
        return self.x <= px <= self.x + self.width and self.y <= py <= self.y + self.height

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def perimeter(self) -> float:
        return 2.0 * (self.width + self.height)


@dataclass(eq=False)
class Line(Shape):
    kind: ClassVar[str] = "line"

    x: float
    y: float
    end_x: float
    end_y: float
    color: str = "#000000"
    stroke_width: float = 2.0
    id: str = ""

    def __post_init__(self) -> None:
        if not self.id:
            self.id = _new_shape_id(self)

    def contains(self, px: float, py: float) -> bool:
        # distance to the infinite line, then a tolerant bounding-box check
        a = self.end_y - self.y
        b = self.x - self.end_x
        c = self.end_x * self.y - self.x * self.end_y
        norm = math.hypot(a, b)
        if norm <= 1e-12:
            distance = math.hypot(px - self.x, py - self.y)
        else:
            distance = abs(a * px + b * py + c) / norm
        tol = _LINE_TOLERANCE
        return (
            distance <= tol
            and min(self.x, self.end_x) - tol <= px <= max(self.x, self.end_x) + tol
            and min(self.y, self.end_y) - tol <= py <= max(self.y, self.end_y) + tol
        )

    @property
    def length(self) -> float:
        return math.hypot(self.end_x - self.x, self.end_y - self.y)

    @property
    def area(self) -> float:
        return 0.0

    @property
    def perimeter(self) -> float:
        return self.length


@dataclass(eq=False)
class Circle3D(Shape):
    """Pseudo-3D circle drawn as an ellipse with half-height minor axis."""

    kind: ClassVar[str] = "circle3d"

    x: float
    y: float
    radius: float
    color: str = "#000000"
    stroke_width: float = 2.0
    id: str = ""

    def __post_init__(self) -> None:
        if not self.id:
            self.id = _new_shape_id(self)

    def contains(self, px: float, py: float) -> bool:
        if self.radius <= 0.0:
            return False
        dx = px - self.x
        dy = py - self.y
        minor = self.radius / 2.0
        return (dx * dx) / (self.radius * self.radius) + (dy * dy) / (minor * minor) <= 1.0

    @property
    def area(self) -> float:
        return math.pi * self.radius * (self.radius / 2.0)

    @property
    def perimeter(self) -> float:
        # Ramanujan's approximation
        a = self.radius
        b = self.radius / 2.0
        if a + b <= 0.0:
            return 0.0
        h = (a - b) ** 2 / (a + b) ** 2
        return math.pi * (a + b) * (1.0 + (3.0 * h) / (10.0 + math.sqrt(4.0 - 3.0 * h)))


@dataclass(eq=False)
class Rectangle3D(Shape):
    """Pseudo-3D box; hit-testing and measures use the front face only."""

    kind: ClassVar[str] = "rectangle3d"

    x: float
    y: float
    width: float
    height: float
    color: str = "#000000"
    stroke_width: float = 2.0
    id: str = ""

    def __post_init__(self) -> None:
        if not self.id:
            self.id = _new_shape_id(self)

    def contains(self, px: float, py: float) -> bool:
        return self.x <= px <= self.x + self.width and self.y <= py <= self.y + self.height

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def perimeter(self) -> float:
        return 2.0 * (self.width + self.height)


@dataclass
class Drawing:
    """Ordered collection of shapes; later shapes are drawn on top."""

    name: str = "Untitled"
    description: str = ""
    _shapes: List[Shape] = field(default_factory=list, repr=False)

    @property
    def shapes(self) -> List[Shape]:
        return list(self._shapes)

    @property
    def shape_count(self) -> int:
        return len(self._shapes)

    def add_shape(self, shape: Shape) -> None:
        self._shapes.append(shape)
        logger.debug("Added %s to drawing %r (%d shapes)", shape.type_name, self.name, len(self._shapes))

    def remove_shape(self, shape: Shape) -> bool:
        for idx, existing in enumerate(self._shapes):
            if existing is shape:
                del self._shapes[idx]
                return True
        return False

    def clear(self) -> None:
        self._shapes.clear()

    def find_shape_at(self, x: float, y: float) -> Optional[Shape]:
        """Return the topmost shape whose hit-test contains ``(x, y)``."""

        for shape in reversed(self._shapes):
            if shape.contains(x, y):
                return shape
        return None

    @property
    def total_area(self) -> float:
        return sum(shape.area for shape in self._shapes)

    @property
    def total_perimeter(self) -> float:
        return sum(shape.perimeter for shape in self._shapes)


def _require(entry: Mapping[str, Any], key: str) -> float:
    if key not in entry:
        raise ValueError(f"shape entry {dict(entry)!r} is missing '{key}'")
    return float(entry[key])


def _style(entry: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "color": str(entry.get("color", "#000000")),
        "stroke_width": float(entry.get("strokeWidth", 2.0)),
    }


_SHAPE_READERS: Dict[str, Callable[[Mapping[str, Any]], Shape]] = {
    "Circle": lambda e: Circle(_require(e, "x"), _require(e, "y"), _require(e, "radius"), **_style(e)),
    "Circle3D": lambda e: Circle3D(_require(e, "x"), _require(e, "y"), _require(e, "radius"), **_style(e)),
    "Rectangle": lambda e: Rectangle(
        _require(e, "x"), _require(e, "y"), _require(e, "width"), _require(e, "height"), **_style(e)
    ),
    "Rectangle3D": lambda e: Rectangle3D(
        _require(e, "x"), _require(e, "y"), _require(e, "width"), _require(e, "height"), **_style(e)
    ),
    "Line": lambda e: Line(_require(e, "x"), _require(e, "y"), _require(e, "endX"), _require(e, "endY"), **_style(e)),
}


def shape_from_dict(entry: Mapping[str, Any]) -> Optional[Shape]:
    """Build a shape from its JSON record, or ``None`` for unknown types."""

    shape_type = entry.get("type")
    reader = _SHAPE_READERS.get(str(shape_type))
    if reader is None:
        logger.error("Unknown shape type %r while reading drawing; skipping entry", shape_type)
        return None
    return reader(entry)


def drawing_from_dict(data: Mapping[str, Any]) -> Drawing:
    if not isinstance(data, Mapping):
        raise ValueError("drawing document must be a JSON object")
    entries = data.get("shapes", [])
    if not isinstance(entries, list):
        raise ValueError("'shapes' must be a list")

    drawing = Drawing(name=str(data.get("name", "Untitled")), description=str(data.get("description", "")))
    for entry in entries:
        if not isinstance(entry, Mapping):
            raise ValueError(f"shape entry must be an object, got {entry!r}")
        shape = shape_from_dict(entry)
        if shape is not None:
            drawing.add_shape(shape)
    logger.info("Loaded drawing %r with %d shapes", drawing.name, drawing.shape_count)
    return drawing


def load_drawing(path: Union[str, Path]) -> Drawing:
    text = Path(path).read_text(encoding="utf-8")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValueError(f"{path}: invalid drawing JSON ({exc})") from exc
    return drawing_from_dict(data)


__all__ = [
    "Shape",
    "Circle",
    "Rectangle",
    "Line",
    "Circle3D",
    "Rectangle3D",
    "Drawing",
    "shape_from_dict",
    "drawing_from_dict",
    "load_drawing",
]

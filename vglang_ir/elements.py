from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from .animatable import Animatable
from .setters import Settable, animatable_field, sequence_field
from .values import Color, Measurement, Point, ViewBox, color, measurement, point, viewbox


def _text(value: object) -> str:
    if not isinstance(value, str):
        raise TypeError(f"expected string, got {value!r}")
    return value


def _number(value: object) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"expected number, got {value!r}")
    return float(value)


def _unit_interval(value: object) -> float:
    number = _number(value)
    if number < 0.0 or number > 1.0:
        raise ValueError("opacity must be in [0, 1]")
    return number


# ---------------------------------------------------------------------------
# Containers
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Layer(Settable):
    """Rendering layer; the backend draws its children into it."""

    width: Animatable[Measurement] = animatable_field(measurement)
    height: Animatable[Measurement] = animatable_field(measurement)
    viewbox: Animatable[ViewBox] | None = animatable_field(viewbox, optional=True)


@dataclass(frozen=True)
class Group(Settable):
    id: str | None = None


@dataclass(frozen=True)
class Text(Settable):
    x: Animatable[Measurement] = animatable_field(measurement, default=0)
    y: Animatable[Measurement] = animatable_field(measurement, default=0)


@dataclass(frozen=True)
class TextSpan(Settable):
    dx: Animatable[Measurement] | None = animatable_field(measurement, optional=True)
    dy: Animatable[Measurement] | None = animatable_field(measurement, optional=True)


# ---------------------------------------------------------------------------
# Attribute scopes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Fill(Settable):
    paint: Animatable[Color] = animatable_field(color)
    opacity: Animatable[float] | None = animatable_field(_unit_interval, optional=True)


@dataclass(frozen=True)
class Stroke(Settable):
    paint: Animatable[Color] = animatable_field(color)
    width: Animatable[Measurement] | None = animatable_field(measurement, optional=True)
    opacity: Animatable[float] | None = animatable_field(_unit_interval, optional=True)


@dataclass(frozen=True)
class Opacity(Settable):
    value: Animatable[float] = animatable_field(_unit_interval)


@dataclass(frozen=True)
class Font(Settable):
    family: tuple[str, ...] = sequence_field(_text)
    size: Animatable[Measurement] | None = animatable_field(measurement, optional=True)
    weight: Animatable[str] | None = animatable_field(str, optional=True)
    style: Animatable[str] | None = animatable_field(_text, optional=True)


@dataclass(frozen=True)
class TextLayout(Settable):
    anchor: Animatable[str] | None = animatable_field(_text, optional=True)
    direction: Animatable[str] | None = animatable_field(_text, optional=True)
    writing_mode: Animatable[str] | None = animatable_field(_text, optional=True)


TransformKind = Literal["translate", "scale", "rotate", "skewX", "skewY", "matrix"]

_TRANSFORM_ARITY: dict[str, tuple[int, ...]] = {
    "translate": (1, 2),
    "scale": (1, 2),
    "rotate": (1, 3),
    "skewX": (1,),
    "skewY": (1,),
    "matrix": (6,),
}


@dataclass(frozen=True)
class TransformOp:
    kind: TransformKind
    args: tuple[float, ...]

    def __post_init__(self) -> None:
        arity = _TRANSFORM_ARITY.get(self.kind)
        if arity is None:
            raise ValueError(f"unsupported transform kind: {self.kind}")
        if len(self.args) not in arity:
            raise ValueError(f"transform `{self.kind}` takes {arity} arguments, got {len(self.args)}")

    @classmethod
    def translate(cls, tx: float, ty: float = 0.0) -> "TransformOp":
        return cls("translate", (float(tx), float(ty)))

    @classmethod
    def scale(cls, sx: float, sy: float | None = None) -> "TransformOp":
        return cls("scale", (float(sx), float(sx if sy is None else sy)))

    @classmethod
    def rotate(cls, deg: float, cx: float = 0.0, cy: float = 0.0) -> "TransformOp":
        return cls("rotate", (float(deg), float(cx), float(cy)))

    @classmethod
    def matrix(cls, a: float, b: float, c: float, d: float, e: float, f: float) -> "TransformOp":
        return cls("matrix", tuple(float(v) for v in (a, b, c, d, e, f)))


def _transform_op(value: object) -> TransformOp:
    if not isinstance(value, TransformOp):
        raise TypeError(f"expected TransformOp, got {value!r}")
    return value


@dataclass(frozen=True)
class Transform(Settable):
    ops: tuple[TransformOp, ...] = sequence_field(_transform_op)


# ---------------------------------------------------------------------------
# Leaf shapes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Rect(Settable):
    x: Animatable[Measurement] = animatable_field(measurement)
    y: Animatable[Measurement] = animatable_field(measurement)
    width: Animatable[Measurement] = animatable_field(measurement)
    height: Animatable[Measurement] = animatable_field(measurement)
    rx: Animatable[Measurement] | None = animatable_field(measurement, optional=True)
    ry: Animatable[Measurement] | None = animatable_field(measurement, optional=True)


@dataclass(frozen=True)
class Circle(Settable):
    cx: Animatable[Measurement] = animatable_field(measurement)
    cy: Animatable[Measurement] = animatable_field(measurement)
    r: Animatable[Measurement] = animatable_field(measurement)


@dataclass(frozen=True)
class Line(Settable):
    x1: Animatable[Measurement] = animatable_field(measurement)
    y1: Animatable[Measurement] = animatable_field(measurement)
    x2: Animatable[Measurement] = animatable_field(measurement)
    y2: Animatable[Measurement] = animatable_field(measurement)


@dataclass(frozen=True)
class Polyline(Settable):
    points: tuple[Point, ...] = sequence_field(point)


@dataclass(frozen=True)
class Polygon(Settable):
    points: tuple[Point, ...] = sequence_field(point)


CONTAINER_TYPES = (Layer, Group, Text, TextSpan)
ATTRIBUTE_TYPES = (Fill, Stroke, Opacity, Font, TextLayout, Transform)
SHAPE_TYPES = (Rect, Circle, Line, Polyline, Polygon)

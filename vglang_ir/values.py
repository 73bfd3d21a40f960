from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import math
from typing import Literal


class Unit(str, Enum):
    EM = "em"
    EX = "ex"
    PX = "px"
    IN = "in"
    CM = "cm"
    MM = "mm"
    PT = "pt"
    PC = "pc"
    PERCENT = "%"


# Absolute units expressed in CSS pixels (96 per inch).
PX_PER_UNIT: dict[Unit, float] = {
    Unit.PX: 1.0,
    Unit.IN: 96.0,
    Unit.CM: 96.0 / 2.54,
    Unit.MM: 96.0 / 25.4,
    Unit.PT: 96.0 / 72.0,
    Unit.PC: 16.0,
}


@dataclass(frozen=True)
class Measurement:
    """A number with an optional unit identifier. No unit means user units."""

    value: float
    unit: Unit | None = None

    def __str__(self) -> str:
        number = _format_number(self.value)
        if self.unit is None:
            return number
        return f"{number}{self.unit.value}"

    def to_px(self) -> float:
        if self.unit is None:
            return float(self.value)
        factor = PX_PER_UNIT.get(self.unit)
        if factor is None:
            raise ValueError(f"measurement unit `{self.unit.value}` is relative and has no pixel size")
        return float(self.value) * factor

    @classmethod
    def px(cls, value: float) -> "Measurement":
        return cls(value, Unit.PX)

    @classmethod
    def em(cls, value: float) -> "Measurement":
        return cls(value, Unit.EM)

    @classmethod
    def ex(cls, value: float) -> "Measurement":
        return cls(value, Unit.EX)

    @classmethod
    def inch(cls, value: float) -> "Measurement":
        return cls(value, Unit.IN)

    @classmethod
    def cm(cls, value: float) -> "Measurement":
        return cls(value, Unit.CM)

    @classmethod
    def mm(cls, value: float) -> "Measurement":
        return cls(value, Unit.MM)

    @classmethod
    def pt(cls, value: float) -> "Measurement":
        return cls(value, Unit.PT)

    @classmethod
    def pc(cls, value: float) -> "Measurement":
        return cls(value, Unit.PC)

    @classmethod
    def percentage(cls, value: float) -> "Measurement":
        return cls(value, Unit.PERCENT)


AngleUnit = Literal["deg", "grad", "rad"]


@dataclass(frozen=True)
class Angle:
    value: float
    unit: AngleUnit = "deg"

    def __post_init__(self) -> None:
        if self.unit not in ("deg", "grad", "rad"):
            raise ValueError(f"unsupported angle unit: {self.unit}")

    def __str__(self) -> str:
        return f"{_format_number(self.value)}{self.unit}"

    def as_deg(self) -> float:
        if self.unit == "grad":
            return self.value * 360.0 / 400.0
        if self.unit == "rad":
            return self.value * 180.0 / math.pi
        return float(self.value)


@dataclass(frozen=True)
class Color:
    r: int
    g: int
    b: int
    a: int = 255

    def __post_init__(self) -> None:
        for channel in (self.r, self.g, self.b, self.a):
            if channel < 0 or channel > 255:
                raise ValueError("color channels must be in [0, 255]")

    @classmethod
    def from_hex(cls, value: str) -> "Color":
        raw = value.strip()
        if not raw.startswith("#"):
            raise ValueError(f"color must start with `#`: {value}")
        digits = raw[1:]
        if len(digits) in (3, 4):
            digits = "".join(ch * 2 for ch in digits)
        if len(digits) not in (6, 8):
            raise ValueError(f"invalid hex color: {value}")
        try:
            channels = [int(digits[i : i + 2], 16) for i in range(0, len(digits), 2)]
        except ValueError as exc:
            raise ValueError(f"invalid hex color: {value}") from exc
        return cls(*channels)

    def to_hex(self) -> str:
        return f"#{self.r:02x}{self.g:02x}{self.b:02x}"

    def to_rgba(self) -> tuple[int, int, int, int]:
        return (self.r, self.g, self.b, self.a)

    @property
    def alpha(self) -> float:
        return self.a / 255.0


NAMED_COLORS: dict[str, Color] = {
    "black": Color(0, 0, 0),
    "white": Color(255, 255, 255),
    "red": Color(255, 0, 0),
    "green": Color(0, 128, 0),
    "blue": Color(0, 0, 255),
    "yellow": Color(255, 255, 0),
    "gray": Color(128, 128, 128),
    "transparent": Color(0, 0, 0, 0),
}


@dataclass(frozen=True)
class Point:
    x: Measurement
    y: Measurement

    def __str__(self) -> str:
        return f"{self.x},{self.y}"


MeetOrSlice = Literal["meet", "slice"]
Align = Literal[
    "none",
    "xMinYMin",
    "xMidYMin",
    "xMaxYMin",
    "xMinYMid",
    "xMidYMid",
    "xMaxYMid",
    "xMinYMax",
    "xMidYMax",
    "xMaxYMax",
]


@dataclass(frozen=True)
class PreserveAspectRatio:
    align: Align = "xMidYMid"
    meet_or_slice: MeetOrSlice = "meet"

    def __str__(self) -> str:
        if self.align == "none":
            return "none"
        return f"{self.align} {self.meet_or_slice}"


@dataclass(frozen=True)
class ViewBox:
    """Stretch-to-fit rectangle of a layer, in user units."""

    minx: float
    miny: float
    width: float
    height: float
    aspect: PreserveAspectRatio | None = None

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise ValueError("viewbox width/height must be >= 0")

    def __str__(self) -> str:
        return " ".join(_format_number(v) for v in (self.minx, self.miny, self.width, self.height))


def measurement(value: object) -> Measurement:
    if isinstance(value, Measurement):
        return value
    if isinstance(value, bool):
        raise TypeError("bool is not a measurement")
    if isinstance(value, (int, float)):
        return Measurement(float(value))
    if isinstance(value, str):
        return _parse_measurement(value)
    raise TypeError(f"cannot convert {value!r} to Measurement")


def angle(value: object) -> Angle:
    if isinstance(value, Angle):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return Angle(float(value))
    raise TypeError(f"cannot convert {value!r} to Angle")


def color(value: object) -> Color:
    if isinstance(value, Color):
        return value
    if isinstance(value, str):
        named = NAMED_COLORS.get(value.strip().lower())
        if named is not None:
            return named
        return Color.from_hex(value)
    if isinstance(value, tuple) and len(value) in (3, 4):
        return Color(*(int(v) for v in value))
    raise TypeError(f"cannot convert {value!r} to Color")


def point(value: object) -> Point:
    if isinstance(value, Point):
        return value
    if isinstance(value, tuple) and len(value) == 2:
        return Point(measurement(value[0]), measurement(value[1]))
    raise TypeError(f"cannot convert {value!r} to Point")


def viewbox(value: object) -> ViewBox:
    if isinstance(value, ViewBox):
        return value
    if isinstance(value, tuple) and len(value) in (4, 5):
        aspect = value[4] if len(value) == 5 else None
        return ViewBox(float(value[0]), float(value[1]), float(value[2]), float(value[3]), aspect)
    raise TypeError(f"cannot convert {value!r} to ViewBox")


def _parse_measurement(raw: str) -> Measurement:
    text = raw.strip()
    for unit in sorted(Unit, key=lambda u: len(u.value), reverse=True):
        if text.endswith(unit.value):
            number = text[: -len(unit.value)].strip()
            try:
                return Measurement(float(number), unit)
            except ValueError as exc:
                raise ValueError(f"invalid measurement: {raw}") from exc
    try:
        return Measurement(float(text))
    except ValueError as exc:
        raise ValueError(f"invalid measurement: {raw}") from exc


def _format_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Union

from vglang_ir.values import Angle, Color, Measurement, Point, PreserveAspectRatio, ViewBox


@dataclass(frozen=True)
class Deferred:
    """Attribute value or text run fed by an animation register, resolved at execute time."""

    name: str
    render: Callable[[Any], str]
    attribute: str | None = None


AttrValue = Union[str, Deferred]
TextRun = Union[str, Deferred]


@dataclass
class SvgNode:
    tag: str
    attrs: dict[str, AttrValue] = field(default_factory=dict)
    children: list[Union["SvgNode", TextRun]] = field(default_factory=list)

    def find_all(self, tag: str) -> list["SvgNode"]:
        out: list[SvgNode] = []
        stack: list[SvgNode] = [self]
        while stack:
            node = stack.pop()
            if node.tag == tag:
                out.append(node)
            stack.extend(reversed([c for c in node.children if isinstance(c, SvgNode)]))
        return out

    def deferred_names(self) -> set[str]:
        names: set[str] = set()
        stack: list[SvgNode] = [self]
        while stack:
            node = stack.pop()
            for value in node.attrs.values():
                if isinstance(value, Deferred):
                    names.add(value.name)
            for child in node.children:
                if isinstance(child, SvgNode):
                    stack.append(child)
                elif isinstance(child, Deferred):
                    names.add(child.name)
        return names


def format_number(value: float, precision: int) -> str:
    text = f"{round(float(value), precision):.{precision}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text in ("-0", ""):
        return "0"
    return text


def format_value(value: Any, precision: int) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return format_number(value, precision)
    if isinstance(value, Measurement):
        number = format_number(value.value, precision)
        return number if value.unit is None else f"{number}{value.unit.value}"
    if isinstance(value, Color):
        return value.to_hex()
    if isinstance(value, Angle):
        return f"{format_number(value.value, precision)}{value.unit}"
    if isinstance(value, ViewBox):
        return " ".join(format_number(v, precision) for v in (value.minx, value.miny, value.width, value.height))
    if isinstance(value, Point):
        return f"{format_value(value.x, precision)},{format_value(value.y, precision)}"
    if isinstance(value, PreserveAspectRatio):
        return str(value)
    if isinstance(value, str):
        return value
    raise TypeError(f"no SVG text form for {type(value).__name__}")

from __future__ import annotations

from dataclasses import dataclass, replace
import io
import logging
from typing import TYPE_CHECKING, Any

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from vglang_device.device import Program
from vglang_device.registers import AnimationRegister, RegisterTable
from vglang_ir.animatable import Constant
from vglang_ir.elements import (
    Circle,
    Fill,
    Layer,
    Line,
    Opacity,
    Polygon,
    Polyline,
    Rect,
    Stroke,
    Text,
    TextLayout,
    Transform,
)
from vglang_ir.errors import BackendError
from vglang_ir.instructions import AnimatedRef
from vglang_ir.setters import field_spec
from vglang_ir.values import Color, Measurement, Point

from .geometry import apply_points, compose, ellipse_points, mean_scale, scaling, translation

if TYPE_CHECKING:
    from .device import RasterDeviceConfig

LOGGER = logging.getLogger(__name__)

_BLACK = Color(0, 0, 0)


@dataclass(frozen=True)
class DrawOp:
    """One shape or text block plus the attribute scopes enclosing it, outermost first."""

    element: object
    scopes: tuple[object, ...]
    runs: tuple[str | AnimatedRef, ...] = ()


@dataclass(frozen=True)
class _Style:
    matrix: np.ndarray
    fill: Color | None = _BLACK
    fill_opacity: float = 1.0
    stroke: Color | None = None
    stroke_width: float = 1.0
    stroke_opacity: float = 1.0
    opacity: float = 1.0
    anchor: str = "start"


class RasterProgram(Program):
    """Display list of draw ops rasterized with Pillow into PNG bytes."""

    def __init__(self, ops: tuple[DrawOp, ...], layer: Layer | None, config: "RasterDeviceConfig") -> None:
        super().__init__()
        self.ops = ops
        self.layer = layer
        self.config = config

    async def _execute(self, frame: dict[str, Any]) -> bytes:
        resolver = _Resolver(RegisterTable(self.config.registers, frame))
        size, base = self._canvas(resolver)
        image = Image.new("RGBA", size, self.config.background.to_rgba())
        font = ImageFont.load_default()
        for op in self.ops:
            style = self._style(op.scopes, base, resolver)
            overlay = Image.new("RGBA", size, (0, 0, 0, 0))
            draw = ImageDraw.Draw(overlay)
            if isinstance(op.element, Text):
                self._draw_text(draw, op, style, resolver, font)
            else:
                self._draw_shape(draw, op.element, style, resolver)
            image.alpha_composite(overlay)
        buffer = io.BytesIO()
        image.save(buffer, format="PNG")
        LOGGER.debug("raster program drew %d op(s) onto %dx%d canvas", len(self.ops), size[0], size[1])
        return buffer.getvalue()

    def _canvas(self, resolver: "_Resolver") -> tuple[tuple[int, int], np.ndarray]:
        scale = self.config.scale
        base = scaling(scale, scale)
        layer_w = layer_h = None
        if self.layer is not None:
            layer_w = resolver.px(self.layer, "width")
            layer_h = resolver.px(self.layer, "height")
            box = resolver.value(self.layer, "viewbox")
            if box is not None and box.width > 0 and box.height > 0:
                base = base @ scaling(layer_w / box.width, layer_h / box.height) @ translation(-box.minx, -box.miny)
        width = self.config.width or (round(layer_w * scale) if layer_w is not None else None)
        height = self.config.height or (round(layer_h * scale) if layer_h is not None else None)
        if not width or not height:
            raise BackendError("raster canvas has no size; set raster.width/height or draw a top-level layer")
        return (int(width), int(height)), base

    def _style(self, scopes: tuple[object, ...], base: np.ndarray, resolver: "_Resolver") -> _Style:
        style = _Style(matrix=base)
        for scope in scopes:
            if isinstance(scope, Fill):
                style = replace(
                    style,
                    fill=resolver.value(scope, "paint"),
                    fill_opacity=_or(resolver.value(scope, "opacity"), 1.0),
                )
            elif isinstance(scope, Stroke):
                width = resolver.px(scope, "width")
                style = replace(
                    style,
                    stroke=resolver.value(scope, "paint"),
                    stroke_width=style.stroke_width if width is None else width,
                    stroke_opacity=_or(resolver.value(scope, "opacity"), 1.0),
                )
            elif isinstance(scope, Opacity):
                style = replace(style, opacity=style.opacity * resolver.value(scope, "value"))
            elif isinstance(scope, Transform):
                style = replace(style, matrix=style.matrix @ compose(scope.ops))
            elif isinstance(scope, TextLayout):
                style = replace(style, anchor=_or(resolver.value(scope, "anchor"), style.anchor))
            # Font only affects text metrics, which the default bitmap font ignores.
        return style

    def _draw_shape(self, draw: ImageDraw.ImageDraw, element: object, style: _Style, resolver: "_Resolver") -> None:
        fill = _rgba(style.fill, style.fill_opacity * style.opacity)
        outline = _rgba(style.stroke, style.stroke_opacity * style.opacity)
        width = max(1, round(style.stroke_width * mean_scale(style.matrix)))
        if isinstance(element, Rect):
            x, y = resolver.px(element, "x"), resolver.px(element, "y")
            w, h = resolver.px(element, "width"), resolver.px(element, "height")
            corners = [(x, y), (x + w, y), (x + w, y + h), (x, y + h)]
            self._polygon(draw, apply_points(style.matrix, corners), fill, outline, width)
        elif isinstance(element, Circle):
            cx, cy, r = resolver.px(element, "cx"), resolver.px(element, "cy"), resolver.px(element, "r")
            self._polygon(draw, apply_points(style.matrix, ellipse_points(cx, cy, r)), fill, outline, width)
        elif isinstance(element, Line):
            ends = [
                (resolver.px(element, "x1"), resolver.px(element, "y1")),
                (resolver.px(element, "x2"), resolver.px(element, "y2")),
            ]
            if outline is not None:
                draw.line(apply_points(style.matrix, ends), fill=outline, width=width)
        elif isinstance(element, Polyline):
            points = apply_points(style.matrix, [_point_px(p) for p in element.points])
            if fill is not None and len(points) >= 3:
                draw.polygon(points, fill=fill)
            if outline is not None and len(points) >= 2:
                draw.line(points, fill=outline, width=width)
        elif isinstance(element, Polygon):
            self._polygon(draw, apply_points(style.matrix, [_point_px(p) for p in element.points]), fill, outline, width)
        else:
            raise BackendError(f"raster device cannot draw {type(element).__name__}")

    @staticmethod
    def _polygon(draw: ImageDraw.ImageDraw, points, fill, outline, width: int) -> None:
        if len(points) < 3:
            return
        if fill is not None:
            draw.polygon(points, fill=fill)
        if outline is not None:
            draw.line(points + points[:1], fill=outline, width=width, joint="curve")

    def _draw_text(self, draw: ImageDraw.ImageDraw, op: DrawOp, style: _Style, resolver: "_Resolver", font) -> None:
        text = "".join(resolver.text(run) for run in op.runs)
        if not text:
            return
        fill = _rgba(style.fill, style.fill_opacity * style.opacity)
        if fill is None:
            return
        element = op.element
        [(x, y)] = apply_points(style.matrix, [(resolver.px(element, "x"), resolver.px(element, "y"))])
        left, top, right, bottom = draw.textbbox((0, 0), text, font=font)
        if style.anchor == "middle":
            x -= (right - left) / 2.0
        elif style.anchor == "end":
            x -= right - left
        # y is the baseline
        draw.text((x, y - bottom), text, fill=fill, font=font)


class _Resolver:
    """Reads element fields as plain values, looking animated ones up in the register table."""

    def __init__(self, table: RegisterTable) -> None:
        self._table = table

    def value(self, element: object, name: str) -> Any:
        raw = getattr(element, name)
        if raw is None:
            return None
        if isinstance(raw, Constant):
            return raw.value
        value = self._table.lookup(raw.name)
        if isinstance(value, AnimationRegister):
            raise BackendError(f"register `{raw.name}` is an animation; the raster device draws a single frame")
        spec = field_spec(element, name)
        try:
            return spec.convert(value) if spec is not None else value
        except (TypeError, ValueError) as exc:
            raise BackendError(f"register `{raw.name}` holds an unusable value {value!r}: {exc}") from exc

    def px(self, element: object, name: str) -> float | None:
        value = self.value(element, name)
        if value is None:
            return None
        return _to_px(value)

    def text(self, run: str | AnimatedRef) -> str:
        if isinstance(run, str):
            return run
        value = self._table.lookup(run.name)
        if isinstance(value, AnimationRegister):
            raise BackendError(f"register `{run.name}` feeds text content and must hold a constant")
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        return str(value)


def _to_px(value: Measurement) -> float:
    try:
        return value.to_px()
    except ValueError as exc:
        raise BackendError(str(exc)) from exc


def _point_px(p: Point) -> tuple[float, float]:
    return (_to_px(p.x), _to_px(p.y))


def _rgba(paint: Color | None, opacity: float) -> tuple[int, int, int, int] | None:
    if paint is None:
        return None
    alpha = round(paint.a * opacity)
    if alpha <= 0:
        return None
    return (paint.r, paint.g, paint.b, alpha)


def _or(value: Any, default: Any) -> Any:
    return default if value is None else value

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Any, Mapping

from vglang_device.device import Device
from vglang_device.registers import registers_from_mapping
from vglang_device.tree import ScopeNode, scope_tree
from vglang_ir.elements import ATTRIBUTE_TYPES, SHAPE_TYPES, Group, Layer, Text, TextSpan
from vglang_ir.errors import BackendError, UnresolvedReference
from vglang_ir.instructions import AnimatedRef, Instruction, Leaf
from vglang_ir.setters import Settable
from vglang_ir.values import Color, color

from .program import DrawOp, RasterProgram

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class RasterDeviceConfig:
    """PNG preview settings. `width`/`height` override the top-level layer size."""

    width: int | None = None
    height: int | None = None
    background: Color = Color(255, 255, 255)
    scale: float = 1.0
    registers: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.width is not None and self.width <= 0:
            raise ValueError("width must be > 0")
        if self.height is not None and self.height <= 0:
            raise ValueError("height must be > 0")
        if self.scale <= 0:
            raise ValueError("scale must be > 0")

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any], registers: Mapping[str, Any] | None = None) -> "RasterDeviceConfig":
        if not isinstance(raw, Mapping):
            raise ValueError("raster config must be a table")
        unknown = set(raw) - {"width", "height", "background", "scale"}
        if unknown:
            raise ValueError(f"unknown raster config key(s): {', '.join(sorted(unknown))}")
        for key in ("width", "height"):
            value = raw.get(key)
            if value is not None and (not isinstance(value, int) or isinstance(value, bool)):
                raise ValueError(f"raster.{key} must be an integer")
        scale = raw.get("scale", 1.0)
        if isinstance(scale, bool) or not isinstance(scale, (int, float)):
            raise ValueError("raster.scale must be a number")
        try:
            background = color(raw.get("background", "#ffffff"))
        except (TypeError, ValueError) as exc:
            raise ValueError(f"raster.background: {exc}") from exc
        return cls(
            width=raw.get("width"),
            height=raw.get("height"),
            background=background,
            scale=float(scale),
            registers=registers_from_mapping(registers or {}),
        )


class RasterDevice(Device):
    """Preview backend: flattens the scope tree into draw ops, executes them into PNG bytes."""

    name = "png"

    def __init__(self, config: RasterDeviceConfig | None = None) -> None:
        super().__init__()
        self.config = config or RasterDeviceConfig()

    async def _compile(self, instructions: tuple[Instruction, ...]) -> RasterProgram:
        tree = scope_tree(instructions)
        layer, ops = _flatten(tree)
        LOGGER.debug("raster program has %d draw op(s)", len(ops))
        return RasterProgram(tuple(ops), layer, self.config)


def _flatten(tree: ScopeNode) -> tuple[Layer | None, list[DrawOp]]:
    layer: Layer | None = None
    ops: list[DrawOp] = []

    def visit(node: ScopeNode, scopes: tuple[object, ...], depth: int) -> None:
        nonlocal layer
        for child in node.children:
            if isinstance(child, Leaf):
                payload = child.payload
                if isinstance(payload, SHAPE_TYPES):
                    _check_register_names(payload)
                    ops.append(DrawOp(payload, scopes))
                elif isinstance(payload, (str, AnimatedRef)):
                    raise BackendError("character data must be inside text content")
                else:
                    raise BackendError(f"raster device does not support leaf payload {type(payload).__name__}")
                continue
            payload = child.payload
            _check_register_names(payload)
            if isinstance(payload, Layer):
                if depth > 0 or layer is not None:
                    raise BackendError("raster device supports a single top-level layer")
                layer = payload
                visit(child, scopes, depth + 1)
            elif isinstance(payload, Group):
                visit(child, scopes, depth + 1)
            elif isinstance(payload, ATTRIBUTE_TYPES):
                visit(child, scopes + (payload,), depth + 1)
            elif isinstance(payload, Text):
                ops.append(DrawOp(payload, scopes, tuple(_text_runs(child))))
            elif isinstance(payload, TextSpan):
                raise BackendError("text span must be inside text content")
            else:
                raise BackendError(f"raster device does not support scope payload {type(payload).__name__}")

    visit(tree, (), 0)
    return layer, ops


def _check_register_names(payload: object) -> None:
    if isinstance(payload, Settable) and "" in payload.animated_fields().values():
        raise UnresolvedReference("")


def _text_runs(node: ScopeNode) -> list[str | AnimatedRef]:
    # Styling inside text content is flattened away in the preview.
    runs: list[str | AnimatedRef] = []
    for _, child in node.walk():
        if isinstance(child, Leaf):
            payload = child.payload
            if isinstance(payload, AnimatedRef):
                if not payload.name:
                    raise UnresolvedReference(payload.name)
                runs.append(payload)
            elif isinstance(payload, str):
                runs.append(payload)
            else:
                raise BackendError(f"{type(payload).__name__} cannot be drawn inside text content")
            continue
        _check_register_names(child.payload)
        if isinstance(child.payload, (Layer, Group, Text)):
            raise BackendError(f"{type(child.payload).__name__} cannot be nested in text content")
    return runs

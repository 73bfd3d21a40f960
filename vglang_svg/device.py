from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Any, Callable, Literal, Mapping

from vglang_device.device import Device
from vglang_device.registers import registers_from_mapping
from vglang_device.tree import ScopeNode, scope_tree
from vglang_ir.animatable import Animated, Constant
from vglang_ir.elements import (
    Circle,
    Fill,
    Font,
    Group,
    Layer,
    Line,
    Opacity,
    Polygon,
    Polyline,
    Rect,
    Stroke,
    Text,
    TextLayout,
    TextSpan,
    Transform,
)
from vglang_ir.errors import BackendError, UnresolvedReference
from vglang_ir.instructions import AnimatedRef, Instruction, Leaf
from vglang_ir.setters import field_spec

from .nodes import AttrValue, Deferred, SvgNode, format_number, format_value
from .program import SvgProgram

LOGGER = logging.getLogger(__name__)

SVG_NAMESPACE = "http://www.w3.org/2000/svg"

UnresolvedPolicy = Literal["error", "placeholder"]


@dataclass(frozen=True)
class SvgDeviceConfig:
    precision: int = 4
    indent: str | None = None
    xml_declaration: bool = False
    unresolved: UnresolvedPolicy = "error"
    registers: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.precision < 0 or self.precision > 12:
            raise ValueError("precision must be in [0, 12]")
        if self.unresolved not in ("error", "placeholder"):
            raise ValueError("unresolved must be `error` or `placeholder`")
        if self.indent is not None and self.indent.strip():
            raise ValueError("indent must contain whitespace only")

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any], registers: Mapping[str, Any] | None = None) -> "SvgDeviceConfig":
        if not isinstance(raw, Mapping):
            raise ValueError("svg config must be a table")
        unknown = set(raw) - {"precision", "indent", "xml_declaration", "unresolved"}
        if unknown:
            raise ValueError(f"unknown svg config key(s): {', '.join(sorted(unknown))}")
        precision = raw.get("precision", 4)
        if not isinstance(precision, int) or isinstance(precision, bool):
            raise ValueError("svg.precision must be an integer")
        indent = raw.get("indent")
        if indent is not None and not isinstance(indent, str):
            raise ValueError("svg.indent must be a string")
        xml_declaration = raw.get("xml_declaration", False)
        if not isinstance(xml_declaration, bool):
            raise ValueError("svg.xml_declaration must be a boolean")
        return cls(
            precision=precision,
            indent=indent,
            xml_declaration=xml_declaration,
            unresolved=str(raw.get("unresolved", "error")),  # type: ignore[arg-type]
            registers=registers_from_mapping(registers or {}),
        )


class SvgDevice(Device):
    """Markup backend: compiles a log into an SVG node tree, executes it into SVG text."""

    name = "svg"

    def __init__(self, config: SvgDeviceConfig | None = None) -> None:
        super().__init__()
        self.config = config or SvgDeviceConfig()

    async def _compile(self, instructions: tuple[Instruction, ...]) -> SvgProgram:
        tree = scope_tree(instructions)
        root = _SvgCompiler(self.config.precision).compile_document(tree)
        LOGGER.debug("svg program has %d deferred register(s)", len(root.deferred_names()))
        return SvgProgram(root, self.config)


class _SvgCompiler:
    def __init__(self, precision: int) -> None:
        self._precision = precision

    def compile_document(self, tree: ScopeNode) -> SvgNode:
        layers = [c for c in tree.children if isinstance(c, ScopeNode) and isinstance(c.payload, Layer)]
        if len(layers) > 1:
            raise BackendError("document has more than one top-level layer")
        if layers and len(tree.children) == 1:
            root = self._compile_scope(layers[0], in_text=False)
        elif layers:
            raise BackendError("content found outside the top-level layer")
        else:
            root = SvgNode("svg")
            self._compile_children(tree, root, in_text=False)
        root.attrs = {"xmlns": SVG_NAMESPACE, **root.attrs}
        return root

    def _compile_children(self, scope: ScopeNode, parent: SvgNode, *, in_text: bool) -> None:
        for child in scope.children:
            if isinstance(child, ScopeNode):
                parent.children.append(self._compile_scope(child, in_text=in_text))
            else:
                parent.children.append(self._compile_leaf(child, in_text=in_text))

    def _compile_scope(self, scope: ScopeNode, *, in_text: bool) -> SvgNode:
        payload = scope.payload
        child_in_text = in_text
        if isinstance(payload, Layer):
            if in_text:
                raise BackendError("layer cannot be nested in text content")
            node = SvgNode("svg")
            self._set(node, payload, "width", "width")
            self._set(node, payload, "height", "height")
            self._set(node, payload, "viewbox", "viewBox")
            viewbox = payload.viewbox
            if isinstance(viewbox, Constant) and viewbox.value.aspect is not None:
                node.attrs["preserveAspectRatio"] = str(viewbox.value.aspect)
        elif isinstance(payload, Group):
            if in_text:
                raise BackendError("group cannot be nested in text content")
            node = SvgNode("g")
            if payload.id is not None:
                node.attrs["id"] = payload.id
        elif isinstance(payload, Text):
            if in_text:
                raise BackendError("text cannot be nested in text content; use TextSpan")
            node = SvgNode("text")
            self._set(node, payload, "x", "x")
            self._set(node, payload, "y", "y")
            child_in_text = True
        elif isinstance(payload, TextSpan):
            if not in_text:
                raise BackendError("text span must be inside text content")
            node = SvgNode("tspan")
            self._set(node, payload, "dx", "dx")
            self._set(node, payload, "dy", "dy")
        elif in_text and isinstance(payload, Transform):
            raise BackendError("transform cannot be applied inside text content")
        else:
            # attribute scopes wrap in <g>, or in <tspan> when inside text content
            node = SvgNode("tspan" if in_text else "g")
            self._apply_attributes(node, payload)
        self._compile_children(scope, node, in_text=child_in_text)
        return node

    def _apply_attributes(self, node: SvgNode, payload: object) -> None:
        if isinstance(payload, Fill):
            self._set(node, payload, "paint", "fill")
            self._set(node, payload, "opacity", "fill-opacity")
            self._alpha_opacity(node, payload.paint, "fill-opacity")
        elif isinstance(payload, Stroke):
            self._set(node, payload, "paint", "stroke")
            self._set(node, payload, "width", "stroke-width")
            self._set(node, payload, "opacity", "stroke-opacity")
            self._alpha_opacity(node, payload.paint, "stroke-opacity")
        elif isinstance(payload, Opacity):
            self._set(node, payload, "value", "opacity")
        elif isinstance(payload, Font):
            if payload.family:
                node.attrs["font-family"] = ", ".join(_quote_family(f) for f in payload.family)
            self._set(node, payload, "size", "font-size")
            self._set(node, payload, "weight", "font-weight")
            self._set(node, payload, "style", "font-style")
        elif isinstance(payload, TextLayout):
            self._set(node, payload, "anchor", "text-anchor")
            self._set(node, payload, "direction", "direction")
            self._set(node, payload, "writing_mode", "writing-mode")
        elif isinstance(payload, Transform):
            if payload.ops:
                node.attrs["transform"] = " ".join(
                    f"{op.kind}({' '.join(format_number(a, self._precision) for a in op.args)})" for op in payload.ops
                )
        else:
            raise BackendError(f"svg device does not support scope payload {type(payload).__name__}")

    def _compile_leaf(self, leaf: Leaf, *, in_text: bool) -> SvgNode | str | Deferred:
        payload = leaf.payload
        if isinstance(payload, str):
            if not in_text:
                raise BackendError("character data must be inside text content")
            return payload
        if isinstance(payload, AnimatedRef):
            if not in_text:
                raise BackendError(f"animated reference `{payload.name}` must be inside text content")
            if not payload.name:
                raise UnresolvedReference(payload.name)
            return Deferred(payload.name, self._renderer(None))
        if in_text:
            raise BackendError(f"{type(payload).__name__} cannot be drawn inside text content")
        if isinstance(payload, Rect):
            node = SvgNode("rect")
            for name in ("x", "y", "width", "height", "rx", "ry"):
                self._set(node, payload, name, name)
            return node
        if isinstance(payload, Circle):
            node = SvgNode("circle")
            for name in ("cx", "cy", "r"):
                self._set(node, payload, name, name)
            return node
        if isinstance(payload, Line):
            node = SvgNode("line")
            for name in ("x1", "y1", "x2", "y2"):
                self._set(node, payload, name, name)
            return node
        if isinstance(payload, (Polyline, Polygon)):
            node = SvgNode("polyline" if isinstance(payload, Polyline) else "polygon")
            node.attrs["points"] = " ".join(format_value(p, self._precision) for p in payload.points)
            return node
        raise BackendError(f"svg device does not support leaf payload {type(payload).__name__}")

    def _set(self, node: SvgNode, element: object, field_name: str, attribute: str) -> None:
        value = getattr(element, field_name)
        if value is None:
            return
        node.attrs[attribute] = self._attr_value(element, field_name, value, attribute)

    def _attr_value(self, element: object, field_name: str, value: object, attribute: str) -> AttrValue:
        if isinstance(value, Animated):
            if not value.name:
                raise UnresolvedReference(value.name)
            spec = field_spec(element, field_name)
            return Deferred(value.name, self._renderer(spec.convert if spec else None), attribute)
        if isinstance(value, Constant):
            value = value.value
        try:
            return format_value(value, self._precision)
        except TypeError as exc:
            raise BackendError(f"attribute `{attribute}`: {exc}") from exc

    def _alpha_opacity(self, node: SvgNode, paint: object, attribute: str) -> None:
        if attribute in node.attrs:
            return
        if isinstance(paint, Constant) and paint.value.a < 255:
            node.attrs[attribute] = format_number(paint.value.alpha, self._precision)

    def _renderer(self, convert: Callable[[Any], Any] | None) -> Callable[[Any], str]:
        precision = self._precision

        def render(raw: Any) -> str:
            value = convert(raw) if convert is not None else raw
            return format_value(value, precision)

        return render


def _quote_family(family: str) -> str:
    if " " in family and not family.startswith(("'", '"')):
        return f"'{family}'"
    return family

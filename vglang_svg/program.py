from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any
import xml.etree.ElementTree as ET

from vglang_device.device import Program
from vglang_device.registers import AnimationRegister, RegisterTable
from vglang_ir.errors import BackendError, UnresolvedReference

from .nodes import Deferred, SvgNode

if TYPE_CHECKING:
    from .device import SvgDeviceConfig

LOGGER = logging.getLogger(__name__)


class SvgProgram(Program):
    """Compiled SVG node tree.

    Reusable: each `execute` resolves deferred registers against its own frame
    and serializes a fresh element tree.
    """

    reusable = True

    def __init__(self, root: SvgNode, config: "SvgDeviceConfig") -> None:
        super().__init__()
        self.root = root
        self.config = config

    async def _execute(self, frame: dict[str, Any]) -> str:
        table = RegisterTable(self.config.registers, frame)
        element = self._build(self.root, table)
        if self.config.indent is not None:
            ET.indent(element, space=self.config.indent)
        markup = ET.tostring(element, encoding="unicode")
        if self.config.xml_declaration:
            markup = '<?xml version="1.0" encoding="UTF-8"?>\n' + markup
        LOGGER.debug("svg program serialized %d character(s)", len(markup))
        return markup

    def _build(self, node: SvgNode, table: RegisterTable) -> ET.Element:
        element = ET.Element(node.tag)
        animations: list[ET.Element] = []
        unresolved: list[str] = []
        for attribute, value in node.attrs.items():
            if isinstance(value, Deferred):
                element.set(attribute, self._resolve_attribute(value, table, animations, unresolved))
            else:
                element.set(attribute, value)
        for animation in animations:
            element.append(animation)
        last: ET.Element | None = animations[-1] if animations else None
        for child in node.children:
            if isinstance(child, SvgNode):
                last = self._build(child, table)
                element.append(last)
                continue
            text = self._resolve_text(child, table, unresolved) if isinstance(child, Deferred) else child
            if last is None:
                element.text = (element.text or "") + text
            else:
                last.tail = (last.tail or "") + text
        if unresolved:
            element.set("data-vglang-unresolved", " ".join(unresolved))
        return element

    def _resolve_attribute(
        self,
        deferred: Deferred,
        table: RegisterTable,
        animations: list[ET.Element],
        unresolved: list[str],
    ) -> str:
        try:
            value = table.lookup(deferred.name)
        except UnresolvedReference:
            if self.config.unresolved == "error":
                raise
            LOGGER.warning("register `%s` unresolved; emitting placeholder", deferred.name)
            unresolved.append(deferred.name)
            return "{" + deferred.name + "}"
        if isinstance(value, AnimationRegister):
            animate = ET.Element(
                "animate",
                {
                    "attributeName": deferred.attribute or "",
                    "values": ";".join(self._render(deferred, v) for v in value.values),
                    "dur": value.dur,
                    "repeatCount": value.repeat_count,
                },
            )
            animations.append(animate)
            return self._render(deferred, value.initial)
        return self._render(deferred, value)

    def _resolve_text(self, deferred: Deferred, table: RegisterTable, unresolved: list[str]) -> str:
        try:
            value = table.lookup(deferred.name)
        except UnresolvedReference:
            if self.config.unresolved == "error":
                raise
            LOGGER.warning("register `%s` unresolved; emitting placeholder", deferred.name)
            unresolved.append(deferred.name)
            return "{" + deferred.name + "}"
        if isinstance(value, AnimationRegister):
            raise BackendError(f"register `{deferred.name}` feeds text content and must hold a constant")
        return self._render(deferred, value)

    def _render(self, deferred: Deferred, value: Any) -> str:
        try:
            return deferred.render(value)
        except (TypeError, ValueError) as exc:
            raise BackendError(f"register `{deferred.name}` holds an unusable value {value!r}: {exc}") from exc

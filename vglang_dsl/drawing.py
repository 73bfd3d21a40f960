from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

from vglang_ir.instructions import AnimatedRef, InstructionLog, Leaf

from .generator import Generator, IRGenerator


MAX_SEQUENCE_ARITY = 16


class Graphic(Protocol):
    """Anything that can linearize itself into a generator.

    Drawing consumes the description: it is a one-shot linearization, not a
    repeatable query. Strings, registered shapes, callables taking the
    generator and tuples of graphics are accepted by `draw` without
    implementing this protocol.
    """

    def draw(self, g: Generator) -> None:
        ...


class Appliable(Protocol):
    def apply(self, graphic: Any) -> Graphic:
        ...


class WithContent(Protocol):
    def with_content(self, graphic: Any) -> Graphic:
        ...


_LEAF_TYPES: list[type] = []
_APPLIABLE_TYPES: list[type] = []
_CONTAINER_TYPES: list[type] = []


def register_leaf(*types: type) -> None:
    _register(_LEAF_TYPES, types)


def register_appliable(*types: type) -> None:
    _register(_APPLIABLE_TYPES, types)


def register_container(*types: type) -> None:
    _register(_CONTAINER_TYPES, types)


def _register(registry: list[type], types: tuple[type, ...]) -> None:
    for t in types:
        if not isinstance(t, type):
            raise TypeError(f"expected a class, got {t!r}")
        if t not in registry:
            registry.append(t)


def is_appliable(value: object) -> bool:
    return isinstance(value, tuple(_APPLIABLE_TYPES))


def is_container(value: object) -> bool:
    return isinstance(value, tuple(_CONTAINER_TYPES))


def draw(graphic: Any, g: Generator) -> None:
    if isinstance(graphic, str):
        g.push(Leaf(graphic))
        return
    if isinstance(graphic, tuple):
        _check_arity(graphic)
        for item in graphic:
            draw(item, g)
        return
    if isinstance(graphic, tuple(_LEAF_TYPES)):
        g.push(Leaf(graphic))
        return
    method = getattr(graphic, "draw", None)
    if callable(method):
        method(g)
        return
    if is_appliable(graphic) or is_container(graphic):
        raise TypeError(
            f"{type(graphic).__name__} is a scope value; wrap content with apply() or with_() instead of drawing it"
        )
    if callable(graphic):
        graphic(g)
        return
    raise TypeError(f"not drawable: {graphic!r}")


def render_log(graphic: Any) -> InstructionLog:
    """Draw `graphic` into a fresh generator and return the finished log."""
    g = IRGenerator()
    draw(graphic, g)
    return g.instructions


@dataclass(frozen=True)
class Sequence:
    """Fixed-arity heterogeneous sequence drawn left to right."""

    items: tuple[Any, ...]

    def __post_init__(self) -> None:
        _check_arity(self.items)

    def draw(self, g: Generator) -> None:
        for item in self.items:
            draw(item, g)


def seq(*items: Any) -> Sequence:
    return Sequence(items)


@dataclass(frozen=True)
class AnimatedLeaf:
    name: str

    def draw(self, g: Generator) -> None:
        g.push(Leaf(AnimatedRef(self.name)))


def animated(name: str) -> AnimatedLeaf:
    """Graphic referring to an animation register, for content fed by a running animation."""
    return AnimatedLeaf(name)


@dataclass(frozen=True, eq=False)
class AttributeScope:
    attr: Any
    target: Any

    def draw(self, g: Generator) -> None:
        g.push_from(self.attr)
        draw(self.target, g)
        g.pop(1)


@dataclass(frozen=True, eq=False)
class ContentScope:
    parent: Any
    content: Any

    def draw(self, g: Generator) -> None:
        g.push_from(self.parent)
        draw(self.content, g)
        g.pop(1)


def apply(attrs: Any, target: Any) -> Graphic:
    """Wrap `target` with one attribute scope or a tuple of them.

    For ``apply((a, b, c), t)`` the scopes nest in listed order: `a` opens
    first and closes last.
    """
    scopes = attrs if isinstance(attrs, tuple) else (attrs,)
    _check_arity(scopes)
    graphic = target
    for attr in reversed(scopes):
        graphic = _apply_one(attr, graphic)
    return graphic


def _apply_one(attr: Any, graphic: Any) -> Graphic:
    if is_appliable(attr):
        return AttributeScope(attr, graphic)
    if is_container(attr):
        raise TypeError(f"{type(attr).__name__} is a content container; use with_() instead of apply()")
    method = getattr(attr, "apply", None)
    if callable(method):
        return method(graphic)
    raise TypeError(f"not an attribute scope: {attr!r}")


def with_(parent: Any, content: Any) -> Graphic:
    """Make `content` the children of the container element `parent`."""
    if is_container(parent):
        return ContentScope(parent, content)
    if is_appliable(parent):
        raise TypeError(f"{type(parent).__name__} is an attribute scope; use apply() instead of with_()")
    method = getattr(parent, "with_content", None)
    if callable(method):
        return method(content)
    raise TypeError(f"not a content container: {parent!r}")


def _check_arity(items: tuple[Any, ...]) -> None:
    if len(items) > MAX_SEQUENCE_ARITY:
        raise TypeError(f"sequences are limited to {MAX_SEQUENCE_ARITY} members, got {len(items)}; nest them instead")

"""Field-shape driven setters for attribute-bearing elements.

Each element field declares its shape through dataclass metadata:

- ``animatable_field``: the field holds ``Constant``/``Animated``; raw values
  are converted and wrapped in ``Constant``.
- ``sequence_field``: the field holds a tuple; a single value or a list/tuple
  of values is collected into it.
- anything else is a plain field and is assigned as given.

``Settable.set`` and ``Settable.animate`` use the same metadata, so an element
built positionally and one built through setters normalize identically.
"""

from __future__ import annotations

from dataclasses import MISSING, dataclass, field, fields, replace
from typing import Any, Callable, Literal

from .animatable import Animated, Constant


_META_KEY = "vglang"

FieldShape = Literal["animatable", "sequence"]


@dataclass(frozen=True)
class FieldSpec:
    shape: FieldShape
    convert: Callable[[Any], Any]
    optional: bool = False

    def coerce(self, name: str, value: object) -> object:
        if self.shape == "sequence":
            if value is None:
                return ()
            items = value if isinstance(value, (list, tuple)) else (value,)
            return tuple(self.convert(item) for item in items)
        if value is None:
            if self.optional:
                return None
            raise TypeError(f"field `{name}` is required")
        if isinstance(value, Animated):
            return value
        if isinstance(value, Constant):
            return Constant(self.convert(value.value))
        return Constant(self.convert(value))


def animatable_field(convert: Callable[[Any], Any], *, default: object = MISSING, optional: bool = False):
    spec = FieldSpec("animatable", convert, optional=optional)
    if optional and default is MISSING:
        default = None
    if default is MISSING:
        return field(metadata={_META_KEY: spec})
    return field(default=default, metadata={_META_KEY: spec})


def sequence_field(convert: Callable[[Any], Any]):
    return field(default=(), metadata={_META_KEY: FieldSpec("sequence", convert)})


def field_spec(obj: object, name: str) -> FieldSpec | None:
    for f in fields(obj):  # type: ignore[arg-type]
        if f.name == name:
            return f.metadata.get(_META_KEY)
    raise TypeError(f"{type(obj).__name__} has no field `{name}`")


class Settable:
    """Mixin for frozen element dataclasses."""

    def __post_init__(self) -> None:
        for f in fields(self):  # type: ignore[arg-type]
            spec = f.metadata.get(_META_KEY)
            if spec is None:
                continue
            object.__setattr__(self, f.name, spec.coerce(f.name, getattr(self, f.name)))

    def set(self, **values: object):
        changes: dict[str, object] = {}
        for name, value in values.items():
            spec = field_spec(self, name)
            changes[name] = value if spec is None else spec.coerce(name, value)
        return replace(self, **changes)  # type: ignore[type-var]

    def animate(self, **registers: str):
        changes: dict[str, object] = {}
        for name, register in registers.items():
            spec = field_spec(self, name)
            if spec is None or spec.shape != "animatable":
                raise TypeError(f"field `{name}` of {type(self).__name__} is not animatable")
            changes[name] = Animated(register)
        return replace(self, **changes)  # type: ignore[type-var]

    def animated_fields(self) -> dict[str, str]:
        """Map of field name to register name for every animated field."""
        out: dict[str, str] = {}
        for f in fields(self):  # type: ignore[arg-type]
            value = getattr(self, f.name)
            if isinstance(value, Animated):
                out[f.name] = value.name
        return out

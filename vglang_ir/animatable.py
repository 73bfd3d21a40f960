from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union


T = TypeVar("T")


class _AnimatableBase:
    __slots__ = ()

    @property
    def is_animated(self) -> bool:
        return isinstance(self, Animated)


@dataclass(frozen=True)
class Constant(_AnimatableBase, Generic[T]):
    """Attribute value fixed at authoring time."""

    value: T

    def constant_value(self) -> T:
        return self.value


@dataclass(frozen=True)
class Animated(_AnimatableBase):
    """Attribute value fed by the named animation register.

    The name is not checked here; an empty or unknown name is reported by the
    device that compiles or executes the document.
    """

    name: str

    def constant_value(self) -> object:
        raise TypeError(f"animated attribute `{self.name}` has no constant value")


Animatable = Union[Constant[T], Animated]


def animatable(value: object) -> Constant | Animated:
    if isinstance(value, (Constant, Animated)):
        return value
    return Constant(value)


def is_animatable(value: object) -> bool:
    return isinstance(value, (Constant, Animated))


def map_constant(value: Constant | Animated, fn) -> Constant | Animated:
    """Apply `fn` to a constant payload; animated references pass through unchanged."""
    if isinstance(value, Animated):
        return value
    return Constant(fn(value.value))

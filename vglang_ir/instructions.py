from __future__ import annotations

from dataclasses import dataclass, fields, is_dataclass
from enum import Enum
from typing import Iterable, Iterator, Union

from .animatable import Animated, Constant


@dataclass(frozen=True)
class AnimatedRef:
    """Leaf payload referring to a running animation register instead of inline data."""

    name: str


@dataclass(frozen=True)
class Leaf:
    payload: object

    def to_dict(self) -> dict[str, object]:
        return {"op": "leaf", "payload": payload_to_dict(self.payload)}


@dataclass(frozen=True)
class ScopeOpen:
    payload: object

    def to_dict(self) -> dict[str, object]:
        return {"op": "open", "payload": payload_to_dict(self.payload)}


@dataclass(frozen=True)
class ScopeClose:
    count: int = 1

    def __post_init__(self) -> None:
        if self.count < 1:
            raise ValueError("ScopeClose count must be >= 1")

    def to_dict(self) -> dict[str, object]:
        return {"op": "close", "count": self.count}


Instruction = Union[Leaf, ScopeOpen, ScopeClose]


def scope_delta(instruction: Instruction) -> int:
    if isinstance(instruction, ScopeOpen):
        return 1
    if isinstance(instruction, ScopeClose):
        return -instruction.count
    return 0


class InstructionLog:
    """Ordered, append-only record of one authoring pass.

    A log is sealed when a device starts compiling it; any later append is a
    programming error.
    """

    def __init__(self, instructions: Iterable[Instruction] = ()) -> None:
        self._items: list[Instruction] = []
        self._sealed = False
        for instruction in instructions:
            self.append(instruction)

    def append(self, instruction: Instruction) -> None:
        if self._sealed:
            raise RuntimeError("instruction log is sealed; it was handed to a device for compilation")
        if not isinstance(instruction, (Leaf, ScopeOpen, ScopeClose)):
            raise TypeError(f"not an instruction: {instruction!r}")
        self._items.append(instruction)

    def seal(self) -> None:
        self._sealed = True

    @property
    def sealed(self) -> bool:
        return self._sealed

    def snapshot(self) -> tuple[Instruction, ...]:
        return tuple(self._items)

    def __iter__(self) -> Iterator[Instruction]:
        return iter(tuple(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def __getitem__(self, index: int) -> Instruction:
        return self._items[index]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, InstructionLog):
            return self._items == other._items
        if isinstance(other, (list, tuple)):
            return self._items == list(other)
        return NotImplemented

    def __repr__(self) -> str:
        return f"InstructionLog({self._items!r})"


def instructions_to_dicts(instructions: Iterable[Instruction]) -> list[dict[str, object]]:
    return [instruction.to_dict() for instruction in instructions]


def payload_to_dict(payload: object) -> object:
    if payload is None or isinstance(payload, (str, int, float, bool)):
        return payload
    if isinstance(payload, Enum):
        return payload.value
    if isinstance(payload, Constant):
        return payload_to_dict(payload.value)
    if isinstance(payload, Animated):
        return {"animated": payload.name}
    if isinstance(payload, (list, tuple)):
        return [payload_to_dict(item) for item in payload]
    if is_dataclass(payload) and not isinstance(payload, type):
        out: dict[str, object] = {"type": type(payload).__name__}
        for f in fields(payload):
            out[f.name] = payload_to_dict(getattr(payload, f.name))
        return out
    return str(payload)

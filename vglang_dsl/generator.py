from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from vglang_ir.instructions import Instruction, InstructionLog, Leaf, ScopeClose, ScopeOpen, scope_delta

if TYPE_CHECKING:
    from vglang_device.device import Device, Program


class Generator(Protocol):
    """Sink for the instructions of one authoring pass."""

    def push(self, instruction: Instruction) -> None:
        ...

    def push_from(self, value: object) -> None:
        ...

    def pop(self, count: int = 1) -> None:
        ...


class IRGenerator:
    """Single owner of a growing instruction log.

    Append-only: nothing pushed is ever reordered or removed. One authoring
    pass owns a generator at a time and never suspends while appending.
    """

    def __init__(self) -> None:
        self._log = InstructionLog()
        self._depth = 0

    @property
    def instructions(self) -> InstructionLog:
        return self._log

    @property
    def depth(self) -> int:
        return self._depth

    def push(self, instruction: Instruction) -> None:
        self._log.append(instruction)
        self._depth += scope_delta(instruction)

    def push_from(self, value: object) -> None:
        if value is None or isinstance(value, (str, Leaf, ScopeOpen, ScopeClose)):
            raise TypeError(f"not a structured attribute value: {value!r}")
        self.push(ScopeOpen(value))

    def pop(self, count: int = 1) -> None:
        self.push(ScopeClose(count))

    async def compile(self, device: "Device") -> "Program":
        return await device.compile(self._log)

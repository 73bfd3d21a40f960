from __future__ import annotations

from abc import ABC, abstractmethod
import asyncio
import logging
from typing import Any, Iterable, Literal, Mapping

from vglang_ir.errors import BackendError, VglangError
from vglang_ir.instructions import Instruction, InstructionLog

from .tree import check_scope_balance

LOGGER = logging.getLogger(__name__)

DeviceState = Literal["idle", "compiling", "compiled", "failed"]
ProgramState = Literal["compiled", "executing", "done", "failed"]


class Program(ABC):
    """Backend-specific structural artifact produced by one `Device.compile` call.

    A program owns everything it needs to serialize; the log and generator it
    came from may be gone by the time `execute` runs. Single-use unless the
    backend sets `reusable`.
    """

    reusable = False

    def __init__(self) -> None:
        self._state: ProgramState = "compiled"

    @property
    def state(self) -> ProgramState:
        return self._state

    async def execute(self, frame: Mapping[str, Any] | None = None) -> Any:
        if self._state == "executing":
            raise RuntimeError("program is already executing")
        if self._state in ("done", "failed") and not self.reusable:
            raise RuntimeError("program was already executed; compile the log again")
        self._state = "executing"
        try:
            output = await self._execute(dict(frame or {}))
        except asyncio.CancelledError:
            self._state = "failed"
            raise
        except VglangError:
            self._state = "failed"
            raise
        except Exception as exc:
            self._state = "failed"
            raise BackendError(f"{type(self).__name__} execution failed: {exc}") from exc
        self._state = "done"
        return output

    @abstractmethod
    async def _execute(self, frame: dict[str, Any]) -> Any:
        raise NotImplementedError


class Device(ABC):
    """Compiler backend turning a finished instruction log into a Program.

    Concurrent `compile` calls on one device are serialized so the scope state
    of one document never interleaves with another's.
    """

    name = "device"

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._state: DeviceState = "idle"

    @property
    def state(self) -> DeviceState:
        return self._state

    async def compile(self, instructions: InstructionLog | Iterable[Instruction]) -> Program:
        async with self._lock:
            self._state = "compiling"
            try:
                snapshot = _snapshot(instructions)
                LOGGER.debug("%s compiling %d instruction(s)", self.name, len(snapshot))
                check_scope_balance(snapshot)
                program = await self._compile(snapshot)
            except asyncio.CancelledError:
                self._state = "failed"
                raise
            except VglangError as exc:
                self._state = "failed"
                LOGGER.debug("%s compile failed: %s", self.name, exc)
                raise
            except Exception as exc:
                self._state = "failed"
                raise BackendError(f"{self.name} compile failed: {exc}") from exc
            self._state = "compiled"
            return program

    @abstractmethod
    async def _compile(self, instructions: tuple[Instruction, ...]) -> Program:
        raise NotImplementedError


def _snapshot(instructions: InstructionLog | Iterable[Instruction]) -> tuple[Instruction, ...]:
    if isinstance(instructions, InstructionLog):
        instructions.seal()
        return instructions.snapshot()
    return tuple(instructions)

"""Backend contract: compile an instruction log into a Program, execute it into output."""

from .device import Device, DeviceState, Program, ProgramState
from .pipeline import RenderResult, render_document
from .registers import AnimationRegister, RegisterTable, registers_from_mapping
from .tree import ScopeNode, check_scope_balance, scope_tree

__all__ = [
    "AnimationRegister",
    "Device",
    "DeviceState",
    "Program",
    "ProgramState",
    "RegisterTable",
    "RenderResult",
    "ScopeNode",
    "check_scope_balance",
    "registers_from_mapping",
    "render_document",
    "scope_tree",
]

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Union

from vglang_ir.errors import StructuralError
from vglang_ir.instructions import Instruction, Leaf, ScopeClose, ScopeOpen


@dataclass
class ScopeNode:
    """One bracketed region of a log; the root node has no payload."""

    payload: object
    index: int | None = None
    children: list[Union["ScopeNode", Leaf]] = field(default_factory=list)

    def walk(self):
        """Yield (depth, item) depth-first in document order, excluding the node itself."""
        stack: list[tuple[int, Union[ScopeNode, Leaf]]] = [(0, child) for child in reversed(self.children)]
        while stack:
            depth, item = stack.pop()
            yield depth, item
            if isinstance(item, ScopeNode):
                stack.extend((depth + 1, child) for child in reversed(item.children))


def check_scope_balance(instructions: Iterable[Instruction]) -> None:
    """Replay the open/close counter; raise StructuralError on the first violation."""
    open_indices: list[int] = []
    for index, instruction in enumerate(instructions):
        if isinstance(instruction, ScopeOpen):
            open_indices.append(index)
        elif isinstance(instruction, ScopeClose):
            if instruction.count > len(open_indices):
                raise StructuralError(
                    f"close at index {index} unwinds {instruction.count} scope(s) but only "
                    f"{len(open_indices)} are open",
                    index=index,
                    depth=len(open_indices) - instruction.count,
                )
            del open_indices[len(open_indices) - instruction.count :]
    if open_indices:
        raise StructuralError(
            f"{len(open_indices)} scope(s) left open at end of log; first unmatched open at index {open_indices[0]}",
            index=open_indices[0],
            depth=len(open_indices),
        )


def scope_tree(instructions: Iterable[Instruction]) -> ScopeNode:
    """Rebuild nesting in one forward pass over the log."""
    root = ScopeNode(payload=None)
    stack: list[ScopeNode] = [root]
    for index, instruction in enumerate(instructions):
        if isinstance(instruction, ScopeOpen):
            node = ScopeNode(payload=instruction.payload, index=index)
            stack[-1].children.append(node)
            stack.append(node)
        elif isinstance(instruction, ScopeClose):
            if instruction.count >= len(stack):
                raise StructuralError(
                    f"close at index {index} unwinds {instruction.count} scope(s) but only {len(stack) - 1} are open",
                    index=index,
                    depth=len(stack) - 1 - instruction.count,
                )
            del stack[len(stack) - instruction.count :]
        else:
            stack[-1].children.append(instruction)
    if len(stack) != 1:
        raise StructuralError(
            f"{len(stack) - 1} scope(s) left open at end of log",
            index=stack[1].index,
            depth=len(stack) - 1,
        )
    return root

from __future__ import annotations


class VglangError(Exception):
    """Structured pipeline error.

    Raised only by the compile/execute half of the pipeline. Authoring a
    description never produces one of these.
    """

    code = "vglang"

    def __init__(self, message: str, *, code: str | None = None) -> None:
        if code is not None:
            self.code = code
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class StructuralError(VglangError):
    """Scope imbalance found while replaying an instruction log."""

    code = "structural"

    def __init__(self, message: str, *, index: int | None = None, depth: int = 0) -> None:
        self.index = index
        self.depth = depth
        super().__init__(message)


class UnresolvedReference(VglangError):
    code = "unresolved_reference"

    def __init__(self, name: str, message: str | None = None) -> None:
        self.name = name
        if message is None:
            message = f"animation register `{name}` is not defined" if name else "animation register name is empty"
        super().__init__(message)


class BackendError(VglangError):
    code = "backend"

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from vglang_ir.errors import UnresolvedReference


@dataclass(frozen=True)
class AnimationRegister:
    """A running animation bound to a register name.

    `values` are keyframe values in the attribute's own domain; backends that
    cannot animate (raster preview) refuse it.
    """

    values: tuple[Any, ...]
    dur: str
    repeat_count: str = "indefinite"

    def __post_init__(self) -> None:
        if not self.values:
            raise ValueError("animation register requires at least one value")
        if not self.dur.strip():
            raise ValueError("animation register `dur` must be non-empty")

    @property
    def initial(self) -> Any:
        return self.values[0]


class RegisterTable:
    """Register lookup: per-execution frame values shadow device-level registers."""

    def __init__(self, registers: Mapping[str, Any] | None = None, frame: Mapping[str, Any] | None = None) -> None:
        self._values: dict[str, Any] = dict(registers or {})
        self._values.update(frame or {})

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def lookup(self, name: str) -> Any:
        if not name:
            raise UnresolvedReference(name)
        try:
            return self._values[name]
        except KeyError:
            raise UnresolvedReference(name) from None

    def get(self, name: str, default: Any = None) -> Any:
        return self._values.get(name, default)


def registers_from_mapping(raw: Mapping[str, Any], field_name: str = "registers") -> dict[str, Any]:
    """Parse a `[registers]` TOML table.

    Sub-tables with a `values` key become AnimationRegister; anything else is a constant.
    """
    if not isinstance(raw, Mapping):
        raise ValueError(f"{field_name} must be a table")
    out: dict[str, Any] = {}
    for name, value in raw.items():
        if not isinstance(name, str) or not name.strip():
            raise ValueError(f"{field_name} keys must be non-empty strings")
        if isinstance(value, Mapping):
            if "values" not in value:
                raise ValueError(f"{field_name}.{name} table requires `values`")
            values = value["values"]
            if not isinstance(values, list):
                raise ValueError(f"{field_name}.{name}.values must be a list")
            out[name] = AnimationRegister(
                values=tuple(values),
                dur=str(value.get("dur", "1s")),
                repeat_count=str(value.get("repeat_count", "indefinite")),
            )
        else:
            out[name] = value
    return out

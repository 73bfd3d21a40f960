from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any, Mapping

from vglang_dsl.drawing import render_log
from vglang_ir.errors import VglangError

from .device import Device

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderResult:
    ok: bool
    output: Any = None
    error: VglangError | None = None
    instruction_count: int = 0


async def render_document(
    graphic: Any,
    device: Device,
    *,
    frame: Mapping[str, Any] | None = None,
) -> RenderResult:
    """Draw, compile and execute one document.

    Pipeline errors come back in the result; the first failing stage stops the
    run and no partial output is returned.
    """
    log = render_log(graphic)
    try:
        program = await device.compile(log)
        output = await program.execute(frame)
    except VglangError as exc:
        LOGGER.debug("render via %s failed: %s", device.name, exc)
        return RenderResult(ok=False, error=exc, instruction_count=len(log))
    return RenderResult(ok=True, output=output, instruction_count=len(log))

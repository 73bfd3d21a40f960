"""Pillow-backed PNG preview backend for vglang."""

from .device import RasterDevice, RasterDeviceConfig
from .program import DrawOp, RasterProgram

__all__ = [
    "DrawOp",
    "RasterDevice",
    "RasterDeviceConfig",
    "RasterProgram",
]

"""SVG markup backend for vglang."""

from .device import SVG_NAMESPACE, SvgDevice, SvgDeviceConfig
from .nodes import Deferred, SvgNode, format_number, format_value
from .program import SvgProgram

__all__ = [
    "Deferred",
    "SVG_NAMESPACE",
    "SvgDevice",
    "SvgDeviceConfig",
    "SvgNode",
    "SvgProgram",
    "format_number",
    "format_value",
]

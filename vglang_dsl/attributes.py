from __future__ import annotations

from vglang_ir.elements import Fill, Opacity, Stroke, Transform

from .drawing import register_appliable


register_appliable(Fill, Stroke, Opacity, Transform)

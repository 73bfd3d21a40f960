from __future__ import annotations

from vglang_ir.elements import SHAPE_TYPES, Group, Layer

from .drawing import register_container, register_leaf


register_container(Layer, Group)
register_leaf(*SHAPE_TYPES)

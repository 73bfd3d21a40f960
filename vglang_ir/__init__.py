"""Instruction and attribute model for vglang documents."""

from .animatable import Animatable, Animated, Constant, animatable, is_animatable, map_constant
from .elements import (
    ATTRIBUTE_TYPES,
    CONTAINER_TYPES,
    SHAPE_TYPES,
    Circle,
    Fill,
    Font,
    Group,
    Layer,
    Line,
    Opacity,
    Polygon,
    Polyline,
    Rect,
    Stroke,
    Text,
    TextLayout,
    TextSpan,
    Transform,
    TransformOp,
)
from .errors import BackendError, StructuralError, UnresolvedReference, VglangError
from .instructions import (
    AnimatedRef,
    Instruction,
    InstructionLog,
    Leaf,
    ScopeClose,
    ScopeOpen,
    instructions_to_dicts,
    payload_to_dict,
    scope_delta,
)
from .setters import Settable, animatable_field, sequence_field
from .values import (
    Angle,
    Color,
    Measurement,
    Point,
    PreserveAspectRatio,
    Unit,
    ViewBox,
    angle,
    color,
    measurement,
    point,
    viewbox,
)

__all__ = [
    "ATTRIBUTE_TYPES",
    "Angle",
    "Animatable",
    "Animated",
    "AnimatedRef",
    "BackendError",
    "CONTAINER_TYPES",
    "Circle",
    "Color",
    "Constant",
    "Fill",
    "Font",
    "Group",
    "Instruction",
    "InstructionLog",
    "Layer",
    "Leaf",
    "Line",
    "Measurement",
    "Opacity",
    "Point",
    "Polygon",
    "Polyline",
    "PreserveAspectRatio",
    "Rect",
    "SHAPE_TYPES",
    "ScopeClose",
    "ScopeOpen",
    "Settable",
    "Stroke",
    "StructuralError",
    "Text",
    "TextLayout",
    "TextSpan",
    "Transform",
    "TransformOp",
    "Unit",
    "UnresolvedReference",
    "VglangError",
    "ViewBox",
    "angle",
    "animatable",
    "animatable_field",
    "color",
    "instructions_to_dicts",
    "is_animatable",
    "map_constant",
    "measurement",
    "payload_to_dict",
    "point",
    "scope_delta",
    "sequence_field",
    "viewbox",
]

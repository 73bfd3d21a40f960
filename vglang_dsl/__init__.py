"""Composable authoring combinators that linearize descriptions into instruction logs."""

from . import attributes, canvas, text  # noqa: F401  (register element capabilities)
from .drawing import (
    MAX_SEQUENCE_ARITY,
    AnimatedLeaf,
    Appliable,
    AttributeScope,
    ContentScope,
    Graphic,
    Sequence,
    WithContent,
    animated,
    apply,
    draw,
    is_appliable,
    is_container,
    register_appliable,
    register_container,
    register_leaf,
    render_log,
    seq,
    with_,
)
from .generator import Generator, IRGenerator

__all__ = [
    "AnimatedLeaf",
    "Appliable",
    "AttributeScope",
    "ContentScope",
    "Generator",
    "Graphic",
    "IRGenerator",
    "MAX_SEQUENCE_ARITY",
    "Sequence",
    "WithContent",
    "animated",
    "apply",
    "draw",
    "is_appliable",
    "is_container",
    "register_appliable",
    "register_container",
    "register_leaf",
    "render_log",
    "seq",
    "with_",
]

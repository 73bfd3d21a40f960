from __future__ import annotations

import math
from typing import Iterable, Sequence

import numpy as np

from vglang_ir.elements import TransformOp


def identity() -> np.ndarray:
    return np.identity(3, dtype=np.float64)


def scaling(sx: float, sy: float) -> np.ndarray:
    return np.array([[sx, 0.0, 0.0], [0.0, sy, 0.0], [0.0, 0.0, 1.0]], dtype=np.float64)


def translation(tx: float, ty: float) -> np.ndarray:
    return np.array([[1.0, 0.0, tx], [0.0, 1.0, ty], [0.0, 0.0, 1.0]], dtype=np.float64)


def op_matrix(op: TransformOp) -> np.ndarray:
    args = op.args
    if op.kind == "translate":
        return translation(args[0], args[1] if len(args) > 1 else 0.0)
    if op.kind == "scale":
        return scaling(args[0], args[1] if len(args) > 1 else args[0])
    if op.kind == "rotate":
        rad = math.radians(args[0])
        cos, sin = math.cos(rad), math.sin(rad)
        rot = np.array([[cos, -sin, 0.0], [sin, cos, 0.0], [0.0, 0.0, 1.0]], dtype=np.float64)
        if len(args) == 3:
            cx, cy = args[1], args[2]
            return translation(cx, cy) @ rot @ translation(-cx, -cy)
        return rot
    if op.kind == "skewX":
        return np.array([[1.0, math.tan(math.radians(args[0])), 0.0], [0.0, 1.0, 0.0], [0.0, 0.0, 1.0]])
    if op.kind == "skewY":
        return np.array([[1.0, 0.0, 0.0], [math.tan(math.radians(args[0])), 1.0, 0.0], [0.0, 0.0, 1.0]])
    a, b, c, d, e, f = args
    return np.array([[a, c, e], [b, d, f], [0.0, 0.0, 1.0]], dtype=np.float64)


def compose(ops: Iterable[TransformOp]) -> np.ndarray:
    """Matrix of an SVG transform list; the leftmost op is applied last."""
    matrix = identity()
    for op in ops:
        matrix = matrix @ op_matrix(op)
    return matrix


def apply_points(matrix: np.ndarray, points: Sequence[tuple[float, float]]) -> list[tuple[float, float]]:
    if not points:
        return []
    homogeneous = np.column_stack([np.asarray(points, dtype=np.float64), np.ones(len(points))])
    mapped = homogeneous @ matrix.T
    return [(float(x), float(y)) for x, y in mapped[:, :2]]


def ellipse_points(cx: float, cy: float, r: float, segments: int = 64) -> list[tuple[float, float]]:
    theta = np.linspace(0.0, 2.0 * math.pi, segments, endpoint=False)
    xs = cx + r * np.cos(theta)
    ys = cy + r * np.sin(theta)
    return [(float(x), float(y)) for x, y in zip(xs, ys)]


def mean_scale(matrix: np.ndarray) -> float:
    """Uniform scale factor of the linear part, used for stroke widths."""
    return math.sqrt(abs(float(np.linalg.det(matrix[:2, :2]))))

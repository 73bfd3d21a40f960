from vglang_dsl import apply, with_
from vglang_ir import Animated, Circle, Fill, Layer, Opacity


def build():
    dot = Circle(cx=40, cy=40, r=12).animate(r="pulse_radius")
    return with_(
        Layer(width=80, height=80, viewbox=(0, 0, 80, 80)),
        apply((Fill("#268bd2"), Opacity(Animated("pulse_opacity"))), dot),
    )

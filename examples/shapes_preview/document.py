from vglang_dsl import apply, seq, with_
from vglang_ir import (
    Circle,
    Fill,
    Group,
    Layer,
    Line,
    Polygon,
    Rect,
    Stroke,
    Transform,
    TransformOp,
)


def build():
    frame = apply((Fill("transparent"), Stroke("#586e75", width=2)), Rect(x=8, y=8, width=144, height=84, rx=6))
    badge = apply(
        (Transform(TransformOp.translate(80, 50)), Fill("#ffffff").animate(paint="accent")),
        Circle(cx=0, cy=0, r=24),
    )
    arrow = apply(
        (Fill("#268bd2"), Stroke("#073642", width=1)),
        Polygon(points=[(110, 40), (130, 50), (110, 60)]),
    )
    rule = apply(Stroke("#93a1a1"), Line(x1=20, y1=80, x2=140, y2=80))
    return with_(Layer(width=160, height=100), with_(Group(id="preview"), seq(frame, badge, arrow, rule)))

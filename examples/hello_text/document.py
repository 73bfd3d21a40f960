from vglang_dsl import animated, apply, with_
from vglang_ir import Fill, Font, Layer, Text, TextLayout, TextSpan


def build():
    heading = with_(
        Text(x=100, y=48),
        (
            animated("greeting"),
            ", ",
            apply(Fill("#d33682"), with_(TextSpan(), "world")),
        ),
    )
    return with_(
        Layer(width=200, height=80),
        apply((Font(family="Noto Sans", size=20), TextLayout(anchor="middle")), heading),
    )

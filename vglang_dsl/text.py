from __future__ import annotations

from vglang_ir.elements import Font, Text, TextLayout, TextSpan

from .drawing import register_appliable, register_container


# Text and TextSpan hold character content; Font and TextLayout only scope it.
register_container(Text, TextSpan)
register_appliable(Font, TextLayout)

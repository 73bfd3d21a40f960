from __future__ import annotations

import unittest
import xml.etree.ElementTree as ET

from vglang_device import AnimationRegister, render_document
from vglang_dsl import animated, apply, render_log, with_
from vglang_ir import (
    Animated,
    Circle,
    Fill,
    Font,
    Group,
    Layer,
    Line,
    Polygon,
    Rect,
    Stroke,
    Text,
    TextLayout,
    TextSpan,
    Transform,
    TransformOp,
)
from vglang_ir.errors import BackendError, UnresolvedReference
from vglang_svg import SVG_NAMESPACE, SvgDevice, SvgDeviceConfig, format_number

NS = {"svg": SVG_NAMESPACE}


def _q(tag: str) -> str:
    return f"{{{SVG_NAMESPACE}}}{tag}"


async def _render(graphic, config: SvgDeviceConfig | None = None, frame=None) -> str:
    program = await SvgDevice(config).compile(render_log(graphic))
    return await program.execute(frame)


class SvgDocumentTests(unittest.IsolatedAsyncioTestCase):
    async def test_layer_with_filled_rect(self) -> None:
        markup = await _render(with_(Layer(200, 80, viewbox=(0, 0, 100, 40)), apply(Fill("red"), Rect(0, 0, 10, 10))))
        root = ET.fromstring(markup)
        self.assertEqual(root.tag, _q("svg"))
        self.assertEqual(root.get("width"), "200")
        self.assertEqual(root.get("height"), "80")
        self.assertEqual(root.get("viewBox"), "0 0 100 40")
        group = root.find("svg:g", NS)
        self.assertIsNotNone(group)
        self.assertEqual(group.get("fill"), "#ff0000")
        rect = group.find("svg:rect", NS)
        self.assertEqual((rect.get("x"), rect.get("width")), ("0", "10"))
        self.assertIsNone(rect.get("rx"))

    async def test_content_without_layer_gets_implicit_root(self) -> None:
        markup = await _render((Circle(5, 5, 2), Line(0, 0, 10, 10)))
        root = ET.fromstring(markup)
        self.assertEqual(root.tag, _q("svg"))
        self.assertEqual([child.tag for child in root], [_q("circle"), _q("line")])
        self.assertTrue(markup.startswith('<svg xmlns="http://www.w3.org/2000/svg"'))

    async def test_text_runs_and_spans(self) -> None:
        markup = await _render(with_(Text(x=4, y=12), ("a", with_(TextSpan(dx=2), "b"), "c")))
        text = ET.fromstring(markup).find("svg:text", NS)
        self.assertEqual((text.get("x"), text.get("y")), ("4", "12"))
        self.assertEqual(text.text, "a")
        span = text.find("svg:tspan", NS)
        self.assertEqual(span.get("dx"), "2")
        self.assertEqual(span.text, "b")
        self.assertEqual(span.tail, "c")

    async def test_attribute_scope_inside_text_becomes_tspan(self) -> None:
        markup = await _render(with_(Text(), ("x", apply(Fill("blue"), "y"))))
        text = ET.fromstring(markup).find("svg:text", NS)
        span = text.find("svg:tspan", NS)
        self.assertEqual(span.get("fill"), "#0000ff")
        self.assertEqual(span.text, "y")

    async def test_attribute_mapping(self) -> None:
        graphic = apply(
            (
                Stroke("#ff000080", width="2px"),
                Font(family=["Noto Sans", "serif"], size=14, weight="bold"),
                TextLayout(anchor="middle"),
                Transform([TransformOp.translate(10, 20), TransformOp.scale(2)]),
                Fill("black", opacity=0.25),
            ),
            Polygon(points=[(0, 0), (4, 0), (2, 3)]),
        )
        root = ET.fromstring(await _render(graphic))
        stroke = root.find("svg:g", NS)
        self.assertEqual(stroke.get("stroke"), "#ff0000")
        self.assertEqual(stroke.get("stroke-width"), "2px")
        self.assertEqual(stroke.get("stroke-opacity"), "0.502")
        font = stroke.find("svg:g", NS)
        self.assertEqual(font.get("font-family"), "'Noto Sans', serif")
        self.assertEqual(font.get("font-size"), "14")
        self.assertEqual(font.get("font-weight"), "bold")
        layout = font.find("svg:g", NS)
        self.assertEqual(layout.get("text-anchor"), "middle")
        transform = layout.find("svg:g", NS)
        self.assertEqual(transform.get("transform"), "translate(10 20) scale(2 2)")
        fill = transform.find("svg:g", NS)
        self.assertEqual(fill.get("fill-opacity"), "0.25")
        polygon = fill.find("svg:polygon", NS)
        self.assertEqual(polygon.get("points"), "0,0 4,0 2,3")

    async def test_group_id_and_precision(self) -> None:
        config = SvgDeviceConfig(precision=2)
        root = ET.fromstring(await _render(with_(Group(id="g1"), Circle(1.23456, 0, 1)), config))
        group = root.find("svg:g", NS)
        self.assertEqual(group.get("id"), "g1")
        self.assertEqual(group.find("svg:circle", NS).get("cx"), "1.23")

    async def test_indent_and_declaration(self) -> None:
        config = SvgDeviceConfig(indent="  ", xml_declaration=True)
        markup = await _render(with_(Layer(10, 10), Rect(0, 0, 1, 1)), config)
        self.assertTrue(markup.startswith('<?xml version="1.0" encoding="UTF-8"?>\n<svg'))
        self.assertIn("\n  <rect", markup)


class SvgRegisterTests(unittest.IsolatedAsyncioTestCase):
    async def test_constant_register_from_frame(self) -> None:
        program = await SvgDevice().compile(render_log(Circle(0, 0, 1).animate(r="radius")))
        first = ET.fromstring(await program.execute({"radius": 5}))
        second = ET.fromstring(await program.execute({"radius": "7px"}))
        self.assertEqual(first.find("svg:circle", NS).get("r"), "5")
        self.assertEqual(second.find("svg:circle", NS).get("r"), "7px")
        self.assertEqual(program.state, "done")

    async def test_animation_register_emits_animate_child(self) -> None:
        config = SvgDeviceConfig(registers={"pulse": AnimationRegister((12, 28, 12), "2s")})
        root = ET.fromstring(await _render(Circle(0, 0, 1).animate(r="pulse"), config))
        circle = root.find("svg:circle", NS)
        self.assertEqual(circle.get("r"), "12")
        animate = circle.find("svg:animate", NS)
        self.assertEqual(animate.get("attributeName"), "r")
        self.assertEqual(animate.get("values"), "12;28;12")
        self.assertEqual(animate.get("dur"), "2s")
        self.assertEqual(animate.get("repeatCount"), "indefinite")

    async def test_frame_shadows_config_register(self) -> None:
        config = SvgDeviceConfig(registers={"paint": "red"})
        graphic = apply(Fill(Animated("paint")), Rect(0, 0, 1, 1))
        root = ET.fromstring(await _render(graphic, config, frame={"paint": "#00ff00"}))
        self.assertEqual(root.find("svg:g", NS).get("fill"), "#00ff00")

    async def test_animated_text(self) -> None:
        root = ET.fromstring(await _render(with_(Text(), ("Hello ", animated("name"))), frame={"name": "Ada"}))
        self.assertEqual(root.find("svg:text", NS).text, "Hello Ada")

    async def test_missing_register_raises(self) -> None:
        program = await SvgDevice().compile(render_log(Circle(0, 0, 1).animate(r="gone")))
        with self.assertRaises(UnresolvedReference) as ctx:
            await program.execute()
        self.assertEqual(ctx.exception.name, "gone")

    async def test_placeholder_policy(self) -> None:
        config = SvgDeviceConfig(unresolved="placeholder")
        with self.assertLogs("vglang_svg.program", level="WARNING"):
            markup = await _render(Circle(0, 0, 1).animate(r="gone"), config)
        circle = ET.fromstring(markup).find("svg:circle", NS)
        self.assertEqual(circle.get("r"), "{gone}")
        self.assertEqual(circle.get("data-vglang-unresolved"), "gone")

    async def test_placeholder_policy_marks_text_run(self) -> None:
        config = SvgDeviceConfig(unresolved="placeholder")
        with self.assertLogs("vglang_svg.program", level="WARNING"):
            markup = await _render(with_(Text(), ("Hi ", animated("missing"))), config)
        text = ET.fromstring(markup).find("svg:text", NS)
        self.assertEqual(text.text, "Hi {missing}")
        self.assertEqual(text.get("data-vglang-unresolved"), "missing")

    async def test_empty_register_name_fails_compile(self) -> None:
        with self.assertRaises(UnresolvedReference):
            await SvgDevice().compile(render_log(Circle(0, 0, 1).animate(r="")))
        with self.assertRaises(UnresolvedReference):
            await SvgDevice().compile(render_log(with_(Text(), animated(""))))

    async def test_unusable_register_value(self) -> None:
        program = await SvgDevice().compile(render_log(Circle(0, 0, 1).animate(r="radius")))
        with self.assertRaises(BackendError):
            await program.execute({"radius": "wide"})

    async def test_animation_register_cannot_feed_text(self) -> None:
        config = SvgDeviceConfig(registers={"name": AnimationRegister(("a", "b"), "1s")})
        with self.assertRaises(BackendError):
            await _render(with_(Text(), animated("name")), config)


class SvgStructureErrorTests(unittest.IsolatedAsyncioTestCase):
    async def test_character_data_outside_text(self) -> None:
        with self.assertRaises(BackendError):
            await _render(with_(Layer(10, 10), "loose"))

    async def test_several_top_level_layers(self) -> None:
        with self.assertRaises(BackendError):
            await _render((with_(Layer(10, 10), Rect(0, 0, 1, 1)), with_(Layer(10, 10), Rect(0, 0, 1, 1))))

    async def test_content_beside_layer(self) -> None:
        with self.assertRaises(BackendError):
            await _render((with_(Layer(10, 10), Rect(0, 0, 1, 1)), Rect(0, 0, 1, 1)))

    async def test_span_outside_text(self) -> None:
        with self.assertRaises(BackendError):
            await _render(with_(TextSpan(), "x"))

    async def test_shape_inside_text(self) -> None:
        with self.assertRaises(BackendError):
            await _render(with_(Text(), Rect(0, 0, 1, 1)))

    async def test_transform_inside_text(self) -> None:
        with self.assertRaisesRegex(BackendError, "transform"):
            await _render(with_(Text(), apply(Transform([TransformOp.translate(1, 2)]), "x")))

    async def test_transform_around_text(self) -> None:
        root = ET.fromstring(await _render(apply(Transform([TransformOp.translate(1, 2)]), with_(Text(), "x"))))
        self.assertEqual(root.find("svg:g/svg:text", NS).text, "x")

    async def test_render_document_wraps_failure(self) -> None:
        result = await render_document(with_(Layer(10, 10), "loose"), SvgDevice())
        self.assertFalse(result.ok)
        self.assertIsInstance(result.error, BackendError)


class SvgConfigTests(unittest.TestCase):
    def test_from_mapping(self) -> None:
        config = SvgDeviceConfig.from_mapping(
            {"precision": 3, "indent": "  ", "unresolved": "placeholder"},
            {"pulse": {"values": [1, 2], "dur": "1s"}, "title": "Hi"},
        )
        self.assertEqual(config.precision, 3)
        self.assertEqual(config.unresolved, "placeholder")
        self.assertIsInstance(config.registers["pulse"], AnimationRegister)
        self.assertEqual(config.registers["title"], "Hi")

    def test_from_mapping_rejects_bad_tables(self) -> None:
        with self.assertRaises(ValueError):
            SvgDeviceConfig.from_mapping({"precision": "3"})
        with self.assertRaises(ValueError):
            SvgDeviceConfig.from_mapping({"colour": "red"})
        with self.assertRaises(ValueError):
            SvgDeviceConfig.from_mapping({"unresolved": "ignore"})
        with self.assertRaises(ValueError):
            SvgDeviceConfig(indent="xx")

    def test_format_number(self) -> None:
        self.assertEqual(format_number(1.5, 4), "1.5")
        self.assertEqual(format_number(2.0, 4), "2")
        self.assertEqual(format_number(-0.00001, 4), "0")
        self.assertEqual(format_number(1 / 3, 2), "0.33")


if __name__ == "__main__":
    unittest.main()

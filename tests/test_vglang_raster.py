from __future__ import annotations

import io
import unittest

import numpy as np
from PIL import Image

from vglang_device import AnimationRegister
from vglang_dsl import apply, render_log, with_
from vglang_ir import (
    Animated,
    Circle,
    Color,
    Fill,
    Layer,
    Opacity,
    Rect,
    Stroke,
    Text,
    Transform,
    TransformOp,
)
from vglang_ir.errors import BackendError, UnresolvedReference
from vglang_raster import RasterDevice, RasterDeviceConfig
from vglang_raster.geometry import apply_points, compose, mean_scale

WHITE = (255, 255, 255, 255)
RED = (255, 0, 0, 255)


async def _render(graphic, config: RasterDeviceConfig | None = None, frame=None) -> Image.Image:
    program = await RasterDevice(config).compile(render_log(graphic))
    data = await program.execute(frame)
    return Image.open(io.BytesIO(data)).convert("RGBA")


class RasterOutputTests(unittest.IsolatedAsyncioTestCase):
    async def test_configured_canvas_size(self) -> None:
        image = await _render(apply(Fill("red"), Rect(0, 0, 20, 10)), RasterDeviceConfig(width=20, height=10))
        self.assertEqual(image.size, (20, 10))
        self.assertEqual(image.getpixel((10, 5)), RED)

    async def test_layer_size_and_scale(self) -> None:
        graphic = with_(Layer(30, 15), apply(Fill("red"), Rect(0, 0, 10, 10)))
        image = await _render(graphic, RasterDeviceConfig(scale=2.0))
        self.assertEqual(image.size, (60, 30))
        self.assertEqual(image.getpixel((15, 5)), RED)
        self.assertEqual(image.getpixel((30, 5)), WHITE)

    async def test_viewbox_maps_user_units(self) -> None:
        graphic = with_(Layer(40, 40, viewbox=(0, 0, 20, 20)), apply(Fill("red"), Rect(0, 0, 10, 10)))
        image = await _render(graphic)
        self.assertEqual(image.getpixel((15, 15)), RED)
        self.assertEqual(image.getpixel((30, 30)), WHITE)

    async def test_transform_scope(self) -> None:
        graphic = apply((Transform(TransformOp.translate(10, 0)), Fill("red")), Rect(0, 0, 5, 5))
        image = await _render(graphic, RasterDeviceConfig(width=20, height=10))
        self.assertEqual(image.getpixel((12, 2)), RED)
        self.assertEqual(image.getpixel((2, 2)), WHITE)

    async def test_opacity_blends_with_background(self) -> None:
        graphic = apply((Opacity(0.5), Fill("red")), Rect(0, 0, 10, 10))
        image = await _render(graphic, RasterDeviceConfig(width=10, height=10))
        r, g, b, a = image.getpixel((5, 5))
        self.assertEqual(r, 255)
        self.assertAlmostEqual(g, 127, delta=2)
        self.assertEqual(a, 255)

    async def test_stroke_only_circle_leaves_center_empty(self) -> None:
        graphic = apply((Fill("transparent"), Stroke("black", width=2)), Circle(10, 10, 8))
        image = await _render(graphic, RasterDeviceConfig(width=20, height=20, background=Color(255, 255, 255)))
        self.assertEqual(image.getpixel((10, 10)), WHITE)
        self.assertNotEqual(image.getpixel((18, 10)), WHITE)

    async def test_text_draws_pixels(self) -> None:
        image = await _render(with_(Text(x=2, y=14), "Hi"), RasterDeviceConfig(width=40, height=16))
        self.assertTrue(any(pixel != WHITE for pixel in image.getdata()))

    async def test_animated_field_from_frame(self) -> None:
        graphic = apply(Fill(Animated("paint")), Rect(0, 0, 4, 4))
        image = await _render(graphic, RasterDeviceConfig(width=4, height=4), frame={"paint": "blue"})
        self.assertEqual(image.getpixel((2, 2)), (0, 0, 255, 255))

    async def test_program_is_single_use(self) -> None:
        program = await RasterDevice(RasterDeviceConfig(width=4, height=4)).compile(render_log(Rect(0, 0, 1, 1)))
        await program.execute()
        with self.assertRaises(RuntimeError):
            await program.execute()


class RasterErrorTests(unittest.IsolatedAsyncioTestCase):
    async def test_missing_register(self) -> None:
        with self.assertRaises(UnresolvedReference):
            await _render(Circle(0, 0, 1).animate(r="gone"), RasterDeviceConfig(width=4, height=4))

    async def test_empty_register_name_fails_compile(self) -> None:
        with self.assertRaises(UnresolvedReference):
            await RasterDevice().compile(render_log(with_(Layer(10, 10), Rect(0, 0, 5, 5).animate(x=""))))
        with self.assertRaises(UnresolvedReference):
            await RasterDevice().compile(render_log(apply(Fill(Animated("")), Rect(0, 0, 5, 5))))
        with self.assertRaises(UnresolvedReference):
            await RasterDevice().compile(render_log(with_(Text().animate(x=""), "hi")))

    async def test_animation_register_is_refused(self) -> None:
        config = RasterDeviceConfig(width=4, height=4, registers={"r": AnimationRegister((1, 2), "1s")})
        with self.assertRaises(BackendError):
            await _render(Circle(0, 0, 1).animate(r="r"), config)

    async def test_relative_units_are_refused(self) -> None:
        with self.assertRaises(BackendError):
            await _render(Rect(0, 0, "1em", 5), RasterDeviceConfig(width=4, height=4))

    async def test_canvas_needs_a_size(self) -> None:
        with self.assertRaises(BackendError):
            await _render(Rect(0, 0, 1, 1))

    async def test_nested_layer(self) -> None:
        with self.assertRaises(BackendError):
            await RasterDevice().compile(render_log(apply(Fill("red"), with_(Layer(4, 4), Rect(0, 0, 1, 1)))))

    async def test_loose_character_data(self) -> None:
        with self.assertRaises(BackendError):
            await RasterDevice().compile(render_log(with_(Layer(4, 4), "loose")))


class RasterConfigTests(unittest.TestCase):
    def test_from_mapping(self) -> None:
        config = RasterDeviceConfig.from_mapping({"width": 20, "background": "#000", "scale": 2}, {"t": "x"})
        self.assertEqual(config.width, 20)
        self.assertEqual(config.background, Color(0, 0, 0))
        self.assertEqual(config.scale, 2.0)
        self.assertEqual(config.registers, {"t": "x"})

    def test_from_mapping_rejects_bad_tables(self) -> None:
        with self.assertRaises(ValueError):
            RasterDeviceConfig.from_mapping({"width": "20"})
        with self.assertRaises(ValueError):
            RasterDeviceConfig.from_mapping({"dpi": 2})
        with self.assertRaises(ValueError):
            RasterDeviceConfig.from_mapping({"background": "#zz"})
        with self.assertRaises(ValueError):
            RasterDeviceConfig(scale=0)


class GeometryTests(unittest.TestCase):
    def test_transform_list_applies_rightmost_first(self) -> None:
        matrix = compose([TransformOp.translate(10, 0), TransformOp.scale(2)])
        self.assertEqual(apply_points(matrix, [(1.0, 1.0)]), [(12.0, 2.0)])

    def test_rotate_about_center(self) -> None:
        matrix = compose([TransformOp.rotate(90, 5, 5)])
        [(x, y)] = apply_points(matrix, [(10.0, 5.0)])
        self.assertAlmostEqual(x, 5.0)
        self.assertAlmostEqual(y, 10.0)

    def test_mean_scale(self) -> None:
        self.assertAlmostEqual(mean_scale(compose([TransformOp.scale(3)])), 3.0)
        self.assertTrue(np.allclose(compose([]), np.identity(3)))


if __name__ == "__main__":
    unittest.main()

import sys
import unittest
import xml.etree.ElementTree as ET
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "renderer"))

import numpy as np

from qrstudio_renderer import ImageOptions, RenderOptions, Surface, surface_to_image, vector_svg
from qrstudio_renderer.layout import CLASSY_CORNERS, ModuleLayout, build_primitives
from qrstudio_renderer.models import CornersDotOptions, CornersSquareOptions, DotsOptions


def _grid(count=21, fill=True):
    return np.full((count, count), fill, dtype=bool)


class LayoutTests(unittest.TestCase):
    def test_box_and_centering(self):
        layout = ModuleLayout.build(_grid(21), RenderOptions(width=220, height=220))
        self.assertEqual(layout.box, 10)
        self.assertEqual((layout.offset_x, layout.offset_y), (5, 5))

    def test_finder_regions(self):
        layout = ModuleLayout.build(_grid(21), RenderOptions(width=210, height=210))
        self.assertTrue(layout.in_finder(0, 0))
        self.assertTrue(layout.in_finder(6, 20))
        self.assertTrue(layout.in_finder(20, 6))
        self.assertFalse(layout.in_finder(20, 20))
        self.assertFalse(layout.in_finder(10, 10))

    def test_logo_excavation_only_when_requested(self):
        opts = RenderOptions(width=210, height=210, image="logo", image_options=ImageOptions(image_size=0.2))
        layout = ModuleLayout.build(_grid(21), opts, with_logo=True)
        self.assertEqual(layout.logo_box(), (84, 84, 42, 42))
        self.assertTrue(layout.is_excavated(10, 10))
        self.assertFalse(layout.is_excavated(0, 10))

        keep = RenderOptions(width=210, height=210, image="logo", image_options=ImageOptions(hide_background_dots=False))
        self.assertFalse(ModuleLayout.build(_grid(21), keep, with_logo=True).is_excavated(10, 10))
        self.assertIsNone(ModuleLayout.build(_grid(21), opts, with_logo=False).logo_box())

    def test_primitives_follow_shapes(self):
        opts = RenderOptions(
            width=210,
            height=210,
            dots_options=DotsOptions(type="classy"),
            corners_square_options=CornersSquareOptions(type="dot"),
            corners_dot_options=CornersDotOptions(type="dot"),
        )
        prims = build_primitives(_grid(21), ModuleLayout.build(_grid(21), opts), opts)
        modules = [p for p in prims if p.w == 10 and p.kind == "rect"]
        self.assertEqual(len(modules), 21 * 21 - 3 * 49)
        self.assertTrue(all(p.corners == CLASSY_CORNERS for p in modules))
        # each finder: outer ring, inner ring, dot
        self.assertEqual(len([p for p in prims if p.kind == "ellipse"]), 9)


class EncoderTests(unittest.TestCase):
    def test_surface_buffer_length_checked(self):
        with self.assertRaises(ValueError):
            surface_to_image(Surface(width=2, height=2, pixel_format="RGBA", bytes=b"\x00" * 15))
        with self.assertRaises(ValueError):
            surface_to_image(Surface(width=1, height=1, pixel_format="CMYK", bytes=b"\x00" * 4))

    def test_vector_svg_classy_uses_paths(self):
        opts = RenderOptions(width=210, height=210, dots_options=DotsOptions(type="classy"))
        root = ET.fromstring(vector_svg(_grid(21), opts))
        ns = "{http://www.w3.org/2000/svg}"
        self.assertEqual(root.get("viewBox"), "0 0 210 210")
        self.assertGreater(len(root.findall(f".//{ns}path")), 0)

    def test_vector_svg_without_matrix_is_background(self):
        opts = RenderOptions(width=64, height=64)
        root = ET.fromstring(vector_svg(None, opts))
        self.assertEqual(len(list(root)), 1)


if __name__ == "__main__":
    unittest.main()

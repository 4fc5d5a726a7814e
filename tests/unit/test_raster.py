import sys
import threading
import unittest
from unittest.mock import patch
from io import BytesIO
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "renderer"))

from PIL import Image

from qrstudio_renderer import (
    BackgroundOptions,
    CornersDotOptions,
    CornersSquareOptions,
    DisplayTarget,
    DotsOptions,
    ImageOptions,
    PillowRenderInstance,
    RenderOptions,
)

BLACK = (0, 0, 0, 255)
WHITE = (255, 255, 255, 255)


def _options(data="https://example.com", size=256, module="square", frame="square", dot="square", **kw):
    return RenderOptions(
        width=size,
        height=size,
        data=data,
        dots_options=DotsOptions(color="#000000", type=module),
        background_options=BackgroundOptions(color="#FFFFFF"),
        corners_square_options=CornersSquareOptions(color="#000000", type=frame),
        corners_dot_options=CornersDotOptions(color="#000000", type=dot),
        **kw,
    )


def _red_logo_png(side=60):
    buf = BytesIO()
    Image.new("RGBA", (side, side), (255, 0, 0, 255)).save(buf, format="PNG")
    return buf.getvalue()


class RenderImageTests(unittest.TestCase):
    def setUp(self):
        self.renderer = PillowRenderInstance()

    def test_canvas_matches_requested_size(self):
        image, matrix = self.renderer.render_image(_options(size=300))
        self.assertEqual(image.size, (300, 300))
        self.assertEqual(matrix.shape[0], matrix.shape[1])

    def test_empty_content_draws_background_only(self):
        image, matrix = self.renderer.render_image(_options(data=""))
        self.assertIsNone(matrix)
        self.assertEqual(image.getcolors(), [(256 * 256, WHITE)])

    def test_frame_shape_changes_corner_pixels(self):
        # example.com at level M is a 25x25 grid: 10px modules with a 3px offset at 256px.
        square, _ = self.renderer.render_image(_options(frame="square"))
        rounded, _ = self.renderer.render_image(_options(frame="extra-rounded", dot="dot"))
        self.assertEqual(square.getpixel((3, 3)), BLACK)
        self.assertEqual(rounded.getpixel((3, 3)), WHITE)
        self.assertEqual(square.getpixel((38, 38)), BLACK)
        self.assertEqual(rounded.getpixel((38, 38)), BLACK)

    def test_logo_is_pasted_and_excavates_modules(self):
        opts = _options(
            size=200,
            image=_red_logo_png(),
            image_options=ImageOptions(hide_background_dots=True, image_size=0.4),
        )
        image, _ = self.renderer.render_image(opts)
        self.assertEqual(image.getpixel((100, 100)), (255, 0, 0, 255))
        # 25 modules of 8px; the logo spans 60..139, so module column 7 (56..63) is cleared.
        self.assertEqual(image.getpixel((57, 100)), WHITE)

    def test_unreadable_logo_is_skipped(self):
        opts = _options(image="data:image/png;base64,AAAA", image_options=ImageOptions())
        with self.assertLogs("qrstudio.renderer", level="WARNING"):
            image, matrix = self.renderer.render_image(opts)
        self.assertIsNotNone(matrix)
        self.assertEqual(image.size, (256, 256))

    def test_oversized_content_draws_background(self):
        with self.assertLogs("qrstudio.renderer", level="WARNING"):
            image, matrix = self.renderer.render_image(_options(data="x" * 8000))
        self.assertIsNone(matrix)
        self.assertEqual(len(image.getcolors()), 1)

    def test_decompression_bomb_logo_is_skipped(self):
        opts = _options(image=_red_logo_png(60), image_options=ImageOptions())
        with patch.object(Image, "MAX_IMAGE_PIXELS", 1000):
            with self.assertLogs("qrstudio.renderer", level="WARNING") as logs:
                image, matrix = self.renderer.render_image(opts)
        self.assertIsNotNone(matrix)
        self.assertIn("too large", "\n".join(logs.output))
        self.assertNotIn((255, 0, 0, 255), {c for _, c in image.getcolors(256 * 256)})

    def test_content_overflow_at_high_level(self):
        with self.assertLogs("qrstudio.renderer", level="WARNING"):
            image, matrix = self.renderer.render_image(_options(data="x" * 2000, error_correction="H"))
        self.assertIsNone(matrix)
        self.assertEqual(image.getcolors(), [(256 * 256, WHITE)])


class PillowRenderInstanceTests(unittest.TestCase):
    def setUp(self):
        self.instance = PillowRenderInstance()
        self.addCleanup(self.instance.close)

    def test_apply_draws_asynchronously_and_notifies(self):
        target = DisplayTarget()
        self.instance.mount(target)
        done = threading.Event()
        seen = []
        self.instance.add_draw_listener(lambda gen: (seen.append(gen), done.set()))

        generation = self.instance.apply_options(_options(size=128, module="dots", dot="dot"))
        self.assertTrue(done.wait(5))
        self.assertEqual(seen, [generation])

        surface = target.find_canvas().surface
        self.assertEqual((surface.width, surface.height, surface.pixel_format), (128, 128, "RGBA"))
        self.assertEqual(len(surface.bytes), 128 * 128 * 4)
        self.assertEqual(surface.generation, generation)
        self.assertIsNotNone(self.instance.module_matrix())
        self.assertEqual(self.instance.drawn_options().width, 128)

    def test_latest_options_win(self):
        self.instance.mount(DisplayTarget())
        for size in (64, 96, 160):
            last = self.instance.apply_options(_options(size=size))
        self.assertTrue(self.instance.wait_idle(5))
        surface = self.instance.canvas.surface
        self.assertEqual(surface.width, 160)
        self.assertEqual(surface.generation, last)

    def test_draw_failure_publishes_background_and_worker_survives(self):
        target = DisplayTarget()
        self.instance.mount(target)
        seen = []
        self.instance.add_draw_listener(seen.append)
        with patch.object(PillowRenderInstance, "render_image", side_effect=RuntimeError("boom")):
            with self.assertLogs("qrstudio.renderer", level="ERROR"):
                failed = self.instance.apply_options(_options(size=64))
                self.assertTrue(self.instance.wait_idle(5))
        surface = target.find_canvas().surface
        self.assertEqual((surface.width, surface.generation), (64, failed))
        self.assertEqual(surface.bytes, bytes(WHITE) * (64 * 64))
        self.assertIsNone(self.instance.module_matrix())
        self.assertEqual(seen, [failed])

        self.instance.apply_options(_options(size=96))
        self.assertTrue(self.instance.wait_idle(5))
        self.assertEqual(target.find_canvas().surface.width, 96)
        self.assertIsNotNone(self.instance.module_matrix())

    def test_oversized_content_still_completes_draw(self):
        target = DisplayTarget()
        self.instance.mount(target)
        generation = self.instance.apply_options(_options(data="x" * 8000))
        self.assertTrue(self.instance.wait_idle(5))
        self.assertEqual(target.find_canvas().surface.generation, generation)
        self.assertIsNone(self.instance.module_matrix())

    def test_closed_instance_rejects_options(self):
        self.instance.close()
        with self.assertRaises(RuntimeError):
            self.instance.apply_options(_options())


if __name__ == "__main__":
    unittest.main()

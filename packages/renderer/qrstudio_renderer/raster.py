"""Pillow-backed render instance drawing styled QR codes on a background worker."""

from __future__ import annotations

import logging
import threading

import numpy as np
from PIL import Image, ImageDraw
from qrcode.exceptions import DataOverflowError

from .encoding import encode_modules
from .instance import RenderInstance
from .layout import ModuleLayout, Primitive, build_primitives
from .logo import fit_logo, load_logo
from .models import RenderOptions, Surface

_log = logging.getLogger("qrstudio.renderer")


def paint_primitive(draw: ImageDraw.ImageDraw, prim: Primitive) -> None:
    xy = (prim.x, prim.y, prim.x + prim.w - 1, prim.y + prim.h - 1)
    if prim.kind == "ellipse":
        draw.ellipse(xy, fill=prim.fill)
    elif prim.radius > 0:
        draw.rounded_rectangle(xy, radius=int(round(prim.radius)), fill=prim.fill, corners=prim.corners)
    else:
        draw.rectangle(xy, fill=prim.fill)


def _to_surface(image: Image.Image, generation: int) -> Surface:
    return Surface(
        width=image.width,
        height=image.height,
        pixel_format="RGBA",
        bytes=image.tobytes(),
        generation=generation,
    )


class PillowRenderInstance(RenderInstance):
    """Draws into an RGBA canvas on a worker thread; newest pending options win."""

    def __init__(self, options: RenderOptions | None = None) -> None:
        super().__init__(options)
        self._cond = threading.Condition()
        self._generation = 0
        self._pending: tuple[int, RenderOptions] | None = None
        self._drawing = False
        self._closed = False
        self._worker: threading.Thread | None = None
        self._matrix: np.ndarray | None = None
        self._drawn_options: RenderOptions | None = None

    def apply_options(self, options: RenderOptions) -> int:
        with self._cond:
            if self._closed:
                raise RuntimeError("render instance is closed")
            self._generation += 1
            self._options = options
            self._pending = (self._generation, options)
            self._ensure_worker()
            self._cond.notify_all()
            return self._generation

    def module_matrix(self) -> np.ndarray | None:
        with self._cond:
            return self._matrix

    def drawn_options(self) -> RenderOptions | None:
        with self._cond:
            return self._drawn_options

    def wait_idle(self, timeout: float | None = None) -> bool:
        with self._cond:
            return self._cond.wait_for(lambda: self._pending is None and not self._drawing, timeout=timeout)

    def close(self) -> None:
        with self._cond:
            self._closed = True
            self._pending = None
            self._cond.notify_all()
        if self._worker is not None:
            self._worker.join(timeout=2.0)

    def _ensure_worker(self) -> None:
        if self._worker is None or not self._worker.is_alive():
            self._worker = threading.Thread(target=self._run, name="qrstudio-render", daemon=True)
            self._worker.start()

    def _run(self) -> None:
        while True:
            with self._cond:
                self._cond.wait_for(lambda: self._pending is not None or self._closed)
                if self._closed:
                    return
                generation, options = self._pending  # type: ignore[misc]
                self._pending = None
                self._drawing = True

            try:
                surface, matrix = self.render_surface(options, generation)
            except Exception:
                _log.exception("draw failed; publishing background", extra={"event": "draw_error"})
                surface, matrix = self.placeholder_surface(options, generation), None

            with self._cond:
                self._drawing = False
                superseded = generation != self._generation
                if not superseded:
                    self._matrix = matrix
                    self._drawn_options = options
                    self._canvas.publish(surface)
                self._cond.notify_all()

            if superseded:
                _log.info("draw superseded", extra={"event": "draw_superseded"})
                continue
            self._notify_drawn(generation)

    def render_surface(self, options: RenderOptions, generation: int = 0) -> tuple[Surface, np.ndarray | None]:
        image, matrix = self.render_image(options)
        return _to_surface(image, generation), matrix

    def placeholder_surface(self, options: RenderOptions, generation: int = 0) -> Surface:
        """Background-only surface published when a draw fails."""
        image = Image.new("RGBA", (options.width, options.height), options.background_options.color)
        return _to_surface(image, generation)

    def render_image(self, options: RenderOptions) -> tuple[Image.Image, np.ndarray | None]:
        image = Image.new("RGBA", (options.width, options.height), options.background_options.color)

        try:
            matrix = encode_modules(options.data, options.error_correction)
        except (DataOverflowError, ValueError):
            # qrcode 8 reports overflow as ValueError("Invalid version ...").
            _log.warning("content too long to encode", extra={"event": "encode_overflow"})
            return image, None
        if matrix is None:
            # Empty content draws the bare background.
            return image, None

        logo = None
        if options.has_logo:
            try:
                logo = load_logo(options.image)  # type: ignore[arg-type]
            except ValueError as exc:
                _log.warning(f"logo skipped: {exc}", extra={"event": "logo_load_error"})

        layout = ModuleLayout.build(matrix, options, with_logo=logo is not None)
        draw = ImageDraw.Draw(image)
        for prim in build_primitives(matrix, layout, options):
            paint_primitive(draw, prim)

        box = layout.logo_box()
        if logo is not None and box is not None:
            x, y, w, h = box
            fitted = fit_logo(logo, w)
            px = x + (w - fitted.width) // 2
            py = y + (h - fitted.height) // 2
            image.alpha_composite(fitted, (px, py))

        return image, matrix

"""Module grid geometry shared by the raster and vector writers."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .models import RenderOptions

FINDER_MODULES = 7
FINDER_DOT_MODULES = 3

Corners = tuple[bool, bool, bool, bool]
# top-left, top-right, bottom-right, bottom-left
ALL_CORNERS: Corners = (True, True, True, True)
CLASSY_CORNERS: Corners = (True, False, True, False)


@dataclass(frozen=True)
class Primitive:
    kind: str  # "rect" or "ellipse"
    x: int
    y: int
    w: int
    h: int
    fill: str
    radius: float = 0.0
    corners: Corners = ALL_CORNERS


@dataclass(frozen=True)
class ModuleLayout:
    width: int
    height: int
    count: int
    box: int
    offset_x: int
    offset_y: int
    logo_side: int = 0
    logo_margin: int = 0
    excavate: bool = False

    @classmethod
    def build(cls, matrix: np.ndarray, options: RenderOptions, with_logo: bool = False) -> "ModuleLayout":
        count = int(matrix.shape[0])
        side = min(options.width, options.height)
        box = max(1, side // max(count, 1))

        logo_side = 0
        logo_margin = 0
        excavate = False
        if with_logo and options.image_options is not None:
            logo_side = int(side * options.image_options.image_size)
            logo_margin = max(0, int(options.image_options.margin))
            excavate = bool(options.image_options.hide_background_dots)

        return cls(
            width=options.width,
            height=options.height,
            count=count,
            box=box,
            offset_x=(options.width - count * box) // 2,
            offset_y=(options.height - count * box) // 2,
            logo_side=logo_side,
            logo_margin=logo_margin,
            excavate=excavate,
        )

    def module_origin(self, row: int, col: int) -> tuple[int, int]:
        return self.offset_x + col * self.box, self.offset_y + row * self.box

    def finder_origins(self) -> list[tuple[int, int]]:
        last = self.count - FINDER_MODULES
        return [(0, 0), (0, last), (last, 0)]

    def in_finder(self, row: int, col: int) -> bool:
        for fr, fc in self.finder_origins():
            if fr <= row < fr + FINDER_MODULES and fc <= col < fc + FINDER_MODULES:
                return True
        return False

    def logo_box(self) -> tuple[int, int, int, int] | None:
        """Centered (x, y, w, h) reserved for the logo, or None without one."""
        if self.logo_side <= 0:
            return None
        x = (self.width - self.logo_side) // 2
        y = (self.height - self.logo_side) // 2
        return x, y, self.logo_side, self.logo_side

    def is_excavated(self, row: int, col: int) -> bool:
        logo = self.logo_box()
        if not self.excavate or logo is None:
            return False
        lx, ly, lw, lh = logo
        m = self.logo_margin
        x, y = self.module_origin(row, col)
        return x < lx + lw + m and x + self.box > lx - m and y < ly + lh + m and y + self.box > ly - m


def _module_primitives(x: int, y: int, box: int, shape: str, color: str) -> list[Primitive]:
    if shape == "dots":
        return [Primitive("ellipse", x, y, box, box, color)]
    if shape == "rounded":
        return [Primitive("rect", x, y, box, box, color, radius=box * 0.3)]
    if shape == "extra-rounded":
        return [Primitive("rect", x, y, box, box, color, radius=box * 0.5)]
    if shape == "classy":
        return [Primitive("rect", x, y, box, box, color, radius=box * 0.5, corners=CLASSY_CORNERS)]
    if shape == "classy-rounded":
        return [
            Primitive("rect", x, y, box, box, color, radius=box * 0.2),
            Primitive("rect", x, y, box, box, color, radius=box * 0.5, corners=CLASSY_CORNERS),
        ]
    return [Primitive("rect", x, y, box, box, color)]


def _frame_primitives(x: int, y: int, box: int, shape: str, color: str, background: str) -> list[Primitive]:
    outer = FINDER_MODULES * box
    inner = (FINDER_MODULES - 2) * box
    if shape == "dot":
        return [
            Primitive("ellipse", x, y, outer, outer, color),
            Primitive("ellipse", x + box, y + box, inner, inner, background),
        ]
    if shape == "extra-rounded":
        return [
            Primitive("rect", x, y, outer, outer, color, radius=box * 2.5),
            Primitive("rect", x + box, y + box, inner, inner, background, radius=box * 1.5),
        ]
    return [
        Primitive("rect", x, y, outer, outer, color),
        Primitive("rect", x + box, y + box, inner, inner, background),
    ]


def _dot_primitives(x: int, y: int, box: int, shape: str, color: str) -> list[Primitive]:
    side = FINDER_DOT_MODULES * box
    if shape == "dot":
        return [Primitive("ellipse", x, y, side, side, color)]
    return [Primitive("rect", x, y, side, side, color)]


def build_primitives(matrix: np.ndarray, layout: ModuleLayout, options: RenderOptions) -> list[Primitive]:
    """Flatten the module grid and finder patterns into paint-ordered shapes.

    Finder cells of the encoded grid are skipped and redrawn as styled frames
    and dots. Modules under an excavated logo area are dropped.
    """
    box = layout.box
    prims: list[Primitive] = []

    rows, cols = matrix.shape
    for r in range(rows):
        for c in range(cols):
            if not matrix[r, c] or layout.in_finder(r, c) or layout.is_excavated(r, c):
                continue
            x, y = layout.module_origin(r, c)
            prims.extend(_module_primitives(x, y, box, options.dots_options.type, options.dots_options.color))

    if layout.count >= FINDER_MODULES:
        background = options.background_options.color
        for fr, fc in layout.finder_origins():
            x, y = layout.module_origin(fr, fc)
            prims.extend(
                _frame_primitives(
                    x,
                    y,
                    box,
                    options.corners_square_options.type,
                    options.corners_square_options.color,
                    background,
                )
            )
            prims.extend(
                _dot_primitives(
                    x + 2 * box,
                    y + 2 * box,
                    box,
                    options.corners_dot_options.type,
                    options.corners_dot_options.color,
                )
            )
    return prims

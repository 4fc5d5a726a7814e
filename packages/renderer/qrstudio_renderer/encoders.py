"""Surface encoders: PNG bytes, embedded-raster SVG wrapper, and vector SVG."""

from __future__ import annotations

import base64
import xml.etree.ElementTree as ET
from io import BytesIO

import numpy as np
from PIL import Image

from .layout import Corners, ModuleLayout, Primitive, build_primitives
from .logo import fit_logo
from .models import RenderOptions, Surface

SVG_NS = "http://www.w3.org/2000/svg"
XLINK_NS = "http://www.w3.org/1999/xlink"

_CHANNELS = {"RGBA": 4, "RGB": 3}


def surface_to_image(surface: Surface) -> Image.Image:
    channels = _CHANNELS.get(surface.pixel_format)
    if channels is None:
        raise ValueError(f"Unsupported pixel format: {surface.pixel_format}")
    expected = surface.width * surface.height * channels
    if len(surface.bytes) != expected:
        raise ValueError(f"Surface buffer holds {len(surface.bytes)} bytes, expected {expected}")
    arr = np.frombuffer(surface.bytes, dtype=np.uint8).reshape((surface.height, surface.width, channels))
    return Image.fromarray(arr)


def image_to_png(image: Image.Image) -> bytes:
    buf = BytesIO()
    image.save(buf, format="PNG")
    return buf.getvalue()


def encode_png(surface: Surface) -> bytes:
    return image_to_png(surface_to_image(surface))


def png_data_url(png: bytes) -> str:
    b64 = base64.b64encode(png).decode("ascii")
    return f"data:image/png;base64,{b64}"


def _svg_root(width: int, height: int) -> ET.Element:
    return ET.Element(
        "svg",
        {
            "xmlns": SVG_NS,
            "xmlns:xlink": XLINK_NS,
            "width": str(width),
            "height": str(height),
            "viewBox": f"0 0 {width} {height}",
        },
    )


def _image_element(parent: ET.Element, href: str, x: int, y: int, w: int, h: int) -> None:
    ET.SubElement(
        parent,
        "image",
        {
            "href": href,
            "xlink:href": href,
            "x": str(x),
            "y": str(y),
            "width": str(w),
            "height": str(h),
        },
    )


def _serialize(root: ET.Element) -> bytes:
    return b'<?xml version="1.0" encoding="UTF-8"?>\n' + ET.tostring(root, encoding="utf-8", xml_declaration=False)


def embedded_svg(surface: Surface) -> bytes:
    """Wrap a PNG snapshot of ``surface`` in a single-image SVG.

    The result looks identical to the raster but holds no vector paths, so it
    does not scale beyond the surface resolution.
    """
    root = _svg_root(surface.width, surface.height)
    _image_element(root, png_data_url(encode_png(surface)), 0, 0, surface.width, surface.height)
    return _serialize(root)


def _num(value: float) -> str:
    return f"{value:.2f}".rstrip("0").rstrip(".")


def _rounded_path(x: float, y: float, w: float, h: float, r: float, corners: Corners) -> str:
    r = min(r, w / 2, h / 2)
    tl, tr, br, bl = (r if c else 0.0 for c in corners)
    parts = [
        f"M{_num(x + tl)} {_num(y)}",
        f"H{_num(x + w - tr)}",
        f"A{_num(tr)} {_num(tr)} 0 0 1 {_num(x + w)} {_num(y + tr)}" if tr else "",
        f"V{_num(y + h - br)}",
        f"A{_num(br)} {_num(br)} 0 0 1 {_num(x + w - br)} {_num(y + h)}" if br else "",
        f"H{_num(x + bl)}",
        f"A{_num(bl)} {_num(bl)} 0 0 1 {_num(x)} {_num(y + h - bl)}" if bl else "",
        f"V{_num(y + tl)}",
        f"A{_num(tl)} {_num(tl)} 0 0 1 {_num(x + tl)} {_num(y)}" if tl else "",
        "Z",
    ]
    return "".join(p for p in parts if p)


def _primitive_element(parent: ET.Element, prim: Primitive) -> None:
    if prim.kind == "ellipse":
        ET.SubElement(
            parent,
            "ellipse",
            {
                "cx": _num(prim.x + prim.w / 2),
                "cy": _num(prim.y + prim.h / 2),
                "rx": _num(prim.w / 2),
                "ry": _num(prim.h / 2),
                "fill": prim.fill,
            },
        )
    elif prim.radius > 0 and not all(prim.corners):
        ET.SubElement(
            parent,
            "path",
            {"d": _rounded_path(prim.x, prim.y, prim.w, prim.h, prim.radius, prim.corners), "fill": prim.fill},
        )
    else:
        attrs = {
            "x": str(prim.x),
            "y": str(prim.y),
            "width": str(prim.w),
            "height": str(prim.h),
            "fill": prim.fill,
        }
        if prim.radius > 0:
            attrs["rx"] = _num(prim.radius)
        ET.SubElement(parent, "rect", attrs)


def vector_svg(matrix: np.ndarray | None, options: RenderOptions, logo: Image.Image | None = None) -> bytes:
    """Build the SVG from the module grid as scalable shapes.

    The logo, when present, is still embedded as a raster image element.
    """
    root = _svg_root(options.width, options.height)
    ET.SubElement(
        root,
        "rect",
        {"x": "0", "y": "0", "width": str(options.width), "height": str(options.height), "fill": options.background_options.color},
    )
    if matrix is None:
        return _serialize(root)

    layout = ModuleLayout.build(matrix, options, with_logo=logo is not None)
    group = ET.SubElement(root, "g", {"shape-rendering": "geometricPrecision"})
    for prim in build_primitives(matrix, layout, options):
        _primitive_element(group, prim)

    box = layout.logo_box()
    if logo is not None and box is not None:
        x, y, w, h = box
        fitted = fit_logo(logo, w)
        px = x + (w - fitted.width) // 2
        py = y + (h - fitted.height) // 2
        _image_element(root, png_data_url(image_to_png(fitted)), px, py, fitted.width, fitted.height)

    return _serialize(root)

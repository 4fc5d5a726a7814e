"""Renderer package for styled QR code drawing and surface encoding."""

from .encoders import embedded_svg, encode_png, png_data_url, surface_to_image, vector_svg
from .encoding import ERROR_CORRECTION_LEVELS, encode_modules
from .instance import CanvasNode, DisplayTarget, RenderInstance
from .models import (
    BackgroundOptions,
    CornersDotOptions,
    CornersSquareOptions,
    DotsOptions,
    ImageOptions,
    RenderOptions,
    ShapeTriple,
    Surface,
)
from .patterns import DEFAULT_PATTERN_NAME, PATTERNS, is_known_pattern, list_patterns, resolve_pattern
from .raster import PillowRenderInstance

__all__ = [
    "BackgroundOptions",
    "CanvasNode",
    "CornersDotOptions",
    "CornersSquareOptions",
    "DEFAULT_PATTERN_NAME",
    "DisplayTarget",
    "DotsOptions",
    "ERROR_CORRECTION_LEVELS",
    "ImageOptions",
    "PATTERNS",
    "PillowRenderInstance",
    "RenderInstance",
    "RenderOptions",
    "ShapeTriple",
    "Surface",
    "embedded_svg",
    "encode_modules",
    "encode_png",
    "is_known_pattern",
    "list_patterns",
    "png_data_url",
    "resolve_pattern",
    "surface_to_image",
    "vector_svg",
]

"""Built-in pattern presets mapped to module/frame/dot shapes."""

from __future__ import annotations

import logging

from .models import ShapeTriple

DEFAULT_PATTERN_NAME = "squares"

_log = logging.getLogger("qrstudio.renderer")

PATTERNS: dict[str, ShapeTriple] = {
    "squares": ShapeTriple(module_shape="square", frame_shape="square", dot_shape="square"),
    "dots": ShapeTriple(module_shape="dots", frame_shape="square", dot_shape="dot"),
    "rounded": ShapeTriple(module_shape="rounded", frame_shape="extra-rounded", dot_shape="dot"),
    "classy": ShapeTriple(module_shape="classy", frame_shape="extra-rounded", dot_shape="dot"),
}


def list_patterns() -> list[str]:
    return list(PATTERNS.keys())


def is_known_pattern(name: object) -> bool:
    return isinstance(name, str) and name in PATTERNS


def resolve_pattern(name: object) -> ShapeTriple:
    if is_known_pattern(name):
        return PATTERNS[name]  # type: ignore[index]
    _log.warning(
        "unsupported pattern %r, falling back to %s",
        name,
        DEFAULT_PATTERN_NAME,
        extra={"event": "pattern_fallback"},
    )
    return PATTERNS[DEFAULT_PATTERN_NAME]

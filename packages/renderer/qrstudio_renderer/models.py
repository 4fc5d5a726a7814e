"""Typed renderer models."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ShapeTriple:
    module_shape: str
    frame_shape: str
    dot_shape: str


@dataclass(frozen=True)
class DotsOptions:
    color: str = "#000000"
    type: str = "square"


@dataclass(frozen=True)
class BackgroundOptions:
    color: str = "#FFFFFF"


@dataclass(frozen=True)
class CornersSquareOptions:
    color: str = "#000000"
    type: str = "square"


@dataclass(frozen=True)
class CornersDotOptions:
    color: str = "#000000"
    type: str = "square"


@dataclass(frozen=True)
class ImageOptions:
    hide_background_dots: bool = True
    image_size: float = 0.4
    margin: int = 0


@dataclass(frozen=True)
class RenderOptions:
    """Complete visual configuration applied to a render instance in one call."""

    width: int = 256
    height: int = 256
    data: str = "https://default.com"
    error_correction: str = "M"
    dots_options: DotsOptions = field(default_factory=DotsOptions)
    background_options: BackgroundOptions = field(default_factory=BackgroundOptions)
    corners_square_options: CornersSquareOptions = field(default_factory=CornersSquareOptions)
    corners_dot_options: CornersDotOptions = field(default_factory=CornersDotOptions)
    image: str | bytes | None = None
    image_options: ImageOptions | None = None

    @property
    def has_logo(self) -> bool:
        return self.image is not None and self.image_options is not None


@dataclass(frozen=True)
class Surface:
    width: int
    height: int
    pixel_format: str
    bytes: bytes
    generation: int = 0

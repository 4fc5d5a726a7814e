"""Style descriptor: the declarative, versioned description of one QR code."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from enum import Enum
from typing import Any

from PIL import ImageColor

from .errors import DescriptorError

DESCRIPTOR_SCHEMA_VERSION = 1
ERROR_CORRECTION_CHOICES = ("L", "M", "Q", "H")
DEFAULT_LOGO_SIDE = 40


class PatternId(str, Enum):
    SQUARES = "squares"
    DOTS = "dots"
    ROUNDED = "rounded"
    CLASSY = "classy"


def normalize_color(value: str) -> str:
    """Return ``value`` as uppercase ``#RRGGBB``; accepts any opaque Pillow color string."""
    try:
        rgb = ImageColor.getrgb(str(value))
    except ValueError as exc:
        raise DescriptorError(f"Invalid color: {value!r}") from exc
    if len(rgb) == 4 and rgb[3] != 255:
        raise DescriptorError(f"Translucent colors are not supported: {value!r}")
    return "#{:02X}{:02X}{:02X}".format(*rgb[:3])


@dataclass(frozen=True)
class LogoSpec:
    source: str | bytes
    width: int = DEFAULT_LOGO_SIDE
    height: int = DEFAULT_LOGO_SIDE
    excavate: bool | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.source, (str, bytes)) or not self.source:
            raise DescriptorError("Logo source must be a non-empty path, data URL or image bytes")
        try:
            width, height = int(self.width), int(self.height)
        except (TypeError, ValueError) as exc:
            raise DescriptorError(f"Logo width and height must be integers, got {self.width!r} x {self.height!r}") from exc
        if width <= 0 or height <= 0:
            raise DescriptorError("Logo width and height must be positive")
        object.__setattr__(self, "width", width)
        object.__setattr__(self, "height", height)


@dataclass(frozen=True)
class StyleDescriptor:
    content: str = "https://example.com"
    size: int = 256
    foreground: str = "#000000"
    background: str = "#FFFFFF"
    pattern: str = PatternId.SQUARES.value
    logo: LogoSpec | None = None
    error_correction: str = "M"
    schema_version: int = field(default=DESCRIPTOR_SCHEMA_VERSION, compare=False)

    def __post_init__(self) -> None:
        try:
            size = int(self.size)
        except (TypeError, ValueError) as exc:
            raise DescriptorError(f"Size must be a positive integer, got {self.size!r}") from exc
        if isinstance(self.size, bool) or size <= 0:
            raise DescriptorError(f"Size must be a positive integer, got {self.size!r}")
        level = str(self.error_correction).upper()
        if level not in ERROR_CORRECTION_CHOICES:
            raise DescriptorError(f"Error correction must be one of {', '.join(ERROR_CORRECTION_CHOICES)}")
        pattern = self.pattern.value if isinstance(self.pattern, PatternId) else self.pattern
        object.__setattr__(self, "content", "" if self.content is None else str(self.content))
        object.__setattr__(self, "size", size)
        object.__setattr__(self, "foreground", normalize_color(self.foreground))
        object.__setattr__(self, "background", normalize_color(self.background))
        object.__setattr__(self, "pattern", str(pattern))
        object.__setattr__(self, "error_correction", level)

    def with_changes(self, **changes: Any) -> "StyleDescriptor":
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["schema_version"] = DESCRIPTOR_SCHEMA_VERSION
        if self.logo is not None and isinstance(self.logo.source, bytes):
            # Raw logo bytes stay in memory; serialized descriptors reference files or data URLs.
            data["logo"] = None
        return data

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "StyleDescriptor":
        if not isinstance(raw, dict):
            raise DescriptorError(f"Descriptor must be a JSON object, got {type(raw).__name__}")
        data = _migrate(raw)
        defaults = cls()
        logo_raw = data.get("logo")
        logo = None
        if logo_raw:
            if not isinstance(logo_raw, dict):
                raise DescriptorError("Descriptor logo must be an object")
            logo = LogoSpec(
                source=logo_raw.get("source"),  # type: ignore[arg-type]
                width=logo_raw.get("width") or DEFAULT_LOGO_SIDE,
                height=logo_raw.get("height") or DEFAULT_LOGO_SIDE,
                excavate=logo_raw.get("excavate"),
            )
        return cls(
            content=data.get("content", defaults.content),
            size=data.get("size", defaults.size),
            foreground=data.get("foreground", defaults.foreground),
            background=data.get("background", defaults.background),
            pattern=data.get("pattern", defaults.pattern),
            logo=logo,
            error_correction=data.get("error_correction", defaults.error_correction),
        )


def _migrate(raw: dict[str, Any]) -> dict[str, Any]:
    data = dict(raw)
    try:
        version = int(data.get("schema_version") or 0)
    except (TypeError, ValueError) as exc:
        raise DescriptorError(f"Invalid schema_version: {data.get('schema_version')!r}") from exc
    if version < 1:
        # Unversioned payloads use the editor's field names.
        renames = {"value": "content", "fgColor": "foreground", "bgColor": "background", "level": "error_correction"}
        for old, new in renames.items():
            if old in data and new not in data:
                data[new] = data.pop(old)
        settings = data.pop("imageSettings", None)
        if isinstance(settings, dict) and settings.get("src") and "logo" not in data:
            data["logo"] = {
                "source": settings.get("src"),
                "width": settings.get("width"),
                "height": settings.get("height"),
                "excavate": settings.get("excavate"),
            }
        data["schema_version"] = 1
    return data


def default_descriptor() -> StyleDescriptor:
    return StyleDescriptor()

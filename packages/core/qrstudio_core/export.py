"""Export pipeline turning the drawn surface into PNG or SVG artifacts."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from qrstudio_renderer import embedded_svg, encode_png, vector_svg
from qrstudio_renderer.logo import load_logo

from .errors import ExportError
from .synchronizer import DescriptorSynchronizer, SurfaceSnapshot

_log = logging.getLogger("qrstudio.export")

SVG_MODES = ("embedded", "vector")


class ExportFormat(str, Enum):
    PNG = "png"
    SVG = "svg"

    @property
    def mime_type(self) -> str:
        return "image/png" if self is ExportFormat.PNG else "image/svg+xml"

    @classmethod
    def parse(cls, value: "ExportFormat | str") -> "ExportFormat":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as exc:
            raise ExportError(f"Unsupported export format: {value!r}", hint="Choose PNG or SVG.") from exc


@dataclass(frozen=True)
class ExportArtifact:
    """One exported file.

    ``scalable`` is False for SVGs that only wrap a raster snapshot.
    """

    format: ExportFormat
    data: bytes
    filename: str
    scalable: bool = False

    @property
    def mime_type(self) -> str:
        return self.format.mime_type


def artifact_filename(fmt: ExportFormat, identifier: str | int | None = None, base_name: str = "qrcode") -> str:
    if identifier is None or identifier == "":
        return f"{base_name}.{fmt.value}"
    return f"{base_name}-{identifier}.{fmt.value}"


class ExportPipeline:
    def __init__(
        self,
        synchronizer: DescriptorSynchronizer,
        svg_mode: str = "embedded",
        base_name: str = "qrcode",
    ) -> None:
        if svg_mode not in SVG_MODES:
            raise ValueError(f"Unknown SVG mode: {svg_mode}")
        self._sync = synchronizer
        self.svg_mode = svg_mode
        self.base_name = base_name

    @property
    def available(self) -> bool:
        return self._sync.gate.is_ready

    def export(self, fmt: ExportFormat | str, identifier: str | int | None = None) -> ExportArtifact:
        fmt = ExportFormat.parse(fmt)
        snapshot = self._sync.snapshot()
        filename = artifact_filename(fmt, identifier, self.base_name)

        try:
            if fmt is ExportFormat.PNG:
                artifact = ExportArtifact(format=fmt, data=encode_png(snapshot.surface), filename=filename, scalable=False)
            else:
                artifact = self._export_svg(snapshot, filename)
        except ValueError as exc:
            _log.error(f"export failed: {exc}", extra={"event": "export_error"})
            raise ExportError(f"Could not encode the QR code as {fmt.value.upper()}: {exc}") from exc

        _log.info(
            f"exported {artifact.filename} bytes={len(artifact.data)} scalable={artifact.scalable}",
            extra={"event": "export_ok"},
        )
        return artifact

    def _export_svg(self, snapshot: SurfaceSnapshot, filename: str) -> ExportArtifact:
        if self.svg_mode == "vector" and snapshot.matrix is not None:
            logo = None
            if snapshot.options.has_logo:
                try:
                    logo = load_logo(snapshot.options.image)  # type: ignore[arg-type]
                except ValueError as exc:
                    _log.warning(f"logo omitted from vector SVG: {exc}", extra={"event": "logo_load_error"})
            data = vector_svg(snapshot.matrix, snapshot.options, logo)
            return ExportArtifact(format=ExportFormat.SVG, data=data, filename=filename, scalable=True)

        if self.svg_mode == "vector":
            _log.warning("module grid unavailable, using embedded SVG", extra={"event": "svg_fallback"})
        return ExportArtifact(
            format=ExportFormat.SVG,
            data=embedded_svg(snapshot.surface),
            filename=filename,
            scalable=False,
        )


def save_artifact(artifact: ExportArtifact, directory: Path) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / artifact.filename
    path.write_bytes(artifact.data)
    return path

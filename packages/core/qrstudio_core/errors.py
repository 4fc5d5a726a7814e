"""Exception types raised by the synchronizer and export pipeline."""

from __future__ import annotations


class QRStudioError(Exception):
    """Base error for QR Studio."""


class DescriptorError(QRStudioError, ValueError):
    """A style descriptor holds a value the renderer cannot use."""


class ExportError(QRStudioError):
    """Export failed; ``hint`` is a short user-facing next step."""

    hint = "Try exporting again."

    def __init__(self, message: str, hint: str | None = None) -> None:
        super().__init__(message)
        if hint is not None:
            self.hint = hint

    def user_message(self) -> str:
        return f"{self} {self.hint}"


class NotReadyError(ExportError):
    hint = "The QR code is still drawing. Wait a moment and try again."


class SurfaceUnavailableError(ExportError):
    hint = "The preview is not attached to a display; reopen the preview before exporting."

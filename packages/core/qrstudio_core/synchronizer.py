"""Descriptor synchronizer: keeps the single render instance in step with the style descriptor."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

import numpy as np

from qrstudio_renderer import (
    BackgroundOptions,
    CornersDotOptions,
    CornersSquareOptions,
    DisplayTarget,
    DotsOptions,
    ImageOptions,
    RenderInstance,
    RenderOptions,
    Surface,
    is_known_pattern,
    resolve_pattern,
)

from .descriptor import LogoSpec, StyleDescriptor
from .errors import SurfaceUnavailableError
from .readiness import ReadinessGate, ReadinessState

LOGO_MAX_FRACTION = 0.4

_log = logging.getLogger("qrstudio.sync")


def logo_fraction(logo: LogoSpec, size: int) -> float:
    """Logo side as a fraction of the code side, capped so the code stays scannable."""
    return min(logo.width / size, logo.height / size, LOGO_MAX_FRACTION)


def build_options(descriptor: StyleDescriptor) -> RenderOptions:
    shapes = resolve_pattern(descriptor.pattern)
    fg = descriptor.foreground

    image = None
    image_options = None
    if descriptor.logo is not None:
        excavate = descriptor.logo.excavate
        image = descriptor.logo.source
        image_options = ImageOptions(
            hide_background_dots=True if excavate is None else bool(excavate),
            image_size=logo_fraction(descriptor.logo, descriptor.size),
            margin=0,
        )

    return RenderOptions(
        width=descriptor.size,
        height=descriptor.size,
        data=descriptor.content,
        error_correction=descriptor.error_correction,
        dots_options=DotsOptions(color=fg, type=shapes.module_shape),
        background_options=BackgroundOptions(color=descriptor.background),
        corners_square_options=CornersSquareOptions(color=fg, type=shapes.frame_shape),
        corners_dot_options=CornersDotOptions(color=fg, type=shapes.dot_shape),
        image=image,
        image_options=image_options,
    )


@dataclass
class SyncStatus:
    mounted: bool = False
    state: ReadinessState = ReadinessState.NOT_READY
    generation: int = 0
    applies: int = 0
    last_error: str | None = None


@dataclass(frozen=True)
class SurfaceSnapshot:
    surface: Surface
    options: RenderOptions
    matrix: np.ndarray | None


class DescriptorSynchronizer:
    def __init__(self, instance: RenderInstance, gate: ReadinessGate | None = None) -> None:
        self._instance = instance
        self._gate = gate or ReadinessGate()
        self._lock = threading.RLock()
        self._status = SyncStatus()
        self._events: list[dict[str, Any]] = []
        self._descriptor: StyleDescriptor | None = None
        self._options: RenderOptions | None = None
        self._applying = False
        self._early_completion: int | None = None
        self._instance.add_draw_listener(self._on_drawn)

    @property
    def instance(self) -> RenderInstance:
        return self._instance

    @property
    def gate(self) -> ReadinessGate:
        return self._gate

    @property
    def status(self) -> SyncStatus:
        self._status.state = self._gate.state
        return self._status

    @property
    def current_descriptor(self) -> StyleDescriptor | None:
        return self._descriptor

    @property
    def current_options(self) -> RenderOptions | None:
        return self._options

    def recent_events(self, limit: int = 200) -> list[dict[str, Any]]:
        return self._events[-limit:]

    def _log_event(self, event: str, **fields: Any) -> None:
        row = {
            "ts_utc": datetime.now(timezone.utc).isoformat(),
            "event": event,
            "state": self._gate.state.value,
        }
        row.update(fields)
        self._events.append(row)
        if len(self._events) > 1000:
            self._events = self._events[-1000:]

    def mount(self, target: DisplayTarget) -> None:
        with self._lock:
            self._gate.reset()
            self._instance.mount(target)
            self._status.mounted = True
            self._log_event("mount", target=target.name)
            # Draw whatever is configured so the fresh target gets a surface.
            self._push(self._options or self._instance.options)

    def unmount(self) -> None:
        with self._lock:
            self._gate.reset()
            self._instance.unmount()
            self._status.mounted = False
            self._log_event("unmount")

    def apply(self, descriptor: StyleDescriptor) -> None:
        if not is_known_pattern(descriptor.pattern):
            self._log_event("pattern_fallback", pattern=descriptor.pattern)
        options = build_options(descriptor)
        with self._lock:
            self._descriptor = descriptor
            self._options = options
            self._status.applies += 1
            self._push(options)

    def _push(self, options: RenderOptions) -> None:
        self._gate.reset()
        self._applying = True
        self._early_completion = None
        try:
            generation = self._instance.apply_options(options)
        except Exception as exc:
            # Keep the display session alive; export stays disabled until a later apply succeeds.
            self._status.last_error = str(exc)
            self._log_event("apply_error", error=str(exc))
            _log.exception("apply_options failed", extra={"event": "apply_error"})
            return
        finally:
            self._applying = False

        self._status.generation = generation
        self._status.last_error = None
        self._log_event("apply", generation=generation, size=options.width, logo=options.has_logo)
        _log.info(f"options applied generation={generation}", extra={"event": "apply"})
        if self._early_completion == generation:
            self._mark_drawn(generation)

    def _on_drawn(self, generation: int) -> None:
        with self._lock:
            if self._applying:
                self._early_completion = generation
                return
            if generation != self._status.generation:
                self._log_event("draw_stale", generation=generation, latest=self._status.generation)
                return
            self._mark_drawn(generation)

    def _mark_drawn(self, generation: int) -> None:
        if self._instance.target is None:
            self._log_event("draw_unmounted", generation=generation)
            return
        self._gate.mark_ready()
        self._log_event("draw_complete", generation=generation)

    def wait_until_ready(self, timeout: float | None = None) -> bool:
        return self._gate.wait(timeout)

    def snapshot(self) -> SurfaceSnapshot:
        """Consistent read of the drawn surface; raises NotReadyError before the first draw."""
        with self._lock:
            self._gate.require_ready()
            target = self._instance.target
            if target is None:
                raise SurfaceUnavailableError("Render instance is not mounted.")
            canvas = target.find_canvas()
            surface = canvas.surface if canvas is not None else None
            if surface is None:
                raise SurfaceUnavailableError(f"No drawable surface found in target {target.name!r}.")
            options = self._instance.drawn_options() or self._options or self._instance.options
            return SurfaceSnapshot(surface=surface, options=options, matrix=self._instance.module_matrix())

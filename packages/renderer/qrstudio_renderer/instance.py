"""Render instance contract and the display target it mounts into."""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from typing import Callable

import numpy as np

from .models import RenderOptions, Surface

DrawListener = Callable[[int], None]

_log = logging.getLogger("qrstudio.renderer")


class CanvasNode:
    """Drawable node attached to a display target; holds the last published surface."""

    tag = "canvas"

    def __init__(self) -> None:
        self._surface: Surface | None = None
        self._lock = threading.Lock()

    @property
    def surface(self) -> Surface | None:
        with self._lock:
            return self._surface

    def publish(self, surface: Surface) -> None:
        with self._lock:
            self._surface = surface


class DisplayTarget:
    """Container a render instance attaches its canvas to."""

    def __init__(self, name: str = "preview") -> None:
        self.name = name
        self.children: list[object] = []

    def clear(self) -> None:
        self.children.clear()

    def append(self, node: object) -> None:
        self.children.append(node)

    def remove(self, node: object) -> None:
        if node in self.children:
            self.children.remove(node)

    def find_canvas(self) -> CanvasNode | None:
        for node in self.children:
            if isinstance(node, CanvasNode):
                return node
        return None


class RenderInstance(ABC):
    """Stateful renderer: mounted once, reconfigured in place with full option records.

    ``apply_options`` returns a generation number; draw listeners are called
    with that number once the matching redraw has completed.
    """

    def __init__(self, options: RenderOptions | None = None) -> None:
        self._options = options or RenderOptions()
        self._target: DisplayTarget | None = None
        self._canvas = CanvasNode()
        self._listeners: list[DrawListener] = []
        self._listeners_lock = threading.Lock()

    @property
    def options(self) -> RenderOptions:
        return self._options

    @property
    def target(self) -> DisplayTarget | None:
        return self._target

    @property
    def canvas(self) -> CanvasNode:
        return self._canvas

    def mount(self, target: DisplayTarget) -> None:
        if self._target is not None and self._target is not target:
            self._target.remove(self._canvas)
        # Leftover nodes from an earlier mount (re-mount, hot reload) must not linger.
        target.clear()
        target.append(self._canvas)
        self._target = target
        _log.info("render instance mounted", extra={"event": "instance_mounted"})

    def unmount(self) -> None:
        if self._target is not None:
            self._target.remove(self._canvas)
            self._target = None

    def add_draw_listener(self, listener: DrawListener) -> None:
        with self._listeners_lock:
            self._listeners.append(listener)

    def _notify_drawn(self, generation: int) -> None:
        with self._listeners_lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(generation)
            except Exception:
                _log.exception("draw listener failed", extra={"event": "draw_listener_error"})

    @abstractmethod
    def apply_options(self, options: RenderOptions) -> int:
        """Replace the whole configuration and schedule a redraw."""

    def module_matrix(self) -> np.ndarray | None:
        """Module grid of the last completed draw, for renderers that expose it."""
        return None

    def drawn_options(self) -> RenderOptions | None:
        """Option record the current surface was drawn from, when known."""
        return None

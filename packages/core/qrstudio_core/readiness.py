"""Readiness gate: export is allowed only after the renderer finished drawing."""

from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Callable

from .errors import NotReadyError

_log = logging.getLogger("qrstudio.sync")


class ReadinessState(str, Enum):
    NOT_READY = "NotReady"
    READY = "Ready"


ReadinessListener = Callable[[ReadinessState], None]


class ReadinessGate:
    def __init__(self) -> None:
        self._state = ReadinessState.NOT_READY
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._listeners: list[ReadinessListener] = []

    @property
    def state(self) -> ReadinessState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state is ReadinessState.READY

    def subscribe(self, listener: ReadinessListener) -> None:
        with self._lock:
            self._listeners.append(listener)

    def mark_ready(self) -> None:
        self._transition(ReadinessState.READY)

    def reset(self) -> None:
        self._transition(ReadinessState.NOT_READY)

    def require_ready(self) -> None:
        if not self.is_ready:
            raise NotReadyError("QR code has not finished drawing.")

    def wait(self, timeout: float | None = None) -> bool:
        return self._event.wait(timeout)

    def _transition(self, new_state: ReadinessState) -> None:
        with self._lock:
            if self._state is new_state:
                return
            self._state = new_state
            if new_state is ReadinessState.READY:
                self._event.set()
            else:
                self._event.clear()
            listeners = list(self._listeners)

        _log.debug(f"readiness -> {new_state.value}", extra={"event": "readiness_changed"})
        for listener in listeners:
            try:
                listener(new_state)
            except Exception:
                _log.exception("readiness listener failed", extra={"event": "readiness_listener_error"})

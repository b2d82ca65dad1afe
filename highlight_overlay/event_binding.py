"""Resize notification binding for the highlight host."""
from __future__ import annotations

import logging
from typing import Any, Callable, Optional, Union

from PyQt6.QtCore import QEvent, QObject

ResizeCallback = Callable[[], None]


class _ResizeEventFilter(QObject):
    def __init__(self, callback: ResizeCallback) -> None:
        super().__init__()
        self._callback = callback

    def eventFilter(self, watched: QObject, event: QEvent) -> bool:  # type: ignore[override]
        if event.type() == QEvent.Type.Resize:
            self._callback()
        return False


class ResizeBinding:
    """Attach a resize callback via the first mechanism the source supports.

    1. a ``resized`` signal (anything with ``connect``/``disconnect``)
    2. a Qt event filter on a ``QObject`` source
    """

    SIGNAL = "signal"
    EVENT_FILTER = "event_filter"

    def __init__(self, source: Any, *, logger: Optional[Union[logging.Logger, logging.LoggerAdapter]] = None) -> None:
        self._source = source
        self._logger = logger or logging.getLogger("HighlightOverlay")
        self._callback: Optional[ResizeCallback] = None
        self._mechanism: Optional[str] = None
        self._filter: Optional[_ResizeEventFilter] = None

    @property
    def mechanism(self) -> Optional[str]:
        return self._mechanism

    @property
    def attached(self) -> bool:
        return self._mechanism is not None

    def _signal(self) -> Any:
        signal = getattr(self._source, "resized", None)
        if signal is not None and hasattr(signal, "connect") and hasattr(signal, "disconnect"):
            return signal
        return None

    def attach(self, callback: ResizeCallback) -> bool:
        if self._mechanism is not None:
            return True
        signal = self._signal()
        if signal is not None:
            signal.connect(callback)
            self._mechanism = self.SIGNAL
        elif isinstance(self._source, QObject):
            self._filter = _ResizeEventFilter(callback)
            self._source.installEventFilter(self._filter)
            self._mechanism = self.EVENT_FILTER
        else:
            self._logger.warning("Resize source %r doesn't support event binding.", self._source)
            return False
        self._callback = callback
        self._logger.debug("Resize listener attached via %s", self._mechanism)
        return True

    def detach(self) -> bool:
        if self._mechanism is None:
            if self._signal() is None and not isinstance(self._source, QObject):
                self._logger.warning("Resize source %r doesn't support event binding.", self._source)
            return False
        if self._mechanism == self.SIGNAL:
            signal = self._signal()
            if signal is not None:
                try:
                    signal.disconnect(self._callback)
                except (TypeError, RuntimeError) as exc:
                    self._logger.debug("Resize signal already disconnected: %s", exc)
        elif self._filter is not None:
            self._source.removeEventFilter(self._filter)
            self._filter = None
        self._logger.debug("Resize listener detached from %s", self._mechanism)
        self._mechanism = None
        self._callback = None
        return True

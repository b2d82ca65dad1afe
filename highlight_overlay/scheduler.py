from __future__ import annotations

from typing import Callable, Optional, Protocol

from PyQt6.QtCore import QObject, QTimer


class ScheduledTask(Protocol):
    @property
    def cancelled(self) -> bool: ...

    def cancel(self) -> None: ...


class RenderScheduler(Protocol):
    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> ScheduledTask: ...


class _TimerTask:
    """Cancellation handle wrapping one single-shot timer."""

    def __init__(self, timer: QTimer) -> None:
        self._timer = timer
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        self._timer.stop()
        self._timer.deleteLater()

    def _fire(self, callback: Callable[[], None]) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        self._timer.deleteLater()
        callback()


class QtRenderScheduler:
    """Runs callbacks on the Qt event loop after a delay, one timer per task."""

    def __init__(self, parent: Optional[QObject] = None) -> None:
        self._parent = parent

    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> ScheduledTask:
        timer = QTimer(self._parent)
        timer.setSingleShot(True)
        timer.setInterval(max(0, int(delay_ms)))
        task = _TimerTask(timer)
        timer.timeout.connect(lambda: task._fire(callback))
        timer.start()
        return task

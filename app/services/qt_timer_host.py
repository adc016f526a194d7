"""
app/services/qt_timer_host.py -- Qt event-loop timers for the auto-save scheduler.

Implements the ``TimerHost`` protocol with ``QTimer``.  Timers only fire
while a Qt event loop runs, so the host reports itself unavailable until a
``QCoreApplication`` (or ``QApplication``) exists; the scheduler then
skips scheduling instead of creating timers that would never tick.

Usage::

    from app.services.qt_timer_host import QtTimerHost

    host = QtTimerHost()
    timer = host.set_interval(on_tick, 30_000)
    host.clear_interval(timer)
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from PySide6.QtCore import QCoreApplication, QObject, QTimer

logger = logging.getLogger(__name__)


class QtTimerHost:
    """Creates repeating ``QTimer`` objects on the current Qt thread.

    Parameters
    ----------
    parent : QObject, optional
        Parent for created timers so they share its lifetime.
    """

    def __init__(self, parent: QObject | None = None):
        self._parent = parent
        # Strong references keep un-parented timers alive until cleared.
        self._timers: set[QTimer] = set()

    def is_available(self) -> bool:
        return QCoreApplication.instance() is not None

    def set_interval(self, callback: Callable[[], None], interval_ms: int) -> QTimer:
        timer = QTimer(self._parent)
        timer.setInterval(interval_ms)
        timer.timeout.connect(callback)
        timer.start()
        self._timers.add(timer)
        return timer

    def clear_interval(self, handle: QTimer) -> None:
        if handle not in self._timers:
            return
        self._timers.discard(handle)
        handle.stop()
        handle.deleteLater()

    @property
    def active_timers(self) -> int:
        return len(self._timers)

    def stop_all(self) -> None:
        """Stop and release every timer this host created."""
        for timer in list(self._timers):
            self.clear_interval(timer)

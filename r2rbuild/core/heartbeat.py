"""Background progress heartbeat for long-running builds.

The heartbeat is purely observational: it prints ``Still building ... (N min)``
once per interval so CI runners that kill silent jobs keep the build alive.
It is a context manager; leaving the ``with`` block always stops and joins
the thread, whatever the outcome of the build.

The number of beats is capped. Once the cap is reached the heartbeat goes
quiet while the build keeps running; the cap is not a build timeout.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from types import TracebackType

logger = logging.getLogger(__name__)


def default_message(beat: int) -> str:
    return f"Still building ... ({beat} min)"


class Heartbeat:
    """Cancellable periodic emitter running on a daemon thread.

    Parameters
    ----------
    emit:
        Called with the formatted message for every beat.
    interval:
        Seconds between beats. The first beat is emitted immediately.
    max_beats:
        Upper bound on the number of beats emitted.
    message:
        Formats the beat index (0-based, in minutes at the default interval).
    """

    def __init__(
        self,
        emit: Callable[[str], None],
        *,
        interval: float = 60.0,
        max_beats: int = 101,
        message: Callable[[int], str] = default_message,
    ) -> None:
        self._emit = emit
        self._interval = interval
        self._max_beats = max_beats
        self._message = message
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self._beats = 0

    @property
    def beats(self) -> int:
        """Number of beats emitted so far."""
        return self._beats

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self._thread is not None:
            raise RuntimeError("Heartbeat already started")
        self._thread = threading.Thread(
            target=self._run, name="r2rbuild-heartbeat", daemon=True
        )
        self._thread.start()

    def stop(self, timeout: float | None = 5.0) -> None:
        """Signal the thread to stop and wait for it."""
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            if self._thread.is_alive():
                logger.warning("Heartbeat thread did not stop within %s s", timeout)

    def _run(self) -> None:
        for beat in range(self._max_beats):
            if self._stop.is_set():
                return
            self._emit(self._message(beat))
            self._beats = beat + 1
            if self._stop.wait(self._interval):
                return
        logger.info("Heartbeat cap of %d beats reached; build continues", self._max_beats)

    def __enter__(self) -> Heartbeat:
        self.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.stop()

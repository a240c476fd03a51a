"""Fire-and-forget delivery of backup progress events."""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Optional

from tradejournal.models.backup import BackupProgress

logger = logging.getLogger(__name__)

ProgressSink = Callable[[BackupProgress], None]


class ProgressDispatcher:
    """Deliver progress events to a sink on a single background worker.

    ``emit`` only buffers the event, so a slow sink never stalls the
    compression or extraction loop. While the sink is busy, a new event
    replaces a pending event of the same phase, so the buffer holds at
    most one event per phase and phase order is preserved. Exceptions
    raised by the sink are logged and dropped.

    Leaving the context does not wait for the sink: buffered events are
    still delivered by the worker after the operation has returned.
    """

    def __init__(self, sink: Optional[ProgressSink]):
        self._sink = sink
        self._lock = threading.Lock()
        self._pending: list[BackupProgress] = []
        self._draining = False
        self._executor: Optional[ThreadPoolExecutor] = None
        if sink is not None:
            self._executor = ThreadPoolExecutor(
                max_workers=1, thread_name_prefix="backup-progress"
            )

    def __enter__(self) -> "ProgressDispatcher":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def emit(self, progress: BackupProgress) -> None:
        if self._executor is None:
            return
        with self._lock:
            if self._pending and self._pending[-1].phase == progress.phase:
                self._pending[-1] = progress
            else:
                self._pending.append(progress)
            if self._draining:
                return
            self._draining = True
        self._executor.submit(self._drain)

    def _drain(self) -> None:
        while True:
            with self._lock:
                if not self._pending:
                    self._draining = False
                    return
                progress = self._pending.pop(0)
            self._deliver(progress)

    def _deliver(self, progress: BackupProgress) -> None:
        try:
            self._sink(progress)
        except Exception:
            logger.exception("Progress callback failed during %s", progress.phase)

    def close(self) -> None:
        """Stop accepting events without waiting for the sink."""
        if self._executor is not None:
            self._executor.shutdown(wait=False)
            self._executor = None

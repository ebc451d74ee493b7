from __future__ import annotations

import logging
import queue
import threading
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from teams_enum.application.services import EnumerationService
from teams_enum.domain.models import Verdict, VerdictKind
from teams_enum.errors import SinkIOError

logger = logging.getLogger(__name__)

_CLOSED = object()


class CancellationToken:
    """Shared stop signal; once set, no new lookups are started."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


@dataclass
class PoolReport:
    counts: Dict[VerdictKind, int] = field(default_factory=lambda: {kind: 0 for kind in VerdictKind})
    skipped: int = 0
    cancelled: bool = False

    @property
    def processed(self) -> int:
        return sum(self.counts.values())

    @property
    def confirmed(self) -> int:
        return self.counts[VerdictKind.CONFIRMED]

    @property
    def auth_errors(self) -> int:
        return self.counts[VerdictKind.AUTH_ERROR]


class WorkerPool:
    """Fixed set of worker threads draining a bounded identity queue.

    The producer runs on the caller's thread and blocks while the queue is
    full. When the source is exhausted one close marker per worker is queued.
    After cancellation workers discard whatever is still queued and exit at
    their close marker; lookups already in flight finish normally. A job whose
    result cannot be reported cancels the run, and ``run`` raises SinkIOError
    once every worker has exited.
    """

    def __init__(
        self,
        service: EnumerationService,
        workers: int = 5,
        queue_size: int = 256,
        abort_on_auth_error: bool = True,
    ) -> None:
        if workers < 1:
            raise ValueError("workers must be at least 1")
        if queue_size < 1:
            raise ValueError("queue_size must be at least 1")
        self.service = service
        self.workers = workers
        self.queue_size = queue_size
        self.abort_on_auth_error = abort_on_auth_error

    def run(self, identities: Iterable[str], cancel: Optional[CancellationToken] = None) -> PoolReport:
        cancel = cancel or CancellationToken()
        jobs: "queue.Queue[object]" = queue.Queue(maxsize=self.queue_size)
        report = PoolReport()
        report_lock = threading.Lock()
        failures: List[BaseException] = []

        def record(verdict: Verdict) -> None:
            with report_lock:
                report.counts[verdict.kind] += 1
            if verdict.kind == VerdictKind.AUTH_ERROR and self.abort_on_auth_error and not cancel.cancelled:
                logger.warning("Credential rejected, cancelling remaining lookups")
                cancel.cancel()

        def skip() -> None:
            with report_lock:
                report.skipped += 1

        def worker() -> None:
            while True:
                item = jobs.get()
                if item is _CLOSED:
                    return
                if cancel.cancelled:
                    skip()
                    continue
                try:
                    record(self.service.probe(item))
                except Exception as e:
                    logger.error(f"Reporting {item} failed, cancelling remaining lookups: {e}", exc_info=True)
                    with report_lock:
                        failures.append(e)
                    cancel.cancel()

        threads = [
            threading.Thread(target=worker, name=f"teams-enum-worker-{index}", daemon=True)
            for index in range(self.workers)
        ]
        logger.info(f"Starting {self.workers} workers (queue size {self.queue_size})")
        for thread in threads:
            thread.start()
        try:
            for identity in identities:
                if cancel.cancelled:
                    break
                jobs.put(identity)
        except BaseException:
            # Interrupted: drop what is queued instead of draining it.
            cancel.cancel()
            raise
        finally:
            for _ in threads:
                jobs.put(_CLOSED)
            for thread in threads:
                thread.join()

        if failures:
            failure = failures[0]
            if isinstance(failure, SinkIOError):
                raise failure
            raise SinkIOError(f"Reporting results failed: {failure}") from failure

        report.cancelled = cancel.cancelled
        logger.info(
            f"Finished: {report.processed} processed, {report.confirmed} confirmed, {report.skipped} skipped"
        )
        return report

"""
Counter aggregation for a load test run.

Workers never touch the totals. They push events onto two intakes
(user-started, request-done) and one drain thread per intake owns the
matching counter.
"""

import logging
import queue
import threading
from collections import namedtuple

logger = logging.getLogger(__name__)

Totals = namedtuple("Totals", ["users_started", "requests_completed", "requests_failed"])

_STOP = object()


class CounterAggregator:
    def __init__(self):
        self.lock = threading.Lock()
        self._users = queue.Queue()
        self._requests = queue.Queue()
        self._users_started = 0
        self._requests_completed = 0
        self._requests_failed = 0
        self._threads = []
        self._started = False
        self._closed = False

    # ------------------------------------------------------------------
    # lifecycle
    # ------------------------------------------------------------------

    def start(self):
        """Start both drain loops. Must run before any worker records."""
        with self.lock:
            if self._started:
                return
            self._started = True
        self._threads = [
            threading.Thread(target=self._drain_users, name="aggregator-users", daemon=True),
            threading.Thread(target=self._drain_requests, name="aggregator-requests", daemon=True),
        ]
        for t in self._threads:
            t.start()
        logger.debug("Aggregator loops started")

    def close(self):
        """
        Stop intake, drain whatever is queued and return the final totals.

        Only call this once every producer has been joined.
        """
        with self.lock:
            already_closed = self._closed
            self._closed = True
            if not already_closed and self._started:
                self._users.put(_STOP)
                self._requests.put(_STOP)
        if not already_closed and self._started:
            for t in self._threads:
                t.join()
            logger.debug("Aggregator loops drained")
        return self.snapshot()

    # ------------------------------------------------------------------
    # intakes
    # ------------------------------------------------------------------

    def record_user_started(self):
        self._put(self._users, 1)

    def record_request(self, success=True):
        self._put(self._requests, bool(success))

    def _put(self, intake, event):
        # checked and enqueued under the lock so nothing lands behind _STOP
        with self.lock:
            if self._closed:
                raise RuntimeError("event recorded after the aggregator was closed")
            if not self._started:
                raise RuntimeError("aggregator not started")
            intake.put(event)

    # ------------------------------------------------------------------
    # drain loops
    # ------------------------------------------------------------------

    def _drain_users(self):
        while True:
            event = self._users.get()
            if event is _STOP:
                return
            with self.lock:
                self._users_started += event

    def _drain_requests(self):
        while True:
            event = self._requests.get()
            if event is _STOP:
                return
            with self.lock:
                if event:
                    self._requests_completed += 1
                else:
                    self._requests_failed += 1

    def snapshot(self):
        """Current totals. Complete only after close()."""
        with self.lock:
            return Totals(
                users_started=self._users_started,
                requests_completed=self._requests_completed,
                requests_failed=self._requests_failed,
            )

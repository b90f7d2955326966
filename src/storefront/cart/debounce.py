"""Trailing-edge debouncer for remote cart writes.

Every edit reschedules a single pending write; the write happens once the
edits stop for ``wait`` seconds. Each write carries the owner it was scheduled
for, so a write can never be attributed to whoever happens to be signed in
when it finally runs. The host drives time by calling ``run_due`` from its
event loop.
"""

import time

import structlog

logger = structlog.get_logger(__name__)


class Debouncer:
    def __init__(self, action, wait, clock=time.monotonic):
        self._action = action  # callable(owner, payload)
        self._wait = wait
        self._clock = clock
        self._owner = None
        self._payload = None
        self._deadline = None

    @property
    def pending(self) -> bool:
        return self._deadline is not None

    @property
    def pending_owner(self):
        return self._owner if self.pending else None

    def schedule(self, owner, payload):
        """Replace the pending write, pushing its deadline back.

        A pending write for a different owner is flushed first.
        """
        if self.pending and self._owner != owner:
            self.flush()

        self._owner = owner
        self._payload = payload
        self._deadline = self._clock() + self._wait

    def cancel(self) -> bool:
        was_pending = self.pending
        self._clear()
        return was_pending

    def run_due(self, now=None) -> bool:
        """Run the pending write if its quiet period is over.

        A failure is logged and the write stays pending for the next period.
        """
        if not self.pending:
            return False

        now = self._clock() if now is None else now
        if now < self._deadline:
            return False

        try:
            self._run()
        except Exception:
            logger.exception("Debounced cart write failed; will retry", owner=str(self._owner))
            self._deadline = now + self._wait
            return False
        return True

    def flush(self) -> bool:
        """Run the pending write now. Returns once it has completed; failures propagate."""
        if not self.pending:
            return False
        self._run()
        return True

    def _run(self):
        self._action(self._owner, self._payload)
        self._clear()

    def _clear(self):
        self._owner = None
        self._payload = None
        self._deadline = None

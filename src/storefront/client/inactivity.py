"""Inactivity reaper: signs out idle customers and gives their stock back.

Only deliberate interaction counts as activity: clicks on (or inside)
buttons, links and inputs, and outgoing requests. The last-activity time is
kept in local storage so it survives reloads. The host calls ``tick`` from
its event loop; a check runs at most once per check interval.

The reaper follows the identity provider: a sign-in resets the last-activity
time and starts watching, a sign-out stops it.
"""

import time

import structlog

from storefront.config import LAST_ACTIVITY_KEY, get_settings

logger = structlog.get_logger(__name__)

INTERACTIVE_TAGS = frozenset({"button", "a", "input"})


def _millis(seconds):
    return int(seconds * 1000)


class InactivityReaper:
    def __init__(self, identity_provider, storage, on_timeout, settings=None, clock=time.time):
        settings = settings or get_settings()
        self._identity_provider = identity_provider
        self._storage = storage
        self._on_timeout = on_timeout  # usually CartSession.clear_for_inactivity
        self._timeout = settings.inactivity_timeout_seconds
        self._interval = settings.inactivity_check_interval_seconds
        self._clock = clock
        self._next_check = None

        self._unsubscribe = identity_provider.subscribe(self._on_identity_changed)
        if identity_provider.current_identity() is not None:
            self.start()

    @property
    def running(self) -> bool:
        return self._next_check is not None

    def last_activity(self):
        """Epoch milliseconds of the last recorded activity, if any."""
        raw = self._storage.get(LAST_ACTIVITY_KEY)
        return int(raw) if raw is not None else None

    def record_activity(self, now=None):
        if self._identity_provider.current_identity() is None:
            return False
        now = self._clock() if now is None else now
        self._storage.set(LAST_ACTIVITY_KEY, _millis(now))
        return True

    def record_click(self, tag_path, now=None):
        """``tag_path`` lists tag names from the click target up to the root."""
        if any((tag or "").lower() in INTERACTIVE_TAGS for tag in tag_path):
            return self.record_activity(now)
        return False

    def record_request(self, now=None):
        return self.record_activity(now)

    def start(self, now=None):
        now = self._clock() if now is None else now
        self._next_check = now + self._interval
        return self.check(now)

    def stop(self):
        self._next_check = None

    def close(self):
        self.stop()
        self._unsubscribe()

    def tick(self, now=None):
        if not self.running:
            return False
        now = self._clock() if now is None else now
        if now < self._next_check:
            return False
        self._next_check = now + self._interval
        return self.check(now)

    def check(self, now=None):
        """Reap the session if it has been idle for longer than the timeout."""
        now = self._clock() if now is None else now
        identity = self._identity_provider.current_identity()
        last = self.last_activity()
        elapsed = _millis(now) - last if last is not None else 0

        if identity is None or elapsed <= _millis(self._timeout):
            return False

        logger.info(
            "Inactivity timeout exceeded",
            identity_id=str(identity.uid),
            idle_seconds=elapsed // 1000,
            timeout_seconds=self._timeout,
        )
        self._on_timeout()
        self.stop()
        return True

    def _on_identity_changed(self, identity):
        if identity is None:
            self.stop()
            return
        self.record_activity()
        self.start()

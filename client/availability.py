# client/availability.py
import logging
import threading

from config import SLUG_CHECK_DEBOUNCE_SECONDS
from utils.slug import normalize_slug

logger = logging.getLogger(__name__)


class SlugAvailabilityChecker:
    """
    Debounced, advisory slug availability for a form being typed into.

    Each call to `request()` restarts the quiet period; only the slug that is
    still the latest one when its check returns updates `available`. A True
    result is not a reservation: only the create transaction decides.

    `available` is True (free), False (taken) or None (unknown / pending).
    """

    def __init__(self, api, delay=SLUG_CHECK_DEBOUNCE_SECONDS, on_result=None, timer_factory=threading.Timer):
        self.api = api
        self.delay = delay
        self.on_result = on_result
        self._timer_factory = timer_factory
        self._lock = threading.Lock()
        self._timer = None
        self._latest = None
        self._checked = None
        self.available = None
        self.checking = False

    def request(self, raw_slug):
        """Schedules a check for the normalized form of `raw_slug` and returns that form."""
        slug = normalize_slug(raw_slug)
        with self._lock:
            self._cancel_timer()
            self._latest = slug or None
            self._checked = None
            self.available = None
            if not slug:
                self.checking = False
                return slug
            self.checking = True
            self._timer = self._timer_factory(self.delay, self._run, args=(slug,))
            self._timer.daemon = True
            self._timer.start()
        return slug

    def _run(self, slug):
        with self._lock:
            if slug != self._latest:
                return

        try:
            available = self.api.check_slug_availability(slug).get("available")
        except Exception as e:
            logger.warning(f"slug availability check failed for '{slug}': {e}")
            available = None

        with self._lock:
            if slug != self._latest:
                logger.debug(f"dropping stale availability result for '{slug}'")
                return
            self.available = available
            self._checked = slug
            self.checking = False

        if self.on_result:
            self.on_result(slug, available)

    def result_for(self, slug):
        """Last known availability of `slug`, or None if it is not the slug that was checked."""
        with self._lock:
            if slug and slug == self._checked == self._latest:
                return self.available
            return None

    def _cancel_timer(self):
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def cancel(self):
        with self._lock:
            self._cancel_timer()
            self._latest = None
            self.checking = False

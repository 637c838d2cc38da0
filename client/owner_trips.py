import logging
import threading

from config import API_TIMEOUT_SECONDS
from trips.conflicts import OWNER_FIELDS, canonicalize_trip
from trips.service import list_owner_trips
from utils.firestore_paths import trips_col

logger = logging.getLogger(__name__)


class OwnerTripsWatcher:
    """
    Realtime view of one owner's trips through Firestore snapshot listeners.

    One listener runs per owner field (`ownerId` and the legacy `owner_id`)
    so unmigrated trips show up here just as they do in `fetch()`.

    The snapshot may lag behind the store; use it for quick feedback while
    the user edits dates, and `fetch()` when a decision has to be right.
    Use as a context manager so the listeners are always released:

        with OwnerTripsWatcher(db, uid) as watcher:
            facade = TripCreationFacade(api, watcher.fetch, live_trips=watcher)
    """

    def __init__(self, db, owner_id, timeout=API_TIMEOUT_SECONDS):
        self.db = db
        self.owner_id = owner_id
        self.timeout = timeout
        self._lock = threading.Lock()
        self._by_field = {field: {} for field in OWNER_FIELDS}
        self._watches = []

    def start(self):
        if not self._watches:
            for field in OWNER_FIELDS:
                query = trips_col(self.db).where(field, '==', self.owner_id)
                self._watches.append(query.on_snapshot(self._snapshot_handler(field)))
        return self

    def _snapshot_handler(self, field):
        def on_snapshot(docs, changes, read_time):
            trips = {}
            for doc in docs:
                trip = canonicalize_trip(doc.to_dict() or {})
                trip['id'] = doc.id
                trips[doc.id] = trip
            with self._lock:
                self._by_field[field] = trips
            logger.debug(f"trip snapshot for {self.owner_id} by '{field}': {len(trips)} trips")
        return on_snapshot

    def snapshot(self):
        merged = {}
        with self._lock:
            for field in OWNER_FIELDS:
                merged.update(self._by_field[field])
        return list(merged.values())

    def fetch(self):
        return list_owner_trips(self.db, self.owner_id, timeout=self.timeout)

    def stop(self):
        for watch in self._watches:
            watch.unsubscribe()
        self._watches = []

    def __enter__(self):
        return self.start()

    def __exit__(self, exc_type, exc, tb):
        self.stop()
        return False

# cron/auto_stop.py
"""
Stops live tracking of trips that are still marked as started after their
end date plus a grace period. Meant to run hourly (Cloud Scheduler calling
`flask auto-stop-trips`, or any cron).
"""
import datetime
import logging

from firebase_admin import firestore
from google.api_core.exceptions import NotFound

from config import AUTO_STOP_SCAN_LIMIT, DEFAULT_GRACE_HOURS
from trips.conflicts import trip_date_range, trip_owner
from utils.dates import local_naive, to_instant
from utils.firestore_paths import NOTIFICATIONS, SESSIONS, TRIP_AUDITS, trips_col

logger = logging.getLogger(__name__)


def _grace_hours(trip, default_grace_hours):
    value = trip.get('gracePeriodHours')
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value
    return default_grace_hours


def stop_deadline(trip, default_grace_hours=DEFAULT_GRACE_HOURS):
    """Last local instant the trip may stay started, or None if it has no usable end date."""
    _, end = trip_date_range(trip)
    end_instant = to_instant(end, end_of_day=True)
    if end_instant is None:
        return None
    return end_instant + datetime.timedelta(hours=_grace_hours(trip, default_grace_hours))


def _notify_and_audit(db, doc_id, trip, grace_hours, now):
    owner_id = trip_owner(trip)
    try:
        db.collection(NOTIFICATIONS).add({
            "to": owner_id,
            "tripId": doc_id,
            "title": "Trip tracking stopped",
            "body": f"We stopped tracking \"{trip.get('title') or doc_id}\", "
                    f"the end date + {grace_hours}h grace period expired.",
            "createdAt": now,
            "read": False,
            "type": "trip_auto_stop",
            "action": "extend_or_restart",
        })
    except Exception as e:
        logger.error(f"notify error for trip {doc_id}: {e}")

    try:
        _, end = trip_date_range(trip)
        db.collection(TRIP_AUDITS).add({
            "tripId": doc_id,
            "action": "autoStopped",
            "reason": "grace_period_expired",
            "at": now,
            "by": "system",
            "metadata": {"endDate": end, "graceHours": grace_hours},
        })
    except Exception as e:
        logger.error(f"audit error for trip {doc_id}: {e}")

    session_id = trip.get('trackingSessionId')
    if session_id:
        try:
            db.collection(SESSIONS).document(session_id).update({"active": False, "endedAt": now})
        except NotFound:
            logger.warning(f"tracking session {session_id} of trip {doc_id} no longer exists")
        except Exception as e:
            logger.error(f"session cleanup failed for trip {doc_id}: {e}")


def auto_stop_expired_trips(db, now=None, default_grace_hours=DEFAULT_GRACE_HOURS):
    """
    Batch-updates every started trip past its deadline and returns the ids
    that were stopped. Notification, audit and session side effects run only
    after the batch commits and never fail the job.
    """
    now = local_naive(now) if now else datetime.datetime.now()
    docs = list(trips_col(db).where('started', '==', True).limit(AUTO_STOP_SCAN_LIMIT).stream())
    if not docs:
        return []

    batch = db.batch()
    expired = []
    for doc in docs:
        trip = doc.to_dict() or {}
        deadline = stop_deadline(trip, default_grace_hours)
        if deadline is None or now < deadline:
            continue

        batch.update(doc.reference, {
            "started": False,
            "status": "auto-stopped",
            "stoppedAt": now.astimezone(),
            "stoppedBy": "system",
            "autoStopped": True,
            "autoStopReason": "grace_period_expired",
            "updatedAt": firestore.SERVER_TIMESTAMP,
        })
        expired.append((doc.id, trip))

    if not expired:
        return []

    batch.commit()
    logger.info(f"Auto-stopped {len(expired)} trip(s).")

    for doc_id, trip in expired:
        _notify_and_audit(db, doc_id, trip, _grace_hours(trip, default_grace_hours), now.astimezone())

    return [doc_id for doc_id, _ in expired]

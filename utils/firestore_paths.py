# utils/firestore_paths.py
# Centralized Firestore path helpers
# /trips/{trip_id}, /slugs/{slug}, /users/{uid}, /notifications/{id}

TRIPS = "trips"
SLUGS = "slugs"
USERS = "users"
NOTIFICATIONS = "notifications"
TRIP_AUDITS = "tripAudits"
SESSIONS = "sessions"


def trips_col(db):
    return db.collection(TRIPS)


def trip_doc(db, trip_id: str):
    return trips_col(db).document(trip_id)


def slug_doc(db, slug: str):
    return db.collection(SLUGS).document(slug)


def users_col(db):
    return db.collection(USERS)


def notification_doc(db, notification_id: str):
    return db.collection(NOTIFICATIONS).document(notification_id)

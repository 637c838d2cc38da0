# migrate_trip_dates.py
"""
One-time migration of trip documents to the canonical field names.

Older trips stored their dates as start_date / start_at / startAt / start
(and the matching end names) and their owner as owner_id. This rewrites
them to startDate / endDate / ownerId and removes the aliases.

Usage:
    python migrate_trip_dates.py [--dry-run]
"""
import argparse
import logging

from firebase_admin import firestore

import config
from trips.conflicts import canonicalize_trip
from user_auth.utils import initialize_firebase_app
from utils.firestore_paths import trips_col

BATCH_SIZE = 400

logger = logging.getLogger(__name__)


def field_updates(data):
    """Update dict turning `data` into its canonical form, or {} if it already is."""
    canonical = canonicalize_trip(data)
    if canonical == data:
        return {}
    update = {key: firestore.DELETE_FIELD for key in data if key not in canonical}
    for key in ('startDate', 'endDate', 'ownerId'):
        if key in canonical and data.get(key) != canonical[key]:
            update[key] = canonical[key]
    return update


def migrate_trip_fields(db, dry_run=False):
    migrated = []
    batch = db.batch()
    pending = 0

    for doc in trips_col(db).stream():
        update = field_updates(doc.to_dict() or {})
        if not update:
            continue
        migrated.append(doc.id)
        if dry_run:
            logger.info(f"[dry-run] {doc.id}: {sorted(update)}")
            continue

        batch.update(doc.reference, update)
        pending += 1
        if pending >= BATCH_SIZE:
            batch.commit()
            batch = db.batch()
            pending = 0

    if pending:
        batch.commit()
    logger.info(f"{'Would migrate' if dry_run else 'Migrated'} {len(migrated)} trip(s).")
    return migrated


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument('--dry-run', action='store_true')
    args = parser.parse_args()

    firebase_app = initialize_firebase_app(config.FIREBASE_SERVICE_ACCOUNT_CONTENT, config.FIREBASE_SERVICE_ACCOUNT_PATH)
    migrate_trip_fields(firestore.client(app=firebase_app), dry_run=args.dry_run)

# trips/service.py
"""
Trip persistence rules.

The `slugs` collection is the uniqueness index for trip slugs: an entry
exists exactly when a trip with that slug exists. Only the transactional
helpers in this module write to it.
"""
import logging

from firebase_admin import firestore

from config import DEFAULT_VISIBILITY, VISIBILITY_CHOICES
from errors import (
    DateConflictError, InvalidArgumentError, NotFoundError,
    PermissionDeniedError, SlugTakenError, UnauthenticatedError, ValidationError,
)
from trips.conflicts import canonicalize_trip, find_conflicts, trip_date_range, trip_owner
from utils.dates import to_date
from utils.firestore_paths import slug_doc, trip_doc, trips_col
from utils.slug import normalize_slug

logger = logging.getLogger(__name__)

# Set by the server, never taken from the client payload
SERVER_OWNED_FIELDS = ('id', 'trip_id', 'slug', 'ownerId', 'createdAt', 'updatedAt', 'created_at', 'updated_at')

EDITABLE_FIELDS = ('title', 'notes', 'startLocation', 'destination', 'visibility', 'allowedUsers', 'startDate', 'endDate')


def run_transaction(db, func, *args):
    """Runs `func(transaction, *args)` as a Firestore transaction (retried on contention)."""
    return firestore.transactional(func)(db.transaction(), *args)


def _allowed_users(owner_id, allowed):
    if allowed is None:
        return [owner_id]
    if not isinstance(allowed, list):
        raise InvalidArgumentError("allowedUsers must be a list of user ids.")
    users = [owner_id]
    for uid in allowed:
        if uid and uid not in users:
            users.append(uid)
    return users


def _visibility(value):
    visibility = value or DEFAULT_VISIBILITY
    if visibility not in VISIBILITY_CHOICES:
        raise InvalidArgumentError(f"visibility must be one of: {', '.join(VISIBILITY_CHOICES)}.")
    return visibility


def build_trip_payload(owner_id, slug, trip_data):
    data = canonicalize_trip(trip_data or {})
    for key in SERVER_OWNED_FIELDS:
        data.pop(key, None)

    if isinstance(data.get('title'), str):
        data['title'] = data['title'].strip()

    data.update({
        "ownerId": owner_id,
        "slug": slug,
        "visibility": _visibility(data.get('visibility')),
        "allowedUsers": _allowed_users(owner_id, data.get('allowedUsers')),
        "createdAt": firestore.SERVER_TIMESTAMP,
        "updatedAt": firestore.SERVER_TIMESTAMP,
    })
    return data


def _reserve_slug_and_create_trip(transaction, slug_ref, trip_ref, payload):
    snapshot = slug_ref.get(transaction=transaction)
    if snapshot.exists:
        raise SlugTakenError(slug=slug_ref.id)

    transaction.set(trip_ref, payload)
    transaction.set(slug_ref, {
        "tripId": trip_ref.id,
        "ownerId": payload['ownerId'],
        "createdAt": firestore.SERVER_TIMESTAMP,
    })
    return {"id": trip_ref.id, "slug": slug_ref.id}


def create_trip(db, owner_id, slug, trip_data):
    """
    Atomically claims `slug` and creates the trip that owns it.

    Raises UnauthenticatedError without an owner, InvalidArgumentError when
    the slug normalizes to nothing and SlugTakenError when it is claimed.
    Returns {"id": ..., "slug": ...}.
    """
    if not owner_id:
        raise UnauthenticatedError("Must be signed in to create a trip.")
    slug = normalize_slug(slug)
    if not slug:
        raise InvalidArgumentError("missing-slug")

    payload = build_trip_payload(owner_id, slug, trip_data)
    trip_ref = trips_col(db).document()
    result = run_transaction(db, _reserve_slug_and_create_trip, slug_doc(db, slug), trip_ref, payload)
    logger.info(f"Trip {result['id']} created with slug '{slug}' for owner {owner_id}.")
    return result


def is_slug_available(db, slug):
    """Advisory only: a free slug can still be claimed by someone else before create_trip runs."""
    return not slug_doc(db, slug).get().exists


def list_owner_trips(db, owner_id, transaction=None, timeout=None):
    """All trips of `owner_id` as canonical dicts, including documents still using `owner_id`."""
    trips = {}
    for field in ('ownerId', 'owner_id'):
        query = trips_col(db).where(field, '==', owner_id)
        for doc in query.stream(transaction=transaction, timeout=timeout):
            trip = canonicalize_trip(doc.to_dict() or {})
            trip['id'] = doc.id
            trips[doc.id] = trip
    return list(trips.values())


def get_trip_by_slug(db, slug):
    slug = normalize_slug(slug)
    if not slug:
        raise NotFoundError("Slug not found")
    slug_snap = slug_doc(db, slug).get()
    if not slug_snap.exists:
        raise NotFoundError("Slug not found")
    trip_id = (slug_snap.to_dict() or {}).get('tripId')
    if not trip_id:
        raise NotFoundError("Slug mapping invalid (no tripId)")
    trip_snap = trip_doc(db, trip_id).get()
    if not trip_snap.exists:
        raise NotFoundError("Trip not found")
    trip = canonicalize_trip(trip_snap.to_dict() or {})
    trip['id'] = trip_snap.id
    return trip


def can_view_trip(trip, user_uid):
    if trip.get('visibility') == 'public':
        return True
    if not user_uid:
        return False
    return user_uid == trip_owner(trip) or user_uid in (trip.get('allowedUsers') or [])


def _delete_trip_and_slug(transaction, db, trip_ref, owner_id):
    trip_snap = trip_ref.get(transaction=transaction)
    if not trip_snap.exists:
        raise NotFoundError("Trip not found")
    trip = trip_snap.to_dict() or {}
    if trip_owner(trip) != owner_id:
        raise PermissionDeniedError("Only the owner can delete this trip.")

    slug = trip.get('slug')
    slug_ref = None
    if slug:
        candidate = slug_doc(db, slug)
        slug_snap = candidate.get(transaction=transaction)
        # only release the slug if it still points at this trip
        if slug_snap.exists and (slug_snap.to_dict() or {}).get('tripId') == trip_ref.id:
            slug_ref = candidate

    transaction.delete(trip_ref)
    if slug_ref is not None:
        transaction.delete(slug_ref)
    return {"id": trip_ref.id, "slug": slug, "slugReleased": slug_ref is not None}


def delete_trip(db, owner_id, trip_id):
    """Deletes a trip together with its slug index entry."""
    if not owner_id:
        raise UnauthenticatedError("Must be signed in to delete a trip.")
    result = run_transaction(db, _delete_trip_and_slug, db, trip_doc(db, trip_id), owner_id)
    logger.info(f"Trip {trip_id} deleted by {owner_id} (slug released: {result['slugReleased']}).")
    return result


def _apply_trip_update(transaction, db, trip_ref, owner_id, changes):
    trip_snap = trip_ref.get(transaction=transaction)
    if not trip_snap.exists:
        raise NotFoundError("Trip not found")
    trip = trip_snap.to_dict() or {}
    if trip_owner(trip) != owner_id:
        raise PermissionDeniedError("Only the owner can edit this trip.")

    update = dict(changes)
    if 'startDate' in update or 'endDate' in update:
        current_start, current_end = trip_date_range(trip)
        start = update.get('startDate', current_start)
        end = update.get('endDate', current_end)
        start_day, end_day = to_date(start), to_date(end)
        if start_day is None or end_day is None:
            raise ValidationError("startDate and endDate must be valid dates.", field='startDate')
        if start_day > end_day:
            raise ValidationError("Start date is after end date.", field='startDate')

        others = list_owner_trips(db, owner_id, transaction=transaction)
        conflicts = find_conflicts(start, end, others, owner_id=owner_id, exclude_trip_id=trip_ref.id)
        if conflicts:
            raise DateConflictError(conflicts)

        # rewrite legacy names so the document ends up with one canonical pair
        for name in ('start_date', 'start_at', 'startAt', 'start', 'end_date', 'end_at', 'endAt', 'end'):
            if name in trip:
                update[name] = firestore.DELETE_FIELD
        update['startDate'] = start
        update['endDate'] = end

    transaction.update(trip_ref, update)
    return {"id": trip_ref.id, "updated": sorted(k for k in changes if k != 'updatedAt')}


def update_trip(db, owner_id, trip_id, changes):
    """
    Owner-only edit of a trip. Changing dates re-runs the collision check
    against the owner's other trips; slug and owner cannot change.
    """
    if not owner_id:
        raise UnauthenticatedError("Must be signed in to edit a trip.")
    if not isinstance(changes, dict) or not changes:
        raise InvalidArgumentError("No changes provided.")

    immutable = [k for k in changes if k in SERVER_OWNED_FIELDS or k == 'owner_id']
    if immutable:
        raise InvalidArgumentError(f"Fields cannot be changed: {', '.join(sorted(immutable))}.")
    unknown = [k for k in changes if k not in EDITABLE_FIELDS]
    if unknown:
        raise InvalidArgumentError(f"Unsupported fields: {', '.join(sorted(unknown))}.")

    update = dict(changes)
    if 'title' in update:
        title = (update['title'] or '').strip() if isinstance(update['title'], str) else ''
        if not title:
            raise ValidationError("Please provide a title for the trip.", field='title')
        update['title'] = title
    if 'visibility' in update:
        update['visibility'] = _visibility(update['visibility'])
    if 'allowedUsers' in update:
        update['allowedUsers'] = _allowed_users(owner_id, update['allowedUsers'])
    update['updatedAt'] = firestore.SERVER_TIMESTAMP

    return run_transaction(db, _apply_trip_update, db, trip_doc(db, trip_id), owner_id, update)

# trips/conflicts.py
from utils.dates import ranges_overlap

# Older documents were written under several names for the same field.
# Everything that reads trip dates goes through trip_date_range().
START_FIELDS = ('startDate', 'start_date', 'start_at', 'startAt', 'start')
END_FIELDS = ('endDate', 'end_date', 'end_at', 'endAt', 'end')
OWNER_FIELDS = ('ownerId', 'owner_id')


def _first_present(trip, names):
    for name in names:
        value = trip.get(name)
        if value not in (None, ""):
            return value
    return None


def trip_id(trip):
    return trip.get('id') or trip.get('trip_id')


def trip_owner(trip):
    return _first_present(trip, OWNER_FIELDS)


def trip_date_range(trip):
    """Returns the raw (start, end) values of a trip document, whichever names they are stored under."""
    return _first_present(trip, START_FIELDS), _first_present(trip, END_FIELDS)


def canonicalize_trip(trip):
    """
    Copy of a trip document using only the canonical field names
    (ownerId, startDate, endDate). Legacy aliases are dropped.
    """
    data = dict(trip)
    start, end = trip_date_range(trip)
    owner = trip_owner(trip)
    for name in START_FIELDS + END_FIELDS + OWNER_FIELDS:
        data.pop(name, None)
    if start is not None:
        data['startDate'] = start
    if end is not None:
        data['endDate'] = end
    if owner is not None:
        data['ownerId'] = owner
    return data


def find_conflicts(candidate_start, candidate_end, existing_trips, owner_id=None, exclude_trip_id=None):
    """
    Every trip in `existing_trips` whose dates overlap the candidate range.

    When `owner_id` is given, trips of other owners are ignored. Trips with
    unparseable dates are skipped. Each trip is reported at most once.
    """
    conflicts = []
    seen = set()
    for trip in existing_trips or []:
        if not trip:
            continue
        tid = trip_id(trip)
        if exclude_trip_id is not None and tid == exclude_trip_id:
            continue
        if owner_id is not None and trip_owner(trip) != owner_id:
            continue
        if tid is not None:
            if tid in seen:
                continue
            seen.add(tid)

        start, end = trip_date_range(trip)
        if ranges_overlap(candidate_start, candidate_end, start, end):
            conflicts.append(trip)
    return conflicts

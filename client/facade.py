# client/facade.py
"""
Client-side trip creation.

Validation happens twice, at two trust levels:

* advisory: `preview_conflicts()` and the debounced slug check run against
  possibly stale data while the user is still typing;
* authoritative: `submit()` re-fetches the owner's trips and lets the server
  transaction decide on the slug.

Nothing here mutates the form passed in, so a failed submit leaves the
user's input intact.
"""
import logging
from collections import namedtuple

from errors import (
    CannotValidateError, DateConflictError, SlugTakenError, UnauthenticatedError, ValidationError,
)
from trips.conflicts import find_conflicts
from utils.dates import to_date
from utils.slug import derive_slug, normalize_slug

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = (
    ('title', "Please provide a title for the trip."),
    ('startLocation', "Please provide a start location."),
    ('destination', "Please provide a destination."),
    ('startDate', "Please provide a start date for the trip."),
    ('endDate', "Please provide an end date for the trip."),
)

PreparedTrip = namedtuple('PreparedTrip', ['slug', 'trip_data'])


def _clean(value):
    if value is None:
        return ""
    return value.strip() if isinstance(value, str) else value


class TripCreationFacade:

    def __init__(self, api, fetch_owner_trips=None, availability=None, live_trips=None, owner_id=None):
        self.api = api
        self.fetch_owner_trips = fetch_owner_trips or api.list_my_trips
        self.availability = availability
        self.live_trips = live_trips
        self.owner_id = owner_id

    def validate(self, form):
        """Checks that need no network. Raises ValidationError naming the first bad field."""
        values = {name: _clean(form.get(name)) for name, _ in REQUIRED_FIELDS}
        for name, message in REQUIRED_FIELDS:
            if not values[name]:
                raise ValidationError(message, field=name)

        start, end = to_date(values['startDate']), to_date(values['endDate'])
        if start is None:
            raise ValidationError("Start date is not a valid date.", field='startDate')
        if end is None:
            raise ValidationError("End date is not a valid date.", field='endDate')
        if start > end:
            raise ValidationError("Start date is after end date.", field='endDate')

        slug_input = _clean(form.get('slug'))
        if slug_input:
            slug = normalize_slug(slug_input)
        else:
            slug = derive_slug(values['title'], values['startLocation'], values['destination'], values['startDate'])
        if not slug:
            raise ValidationError(
                "Could not generate a slug from the trip details. Try a different title or provide a slug.",
                field='slug',
            )

        trip_data = dict(values)
        trip_data['notes'] = _clean(form.get('notes')) or None
        trip_data['visibility'] = form.get('visibility') or 'private'
        if form.get('allowedUsers'):
            trip_data['allowedUsers'] = list(form['allowedUsers'])
        return PreparedTrip(slug, trip_data)

    def preview_conflicts(self, form):
        """Advisory: trips in the live snapshot that collide with the form's dates ([] while dates are incomplete)."""
        start, end = _clean(form.get('startDate')), _clean(form.get('endDate'))
        if not start or not end or self.live_trips is None:
            return []
        return find_conflicts(start, end, self.live_trips.snapshot(), owner_id=self.owner_id)

    def submit(self, form):
        """
        Validates `form` against fresh data and creates the trip.

        Returns {"id", "slug"}. Raises ValidationError, SlugTakenError,
        DateConflictError, CannotValidateError, UnauthenticatedError when
        signed out, or another TripError from the create call.
        """
        prepared = self.validate(form)

        # an unknown advisory result never blocks, the transaction decides
        if self.availability is not None and self.availability.result_for(prepared.slug) is False:
            raise SlugTakenError("That slug is already taken. Please choose a different slug.", slug=prepared.slug)

        try:
            existing = self.fetch_owner_trips()
        except (CannotValidateError, UnauthenticatedError):
            raise
        except Exception as e:
            logger.error(f"Could not fetch trips for conflict check: {e}")
            raise CannotValidateError("Could not check your existing trips. Please retry.") from e

        conflicts = find_conflicts(
            prepared.trip_data['startDate'], prepared.trip_data['endDate'], existing, owner_id=self.owner_id,
        )
        if conflicts:
            raise DateConflictError(conflicts)

        return self.api.create_trip(prepared.slug, prepared.trip_data)

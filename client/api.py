# client/api.py
import logging

import requests

from config import API_TIMEOUT_SECONDS, TRIPS_API_BASE
from errors import (
    CannotValidateError, InternalError, InvalidArgumentError,
    ServiceUnavailableError, SlugTakenError, UnauthenticatedError,
)

logger = logging.getLogger(__name__)


class TripApiClient:
    """
    Thin client for the trip REST endpoints.

    `id_token_provider` is a callable returning the signed-in user's Firebase
    ID token (or None when signed out). Every request carries `timeout`.
    """

    def __init__(self, api_base=TRIPS_API_BASE, id_token_provider=None, timeout=API_TIMEOUT_SECONDS, session=None):
        if not api_base:
            raise ValueError("TripApiClient requires api_base")
        self.api_base = api_base.rstrip('/')
        self.id_token_provider = id_token_provider
        self.timeout = timeout
        self.session = session or requests.Session()

    def _url(self, path):
        return f"{self.api_base}{path}"

    def _auth_headers(self):
        token = self.id_token_provider() if self.id_token_provider else None
        if not token:
            raise UnauthenticatedError("Not authenticated")
        return {"Authorization": f"Bearer {token}"}

    def check_slug_availability(self, slug):
        """
        Advisory lookup. Returns {"available": True|False}, or
        {"available": None} when the answer is unknown (network error,
        timeout, non-2xx response).
        """
        if not slug or not isinstance(slug, str):
            return {"available": False}
        try:
            res = self.session.post(self._url('/check-slug'), json={"slug": slug}, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning(f"checkSlugAvailability error for '{slug}': {e}")
            return {"available": None}

        if not res.ok:
            logger.warning(f"checkSlugAvailability non-ok {res.status_code} for '{slug}'")
            return {"available": None}
        try:
            body = res.json() or {}
        except ValueError:
            return {"available": None}
        return {"available": bool(body.get("available"))}

    def create_trip(self, slug, trip_data):
        """POST /create-trip. Returns {"id", "slug"}; raises a TripError subclass on failure."""
        if not slug or not trip_data:
            raise InvalidArgumentError("slug and tripData required")
        headers = self._auth_headers()

        try:
            res = self.session.post(
                self._url('/create-trip'),
                json={"slug": slug, "tripData": trip_data},
                headers=headers,
                timeout=self.timeout,
            )
        except requests.Timeout as e:
            raise ServiceUnavailableError("Creating the trip timed out. Please retry.") from e
        except requests.RequestException as e:
            raise ServiceUnavailableError("Could not reach the server. Please retry.") from e

        try:
            body = res.json() if res.text else None
        except ValueError:
            raise InternalError(f"Invalid JSON from server: {res.text}")
        body = body or {}

        if res.ok:
            return body

        error = body.get("error")
        if res.status_code == 409 or error == "already-exists":
            raise SlugTakenError(slug=slug)
        message = body.get("message") or error or f"HTTP {res.status_code}"
        if res.status_code == 401:
            raise UnauthenticatedError(message)
        if res.status_code == 400:
            raise InvalidArgumentError(message)
        logger.error(f"createTrip failed with {res.status_code}: {message}")
        raise InternalError(message)

    def list_my_trips(self):
        """Fresh list of the signed-in user's trips. Raises CannotValidateError if it cannot be read."""
        headers = self._auth_headers()
        try:
            res = self.session.get(self._url('/my-trips'), headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            raise CannotValidateError("Could not load your trips to check for date conflicts. Please retry.") from e

        if not res.ok:
            raise CannotValidateError(f"Could not load your trips (HTTP {res.status_code}). Please retry.")
        try:
            return (res.json() or {}).get("trips", [])
        except ValueError as e:
            raise CannotValidateError("Invalid trip list from server. Please retry.") from e

# errors.py
"""
Typed failures shared by the trip service, the routes and the client facade.

Every error carries a stable machine-readable `code` (what clients branch on)
and the HTTP status it maps to when it crosses the REST boundary.
"""


class TripError(Exception):
    code = "internal"
    status = 500

    def __init__(self, message=None, **details):
        super().__init__(message or self.code)
        self.message = message or self.code
        self.details = details

    def to_dict(self):
        body = {"error": self.code, "message": self.message}
        body.update(self.details)
        return body


class ValidationError(TripError):
    """Client-detectable input problem. `field` names the offending form field."""
    code = "invalid-argument"
    status = 400

    def __init__(self, message, field=None):
        super().__init__(message)
        self.field = field


class InvalidArgumentError(TripError):
    code = "invalid-argument"
    status = 400


class UnauthenticatedError(TripError):
    code = "unauthenticated"
    status = 401


class PermissionDeniedError(TripError):
    code = "permission-denied"
    status = 403


class NotFoundError(TripError):
    code = "not-found"
    status = 404


class SlugTakenError(TripError):
    code = "already-exists"
    status = 409

    def __init__(self, message="Slug already taken", slug=None):
        super().__init__(message)
        self.slug = slug


class DateConflictError(TripError):
    code = "date-conflict"
    status = 409

    def __init__(self, conflicts, message=None):
        titles = [(t.get("title") or t.get("id") or "Untitled trip") for t in conflicts]
        super().__init__(message or "Dates overlap with: " + ", ".join(titles))
        self.conflicts = conflicts
        self.titles = titles

    def to_dict(self):
        return {
            "error": self.code,
            "message": self.message,
            "conflicts": [{"id": t.get("id"), "title": t.get("title")} for t in self.conflicts],
        }


class ServiceUnavailableError(TripError):
    """A backing service could not be reached or did not answer in time. Retry later."""
    code = "unavailable"
    status = 503


class CannotValidateError(ServiceUnavailableError):
    """The data needed for an authoritative check could not be read. Retry later."""


class InternalError(TripError):
    code = "internal"
    status = 500

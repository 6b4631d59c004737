# src/crimebook_service/errors.py

"""
Errors raised by the crime book and the routes around it.

Each request-time error carries the HTTP status and message the API
answers with, so the routes can turn any of them into a JSON response.
"""


class CrimeBookError(Exception):
    """Base class for every crime book error."""

    status_code = 500
    message = "internal error"

    def __init__(self, message=None):
        super().__init__(message or self.message)
        if message:
            self.message = message


class InvalidIdentifier(CrimeBookError):
    """The entry id in the URL path is not a number."""

    status_code = 400
    message = "invalid entry id"


class EntryNotFound(CrimeBookError):
    """The entry id is out of range, or the entry was deleted."""

    status_code = 404
    message = "entry not found"


class MalformedPayload(CrimeBookError):
    """The body of a create request is not a valid crime data entry."""

    status_code = 400
    message = "invalid JSON data"


class UnsupportedQuery(CrimeBookError):
    """The filter query uses more than one parameter, or a field that cannot be filtered."""

    status_code = 500
    message = "unsupported query"


class SerializationFailure(CrimeBookError):
    """A response could not be encoded as JSON."""

    status_code = 500
    message = "internal error"


class MalformedSource(CrimeBookError):
    """The bootstrap CSV cannot be loaded. Only raised at startup."""

    message = "malformed crime data source"

# app/core/errors.py
"""
Domain errors raised by the services layer.

Routers let these propagate; app.main maps each class to an HTTP status.
"""


class DomainError(Exception):
    status_code = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ValidationError(DomainError):
    """Malformed or insufficient input (e.g. too few evidence photos)."""
    status_code = 400


class PermissionDenied(DomainError):
    """A capability gate failed."""
    status_code = 403


class NotFoundError(DomainError):
    status_code = 404


class ConflictError(DomainError):
    """Reservation race, duplicate row, or a transition from the wrong state."""
    status_code = 409


class StoreError(DomainError):
    """The database or object storage is unavailable."""
    status_code = 503

    def __init__(self, detail: str, code: str = "store_unavailable"):
        super().__init__(detail)
        self.code = code

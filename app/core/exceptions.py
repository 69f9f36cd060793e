"""
Domain errors raised by the service layer.

Routers let these propagate; ``app.main`` maps each class to an HTTP status
through a single exception handler, so services never import FastAPI.
"""


class PortalError(Exception):
    """Base class for all portal domain errors."""

    status_code = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFoundError(PortalError):
    """A user, criteria set or rating does not exist."""

    status_code = 404


class ConflictError(PortalError):
    """The write collides with existing data."""

    status_code = 409


class AlreadyRatedError(ConflictError):
    """The rater already rated this ratee for the month."""

    def __init__(self, given_by: str, given_to: str, month: str):
        super().__init__("already rated")
        self.given_by = given_by
        self.given_to = given_to
        self.month = month


class PermissionDeniedError(PortalError):
    status_code = 403


class CriteriaNotConfiguredError(PortalError):
    """No criteria set exists for the rater's role."""

    status_code = 400

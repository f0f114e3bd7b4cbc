# This project was developed with assistance from AI tools.
"""Service-level error taxonomy.

Services raise these; ``main.py`` maps every subclass to an RFC 7807
response using ``status_code``. ``detail`` is what the client sees.
"""


class PortalError(Exception):
    """Base class for errors that map to a client-visible HTTP status."""

    status_code: int = 500
    default_detail: str = "An unexpected error occurred."

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class InvalidArgument(PortalError):
    status_code = 400
    default_detail = "Invalid request."


class Unauthenticated(PortalError):
    status_code = 401
    default_detail = "Authentication required."


class NotAuthorized(PortalError):
    """Caller is authenticated but the resource belongs to someone else."""

    status_code = 401
    default_detail = "Not authorized to access this resource."


class NotFound(PortalError):
    status_code = 404
    default_detail = "Resource not found."


class Conflict(PortalError):
    status_code = 409
    default_detail = "Resource already exists."


class UpstreamUnavailable(PortalError):
    """A third-party dependency (gateway, push service, SMTP) failed."""

    status_code = 500
    default_detail = "An upstream service is unavailable."


class Internal(PortalError):
    status_code = 500

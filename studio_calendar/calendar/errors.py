"""Calendar data-boundary error types.

Errors raised while loading sessions for a studio. The calendar engine
itself does not raise for data problems; invalid rows are rejected at
ingestion instead.

Error kinds:
- AUTHENTICATION_REQUIRED: No authenticated user on the request
- NO_STUDIO: No studio selected for the session
- NOT_A_MEMBER: User is not a member of the selected studio
- VALIDATION_ERROR: Malformed request parameter (e.g. a date not in YYYY-MM-DD)
- DATABASE_ERROR: The session query failed
"""

from enum import StrEnum


class ErrorKind(StrEnum):
    AUTHENTICATION_REQUIRED = "AUTHENTICATION_REQUIRED"
    NO_STUDIO = "NO_STUDIO"
    NOT_A_MEMBER = "NOT_A_MEMBER"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"


HTTP_STATUS_BY_KIND = {
    ErrorKind.AUTHENTICATION_REQUIRED: 401,
    ErrorKind.NO_STUDIO: 400,
    ErrorKind.NOT_A_MEMBER: 403,
    ErrorKind.VALIDATION_ERROR: 422,
    ErrorKind.DATABASE_ERROR: 500,
}


class CalendarError(RuntimeError):
    """Raised when calendar data cannot be loaded for a request.

    Attributes:
        kind: Error kind (see ErrorKind)
        message: User-facing message
    """

    def __init__(self, kind: ErrorKind, message: str):
        self.kind = kind
        self.message = message
        super().__init__(f"{kind}: {message}")

    @property
    def status_code(self) -> int:
        return HTTP_STATUS_BY_KIND[self.kind]

    def to_dict(self) -> dict[str, str]:
        return {"error": str(self.kind), "message": self.message}

"""Error types raised by the link service.

Every ``LinkServiceError`` is an expected, operational failure. It carries the
HTTP status code the web layer maps it to, so callers outside HTTP can still
tell a missing link from an expired one.
"""


class LinkServiceError(ValueError):
    """Base class for operational errors surfaced to callers."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidUrlError(LinkServiceError):
    """The URL is empty, malformed or not http(s)."""


class InvalidCodeError(LinkServiceError):
    """A custom short code does not match the allowed pattern."""


class InvalidDateError(LinkServiceError):
    """The expiry timestamp could not be parsed."""


class PastExpiryError(InvalidDateError):
    """The expiry timestamp is not in the future."""


class CodeTakenError(LinkServiceError):
    """A custom short code is already in use."""

    status_code = 409


class CodeConflictError(LinkServiceError):
    """A generated short code collided twice during creation."""

    status_code = 409


class NotFoundError(LinkServiceError):
    """No link exists for the code (or it belongs to another owner)."""

    status_code = 404


class ExpiredError(LinkServiceError):
    """The link exists but is past its expiry time."""

    status_code = 410


class DuplicateKeyError(Exception):
    """Raised by a store when ``create`` hits an existing code."""

    def __init__(self, code: str):
        super().__init__(f"Short code '{code}' already exists")
        self.code = code

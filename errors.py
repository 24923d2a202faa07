"""Domain-level exceptions.

Services raise these; the HTTP layer in ``main`` maps each one to a status
code and a ``{success: false, error}`` body.
"""


class DomainError(Exception):
    """Base class for all domain errors."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFound(DomainError):
    """A requested entity does not exist."""

    status_code = 404


class InvalidArgument(DomainError):
    """Input violates a business rule (missing field, duplicate code, bad quantity)."""

    status_code = 400


class Internal(DomainError):
    """Storage or transport failure."""

    status_code = 500

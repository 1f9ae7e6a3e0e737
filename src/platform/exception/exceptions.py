class CustomBaseError(Exception):
    """Base class for all custom exceptions - controls logging behavior in @Logger.io"""

    def __init__(self, message: str, status_code: int = 500) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class DomainError(CustomBaseError):
    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message, status_code)


class ValidationError(DomainError):
    """Missing or malformed seat identity fields (user-correctable)."""

    def __init__(self, message: str) -> None:
        super().__init__(message, 400)


class StorageError(CustomBaseError):
    """Seat record store failure. Not retried by the endpoint."""

    def __init__(self, message: str) -> None:
        super().__init__(message, 500)


class TransportError(CustomBaseError):
    """Event stream or HTTP transport lost (client side)."""

    def __init__(self, message: str) -> None:
        super().__init__(message, 503)


class MalformedEventError(CustomBaseError):
    """Undecodable event stream frame."""

    def __init__(self, message: str) -> None:
        super().__init__(message, 422)

"""
DataAPI Errors - Exception hierarchy raised by the builder, codec and client
"""


class DataApiError(Exception):
    """Base class for all errors raised by this package."""


class InvalidArgumentError(DataApiError, ValueError):
    """Raised when a builder constructor receives an argument it cannot accept."""

    @classmethod
    def invalid_type(cls, owner: str, param: str, expected, value) -> "InvalidArgumentError":
        return cls(
            f"Expected argument '{param}' of {owner} to be {' or '.join(expected)}, "
            f"got {type(value).__name__}: {value!r}"
        )

    @classmethod
    def too_few(cls, owner: str, param: str, minimum: int, count: int) -> "InvalidArgumentError":
        return cls(
            f"Expected at least {minimum} values for '{param}' of {owner}, got {count}"
        )

    @classmethod
    def not_a_list(cls, owner: str, param: str, value) -> "InvalidArgumentError":
        return cls(
            f"Expected argument '{param}' of {owner} to be a list, "
            f"got {type(value).__name__}: {value!r}"
        )


class UnsupportedValueError(DataApiError, ValueError):
    """Raised when the codec is asked to handle a value it does not support."""

    @classmethod
    def invalid_encodable_value(cls, value) -> "UnsupportedValueError":
        return cls(f"Could not encode value of type {type(value).__name__}: {value!r}")

    @classmethod
    def invalid_decodable_value(cls, value) -> "UnsupportedValueError":
        return cls(f"Could not decode value of type {type(value).__name__}: {value!r}")


class ApiError(DataApiError, ValueError):
    """Raised when the server answers a request with an error payload."""

    def __init__(self, message: str, status_code=None, error_code=None):
        self.status_code = status_code
        self.error_code = error_code
        super().__init__(message)


class TransportError(DataApiError, RuntimeError):
    """Raised when an HTTP request could not be completed."""

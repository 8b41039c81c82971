"""
Client-facing errors raised by the route handlers.

Anything that is not a BookingError is treated as an unexpected backend
failure and answered with a generic 500.
"""


class BookingError(Exception):
    """Base class for errors that are reported back to the client verbatim."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BadRequestError(BookingError):
    status_code = 400


class NotFoundError(BookingError):
    status_code = 404

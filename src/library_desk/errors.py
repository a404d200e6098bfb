"""
Error types for Library Desk.

Every failing operation raises a subclass of :class:`LibraryError`. The
``kind`` attribute discriminates the failure so a front end can render a
message without matching on class names:

- ``invalid_argument``: empty required field, negative or too-small quantity
- ``duplicate_id``: identifier already in use (case-insensitive)
- ``not_found``: identifier does not resolve
- ``has_active_loans``: deletion blocked by an unreturned issue record
- ``no_copies_available``: every copy of the book is out on loan
- ``already_returned``: the issue record was closed earlier
- ``io_error``: the save file could not be written
- ``corrupt_data``: the save file exists but cannot be read back
"""

import enum


class ErrorKind(str, enum.Enum):
    """Discriminator for library failures."""

    INVALID_ARGUMENT = "invalid_argument"
    DUPLICATE_ID = "duplicate_id"
    NOT_FOUND = "not_found"
    HAS_ACTIVE_LOANS = "has_active_loans"
    NO_COPIES_AVAILABLE = "no_copies_available"
    ALREADY_RETURNED = "already_returned"
    IO_ERROR = "io_error"
    CORRUPT_DATA = "corrupt_data"


class LibraryError(Exception):
    """Base exception for library operations."""

    kind: ErrorKind

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidArgumentError(LibraryError):
    """Raised when input fails validation."""

    kind = ErrorKind.INVALID_ARGUMENT


class DuplicateError(LibraryError):
    """Raised when attempting to create an entity whose id is taken."""

    kind = ErrorKind.DUPLICATE_ID


class NotFoundError(LibraryError):
    """Raised when an entity is not found."""

    kind = ErrorKind.NOT_FOUND


class HasActiveLoansError(LibraryError):
    """Raised when removing a book or member that still has books out."""

    kind = ErrorKind.HAS_ACTIVE_LOANS


class NoCopiesAvailableError(LibraryError):
    """Raised when issuing a book with no free copies."""

    kind = ErrorKind.NO_COPIES_AVAILABLE


class AlreadyReturnedError(LibraryError):
    """Raised when returning an issue record twice."""

    kind = ErrorKind.ALREADY_RETURNED


class PersistenceError(LibraryError):
    """Raised when saved state cannot be written."""

    kind = ErrorKind.IO_ERROR


class CorruptDataError(LibraryError):
    """Raised (in strict mode) when saved state cannot be read back."""

    kind = ErrorKind.CORRUPT_DATA

"""
Flexbuf exceptions.

This module defines the exception hierarchy for flexbuf:

    FlexbufError (base)
    ├── OutOfRangeError - Index/size request beyond the addressable range
    ├── BufferOverflowError - Writer append beyond the buffer's logical size
    ├── ValidationError - Invalid parameter value
    └── InteropError - Wrapping or exporting foreign memory failed

Usage:
    try:
        view.read(ctypes.c_uint32, 10)
    except flexbuf.OutOfRangeError as e:
        print(f"Read past the end: {e.details}")
    except flexbuf.FlexbufError as e:
        # Catch any flexbuf error with structured details
        print(f"Error {e.code}: {e}")

Allocation failure is not part of this hierarchy: ``MemoryError`` from the
interpreter propagates untouched.

See Also
--------
    FlexbufError : Base exception for all flexbuf errors.
"""

from typing import Any

__all__ = [
    # Base
    "FlexbufError",
    # Range
    "OutOfRangeError",
    "BufferOverflowError",
    # Validation
    "ValidationError",
    # Interop
    "InteropError",
]


class FlexbufError(Exception):
    """
    Base exception for all flexbuf errors.

    All flexbuf-specific exceptions inherit from this class, enabling:
    - Catch-all handling: ``except flexbuf.FlexbufError``
    - Stable string-based error codes for programmatic handling
    - Structured details for debugging and logging

    Attributes
    ----------
    message : str
        Human-readable error description.
    code : str
        Stable, string-based error code (e.g., "OUT_OF_RANGE").
        Use this for programmatic error handling.
    details : dict[str, Any]
        Structured context (e.g., {"index": 6, "size": 7, "limit": 12}).
    original_code : int | None
        Stable numeric code, handy for metrics and log filtering.

    Example
    -------
    >>> try:
    ...     Buffer.allocate(4).byte_at(4)
    ... except flexbuf.FlexbufError as e:
    ...     print(f"Error code: {e.code}")
    ...     print(f"Details: {e.details}")
    Error code: OUT_OF_RANGE
    Details: {'index': 4, 'size': 1, 'limit': 4}
    """

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: dict[str, Any] | None = None,
        original_code: int | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.details = details or {}
        self.original_code = original_code

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.args[0]!r}, code={self.code!r})"


# =============================================================================
# Range Errors
# =============================================================================


class OutOfRangeError(FlexbufError, IndexError):
    """
    Index/size request exceeds the addressable range of a view or buffer.

    The range is computed against both the view's own length and the
    physical capacity of the memory block behind it, so a view whose
    block shrank after the view was taken fails here instead of reading
    stale or foreign bytes.

    Inherits from IndexError, so ``except IndexError`` also works.
    """

    def __init__(
        self,
        message: str = "array index out of bounds",
        code: str = "OUT_OF_RANGE",
        details: dict[str, Any] | None = None,
        original_code: int | None = None,
    ):
        super().__init__(message, code, details, original_code or 100)


class BufferOverflowError(FlexbufError, OverflowError):
    """
    A BufferWriter append would exceed the buffer's current logical size.

    Writers never grow the buffer they write into; growing is the
    FlexBuffer's job. Reserve space first (``FlexBuffer.reserve``) or
    append to the FlexBuffer directly.

    Inherits from OverflowError, so ``except OverflowError`` also works.
    """

    def __init__(
        self,
        message: str = "array index out of bounds",
        code: str = "BUFFER_OVERFLOW",
        details: dict[str, Any] | None = None,
        original_code: int | None = None,
    ):
        super().__init__(message, code, details, original_code or 101)


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(FlexbufError, ValueError):
    """
    Invalid parameter value.

    Raised when a function receives an argument it cannot use, e.g. a
    negative capacity, a stepped slice, or a value that is not a
    fixed-layout ctypes type.

    This exception inherits from both FlexbufError and ValueError, so both work::

        except flexbuf.FlexbufError:   # catches all flexbuf errors
        except ValueError:             # catches validation errors (Pythonic)

    Example:
        >>> FlexBuffer(initial_capacity=-1)
        ValidationError: initial_capacity must be >= 0, got -1
    """

    def __init__(
        self,
        message: str,
        code: str = "INVALID_ARGUMENT",
        details: dict[str, Any] | None = None,
        original_code: int | None = None,
    ):
        super().__init__(message, code, details, original_code or 901)


# =============================================================================
# Interop Errors
# =============================================================================


class InteropError(FlexbufError, TypeError):
    """
    Memory interop errors.

    Raised when foreign memory cannot be wrapped or exported:
    - Source does not support the buffer protocol
    - Mutable wrap requested over read-only memory
    - Optional NumPy export requested without NumPy installed
    """

    def __init__(
        self,
        message: str,
        code: str = "INTEROP_ERROR",
        details: dict[str, Any] | None = None,
        original_code: int | None = None,
    ):
        super().__init__(message, code, details, original_code)

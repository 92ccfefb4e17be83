"""
Flexbuf exceptions.

This module defines the exception hierarchy for flexbuf:

    FlexbufError (base)
    ├── OutOfRangeError - Index/size request beyond the addressable range
    ├── BufferOverflowError - Writer append beyond the buffer's logical size
    ├── ValidationError - Invalid parameter value
    └── InteropError - Wrapping or exporting foreign memory failed
"""

from .exceptions import (
    BufferOverflowError,
    FlexbufError,
    InteropError,
    OutOfRangeError,
    ValidationError,
)

# =============================================================================
# Public API - See flexbuf/__init__.py for the top-level re-exports
# =============================================================================
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

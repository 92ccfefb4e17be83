"""
Flexbuf - bounds-checked byte buffers with shared, resizable memory.

Flexbuf provides zero-copy views, owned or wrapped fixed-size buffers, a
growable append buffer, and sequential cursors over raw memory.

Quick Start
-----------

Build a message, slice it, read it back:

    >>> import ctypes
    >>> from flexbuf import FlexBuffer, BufferReader
    >>>
    >>> buf = FlexBuffer()
    >>> buf.append(5, ctype=ctypes.c_uint32).append("hello")
    FlexBuffer(0x0500000068656c6c6f, size=9, capacity=16)
    >>> reader = BufferReader(buf)
    >>> n = reader.next_value(ctypes.c_uint32)
    >>> reader.next(n).decode()
    'hello'


Core Classes
------------

- `BufferView` - Read-only window; copies share memory (O(1))
- `Buffer` - Mutable fixed-size buffer; copies are deep (O(n))
- `FlexBuffer` - Growable Buffer with power-of-two capacity
- `BufferReader` / `BufferWriter` - Sequential cursors over a view/buffer
- `MemoryBlock` - The shared descriptor behind all of the above


Memory Model
------------

Views and buffers share a MemoryBlock, not raw bytes. When a FlexBuffer
reallocates, it swaps the block's allocation in place, so every slice taken
earlier keeps addressing the same logical bytes:

    >>> buf = FlexBuffer()
    >>> head = buf.reserve(2)
    >>> buf.resize(100)          # reallocates
    >>> head[0] = ord("x")
    >>> buf[0] == ord("x")
    True

Typed reads and writes copy raw native bytes of fixed-layout ctypes types
(no byte-order conversion). Text is encoded with ``config.text_encoding``.


Errors
------

- `OutOfRangeError` - index/size beyond a view (also an ``IndexError``)
- `BufferOverflowError` - BufferWriter out of room (also an ``OverflowError``)
- `ValidationError` - invalid argument (also a ``ValueError``)
- `InteropError` - memory cannot be wrapped or exported
"""

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _get_version

from flexbuf._logging import scoped_logger as scoped_logger
from flexbuf._logging import setup_logging as setup_logging
from flexbuf._memory import MemoryBlock, Ownership, ResizeMode
from flexbuf.buffer import Buffer
from flexbuf.config import config
from flexbuf.cursor import BufferReader, BufferWriter
from flexbuf.exceptions import (
    BufferOverflowError,
    FlexbufError,
    InteropError,
    OutOfRangeError,
    ValidationError,
)
from flexbuf.flex import FlexBuffer, capacity_for
from flexbuf.view import BufferView

try:
    __version__ = _get_version("flexbuf")
except PackageNotFoundError:
    __version__ = "0.0.0"

# =============================================================================
# Public API
# =============================================================================
__all__ = [
    # Buffers
    "BufferView",
    "Buffer",
    "FlexBuffer",
    "capacity_for",
    # Cursors
    "BufferReader",
    "BufferWriter",
    # Memory
    "MemoryBlock",
    "Ownership",
    "ResizeMode",
    # Configuration
    "config",
    "setup_logging",
    "scoped_logger",
    # Errors
    "FlexbufError",
    "OutOfRangeError",
    "BufferOverflowError",
    "ValidationError",
    "InteropError",
]

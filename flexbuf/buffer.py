"""
Fixed-size mutable buffers.

A Buffer is a BufferView with mutation rights. It either allocates its own
memory or wraps memory owned elsewhere.

Copy Contract:
- ``copy.copy(buf)``, ``copy.deepcopy(buf)`` and ``buf.copy()`` deep-copy
  into a new exclusive block - O(n)
- ``buf.subspan()`` and slicing share the block - O(1), and observe later
  reallocations of that block
- ``buf.move()`` transfers the block and leaves the source empty
"""

from __future__ import annotations

import ctypes
from typing import Any

from ._memory import MemoryBlock
from ._types import resolve_ctype
from .exceptions import InteropError, ValidationError
from .view import BufferView, raw_bytes

__all__ = ["Buffer"]


def _readonly_error(what: str) -> InteropError:
    return InteropError(
        f"Cannot {what}: memory is read-only. Wrap it with BufferView, "
        f"or copy it with Buffer.copy_of().",
        code="READONLY_SOURCE",
    )


class Buffer(BufferView):
    """
    Bounds-checked, mutable, fixed-size buffer.

    Examples
    --------
    Allocate and write:

        >>> buf = Buffer.allocate(8)
        >>> buf.write(12345, 0, ctype=ctypes.c_uint32)
        >>> buf.write(b"abcd", 4)
        >>> buf.read(ctypes.c_uint32, 0)
        12345

    Wrap caller memory (writes go through to the source):

        >>> src = bytearray(b"abcde")
        >>> buf = Buffer.wrap(src, 1, 3)
        >>> buf[0:3] = b"123"
        >>> src
        bytearray(b'a123e')

    Copies are independent:

        >>> copy = buf.copy()
        >>> copy[0] = ord("x")
        >>> buf.tobytes()
        b'123'
    """

    __slots__ = ()

    # =========================================================================
    # Factories
    # =========================================================================

    @staticmethod
    def allocate(size: int) -> Buffer:
        """Allocate an exclusive buffer of ``size`` bytes (contents unspecified)."""
        return Buffer(MemoryBlock.allocate(size), 0, size)

    @classmethod
    def wrap(cls, source: Any, offset: int = 0, size: int | None = None) -> Buffer:
        """
        Wrap existing writable memory without copying.

        The buffer keeps ``source`` alive; writes go through to it.

        Raises
        ------
            InteropError: If ``source`` is read-only or not a buffer.
        """
        if isinstance(source, str):
            raise _readonly_error("wrap str")
        block = MemoryBlock.wrap(source, offset, size)
        if block.readonly:
            raise _readonly_error(f"wrap {type(source).__name__}")
        return Buffer(block, 0, block.capacity)

    @classmethod
    def wrap_address(cls, address: int, offset: int, size: int) -> Buffer:
        """
        Wrap raw writable memory at ``address + offset``.

        Beware ownership: you must ensure the memory remains valid.
        Consider ``wrap`` with the owning object for safety if possible.
        """
        return Buffer(MemoryBlock.wrap_address(address + offset, size), 0, size)

    @staticmethod
    def copy_of(source: Any, offset: int = 0, size: int | None = None) -> Buffer:
        """
        Allocate a new buffer holding a copy of ``source[offset:offset + size]``.

        Args:
            source: bytes-like object, view/buffer, text, ctypes value or array.
            offset: First byte to copy.
            size: Bytes to copy, or None for the rest of the source.
        """
        window = MemoryBlock.wrap(raw_bytes(source), offset, size)
        result = Buffer.allocate(window.capacity)
        result._block.memory[:] = window.memory
        return result

    # =========================================================================
    # Mutation
    # =========================================================================

    def data(self) -> memoryview:
        """
        Memoryview of this buffer's bytes, writable unless the memory is read-only.

        The memoryview is bound to the current allocation; after a
        FlexBuffer reallocation take a fresh one.
        """
        self._check_bounds(0, self._size)
        return self._block.memory[self._offset : self._offset + self._size]

    def set_byte(self, index: int, value: int) -> None:
        """
        Set the byte at ``index`` (0 <= index < size) to ``value`` (0..255).

        Raises
        ------
            OutOfRangeError: If index is outside the buffer or its block.
            ValidationError: If value is not in range(256).
        """
        self._check_bounds(index, 1)
        if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 0xFF:
            raise ValidationError(
                f"byte value must be an int in range(256), got {value!r}",
                details={"index": index, "value": repr(value)},
            )
        self._writable().memory[self._offset + index] = value

    def __setitem__(self, key: int | slice, value: Any) -> None:
        """
        Set a byte, or overwrite a slice with bytes of the same length.

        Negative indexes count from the end. Slices must have step 1.
        """
        if isinstance(key, slice):
            target = self[key]
            data = raw_bytes(value)
            if len(data) != target.size:
                raise ValidationError(
                    f"Slice assignment needs exactly {target.size} bytes, got {len(data)}",
                    details={"size": target.size, "given": len(data)},
                )
            self.write(data, target.offset - self._offset)
            return
        if key < 0:
            key += self._size
        self.set_byte(key, value)

    def write(self, value: Any, index: int = 0, ctype: type | None = None) -> None:
        """
        Copy the raw bytes of ``value`` into this buffer at ``index``.

        Args:
            value: ctypes value or array, bytes-like object, view/buffer,
                text, or a Python value converted through ``ctype``.
            index: Byte position to write at; need not be aligned.
            ctype: Fixed-layout ctypes type for plain Python values. An
                Array type accepts a sequence of elements.

        Raises
        ------
            OutOfRangeError: If the value does not fit; nothing is written.

        Example:
            >>> buf = Buffer.allocate(8)
            >>> buf.write([12345, 67890], ctype=ctypes.c_uint32 * 2)
            >>> buf.read(ctypes.c_uint32, 4)
            67890
        """
        data = raw_bytes(value, ctype)
        size = len(data)
        self._check_bounds(index, size)
        start = self._offset + index
        self._writable().memory[start : start + size] = data

    def ref(self, ctype: type, index: int = 0) -> Any:
        """
        Get a ``ctype`` object mapped onto this buffer's bytes at ``index``.

        Assigning through the object (``.value = ...`` for scalars, fields
        for Structures) writes into the buffer without a copy. The mapping
        is bound to the current allocation and is not redirected by a
        later FlexBuffer reallocation.

        Example:
            >>> buf = Buffer.allocate(4)
            >>> buf.ref(ctypes.c_uint32).value = 11111
            >>> buf.read(ctypes.c_uint32)
            11111
        """
        ctype = resolve_ctype(ctype)
        self._check_bounds(index, ctypes.sizeof(ctype))
        return ctype.from_buffer(self._writable().memory, self._offset + index)

    def clear(self) -> None:
        """Fill this buffer's bytes with zeros."""
        self._check_bounds(0, self._size)
        start = self._offset
        self._writable().memory[start : start + self._size] = bytes(self._size)

    def _writable(self) -> MemoryBlock:
        if self._block.readonly:
            raise _readonly_error("write")
        return self._block

    # =========================================================================
    # Slicing and copies
    # =========================================================================

    def __getitem__(self, key: int | slice) -> int | Buffer:
        """
        Get a byte, or a zero-copy mutable sub-buffer for a slice.

        Negative indexes count from the end. Slices clamp like Python
        sequences and must have step 1.
        """
        if isinstance(key, slice):
            start, stop, step = key.indices(self._size)
            if step != 1:
                raise ValidationError(
                    f"Buffer slices must be contiguous (step 1), got step {step}",
                    details={"step": step},
                )
            return self.subspan(start, max(0, stop - start))
        return super().__getitem__(key)

    def subspan(self, index: int = 0, size: int | None = None) -> Buffer:
        """
        Get a mutable sub-buffer sharing this buffer's block - O(1).

        The returned buffer may outlive this one and observes later
        reallocations of the shared block.
        """
        size = self._resolve_size(index, size)
        self._check_bounds(index, size)
        return Buffer(self._block, self._offset + index, size)

    def copy(self, index: int = 0, size: int | None = None) -> Buffer:
        """Allocate an independent buffer holding bytes ``[index, index + size)``."""
        size = self._resolve_size(index, size)
        self._check_bounds(index, size)
        result = Buffer.allocate(size)
        start = self._offset + index
        result._block.memory[:] = self._block.memory[start : start + size]
        return result

    def __copy__(self) -> Buffer:
        return self.copy()

    def __deepcopy__(self, memo: dict) -> Buffer:
        return self.copy()

"""
Growable buffers.

A FlexBuffer always allocates its own memory. Its logical ``size`` is
decoupled from the physical ``capacity`` of its MemoryBlock, and capacity
moves in powers of two.

Capacity Policy:
- capacity is the smallest power of two >= ``initial_capacity`` and >= size
- growing doubles up from the current capacity; shrinking never goes below
  ``initial_capacity``
- when the next power of two would exceed the address space, capacity is
  exactly the requested size

Aliasing:
- ``reserve``, ``subspan``, ``subview`` and slices share the MemoryBlock
- a reallocation swaps the block's allocation in place, so everything taken
  from the buffer before the reallocation sees the new contents
"""

from __future__ import annotations

import sys
from typing import Any

from ._logging import scoped_logger
from ._memory import MemoryBlock, ResizeMode, _check_size
from .buffer import Buffer
from .config import config
from .view import raw_bytes

__all__ = ["FlexBuffer", "capacity_for"]

_log = scoped_logger("flex")


def capacity_for(size: int, min_capacity: int) -> int:
    """
    Smallest power of two that is >= ``max(1, min_capacity)`` and >= ``size``.

    Returns ``size`` itself when that power of two would not fit in the
    address space (``sys.maxsize``).

    Example:
        >>> capacity_for(12, 8)
        16
        >>> capacity_for(3, 8)
        8
    """
    target = max(1, min_capacity, size)
    capacity = 1
    while capacity < target:
        capacity <<= 1
        if capacity > sys.maxsize:
            return size
    return capacity


class FlexBuffer(Buffer):
    """
    Buffer that grows and shrinks by powers of two as data is appended.

    Pass-by-value semantics deep copy the data (``copy.copy``), keeping the
    initial and current capacity. Everything ``Buffer`` offers works on the
    logical size.

    Examples
    --------
    Append and inspect capacity:

        >>> buf = FlexBuffer(8)
        >>> buf.append("hello world!")
        FlexBuffer(0x68656c6c6f20776f726c6421, size=12, capacity=16)
        >>> buf.size, buf.capacity, buf.initial_capacity
        (12, 16, 8)

    Append typed values:

        >>> _ = buf.append(123456789, ctype=ctypes.c_uint32)
        >>> buf.read(ctypes.c_uint32, 12)
        123456789

    Reserve writable space, keep it across reallocations:

        >>> head = buf.reserve(2)
        >>> buf.resize(100)
        >>> head[0:2] = b"ok"   # still addresses bytes 16..17 of buf
    """

    __slots__ = ("_initial_capacity",)

    def __init__(self, initial_capacity: int | None = None) -> None:
        """
        Create an empty FlexBuffer.

        Args:
            initial_capacity: Capacity floor. The buffer pre-allocates the
                smallest power of two >= this value and never shrinks below
                it. Defaults to ``config.default_initial_capacity``.
        """
        if initial_capacity is None:
            initial_capacity = config.default_initial_capacity
        _check_size("initial_capacity", initial_capacity)
        super().__init__(MemoryBlock.allocate(capacity_for(0, initial_capacity)), 0, 0)
        self._initial_capacity = initial_capacity

    @classmethod
    def _with_capacity(cls, initial_capacity: int, capacity: int) -> FlexBuffer:
        result = object.__new__(cls)
        result._block = MemoryBlock.allocate(capacity)
        result._offset = 0
        result._size = 0
        result._initial_capacity = initial_capacity
        return result

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def initial_capacity(self) -> int:
        """Capacity floor; the allocation never shrinks below it."""
        return self._initial_capacity

    @property
    def capacity(self) -> int:
        """Bytes allocated; the size reachable without a reallocation."""
        return self._block.capacity

    # =========================================================================
    # Sizing
    # =========================================================================

    def resize(self, size: int, mode: ResizeMode = ResizeMode.KEEP_DATA) -> None:
        """
        Set the logical size, reallocating by powers of two when needed.

        Args:
            size: New logical size.
            mode: ``KEEP_DATA`` (default) carries bytes ``[0, min(old, new))``
                over a reallocation; ``IGNORE_DATA`` skips the copy.
        """
        _check_size("size", size)
        if size > self._size:
            new_capacity = capacity_for(size, self._block.capacity)
        else:
            new_capacity = capacity_for(size, self._initial_capacity)
        if new_capacity != self._block.capacity:
            _log.debug(
                "Resizing flex buffer",
                extra={"size": size, "old_capacity": self._block.capacity, "new_capacity": new_capacity},
            )
            self._block.resize(mode, new_capacity)
        self._size = size

    def reserve(self, size: int) -> Buffer:
        """
        Grow the logical size by ``size`` and return a Buffer over the new bytes.

        The returned Buffer shares this FlexBuffer's block, so it stays
        valid and correctly placed across later reallocations.
        """
        _check_size("size", size)
        offset = self._size
        self.resize(self._size + size)
        return Buffer(self._block, offset, size)

    def append(self, value: Any, ctype: type | None = None) -> FlexBuffer:
        """
        Append raw bytes, text, a view/buffer or a typed value; returns self.

        Args:
            value: Anything ``Buffer.write`` accepts.
            ctype: Fixed-layout ctypes type for plain Python values.

        Example:
            >>> buf = FlexBuffer()
            >>> buf.append("hello").append(" world!").decode()
            'hello world!'
        """
        data = raw_bytes(value, ctype)
        self.reserve(len(data)).write(data)
        return self

    def __iadd__(self, value: Any) -> FlexBuffer:
        return self.append(value)

    def clear_all(self) -> None:
        """Fill the whole allocation with zeros, beyond the logical size too."""
        self._block.fill(0)

    # =========================================================================
    # Copies / move
    # =========================================================================

    def flex_copy(self, index: int = 0, size: int | None = None) -> FlexBuffer:
        """
        Allocate an independent FlexBuffer holding bytes ``[index, index + size)``.

        The copy keeps this buffer's ``initial_capacity``; its capacity
        follows the same power-of-two policy.
        """
        window = self.subview(index, size)
        result = FlexBuffer._with_capacity(
            self._initial_capacity, capacity_for(window.size, self._initial_capacity)
        )
        return result.append(window)

    def __copy__(self) -> FlexBuffer:
        result = FlexBuffer._with_capacity(self._initial_capacity, self._block.capacity)
        result._block.memory[: self._size] = self.data()
        result._size = self._size
        return result

    def __deepcopy__(self, memo: dict) -> FlexBuffer:
        return self.__copy__()

    def move(self) -> FlexBuffer:
        """
        Transfer this buffer's block into a new FlexBuffer.

        This buffer is left empty with a fresh allocation of its initial
        capacity, ready for reuse.
        """
        moved = object.__new__(FlexBuffer)
        moved._block, moved._offset, moved._size = self._block, self._offset, self._size
        moved._initial_capacity = self._initial_capacity
        self._block = MemoryBlock.allocate(capacity_for(0, self._initial_capacity))
        self._offset = 0
        self._size = 0
        return moved

    def __repr__(self) -> str:
        base = super().__repr__()
        return f"{base[:-1]}, capacity={self._block.capacity})"

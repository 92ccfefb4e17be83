"""
Memory blocks - the shared, resizable descriptor behind every buffer.

A MemoryBlock owns (or borrows) one contiguous byte allocation. Views and
buffers hold the MemoryBlock itself, never the bytes, so reallocating the
block through any holder is observed by every holder.

Ownership Contract:
- EXCLUSIVE: the block allocated its own ``bytearray`` and frees it when the
  last holder drops the block
- SHARED: the block borrows a buffer-protocol object through a
  ``memoryview``, which keeps the source alive (lifetime safe)
- FOREIGN: the block borrows raw memory by address through ctypes; the
  caller must keep that memory valid for as long as the block is used

Reallocation:
- ``resize`` always allocates a fresh exclusive block, whatever the block
  started as, optionally copies ``min(old, new)`` bytes, then swaps it in
- The previous allocation is dropped, not released: memoryviews already
  handed out keep the old bytes alive but no longer track the block
"""

from __future__ import annotations

import ctypes
import enum
from typing import Any

from ._logging import scoped_logger
from .exceptions import InteropError, ValidationError

__all__ = ["MemoryBlock", "Ownership", "ResizeMode"]

_log = scoped_logger("memory")


class Ownership(enum.Enum):
    """Who is responsible for the memory behind a MemoryBlock."""

    EXCLUSIVE = "exclusive"
    SHARED = "shared"
    FOREIGN = "foreign"


class ResizeMode(enum.Enum):
    """Whether a reallocation carries the old contents over."""

    KEEP_DATA = "keep_data"
    IGNORE_DATA = "ignore_data"


def _check_size(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(
            f"{name} must be int, got {type(value).__name__}",
            details={"param": name, "type": type(value).__name__},
        )
    if value < 0:
        raise ValidationError(
            f"{name} must be >= 0, got {value}",
            details={"param": name, "value": value},
        )
    return value


def _byte_view(source: Any) -> memoryview:
    """Flat unsigned-byte memoryview over any buffer-protocol object."""
    try:
        view = memoryview(source)
    except TypeError as e:
        raise InteropError(
            f"Cannot wrap {type(source).__name__}: object does not support the buffer protocol",
            code="UNSUPPORTED_SOURCE",
            details={"type": type(source).__name__},
        ) from e
    if view.format == "B" and view.ndim == 1:
        return view
    try:
        return view.cast("B")
    except TypeError as e:
        raise InteropError(
            f"Cannot wrap {type(source).__name__}: memory is not C-contiguous",
            code="NON_CONTIGUOUS_SOURCE",
            details={"type": type(source).__name__},
        ) from e


class MemoryBlock:
    """
    One contiguous allocation, shared by reference between views and buffers.

    Users rarely touch a MemoryBlock directly; it is what ``BufferView``,
    ``Buffer`` and ``FlexBuffer`` share. Create one with ``allocate``,
    ``wrap`` or ``wrap_address``.

    Attributes
    ----------
    capacity : int
        Bytes in the current allocation.
    ownership : Ownership
        EXCLUSIVE, SHARED or FOREIGN (see module docstring).
    readonly : bool
        True when the borrowed memory cannot be written.
    generation : int
        Number of reallocations this block went through.
    """

    __slots__ = ("_memory", "_capacity", "_ownership", "_generation", "__weakref__")

    def __init__(self, memory: memoryview, ownership: Ownership) -> None:
        """
        Initialize from a flat byte memoryview.

        This is an internal constructor. Use ``allocate``, ``wrap`` or
        ``wrap_address`` instead.
        """
        self._memory = memory
        self._capacity = len(memory)
        self._ownership = ownership
        self._generation = 0

    @classmethod
    def allocate(cls, capacity: int) -> MemoryBlock:
        """Allocate an exclusive block of ``capacity`` bytes."""
        _check_size("capacity", capacity)
        return cls(memoryview(bytearray(capacity)), Ownership.EXCLUSIVE)

    @classmethod
    def empty(cls) -> MemoryBlock:
        """Zero-capacity exclusive block, the state of default and moved-from buffers."""
        return cls.allocate(0)

    @classmethod
    def wrap(cls, source: Any, offset: int = 0, size: int | None = None) -> MemoryBlock:
        """
        Borrow ``size`` bytes of ``source`` starting at byte ``offset``.

        Args:
            source: Any object exposing the buffer protocol. Element arrays
                are reinterpreted as their raw bytes.
            offset: First byte of the window.
            size: Bytes in the window, or None for the rest of the source.

        Raises
        ------
            InteropError: If source does not expose contiguous memory.
            ValidationError: If the window lies outside the source.
        """
        memory = _byte_view(source)
        _check_size("offset", offset)
        if size is None:
            size = max(0, len(memory) - offset)
        _check_size("size", size)
        if offset + size > len(memory):
            raise ValidationError(
                f"Wrap window [{offset}, {offset + size}) exceeds source of {len(memory)} bytes",
                details={"offset": offset, "size": size, "limit": len(memory)},
            )
        return cls(memory[offset : offset + size], Ownership.SHARED)

    @classmethod
    def wrap_address(cls, address: int, size: int) -> MemoryBlock:
        """
        Borrow ``size`` bytes of raw memory at ``address``.

        Beware ownership: nothing keeps that memory alive. Prefer ``wrap``
        with the owning object whenever one is available.
        """
        _check_size("size", size)
        if isinstance(address, bool) or not isinstance(address, int) or address <= 0:
            raise ValidationError(
                f"address must be a positive int, got {address!r}",
                details={"param": "address"},
            )
        raw = (ctypes.c_char * size).from_address(address)
        _log.debug("Wrapped foreign memory", extra={"capacity": size})
        return cls(_byte_view(raw), Ownership.FOREIGN)

    @property
    def capacity(self) -> int:
        """Bytes in the current allocation."""
        return self._capacity

    @property
    def ownership(self) -> Ownership:
        """Ownership mode of the current allocation."""
        return self._ownership

    @property
    def readonly(self) -> bool:
        """True when the current allocation cannot be written."""
        return self._memory.readonly

    @property
    def generation(self) -> int:
        """Number of reallocations so far."""
        return self._generation

    @property
    def memory(self) -> memoryview:
        """Flat byte memoryview of the current allocation."""
        return self._memory

    def resize(self, mode: ResizeMode, new_capacity: int) -> None:
        """
        Replace the allocation with a fresh exclusive one of ``new_capacity`` bytes.

        With ``ResizeMode.KEEP_DATA`` the first ``min(capacity, new_capacity)``
        bytes are carried over; with ``ResizeMode.IGNORE_DATA`` the new
        contents are unspecified.
        """
        _check_size("new_capacity", new_capacity)
        fresh = memoryview(bytearray(new_capacity))
        if mode is ResizeMode.KEEP_DATA:
            keep = min(self._capacity, new_capacity)
            fresh[:keep] = self._memory[:keep]
        old_capacity = self._capacity
        self._memory = fresh
        self._capacity = new_capacity
        self._ownership = Ownership.EXCLUSIVE
        self._generation += 1
        _log.debug(
            "Reallocated memory block",
            extra={
                "old_capacity": old_capacity,
                "new_capacity": new_capacity,
                "mode": mode.value,
                "generation": self._generation,
            },
        )

    def fill(self, value: int = 0) -> None:
        """Set every byte of the current allocation to ``value``."""
        if not 0 <= value <= 0xFF:
            raise ValidationError(
                f"fill value must be in range(256), got {value}",
                details={"param": "value", "value": value},
            )
        self._memory[:] = bytes((value,)) * self._capacity

    def __repr__(self) -> str:
        return (
            f"MemoryBlock(capacity={self._capacity}, ownership={self._ownership.value}, "
            f"generation={self._generation})"
        )

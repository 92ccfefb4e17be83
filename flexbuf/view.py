"""
Read-only buffer views.

A BufferView is an (offset, size) window onto a shared MemoryBlock.

Copy Contract:
- ``copy.copy(view)``, ``view.subview()`` and slicing share the block - O(1)
- A view keeps its block alive; it never dangles when the buffer it was
  taken from goes away
- ``copy.deepcopy(view)`` is the only way to detach a view from its block

Bounds Contract:
- Every access re-checks ``index + size`` against the view's own size AND
  against the block's current capacity minus the view's offset
- A block that shrank below a view's offset makes every access on that
  view fail, zero-length requests included
"""

from __future__ import annotations

import ctypes
from collections.abc import Iterator
from typing import Any, overload

from ._memory import MemoryBlock
from ._types import FIXED_LAYOUT_TYPES, pack, resolve_ctype, to_python
from .config import config
from .exceptions import InteropError, OutOfRangeError, ValidationError

__all__ = ["BufferView"]

# Bytes rendered by repr() before eliding the rest
_REPR_BYTES = 16


def raw_bytes(value: Any, ctype: type | None = None) -> Any:
    """
    Raw bytes of ``value`` for a write or append, without copying when possible.

    Accepts ctypes instances, views and buffers, text (encoded with
    ``config.text_encoding``) and any buffer-protocol object. Plain
    numbers need ``ctype`` to fix their layout.
    """
    if ctype is not None:
        return pack(value, ctype)
    if isinstance(value, FIXED_LAYOUT_TYPES):
        return bytes(value)
    if isinstance(value, BufferView):
        return value.data()
    if isinstance(value, str):
        return value.encode(config.text_encoding)
    if isinstance(value, (bool, int, float)):
        raise ValidationError(
            f"Writing a {type(value).__name__} needs a ctype to fix its layout "
            f"(e.g. ctype=ctypes.c_uint32)",
            code="MISSING_CTYPE",
            details={"type": type(value).__name__},
        )
    try:
        view = memoryview(value)
    except TypeError as e:
        raise InteropError(
            f"Cannot write {type(value).__name__}: object does not support the buffer protocol",
            code="UNSUPPORTED_SOURCE",
            details={"type": type(value).__name__},
        ) from e
    if view.format == "B" and view.ndim == 1:
        return view
    try:
        return view.cast("B")
    except TypeError as e:
        raise InteropError(
            f"Cannot write {type(value).__name__}: memory is not C-contiguous",
            code="NON_CONTIGUOUS_SOURCE",
            details={"type": type(value).__name__},
        ) from e


class BufferView:
    """
    Read-only, bounds-checked window onto shared memory.

    Copies are shallow: every view taken from a view, buffer or FlexBuffer
    points at the same MemoryBlock, so it sees later writes, and after a
    FlexBuffer reallocation it sees the new allocation rather than the old.

    Key Features
    ------------

    **Zero-copy slicing**:

        >>> view = BufferView.wrap(b"hello world!")
        >>> view.subview(6).tobytes()
        b'world!'
        >>> view[0:5].tobytes()
        b'hello'

    **Typed reads** (native byte order, unaligned):

        >>> import ctypes
        >>> BufferView.wrap(bytes([255, 1, 1])).read(ctypes.c_uint16, 1)
        257

    **Hex rendering**:

        >>> BufferView.wrap(bytes([1, 7, 10, 33])).hex()
        '0x01070a21'

    Views define no equality; compare contents with ``tobytes()``.
    """

    __slots__ = ("_block", "_offset", "_size")

    def __init__(self, block: MemoryBlock | None = None, offset: int = 0, size: int = 0) -> None:
        """
        Initialize over a MemoryBlock.

        This is an internal constructor. ``BufferView()`` is an empty view;
        use ``wrap`` / ``wrap_address`` or slice an existing buffer otherwise.
        """
        self._block = block if block is not None else MemoryBlock.empty()
        self._offset = offset
        self._size = size

    # =========================================================================
    # Factories
    # =========================================================================

    @classmethod
    def wrap(cls, source: Any, offset: int = 0, size: int | None = None) -> BufferView:
        """
        Wrap existing memory without copying.

        Args:
            source: Buffer-protocol object (bytes, bytearray, array.array,
                mmap, ctypes array, NumPy array, ...). The view keeps it
                alive. Text is encoded into a private copy, since a
                ``str`` has no byte storage to borrow.
            offset: First byte to wrap.
            size: Bytes to wrap, or None for the rest of the source.
        """
        if isinstance(source, str):
            source = source.encode(config.text_encoding)
        block = MemoryBlock.wrap(source, offset, size)
        return BufferView(block, 0, block.capacity)

    @classmethod
    def wrap_address(cls, address: int, offset: int, size: int) -> BufferView:
        """
        Wrap raw memory at ``address + offset``.

        Beware ownership: you must ensure the memory remains valid.
        Consider ``wrap`` with the owning object for safety if possible.
        """
        block = MemoryBlock.wrap_address(address + offset, size)
        return BufferView(block, 0, size)

    # =========================================================================
    # Bounds
    # =========================================================================

    def _check_bounds(self, index: int, size: int) -> None:
        capacity = self._block.capacity
        end = index + size
        if (
            index < 0
            or size < 0
            or self._offset > capacity
            or end > self._size
            or end > capacity - self._offset
        ):
            raise OutOfRangeError(
                details={
                    "index": index,
                    "size": size,
                    "limit": max(0, min(self._size, capacity - self._offset)),
                }
            )

    def _resolve_size(self, index: int, size: int | None) -> int:
        return self._size - index if size is None else size

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def size(self) -> int:
        """Bytes in this view."""
        return self._size

    @property
    def offset(self) -> int:
        """Position of this view inside its MemoryBlock."""
        return self._offset

    @property
    def block(self) -> MemoryBlock:
        """The shared MemoryBlock behind this view."""
        return self._block

    def __len__(self) -> int:
        return self._size

    # =========================================================================
    # Access
    # =========================================================================

    def byte_at(self, index: int) -> int:
        """
        Get the byte at ``index`` (0 <= index < size).

        Raises
        ------
            OutOfRangeError: If index is outside the view or its block.
        """
        self._check_bounds(index, 1)
        return self._block.memory[self._offset + index]

    @overload
    def __getitem__(self, key: int) -> int: ...

    @overload
    def __getitem__(self, key: slice) -> BufferView: ...

    def __getitem__(self, key: int | slice) -> int | BufferView:
        """
        Get a byte, or a zero-copy sub-view for a slice.

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
            return self.subview(start, max(0, stop - start))
        if key < 0:
            key += self._size
        return self.byte_at(key)

    def __iter__(self) -> Iterator[int]:
        yield from self.data()

    def read(self, ctype: type, index: int = 0) -> Any:
        """
        Copy ``ctypes.sizeof(ctype)`` bytes at ``index`` into a ``ctype`` value.

        Args:
            ctype: Fixed-layout ctypes type (scalar, Structure, Union, Array).
            index: Byte position inside this view; need not be aligned.

        Returns
        -------
            A Python value for ctypes scalars, a detached ctypes instance
            for Structures, Unions and Arrays.

        Example:
            >>> buf = Buffer.allocate(4)
            >>> buf.write(12345, ctype=ctypes.c_uint32)
            >>> buf.read(ctypes.c_uint32)
            12345
        """
        ctype = resolve_ctype(ctype)
        self._check_bounds(index, ctypes.sizeof(ctype))
        return to_python(ctype.from_buffer_copy(self._block.memory, self._offset + index))

    def subview(self, index: int = 0, size: int | None = None) -> BufferView:
        """
        Get a read-only sub-view sharing this view's block - O(1).

        The returned view may outlive this one.

        Args:
            index: First byte of the sub-view.
            size: Bytes in the sub-view, or None for the rest of this view.
        """
        size = self._resolve_size(index, size)
        self._check_bounds(index, size)
        return BufferView(self._block, self._offset + index, size)

    def data(self) -> memoryview:
        """
        Read-only memoryview of this view's bytes (the interop boundary).

        The memoryview is bound to the current allocation; after a
        FlexBuffer reallocation take a fresh one.
        """
        self._check_bounds(0, self._size)
        return self._block.memory[self._offset : self._offset + self._size].toreadonly()

    # =========================================================================
    # Conversions
    # =========================================================================

    def tobytes(self) -> bytes:
        """Copy the contents into ``bytes``."""
        return self.data().tobytes()

    def __bytes__(self) -> bytes:
        return self.tobytes()

    def decode(self, encoding: str | None = None, errors: str = "strict") -> str:
        """Decode the contents as text (``config.text_encoding`` by default)."""
        return self.data().tobytes().decode(encoding or config.text_encoding, errors)

    def hex(self) -> str:
        """Render as ``0x`` followed by two lowercase hex digits per byte."""
        return "0x" + self.data().hex()

    def __str__(self) -> str:
        return self.hex()

    def __repr__(self) -> str:
        name = type(self).__name__
        try:
            data = self.data()
        except OutOfRangeError:
            return f"{name}(<out of range>, size={self._size})"
        if self._size <= _REPR_BYTES:
            return f"{name}(0x{data.hex()}, size={self._size})"
        return f"{name}(0x{data[:_REPR_BYTES].hex()}..., size={self._size})"

    def to_numpy(self, dtype: Any = "uint8") -> Any:
        """
        Zero-copy NumPy array over this view's bytes.

        NumPy is optional; install ``flexbuf[numpy]``. The array is bound
        to the current allocation, like ``data()``.

        Raises
        ------
            InteropError: If NumPy is not installed (code="NUMPY_UNAVAILABLE").
            ValidationError: If the size is not a multiple of the dtype's itemsize.
        """
        try:
            import numpy as np
        except ImportError as e:
            raise InteropError(
                "NumPy export requires numpy. Install flexbuf[numpy].",
                code="NUMPY_UNAVAILABLE",
            ) from e
        try:
            return np.frombuffer(self.data(), dtype=dtype)
        except ValueError as e:
            raise ValidationError(
                f"Cannot view {self._size} bytes as {dtype}: {e}",
                details={"size": self._size, "dtype": str(dtype)},
            ) from e

    def __array__(self, dtype: Any = None, copy: bool | None = None) -> Any:
        """NumPy array protocol, so ``np.asarray(view)`` works."""
        array = self.to_numpy()
        if dtype is not None and array.dtype != dtype:
            return array.astype(dtype)
        if copy:
            return array.copy()
        return array

    # =========================================================================
    # Copy / move
    # =========================================================================

    def __copy__(self) -> BufferView:
        return BufferView(self._block, self._offset, self._size)

    def __deepcopy__(self, memo: dict) -> BufferView:
        block = MemoryBlock.allocate(self._size)
        block.memory[:] = self.data()
        return BufferView(block, 0, self._size)

    def move(self) -> BufferView:
        """
        Transfer this object's memory into a new object of the same type.

        This object is left empty (size 0 over an empty block).
        """
        moved = object.__new__(type(self))
        moved._block, moved._offset, moved._size = self._block, self._offset, self._size
        self._block = MemoryBlock.empty()
        self._offset = 0
        self._size = 0
        return moved

"""
Sequential cursors - BufferReader and BufferWriter.

Cursors track a position over memory they do not own.

- BufferReader snapshots a view (block, offset, size) when created
- BufferWriter holds its Buffer by reference and checks against the
  buffer's logical size at call time; it never grows the buffer
- ``position`` is unchecked; an out-of-range position fails on the next
  access, and a failed access leaves the position where it was
"""

from __future__ import annotations

import ctypes
from typing import Any

from ._types import resolve_ctype
from .buffer import Buffer
from .exceptions import BufferOverflowError, ValidationError
from .view import BufferView, raw_bytes

__all__ = ["BufferReader", "BufferWriter"]


class _Cursor:
    """Position bookkeeping shared by readers and writers."""

    __slots__ = ("_target", "_position")

    def __init__(self, target: BufferView) -> None:
        self._target = target
        self._position = 0

    @property
    def position(self) -> int:
        """Current position; may be set anywhere, checked on the next access."""
        return self._position

    @position.setter
    def position(self, position: int) -> None:
        self._position = position

    @property
    def remaining(self) -> int:
        """Bytes between the position and the end (never negative)."""
        return max(0, self._target.size - self._position)

    def peek_value(self, ctype: type) -> Any:
        """Read a ``ctype`` value at the position without advancing."""
        return self._target.read(ctype, self._position)

    def next_value(self, ctype: type) -> Any:
        """Read a ``ctype`` value at the position and advance past it."""
        ctype = resolve_ctype(ctype)
        value = self._target.read(ctype, self._position)
        self._position += ctypes.sizeof(ctype)
        return value

    def skip(self, size: int) -> None:
        """Advance by ``size`` bytes, failing if they are not there."""
        self.peek(size)
        self._position += size

    def peek(self, size: int) -> BufferView:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}(position={self._position}, remaining={self.remaining})"


class BufferReader(_Cursor):
    """
    Sequential reader over a view.

    Example:
        >>> reader = BufferReader(BufferView.wrap(b"hello world!"))
        >>> reader.next(6).tobytes(), reader.next(6).tobytes()
        (b'hello ', b'world!')
        >>> reader.remaining
        0
    """

    __slots__ = ()

    def __init__(self, view: BufferView) -> None:
        if not isinstance(view, BufferView):
            raise ValidationError(
                f"BufferReader needs a BufferView, got {type(view).__name__}",
                details={"type": type(view).__name__},
            )
        super().__init__(view.subview())

    def peek(self, size: int) -> BufferView:
        """View of the next ``size`` bytes; the position stays put."""
        return self._target.subview(self._position, size)

    def next(self, size: int) -> BufferView:
        """View of the next ``size`` bytes; the position advances past them."""
        result = self._target.subview(self._position, size)
        self._position += size
        return result


class BufferWriter(_Cursor):
    """
    Sequential writer into a Buffer.

    Writes are checked against the buffer's current logical size; running
    out of room raises BufferOverflowError. Grow a FlexBuffer first (e.g.
    with ``reserve``) when more room is needed.

    Example:
        >>> buf = Buffer.allocate(12)
        >>> writer = BufferWriter(buf)
        >>> writer.write("hello").write(" ").write("world!").remaining
        0
        >>> writer.write("!")
        BufferOverflowError: array index out of bounds
    """

    __slots__ = ()

    def __init__(self, buffer: Buffer) -> None:
        if not isinstance(buffer, Buffer):
            raise ValidationError(
                f"BufferWriter needs a Buffer, got {type(buffer).__name__}",
                details={"type": type(buffer).__name__},
            )
        super().__init__(buffer)

    @property
    def buffer(self) -> Buffer:
        """The buffer being written."""
        return self._target

    def peek(self, size: int) -> Buffer:
        """Mutable sub-buffer over the next ``size`` bytes; the position stays put."""
        return self._target.subspan(self._position, size)

    def next(self, size: int) -> Buffer:
        """Mutable sub-buffer over the next ``size`` bytes; the position advances."""
        result = self._target.subspan(self._position, size)
        self._position += size
        return result

    def write(self, value: Any, ctype: type | None = None) -> BufferWriter:
        """
        Write raw bytes at the position and advance past them; returns self.

        Args:
            value: Anything ``Buffer.write`` accepts.
            ctype: Fixed-layout ctypes type for plain Python values.

        Raises
        ------
            BufferOverflowError: If the bytes do not fit before the end of
                the buffer; nothing is written and the position is kept.
        """
        data = raw_bytes(value, ctype)
        size = len(data)
        limit = self._target.size
        if self._position < 0 or self._position + size > limit:
            raise BufferOverflowError(
                details={"position": self._position, "size": size, "limit": limit}
            )
        self._target.write(data, self._position)
        self._position += size
        return self

"""
Fixed-layout value types.

Typed reads and writes copy ``ctypes.sizeof(ctype)`` raw bytes in the
platform's native representation. Only ctypes types with a fixed in-memory
layout qualify: scalars (``c_uint32``, ``c_double``, ...), Structures,
Unions and Arrays. Pointer-like types (``c_char_p``, ``c_void_p``,
``POINTER(...)``, ``py_object``) are refused because copying them copies
an address, not a value.
"""

from __future__ import annotations

import ctypes
from collections.abc import Sequence
from typing import Any

from .exceptions import ValidationError

__all__ = ["resolve_ctype", "to_python", "pack", "FIXED_LAYOUT_TYPES"]

FIXED_LAYOUT_TYPES = (ctypes._SimpleCData, ctypes.Structure, ctypes.Union, ctypes.Array)

_POINTER_LIKE = (ctypes.c_char_p, ctypes.c_wchar_p, ctypes.c_void_p, ctypes.py_object, ctypes._Pointer)


def resolve_ctype(ctype: Any) -> type:
    """Return ``ctype`` if it is a fixed-layout ctypes type, else raise ValidationError."""
    if (
        not isinstance(ctype, type)
        or not issubclass(ctype, FIXED_LAYOUT_TYPES)
        or issubclass(ctype, _POINTER_LIKE)
    ):
        raise ValidationError(
            f"Expected a fixed-layout ctypes type, got {ctype!r}",
            code="INVALID_CTYPE",
            details={"ctype": repr(ctype)},
        )
    return ctype


def to_python(value: Any) -> Any:
    """Unwrap ctypes scalars to Python values; Structures and Arrays pass through."""
    if isinstance(value, ctypes._SimpleCData):
        return value.value
    return value


def pack(value: Any, ctype: type) -> bytes:
    """
    Raw native bytes of ``value`` laid out as ``ctype``.

    Args:
        value: An instance of ``ctype``, a Python value ``ctype`` accepts,
            or a sequence of elements when ``ctype`` is an Array type.
        ctype: Fixed-layout ctypes type.

    Raises
    ------
        ValidationError: If ``value`` cannot be converted to ``ctype``.
    """
    ctype = resolve_ctype(ctype)
    if not isinstance(value, ctype):
        try:
            if issubclass(ctype, ctypes.Array) and isinstance(value, Sequence) and not isinstance(
                value, (str, bytes, bytearray)
            ):
                value = ctype(*value)
            else:
                value = ctype(value)
        except (TypeError, ValueError, IndexError, RuntimeError) as e:
            raise ValidationError(
                f"Cannot convert {type(value).__name__} to {ctype.__name__}: {e}",
                code="INVALID_VALUE",
                details={"ctype": ctype.__name__, "type": type(value).__name__},
            ) from e
    return bytes(value)

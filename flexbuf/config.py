"""
Flexbuf configuration.

Provides runtime defaults for buffer construction. Settings start from the
environment and can be modified programmatically afterwards.

Example:
    >>> from flexbuf import config
    >>> config.default_initial_capacity = 64  # New FlexBuffers start at 64 bytes

Environment::

    FLEXBUF_DEFAULT_CAPACITY=<int>   (default: 16)
    FLEXBUF_TEXT_ENCODING=<codec>    (default: utf-8)
"""

import codecs
import os

from ._logging import scoped_logger
from .exceptions import ValidationError

__all__ = ["config", "DEFAULT_INITIAL_CAPACITY", "DEFAULT_TEXT_ENCODING"]

# Default allocation alignment of mainstream 64-bit allocators
DEFAULT_INITIAL_CAPACITY = 16
DEFAULT_TEXT_ENCODING = "utf-8"

_log = scoped_logger("config")


def _validate_capacity(value: object, source: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(
            f"default_initial_capacity must be int, got {type(value).__name__}",
            details={"param": "default_initial_capacity", "source": source},
        )
    if value < 0:
        raise ValidationError(
            f"default_initial_capacity must be >= 0, got {value}",
            details={"param": "default_initial_capacity", "value": value, "source": source},
        )
    return value


def _validate_encoding(value: object, source: str) -> str:
    if not isinstance(value, str):
        raise ValidationError(
            f"text_encoding must be str, got {type(value).__name__}",
            details={"param": "text_encoding", "source": source},
        )
    try:
        codecs.lookup(value)
    except LookupError as e:
        raise ValidationError(
            f"unknown text encoding: {value!r}",
            details={"param": "text_encoding", "value": value, "source": source},
        ) from e
    return value


def _capacity_from_env() -> int:
    raw = os.environ.get("FLEXBUF_DEFAULT_CAPACITY")
    if raw is None or raw.strip() == "":
        return DEFAULT_INITIAL_CAPACITY
    try:
        value = int(raw, 0)
    except ValueError as e:
        raise ValidationError(
            f"FLEXBUF_DEFAULT_CAPACITY must be an integer, got {raw!r}",
            details={"param": "default_initial_capacity", "source": "env"},
        ) from e
    return _validate_capacity(value, "env")


def _encoding_from_env() -> str:
    raw = os.environ.get("FLEXBUF_TEXT_ENCODING")
    if not raw:
        return DEFAULT_TEXT_ENCODING
    return _validate_encoding(raw, "env")


class _BufferConfig:
    """
    Singleton configuration for buffer defaults.

    This is a singleton - import and modify `config` directly:

        from flexbuf import config
        config.default_initial_capacity = 64

    Attributes
    ----------
        default_initial_capacity: Initial capacity used by ``FlexBuffer()``
            when none is given. Physical capacity never shrinks below it.
        text_encoding: Codec used when text is wrapped, copied, appended
            or written into a buffer.
    """

    __slots__ = ("_default_initial_capacity", "_text_encoding")

    def __init__(self) -> None:
        self._default_initial_capacity = _capacity_from_env()
        self._text_encoding = _encoding_from_env()

    @property
    def default_initial_capacity(self) -> int:
        """Initial capacity for FlexBuffers created without one."""
        return self._default_initial_capacity

    @default_initial_capacity.setter
    def default_initial_capacity(self, value: int) -> None:
        self._default_initial_capacity = _validate_capacity(value, "runtime")
        _log.debug("Default initial capacity changed", extra={"new_capacity": value})

    @property
    def text_encoding(self) -> str:
        """Codec for text passed where bytes are expected."""
        return self._text_encoding

    @text_encoding.setter
    def text_encoding(self, value: str) -> None:
        self._text_encoding = _validate_encoding(value, "runtime")
        _log.debug("Text encoding changed", extra={"encoding": value})

    def reset(self) -> None:
        """Re-read both settings from the environment."""
        self._default_initial_capacity = _capacity_from_env()
        self._text_encoding = _encoding_from_env()

    def __repr__(self) -> str:
        return (
            f"BufferConfig(default_initial_capacity={self._default_initial_capacity}, "
            f"text_encoding={self._text_encoding!r})"
        )


# Module-level singleton
config = _BufferConfig()

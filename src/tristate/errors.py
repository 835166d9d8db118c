__all__ = [
    "TriStateDecodeError",
    "TriStateError",
    "TriStateTypeError",
]


class TriStateError(Exception):
    """Base exception for tri-state conversion errors."""


class TriStateDecodeError(TriStateError, ValueError):
    """Raw value can't be decoded into a payload (strict wire decode and persistence decode)."""


class TriStateTypeError(TriStateError, TypeError):
    """Python annotation has no column type."""

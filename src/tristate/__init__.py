"""Tri-state (absent / null / value) container for patch-style fields."""

__all__ = [
    "Option",
    "TriState",
    "TriStateDecodeError",
    "TriStateError",
    "TriStateTypeError",
]

from tristate.errors import TriStateDecodeError, TriStateError, TriStateTypeError
from tristate.model import TriState
from tristate.option import Option

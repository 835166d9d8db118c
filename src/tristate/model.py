"""Tri-state container for patch-style fields.

A field of type ``TriState[T]`` is in exactly one of three states:

* absent -- nothing was said about the field, the stored value stays as is;
* null -- the field was explicitly set to null, the stored value is cleared;
* value -- the field was given a concrete ``T``, the stored value is replaced.

``typing.Optional[T]`` folds the first two states into ``None``; this type keeps them apart through comparison,
transformation, wire serialization (see :mod:`tristate.pydantic`) and column encoding (see :mod:`tristate.sql`).
"""

from __future__ import annotations

__all__ = ["TriState"]

import logging
import typing as t
from collections.abc import MutableMapping

from typing_extensions import override

from tristate.option import Option

T = t.TypeVar("T")
U = t.TypeVar("U")
D = t.TypeVar("D")
W = t.TypeVar("W")

_LOGGER = logging.getLogger(__name__)


class _Marker:
    __slots__ = ("__name", "__rank", "__ref")

    def __init__(self, name: str, rank: int, ref: str) -> None:
        self.__name = name
        self.__rank = rank
        self.__ref = ref

    def __reduce__(self) -> str:
        # module global name: copy, deepcopy and pickle keep the marker identity
        return self.__ref

    @property
    def rank(self) -> int:
        return self.__rank

    @override
    def __str__(self) -> str:
        return f"<{self.__name}>"

    __repr__ = __str__


_ABSENT: t.Final[_Marker] = _Marker("Absent", 0, "_ABSENT")
_NULL: t.Final[_Marker] = _Marker("Null", 1, "_NULL")
_VALUE_RANK: t.Final[int] = 2


class TriState(t.Generic[T]):
    """Absent, explicit null or a value of ``T``.

    States are ordered ``absent < null < value``; values are ordered by the payload. Instances are immutable and
    hashable when the payload is hashable.
    """

    __slots__ = ("__value",)

    @classmethod
    def absent(cls) -> TriState[T]:
        return cls()

    @classmethod
    def null(cls) -> TriState[T]:
        return cls(_NULL)

    @classmethod
    def wrap(cls, value: T) -> TriState[T]:
        return cls(value)

    @classmethod
    def from_optional(cls, value: t.Optional[T]) -> TriState[T]:
        """Build from a plain optional: ``None`` is absent, never null."""
        return cls(value) if value is not None else cls()

    @classmethod
    def from_option(cls, option: Option[T]) -> TriState[T]:
        """Build from a binary option: empty option is absent, never null."""
        return cls(option.value()) if option.is_set else cls()

    @classmethod
    def from_nested(cls, option: Option[Option[T]]) -> TriState[T]:
        """Inverse of :meth:`to_nested`."""
        if option.is_empty:
            return cls()

        inner = t.cast(Option[T], option.value())
        return cls(inner.value()) if inner.is_set else cls(_NULL)

    @classmethod
    def from_lookup(cls, lookup: t.Callable[[], T], *errors: type[BaseException]) -> TriState[T]:
        """Call the lookup and wrap its result.

        A lookup failure is not propagated: any of the ``errors`` (``LookupError`` by default) turns into an explicit
        null and the error itself is dropped. Other exceptions propagate.

        >>> TriState.from_lookup(lambda: {"a": 1}["b"])
        TriState.null()
        """
        return cls.from_lookup_unwrap(lookup, _identity, *errors)

    @classmethod
    def from_lookup_unwrap(
        cls,
        lookup: t.Callable[[], W],
        unwrap: t.Callable[[W], T],
        *errors: type[BaseException],
    ) -> TriState[T]:
        """Same as :meth:`from_lookup`, but the lookup returns a wrapper (e.g. raw JSON) that is unwrapped first."""
        catch = errors if errors else (LookupError,)

        try:
            value = unwrap(lookup())

        except catch as err:
            _LOGGER.debug("lookup failed, treating as null", exc_info=err)
            return cls(_NULL)

        return cls(value)

    def __init__(self, value: t.Union[T, _Marker] = _ABSENT) -> None:
        self.__value = value

    @override
    def __str__(self) -> str:
        return f"<TriState[{self.__value}]>"

    @override
    def __repr__(self) -> str:
        if self.__value is _ABSENT:
            return "TriState()"

        if self.__value is _NULL:
            return "TriState.null()"

        return f"TriState({self.__value!r})"

    @override
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TriState):
            return NotImplemented

        return self.__key == other.__key

    @override
    def __hash__(self) -> int:
        return hash((TriState, self.__key))

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, TriState):
            return NotImplemented

        return self.__key < other.__key

    def __le__(self, other: object) -> bool:
        if not isinstance(other, TriState):
            return NotImplemented

        return self.__key <= other.__key

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, TriState):
            return NotImplemented

        return self.__key > other.__key

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, TriState):
            return NotImplemented

        return self.__key >= other.__key

    @property
    def __key(self) -> tuple[object, ...]:
        if isinstance(self.__value, _Marker):
            return (self.__value.rank,)

        return (_VALUE_RANK, self.__value)

    @property
    def is_absent(self) -> bool:
        return self.__value is _ABSENT

    @property
    def is_null(self) -> bool:
        return self.__value is _NULL

    @property
    def is_value(self) -> bool:
        return not isinstance(self.__value, _Marker)

    @t.overload
    def value(self) -> t.Optional[T]: ...

    @t.overload
    def value(self, default: D) -> t.Union[T, D]: ...

    def value(self, default: t.Optional[D] = None) -> t.Union[T, t.Optional[D]]:
        return self.__value if not isinstance(self.__value, _Marker) else default

    def take(self) -> t.Optional[T]:
        """Return the payload; absent and null both give ``None``, check :attr:`is_null` to tell them apart."""
        return self.value()

    def contains_value(self, x: object) -> bool:
        return self.is_value and x == self.__value

    def contains(self, x: t.Optional[object]) -> bool:
        """Check against an observed optional.

        Null contains ``None``, value contains an equal non-``None`` object and absent contains nothing at all.
        """
        if self.is_absent:
            return False

        if self.is_null:
            return x is None

        return x is not None and x == self.__value

    def map(self, func: t.Callable[[t.Optional[T]], t.Optional[U]]) -> TriState[U]:
        """Re-derive both the payload and the null decision.

        ``func`` receives the payload (or ``None`` for null); a ``None`` result means null. Absent stays absent and
        ``func`` is not called.
        """
        if self.is_absent:
            return TriState()

        result = func(self.value())
        return TriState(result) if result is not None else TriState(_NULL)

    def map_value(self, func: t.Callable[[T], U]) -> TriState[U]:
        if isinstance(self.__value, _Marker):
            return TriState(self.__value)

        return TriState(func(self.__value))

    def to_nested(self) -> Option[Option[T]]:
        if self.is_absent:
            return Option.empty()

        if self.is_null:
            return Option.some(Option.empty())

        return Option.some(Option.some(t.cast(T, self.__value)))

    def apply(self, current: t.Optional[T]) -> t.Optional[T]:
        """Patch the current value: absent keeps it, null clears it, value replaces it."""
        if self.is_absent:
            return current

        return self.value()

    def update_to(self, target: object, name: str) -> None:
        """Patch ``target[name]`` (mutable mapping) or ``target.name`` (any other object) in place.

        Absent leaves the slot untouched, a missing mapping key is not created.
        """
        if self.is_absent:
            return

        if isinstance(target, MutableMapping):
            target[name] = self.value()

        else:
            setattr(target, name, self.value())

    @classmethod
    def __get_pydantic_core_schema__(cls, source: object, handler: t.Any) -> t.Any:
        # NOTE: local import, `tristate.pydantic` imports this module.
        from tristate.pydantic import build_tristate_schema

        return build_tristate_schema(source, handler, policy="lenient")


def _identity(value: T) -> T:
    return value

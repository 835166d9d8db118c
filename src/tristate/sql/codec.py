"""Column contract of :class:`tristate.TriState` for asyncpg.

asyncpg owns the wire protocol and passes SQL NULL as ``None`` in both directions, so the contract lives on the
python side of the driver:

* write -- a value is encoded as its payload, absent and null are both NULL;
* read -- NULL is always *null* (a stored column always exists, so it can't be absent), anything else is decoded
  into a value and a decoding failure is raised, never downgraded.
"""

from __future__ import annotations

__all__ = [
    "Connection",
    "TriStateCodec",
    "decode",
    "encode",
    "fetch_json",
    "fetch_value",
    "json_codec",
]

import logging
import typing as t
from dataclasses import dataclass
from functools import partial

import asyncpg
import pydantic

from tristate.errors import TriStateDecodeError
from tristate.model import TriState

T = t.TypeVar("T")

Encoder = t.Callable[[T], object]
Decoder = t.Callable[[object], T]
Connection = t.Union[asyncpg.Connection, asyncpg.Pool]

_LOGGER = logging.getLogger(__name__)


def encode(state: TriState[T], encoder: t.Optional[Encoder[T]] = None) -> object:
    if not state.is_value:
        return None

    value = t.cast(T, state.value())
    return encoder(value) if encoder is not None else value


def decode(raw: object, decoder: t.Optional[Decoder[T]] = None) -> TriState[T]:
    if raw is None:
        return TriState.null()

    if decoder is None:
        return TriState.wrap(t.cast(T, raw))

    try:
        return TriState.wrap(decoder(raw))

    except Exception as err:
        msg = "can't decode column value"
        raise TriStateDecodeError(msg, raw) from err


@dataclass(frozen=True)
class TriStateCodec(t.Generic[T]):
    """Encoder & decoder pair of a single column."""

    encoder: t.Optional[Encoder[T]] = None
    decoder: t.Optional[Decoder[T]] = None

    def encode(self, state: TriState[T]) -> object:
        return encode(state, self.encoder)

    def decode(self, raw: object) -> TriState[T]:
        return decode(raw, self.decoder)

    def decode_record(self, record: t.Union[asyncpg.Record, t.Mapping[str, object]], column: str) -> TriState[T]:
        return self.decode(record[column])


def json_codec(type_: type[T]) -> TriStateCodec[T]:
    """Codec of a JSON / JSONB column holding ``type_`` payloads (asyncpg passes JSON as text by default)."""
    adapter = pydantic.TypeAdapter(type_)

    return TriStateCodec(
        encoder=partial(_dump_json, adapter),
        decoder=partial(_load_json, adapter),
    )


async def fetch_value(
    conn: Connection,
    query: str,
    *args: object,
    codec: t.Optional[TriStateCodec[T]] = None,
    timeout: t.Optional[float] = None,
) -> TriState[T]:
    """Fetch the first column of the first row.

    A failed lookup is not an error: no row and a postgres error (``asyncpg.PostgresError``) are both returned as
    null, the error is dropped. Driver errors (closed connection, timeout) are not lookup failures and propagate. A NULL
    column is null as well. A column value that the codec can't decode is raised.
    """

    try:
        row = await conn.fetchrow(query, *args, timeout=timeout)

    except asyncpg.PostgresError as err:
        _LOGGER.debug("fetch failed, treating as null", exc_info=err)
        return TriState.null()

    if row is None:
        return TriState.null()

    return (codec if codec is not None else TriStateCodec()).decode(row[0])


async def fetch_json(
    conn: Connection,
    query: str,
    *args: object,
    type_: type[T],
    timeout: t.Optional[float] = None,
) -> TriState[T]:
    """Fetch the first column of the first row as a JSON payload of ``type_``.

    Unlike :func:`fetch_value` the JSON payload is unwrapped as part of the lookup, so a payload that doesn't
    validate as ``type_`` is null too.
    """

    try:
        row = await conn.fetchrow(query, *args, timeout=timeout)

    except asyncpg.PostgresError as err:
        _LOGGER.debug("fetch failed, treating as null", exc_info=err)
        return TriState.null()

    return TriState.from_lookup_unwrap(
        partial(_get_first_column, row),
        partial(_load_json, pydantic.TypeAdapter(type_)),
        LookupError,
        ValueError,
    )


def _get_first_column(row: t.Optional[asyncpg.Record]) -> object:
    if row is None:
        msg = "no rows"
        raise LookupError(msg)

    value = row[0]
    if value is None:
        msg = "column is null"
        raise LookupError(msg, row)

    return value


def _dump_json(adapter: pydantic.TypeAdapter[T], value: T) -> str:
    return adapter.dump_json(value).decode()


def _load_json(adapter: pydantic.TypeAdapter[T], raw: object) -> T:
    if isinstance(raw, (str, bytes, bytearray)):
        return adapter.validate_json(raw)

    # a custom json codec on the connection already decoded it
    return adapter.validate_python(raw)

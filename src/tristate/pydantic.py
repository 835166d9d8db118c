"""Wire contract of :class:`tristate.TriState` for pydantic models.

Encoding: a value is serialized exactly as its payload would be, absent and null are both serialized as ``null``.
The wire can't tell absent from null on the way out; use :func:`dump_patch` to drop absent fields instead.

Decoding (lenient, default): ``null`` is null, a payload that validates is a value, and a payload that doesn't
validate is *absent* -- the surrounding model still validates. Annotate the field with :class:`StrictDecode` to get
a regular validation error for such payloads instead.

>>> class UserPatch(pydantic.BaseModel):
...     name: TriState[str] = TriState()
...     age: TriState[int] = TriState()
>>> UserPatch.model_validate_json('{"name": null, "age": "oops"}')
UserPatch(name=TriState.null(), age=TriState())
"""

from __future__ import annotations

__all__ = [
    "DecodePolicy",
    "StrictDecode",
    "build_tristate_schema",
    "decode_json",
    "dump_patch",
    "encode_json",
]

import logging
import typing as t
from dataclasses import dataclass
from functools import lru_cache

import pydantic
from pydantic_core import core_schema

from tristate.errors import TriStateDecodeError
from tristate.model import TriState

T = t.TypeVar("T")

DecodePolicy = t.Literal["lenient", "strict"]

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class StrictDecode:
    """Field annotation: a payload that doesn't validate raises instead of becoming absent.

    >>> class UserPatch(pydantic.BaseModel):
    ...     age: t.Annotated[TriState[int], StrictDecode()] = TriState()
    """

    def __get_pydantic_core_schema__(
        self,
        source: object,
        handler: pydantic.GetCoreSchemaHandler,
    ) -> core_schema.CoreSchema:
        return build_tristate_schema(source, handler, policy="strict")


def build_tristate_schema(
    source: object,
    handler: pydantic.GetCoreSchemaHandler,
    *,
    policy: DecodePolicy,
) -> core_schema.CoreSchema:
    args = t.get_args(source)
    inner_schema = handler.generate_schema(args[0] if args else t.Any)

    def validate(value: object, validate_payload: core_schema.ValidatorFunctionWrapHandler) -> TriState[object]:
        if isinstance(value, TriState):
            state = value

        elif value is None:
            return TriState.null()

        else:
            state = TriState.wrap(value)

        if policy == "strict":
            return state.map_value(validate_payload)

        try:
            return state.map_value(validate_payload)

        except pydantic.ValidationError as err:
            _LOGGER.debug("payload is not valid, treating as absent", exc_info=err)
            return TriState.absent()

    def serialize(value: object, serialize_payload: core_schema.SerializerFunctionWrapHandler) -> object:
        if not isinstance(value, TriState):
            return serialize_payload(value)

        return serialize_payload(value.value()) if value.is_value else None

    return core_schema.no_info_wrap_validator_function(
        validate,
        core_schema.nullable_schema(inner_schema),
        serialization=core_schema.wrap_serializer_function_ser_schema(
            serialize,
            info_arg=False,
            schema=inner_schema,
            when_used="always",
        ),
    )


def decode_json(
    data: t.Union[str, bytes, bytearray, None],
    type_: type[T],
    *,
    policy: DecodePolicy = "lenient",
) -> TriState[T]:
    """Decode a raw JSON document into a tri-state of ``type_``.

    Missing input (``None``) is absent. Under ``"lenient"`` policy malformed JSON and mismatched payloads are absent
    too; under ``"strict"`` policy they raise :class:`TriStateDecodeError`.
    """

    if data is None:
        return TriState.absent()

    try:
        return t.cast(TriState[T], _get_adapter(type_, policy).validate_json(data))

    except pydantic.ValidationError as err:
        if policy == "lenient":
            _LOGGER.debug("raw value is not readable, treating as absent", exc_info=err)
            return TriState.absent()

        msg = "can't decode raw value"
        raise TriStateDecodeError(msg, data, type_) from err


def encode_json(state: TriState[T], type_: type[T]) -> bytes:
    return _get_adapter(type_, "lenient").dump_json(state)


def dump_patch(model: pydantic.BaseModel, **kwargs: t.Any) -> dict[str, t.Any]:
    """Dump the model without absent tri-state fields.

    Unlike plain ``model_dump`` the result keeps absent and null apart: absent fields are left out of the dict and
    null fields are kept as ``None``. Nested models (also inside lists, tuples and dicts) are dumped the same way.
    """

    exclude = _build_absent_exclude(model)

    extra = kwargs.pop("exclude", None)
    if isinstance(extra, t.Mapping):
        exclude.update(extra)

    elif extra is not None:
        exclude.update({name: True for name in extra})

    return model.model_dump(exclude=exclude, **kwargs)


def _build_absent_exclude(value: object) -> dict[t.Any, t.Any]:
    if isinstance(value, pydantic.BaseModel):
        items: t.Iterable[tuple[t.Any, object]] = iter(value)

    elif isinstance(value, (list, tuple)):
        items = enumerate(value)

    elif isinstance(value, dict):
        items = value.items()

    else:
        return {}

    exclude = dict[t.Any, t.Any]()

    for key, item in items:
        if isinstance(item, TriState) and item.is_absent:
            exclude[key] = True
            continue

        nested = _build_absent_exclude(item)
        if nested:
            exclude[key] = nested

    return exclude


def _get_adapter(type_: object, policy: DecodePolicy) -> pydantic.TypeAdapter[TriState[t.Any]]:
    try:
        hash(type_)

    except TypeError:
        # annotation metadata is not hashable, can't be cached
        return _build_adapter(type_, policy)

    return _build_cached_adapter(type_, policy)


@lru_cache(maxsize=None)
def _build_cached_adapter(type_: object, policy: DecodePolicy) -> pydantic.TypeAdapter[TriState[t.Any]]:
    return _build_adapter(type_, policy)


def _build_adapter(type_: object, policy: DecodePolicy) -> pydantic.TypeAdapter[TriState[t.Any]]:
    if policy == "strict":
        return pydantic.TypeAdapter(t.Annotated[TriState[type_], StrictDecode()])  # type: ignore[valid-type]

    return pydantic.TypeAdapter(TriState[type_])  # type: ignore[valid-type]

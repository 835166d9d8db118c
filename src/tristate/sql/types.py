from __future__ import annotations

__all__ = [
    "ArrayType",
    "ColumnType",
    "ColumnTypeResolver",
    "NullableType",
    "ScalarType",
    "TypeSystem",
    "render_type",
]

import collections.abc
import decimal
import types
import typing as t
import uuid
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from functools import cached_property, singledispatchmethod

import pydantic
from sqlglot import exp
from typing_extensions import assert_never

from tristate.errors import TriStateTypeError
from tristate.model import TriState


@dataclass(frozen=True, kw_only=True)
class ScalarType:
    dtype: exp.DataType.Type


@dataclass(frozen=True, kw_only=True)
class NullableType:
    of_type: ColumnType


@dataclass(frozen=True, kw_only=True)
class ArrayType:
    of_type: ColumnType


ColumnType = t.Union[
    ScalarType,
    NullableType,
    ArrayType,
]


class TypeSystem:
    """Structural column type matching, a nullable column matches its underlying type."""

    def is_type(self, this: ColumnType, *others: ColumnType) -> bool:
        return any(self._check(this, other) for other in others)

    @singledispatchmethod
    def _check(self, this: ColumnType, other: ColumnType) -> bool:
        raise NotImplementedError

    @_check.register
    def _check_nullable(self, this: NullableType, other: ColumnType) -> bool:
        return self._check(this.of_type, other.of_type if isinstance(other, NullableType) else other)

    @_check.register
    def _check_scalar(self, this: ScalarType, other: ColumnType) -> bool:
        if isinstance(other, NullableType):
            return self._check(this, other.of_type)

        if isinstance(other, ScalarType):
            return other.dtype == this.dtype

        return False

    @_check.register
    def _check_array(self, this: ArrayType, other: ColumnType) -> bool:
        if isinstance(other, NullableType):
            return self._check(this, other.of_type)

        if isinstance(other, ArrayType):
            return self._check(this.of_type, other.of_type)

        return False


class ColumnTypeResolver:
    """Column type of a python annotation.

    ``TriState[T]`` resolves to exactly the column type of ``T``: whether a value is absent or null is decided per
    write, not per column.
    """

    def __init__(self, type_system: t.Optional[TypeSystem] = None) -> None:
        self.__type_system = type_system if type_system is not None else TypeSystem()

    def resolve(self, annotation: object) -> ColumnType:
        origin = t.get_origin(annotation)
        args = t.get_args(annotation)

        if origin is t.Annotated:
            return self.resolve(args[0])

        if origin is TriState:
            return self.resolve(args[0])

        if origin is t.Union or origin is types.UnionType:
            not_none = [arg for arg in args if arg is not type(None)]
            if len(not_none) == 1 and len(not_none) < len(args):
                return NullableType(of_type=self.resolve(not_none[0]))

            msg = "union column types are not supported"
            raise TriStateTypeError(msg, annotation)

        if origin in (list, collections.abc.Sequence) and args:
            return ArrayType(of_type=self.resolve(args[0]))

        if origin in (dict, collections.abc.Mapping) or annotation in (dict, t.Any):
            return ScalarType(dtype=exp.DataType.Type.JSONB)

        if isinstance(annotation, type) and issubclass(annotation, pydantic.BaseModel):
            return ScalarType(dtype=exp.DataType.Type.JSONB)

        dtype = self.__py2sql_type_map.get(annotation) if isinstance(annotation, type) else None
        if dtype is None:
            msg = "annotation has no column type"
            raise TriStateTypeError(msg, annotation)

        return ScalarType(dtype=dtype)

    def accepts(self, annotation: object, column: ColumnType) -> bool:
        return self.__type_system.is_type(self.resolve(annotation), column)

    @cached_property
    def __py2sql_type_map(self) -> t.Mapping[type[object], exp.DataType.Type]:
        return {
            bool: exp.DataType.Type.BOOLEAN,
            int: exp.DataType.Type.BIGINT,
            float: exp.DataType.Type.DOUBLE,
            str: exp.DataType.Type.TEXT,
            bytes: exp.DataType.Type.VARBINARY,
            decimal.Decimal: exp.DataType.Type.DECIMAL,
            uuid.UUID: exp.DataType.Type.UUID,
            date: exp.DataType.Type.DATE,
            time: exp.DataType.Type.TIME,
            datetime: exp.DataType.Type.TIMESTAMPTZ,
            timedelta: exp.DataType.Type.INTERVAL,
        }


def render_type(column_type: ColumnType, dialect: str = "postgres") -> str:
    return _build_data_type(column_type).sql(dialect=dialect)


def _build_data_type(column_type: ColumnType) -> exp.DataType:
    if isinstance(column_type, ScalarType):
        return exp.DataType(this=column_type.dtype)

    elif isinstance(column_type, NullableType):
        return _build_data_type(column_type.of_type)

    elif isinstance(column_type, ArrayType):
        return exp.DataType(
            this=exp.DataType.Type.ARRAY,
            expressions=[_build_data_type(column_type.of_type)],
            nested=True,
        )

    else:
        assert_never(column_type)

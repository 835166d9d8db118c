from __future__ import annotations

__all__ = [
    "UpdateStatement",
    "build_update",
]

import typing as t
from dataclasses import dataclass, field

from sqlglot import exp

from tristate.model import TriState
from tristate.sql.codec import TriStateCodec, encode


@dataclass(frozen=True)
class UpdateStatement:
    sql: str
    args: t.Sequence[object] = field(default_factory=tuple)


def build_update(
    table: str,
    patch: t.Mapping[str, TriState[t.Any]],
    where: t.Mapping[str, object],
    *,
    codecs: t.Optional[t.Mapping[str, TriStateCodec[t.Any]]] = None,
    dialect: str = "postgres",
) -> t.Optional[UpdateStatement]:
    """Build ``UPDATE`` statement with asyncpg placeholders (``$1``, ``$2``, ...) for the patch.

    Absent columns are not touched, null columns are set to NULL and value columns are set to the encoded value.
    Returns ``None`` when every column is absent. Identifiers are always quoted, so column names keep their case. A
    ``None`` condition is rendered as ``IS NULL``.

    >>> build_update("users", {"name": TriState("Bob"), "email": TriState.null(), "age": TriState()}, {"id": 42})
    UpdateStatement(sql='UPDATE "users" SET "name" = $1, "email" = $2 WHERE "id" = $3', args=['Bob', None, 42])
    """

    if not where:
        msg = "update without conditions is not allowed"
        raise ValueError(msg, table)

    args = list[object]()

    def bind(value: object) -> exp.Expression:
        args.append(value)
        return exp.var(f"${len(args)}")

    assignments = [
        exp.EQ(
            this=exp.column(column),
            expression=bind(
                codecs[column].encode(state) if codecs is not None and column in codecs else encode(state),
            ),
        )
        for column, state in patch.items()
        if not state.is_absent
    ]
    if not assignments:
        return None

    conditions = [
        exp.Is(this=exp.column(column), expression=exp.Null())
        if value is None
        else exp.EQ(this=exp.column(column), expression=bind(value))
        for column, value in where.items()
    ]

    statement = exp.Update(
        this=exp.to_table(table),
        expressions=assignments,
        where=exp.Where(this=exp.and_(*conditions)),
    )

    return UpdateStatement(sql=statement.sql(dialect=dialect, identify=True), args=args)

__all__ = [
    "ColumnTypeResolver",
    "TriStateCodec",
    "UpdateStatement",
    "build_update",
    "decode",
    "encode",
    "fetch_json",
    "fetch_value",
    "json_codec",
    "render_type",
]

from tristate.sql.codec import TriStateCodec, decode, encode, fetch_json, fetch_value, json_codec
from tristate.sql.types import ColumnTypeResolver, render_type
from tristate.sql.update import UpdateStatement, build_update

import typing as t

import pydantic

from tristate import TriState
from tristate.pydantic import StrictDecode


class UserInfo(pydantic.BaseModel):
    id_: int
    name: str
    email: t.Optional[str] = None
    age: t.Optional[int] = None


class UserPatch(pydantic.BaseModel):
    """PATCH body: a missing field is kept, ``null`` clears it, a value replaces it."""

    name: TriState[str] = TriState()
    email: TriState[str] = TriState()
    age: t.Annotated[TriState[int], StrictDecode()] = TriState()

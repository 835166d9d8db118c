import typing as t

import asyncpg

from examples.user_patch.model import UserInfo, UserPatch
from tristate import TriState
from tristate.sql import build_update, fetch_value


class AsyncQuerier:
    def __init__(self, pool: asyncpg.Pool) -> None:
        self.__pool = pool

    async def create_users_table(self) -> None:
        async with self.__pool.acquire() as conn:
            await conn.execute("""
                create table if not exists users
                (
                    id    serial primary key,
                    name  varchar(256) not null,
                    email varchar(256),
                    age   integer
                );
            """)

    async def get_user_by_id(self, user_id: int) -> t.Optional[UserInfo]:
        async with self.__pool.acquire() as conn:
            row = await conn.fetchrow("""
                select id, name, email, age
                from users
                where id = $1;
            """, user_id)

        return UserInfo(id_=row[0], name=row[1], email=row[2], age=row[3]) if row is not None else None

    async def get_user_email(self, user_id: int) -> TriState[str]:
        return await fetch_value(self.__pool, "select email from users where id = $1;", user_id)

    async def patch_user(self, user_id: int, patch: UserPatch) -> bool:
        statement = build_update(
            "users",
            {"name": patch.name, "email": patch.email, "age": patch.age},
            {"id": user_id},
        )
        if statement is None:
            return False

        async with self.__pool.acquire() as conn:
            await conn.execute(statement.sql, *statement.args)

        return True

import typing as t

from fastapi import FastAPI, HTTPException

from examples.user_patch.model import UserInfo, UserPatch


class UserStorage:
    def __init__(self, users: t.Optional[t.Iterable[UserInfo]] = None) -> None:
        self.__users = {user.id_: user for user in users or ()}

    def get(self, user_id: int) -> t.Optional[UserInfo]:
        return self.__users.get(user_id)

    def patch(self, user_id: int, patch: UserPatch) -> t.Optional[UserInfo]:
        user = self.__users.get(user_id)
        if user is None:
            return None

        if patch.name.is_null:
            msg = "user name can't be cleared"
            raise ValueError(msg, user_id)

        updated = user.model_copy()
        for name, value in patch:
            value.update_to(updated, name)

        self.__users[user_id] = updated

        return updated


def create_fastapi(storage: UserStorage) -> FastAPI:
    """
    Create a FastAPI application.

    Usage: `uvicorn --factory examples.user_patch.server:create_fastapi`
    """

    app = FastAPI()

    @app.get("/users/{user_id}")
    def get_user(user_id: int) -> UserInfo:
        user = storage.get(user_id)
        if user is None:
            raise HTTPException(status_code=404)

        return user

    @app.patch("/users/{user_id}")
    def patch_user(user_id: int, patch: UserPatch) -> UserInfo:
        try:
            user = storage.patch(user_id, patch)

        except ValueError as err:
            raise HTTPException(status_code=422, detail=str(err.args[0])) from err

        if user is None:
            raise HTTPException(status_code=404)

        return user

    return app

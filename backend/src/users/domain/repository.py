from typing import Protocol

from users.domain.entities import User

UNKNOWN_COUNT = -1


class UserRepository(Protocol):
    async def insert(self, user: User) -> User: ...

    async def list_all(self) -> list[User]: ...

    async def get_by_id(self, user_id: int) -> User: ...

    async def count_all(self) -> int: ...

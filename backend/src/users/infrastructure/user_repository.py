from datetime import datetime, timezone

from sqlalchemy import Row, func, insert, select

from shared.exceptions import NotFoundError, StoreError, ValidationError
from shared.infrastructure.database import DRIVER_ERRORS, DatabaseGateway
from shared.infrastructure.logger import AppLogger, get_logger
from users.domain.entities import User
from users.domain.repository import UNKNOWN_COUNT
from users.infrastructure.orm_models import UserModel

# Largest value the integer primary key can hold.
MAX_USER_ID = 2**31 - 1

users_table = UserModel.__table__


class DbUserRepository:
    def __init__(self, gateway: DatabaseGateway, log: AppLogger | None = None):
        self.gateway = gateway
        self.log = log or get_logger("users.repository")

    async def insert(self, user: User) -> User:
        missing = user.missing_fields()
        if missing:
            raise ValidationError(
                f"Missing required fields: {', '.join(missing)}", fields=missing
            )

        statement = (
            insert(users_table)
            .values(
                first_name=user.first_name,
                last_name=user.last_name,
                phone=user.phone,
                email=user.email,
            )
            .returning(users_table.c.id, users_table.c.created_at)
        )
        try:
            row = await self.gateway.query_row(statement)
        except DRIVER_ERRORS as exc:
            raise _store_error("create user", exc) from exc
        if row is None:
            raise StoreError("Failed to create user: no row returned")

        user.id = row.id
        user.created_at = _as_utc(row.created_at)
        return user

    async def list_all(self) -> list[User]:
        statement = select(users_table).order_by(
            users_table.c.created_at.desc(), users_table.c.id.desc()
        )
        try:
            rows = await self.gateway.query(statement)
        except DRIVER_ERRORS as exc:
            raise _store_error("fetch users", exc) from exc
        return [_to_entity(row) for row in rows]

    async def get_by_id(self, user_id: int) -> User:
        if not 0 < user_id <= MAX_USER_ID:
            raise NotFoundError("User", str(user_id))

        statement = select(users_table).where(users_table.c.id == user_id)
        try:
            row = await self.gateway.query_row(statement)
        except DRIVER_ERRORS as exc:
            raise _store_error("fetch user", exc) from exc
        if row is None:
            raise NotFoundError("User", str(user_id))
        return _to_entity(row)

    async def count_all(self) -> int:
        """Total number of users, or ``UNKNOWN_COUNT`` when the query fails."""
        statement = select(func.count()).select_from(users_table)
        try:
            row = await self.gateway.query_row(statement)
        except DRIVER_ERRORS as exc:
            self.log.warn("Failed to count users", error=_driver_message(exc))
            return UNKNOWN_COUNT
        return int(row[0]) if row is not None else UNKNOWN_COUNT


def _driver_message(exc: BaseException) -> str:
    # DBAPIError wraps the driver exception; its own str() embeds the SQL text.
    return str(getattr(exc, "orig", None) or exc)


def _store_error(action: str, exc: BaseException) -> StoreError:
    return StoreError(f"Failed to {action}: {_driver_message(exc)}")


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _to_entity(row: Row) -> User:
    return User(
        id=row.id,
        first_name=row.first_name,
        last_name=row.last_name,
        phone=row.phone,
        email=row.email,
        created_at=_as_utc(row.created_at),
    )

from shared.exceptions import NotFoundError
from shared.infrastructure.logger import get_logger
from users.domain.entities import User
from users.domain.repository import UserRepository

log = get_logger("users.services")


async def register_user(
    repo: UserRepository,
    first_name: str,
    last_name: str,
    phone: str,
    email: str,
) -> User:
    user = User(first_name=first_name, last_name=last_name, phone=phone, email=email)
    created = await repo.insert(user)
    log.info("User created successfully", id=created.id, email=created.email)
    return created


async def list_users(repo: UserRepository) -> list[User]:
    users = await repo.list_all()
    log.info("Successfully fetched users", count=len(users))
    return users


async def get_user(repo: UserRepository, user_id: str) -> User:
    # Only plain ASCII digits name an id; int() would also take "1_0", "+1" or " 1".
    if not (user_id.isascii() and user_id.isdigit()):
        raise NotFoundError("User", user_id)

    user = await repo.get_by_id(int(user_id))
    log.info("Successfully fetched user", id=user.id, email=user.email)
    return user

from fastapi import APIRouter, Depends

from shared.dependencies import get_user_repository
from shared.infrastructure.logger import get_logger
from users.application.services import get_user, list_users, register_user
from users.infrastructure.user_repository import DbUserRepository
from users.interfaces.schemas import CreateUserRequest, UserResponse

router = APIRouter(prefix="/api", tags=["users"])

log = get_logger("users.routes")


@router.post("/user", response_model=UserResponse, status_code=201)
async def create(
    body: CreateUserRequest,
    repo: DbUserRepository = Depends(get_user_repository),
):
    log.info("Received request", email=body.email)
    return await register_user(
        repo,
        first_name=body.first_name,
        last_name=body.last_name,
        phone=body.phone,
        email=body.email,
    )


@router.get("/users", response_model=list[UserResponse])
async def list_all(repo: DbUserRepository = Depends(get_user_repository)):
    log.info("Fetching all users")
    return await list_users(repo)


@router.get("/user/{user_id}", response_model=UserResponse)
async def get_one(user_id: str, repo: DbUserRepository = Depends(get_user_repository)):
    log.info("Fetching user", id=user_id)
    return await get_user(repo, user_id)

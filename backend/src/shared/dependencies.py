from fastapi import Depends, Request

from health.application.services import HealthReporter
from shared.infrastructure.database import DatabaseGateway
from users.infrastructure.user_repository import DbUserRepository


def get_gateway(request: Request) -> DatabaseGateway:
    return request.app.state.gateway


def get_user_repository(
    gateway: DatabaseGateway = Depends(get_gateway),
) -> DbUserRepository:
    return DbUserRepository(gateway)


def get_health_reporter(
    gateway: DatabaseGateway = Depends(get_gateway),
    repo: DbUserRepository = Depends(get_user_repository),
) -> HealthReporter:
    return HealthReporter(gateway, repo)

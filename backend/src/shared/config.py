from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str | None = None

    DB_MAX_OPEN_CONNS: int = 25
    DB_MAX_IDLE_CONNS: int = 5
    DB_CONN_MAX_LIFETIME_SECONDS: int = 300
    DB_POOL_TIMEOUT_SECONDS: float = 30
    DB_COMMAND_TIMEOUT_SECONDS: float = 30
    DB_CONNECT_RETRIES: int = 5
    DB_CONNECT_RETRY_DELAY_SECONDS: float = 2.0

    LOG_DIR: str = "logs"
    LOG_FILE: str = "server.log"
    LOG_LEVEL: str = "INFO"
    LOG_MAX_SIZE_MB: int = 10
    LOG_MAX_BACKUPS: int = 10
    LOG_MAX_AGE_DAYS: int = 30
    LOG_COMPRESSION: str = "gz"

    CORS_ORIGINS: list[str] = ["http://localhost:3000", "http://localhost:8090"]
    HOST: str = "0.0.0.0"
    PORT: int = 8090

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()

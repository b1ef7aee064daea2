class AppError(Exception):
    """Base exception for application errors."""

    def __init__(self, message: str = "An error occurred"):
        self.message = message
        super().__init__(self.message)


class ConfigError(AppError):
    """Raised when required configuration is missing or unusable."""

    def __init__(self, message: str = "Invalid configuration"):
        super().__init__(message)


class ConnectivityError(AppError):
    """Raised when the store stays unreachable after the startup retries."""

    def __init__(self, message: str = "Database is unreachable"):
        super().__init__(message)


class ValidationError(AppError):
    """Raised when a client payload is missing required fields."""

    def __init__(self, message: str = "Invalid request", fields: list[str] | None = None):
        self.fields = fields or []
        super().__init__(message)


class NotFoundError(AppError):
    """Raised when a requested resource does not exist."""

    def __init__(self, resource: str = "Resource", id: str = ""):
        super().__init__(f"{resource} not found: {id}" if id else f"{resource} not found")


class StoreError(AppError):
    """Raised when a SQL statement or the driver fails."""

    def __init__(self, message: str = "Database operation failed"):
        super().__init__(message)

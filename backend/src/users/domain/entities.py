from dataclasses import dataclass, field
from datetime import datetime

REQUIRED_FIELDS = ("first_name", "last_name", "phone", "email")


@dataclass
class User:
    first_name: str
    last_name: str
    phone: str
    email: str
    id: int | None = field(default=None)
    created_at: datetime | None = field(default=None)

    def missing_fields(self) -> list[str]:
        return [name for name in REQUIRED_FIELDS if not getattr(self, name)]

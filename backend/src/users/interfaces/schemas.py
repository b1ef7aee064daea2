from datetime import datetime

from pydantic import BaseModel


class CreateUserRequest(BaseModel):
    # Missing fields decode as empty strings and are reported together by the
    # repository. ``id``/``created_at`` are server-assigned and ignored here.
    first_name: str = ""
    last_name: str = ""
    phone: str = ""
    email: str = ""


class UserResponse(BaseModel):
    id: int
    first_name: str
    last_name: str
    phone: str
    email: str
    created_at: datetime

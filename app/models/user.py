from beanie import Document, Indexed
from pydantic import Field, EmailStr
from typing import Optional, Annotated
from enum import Enum
from datetime import datetime
from uuid import UUID, uuid4


class UserRole(str, Enum):
    ADMIN = "System Administrator"
    OPERATOR = "Store Operator"

class User(Document):
    user_id: UUID = Field(default_factory=uuid4)
    email: Annotated[EmailStr, Indexed(unique=True)]

    first_name: str
    last_name: str
    hashed_password: Optional[str] = None
    role: UserRole = UserRole.OPERATOR
    is_active: bool = True

    created_at: datetime = Field(default_factory=datetime.utcnow)
    last_login: Optional[datetime] = None

    class Settings:
        name = "users"

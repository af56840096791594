"""Domain Entities - Auth"""
from pydantic import BaseModel, ConfigDict, Field
from uuid import UUID, uuid4
from typing import Optional

from domain.enums import Role


class User(BaseModel):
    """Authenticated principal making a request"""
    user_id: UUID = Field(default_factory=uuid4)
    username: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    role: Role = Role.USER
    disabled: bool = False

    model_config = ConfigDict(from_attributes=True)

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


class UserInDB(User):
    """User with hashed password for DB storage"""
    hashed_password: str

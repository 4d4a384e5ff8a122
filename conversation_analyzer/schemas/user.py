# conversation_analyzer/schemas/user.py
from pydantic import BaseModel, ConfigDict


class UserCreate(BaseModel):
    username: str
    password: str


class UserOut(BaseModel):
    """Public view of a user; the password stays in the store."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    username: str

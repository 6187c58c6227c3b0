"""Shop staff accounts referenced by workflow steps."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel

from src.bikeshop.models.base import utc_now


class User(SQLModel, table=True):
    """Staff member. Authentication lives outside this service."""

    __tablename__ = "users"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    username: str = Field(max_length=100, unique=True, index=True)
    firstname: str = Field(max_length=100)
    lastname: str = Field(max_length=100)
    active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=utc_now)

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel

from src.bikeshop.models.base import utc_now


class Customer(SQLModel, table=True):
    __tablename__ = "customers"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    first_name: str = Field(max_length=100)
    last_name: str = Field(max_length=100)
    email: str = Field(max_length=255, index=True)
    phone: str | None = Field(default=None, max_length=50)
    created_at: datetime = Field(default_factory=utc_now)

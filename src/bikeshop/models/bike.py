from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel

from src.bikeshop.models.base import utc_now
from src.bikeshop.models.enums import BikeCondition


class Bike(SQLModel, table=True):
    """Bike in shop inventory. Condition is stored as its string value."""

    __tablename__ = "bikes"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    make: str = Field(max_length=100)
    model: str = Field(max_length=100)
    condition: str = Field(default=BikeCondition.USED.value, max_length=20)
    price: float | None = Field(default=None)
    is_available: bool = Field(default=True)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

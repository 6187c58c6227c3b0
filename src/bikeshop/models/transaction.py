"""Shop transaction - the owner of workflow steps."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel

from src.bikeshop.models.base import utc_now


class Transaction(SQLModel, table=True):
    __tablename__ = "transactions"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    transaction_num: int = Field(unique=True, index=True)
    transaction_type: str = Field(default="retail", max_length=50)
    customer_id: UUID | None = Field(default=None, foreign_key="customers.id", index=True)
    bike_id: UUID | None = Field(default=None, foreign_key="bikes.id")
    total_cost: float = Field(default=0.0)
    is_completed: bool = Field(default=False)
    is_reserved: bool = Field(default=False)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

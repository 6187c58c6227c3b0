"""Denormalized transaction snapshot used to build notifications."""

from uuid import UUID

from pydantic import BaseModel

from src.bikeshop.models.enums import BikeCondition


class BikeSummary(BaseModel):
    make: str
    model: str
    condition: BikeCondition | None = None
    price: float | None = None


class CustomerSummary(BaseModel):
    first_name: str
    last_name: str
    email: str | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class TransactionContext(BaseModel):
    """Transaction plus optional bike and customer, as read at notification time."""

    transaction_id: UUID
    transaction_num: int | None = None
    total_cost: float = 0.0
    is_completed: bool = False
    is_reserved: bool = False
    bike: BikeSummary | None = None
    customer: CustomerSummary | None = None

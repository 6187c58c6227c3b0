"""Reads the transaction snapshot that notifications are rendered from."""

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncEngine
from sqlmodel import select

from src.bikeshop.core.db import get_session
from src.bikeshop.core.exceptions import TransactionNotFound
from src.bikeshop.models.bike import Bike
from src.bikeshop.models.customer import Customer
from src.bikeshop.models.enums import BikeCondition
from src.bikeshop.models.transaction import Transaction
from src.bikeshop.repositories.base import BaseRepository
from src.bikeshop.schemas.transaction import BikeSummary, CustomerSummary, TransactionContext


def _bike_summary(bike: Bike | None) -> BikeSummary | None:
    if bike is None:
        return None
    try:
        condition: BikeCondition | None = BikeCondition(bike.condition)
    except ValueError:
        condition = None
    return BikeSummary(make=bike.make, model=bike.model, condition=condition, price=bike.price)


def _customer_summary(customer: Customer | None) -> CustomerSummary | None:
    if customer is None:
        return None
    return CustomerSummary(
        first_name=customer.first_name,
        last_name=customer.last_name,
        email=customer.email,
    )


class TransactionContextRepository(BaseRepository[Transaction]):
    """Joins a transaction with its bike and customer."""

    model = Transaction

    async def get_context(self, transaction_id: UUID) -> TransactionContext:
        """Load the denormalized snapshot for a transaction.

        Raises:
            TransactionNotFound: If no transaction has this id.
        """
        result = await self.session.execute(
            select(Transaction, Bike, Customer)
            .outerjoin(Bike, Transaction.bike_id == Bike.id)  # type: ignore[arg-type]
            .outerjoin(Customer, Transaction.customer_id == Customer.id)  # type: ignore[arg-type]
            .where(Transaction.id == transaction_id)
        )
        row = result.first()
        if row is None:
            raise TransactionNotFound(transaction_id)

        transaction, bike, customer = row
        return TransactionContext(
            transaction_id=transaction.id,
            transaction_num=transaction.transaction_num,
            total_cost=transaction.total_cost,
            is_completed=transaction.is_completed,
            is_reserved=transaction.is_reserved,
            bike=_bike_summary(bike),
            customer=_customer_summary(customer),
        )


class IsolatedTransactionContextProvider:
    """Context provider that opens its own session for every lookup.

    Notification work runs after the request session is closed, so it cannot
    borrow the request's session.
    """

    def __init__(self, engine: AsyncEngine | None = None):
        self.engine = engine

    async def get_context(self, transaction_id: UUID) -> TransactionContext:
        async with get_session(self.engine) as session:
            return await TransactionContextRepository(session).get_context(transaction_id)

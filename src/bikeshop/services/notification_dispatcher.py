"""Decides which notification, if any, a completed workflow step produces.

Decisions are pure: no I/O, no clock reads beyond stamping the request.
Rules are evaluated in order against the lower-cased step name and the
first match wins.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass

from src.bikeshop.schemas.notification import NotificationKind, NotificationRequest
from src.bikeshop.schemas.transaction import TransactionContext
from src.bikeshop.schemas.workflow import WorkflowStepRead

UNKNOWN_BIKE = "Unknown bike"
UNKNOWN_CUSTOMER = "Unknown customer"
NO_CUSTOMER_ASSIGNED = "No customer assigned"
UNKNOWN_TRANSACTION_NUM = "Unknown"


@dataclass(frozen=True)
class NotificationRule:
    """One row of the decision table.

    `kind=None` means a match suppresses the notification.
    """

    name: str
    matches: Callable[[str], bool]
    kind: NotificationKind | None
    include_bike_condition: bool = False
    missing_customer: str = UNKNOWN_CUSTOMER


def _contains(fragment: str) -> Callable[[str], bool]:
    return lambda step_name: fragment in step_name


def _equals(value: str) -> Callable[[str], bool]:
    return lambda step_name: step_name == value


def _one_of(values: frozenset[str]) -> Callable[[str], bool]:
    return lambda step_name: step_name in values


# Routine steps that carry no signal for the shop channel.
SILENT_STEPS = frozenset({"creation"})

DEFAULT_RULES: tuple[NotificationRule, ...] = (
    NotificationRule(
        name="build",
        matches=_contains("build"),
        kind=NotificationKind.BUILD_COMPLETE,
        include_bike_condition=True,
        missing_customer=NO_CUSTOMER_ASSIGNED,
    ),
    NotificationRule(
        name="reservation",
        matches=_contains("reserv"),
        kind=NotificationKind.RESERVATION_COMPLETE,
    ),
    NotificationRule(
        name="checkout",
        matches=_equals("checkout"),
        kind=NotificationKind.SALE_COMPLETE,
    ),
    NotificationRule(
        name="silent",
        matches=_one_of(SILENT_STEPS),
        kind=None,
    ),
    NotificationRule(
        name="generic",
        matches=lambda step_name: True,
        kind=NotificationKind.STEP_COMPLETE,
    ),
)


def format_bike(context: TransactionContext, include_condition: bool = False) -> str:
    bike = context.bike
    if bike is None:
        return UNKNOWN_BIKE
    summary = f"{bike.make} {bike.model}".strip()
    if not summary:
        return UNKNOWN_BIKE
    if include_condition and bike.condition is not None:
        summary = f"{summary} ({bike.condition.value})"
    return summary


def format_customer(context: TransactionContext, missing: str = UNKNOWN_CUSTOMER) -> str:
    customer = context.customer
    if customer is None:
        return missing
    return customer.full_name or missing


def format_transaction_num(context: TransactionContext) -> str:
    if context.transaction_num is None:
        return UNKNOWN_TRANSACTION_NUM
    return str(context.transaction_num)


class NotificationDispatcher:
    """Maps a completed step and its transaction context to a notification."""

    def __init__(self, rules: Sequence[NotificationRule] = DEFAULT_RULES):
        self.rules = tuple(rules)

    def match(self, step_name: str) -> NotificationRule | None:
        """Return the first rule matching the step name, if any."""
        normalized = step_name.strip().lower()
        for rule in self.rules:
            if rule.matches(normalized):
                return rule
        return None

    def decide(
        self, step: WorkflowStepRead, context: TransactionContext
    ) -> NotificationRequest | None:
        """Build the notification for a completed step, or None.

        Pending steps never produce a notification.
        """
        if not step.is_completed:
            return None

        rule = self.match(step.step_name)
        if rule is None or rule.kind is None:
            return None

        return NotificationRequest(
            kind=rule.kind,
            transaction_id=context.transaction_id,
            transaction_num=format_transaction_num(context),
            step_name=step.step_name,
            bike_summary=format_bike(context, include_condition=rule.include_bike_condition),
            customer_summary=format_customer(context, missing=rule.missing_customer),
            total_cost=context.total_cost,
        )

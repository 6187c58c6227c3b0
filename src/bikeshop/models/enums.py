"""Shared enums for models."""

from enum import Enum


class WorkflowType(str, Enum):
    """Business processes that can be attached to a transaction."""

    BIKE_SALES = "bike_sales"
    REPAIR_PROCESS = "repair_process"


class BikeCondition(str, Enum):
    NEW = "New"
    REFURBISHED = "Refurbished"
    USED = "Used"

"""Aggregate statistics over an owner's repair orders."""

from decimal import Decimal

from pydantic import BaseModel, Field

from core.models.repair_order import RepairOrderStatus


class OrderStatistics(BaseModel):
    """Summary metrics computed over the full order collection."""

    order_count: int = Field(..., ge=0)
    total_cost: Decimal
    average_cost: Decimal
    status_counts: dict[RepairOrderStatus, int]

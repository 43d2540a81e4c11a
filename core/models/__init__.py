"""Core domain models."""

from core.models.repair_order import (
    DEVICE_BRANDS,
    DeviceCondition,
    RepairOrder,
    RepairOrderCreate,
    RepairOrderStatus,
    RepairOrderUpdate,
    TrackedOrderView,
)
from core.models.statistics import OrderStatistics

__all__ = [
    # RepairOrder
    "RepairOrder", "RepairOrderCreate", "RepairOrderUpdate", "RepairOrderStatus",
    "DeviceCondition", "DEVICE_BRANDS", "TrackedOrderView",
    # Statistics
    "OrderStatistics",
]

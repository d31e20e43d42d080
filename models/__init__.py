"""
Models package
Pydantic models and dataclasses for reseller portal data
"""

from models.types import UpdateResult, AckStatus, Session, Acknowledgment
from models.reseller import (
    StorageStats,
    UsageStats,
    DirectoryEntry,
    PlanPowerUserData,
    UsageStat,
    Customer,
    Plan,
    CustomerUpdate,
    UpdateResponse,
)

__all__ = [
    'UpdateResult',
    'AckStatus',
    'Session',
    'Acknowledgment',
    'StorageStats',
    'UsageStats',
    'DirectoryEntry',
    'PlanPowerUserData',
    'UsageStat',
    'Customer',
    'Plan',
    'CustomerUpdate',
    'UpdateResponse',
]

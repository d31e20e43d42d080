"""
Reseller Models
Pydantic models for reseller portal responses and the entities built from them
"""

from typing import Optional, Dict, Any, List, Union
from pydantic import BaseModel, computed_field

from models.types import UpdateResult


# ==================== Raw Upstream Models ====================

class StorageStats(BaseModel):
    """Usage counters as reported by the portal (seats or storage)"""
    Used: Union[int, float] = 0
    Unused: Union[int, float] = 0
    Available: Union[int, float] = 0


class UsageStats(BaseModel):
    """Per-tenant usage record from /msp/usage_stats"""
    power_user_stats: Optional[StorageStats] = None
    storage_stats: Optional[StorageStats] = None
    feature_stats: Dict[str, Any] = {}


class DirectoryEntry(BaseModel):
    """One row of /msp/customer_data"""
    domain: Optional[str] = None
    plan_id: Union[int, str]
    status: Optional[str] = None

    def is_deleted(self) -> bool:
        return self.status == 'deleted'


class PlanPowerUserData(BaseModel):
    """Purchased seat data from /msp/get_plan_pu_data"""
    purchased: Optional[int] = None


# ==================== Entities ====================

class UsageStat(BaseModel):
    """
    Normalized usage of one resource

    total is always used + free; available is the upstream ceiling on how much
    more can be assigned from the plan's pool.
    """
    used: Union[int, float]
    available: Union[int, float]
    free: Union[int, float]

    @computed_field
    @property
    def total(self) -> Union[int, float]:
        return self.used + self.free

    @classmethod
    def from_stats(cls, stats: Optional[StorageStats]) -> 'UsageStat':
        """
        Build from raw upstream counters

        Args:
            stats: Raw {Used, Unused, Available} counters (missing counts as zero)

        Returns:
            UsageStat
        """
        stats = stats or StorageStats()
        return cls(used=stats.Used, available=stats.Available, free=stats.Unused)

    def with_total(self, total: Union[int, float]) -> 'UsageStat':
        """Copy with a new total, keeping used fixed"""
        return UsageStat(used=self.used, available=self.available, free=total - self.used)


class Customer(BaseModel):
    """Customer tenant with its seat and storage usage"""
    customer_id: str
    plan_id: str
    power_users: UsageStat
    storage_gb: UsageStat
    features: Dict[str, Any] = {}


class Plan(BaseModel):
    """Billing plan and its unassigned pool"""
    plan_id: str
    total_power_users: Optional[int] = None
    used_power_users: Optional[Union[int, float]] = None
    available_power_users: Optional[Union[int, float]] = None
    available_storage: Optional[Union[int, float]] = None
    customers: List[str] = []


class CustomerUpdate(BaseModel):
    """Desired state for update_customer; unset fields are left alone"""
    power_users: Optional[int] = None
    storage_gb: Optional[int] = None


class UpdateResponse(BaseModel):
    """Result of a license update that did not raise"""
    result: UpdateResult
    message: str

    def is_success(self) -> bool:
        """
        Check whether the update was applied

        Returns:
            bool: True for SUCCESS, False for NO_CHANGE
        """
        return self.result is UpdateResult.SUCCESS

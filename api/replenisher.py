"""
Pool Replenisher
Buys plan-level seats before a customer increase that the pool cannot cover
"""

import math
from typing import Optional

from api.config import APIConfig
from api.plans import PlansAPI
from models.reseller import Plan


class PoolReplenisher:
    """
    Tops up a plan's unassigned seat pool in billing packs

    Every top-up is a purchase on the reseller's account.
    """

    def __init__(self, plans: PlansAPI, pack_size: int = APIConfig.LICENSE_PACK_SIZE):
        self.plans = plans
        self.pack_size = pack_size
        self.logger = plans.logger

    def seats_to_purchase(self, seats_needed: int, available: int) -> int:
        """
        Shortfall rounded up to whole packs

        Example:
            >>> PoolReplenisher(plans).seats_to_purchase(7, 1)
            10
        """
        shortfall = seats_needed - available
        if shortfall <= 0:
            return 0
        return math.ceil(shortfall / self.pack_size) * self.pack_size

    def ensure_capacity(self, plan_id: str, seats_needed: int, available: int) -> Optional[Plan]:
        """
        Make sure the plan pool can cover seats_needed

        Args:
            plan_id: Plan of the customer being increased
            seats_needed: Seats the customer update will take from the pool
            available: Seats currently unassigned in the pool

        Returns:
            Plan: The plan after the purchase, or None when nothing was bought

        Raises:
            PlanNotFound: If the plan id is unknown to the account
            UpdateRejected: If the portal refused the purchase
        """
        to_add = self.seats_to_purchase(seats_needed, available)
        if to_add == 0:
            return None

        plan = self.plans.get_plan(plan_id)
        new_total = (plan.total_power_users or 0) + to_add

        self.logger.warning(
            f"Pool of plan {plan_id} has {available} seat(s) for {seats_needed} needed; "
            f"purchasing {to_add} more (total {new_total})"
        )
        return self.plans.update_power_user_licensing(plan_id, new_total)

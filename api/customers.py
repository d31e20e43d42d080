"""
Customers API Client
Reads customer tenants and changes their seat and storage licensing
"""

import time
from typing import Optional, List, Union, Dict, Any

import requests
from pydantic import ValidationError

from api.acknowledgments import classify_acknowledgment
from api.config import APIConfig
from api.errors import ResellerAPIError, CustomerNotFound, InsufficientPoolCapacity, UpdateRejected
from api.plans import PlansAPI, split_usage_record
from api.replenisher import PoolReplenisher
from api.session import SessionAuthenticator
from models.reseller import Customer, CustomerUpdate, StorageStats, UpdateResponse, UsageStat
from models.types import AckStatus, Session, UpdateResult
from utils.features import process_features


class CustomersAPI:
    """
    Customer reads and per-customer license updates

    Every update starts from a fresh read and logs in again before the
    mutating request. Nothing is cached between calls except the account id
    held by the authenticator.
    """

    def __init__(self, auth: SessionAuthenticator, plans: PlansAPI, replenisher: PoolReplenisher):
        """
        Initialize the customers client

        Args:
            auth: Shared session authenticator
            plans: Plans client used for plan ids, usage records and pool figures
            replenisher: Buys pool seats when auto_add_to_pool is requested
        """
        self.auth = auth
        self.http = auth.http
        self.config = auth.config
        self.plans = plans
        self.replenisher = replenisher
        self.logger = auth.http.logger

    # ==================== Reads ====================

    def backoff_delay_ms(self, processed: int) -> float:
        """
        Pause after the n-th plan read: grows by 1.5x per plan, capped at 10s

        Args:
            processed: Number of plans read so far (1-based)

        Returns:
            float: Delay in milliseconds
        """
        base = self.config.backoff_delay_ms
        if base is None:
            base = APIConfig.DEFAULT_BACKOFF_DELAY_MS
        delay = base * APIConfig.BACKOFF_MULTIPLIER ** (processed - 1)
        return min(delay, APIConfig.MAX_BACKOFF_MS)

    @staticmethod
    def _build_customers(plan_id: str, records: List[Dict[str, Any]]) -> List[Customer]:
        customers = []
        for record in records:
            entry = split_usage_record(record)
            if entry is None:
                continue
            tenant_key, stats = entry
            customers.append(Customer(
                customer_id=tenant_key.lower(),
                plan_id=plan_id,
                power_users=UsageStat.from_stats(stats.power_user_stats),
                storage_gb=UsageStat.from_stats(stats.storage_stats),
                features=process_features(stats.feature_stats),
            ))
        return customers

    def list_customers(self, session: Optional[Session] = None) -> List[Customer]:
        """
        Get every customer on every plan

        Plans are read one at a time with a growing pause between them to
        stay under the portal's rate limit. A plan that fails to load is
        logged and skipped, so the result may be partial.

        Args:
            session: Active session (authenticates when omitted)

        Returns:
            list: Customer models

        Example:
            >>> api = ResellerAPI(config)
            >>> customers = api.get_all_customers()
            >>> customers[0].power_users.total
            25
        """
        session = session or self.auth.authenticate()
        plan_ids = self.plans.list_plan_ids(session)

        customers = []
        for processed, plan_id in enumerate(plan_ids, start=1):
            try:
                records = self.plans.get_usage_records(session, plan_id)
                customers.extend(self._build_customers(plan_id, records))
            except (ResellerAPIError, ValidationError, requests.exceptions.RequestException) as e:
                self.logger.warning(f"Skipping plan {plan_id}: {str(e)}")

            if processed < len(plan_ids):
                time.sleep(self.backoff_delay_ms(processed) / 1000)

        self.logger.info(f"Retrieved {len(customers)} customer(s) across {len(plan_ids)} plan(s)")
        return customers

    def get_one_customer(self, customer_id: str, session: Optional[Session] = None) -> Customer:
        """
        Get one customer by its (lowercase) tenant id

        Raises:
            CustomerNotFound: If no plan lists the customer
        """
        for customer in self.list_customers(session):
            if customer.customer_id == customer_id:
                return customer
        self.logger.error(f"Customer not found: {customer_id}")
        raise CustomerNotFound(customer_id)

    def get_customer_protect_plan_usage(self, tenant_id: str) -> Optional[StorageStats]:
        """
        Get a tenant's storage usage on the protect add-on plan

        Args:
            tenant_id: Tenant id in any case

        Returns:
            StorageStats: The tenant's storage counters, or None when the tenant
            has no protect entry

        Raises:
            ConfigurationError: If no protect_plan_id is configured
        """
        key = f"protect{tenant_id.lower()}"
        for record in self.plans.list_protect_plans():
            if not isinstance(record, dict) or not record:
                continue
            record_key, stats = next(iter(record.items()))
            if record_key != key:
                continue
            storage_stats = (stats or {}).get('storage_stats')
            if storage_stats is None:
                return None
            return StorageStats(**storage_stats)
        return None

    # ==================== Updates ====================

    def _pool_available(self, customer: Customer) -> Union[int, float]:
        """Seats the customer's plan pool can hand out, read fresh from that plan"""
        session = self.auth.authenticate()
        available = self.plans.get_available_power_users(session, customer.plan_id)
        if available is None:
            return customer.power_users.available
        return available

    def update_customer_power_users(
        self,
        customer_id: str,
        num_users: int,
        auto_add_to_pool: bool = False
    ) -> UpdateResponse:
        """
        Set a customer's power user total

        API Endpoint: POST /msp/change_power_users/{account_id}/

        Args:
            customer_id: Tenant id (any case)
            num_users: Desired power user total
            auto_add_to_pool: Buy plan seats (in packs of 5) when the pool is short

        Returns:
            UpdateResponse: SUCCESS, or NO_CHANGE when already set or when the
            value is below the seats in use and force_license_change is off

        Raises:
            CustomerNotFound: Unknown customer
            InsufficientPoolCapacity: Increase exceeds the pool and auto_add_to_pool is off
            UpdateRejected: Portal refused the change

        Example:
            >>> api = ResellerAPI(config)
            >>> api.update_customer_power_users('acme', 30).result
            <UpdateResult.SUCCESS: 'SUCCESS'>
        """
        customer_id = customer_id.lower()
        customer = self.get_one_customer(customer_id)
        current = customer.power_users

        if num_users == current.total:
            return UpdateResponse(
                result=UpdateResult.NO_CHANGE,
                message=f"customerId {customer_id} is already set to {num_users} power users. Did not modify.",
            )

        if num_users < current.used and not self.config.force_license_change:
            return UpdateResponse(
                result=UpdateResult.NO_CHANGE,
                message=(
                    f"customerId {customer_id} currently has {current.used} power users in use. "
                    f"Refusing to set to {num_users} power users."
                ),
            )

        needed = num_users - current.total
        if needed > 0:
            available = self._pool_available(customer)
            if available < needed:
                if not auto_add_to_pool:
                    self.logger.error(f"Plan {customer.plan_id} pool has {available} seat(s), {needed} needed")
                    raise InsufficientPoolCapacity(needed, available)
                self.replenisher.ensure_capacity(customer.plan_id, needed, available)

        session = self.auth.authenticate()
        endpoint = APIConfig.CHANGE_POWER_USERS_ENDPOINT.format(account_id=session.account_id)
        self.logger.info(f"Changing power users of {customer_id} from {current.total} to {num_users}")
        response = self.http.post(
            endpoint,
            json_data={'domain': customer_id, 'power_users': str(num_users)},
            headers=self.auth.session_headers(session, mutating=True),
        )

        ack = classify_acknowledgment(response, allow_soft_success=self.config.force_license_change)
        if ack.status is AckStatus.NO_CHANGE:
            return UpdateResponse(
                result=UpdateResult.NO_CHANGE,
                message=f"customerId {customer_id} is already set to {num_users} power users. Did not modify.",
            )
        if ack.status is AckStatus.ERROR:
            self.logger.error(f"Power user change for {customer_id} rejected: {ack.message}")
            raise UpdateRejected(ack.message, ack.status_code)

        message = f"Updated customerId {customer_id} from {current.total} to {num_users} power users successfully"
        if ack.forced:
            message = f"{message} with force option"
        return UpdateResponse(result=UpdateResult.SUCCESS, message=f"{message}.")

    def update_customer_storage(self, customer_id: str, storage_gb: int) -> UpdateResponse:
        """
        Set a customer's storage allocation in GB

        Storage is never reduced below what is in use; force_license_change
        does not apply here.

        API Endpoint: POST /msp/change_storage/{account_id}/

        Args:
            customer_id: Tenant id (any case)
            storage_gb: Desired storage total in GB

        Returns:
            UpdateResponse: SUCCESS or NO_CHANGE

        Raises:
            CustomerNotFound: Unknown customer
            UpdateRejected: Portal refused the change
        """
        customer_id = customer_id.lower()
        customer = self.get_one_customer(customer_id)
        current = customer.storage_gb

        if storage_gb == current.total:
            return UpdateResponse(
                result=UpdateResult.NO_CHANGE,
                message=f"customerId {customer_id} is already set to {storage_gb}GB storage. Did not modify.",
            )

        if storage_gb < current.used:
            return UpdateResponse(
                result=UpdateResult.NO_CHANGE,
                message=(
                    f"customerId {customer_id} currently has {current.used}GB storage in use. "
                    f"Refusing to set to {storage_gb}GB storage."
                ),
            )

        session = self.auth.authenticate()
        endpoint = APIConfig.CHANGE_STORAGE_ENDPOINT.format(account_id=session.account_id)
        self.logger.info(f"Changing storage of {customer_id} from {current.total}GB to {storage_gb}GB")
        response = self.http.post(
            endpoint,
            json_data={'domain': customer_id, 'storage': str(storage_gb)},
            headers=self.auth.session_headers(session, mutating=True),
        )

        ack = classify_acknowledgment(response)
        if ack.status is AckStatus.NO_CHANGE:
            return UpdateResponse(
                result=UpdateResult.NO_CHANGE,
                message=f"customerId {customer_id} is already set to {storage_gb}GB storage. Did not modify.",
            )
        if ack.status is AckStatus.ERROR:
            self.logger.error(f"Storage change for {customer_id} rejected: {ack.message}")
            raise UpdateRejected(ack.message, ack.status_code)

        return UpdateResponse(
            result=UpdateResult.SUCCESS,
            message=f"Updated customerId {customer_id} from {current.total}GB to {storage_gb}GB storage successfully.",
        )

    def update_customer(self, customer_id: str, update: Union[CustomerUpdate, Dict[str, Any]]) -> Customer:
        """
        Move a customer to a desired seat and storage state

        Only fields that are set and differ from the current values are sent.

        Args:
            customer_id: Tenant id (any case)
            update: CustomerUpdate or a dict with power_users / storage_gb

        Returns:
            Customer: The snapshot with applied totals (free = total - used)
        """
        if isinstance(update, dict):
            update = CustomerUpdate(**update)

        customer_id = customer_id.lower()
        customer = self.get_one_customer(customer_id)

        if update.power_users is not None and update.power_users != customer.power_users.total:
            result = self.update_customer_power_users(customer_id, update.power_users)
            if result.is_success():
                customer = customer.model_copy(
                    update={'power_users': customer.power_users.with_total(update.power_users)}
                )
            else:
                self.logger.info(result.message)

        if update.storage_gb is not None and update.storage_gb != customer.storage_gb.total:
            result = self.update_customer_storage(customer_id, update.storage_gb)
            if result.is_success():
                customer = customer.model_copy(
                    update={'storage_gb': customer.storage_gb.with_total(update.storage_gb)}
                )
            else:
                self.logger.info(result.message)

        return customer

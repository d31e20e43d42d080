"""
Reseller API Client
Public entry point for the reseller portal: customers, plans and licensing
"""

from typing import Optional, Dict, Any, List, Union

from api.base_client import BaseAPIClient
from api.config import ResellerConfig
from api.customers import CustomersAPI
from api.plans import PlansAPI
from api.replenisher import PoolReplenisher
from api.session import SessionAuthenticator
from models.reseller import Customer, CustomerUpdate, Plan, StorageStats, UpdateResponse
from models.types import Session


class ResellerAPI:
    """
    Reseller portal client for:
    - Authentication (login form, session cookie, account id)
    - Customer seat and storage reads and updates
    - Plan pool reads and seat purchases
    - Protect add-on usage

    One transport and one authenticator are built here and shared by every
    feature-area client, so all of them act on the same session state.
    """

    def __init__(self, config: Optional[ResellerConfig] = None, **kwargs):
        """
        Initialize the reseller API client

        Args:
            config: Client configuration. When omitted, keyword arguments are
                passed to ResellerConfig (username, password, timeout_ms, ...)

        Raises:
            ConfigurationError: If username or password is missing

        Example:
            >>> api = ResellerAPI(username='reseller@example.com', password='secret')
            >>> api = ResellerAPI(ResellerConfig.from_env())
        """
        self.config = config or ResellerConfig(**kwargs)
        self.http = BaseAPIClient(base_url=self.config.base_url, timeout_ms=self.config.timeout_ms)
        self.logger = self.http.logger

        self.auth = SessionAuthenticator(self.http, self.config)
        self.plans = PlansAPI(self.auth)
        self.replenisher = PoolReplenisher(self.plans)
        self.customers = CustomersAPI(self.auth, self.plans, self.replenisher)
        self.logger.info("ResellerAPI client initialized")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def close(self):
        """Close the underlying HTTP session"""
        self.http.close()

    @property
    def account_id(self) -> Optional[str]:
        """Reseller account id, once discovered"""
        return self.auth.account_id

    # ==================== Session ====================

    def authenticate(self) -> Session:
        """
        Log in and return a fresh session

        API Endpoint: GET/POST /accounts/login/, GET /customer/browse/
        """
        return self.auth.authenticate()

    # ==================== Customers ====================

    def get_all_customers(self) -> List[Customer]:
        """
        Get every customer with seat, storage and feature usage

        Returns:
            list: Customer models (partial if some plans failed to load)
        """
        return self.customers.list_customers()

    def get_one_customer(self, customer_id: str) -> Customer:
        """
        Get one customer by tenant id

        Raises:
            CustomerNotFound: If no plan lists the customer
        """
        return self.customers.get_one_customer(customer_id)

    def update_customer(self, customer_id: str, update: Union[CustomerUpdate, Dict[str, Any]]) -> Customer:
        """
        Move a customer to a desired state, e.g. {'power_users': 30, 'storage_gb': 500}

        Returns:
            Customer: Snapshot with the applied totals
        """
        return self.customers.update_customer(customer_id, update)

    def update_customer_power_users(
        self,
        customer_id: str,
        num_users: int,
        auto_add_to_pool: bool = False
    ) -> UpdateResponse:
        """
        Set a customer's power user total

        Args:
            customer_id: Tenant id (any case)
            num_users: Desired total
            auto_add_to_pool: Purchase plan seats in packs of 5 if the pool is short.
                This changes the reseller's bill.

        Returns:
            UpdateResponse: SUCCESS or NO_CHANGE
        """
        return self.customers.update_customer_power_users(customer_id, num_users, auto_add_to_pool)

    def update_customer_storage(self, customer_id: str, storage_gb: int) -> UpdateResponse:
        """
        Set a customer's storage allocation in GB

        Returns:
            UpdateResponse: SUCCESS or NO_CHANGE
        """
        return self.customers.update_customer_storage(customer_id, storage_gb)

    def get_customer_protect_plan_usage(self, tenant_id: str) -> Optional[StorageStats]:
        """
        Get a tenant's protect add-on storage usage

        Returns:
            StorageStats or None if the tenant has no protect entry
        """
        return self.customers.get_customer_protect_plan_usage(tenant_id)

    # ==================== Plans ====================

    def get_plans(self) -> List[Plan]:
        """Get every plan with its purchased, used and available pool figures"""
        return self.plans.list_plans()

    def get_plan(self, plan_id: str) -> Plan:
        """
        Get one plan by id

        Raises:
            PlanNotFound: If the account has no such plan
        """
        return self.plans.get_plan(plan_id)

    def get_all_protect_plans(self) -> List[Dict[str, Any]]:
        """Get the raw usage records of the configured protect plan"""
        return self.plans.list_protect_plans()

    def update_power_user_licensing(self, plan_id: str, new_total: int) -> Plan:
        """
        Change a plan's purchased power user total (billing change, packs of 5)

        Returns:
            Plan: The plan after the change
        """
        return self.plans.update_power_user_licensing(plan_id, new_total)

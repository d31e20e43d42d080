"""
Plans API Client
Reads plan ids, plan pools and usage records, and changes a plan's seat pool
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Dict, Any, List, Tuple, Union

from api.acknowledgments import classify_acknowledgment, SUCCESS_ON_FLAG
from api.base_client import APIResponse
from api.config import APIConfig
from api.errors import PlanNotFound, UpdateRejected, UnexpectedResponse, ConfigurationError
from api.session import SessionAuthenticator
from models.reseller import DirectoryEntry, Plan, PlanPowerUserData, UsageStats
from models.types import Session, AckStatus


def split_usage_record(record: Dict[str, Any]) -> Optional[Tuple[str, UsageStats]]:
    """
    Unpack a single-key usage record into (tenant key, stats)

    Args:
        record: {'<tenant key>': {power_user_stats, storage_stats, feature_stats}}

    Returns:
        tuple: (tenant key, UsageStats), or None for an empty record
    """
    if not isinstance(record, dict) or not record:
        return None
    key, stats = next(iter(record.items()))
    return key, UsageStats(**(stats or {}))


class PlansAPI:
    """
    Plan-level reads and the plan seat pool update

    Shares the transport and authenticator of the owning ResellerAPI.
    """

    def __init__(self, auth: SessionAuthenticator):
        """
        Initialize the plans client

        Args:
            auth: Shared session authenticator (and through it, the transport)
        """
        self.auth = auth
        self.http = auth.http
        self.config = auth.config
        self.logger = auth.http.logger

    def _read(self, endpoint: str, session: Session) -> APIResponse:
        """GET a JSON read endpoint, raising UnexpectedResponse on failure"""
        response = self.http.get(endpoint, headers=self.auth.session_headers(session))
        if not response.is_ok() or response.json_data is None:
            raise UnexpectedResponse(endpoint, response.status_code, response.message)
        return response

    # ==================== Reads ====================

    def list_plan_ids(self, session: Session) -> List[str]:
        """
        Get the unique plan ids of the account's non-deleted customers

        API Endpoint: GET /msp/customer_data/{account_id}

        Args:
            session: Active session

        Returns:
            list: Plan ids as strings, first-seen order
        """
        account_id = self.auth.resolve_account_id(session.session_cookie)
        endpoint = APIConfig.CUSTOMER_DATA_ENDPOINT.format(account_id=account_id)
        response = self._read(endpoint, session)

        plan_ids = []
        for row in response.json_data:
            entry = DirectoryEntry(**row)
            if entry.is_deleted():
                continue
            plan_id = str(entry.plan_id)
            if plan_id not in plan_ids:
                plan_ids.append(plan_id)

        self.logger.info(f"Found {len(plan_ids)} plan(s)")
        return plan_ids

    def get_usage_records(self, session: Session, plan_id: str) -> List[Dict[str, Any]]:
        """
        Get the raw per-tenant usage records of one plan

        API Endpoint: GET /msp/usage_stats/{account_id}/{plan_id}/

        Args:
            session: Active session
            plan_id: Plan id

        Returns:
            list: Single-key records, one per tenant
        """
        endpoint = APIConfig.USAGE_STATS_ENDPOINT.format(account_id=session.account_id, plan_id=plan_id)
        records = self._read(endpoint, session).json_data
        if not isinstance(records, list):
            raise UnexpectedResponse(endpoint, detail='expected a list of usage records')
        return records

    def get_plan_power_user_data(self, session: Session, plan_id: str) -> PlanPowerUserData:
        """
        Get the purchased seat count of one plan

        API Endpoint: GET /msp/get_plan_pu_data/{account_id}/{plan_id}/
        """
        endpoint = APIConfig.PLAN_PU_DATA_ENDPOINT.format(account_id=session.account_id, plan_id=plan_id)
        data = self._read(endpoint, session).json_data
        if not isinstance(data, dict):
            return PlanPowerUserData()
        return PlanPowerUserData(**data)

    @staticmethod
    def _build_plan(plan_id: str, records: List[Dict[str, Any]], pu_data: PlanPowerUserData) -> Plan:
        """Assemble a Plan; missing upstream figures stay None"""
        entries = [split_usage_record(record) for record in records]
        entries = [entry for entry in entries if entry is not None]

        available_power_users = None
        available_storage = None
        if entries:
            stats = entries[0][1]
            if stats.power_user_stats is not None:
                available_power_users = stats.power_user_stats.Available
            if stats.storage_stats is not None:
                available_storage = stats.storage_stats.Available

        used_power_users = None
        if pu_data.purchased and available_power_users is not None:
            used_power_users = pu_data.purchased - available_power_users

        return Plan(
            plan_id=plan_id,
            total_power_users=pu_data.purchased,
            used_power_users=used_power_users,
            available_power_users=available_power_users,
            available_storage=available_storage,
            customers=[key for key, _ in entries],
        )

    def list_plans(self, session: Optional[Session] = None) -> List[Plan]:
        """
        Get every plan with its pool figures

        Plans are fetched in parallel; for each plan the usage records and the
        purchased seat data are fetched concurrently as well.

        Args:
            session: Active session (authenticates when omitted)

        Returns:
            list: Plan models, in plan id order

        Example:
            >>> api = ResellerAPI(config)
            >>> for plan in api.get_plans():
            ...     print(plan.plan_id, plan.available_power_users)
        """
        session = session or self.auth.authenticate()
        plan_ids = self.list_plan_ids(session)
        if not plan_ids:
            return []

        workers = min(APIConfig.MAX_PARALLEL_PLANS, len(plan_ids) * 2)
        with ThreadPoolExecutor(max_workers=workers) as executor:
            usage = {pid: executor.submit(self.get_usage_records, session, pid) for pid in plan_ids}
            purchased = {pid: executor.submit(self.get_plan_power_user_data, session, pid) for pid in plan_ids}
            plans = [
                self._build_plan(pid, usage[pid].result(), purchased[pid].result())
                for pid in plan_ids
            ]

        self.logger.info(f"Retrieved {len(plans)} plan(s)")
        return plans

    def get_plan(self, plan_id: str, session: Optional[Session] = None) -> Plan:
        """
        Get one plan by id

        Raises:
            PlanNotFound: If the account has no such plan
        """
        plan_id = str(plan_id)
        for plan in self.list_plans(session):
            if plan.plan_id == plan_id:
                return plan
        self.logger.error(f"Plan not found: {plan_id}")
        raise PlanNotFound(plan_id)

    def get_available_power_users(self, session: Session, plan_id: str) -> Optional[Union[int, float]]:
        """
        Unassigned seats in one plan's pool

        Reads only that plan's usage records, so other plans on the account
        cannot block the lookup.

        Args:
            session: Active session
            plan_id: Plan id

        Returns:
            Available seats from the first usage record, or None when the plan
            has no records
        """
        plan_id = str(plan_id)
        records = self.get_usage_records(session, plan_id)
        return self._build_plan(plan_id, records, PlanPowerUserData()).available_power_users

    def list_protect_plans(self, session: Optional[Session] = None) -> List[Dict[str, Any]]:
        """
        Get the raw usage records of the configured protect plan

        Raises:
            ConfigurationError: If no protect_plan_id is configured
        """
        if not self.config.protect_plan_id:
            raise ConfigurationError('protect_plan_id is not configured')
        session = session or self.auth.authenticate()
        return self.get_usage_records(session, str(self.config.protect_plan_id))

    # ==================== Mutations ====================

    def update_power_user_licensing(self, plan_id: str, new_total: int) -> Plan:
        """
        Change a plan's purchased seat pool

        This is a billing change. Seats are sold in packs of 5, so new_total
        should be a multiple of 5 (see get_plans for the current total).

        API Endpoint: POST /msp/change_plan_power_users/{account_id}/

        Args:
            plan_id: Plan to change
            new_total: New purchased seat total

        Returns:
            Plan: The plan re-read after the change

        Raises:
            UpdateRejected: If the portal did not answer success: true
        """
        plan_id = str(plan_id)
        session = self.auth.authenticate()
        endpoint = APIConfig.CHANGE_PLAN_POWER_USERS_ENDPOINT.format(account_id=session.account_id)

        self.logger.warning(f"Changing purchased power users of plan {plan_id} to {new_total}")
        response = self.http.post(
            endpoint,
            json_data={'plan_id': plan_id, 'plan_power_users': str(new_total)},
            headers=self.auth.session_headers(session, mutating=True),
        )

        ack = classify_acknowledgment(response, success_on=SUCCESS_ON_FLAG)
        if ack.status is not AckStatus.SUCCESS:
            message = ack.message or 'Unknown error updating plan power users'
            self.logger.error(f"Plan {plan_id} update rejected: {message}")
            raise UpdateRejected(message, response.status_code)

        self.logger.info(f"Plan {plan_id} now has {new_total} purchased power users")
        return self.get_plan(plan_id, session)

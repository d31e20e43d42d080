"""
API Configuration Module
Manages environment variables and reseller portal endpoints
"""

import os
import re
from dataclasses import dataclass, field
from typing import Any, Optional
from dotenv import load_dotenv

from api.errors import ConfigurationError

# Load environment variables from .env file if it exists
load_dotenv()


class APIConfig:
    """Configuration class for reseller portal endpoints and settings"""

    # Reseller portal base URL
    BASE_URL = os.getenv('RESELLER_BASE_URL', 'https://resellers.egnyte.com')

    # Credentials (only used by ResellerConfig.from_env)
    USERNAME = os.getenv('RESELLER_USERNAME', '')
    PASSWORD = os.getenv('RESELLER_PASSWORD', '')

    # Plan that holds the protect add-on tenants
    PROTECT_PLAN_ID = os.getenv('RESELLER_PROTECT_PLAN_ID')

    # Allow reducing seats below the in-use count
    FORCE_LICENSE_CHANGE = os.getenv('RESELLER_FORCE_LICENSE_CHANGE', 'false').lower() in ('1', 'true', 'yes')

    # Request timeout settings (in milliseconds)
    DEFAULT_TIMEOUT_MS = 20000
    TIMEOUT_MS = os.getenv('RESELLER_TIMEOUT_MS')

    # Pacing between per-plan reads (in milliseconds)
    DEFAULT_BACKOFF_DELAY_MS = int(os.getenv('RESELLER_BACKOFF_DELAY_MS', '1000'))
    MAX_BACKOFF_MS = 10000
    BACKOFF_MULTIPLIER = 1.5

    # Seats are billed in packs of this size
    LICENSE_PACK_SIZE = 5

    # Upper bound of concurrent plan reads in get_plans
    MAX_PARALLEL_PLANS = 8

    # Upstream endpoints
    LOGIN_ENDPOINT = '/accounts/login/'
    BROWSE_ENDPOINT = '/customer/browse/'
    CUSTOMER_DATA_ENDPOINT = '/msp/customer_data/{account_id}'
    USAGE_STATS_ENDPOINT = '/msp/usage_stats/{account_id}/{plan_id}/'
    PLAN_PU_DATA_ENDPOINT = '/msp/get_plan_pu_data/{account_id}/{plan_id}/'
    CHANGE_POWER_USERS_ENDPOINT = '/msp/change_power_users/{account_id}/'
    CHANGE_STORAGE_ENDPOINT = '/msp/change_storage/{account_id}/'
    CHANGE_PLAN_POWER_USERS_ENDPOINT = '/msp/change_plan_power_users/{account_id}/'

    @classmethod
    def parse_timeout_ms(cls, value=None) -> int:
        """
        Parse a timeout the lenient way: take the leading integer of the
        value's string form and fall back to the default when there is none
        or when it is not greater than 1.

        Args:
            value: Timeout in milliseconds (int, float, str or None)

        Returns:
            int: Timeout in milliseconds

        Example:
            >>> APIConfig.parse_timeout_ms('30000,')
            30000
            >>> APIConfig.parse_timeout_ms('NotANumber')
            20000
        """
        if value is None or isinstance(value, bool):
            return cls.DEFAULT_TIMEOUT_MS

        match = re.match(r'\s*([+-]?\d+)', str(value))
        if not match:
            return cls.DEFAULT_TIMEOUT_MS

        timeout = int(match.group(1))
        if timeout <= 1:
            return cls.DEFAULT_TIMEOUT_MS
        return timeout

    @classmethod
    def get_full_url(cls, endpoint, base_url=None):
        """
        Get the full URL for an endpoint

        Args:
            endpoint: API endpoint path (e.g., '/accounts/login/')
            base_url: Base URL override (optional)

        Returns:
            str: Full URL
        """
        base_url = (base_url or cls.BASE_URL).rstrip('/')
        # Ensure endpoint starts with /
        if not endpoint.startswith('/'):
            endpoint = f'/{endpoint}'
        return f"{base_url}{endpoint}"


@dataclass(frozen=True)
class ResellerConfig:
    """
    Client configuration

    username and password are required and checked at construction.
    timeout_ms is parsed leniently (see APIConfig.parse_timeout_ms).
    """
    username: str
    password: str = field(repr=False)
    timeout_ms: Any = None
    force_license_change: bool = False
    backoff_delay_ms: float = APIConfig.DEFAULT_BACKOFF_DELAY_MS
    protect_plan_id: Optional[str] = None
    base_url: str = APIConfig.BASE_URL

    def __post_init__(self):
        if not self.username or not self.password:
            raise ConfigurationError('missing config values username or password')

    @property
    def timeout(self) -> int:
        """Effective request timeout in milliseconds"""
        return APIConfig.parse_timeout_ms(self.timeout_ms)

    @classmethod
    def from_env(cls, **overrides) -> 'ResellerConfig':
        """
        Build a config from RESELLER_* environment variables (.env supported)

        Args:
            **overrides: Values that take precedence over the environment

        Returns:
            ResellerConfig
        """
        values = {
            'username': APIConfig.USERNAME,
            'password': APIConfig.PASSWORD,
            'timeout_ms': APIConfig.TIMEOUT_MS,
            'force_license_change': APIConfig.FORCE_LICENSE_CHANGE,
            'backoff_delay_ms': APIConfig.DEFAULT_BACKOFF_DELAY_MS,
            'protect_plan_id': APIConfig.PROTECT_PLAN_ID,
            'base_url': APIConfig.BASE_URL,
        }
        values.update(overrides)
        return cls(**values)

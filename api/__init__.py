"""
API Module
Provides the reseller portal client

This module contains the clients that wrap the portal's endpoints for:
- Authentication (login form, session cookie, reseller account id)
- Customer seat and storage licensing
- Plan seat pools
- Protect add-on usage

ResellerAPI is the entry point; it builds one transport and one
authenticator and shares them with the feature-area clients.
"""

from api.base_client import BaseAPIClient, APIResponse
from api.config import APIConfig, ResellerConfig
from api.errors import (
    ResellerAPIError,
    ConfigurationError,
    AuthenticationFailure,
    TokenExtractionFailure,
    MissingCsrfToken,
    MissingSessionCookie,
    AccountDiscoveryFailure,
    MalformedRedirect,
    CustomerNotFound,
    PlanNotFound,
    InsufficientPoolCapacity,
    UpdateRejected,
    UnexpectedResponse,
)
from api.session import SessionAuthenticator
from api.plans import PlansAPI
from api.customers import CustomersAPI
from api.replenisher import PoolReplenisher
from api.reseller_api import ResellerAPI

__all__ = [
    'BaseAPIClient',
    'APIResponse',
    'APIConfig',
    'ResellerConfig',
    'ResellerAPIError',
    'ConfigurationError',
    'AuthenticationFailure',
    'TokenExtractionFailure',
    'MissingCsrfToken',
    'MissingSessionCookie',
    'AccountDiscoveryFailure',
    'MalformedRedirect',
    'CustomerNotFound',
    'PlanNotFound',
    'InsufficientPoolCapacity',
    'UpdateRejected',
    'UnexpectedResponse',
    'SessionAuthenticator',
    'PlansAPI',
    'CustomersAPI',
    'PoolReplenisher',
    'ResellerAPI',
]

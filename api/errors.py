"""
Reseller API Errors
Exception hierarchy raised by the reseller portal clients
"""

from typing import Optional


class ResellerAPIError(Exception):
    """Base exception for all reseller portal client errors"""


class ConfigurationError(ResellerAPIError, ValueError):
    """Bad constructor arguments or missing configuration values"""


class AuthenticationFailure(ResellerAPIError):
    """Login form submission was not answered with a redirect"""

    def __init__(self, message: str = 'Authentication failed. Bad username or password.'):
        super().__init__(message)


class TokenExtractionFailure(ResellerAPIError):
    """An expected token or cookie was not present in a response"""


class MissingCsrfToken(TokenExtractionFailure):
    """Anti-forgery token missing from the login page or its cookies"""

    def __init__(self, message: str = 'unable to find CSRF token in resellers login page'):
        super().__init__(message)


class MissingSessionCookie(TokenExtractionFailure):
    """Successful login redirect without a Set-Cookie header"""

    def __init__(self, message: str = 'unable to find set-cookie header in response'):
        super().__init__(message)


class AccountDiscoveryFailure(ResellerAPIError):
    """Account browse endpoint did not redirect to the reseller's account"""

    def __init__(self, message: str = 'an error occurred attempting to get the resellerId'):
        super().__init__(message)


class MalformedRedirect(AccountDiscoveryFailure):
    """Account browse redirect is missing its Location header or account segment"""

    def __init__(self, message: str = 'unable to find location header in response'):
        super().__init__(message)


class CustomerNotFound(ResellerAPIError):
    """No customer with the requested id on any plan"""

    def __init__(self, customer_id: str):
        self.customer_id = customer_id
        super().__init__(f'unable to find customer: {customer_id}')


class PlanNotFound(ResellerAPIError):
    """Plan id is unknown to the reseller account"""

    def __init__(self, plan_id: str):
        self.plan_id = plan_id
        super().__init__(f'Could not find plan with ID {plan_id}')


class InsufficientPoolCapacity(ResellerAPIError):
    """Requested seat increase is larger than the plan's unassigned pool"""

    def __init__(self, needed: int, available: int):
        self.needed = needed
        self.available = available
        self.shortfall = needed - available
        super().__init__(
            f'Not enough available licenses on customers reseller plan. '
            f'Need {needed} but only {available} are available.'
        )


class UpdateRejected(ResellerAPIError):
    """Upstream refused a mutation; carries its message verbatim"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class UnexpectedResponse(ResellerAPIError):
    """A read endpoint answered with an error status or an undecodable body"""

    def __init__(self, endpoint: str, status_code: Optional[int] = None, detail: str = ''):
        self.endpoint = endpoint
        self.status_code = status_code
        message = f'unexpected response from {endpoint} (HTTP {status_code})'
        if detail:
            message = f'{message}: {detail}'
        super().__init__(message)

"""
Session Authenticator
Logs in through the portal's HTML form and tracks the reseller account id
"""

from typing import Optional, Dict
from urllib.parse import quote

from api.base_client import BaseAPIClient
from api.config import APIConfig, ResellerConfig
from api.errors import (
    AuthenticationFailure,
    TokenExtractionFailure,
    MissingCsrfToken,
    MissingSessionCookie,
    AccountDiscoveryFailure,
    MalformedRedirect,
)
from models.types import Session
from utils.html_helper import extract_form_value, extract_cookie_value, first_cookie


# Characters the portal's login form accepts unescaped
_FORM_SAFE_CHARS = "!~*'()"


class SessionAuthenticator:
    """
    Authenticates against the reseller portal login form

    The portal uses two different anti-forgery values: a hidden form field
    posted in the login body and a csrftoken cookie echoed as a header.
    Both are read from the login page.

    The account id is discovered once and cached on this instance. Concurrent
    first calls on a fresh instance are not serialized and may each run
    discovery.
    """

    CSRF_FORM_FIELD = 'csrfmiddlewaretoken'
    CSRF_COOKIE = 'csrftoken'

    def __init__(self, http: BaseAPIClient, config: ResellerConfig):
        """
        Initialize the authenticator

        Args:
            http: Shared transport
            config: Client configuration holding the credentials
        """
        self.http = http
        self.config = config
        self.logger = http.logger
        self._account_id: Optional[str] = None

    @property
    def account_id(self) -> Optional[str]:
        """Cached reseller account id (None until discovered)"""
        return self._account_id

    def reset_account_id(self):
        """Forget the cached account id so the next login discovers it again"""
        self._account_id = None
        self.logger.info("Cached account id cleared")

    def _get_csrf_tokens(self) -> Dict[str, str]:
        """
        Fetch the login page and read both anti-forgery values

        Returns:
            dict: {'form_token': ..., 'cookie_token': ...}

        Raises:
            MissingCsrfToken: If either value is missing
        """
        response = self.http.get(APIConfig.LOGIN_ENDPOINT)

        form_token = extract_form_value(response.text, self.CSRF_FORM_FIELD)
        cookie_token = extract_cookie_value(response.headers.get('Set-Cookie'), self.CSRF_COOKIE)

        if not form_token or not cookie_token:
            self.logger.error("Login page did not carry both CSRF tokens")
            raise MissingCsrfToken()
        return {'form_token': form_token, 'cookie_token': cookie_token}

    def _login_form_body(self, form_token: str) -> str:
        username = quote(self.config.username, safe=_FORM_SAFE_CHARS)
        password = quote(self.config.password, safe=_FORM_SAFE_CHARS)
        return (
            f"{self.CSRF_FORM_FIELD}={form_token}"
            f"&username={username}&password={password}&this_is_the_login_form=1"
        )

    def authenticate(self) -> Session:
        """
        Log in and return a fresh session

        API Endpoint: GET then POST /accounts/login/ (redirects disabled)

        Returns:
            Session: session cookie, cookie-borne CSRF token and account id

        Raises:
            MissingCsrfToken: Login page lacks a token
            AuthenticationFailure: Login was not answered with 302
            MissingSessionCookie: 302 without Set-Cookie
            AccountDiscoveryFailure: Account id could not be resolved

        Example:
            >>> auth = SessionAuthenticator(BaseAPIClient(), config)
            >>> session = auth.authenticate()
            >>> session.account_id
            '12345'
        """
        tokens = self._get_csrf_tokens()

        self.logger.info(f"Logging in reseller: {self.config.username}")
        response = self.http.post(
            APIConfig.LOGIN_ENDPOINT,
            data=self._login_form_body(tokens['form_token']),
            headers={
                'Content-Type': 'application/x-www-form-urlencoded',
                'Cookie': f"{self.CSRF_COOKIE}={tokens['cookie_token']}",
                'Referer': self.http._build_url(APIConfig.LOGIN_ENDPOINT),
            },
            allow_redirects=False,
        )

        if not response.is_redirect():
            self.logger.error(f"Login rejected with status {response.status_code}")
            raise AuthenticationFailure()

        session_cookie = first_cookie(response.headers.get('Set-Cookie'))
        if not session_cookie:
            self.logger.error("Login redirect did not set a session cookie")
            raise MissingSessionCookie()

        self.logger.debug(f"Session cookie received: {self.logger.redact(session_cookie)}")
        account_id = self.resolve_account_id(session_cookie)

        return Session(
            session_cookie=session_cookie,
            csrf_token=tokens['cookie_token'],
            account_id=account_id,
        )

    def resolve_account_id(self, session_cookie: str) -> str:
        """
        Return the cached account id, discovering it first if needed

        Args:
            session_cookie: Cookie from authenticate()

        Returns:
            str: Reseller account id
        """
        if not session_cookie:
            raise TokenExtractionFailure('missing session cookie')
        if self._account_id is None:
            self._account_id = self.discover_account_id(session_cookie)
        return self._account_id

    def discover_account_id(self, session_cookie: str) -> str:
        """
        Read the reseller account id out of the browse redirect

        API Endpoint: GET /customer/browse/ (redirects disabled)

        Args:
            session_cookie: Cookie from authenticate()

        Returns:
            str: Account id (6th '/'-delimited segment of the Location header)

        Raises:
            AccountDiscoveryFailure: Response was not a 302
            MalformedRedirect: Location header missing or too short
        """
        if not session_cookie:
            raise TokenExtractionFailure('missing session cookie')

        response = self.http.get(
            APIConfig.BROWSE_ENDPOINT,
            headers={'Cookie': session_cookie},
            allow_redirects=False,
        )

        if not response.is_redirect():
            self.logger.error(f"Account discovery returned {response.status_code} instead of a redirect")
            raise AccountDiscoveryFailure()

        location = response.headers.get('Location')
        if not location:
            raise MalformedRedirect()

        segments = location.split('/')
        if len(segments) < 6 or not segments[5]:
            raise MalformedRedirect(f'unable to find account id in redirect location: {location}')

        account_id = segments[5]
        self.logger.info(f"Reseller account id: {account_id}")
        return account_id

    def session_headers(self, session: Session, mutating: bool = False) -> Dict[str, str]:
        """
        Headers that carry the session on a portal request

        Args:
            session: Active session
            mutating: Add the extra anti-forgery headers the change endpoints require

        Returns:
            dict: Request headers
        """
        if not mutating:
            return {
                'Cookie': session.session_cookie,
                'X-CSRFToken': session.csrf_token,
            }
        return {
            'Cookie': f"{session.session_cookie}; {self.CSRF_COOKIE}={session.csrf_token}",
            'Content-Type': 'application/json',
            'X-Requested-With': 'XMLHttpRequest',
            'X-CSRFToken': session.csrf_token,
            'Referer': self.http.base_url,
        }

"""
Base API Client
Provides the shared HTTP transport (one requests.Session with its cookie
store) and lenient response decoding for the reseller portal
"""

import requests
from typing import Optional, Dict, Any, Union
from base.logger import Logger
from api.config import APIConfig


class APIResponse:
    """
    Wrapper class for portal responses

    The portal answers with JSON objects, JSON arrays, HTML pages or empty
    bodies depending on the endpoint, so the body is decoded leniently:
    json_data is whatever JSON was sent (or None), and the dict-only fields
    (success, message) fall back to neutral values.
    """

    def __init__(self, response: requests.Response):
        self.response = response
        self.status_code = response.status_code
        self.headers = response.headers
        self.text = response.text or ''

        # Try to parse JSON response
        try:
            self.json_data = response.json() if self.text.strip() else None
        except ValueError:
            self.json_data = None

        if isinstance(self.json_data, dict):
            self.success = self.json_data.get('success', False) is True
            self.message = self.json_data.get('msg') or self.json_data.get('message') or ''
        else:
            self.success = False
            self.message = ''

    @property
    def data(self) -> Union[Dict[str, Any], list, None]:
        """Decoded JSON body (object, array or None)"""
        return self.json_data

    def is_ok(self) -> bool:
        """Check if the portal answered with a 2xx status"""
        return 200 <= self.status_code < 300

    def is_redirect(self) -> bool:
        """Check if the portal answered with 302 Found"""
        return self.status_code == 302

    def is_empty(self) -> bool:
        """Check if the body carried no usable payload"""
        if self.json_data is None:
            return not self.text.strip()
        return not self.json_data

    def __repr__(self):
        return f"APIResponse(status={self.status_code}, success={self.success})"


class BaseAPIClient:
    """
    HTTP transport for the reseller portal

    One instance owns one requests.Session (and therefore one cookie store).
    It is constructed once per ResellerAPI and shared by reference with the
    session and feature-area clients.
    """

    def __init__(self, base_url: Optional[str] = None, timeout_ms: Any = None):
        """
        Initialize the transport

        Args:
            base_url: Portal base URL. Defaults to RESELLER_BASE_URL from config
            timeout_ms: Per-request timeout in milliseconds, parsed leniently
        """
        self.base_url = (base_url or APIConfig.BASE_URL).rstrip('/')
        self.timeout_ms = APIConfig.parse_timeout_ms(timeout_ms)
        self.session = requests.Session()
        self.logger = Logger()

    @property
    def timeout(self) -> float:
        """Timeout in seconds, the unit requests expects"""
        return self.timeout_ms / 1000

    def _build_url(self, endpoint: str) -> str:
        """Build full URL from endpoint"""
        return APIConfig.get_full_url(endpoint, self.base_url)

    def _log_request(self, method: str, url: str, **kwargs):
        """Log API request details"""
        self.logger.info(f"API Request: {method} {url}")
        if kwargs.get('json') is not None:
            self.logger.debug(f"Request Body: {kwargs['json']}")

    def _log_response(self, response: APIResponse):
        """Log API response details"""
        self.logger.info(f"API Response: {response.status_code}")
        if response.json_data:
            self.logger.debug(f"Response Body: {response.json_data}")

        if response.status_code >= 400:
            self.logger.warning(f"Portal returned {response.status_code}: {response.message or response.text[:200]}")

    def get(
        self,
        endpoint: str,
        params: Optional[Dict] = None,
        headers: Optional[Dict[str, str]] = None,
        allow_redirects: bool = True,
        **kwargs
    ) -> APIResponse:
        """
        Send GET request

        Args:
            endpoint: API endpoint
            params: Query parameters
            headers: Per-request headers
            allow_redirects: Follow redirects (disable to read a 302 and its Location)
            **kwargs: Additional arguments for requests.Session.get()

        Returns:
            APIResponse object
        """
        url = self._build_url(endpoint)
        self._log_request('GET', url, params=params)

        try:
            response = self.session.get(
                url,
                params=params,
                headers=headers,
                allow_redirects=allow_redirects,
                timeout=self.timeout,
                **kwargs
            )
            api_response = APIResponse(response)
            self._log_response(api_response)
            return api_response
        except requests.exceptions.RequestException as e:
            self.logger.error(f"GET request failed: {str(e)}")
            raise

    def post(
        self,
        endpoint: str,
        json_data: Optional[Dict] = None,
        data: Optional[Union[str, Dict]] = None,
        headers: Optional[Dict[str, str]] = None,
        allow_redirects: bool = True,
        **kwargs
    ) -> APIResponse:
        """
        Send POST request

        Args:
            endpoint: API endpoint
            json_data: JSON request body
            data: Form body (already encoded string or mapping); never logged
            headers: Per-request headers
            allow_redirects: Follow redirects (disable to read a 302 and its headers)
            **kwargs: Additional arguments for requests.Session.post()

        Returns:
            APIResponse object
        """
        url = self._build_url(endpoint)
        self._log_request('POST', url, json=json_data)

        try:
            response = self.session.post(
                url,
                json=json_data,
                data=data,
                headers=headers,
                allow_redirects=allow_redirects,
                timeout=self.timeout,
                **kwargs
            )
            api_response = APIResponse(response)
            self._log_response(api_response)
            return api_response
        except requests.exceptions.RequestException as e:
            self.logger.error(f"POST request failed: {str(e)}")
            raise

    def close(self):
        """Release pooled connections"""
        self.session.close()

"""
Test Fixtures
Provides reusable fixtures and fake portal responses for all tests

ARCHITECTURE NOTE:
- All pytest fixtures are defined HERE (single source of truth)
- Fixtures are imported in conftest.py via "from fixtures import *"
- FakePortal replaces the transport's get/post so tests exercise the real
  response decoding without network access
"""

import json

import pytest
import requests
from requests.structures import CaseInsensitiveDict

from api.base_client import APIResponse
from api.config import ResellerConfig
from api.reseller_api import ResellerAPI
from models.types import Session


ACCOUNT_ID = 'acct42'
PROTECT_PLAN_ID = '999'

LOGIN_PAGE = """
<html><body>
<form method="post" action="/accounts/login/">
  <input type='hidden' id='csrfmiddlewaretoken' name='csrfmiddlewaretoken' value='fec9a59a86510210de334ca4e251ed3d' />
  <input type="text" name="username" />
  <input type="password" name="password" />
</form>
</body></html>
"""


# ==================== Helpers ====================

def make_response(status_code=200, body=None, headers=None):
    """
    Build an APIResponse around a real requests.Response

    Args:
        status_code: HTTP status
        body: dict/list (sent as JSON), str/bytes (sent as-is) or None (empty)
        headers: Response headers

    Returns:
        APIResponse
    """
    response = requests.Response()
    response.status_code = status_code
    if body is None:
        content = b''
    elif isinstance(body, bytes):
        content = body
    elif isinstance(body, str):
        content = body.encode('utf-8')
    else:
        content = json.dumps(body).encode('utf-8')
    response._content = content
    response.encoding = 'utf-8'
    response.headers = CaseInsensitiveDict(headers or {})
    response.url = 'https://resellers.egnyte.com/'
    return APIResponse(response)


def stats(used, unused, available):
    return {'Used': used, 'Unused': unused, 'Available': available}


def usage_record(tenant, power_users=(0, 0, 0), storage=(0, 0, 0), features=None):
    """One single-key record as returned by /msp/usage_stats"""
    return {
        tenant: {
            'power_user_stats': stats(*power_users),
            'storage_stats': stats(*storage),
            'feature_stats': features or {},
        }
    }


def usage_endpoint(plan_id):
    return f'/msp/usage_stats/{ACCOUNT_ID}/{plan_id}/'


def pu_data_endpoint(plan_id):
    return f'/msp/get_plan_pu_data/{ACCOUNT_ID}/{plan_id}/'


class FakePortal:
    """
    Stand-in for BaseAPIClient.get/post

    Routes map (method, endpoint) to an APIResponse, an exception to raise,
    or a list of those consumed in order. Every call is recorded.
    """

    def __init__(self):
        self.routes = {}
        self.calls = []

    def add(self, method, endpoint, response):
        self.routes[(method, endpoint)] = response
        return self

    def get(self, endpoint, **kwargs):
        return self._dispatch('GET', endpoint, kwargs)

    def post(self, endpoint, **kwargs):
        return self._dispatch('POST', endpoint, kwargs)

    def _dispatch(self, method, endpoint, kwargs):
        self.calls.append((method, endpoint, kwargs))
        if (method, endpoint) not in self.routes:
            raise AssertionError(f"Unexpected {method} {endpoint}")
        response = self.routes[(method, endpoint)]
        if isinstance(response, list):
            response = response.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def calls_to(self, method, endpoint=None):
        return [
            call for call in self.calls
            if call[0] == method and (endpoint is None or call[1] == endpoint)
        ]

    @property
    def posts(self):
        return self.calls_to('POST')


# ==================== Client Fixtures ====================

@pytest.fixture
def reseller_config():
    """Config with pacing disabled and a protect plan configured"""
    return ResellerConfig(
        username='reseller@example.com',
        password='p@ss word&1',
        backoff_delay_ms=0,
        protect_plan_id=PROTECT_PLAN_ID,
    )


@pytest.fixture
def force_config(reseller_config):
    """Same config with force_license_change enabled"""
    return ResellerConfig(
        username=reseller_config.username,
        password=reseller_config.password,
        backoff_delay_ms=0,
        protect_plan_id=PROTECT_PLAN_ID,
        force_license_change=True,
    )


@pytest.fixture
def portal():
    return FakePortal()


@pytest.fixture
def session():
    return Session(session_cookie='sessionid=sess456', csrf_token='tok123', account_id=ACCOUNT_ID)


def _wire(api, portal, session, monkeypatch):
    monkeypatch.setattr(api.http, 'get', portal.get)
    monkeypatch.setattr(api.http, 'post', portal.post)
    monkeypatch.setattr(api.auth, 'authenticate', lambda: session)
    api.auth._account_id = session.account_id
    return api


@pytest.fixture
def sleeps(monkeypatch):
    """Record pacing sleeps instead of waiting"""
    calls = []
    monkeypatch.setattr('api.customers.time.sleep', calls.append)
    return calls


@pytest.fixture
def reseller_api(reseller_config, portal, session, monkeypatch, sleeps):
    """ResellerAPI with the transport replaced by FakePortal and login stubbed"""
    api = ResellerAPI(reseller_config)
    yield _wire(api, portal, session, monkeypatch)
    api.close()


@pytest.fixture
def forced_reseller_api(force_config, portal, session, monkeypatch, sleeps):
    """ResellerAPI with force_license_change enabled"""
    api = ResellerAPI(force_config)
    yield _wire(api, portal, session, monkeypatch)
    api.close()


@pytest.fixture
def unauthenticated_api(reseller_config, portal, monkeypatch):
    """ResellerAPI with only the transport replaced, for login flow tests"""
    api = ResellerAPI(reseller_config)
    monkeypatch.setattr(api.http, 'get', portal.get)
    monkeypatch.setattr(api.http, 'post', portal.post)
    yield api
    api.close()

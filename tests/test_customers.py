"""
Customers API Tests
Customer listing across plans, rate-limit pacing and protect usage
"""

import pytest
from api.config import ResellerConfig
from api.errors import CustomerNotFound
from models.reseller import StorageStats
from fixtures import make_response, usage_record, usage_endpoint, ACCOUNT_ID, PROTECT_PLAN_ID


CUSTOMER_DATA = f'/msp/customer_data/{ACCOUNT_ID}'


def wire_customers(portal, plans):
    """
    plans: {plan_id: usage records, or an APIResponse to return instead}
    """
    portal.add('GET', CUSTOMER_DATA, make_response(200, [
        {'domain': f'tenant{pid}', 'plan_id': pid, 'status': 'active'} for pid in plans
    ]))
    for pid, records in plans.items():
        response = records if not isinstance(records, list) else make_response(200, records)
        portal.add('GET', usage_endpoint(pid), response)


@pytest.mark.unit
class TestListCustomers:
    """Test suite for customer listing"""

    def test_builds_customers(self, reseller_api, portal):
        """Test: tenant keys are lowercased and totals are used + free"""
        wire_customers(portal, {
            '1': [usage_record('AcmeCo', power_users=(8, 2, 4), storage=(100, 50, 300))],
            '2': [usage_record('Globex', power_users=(1, 0, 9))],
        })

        customers = reseller_api.get_all_customers()

        assert [c.customer_id for c in customers] == ['acmeco', 'globex']
        acme = customers[0]
        assert acme.plan_id == '1'
        assert acme.power_users.used == 8
        assert acme.power_users.free == 2
        assert acme.power_users.available == 4
        assert acme.power_users.total == 10, f"Expected total 10, got {acme.power_users.total}"
        assert acme.storage_gb.total == 150
        assert acme.storage_gb.available == 300

    def test_totals_hold_for_every_customer(self, reseller_api, portal):
        """Test: total == used + free for every returned record"""
        wire_customers(portal, {
            '1': [
                usage_record('a', power_users=(0, 0, 0), storage=(0, 0, 0)),
                usage_record('b', power_users=(5, 7, 1), storage=(1.5, 2.5, 10)),
                usage_record('c', power_users=(12, 0, 3), storage=(40, 60, 0)),
            ],
        })

        for customer in reseller_api.get_all_customers():
            for stat in (customer.power_users, customer.storage_gb):
                assert stat.total == stat.used + stat.free

    def test_maps_feature_names(self, reseller_api, portal):
        """Test: feature counters are renamed and standard user packs are derived"""
        wire_customers(portal, {
            '1': [usage_record('acme', features={
                'additional_su': 23,
                'total_power_users': 10,
                'elc': True,
                'file_server_count': 2,
            })],
        })

        features = reseller_api.get_all_customers()[0].features

        assert features['additionalStandardUsers'] == 23
        assert features['totalPowerUsers'] == 10
        assert features['turboOrStorageSync'] is True
        assert features['fileServerCount'] == 2
        assert features['totalStandardUserPacks'] == 3

    def test_failing_plan_is_skipped(self, reseller_api, portal):
        """Test: one plan failing to load does not fail the listing"""
        wire_customers(portal, {
            '1': [usage_record('acme')],
            '2': make_response(500, 'Server Error'),
            '3': [usage_record('initech')],
        })

        customers = reseller_api.get_all_customers()

        assert [c.customer_id for c in customers] == ['acme', 'initech']
        assert len(portal.calls_to('GET')) == 4

    def test_reads_plans_sequentially(self, reseller_api, portal):
        """Test: usage records are read one plan at a time, in plan order"""
        wire_customers(portal, {
            '3': [usage_record('c')],
            '1': [usage_record('a')],
        })

        reseller_api.get_all_customers()

        reads = [call[1] for call in portal.calls_to('GET')]
        assert reads == [CUSTOMER_DATA, usage_endpoint('3'), usage_endpoint('1')]


@pytest.mark.unit
class TestBackoff:
    """Test suite for pacing between plan reads"""

    def test_delay_grows_and_skips_last_plan(self, reseller_api, portal, sleeps):
        """Test: pauses grow 1.5x per plan and none follows the last plan"""
        reseller_api.customers.config = ResellerConfig(
            username='user', password='pass', backoff_delay_ms=1000
        )
        wire_customers(portal, {pid: [usage_record(f't{pid}')] for pid in ('1', '2', '3', '4', '5')})

        reseller_api.get_all_customers()

        assert sleeps == [1.0, 1.5, 2.25, 3.375], f"Unexpected pauses: {sleeps}"

    def test_delay_is_capped(self, reseller_api):
        """Test: no pause exceeds 10 seconds"""
        reseller_api.customers.config = ResellerConfig(
            username='user', password='pass', backoff_delay_ms=1000
        )

        delays = [reseller_api.customers.backoff_delay_ms(n) for n in range(1, 12)]

        assert delays[:3] == [1000, 1500, 2250]
        assert max(delays) == 10000
        assert delays[-1] == 10000

    def test_single_plan_never_sleeps(self, reseller_api, portal, sleeps):
        wire_customers(portal, {'1': [usage_record('acme')]})

        reseller_api.get_all_customers()

        assert sleeps == []

    def test_pacing_applies_after_failures(self, reseller_api, portal, sleeps):
        """Test: a skipped plan still counts toward the pause schedule"""
        reseller_api.customers.config = ResellerConfig(
            username='user', password='pass', backoff_delay_ms=100
        )
        wire_customers(portal, {
            '1': make_response(500, 'Server Error'),
            '2': [usage_record('acme')],
        })

        reseller_api.get_all_customers()

        assert sleeps == [0.1]


@pytest.mark.unit
class TestGetOneCustomer:
    """Test suite for single customer lookup"""

    def test_finds_customer(self, reseller_api, portal):
        wire_customers(portal, {
            '1': [usage_record('acme')],
            '2': [usage_record('Globex', power_users=(3, 2, 0))],
        })

        customer = reseller_api.get_one_customer('globex')

        assert customer.plan_id == '2'
        assert customer.power_users.total == 5

    def test_unknown_customer(self, reseller_api, portal):
        """Test: a customer no plan lists raises CustomerNotFound"""
        wire_customers(portal, {'1': [usage_record('acme')]})

        with pytest.raises(CustomerNotFound, match='unable to find customer: initech'):
            reseller_api.get_one_customer('initech')


@pytest.mark.unit
class TestProtectUsage:
    """Test suite for protect add-on usage"""

    def test_returns_storage_stats(self, reseller_api, portal):
        """Test: lookup is case-insensitive and returns the storage counters"""
        portal.add('GET', usage_endpoint(PROTECT_PLAN_ID), make_response(200, [
            usage_record('protectothercustomer', storage=(1, 2, 3)),
            usage_record('protectawesomecustomer', storage=(100, 200, 100)),
        ]))

        usage = reseller_api.get_customer_protect_plan_usage('AWESOMECUSTOMER')

        assert usage == StorageStats(Used=100, Unused=200, Available=100)

    def test_absent_tenant(self, reseller_api, portal):
        """Test: a tenant without a protect entry gets None"""
        portal.add('GET', usage_endpoint(PROTECT_PLAN_ID), make_response(200, [
            usage_record('protectawesomecustomer', storage=(100, 200, 100)),
        ]))

        assert reseller_api.get_customer_protect_plan_usage('someoneelse') is None

    def test_entry_without_storage(self, reseller_api, portal):
        portal.add('GET', usage_endpoint(PROTECT_PLAN_ID), make_response(200, [
            {'protectacme': {'power_user_stats': {'Used': 1, 'Unused': 0, 'Available': 0}}},
        ]))

        assert reseller_api.get_customer_protect_plan_usage('acme') is None

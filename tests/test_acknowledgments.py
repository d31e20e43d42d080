"""
Acknowledgment Classification Tests
"""

import pytest
from api.acknowledgments import (
    classify_acknowledgment,
    CFS_UPGRADE_FAILED_MESSAGE,
    PLAN_UPDATED_MESSAGE,
    SUCCESS_ON_FLAG,
    SUCCESS_ON_MESSAGE,
)
from models.types import AckStatus
from fixtures import make_response


@pytest.mark.unit
class TestMessageRule:
    """Test suite for customer seat and storage acknowledgments"""

    @pytest.mark.parametrize("status_code,body", [
        (200, {'msg': PLAN_UPDATED_MESSAGE}),
        (200, {'success': True, 'msg': PLAN_UPDATED_MESSAGE}),
        (302, {'msg': PLAN_UPDATED_MESSAGE}),
    ])
    def test_success(self, status_code, body):
        ack = classify_acknowledgment(make_response(status_code, body))
        assert ack.status is AckStatus.SUCCESS
        assert not ack.forced

    @pytest.mark.parametrize("body", [
        {'success': True},
        {'success': True, 'msg': 'Request queued for review'},
    ])
    def test_success_flag_alone_is_not_enough(self, body):
        """Test: a success flag with any other message is an unrecognized answer"""
        ack = classify_acknowledgment(make_response(200, body), success_on=SUCCESS_ON_MESSAGE)
        assert ack.is_error

    def test_unknown_message_is_kept(self):
        ack = classify_acknowledgment(make_response(200, {'success': True, 'msg': 'Request queued for review'}))
        assert ack.message == 'Request queued for review'

    @pytest.mark.parametrize("status_code", [400, 403, 500])
    def test_success_message_on_error_status(self, status_code):
        """Test: the success message on an error status is not trusted"""
        ack = classify_acknowledgment(make_response(status_code, {'msg': PLAN_UPDATED_MESSAGE}))
        assert ack.is_error
        assert ack.status_code == status_code

    def test_soft_success_only_when_allowed(self):
        """Test: the CFS failure is success only when soft success is allowed"""
        response = make_response(400, {'success': False, 'msg': CFS_UPGRADE_FAILED_MESSAGE})

        forced = classify_acknowledgment(response, allow_soft_success=True)
        strict = classify_acknowledgment(response)

        assert forced.status is AckStatus.SUCCESS
        assert forced.forced
        assert strict.status is AckStatus.ERROR
        assert strict.message == CFS_UPGRADE_FAILED_MESSAGE

    def test_soft_success_needs_status_400(self):
        response = make_response(500, {'msg': CFS_UPGRADE_FAILED_MESSAGE})
        assert classify_acknowledgment(response, allow_soft_success=True).is_error

    @pytest.mark.parametrize("body", [None, '', '   ', {}])
    def test_empty_body_is_no_change(self, body):
        """Test: the portal's silent no-op"""
        ack = classify_acknowledgment(make_response(200, body))
        assert ack.status is AckStatus.NO_CHANGE

    def test_empty_error_body(self):
        """Test: an empty error answer gets a generic message"""
        ack = classify_acknowledgment(make_response(502, None))
        assert ack.is_error
        assert ack.message == 'Unexpected response from portal (HTTP 502)'
        assert ack.status_code == 502

    def test_message_key_fallback(self):
        ack = classify_acknowledgment(make_response(409, {'message': 'Conflict on tenant'}))
        assert ack.message == 'Conflict on tenant'

    def test_non_json_body(self):
        """Test: an HTML error page is an error, never success"""
        ack = classify_acknowledgment(make_response(200, '<html>Server busy</html>'))
        assert ack.is_error


@pytest.mark.unit
class TestFlagRule:
    """Test suite for plan seat change acknowledgments"""

    @pytest.mark.parametrize("body", [
        {'success': True},
        {'success': True, 'msg': PLAN_UPDATED_MESSAGE},
    ])
    def test_success(self, body):
        ack = classify_acknowledgment(make_response(200, body), success_on=SUCCESS_ON_FLAG)
        assert ack.status is AckStatus.SUCCESS

    @pytest.mark.parametrize("status_code,body", [
        (200, {'msg': PLAN_UPDATED_MESSAGE}),
        (200, {'success': False, 'msg': PLAN_UPDATED_MESSAGE}),
        (400, {'success': False, 'msg': PLAN_UPDATED_MESSAGE}),
        (400, {'success': True}),
        (200, {'success': 'true'}),
    ])
    def test_anything_but_success_true_is_an_error(self, status_code, body):
        """Test: only success: true on a non-error status counts"""
        ack = classify_acknowledgment(make_response(status_code, body), success_on=SUCCESS_ON_FLAG)
        assert ack.is_error

    def test_empty_body_is_an_error(self):
        """Test: a plan change is never silently accepted"""
        ack = classify_acknowledgment(make_response(200, None), success_on=SUCCESS_ON_FLAG)
        assert ack.is_error

    def test_no_soft_success(self):
        response = make_response(400, {'msg': CFS_UPGRADE_FAILED_MESSAGE})
        ack = classify_acknowledgment(response, success_on=SUCCESS_ON_FLAG)
        assert ack.is_error

    def test_unknown_rule(self):
        with pytest.raises(ValueError):
            classify_acknowledgment(make_response(200, {'success': True}), success_on='status')

"""
Acknowledgment classification

The change endpoints answer with {msg}, {success, msg} or an empty body, and
one endpoint reports a known false failure. Every comparison against those
shapes lives here.
"""

from api.base_client import APIResponse
from models.types import Acknowledgment, AckStatus


PLAN_UPDATED_MESSAGE = 'Plan updated successfully!'

# Returned with HTTP 400 for seat reductions that the portal actually applies
CFS_UPGRADE_FAILED_MESSAGE = 'CFS plan upgrade failed. Please contact support.'

# Success rules: customer seat/storage changes acknowledge with the message,
# the plan seat change with the success flag
SUCCESS_ON_MESSAGE = 'msg'
SUCCESS_ON_FLAG = 'flag'


def classify_acknowledgment(
    response: APIResponse,
    success_on: str = SUCCESS_ON_MESSAGE,
    allow_soft_success: bool = False
) -> Acknowledgment:
    """
    Map a change-endpoint response to SUCCESS, NO_CHANGE or ERROR

    Args:
        response: Portal response to a mutating request
        success_on: SUCCESS_ON_MESSAGE (msg must be 'Plan updated successfully!')
            or SUCCESS_ON_FLAG (success must be true)
        allow_soft_success: Treat the known HTTP 400 CFS failure as success

    Returns:
        Acknowledgment: status, upstream message, status code and whether
        the success was a reclassified failure

    Raises:
        ValueError: Unknown success_on rule
    """
    if success_on not in (SUCCESS_ON_MESSAGE, SUCCESS_ON_FLAG):
        raise ValueError(f"Unknown success rule: {success_on}")

    status_code = response.status_code
    message = response.message

    if status_code < 400:
        if success_on == SUCCESS_ON_MESSAGE and message == PLAN_UPDATED_MESSAGE:
            return Acknowledgment(AckStatus.SUCCESS, message, status_code)
        if success_on == SUCCESS_ON_FLAG and response.success:
            return Acknowledgment(AckStatus.SUCCESS, message, status_code)

    if allow_soft_success and status_code == 400 and message == CFS_UPGRADE_FAILED_MESSAGE:
        return Acknowledgment(AckStatus.SUCCESS, message, status_code, forced=True)

    # Customer endpoints silently no-op with an empty body when nothing changes
    if success_on == SUCCESS_ON_MESSAGE and status_code < 400 and response.is_empty():
        return Acknowledgment(AckStatus.NO_CHANGE, '', status_code)

    if not message:
        message = f'Unexpected response from portal (HTTP {status_code})'
    return Acknowledgment(AckStatus.ERROR, message, status_code)

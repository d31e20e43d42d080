"""
Feature stat renaming

The portal reports dozens of feature counters in snake_case. Most read fine
once camelCased; the oddballs below get explicit names.
"""

import math
import re
from typing import Dict, Any


# Standard users are sold in packs of this size
STANDARD_USER_PACK_SIZE = 5


FEATURE_MAP = {
    'elc': 'turboOrStorageSync',
    'tfa_integration': 'twoFactorAuthIntegration',
    'sf_integration_2': 'salesForceIntegration',
    'tfa_voice_calls': 'twoFactorAuthVoice',
    'tfa_sms': 'twoFactorAuthSms',
    'used_su': 'usedStandardUsers',
    'additional_su': 'additionalStandardUsers',
}


def to_camel_case(name: str) -> str:
    """
    snake_case or kebab-case to camelCase

    Example:
        >>> to_camel_case('total_power_users')
        'totalPowerUsers'
    """
    return re.sub(r'[-_]([a-z])', lambda m: m.group(1).upper(), name.lower())


def standard_user_packs(additional_su, total_power_users) -> int:
    """Standard users are billed in packs of 5 on top of the power users"""
    return math.ceil((additional_su - total_power_users) / STANDARD_USER_PACK_SIZE)


def process_features(feature_stats: Dict[str, Any]) -> Dict[str, Any]:
    """
    Rename feature counters and add the derived totalStandardUserPacks

    Args:
        feature_stats: Raw feature_stats mapping from a usage record

    Returns:
        dict: Readable feature name -> value
    """
    features = {}
    for key, value in (feature_stats or {}).items():
        features[FEATURE_MAP.get(key) or to_camel_case(key)] = value

    additional = (feature_stats or {}).get('additional_su')
    power_users = (feature_stats or {}).get('total_power_users')
    if isinstance(additional, (int, float)) and isinstance(power_users, (int, float)):
        features['totalStandardUserPacks'] = standard_user_packs(additional, power_users)

    return features

"""
Utility functions for the reseller portal client.
"""

from utils.html_helper import extract_form_value, extract_cookie_value, first_cookie
from utils.features import FEATURE_MAP, to_camel_case, process_features

__all__ = [
    'extract_form_value',
    'extract_cookie_value',
    'first_cookie',
    'FEATURE_MAP',
    'to_camel_case',
    'process_features',
]

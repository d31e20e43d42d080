"""
HTML and cookie helpers for the portal's server-rendered login flow
"""

import re
from typing import Optional
from bs4 import BeautifulSoup


def extract_form_value(html: str, field_name: str) -> Optional[str]:
    """
    Get the value of a named form field from an HTML document

    Args:
        html: Page markup
        field_name: The input's name attribute (e.g. 'csrfmiddlewaretoken')

    Returns:
        str: The field value, or None when the field or its value is missing
    """
    if not html:
        return None
    soup = BeautifulSoup(html, 'html.parser')
    field = soup.find(attrs={'name': field_name})
    if field is None:
        return None
    value = field.get('value')
    return value or None


def extract_cookie_value(set_cookie: Optional[str], cookie_name: str) -> Optional[str]:
    """
    Get one cookie's value out of a (possibly comma-joined) Set-Cookie header

    Args:
        set_cookie: Raw Set-Cookie header value
        cookie_name: Cookie name (e.g. 'csrftoken')

    Returns:
        str: The cookie value, or None when absent
    """
    if not set_cookie:
        return None
    match = re.search(rf'(?:^|[\s,;]){re.escape(cookie_name)}=([^;,\s]+)', set_cookie)
    return match.group(1) if match else None


def first_cookie(set_cookie: Optional[str]) -> Optional[str]:
    """
    First cookie of a Set-Cookie header, truncated at its first ';'

    Args:
        set_cookie: Raw Set-Cookie header value

    Returns:
        str: 'name=value' of the first cookie, or None when absent
    """
    if not set_cookie:
        return None
    cookie = set_cookie.split(';')[0].strip()
    return cookie or None

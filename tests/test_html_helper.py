"""
HTML and Cookie Helper Tests
"""

import pytest
from utils.html_helper import extract_form_value, extract_cookie_value, first_cookie
from fixtures import LOGIN_PAGE


@pytest.mark.unit
class TestHtmlHelper:
    """Test suite for login page scraping helpers"""

    def test_extract_form_value(self):
        assert extract_form_value(LOGIN_PAGE, 'csrfmiddlewaretoken') == 'fec9a59a86510210de334ca4e251ed3d'

    def test_extract_form_value_missing(self):
        assert extract_form_value('<form></form>', 'csrfmiddlewaretoken') is None
        assert extract_form_value('', 'csrfmiddlewaretoken') is None

    @pytest.mark.parametrize("header,expected", [
        ('csrftoken=abc123; expires=Thu, 01 Jan 2099 00:00:00 GMT; Path=/', 'abc123'),
        ('sessionid=s1; Path=/, csrftoken=xyz; Path=/', 'xyz'),
        ('othercsrftoken=nope; Path=/', None),
        (None, None),
    ])
    def test_extract_cookie_value(self, header, expected):
        assert extract_cookie_value(header, 'csrftoken') == expected

    def test_first_cookie(self):
        assert first_cookie('sessionid=sess456; HttpOnly; Path=/') == 'sessionid=sess456'
        assert first_cookie('') is None
        assert first_cookie(None) is None

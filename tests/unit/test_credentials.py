"""
Unit tests for adauth.ad.credentials module.
"""

import base64

import pytest
from returns.result import Failure, Success

from adauth.ad.credentials import BasicCredentials, basic_challenge, parse_basic_authorization


def basic(payload: bytes) -> str:
    return "Basic " + base64.b64encode(payload).decode("ascii")


class TestParseBasicAuthorization:
    """Tests for parse_basic_authorization."""

    def test_valid_header(self):
        result = parse_basic_authorization(basic(b"jdoe:secret"))
        assert result == Success(BasicCredentials(username="jdoe", password="secret"))

    def test_scheme_case_insensitive(self):
        header = "bAsIc " + base64.b64encode(b"jdoe:secret").decode("ascii")
        assert isinstance(parse_basic_authorization(header), Success)

    def test_password_with_colon(self):
        """Test only the first colon separates username and password."""
        credentials = parse_basic_authorization(basic(b"jdoe:se:cr:et")).unwrap()
        assert credentials.username == "jdoe"
        assert credentials.password == "se:cr:et"

    def test_empty_password(self):
        """Test empty values are passed through."""
        credentials = parse_basic_authorization(basic(b"jdoe:")).unwrap()
        assert credentials.password == ""

    def test_latin1_decoding(self):
        """Test the payload is decoded as ISO-8859-1."""
        credentials = parse_basic_authorization(basic("josé:päss".encode("iso-8859-1"))).unwrap()
        assert credentials.username == "josé"
        assert credentials.password == "päss"

    def test_trailing_whitespace(self):
        assert isinstance(parse_basic_authorization(basic(b"jdoe:secret") + "  "), Success)

    @pytest.mark.parametrize(
        "header",
        [
            None,
            "",
            "Bearer abc.def.ghi",
            "Basic !!!not-base64!!!",
            basic(b"no-separator"),
        ],
    )
    def test_invalid_headers(self, header):
        assert isinstance(parse_basic_authorization(header), Failure)

    def test_password_not_in_repr(self):
        assert "secret" not in repr(BasicCredentials(username="jdoe", password="secret"))


class TestBasicChallenge:
    """Tests for basic_challenge."""

    def test_challenge(self):
        assert basic_challenge("corp.example.com") == 'Basic realm="corp.example.com", charset="UTF-8"'

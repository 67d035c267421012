"""
HTTP Basic credential handling.

Decodes an ``Authorization: Basic ...`` header into a username/password
pair and builds the matching ``WWW-Authenticate`` challenge.
"""

from __future__ import annotations

import base64
import binascii
from typing import Optional

import attrs
from returns.result import Failure, Result, Success

# Encoding HTTP Basic credentials are decoded with
BASIC_CREDENTIALS_ENCODING = "iso-8859-1"

_BASIC_PREFIX = "basic "


@attrs.define(frozen=True, slots=True)
class BasicCredentials:
    """Username and password decoded from a Basic header."""

    username: str
    password: str = attrs.field(repr=False)


def parse_basic_authorization(header: Optional[str]) -> Result[BasicCredentials, str]:
    """
    Decode a Basic ``Authorization`` header value.

    The scheme is matched case-insensitively. The payload is split on the
    first colon, so passwords may contain colons.

    Returns:
        Success(BasicCredentials) or Failure(error)
    """
    if not header:
        return Failure("Missing Authorization header")
    if header[: len(_BASIC_PREFIX)].lower() != _BASIC_PREFIX:
        return Failure("Authorization scheme is not Basic")

    encoded = header[len(_BASIC_PREFIX):].strip()
    try:
        decoded = base64.b64decode(encoded, validate=True).decode(BASIC_CREDENTIALS_ENCODING)
    except (binascii.Error, ValueError) as e:
        return Failure(f"Malformed Basic credentials: {e}")

    username, sep, password = decoded.partition(":")
    if not sep:
        return Failure("Malformed Basic credentials: missing ':' separator")

    return Success(BasicCredentials(username=username, password=password))


def basic_challenge(domain: str) -> str:
    """``WWW-Authenticate`` value asking for Basic credentials for ``domain``."""
    return f'Basic realm="{domain}", charset="UTF-8"'

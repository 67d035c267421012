"""
Active Directory bind error classification.

AD reports why a bind was rejected through a Win32 sub-error embedded in
the LDAP diagnostic message, e.g.::

    80090308: LdapErr: DSID-0C09042A, comment: AcceptSecurityContext error, data 52e, v3839

The functions here are pure so they can be exercised with literal strings.
"""

from __future__ import annotations

import re
from typing import Mapping, Optional

from adauth.core.types import AuthenticationResponse


# Sub-error (hex, uppercase) -> outcome
AD_ERROR_CODES: Mapping[str, AuthenticationResponse] = {
    "525": AuthenticationResponse.NOT_FOUND,  # ERROR_NO_SUCH_USER
    "52E": AuthenticationResponse.INVALID_CREDENTIALS,  # ERROR_LOGON_FAILURE
    "530": AuthenticationResponse.LOGIN_NOT_PERMITTED_TIME,  # ERROR_INVALID_LOGON_HOURS
    "531": AuthenticationResponse.LOGIN_NOT_PERMITTED_WORKSTATION,  # ERROR_INVALID_WORKSTATION
    "532": AuthenticationResponse.PASSWORD_EXPIRED,  # ERROR_PASSWORD_EXPIRED
    "533": AuthenticationResponse.ACCOUNT_DISABLED,  # ERROR_ACCOUNT_DISABLED
    "701": AuthenticationResponse.ACCOUNT_EXPIRED,  # ERROR_ACCOUNT_EXPIRED
    "773": AuthenticationResponse.RESET_PASSWORD_REQUIRED,  # ERROR_PASSWORD_MUST_CHANGE
    "775": AuthenticationResponse.ACCOUNT_LOCKED,  # ERROR_ACCOUNT_LOCKED_OUT
}

AD_ERROR_CODE_RE = re.compile(r", data (\w+),", re.DOTALL)


def extract_error_code(message: Optional[str]) -> Optional[str]:
    """
    Extract the uppercased AD sub-error from an LDAP diagnostic message.

    Returns None when the message is missing or has no ``, data <code>,``
    marker.
    """
    if not message or not isinstance(message, str):
        return None
    match = AD_ERROR_CODE_RE.search(message)
    if match is None:
        return None
    return match.group(1).upper()


def classify_bind_error(
    message: Optional[str],
    table: Mapping[str, AuthenticationResponse] = AD_ERROR_CODES,
) -> AuthenticationResponse:
    """
    Map an LDAP bind diagnostic message to an AuthenticationResponse.

    Never raises: anything that cannot be classified is UNKNOWN.

    Args:
        message: Server diagnostic text (may be None)
        table: Sub-error to outcome mapping (keys uppercase)

    Returns:
        The matching outcome, or AuthenticationResponse.UNKNOWN
    """
    code = extract_error_code(message)
    if code is None:
        return AuthenticationResponse.UNKNOWN
    return table.get(code, AuthenticationResponse.UNKNOWN)

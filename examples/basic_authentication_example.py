#!/usr/bin/env python3
"""
Active Directory Basic Authentication Example

Demonstrates how to use adauth to:
1. Look up a user and their groups
2. Validate a password with an LDAP bind
3. Authenticate an HTTP Basic Authorization header

Configuration is read from the environment:
    ADAUTH_DOMAIN          AD domain (required)
    ADAUTH_DC_HOST         Domain controller (optional)
    ADAUTH_BIND_USER       Service account for lookups
    ADAUTH_BIND_PASSWORD   Service account password
    ADAUTH_GROUP_TYPE      e.g. SECURITY_GROUP|GLOBAL_SCOPE or NONE

Usage:
    python basic_authentication_example.py <username> <password>
"""

import base64
import sys

from adauth import ADConfig, BasicAuthenticator, DirectoryUnavailableError, GroupType


def main():
    """Authenticate a user given on the command line."""

    if len(sys.argv) != 3:
        print(__doc__)
        sys.exit(2)
    username, password = sys.argv[1], sys.argv[2]

    print("=" * 70)
    print("adauth - Active Directory Basic Authentication")
    print("=" * 70)
    print()

    config = ADConfig.from_env()
    auth = BasicAuthenticator(config)

    print(f"   Domain: {config.domain}")
    print(f"   Server: {config.server_host}:{config.port}")
    print(f"   Group Type: {config.group_type!r}")
    print()

    # ==========================================================================
    # EXAMPLE 1: Directory lookup
    # ==========================================================================
    print("1. Directory Lookup")
    print("-" * 40)

    try:
        user = auth.lookup.find_user(username)
        everything = auth.lookup.find_user(username, GroupType.NONE)
    except DirectoryUnavailableError as e:
        print(f"   Directory unavailable: {e}")
        sys.exit(1)

    if user is None:
        print(f"   {username} not found")
    else:
        print(f"   SID: {user.sid}")
        print(f"   Display Name: {user.display_name}")
        print(f"   Groups ({config.group_type!r}): {sorted(user.groups)}")
        print(f"   All Groups: {sorted(everything.groups)}")
    print()

    # ==========================================================================
    # EXAMPLE 2: Credential validation
    # ==========================================================================
    print("2. Credential Validation")
    print("-" * 40)

    response = auth.validator.authenticate(config.domain, username, password)
    print(f"   Bind Response: {response.name}")
    print()

    # ==========================================================================
    # EXAMPLE 3: Basic header
    # ==========================================================================
    print("3. Basic Authorization Header")
    print("-" * 40)

    header = "Basic " + base64.b64encode(
        f"{username}:{password}".encode("iso-8859-1")
    ).decode("ascii")
    result = auth.authenticate_header(header)

    if result.success:
        print("   Authenticated")
        for claim in result.user.to_claims():
            print(f"   {claim.type}: {claim.value}")
    else:
        print(f"   Rejected: {result.error_message} ({result.response.name})")
        print(f"   WWW-Authenticate: {auth.challenge()}")


if __name__ == "__main__":
    main()

"""
adauth - Active Directory Basic Authentication

Looks up users in Active Directory, validates their passwords with an LDAP
bind, and resolves their group memberships.

Example Usage:
    from adauth import ADConfig, BasicAuthenticator

    config = ADConfig(
        domain="corp.example.com",
        bind_user="svc-lookup",
        bind_password="secret",
    )
    auth = BasicAuthenticator(config)

    result = auth.authenticate("jdoe", "password")
    if result.success:
        print(f"Authenticated {result.user.display_name}")
        print(f"Groups: {sorted(result.user.groups)}")
"""

from adauth.core.types import (
    DEFAULT_GROUP_TYPE,
    AuthenticationResponse,
    AuthResult,
    GroupType,
    UserInfo,
)
from adauth.core.exceptions import (
    ADAuthError,
    DirectoryError,
    DirectoryUnavailableError,
)
from adauth.ad.authenticator import BasicAuthenticator, create_basic_authenticator
from adauth.ad.config import ADConfig
from adauth.ad.directory import DirectoryLookup
from adauth.ad.validator import CredentialValidator

__version__ = "0.1.0"

__all__ = [
    # Main API
    "ADConfig",
    "BasicAuthenticator",
    "CredentialValidator",
    "DirectoryLookup",
    "create_basic_authenticator",
    # Types
    "DEFAULT_GROUP_TYPE",
    "AuthenticationResponse",
    "AuthResult",
    "GroupType",
    "UserInfo",
    # Exceptions
    "ADAuthError",
    "DirectoryError",
    "DirectoryUnavailableError",
    # Metadata
    "__version__",
]

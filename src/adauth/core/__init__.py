"""
adauth Core Module

Provides the types and exceptions shared by lookup and validation.

Components:
- types: UserInfo, GroupType, AuthenticationResponse, AuthResult
- exceptions: Custom exception types
"""

from adauth.core.types import (
    DEFAULT_GROUP_TYPE,
    AuthenticationResponse,
    AuthResult,
    Claim,
    ClaimType,
    GroupType,
    UserInfo,
)
from adauth.core.exceptions import (
    ADAuthError,
    ConfigurationError,
    DirectoryError,
    DirectoryUnavailableError,
)

__all__ = [
    # Types
    "DEFAULT_GROUP_TYPE",
    "AuthenticationResponse",
    "AuthResult",
    "Claim",
    "ClaimType",
    "GroupType",
    "UserInfo",
    # Exceptions
    "ADAuthError",
    "ConfigurationError",
    "DirectoryError",
    "DirectoryUnavailableError",
]

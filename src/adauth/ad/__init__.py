"""
adauth Active Directory Module

Directory lookup and credential validation against Active Directory.

Components:
- directory: DirectoryLookup (user and group resolution)
- validator: CredentialValidator (bind and outcome classification)
- error_codes: Bind diagnostic classification
- authenticator: BasicAuthenticator combining both
- config: AD environment configuration
"""

from adauth.ad.authenticator import BasicAuthenticator, create_basic_authenticator
from adauth.ad.config import ADConfig
from adauth.ad.credentials import BasicCredentials, basic_challenge, parse_basic_authorization
from adauth.ad.directory import DirectoryLookup, create_directory_lookup
from adauth.ad.error_codes import AD_ERROR_CODES, classify_bind_error, extract_error_code
from adauth.ad.validator import CredentialValidator

__all__ = [
    "ADConfig",
    "AD_ERROR_CODES",
    "BasicAuthenticator",
    "BasicCredentials",
    "CredentialValidator",
    "DirectoryLookup",
    "basic_challenge",
    "classify_bind_error",
    "create_basic_authenticator",
    "create_directory_lookup",
    "extract_error_code",
    "parse_basic_authorization",
]

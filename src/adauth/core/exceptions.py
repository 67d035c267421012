"""
adauth Exception Types

Infrastructure and configuration errors. Rejected credentials are not
exceptions: they are reported as AuthenticationResponse values.
"""

from typing import Optional


class ADAuthError(Exception):
    """Base exception for all adauth errors."""

    def __init__(self, message: str, code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code


class ConfigurationError(ADAuthError):
    """
    Invalid configuration.

    Raised when a configuration value is missing or cannot be parsed.
    """

    pass


class DirectoryError(ADAuthError):
    """
    Directory operation failed.

    The server was reached but a search or read could not be completed.
    ``code`` carries the LDAP result code when one is available.
    """

    pass


class DirectoryUnavailableError(DirectoryError):
    """
    Directory could not be reached.

    Covers unreachable hosts, socket failures and malformed server names.
    """

    def __init__(self, message: str, host: str = "") -> None:
        super().__init__(message)
        self.host = host

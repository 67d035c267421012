"""
adauth Credential Validator

Validates a username/password by binding to the directory as that user and
classifies any rejection into an AuthenticationResponse.

Security Considerations:
- Passwords are never logged
- A bind the client library refuses to send (empty user or password) is
  UNKNOWN, never SUCCESS, so an unauthenticated bind cannot pass
- NOT_FOUND from a bind does not prove the account is absent; use
  DirectoryLookup for existence checks
"""

from __future__ import annotations

from typing import Any, Optional

import attrs
import structlog
from ldap3.core.exceptions import (
    LDAPPasswordIsMandatoryError,
    LDAPUserNameIsMandatoryError,
)

from adauth.ad.config import ADConfig
from adauth.ad.connection import ConnectionFactory, format_bind_user, open_connection
from adauth.ad.error_codes import classify_bind_error, extract_error_code
from adauth.core.types import AuthenticationResponse


@attrs.define
class CredentialValidator:
    """
    Checks credentials with a directory bind.

    Stateless: each call opens, binds and releases its own connection.

    Example:
        validator = CredentialValidator()
        response = validator.authenticate("corp.example.com", "jdoe", "secret")
        if response is AuthenticationResponse.SUCCESS:
            ...
    """

    config: Optional[ADConfig] = None
    connection_factory: ConnectionFactory = open_connection

    _logger: Any = attrs.Factory(lambda: structlog.get_logger())

    def authenticate(
        self,
        domain: str,
        username: str,
        password: str,
    ) -> AuthenticationResponse:
        """
        Validate a username and password against the domain.

        Args:
            domain: The domain to authenticate against
            username: The username to check
            password: The password to check

        Returns:
            The status reported by the domain controller

        Raises:
            DirectoryUnavailableError: directory could not be reached
        """
        config = self._config_for(domain)
        bind_user = format_bind_user(username, domain)

        self._logger.info("authenticate_start", domain=domain, username=username)

        with self.connection_factory(
            config,
            user=bind_user,
            password=password,
            host=config.server_host,
        ) as connection:
            try:
                bound = connection.bind()
            except (LDAPUserNameIsMandatoryError, LDAPPasswordIsMandatoryError) as e:
                self._logger.warning(
                    "bind_not_attempted",
                    domain=domain,
                    username=username,
                    error=str(e),
                )
                return AuthenticationResponse.UNKNOWN

            if bound:
                self._logger.info("authenticate_success", domain=domain, username=username)
                return AuthenticationResponse.SUCCESS

            result = connection.result or {}
            message = result.get("message")

        response = classify_bind_error(message)
        self._logger.info(
            "bind_rejected",
            domain=domain,
            username=username,
            ldap_result=result.get("result"),
            ad_error_code=extract_error_code(message),
            response=response.name,
        )
        return response

    def _config_for(self, domain: str) -> ADConfig:
        """Use the configured server settings when they belong to ``domain``."""
        if self.config is not None and (
            not domain or domain.lower() == self.config.domain.lower()
        ):
            return self.config
        return ADConfig(domain=domain)

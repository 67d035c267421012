"""
adauth Basic Authenticator

Combines directory lookup and credential validation into a single
authentication decision for HTTP Basic credentials.

Flow:
1. Decode the Basic header
2. Look up the account (must exist)
3. Bind as the account (must succeed)

Every failure returns the same generic message to the client; the detailed
AuthenticationResponse stays on the result and in the logs for auditing.
Directory infrastructure errors propagate to the caller.
"""

from __future__ import annotations

from typing import Any, Optional

import attrs
import structlog
from returns.result import Failure

from adauth.ad.config import ADConfig
from adauth.ad.credentials import basic_challenge, parse_basic_authorization
from adauth.ad.directory import DirectoryLookup
from adauth.ad.validator import CredentialValidator
from adauth.core.types import AuthenticationResponse, AuthResult, GroupType


@attrs.define
class BasicAuthenticator:
    """
    Authenticates Basic credentials against Active Directory.

    Example:
        auth = create_basic_authenticator("corp.example.com", bind_user="svc", bind_password="...")
        result = auth.authenticate_header(request.headers.get("Authorization"))
        if not result.success:
            return 401, {"WWW-Authenticate": auth.challenge()}
        claims = result.user.to_claims()
    """

    config: ADConfig
    lookup: DirectoryLookup = attrs.field()
    validator: CredentialValidator = attrs.field()

    _logger: Any = attrs.Factory(lambda: structlog.get_logger())

    @lookup.default
    def _default_lookup(self) -> DirectoryLookup:
        return DirectoryLookup(config=self.config)

    @validator.default
    def _default_validator(self) -> CredentialValidator:
        return CredentialValidator(config=self.config)

    def challenge(self) -> str:
        """``WWW-Authenticate`` header value for unauthenticated requests."""
        return basic_challenge(self.config.domain)

    def authenticate_header(self, header: Optional[str]) -> AuthResult:
        """
        Authenticate the credentials carried by an ``Authorization`` header.

        Args:
            header: Raw header value (None when absent)

        Returns:
            AuthResult; failures always carry the generic message
        """
        parsed = parse_basic_authorization(header)
        if isinstance(parsed, Failure):
            self._logger.info("basic_credentials_rejected", reason=parsed.failure())
            return AuthResult.failure_result(AuthenticationResponse.UNKNOWN)

        credentials = parsed.unwrap()
        return self.authenticate(credentials.username, credentials.password)

    def authenticate(
        self,
        username: str,
        password: str,
        group_type: Optional[GroupType] = None,
    ) -> AuthResult:
        """
        Look up ``username`` and validate ``password``.

        Both the lookup and the bind must succeed.
        """
        user = self.lookup.find_user(username, group_type)
        if user is None:
            self._logger.info(
                "authentication_failed",
                username=username,
                response=AuthenticationResponse.NOT_FOUND.name,
            )
            return AuthResult.failure_result(AuthenticationResponse.NOT_FOUND)

        response = self.validator.authenticate(self.config.domain, username, password)
        if response.is_success:
            self._logger.info("authentication_succeeded", username=username, sid=user.sid)
            return AuthResult.success_result(user)

        self._logger.info(
            "authentication_failed",
            username=username,
            sid=user.sid,
            response=response.name,
        )
        return AuthResult.failure_result(response, user=user)


def create_basic_authenticator(
    domain: str,
    dc_host: str = "",
    bind_user: str = "",
    bind_password: str = "",
    group_type: Optional[GroupType] = None,
    use_ssl: bool = False,
    discover: bool = False,
) -> BasicAuthenticator:
    """
    Create a Basic authenticator for a domain.

    Args:
        domain: AD domain name
        dc_host: Domain controller hostname (optional)
        bind_user: Service account used for lookups
        bind_password: Service account password
        group_type: Default group type filter
        use_ssl: Connect with LDAPS
        discover: Find a domain controller via DNS when dc_host is empty

    Returns:
        Configured BasicAuthenticator
    """
    kwargs = dict(
        bind_user=bind_user,
        bind_password=bind_password,
        use_ssl=use_ssl,
    )
    if dc_host:
        kwargs["dc_host"] = dc_host
    if group_type is not None:
        kwargs["group_type"] = group_type

    config = ADConfig.from_domain(domain, discover=discover, **kwargs)
    return BasicAuthenticator(config=config)

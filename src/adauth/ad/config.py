"""
adauth Active Directory Configuration
"""

from __future__ import annotations

import os
from typing import Mapping, Optional

import attrs
import structlog

from adauth.ad.discovery import discover_dc_servers
from adauth.core.exceptions import ConfigurationError
from adauth.core.types import DEFAULT_GROUP_TYPE, GroupType

logger = structlog.get_logger()

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off", "")


def domain_to_base_dn(domain: str) -> str:
    """Convert ``corp.example.com`` to ``DC=corp,DC=example,DC=com``."""
    labels = [label.strip() for label in domain.split(".") if label.strip()]
    if not labels:
        raise ConfigurationError(f"Cannot derive a base DN from domain {domain!r}")
    return ",".join(f"DC={label}" for label in labels)


@attrs.define
class ADConfig:
    """
    Active Directory configuration.

    Attributes:
        domain: AD domain name (e.g., "corp.example.com")
        dc_host: Domain controller hostname (empty: use the domain name)
        ldap_port: LDAP port (default 389)
        ldaps_port: LDAPS port (default 636)
        use_ssl: Connect with LDAPS
        verify_server_cert: Verify LDAPS certificate
        base_dn: Search base (empty: derived from domain)
        bind_user: Service account used for directory lookups
        bind_password: Service account password
        group_type: Default group type filter for lookups
        connect_timeout: Socket connect timeout in seconds (None: no limit)
    """

    domain: str
    dc_host: str = ""
    ldap_port: int = 389
    ldaps_port: int = 636
    use_ssl: bool = False
    verify_server_cert: bool = True
    base_dn: str = ""
    bind_user: str = attrs.field(default="", repr=False)
    bind_password: str = attrs.field(default="", repr=False)
    group_type: GroupType = DEFAULT_GROUP_TYPE
    connect_timeout: Optional[float] = None

    @property
    def server_host(self) -> str:
        """Host to connect to."""
        return self.dc_host or self.domain

    @property
    def port(self) -> int:
        return self.ldaps_port if self.use_ssl else self.ldap_port

    @property
    def search_base(self) -> str:
        """Base DN for user and group searches."""
        return self.base_dn or domain_to_base_dn(self.domain)

    @classmethod
    def from_domain(cls, domain: str, discover: bool = False, **kwargs) -> "ADConfig":
        """
        Create config from domain name.

        With ``discover`` set, the first domain controller advertised in
        DNS SRV records is used as ``dc_host``.

        Args:
            domain: AD domain name
            discover: Look up a domain controller via DNS
        """
        if not domain:
            raise ConfigurationError("domain is required")

        if discover and "dc_host" not in kwargs:
            servers = discover_dc_servers(domain)
            if servers:
                host, port = servers[0]
                kwargs["dc_host"] = host
                kwargs.setdefault("ldap_port", port)
            else:
                logger.warning("dc_discovery_empty", domain=domain)

        return cls(domain=domain, **kwargs)

    @classmethod
    def from_env(
        cls,
        prefix: str = "ADAUTH_",
        environ: Optional[Mapping[str, str]] = None,
    ) -> "ADConfig":
        """
        Create config from environment variables.

        Recognised names (with the default prefix): ADAUTH_DOMAIN (required),
        ADAUTH_DC_HOST, ADAUTH_LDAP_PORT, ADAUTH_LDAPS_PORT, ADAUTH_USE_SSL,
        ADAUTH_VERIFY_SERVER_CERT, ADAUTH_BASE_DN, ADAUTH_BIND_USER,
        ADAUTH_BIND_PASSWORD, ADAUTH_GROUP_TYPE, ADAUTH_CONNECT_TIMEOUT.
        """
        env = os.environ if environ is None else environ

        def get(name: str) -> Optional[str]:
            return env.get(prefix + name)

        domain = get("DOMAIN")
        if not domain:
            raise ConfigurationError(f"{prefix}DOMAIN is not set")

        kwargs = {}
        for name in ("DC_HOST", "BASE_DN", "BIND_USER", "BIND_PASSWORD"):
            value = get(name)
            if value is not None:
                kwargs[name.lower()] = value
        for name in ("LDAP_PORT", "LDAPS_PORT"):
            value = get(name)
            if value is not None:
                kwargs[name.lower()] = _parse_int(prefix + name, value)
        for name in ("USE_SSL", "VERIFY_SERVER_CERT"):
            value = get(name)
            if value is not None:
                kwargs[name.lower()] = _parse_bool(prefix + name, value)

        group_type = get("GROUP_TYPE")
        if group_type is not None:
            try:
                kwargs["group_type"] = GroupType.parse(group_type)
            except ValueError as e:
                raise ConfigurationError(f"{prefix}GROUP_TYPE: {e}") from e

        timeout = get("CONNECT_TIMEOUT")
        if timeout:
            try:
                kwargs["connect_timeout"] = float(timeout)
            except ValueError as e:
                raise ConfigurationError(f"{prefix}CONNECT_TIMEOUT: {e}") from e

        return cls(domain=domain, **kwargs)


def _parse_int(name: str, value: str) -> int:
    try:
        return int(value)
    except ValueError as e:
        raise ConfigurationError(f"{name}: {e}") from e


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{name}: not a boolean: {value!r}")

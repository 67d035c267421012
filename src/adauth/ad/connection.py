"""
adauth LDAP Connection Handling

One connection per call, always released. Socket-level ldap3 failures are
translated to DirectoryUnavailableError; everything else propagates.
"""

from __future__ import annotations

import ssl
from contextlib import contextmanager
from typing import Any, Callable, ContextManager, Iterator, Optional

import structlog
from ldap3 import ANONYMOUS, NONE, SIMPLE, Connection, Server, Tls
from ldap3.core.exceptions import (
    LDAPCommunicationError,
    LDAPInvalidPortError,
    LDAPInvalidServerError,
    LDAPStartTLSError,
)

from adauth.ad.config import ADConfig
from adauth.core.exceptions import DirectoryUnavailableError

logger = structlog.get_logger()

ConnectionFactory = Callable[..., ContextManager[Any]]

_UNAVAILABLE_ERRORS = (
    LDAPCommunicationError,
    LDAPInvalidServerError,
    LDAPInvalidPortError,
    LDAPStartTLSError,
)


def format_bind_user(username: str, domain: str) -> str:
    """
    Qualify a bare account name for a simple bind.

    ``jdoe`` becomes ``jdoe@corp.example.com``. Names that already carry a
    domain (``jdoe@corp``, ``CORP\\jdoe``) or are DNs pass through, as
    does the empty string.
    """
    if not username or not domain:
        return username
    if "@" in username or "\\" in username or "=" in username:
        return username
    return f"{username}@{domain}"


def build_server(config: ADConfig, host: Optional[str] = None) -> Server:
    """Build an ldap3 Server for ``host`` (default: the configured DC)."""
    host = host or config.server_host
    if not host:
        raise DirectoryUnavailableError("No directory server or domain given")
    tls = None
    if config.use_ssl:
        tls = Tls(
            validate=ssl.CERT_REQUIRED if config.verify_server_cert else ssl.CERT_NONE,
        )
    try:
        return Server(
            host,
            port=config.port,
            use_ssl=config.use_ssl,
            tls=tls,
            get_info=NONE,
            connect_timeout=config.connect_timeout,
        )
    except _UNAVAILABLE_ERRORS as e:
        logger.error("ldap_server_invalid", host=host, error=str(e))
        raise DirectoryUnavailableError(f"Invalid directory server {host!r}: {e}", host=host) from e


@contextmanager
def open_connection(
    config: ADConfig,
    user: Optional[str] = None,
    password: Optional[str] = None,
    host: Optional[str] = None,
) -> Iterator[Connection]:
    """
    Yield an unbound ldap3 Connection and always release it.

    With ``user`` unset the configured service account is used, or an
    anonymous connection when none is configured. An explicit ``user``
    always gets a simple bind, so an empty name is refused by ldap3 rather
    than sent anonymously. The caller decides when to bind.
    """
    if user is None:
        user = format_bind_user(config.bind_user, config.domain)
        password = config.bind_password
        authentication = SIMPLE if user else ANONYMOUS
    else:
        authentication = SIMPLE
    server_host = host or config.server_host

    server = build_server(config, host=server_host)
    connection = Connection(
        server,
        user=user or None,
        password=password,
        authentication=authentication,
        raise_exceptions=False,
        read_only=True,
    )
    logger.debug("ldap_connection_created", host=server_host, port=config.port)
    try:
        yield connection
    except _UNAVAILABLE_ERRORS as e:
        logger.error(
            "ldap_connection_failed",
            host=server_host,
            port=config.port,
            error=str(e),
        )
        raise DirectoryUnavailableError(
            f"Failed to reach directory {server_host}:{config.port}: {e}",
            host=server_host,
        ) from e
    finally:
        connection.unbind()
        logger.debug("ldap_connection_closed", host=server_host)

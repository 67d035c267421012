"""
Domain controller discovery via DNS SRV records.

Queries: _ldap._tcp.dc._msdcs.<domain>
"""

from __future__ import annotations

from typing import List, Tuple

import dns.exception
import dns.resolver
import structlog

logger = structlog.get_logger()


def discover_dc_servers(domain: str) -> List[Tuple[str, int]]:
    """
    Discover Domain Controller servers using DNS SRV records.

    Lookup failures are logged and yield an empty list.

    Args:
        domain: AD domain name

    Returns:
        List of (hostname, port) tuples sorted by priority
    """
    servers = []

    srv_name = f"_ldap._tcp.dc._msdcs.{domain.lower()}"
    try:
        answers = dns.resolver.resolve(srv_name, "SRV")
        for rdata in answers:
            servers.append({
                "host": str(rdata.target).rstrip("."),
                "port": rdata.port,
                "priority": rdata.priority,
                "weight": rdata.weight,
            })
    except dns.exception.DNSException as e:
        logger.debug("dns_srv_lookup_failed", name=srv_name, error=str(e))

    # Lower priority first, then higher weight
    servers.sort(key=lambda x: (x["priority"], -x["weight"]))

    logger.debug("dc_servers_discovered", domain=domain, count=len(servers))
    return [(s["host"], s["port"]) for s in servers]

"""
adauth Directory Lookup

Locates a user by sAMAccountName and resolves the user's transitive group
memberships (``tokenGroups``) into group names.

Query pattern per call:
1. One subtree search for the user
2. One base read of the user's ``tokenGroups`` (never cached)
3. One search per group SID to resolve it to a group name

Nothing is cached between calls.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import attrs
import structlog
from ldap3 import BASE, SUBTREE
from ldap3.protocol.formatters.formatters import format_sid
from ldap3.utils.conv import escape_filter_chars

from adauth.ad.config import ADConfig
from adauth.ad.connection import ConnectionFactory, open_connection
from adauth.core.exceptions import DirectoryError
from adauth.core.types import GroupType, UserInfo


# =============================================================================
# QUERIES
# =============================================================================


USER_SEARCH_QUERY = "(&(objectClass=user)(objectCategory=user)(sAMAccountName={0}))"
GROUP_SEARCH_QUERY_TYPE_UNFILTERED = "(&(objectClass=group)(objectCategory=group)(objectSid={0}))"
GROUP_SEARCH_QUERY_TYPE_FILTERED = (
    "(&(objectClass=group)(objectCategory=group)(objectSid={0})(groupType={1}))"
)
TOKEN_GROUPS_QUERY = "(objectClass=*)"

USER_ATTRIBUTES = ["displayName", "objectSid", "sAMAccountName"]
GROUP_ATTRIBUTES = ["sAMAccountName", "groupType"]
TOKEN_GROUPS_ATTRIBUTES = ["tokenGroups"]

# LDAP result codes accepted from a search
_RESULT_SUCCESS = 0
_RESULT_SIZE_LIMIT_EXCEEDED = 4


def user_search_filter(sam_account_name: str) -> str:
    """Filter locating a user by sAMAccountName."""
    return USER_SEARCH_QUERY.format(escape_filter_chars(sam_account_name))


def group_search_filter(sid: str, group_type: GroupType) -> str:
    """Filter resolving a group SID, restricted to ``group_type`` unless NONE."""
    if group_type == GroupType.NONE:
        return GROUP_SEARCH_QUERY_TYPE_UNFILTERED.format(escape_filter_chars(sid))
    return GROUP_SEARCH_QUERY_TYPE_FILTERED.format(
        escape_filter_chars(sid), group_type.ldap_value
    )


# =============================================================================
# ATTRIBUTE DECODING
# =============================================================================


def _raw_values(entry: Dict[str, Any], name: str) -> List[Any]:
    values = (entry.get("raw_attributes") or {}).get(name)
    if values is None:
        return []
    if isinstance(values, (bytes, str)):
        return [values]
    return list(values)


def _text(entry: Dict[str, Any], name: str) -> str:
    values = _raw_values(entry, name)
    if not values:
        return ""
    value = values[0]
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return str(value)


def sid_to_string(raw: Any) -> str:
    """Render a binary (or already textual) SID as ``S-1-...``."""
    if isinstance(raw, str):
        return raw
    value = format_sid(raw)
    if isinstance(value, bytes):
        return value.decode("ascii")
    return value


# =============================================================================
# DIRECTORY LOOKUP
# =============================================================================


@attrs.define
class DirectoryLookup:
    """
    Looks up users and their group memberships in Active Directory.

    Stateless: each call opens, uses and releases its own connection.

    Example:
        lookup = DirectoryLookup(ADConfig(domain="corp.example.com"))
        user = lookup.find_user("jdoe")
        if user is not None:
            print(user.display_name, sorted(user.groups))
    """

    config: ADConfig
    connection_factory: ConnectionFactory = open_connection

    _logger: Any = attrs.Factory(lambda: structlog.get_logger())

    def find_user(
        self,
        sam_account_name: str,
        group_type: Optional[GroupType] = None,
    ) -> Optional[UserInfo]:
        """
        Look up a user by sAMAccountName.

        Args:
            sam_account_name: The account name to look up
            group_type: Group types to return. None uses the configured
                default (Security + Global scope unless configured).
                GroupType.NONE returns every group.

        Returns:
            UserInfo for the first matching user, or None if not found

        Raises:
            DirectoryUnavailableError: directory could not be reached
            DirectoryError: a search failed
        """
        if group_type is None:
            group_type = self.config.group_type

        self._logger.info(
            "find_user_start",
            sam_account_name=sam_account_name,
            group_type=int(group_type),
        )

        with self.connection_factory(self.config) as connection:
            self._bind(connection)

            entries = self._search(
                connection,
                self.config.search_base,
                user_search_filter(sam_account_name),
                SUBTREE,
                USER_ATTRIBUTES,
                size_limit=1,
            )
            if not entries:
                self._logger.info("find_user_not_found", sam_account_name=sam_account_name)
                return None

            entry = entries[0]
            sids = _raw_values(entry, "objectSid")
            if not sids:
                raise DirectoryError(f"User entry {entry.get('dn')!r} has no objectSid")

            groups = self._get_user_groups(connection, entry["dn"], group_type)

            user = UserInfo(
                sid=sid_to_string(sids[0]),
                username=_text(entry, "sAMAccountName") or sam_account_name,
                display_name=_text(entry, "displayName"),
                groups=groups,
            )

        self._logger.info(
            "find_user_complete",
            sam_account_name=sam_account_name,
            sid=user.sid,
            group_count=len(user.groups),
        )
        return user

    def _get_user_groups(
        self,
        connection: Any,
        user_dn: str,
        group_type: GroupType,
    ) -> List[str]:
        """
        Resolve the user's tokenGroups to group sAMAccountNames.

        tokenGroups is a constructed attribute, so it is read with a base
        search on the user's DN every time.
        """
        entries = self._search(
            connection,
            user_dn,
            TOKEN_GROUPS_QUERY,
            BASE,
            TOKEN_GROUPS_ATTRIBUTES,
        )
        token_groups = _raw_values(entries[0], "tokenGroups") if entries else []

        groups = []
        for raw_sid in token_groups:
            sid = sid_to_string(raw_sid)
            results = self._search(
                connection,
                self.config.search_base,
                group_search_filter(sid, group_type),
                SUBTREE,
                GROUP_ATTRIBUTES,
                size_limit=1,
            )
            if not results:
                # Orphaned SID or filtered out by group type
                self._logger.debug("group_unresolved", sid=sid)
                continue

            name = _text(results[0], "sAMAccountName")
            if not name:
                self._logger.debug("group_without_name", sid=sid, dn=results[0].get("dn"))
                continue
            self._logger.debug("group_resolved", sid=sid, group=name)
            groups.append(name)

        return groups

    def _bind(self, connection: Any) -> None:
        if not connection.bind():
            result = connection.result or {}
            self._logger.error(
                "lookup_bind_failed",
                description=result.get("description"),
                message=result.get("message"),
            )
            raise DirectoryError(
                f"Directory lookup bind failed: {result.get('description', 'unknown error')}",
                code=result.get("result"),
            )

    def _search(
        self,
        connection: Any,
        search_base: str,
        search_filter: str,
        search_scope: str,
        attributes: List[str],
        size_limit: int = 0,
    ) -> List[Dict[str, Any]]:
        """Run one search and return its entries, raising on LDAP errors."""
        connection.search(
            search_base=search_base,
            search_filter=search_filter,
            search_scope=search_scope,
            attributes=attributes,
            size_limit=size_limit,
        )
        result = connection.result or {}
        code = result.get("result", _RESULT_SUCCESS)
        if code not in (_RESULT_SUCCESS, _RESULT_SIZE_LIMIT_EXCEEDED):
            self._logger.error(
                "ldap_search_failed",
                search_base=search_base,
                search_filter=search_filter,
                code=code,
                description=result.get("description"),
            )
            raise DirectoryError(
                f"Search failed: {result.get('description', code)}",
                code=code,
            )
        return [
            entry
            for entry in (connection.response or [])
            if entry.get("type") == "searchResEntry"
        ]


def create_directory_lookup(
    domain: str,
    dc_host: str = "",
    bind_user: str = "",
    bind_password: str = "",
    group_type: Optional[GroupType] = None,
    use_ssl: bool = False,
) -> DirectoryLookup:
    """
    Create a directory lookup for a domain.

    Args:
        domain: AD domain name
        dc_host: Domain controller hostname (optional)
        bind_user: Service account for searches (empty: anonymous)
        bind_password: Service account password
        group_type: Default group type filter
        use_ssl: Connect with LDAPS
    """
    config = ADConfig(
        domain=domain,
        dc_host=dc_host,
        bind_user=bind_user,
        bind_password=bind_password,
        use_ssl=use_ssl,
    )
    if group_type is not None:
        config.group_type = group_type
    return DirectoryLookup(config=config)

"""
Test support: an in-memory stand-in for Active Directory.

FakeDirectory implements the parts of ldap3.Connection adauth uses (bind,
search, unbind, result, response) over a small set of users and groups.
"""

import re
import struct
from contextlib import contextmanager
from typing import Dict, List, Optional

import attrs
from ldap3.core.exceptions import LDAPPasswordIsMandatoryError, LDAPUserNameIsMandatoryError

from adauth.core.types import GroupType


DOMAIN = "corp.example.com"
BASE_DN = "DC=corp,DC=example,DC=com"
DOMAIN_SID = "S-1-5-21-1004336348-1177238915-682003330"

JDOE_SID = f"{DOMAIN_SID}-1001"
ENGINEERING_SID = f"{DOMAIN_SID}-2001"
LOCAL_ADMINS_SID = f"{DOMAIN_SID}-2002"
ORPHANED_SID = f"{DOMAIN_SID}-2999"

SECURITY_GLOBAL = GroupType.SECURITY_GROUP | GroupType.GLOBAL_SCOPE
SECURITY_DOMAIN_LOCAL = GroupType.SECURITY_GROUP | GroupType.DOMAIN_LOCAL_SCOPE

WRONG_PASSWORD_MESSAGE = (
    "80090308: LdapErr: DSID-0C09042A, comment: AcceptSecurityContext error, "
    "data 52e, v3839\x00"
)


def sid_to_bytes(sid: str) -> bytes:
    """Encode ``S-1-5-21-...`` in the binary form AD returns."""
    parts = sid.split("-")
    revision = int(parts[1])
    authority = int(parts[2])
    sub_authorities = [int(p) for p in parts[3:]]
    data = struct.pack("BB", revision, len(sub_authorities))
    data += authority.to_bytes(6, byteorder="big")
    for sub in sub_authorities:
        data += struct.pack("<I", sub)
    return data


def bind_failure_message(code: str) -> str:
    """AD diagnostic message for a rejected bind with sub-error ``code``."""
    return (
        "80090308: LdapErr: DSID-0C09042A, comment: AcceptSecurityContext error, "
        f"data {code}, v3839\x00"
    )


# =============================================================================
# FAKE DIRECTORY
# =============================================================================


@attrs.define
class FakeUser:
    dn: str
    sid: str
    sam_account_name: str
    display_name: str = ""
    token_groups: List[str] = attrs.Factory(list)


@attrs.define
class FakeGroup:
    sid: str
    sam_account_name: str
    group_type: GroupType


@attrs.define
class FakeConnection:
    """Implements the subset of ldap3.Connection used by adauth."""

    directory: "FakeDirectory"
    user: Optional[str]
    password: Optional[str]
    host: Optional[str]

    bound: bool = False
    closed: bool = False
    result: Dict = attrs.Factory(dict)
    response: List[Dict] = attrs.Factory(list)
    searches: List[str] = attrs.Factory(list)

    def bind(self) -> bool:
        if self.directory.unreachable is not None:
            raise self.directory.unreachable
        if self.user is None:
            self.bound = True
            self.result = {"result": 0, "description": "success", "message": "", "type": "bindResponse"}
            return True
        if not self.user:
            raise LDAPUserNameIsMandatoryError("user name is mandatory in simple bind")
        if not self.password:
            raise LDAPPasswordIsMandatoryError("password is mandatory in simple bind")

        if self.user in self.directory.bind_errors:
            message = self.directory.bind_errors[self.user]
        elif self.directory.passwords.get(self.user) == self.password:
            self.bound = True
            self.result = {"result": 0, "description": "success", "message": "", "type": "bindResponse"}
            return True
        else:
            message = WRONG_PASSWORD_MESSAGE

        self.result = {
            "result": 49,
            "description": "invalidCredentials",
            "message": message,
            "type": "bindResponse",
        }
        return False

    def search(self, search_base, search_filter, search_scope, attributes, size_limit=0):
        self.searches.append(search_filter)
        if self.directory.search_error is not None:
            self.result = dict(self.directory.search_error)
            self.response = []
            return False

        entries = self.directory.find(search_base, search_filter, search_scope)
        if size_limit:
            entries = entries[:size_limit]
        self.response = entries
        self.result = {"result": 0, "description": "success", "type": "searchResDone"}
        return bool(entries)

    def unbind(self) -> bool:
        self.closed = True
        self.bound = False
        return True


@attrs.define
class FakeDirectory:
    """In-memory directory with users, groups and bind passwords."""

    users: Dict[str, FakeUser] = attrs.Factory(dict)
    groups: Dict[str, FakeGroup] = attrs.Factory(dict)
    passwords: Dict[str, str] = attrs.Factory(dict)
    bind_errors: Dict[str, str] = attrs.Factory(dict)
    unreachable: Optional[Exception] = None
    search_error: Optional[Dict] = None
    connections: List[FakeConnection] = attrs.Factory(list)

    def add_user(self, user: FakeUser, password: Optional[str] = None) -> None:
        self.users[user.sam_account_name.lower()] = user
        if password is not None:
            self.passwords[f"{user.sam_account_name}@{DOMAIN}"] = password

    def add_group(self, group: FakeGroup) -> None:
        self.groups[group.sid] = group

    @contextmanager
    def connect(self, config, user=None, password=None, host=None):
        connection = FakeConnection(self, user=user, password=password, host=host)
        self.connections.append(connection)
        try:
            yield connection
        finally:
            connection.unbind()

    def find(self, search_base: str, search_filter: str, search_scope: str) -> List[Dict]:
        if search_scope == "BASE":
            for user in self.users.values():
                if user.dn == search_base:
                    return [self._entry(user.dn, {
                        "tokenGroups": [sid_to_bytes(sid) for sid in user.token_groups],
                    })]
            return []

        match = re.search(r"\(sAMAccountName=([^)]*)\)", search_filter)
        if match and "objectClass=user" in search_filter:
            user = self.users.get(match.group(1).lower())
            if user is None:
                return []
            return [self._entry(user.dn, {
                "objectSid": [sid_to_bytes(user.sid)],
                "sAMAccountName": [user.sam_account_name.encode("utf-8")],
                "displayName": [user.display_name.encode("utf-8")],
            })]

        match = re.search(r"\(objectSid=([^)]*)\)", search_filter)
        if match and "objectClass=group" in search_filter:
            group = self.groups.get(match.group(1))
            if group is None:
                return []
            type_match = re.search(r"\(groupType=(-?\d+)\)", search_filter)
            if type_match and group.group_type.ldap_value != int(type_match.group(1)):
                return []
            return [self._entry(f"CN={group.sam_account_name},CN=Users,{BASE_DN}", {
                "sAMAccountName": [group.sam_account_name.encode("utf-8")],
                "groupType": [str(group.group_type.ldap_value).encode("ascii")],
            })]

        return []

    @staticmethod
    def _entry(dn: str, raw_attributes: Dict) -> Dict:
        return {"type": "searchResEntry", "dn": dn, "raw_attributes": raw_attributes}


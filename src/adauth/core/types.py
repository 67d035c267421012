"""
adauth Core Types

Type definitions shared by directory lookup and credential validation.

Design Principles:
- Immutable: identity records use frozen attrs
- Fresh: every record is built from a new directory query
- Closed: authentication outcomes form a fixed enumeration
"""

from __future__ import annotations

from enum import Enum, IntFlag, auto
from typing import FrozenSet, List, Optional

import attrs
from attrs import field, validators


# =============================================================================
# ENUMS
# =============================================================================


class GroupType(IntFlag):
    """
    Active Directory group type flags (the ``groupType`` attribute).

    NONE disables filtering. Any other combination must match a group's
    ``groupType`` exactly.
    """

    NONE = 0x00000000
    SYSTEM_CREATED = 0x00000001
    GLOBAL_SCOPE = 0x00000002
    DOMAIN_LOCAL_SCOPE = 0x00000004
    UNIVERSAL_SCOPE = 0x00000008
    SECURITY_GROUP = 0x80000000

    @property
    def ldap_value(self) -> int:
        """Return the signed 32-bit value AD stores in ``groupType``."""
        value = int(self) & 0xFFFFFFFF
        return value - 0x100000000 if value & 0x80000000 else value

    @classmethod
    def from_ldap_value(cls, value: int) -> GroupType:
        """Build flags from a (possibly negative) ``groupType`` value."""
        return cls(int(value) & 0xFFFFFFFF)

    @classmethod
    def parse(cls, text: str) -> GroupType:
        """
        Parse a flag expression such as ``"SECURITY_GROUP|GLOBAL_SCOPE"``.

        Numeric values (decimal or ``0x`` hex, signed or unsigned) are
        also accepted.
        """
        text = text.strip()
        try:
            return cls.from_ldap_value(int(text, 0))
        except ValueError:
            pass

        flags = cls.NONE
        for name in text.split("|"):
            name = name.strip().upper()
            if not name:
                continue
            try:
                flags |= cls[name]
            except KeyError:
                raise ValueError(f"Unknown group type flag: {name}") from None
        return flags


DEFAULT_GROUP_TYPE = GroupType.SECURITY_GROUP | GroupType.GLOBAL_SCOPE


class AuthenticationResponse(Enum):
    """
    Outcome of a credential validation attempt.

    Exactly one value results from each bind attempt. UNKNOWN is the
    fallback for rejections that cannot be classified.
    """

    SUCCESS = auto()
    NOT_FOUND = auto()
    INVALID_CREDENTIALS = auto()
    LOGIN_NOT_PERMITTED_TIME = auto()
    LOGIN_NOT_PERMITTED_WORKSTATION = auto()
    PASSWORD_EXPIRED = auto()
    ACCOUNT_DISABLED = auto()
    ACCOUNT_EXPIRED = auto()
    RESET_PASSWORD_REQUIRED = auto()
    ACCOUNT_LOCKED = auto()
    UNKNOWN = auto()

    @property
    def is_success(self) -> bool:
        return self is AuthenticationResponse.SUCCESS


# =============================================================================
# IDENTITY TYPES
# =============================================================================


class ClaimType:
    """Claim type names used when projecting a UserInfo."""

    SID = "sid"
    NAME = "name"
    DISPLAY_NAME = "display_name"
    ROLE = "role"


@attrs.define(frozen=True, slots=True)
class Claim:
    """A single (type, value) statement about an authenticated user."""

    type: str
    value: str


@attrs.define(frozen=True, slots=True)
class UserInfo:
    """
    A directory user resolved by account name.

    Attributes:
        sid: Security identifier string (e.g. ``S-1-5-21-...-1001``)
        username: The user's sAMAccountName
        display_name: Human readable name, may be empty
        groups: sAMAccountNames of the groups matching the group type
            filter in effect when the record was looked up

    INVARIANT: sid and username are non-empty
    """

    sid: str = field(validator=[validators.instance_of(str), validators.min_len(1)])
    username: str = field(validator=[validators.instance_of(str), validators.min_len(1)])
    display_name: str = field(default="", validator=validators.instance_of(str))
    groups: FrozenSet[str] = field(default=frozenset(), converter=frozenset)

    def is_member_of(self, group: str) -> bool:
        """Case-insensitive group membership check."""
        group = group.lower()
        return any(g.lower() == group for g in self.groups)

    def to_claims(self) -> List[Claim]:
        """
        Project this record into claims.

        One claim each for sid, name and display name, followed by one
        role claim per group (sorted for stable output).
        """
        claims = [
            Claim(ClaimType.SID, self.sid),
            Claim(ClaimType.NAME, self.username),
            Claim(ClaimType.DISPLAY_NAME, self.display_name),
        ]
        claims.extend(Claim(ClaimType.ROLE, group) for group in sorted(self.groups))
        return claims


# =============================================================================
# RESULT TYPES
# =============================================================================


GENERIC_FAILURE_MESSAGE = "Invalid credentials."


@attrs.define(frozen=True, slots=True)
class AuthResult:
    """
    Combined result of looking up a user and validating their password.

    Attributes:
        success: Whether authentication succeeded
        user: Resolved user (present whenever the lookup found the account)
        response: Detailed bind outcome, for server-side auditing
        error_message: Generic message safe to show the client (if failure)
    """

    success: bool
    user: Optional[UserInfo] = None
    response: AuthenticationResponse = AuthenticationResponse.UNKNOWN
    error_message: str = ""

    def __attrs_post_init__(self) -> None:
        if self.success:
            if self.user is None:
                raise ValueError("Successful auth must have user")
            if not self.response.is_success:
                raise ValueError("Successful auth must have SUCCESS response")
        else:
            if not self.error_message:
                raise ValueError("Failed auth must have error_message")

    @classmethod
    def success_result(cls, user: UserInfo) -> AuthResult:
        """Create a successful authentication result."""
        return cls(success=True, user=user, response=AuthenticationResponse.SUCCESS)

    @classmethod
    def failure_result(
        cls,
        response: AuthenticationResponse,
        user: Optional[UserInfo] = None,
        error_message: str = GENERIC_FAILURE_MESSAGE,
    ) -> AuthResult:
        """Create a failed authentication result."""
        return cls(
            success=False,
            user=user,
            response=response,
            error_message=error_message,
        )

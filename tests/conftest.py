"""
Pytest configuration and shared fixtures for adauth tests.
"""

import pytest

from adauth.ad.config import ADConfig
from adauth.ad.directory import DirectoryLookup
from adauth.ad.validator import CredentialValidator
from tests.support import (
    BASE_DN,
    DOMAIN,
    DOMAIN_SID,
    ENGINEERING_SID,
    JDOE_SID,
    LOCAL_ADMINS_SID,
    ORPHANED_SID,
    SECURITY_DOMAIN_LOCAL,
    SECURITY_GLOBAL,
    FakeDirectory,
    FakeGroup,
    FakeUser,
)


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def ad_config() -> ADConfig:
    """AD configuration for testing."""
    return ADConfig(
        domain=DOMAIN,
        dc_host="dc01.corp.example.com",
        bind_user="svc-lookup",
        bind_password="LookupP@ss1",
    )


@pytest.fixture
def directory() -> FakeDirectory:
    """
    Directory holding jdoe (Jane Doe) with one matching global security
    group (Engineering), one domain-local group (LocalAdmins) and one SID
    that resolves to nothing.
    """
    directory = FakeDirectory()
    directory.add_group(FakeGroup(ENGINEERING_SID, "Engineering", SECURITY_GLOBAL))
    directory.add_group(FakeGroup(LOCAL_ADMINS_SID, "LocalAdmins", SECURITY_DOMAIN_LOCAL))
    directory.add_user(
        FakeUser(
            dn=f"CN=Jane Doe,CN=Users,{BASE_DN}",
            sid=JDOE_SID,
            sam_account_name="jdoe",
            display_name="Jane Doe",
            token_groups=[ENGINEERING_SID, LOCAL_ADMINS_SID, ORPHANED_SID],
        ),
        password="CorrectHorse1!",
    )
    directory.add_user(
        FakeUser(
            dn=f"CN=No Groups,CN=Users,{BASE_DN}",
            sid=f"{DOMAIN_SID}-1002",
            sam_account_name="nogroups",
            display_name="No Groups",
        ),
        password="NoGroups1!",
    )
    return directory


@pytest.fixture
def lookup(ad_config: ADConfig, directory: FakeDirectory) -> DirectoryLookup:
    """Directory lookup backed by the fake directory."""
    return DirectoryLookup(config=ad_config, connection_factory=directory.connect)


@pytest.fixture
def validator(ad_config: ADConfig, directory: FakeDirectory) -> CredentialValidator:
    """Credential validator backed by the fake directory."""
    return CredentialValidator(config=ad_config, connection_factory=directory.connect)


# =============================================================================
# PYTEST MARKERS
# =============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests requiring real AD environment"
    )

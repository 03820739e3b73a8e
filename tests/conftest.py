"""Test fixtures."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from ldapverify.config import Config
from ldapverify.factory import Factory

from .support.config import configure
from .support.ldap import MockLDAP, patch_ldap


@pytest.fixture(autouse=True)
def environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove any environment overrides of the test configuration."""
    for setting in (
        "BASE_DN",
        "BIND_DN",
        "CONFIG_PATH",
        "LOG_LEVEL",
        "MAIL_ATTRIBUTE",
        "PROFILE",
        "SEARCH_FILTER",
        "SERVER",
        "START_TLS",
        "UID_ATTRIBUTE",
    ):
        monkeypatch.delenv(f"LDAPVERIFY_{setting}", raising=False)
    for setting in ("LOGLEVEL", "PROFILE"):
        monkeypatch.delenv(setting, raising=False)


@pytest.fixture
def config() -> Config:
    """Set up and return the default test configuration.

    The default configuration does an anonymous bind to an ``ldap`` URL
    without STARTTLS and does not use a mail attribute.
    """
    return configure("base")


@pytest.fixture
def factory(config: Config) -> Factory:
    """Return a component factory for the default configuration."""
    return Factory(config)


@pytest.fixture
def mock_ldap() -> Iterator[MockLDAP]:
    """Replace the bonsai LDAP API with a mock class."""
    yield from patch_ldap()

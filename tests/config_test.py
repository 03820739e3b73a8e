"""Test configuration parsing."""

from __future__ import annotations

import pytest
from pydantic import ValidationError
from safir.logging import LogLevel, Profile

from ldapverify.config import Config

from .support.config import config_path, configure


def test_config_base() -> None:
    config = Config.from_file(config_path("base"))
    assert config.server == "ldap://ldap.example.com"
    assert config.bind_dn is None
    assert config.bind_credentials is None
    assert config.base_dn == "ou=people,dc=example,dc=com"
    assert config.uid_attribute == "uid"
    assert config.search_filter == "(objectClass=person)"
    assert config.mail_attribute is None
    assert config.start_tls is False
    assert config.log_level == LogLevel.INFO
    assert config.profile == Profile.production


def test_config_full() -> None:
    config = Config.from_file(config_path("full"))
    assert config.server == "ldaps://ldap.example.com:1636"
    assert config.bind_credentials == (
        "cn=ldapverify,ou=services,dc=example,dc=com",
        "some:password",
    )
    assert config.search_filter == "(objectClass=inetOrgPerson)"
    assert config.mail_attribute == "mail"
    assert config.start_tls is True
    assert config.log_level == LogLevel.DEBUG
    assert config.profile == Profile.development

    # The bind password must not leak into the string form.
    assert "some:password" not in repr(config)


def test_config_bind_dn_without_password() -> None:
    config = configure("base", bind_dn="cn=reader,dc=example,dc=com")
    assert config.bind_credentials == ("cn=reader,dc=example,dc=com", "")


def test_config_snake_case() -> None:
    config = Config.model_validate(
        {
            "server": "ldap.example.com:1389",
            "base_dn": "dc=example,dc=com",
            "uid_attribute": "sAMAccountName",
        }
    )
    assert config.server == "ldap.example.com:1389"
    assert config.uid_attribute == "sAMAccountName"
    assert config.search_filter == ""


def test_config_empty_server() -> None:
    """An empty server is a verification failure, not a parse failure."""
    config = configure("base", server="")
    assert config.server == ""


def test_config_missing_base_dn() -> None:
    with pytest.raises(ValidationError):
        Config.model_validate({"LDAPserver": "ldap.example.com"})


def test_config_extra_setting() -> None:
    with pytest.raises(ValidationError):
        Config.model_validate(
            {
                "LDAPserver": "ldap.example.com",
                "LDAPBaseDN": "dc=example,dc=com",
                "LDAPuidattribute": "uid",
                "LDAPgroupattribute": "member",
            }
        )


def test_config_env_override(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LDAPVERIFY_SERVER", "ldaps://other.example.com")
    monkeypatch.setenv("LDAPVERIFY_START_TLS", "true")
    monkeypatch.setenv("LDAPVERIFY_MAIL_ATTRIBUTE", "mail")
    config = Config.from_file(config_path("base"))
    assert config.server == "ldaps://other.example.com"
    assert config.start_tls is True
    assert config.mail_attribute == "mail"
    assert config.base_dn == "ou=people,dc=example,dc=com"


def test_config_dump() -> None:
    """Dumped settings use the field names and load back unchanged."""
    config = Config.from_file(config_path("full"))
    dumped = config.model_dump(by_alias=True)
    assert sorted(dumped) == [
        "base_dn",
        "bind_dn",
        "log_level",
        "mail_attribute",
        "profile",
        "search_filter",
        "server",
        "start_tls",
        "uid_attribute",
    ]
    assert Config.model_validate(dumped) == config

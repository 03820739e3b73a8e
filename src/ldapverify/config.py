"""Configuration for ldapverify.

ldapverify is configured by a YAML file supplied by the application doing the
login. The keys of that file are the traditional LDAP authentication
parameter names (``LDAPserver``, ``LDAPBaseDN``, and so forth), but the
snake-case field names are also accepted. Every setting may be overridden by
an environment variable with the ``LDAPVERIFY_`` prefix.

Loading the configuration never contacts the LDAP server. Problems that can
only be detected by talking to the server, or that should not prevent the
surrounding application from starting (such as an empty server address), are
reported as failures of each verification attempt.
"""

from __future__ import annotations

from pathlib import Path
from typing import Self, override

import yaml
from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)
from safir.logging import LogLevel, Profile, configure_logging

__all__ = [
    "Config",
    "EnvFirstSettings",
]


class EnvFirstSettings(BaseSettings):
    """Base class for Pydantic settings with environment overrides.

    Classes that inherit from this base class will prioritize environment
    variables over arguments to the class constructor. Every field is
    expected to declare its environment variable and file key with
    ``validation_alias``, but may also be set by its field name. All extra
    attributes are forbidden.
    """

    model_config = SettingsConfigDict(extra="forbid", populate_by_name=True)

    @override
    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Override the sources of settings.

        Deactivate :file:`.env` and secret file support. Allow environment
        variables to override init parameters, since init parameters come
        from the YAML configuration file and we want environment variables to
        take precedent.
        """
        return (env_settings, init_settings)


class Config(EnvFirstSettings):
    """Configuration for LDAP credential verification."""

    server: str = Field(
        ...,
        title="LDAP server",
        description=(
            "Address of the LDAP server. May be ``ldap://host:port``,"
            " ``ldaps://host:port``, either of those without the port, or"
            " ``host:port`` or ``host`` for unencrypted LDAP. If the port is"
            " omitted, it defaults to 636 for ``ldaps`` and 389 otherwise."
        ),
        validation_alias=AliasChoices("LDAPVERIFY_SERVER", "LDAPserver"),
    )

    bind_dn: SecretStr | None = Field(
        None,
        title="Service bind DN and password",
        description=(
            "DN and password of the account used to search for users,"
            " separated by the first colon (``dn:password``). If not set,"
            " ldapverify will do an anonymous bind before searching."
        ),
        validation_alias=AliasChoices("LDAPVERIFY_BIND_DN", "LDAPbinddn"),
    )

    base_dn: str = Field(
        ...,
        title="Base DN for user searches",
        description="Root of the subtree searched for user entries",
        validation_alias=AliasChoices("LDAPVERIFY_BASE_DN", "LDAPBaseDN"),
    )

    uid_attribute: str = Field(
        ...,
        title="Username attribute",
        description=(
            "Attribute of the user entry that holds the username the user"
            " types when logging in, usually ``uid``"
        ),
        validation_alias=AliasChoices(
            "LDAPVERIFY_UID_ATTRIBUTE", "LDAPuidattribute"
        ),
    )

    search_filter: str = Field(
        "",
        title="Additional search filter",
        description=(
            "Filter clause appended to the username match when searching for"
            " users, such as ``(objectClass=person)``. Must be a complete,"
            " parenthesized filter or empty."
        ),
        validation_alias=AliasChoices(
            "LDAPVERIFY_SEARCH_FILTER", "LDAPfilter"
        ),
    )

    mail_attribute: str | None = Field(
        None,
        title="Email attribute",
        description=(
            "If set, the value of this attribute of the user entry is used as"
            " the canonical username, and every user entry must have it. If"
            " not set, the username as typed is canonical."
        ),
        validation_alias=AliasChoices(
            "LDAPVERIFY_MAIL_ATTRIBUTE", "LDAPmailattribute"
        ),
    )

    start_tls: bool = Field(
        False,
        title="Use STARTTLS",
        description=(
            "Whether to upgrade the connection with STARTTLS before binding."
            " Not needed for ``ldaps`` servers."
        ),
        validation_alias=AliasChoices("LDAPVERIFY_START_TLS", "LDAPstarttls"),
    )

    log_level: LogLevel = Field(
        LogLevel.INFO,
        title="Log level",
        description="Log level of the ldapverify logger",
        validation_alias=AliasChoices("LDAPVERIFY_LOG_LEVEL", "logLevel"),
    )

    profile: Profile = Field(
        Profile.production,
        title="Logging profile",
        description=(
            "Logging profile. ``production`` logs in JSON and"
            " ``development`` logs human-readable messages."
        ),
        validation_alias=AliasChoices("LDAPVERIFY_PROFILE", "profile"),
    )

    @property
    def bind_credentials(self) -> tuple[str, str] | None:
        """DN and password for the service bind, or `None` if anonymous.

        ``bind_dn`` is split on the first colon, so the password may itself
        contain colons.
        """
        if not self.bind_dn:
            return None
        dn, _, password = self.bind_dn.get_secret_value().partition(":")
        return (dn, password)

    @classmethod
    def from_file(cls, path: Path) -> Self:
        """Construct a Config object from a configuration file.

        Parameters
        ----------
        path
            Path to the configuration file in YAML.

        Returns
        -------
        Config
            The corresponding `Config` object.
        """
        with path.open("r") as f:
            return cls.model_validate(yaml.safe_load(f))

    def configure_logging(self) -> None:
        """Configure logging based on the ldapverify configuration."""
        configure_logging(
            name="ldapverify", profile=self.profile, log_level=self.log_level
        )

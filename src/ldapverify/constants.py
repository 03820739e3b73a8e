"""Constants for ldapverify."""

__all__ = [
    "CONFIG_PATH",
    "LDAP_DEFAULT_PORT",
    "LDAP_DEFAULT_SSL_PORT",
    "LDAP_DN_ATTRIBUTE",
    "LDAP_TIMEOUT",
]

CONFIG_PATH = "/etc/ldapverify/ldapverify.yaml"
"""Default configuration path."""

LDAP_DEFAULT_PORT = 389
"""Port used for ``ldap`` URLs and bare hostnames with no explicit port."""

LDAP_DEFAULT_SSL_PORT = 636
"""Port used for ``ldaps`` URLs with no explicit port."""

LDAP_DN_ATTRIBUTE = "dn"
"""Attribute requested when only the DN of an entry is wanted."""

LDAP_TIMEOUT = 5.0
"""Timeout (in seconds) for LDAP connections and queries."""

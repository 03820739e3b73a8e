"""Data models for LDAP."""

from __future__ import annotations

from dataclasses import dataclass

__all__ = ["LDAPServer"]


@dataclass(frozen=True, slots=True)
class LDAPServer:
    """Resolved address of an LDAP server."""

    protocol: str
    """Either ``ldap`` or ``ldaps``."""

    host: str
    """Hostname or IP address of the server."""

    port: int
    """Port of the server."""

    @property
    def url(self) -> str:
        """URL to pass to the LDAP client."""
        return f"{self.protocol}://{self.host}:{self.port}"

"""LDAP storage layer for ldapverify."""

from __future__ import annotations

import asyncio
import re

import bonsai
from bonsai import LDAPClient, LDAPEntry, LDAPSearchScope
from structlog.stdlib import BoundLogger

from ..constants import LDAP_DEFAULT_PORT, LDAP_DEFAULT_SSL_PORT, LDAP_TIMEOUT
from ..exceptions import (
    DirectoryUnreachableError,
    LDAPConfigurationError,
    LDAPSearchError,
    PasswordIncorrectError,
)
from ..models.ldap import LDAPServer

_HOST_REGEX = re.compile(r"^[^\s/:@?#]+$")
_URL_REGEX = re.compile(r"^(ldaps?)://(.*)$")

__all__ = ["LDAPSession", "connect", "resolve_server"]


def resolve_server(server: str) -> LDAPServer:
    """Resolve the configured LDAP server address.

    Parameters
    ----------
    server
        Server address from configuration. Accepted forms are
        ``ldap://host:port``, ``ldaps://host:port``, ``ldap://host``,
        ``ldaps://host``, ``host:port``, and ``host``.

    Returns
    -------
    LDAPServer
        The protocol, host, and port of the server. The port defaults to 636
        for ``ldaps`` and 389 otherwise.

    Raises
    ------
    LDAPConfigurationError
        Raised if the server address is empty or cannot be parsed.
    """
    if not server:
        raise LDAPConfigurationError("LDAP server not configured")
    match = _URL_REGEX.match(server)
    if match:
        protocol, hostport = match.groups()
    else:
        protocol, hostport = "ldap", server

    host, has_port, port_string = hostport.partition(":")
    if not _HOST_REGEX.match(host):
        raise LDAPConfigurationError(f"Invalid LDAP server {server}")
    if not has_port:
        if protocol == "ldaps":
            port = LDAP_DEFAULT_SSL_PORT
        else:
            port = LDAP_DEFAULT_PORT
    elif port_string.isdigit() and 0 < int(port_string) < 65536:
        port = int(port_string)
    else:
        raise LDAPConfigurationError(f"Invalid port in LDAP server {server}")
    return LDAPServer(protocol=protocol, host=host, port=port)


def connect(
    server: LDAPServer, *, start_tls: bool, logger: BoundLogger
) -> LDAPSession:
    """Create a new, unbound session with an LDAP server.

    This does not contact the server. bonsai opens the connection (and does
    the STARTTLS upgrade, if requested) as part of each bind, so connection
    failures are reported by `LDAPSession.bind`.

    Parameters
    ----------
    server
        Server to connect to.
    start_tls
        Whether to upgrade the connection with STARTTLS. Ignored for
        ``ldaps`` servers, whose connections are always encrypted.
    logger
        Logger for debug messages and errors.

    Returns
    -------
    LDAPSession
        The new session. The caller is responsible for closing it.
    """
    tls = start_tls and server.protocol == "ldap"
    return LDAPSession(server, tls=tls, logger=logger)


class LDAPSession:
    """A session with an LDAP server.

    Each session belongs to a single verification attempt and must not be
    shared, since binding as a user changes the identity used by every later
    operation on the session.

    bonsai cannot rebind an open connection, so each bind opens a new
    connection to the same server with the new credentials and closes the
    previous one. From the caller's perspective, the session has simply
    changed its bound identity.

    Parameters
    ----------
    server
        Server to talk to.
    tls
        Whether to upgrade connections with STARTTLS.
    logger
        Logger for debug messages and errors.
    """

    def __init__(
        self, server: LDAPServer, *, tls: bool, logger: BoundLogger
    ) -> None:
        self._url = server.url
        self._tls = tls
        self._connection: bonsai.LDAPConnection | None = None
        self._logger = logger.bind(ldap_url=self._url)

    async def aclose(self) -> None:
        """Close the underlying connection, if any."""
        if self._connection:
            self._connection.close()
            self._connection = None

    async def bind(
        self, dn: str | None = None, password: str | None = None
    ) -> None:
        """Bind as the service account, or anonymously.

        Parameters
        ----------
        dn
            DN to bind as, or `None` for an anonymous bind.
        password
            Password for ``dn``.

        Raises
        ------
        DirectoryUnreachableError
            Raised if the LDAP server could not be contacted or the STARTTLS
            upgrade failed.
        LDAPConfigurationError
            Raised if bonsai rejected the server URL or the server rejected
            the bind.
        """
        logger = self._logger.bind(ldap_bind_dn=dn)
        try:
            await self._open(dn, password)
        except ValueError as e:
            logger.exception("Invalid LDAP server URL", error=str(e))
            msg = f"Invalid LDAP server {self._url}"
            raise LDAPConfigurationError(msg, detail=str(e)) from e
        except (
            bonsai.ConnectionError,
            bonsai.TimeoutError,
            asyncio.TimeoutError,
        ) as e:
            logger.exception("Cannot connect to LDAP server", error=str(e))
            msg = "Cannot connect to LDAP server"
            raise DirectoryUnreachableError(msg, detail=str(e)) from e
        except bonsai.LDAPError as e:
            logger.exception("LDAP bind failed", error=str(e))
            msg = "LDAP bind failed"
            raise LDAPConfigurationError(msg, detail=str(e)) from e

    async def bind_as_user(
        self, dn: str, password: str, username: str
    ) -> None:
        """Bind as a user to check their password.

        Parameters
        ----------
        dn
            DN of the user's entry.
        password
            Password supplied by the user.
        username
            Username of the user, for error reporting.

        Raises
        ------
        PasswordIncorrectError
            Raised if the bind failed for any reason.
        """
        try:
            await self._open(dn, password)
        except (ValueError, bonsai.LDAPError, asyncio.TimeoutError) as e:
            self._logger.debug(
                "LDAP user bind failed",
                error=str(e),
                ldap_dn=dn,
                user=username,
            )
            msg = f"Incorrect password for {username}"
            raise PasswordIncorrectError(msg, username, detail=str(e)) from e

    async def search(
        self,
        base: str,
        filter_exp: str,
        attrlist: list[str] | None,
        username: str,
    ) -> list[LDAPEntry]:
        """Perform a subtree search.

        Parameters
        ----------
        base
            Base DN of the search.
        filter_exp
            Search filter.
        attrlist
            List of attributes to retrieve, or `None` to retrieve all of
            them.
        username
            User for which the search is being performed, for error
            reporting.

        Returns
        -------
        list of bonsai.LDAPEntry
            Matching entries.

        Raises
        ------
        LDAPSearchError
            Raised if the search failed.
        """
        if not self._connection:
            raise RuntimeError("LDAP session is not bound")
        logger = self._logger.bind(
            ldap_attrs=attrlist,
            ldap_base=base,
            ldap_search=filter_exp,
            user=username,
        )
        logger.debug("Querying LDAP")
        try:
            return await self._connection.search(
                base=base,
                scope=LDAPSearchScope.SUB,
                filter_exp=filter_exp,
                attrlist=attrlist,
                timeout=LDAP_TIMEOUT,
            )
        except (bonsai.LDAPError, asyncio.TimeoutError) as e:
            logger.exception("Cannot query LDAP", error=str(e))
            msg = f"Error searching LDAP for {username}"
            raise LDAPSearchError(msg, username, detail=str(e)) from e

    async def _open(self, dn: str | None, password: str | None) -> None:
        """Open a new connection bound as the given DN.

        Any existing connection is closed first, whether or not the new bind
        succeeds.
        """
        await self.aclose()
        client = LDAPClient(self._url, tls=self._tls)
        if dn is not None:
            client.set_credentials("SIMPLE", user=dn, password=password)
        self._connection = await client.connect(
            is_async=True, timeout=LDAP_TIMEOUT
        )

"""Verification of user credentials against LDAP."""

from __future__ import annotations

from contextlib import aclosing
from typing import ClassVar

from bonsai import LDAPEntry
from structlog.stdlib import BoundLogger

from ..config import Config
from ..constants import LDAP_DN_ATTRIBUTE
from ..exceptions import (
    AttributeMissingError,
    LDAPVerifyError,
    PasswordIncorrectError,
    UserNotFoundError,
)
from ..models.enums import VerificationFailureReason
from ..models.verify import (
    Credentials,
    VerificationFailure,
    VerificationOutcome,
    VerificationSuccess,
)
from ..storage.ldap import LDAPSession, connect, resolve_server
from ..util import build_search_filter

__all__ = ["VerifyService"]


class VerifyService:
    """Verify a username and password against LDAP.

    Each call to `verify` is an independent protocol run with its own LDAP
    session: bind anonymously (or as the configured service account), search
    for the DN of the user, bind as that DN with the supplied password, and
    then search again for the user's attributes. Nothing is cached between
    calls, so a single service may be shared by concurrent requests.

    Parameters
    ----------
    config
        ldapverify configuration.
    logger
        Logger to use.
    """

    admin_can_create_account: ClassVar[bool] = False
    """Whether administrators may create accounts through this verifier.

    Accounts live in the directory, so neither administrators nor users can
    create them here.
    """

    user_can_create_account: ClassVar[bool] = False
    """Whether users may register new accounts through this verifier."""

    def __init__(self, config: Config, logger: BoundLogger) -> None:
        self._config = config
        self._logger = logger

    async def verify(self, credentials: Credentials) -> VerificationOutcome:
        """Verify a username and password.

        Parameters
        ----------
        credentials
            Username and password to check.

        Returns
        -------
        VerificationSuccess or VerificationFailure
            Canonical username and display name of the user if the credentials
            are valid, otherwise the reason for the failure. Errors talking to
            LDAP are also returned as failures, never raised.
        """
        logger = self._logger.bind(user=credentials.username)
        try:
            return await self._verify(credentials, logger)
        except LDAPVerifyError as e:
            return self._build_failure(e, credentials.username, logger)

    async def _verify(
        self, credentials: Credentials, logger: BoundLogger
    ) -> VerificationSuccess:
        """Run the verification protocol, raising exceptions on failure."""
        server = resolve_server(self._config.server)
        session = connect(
            server, start_tls=self._config.start_tls, logger=logger
        )
        async with aclosing(session):
            entry = await self._check_credentials(session, credentials, logger)
        return self._build_success(credentials, entry, logger)

    async def _check_credentials(
        self,
        session: LDAPSession,
        credentials: Credentials,
        logger: BoundLogger,
    ) -> LDAPEntry:
        """Check the credentials on a session and return the user's entry.

        Parameters
        ----------
        session
            Newly-created LDAP session.
        credentials
            Username and password to check.
        logger
            Logger to use.

        Returns
        -------
        bonsai.LDAPEntry
            Full LDAP entry of the user, retrieved while bound as that user.

        Raises
        ------
        LDAPVerifyError
            Raised on any failure.
        """
        username = credentials.username
        base_dn = self._config.base_dn

        # The DN of the user may be anywhere under the base DN, so it has to
        # be found with a search before the password can be checked.
        bind_credentials = self._config.bind_credentials
        if bind_credentials:
            await session.bind(*bind_credentials)
        else:
            await session.bind()
        search = build_search_filter(
            self._config.uid_attribute, username, self._config.search_filter
        )
        logger = logger.bind(ldap_search=search)
        entries = await session.search(
            base_dn, search, [LDAP_DN_ATTRIBUTE], username
        )
        if not entries:
            raise UserNotFoundError(f"No LDAP entry for {username}", username)
        dn = str(entries[0].dn)
        if len(entries) > 1:
            msg = "Multiple LDAP entries for user, using the first"
            logger.warning(msg, ldap_dn=dn, count=len(entries))

        # A simple bind with an empty password is an unauthenticated bind,
        # which many servers accept, so never attempt one.
        password = credentials.password.get_secret_value()
        if not password:
            msg = f"Empty password for {username}"
            raise PasswordIncorrectError(msg, username)
        await session.bind_as_user(dn, password, username)

        entries = await session.search(base_dn, search, None, username)
        if not entries:
            msg = f"LDAP entry for {username} disappeared"
            raise UserNotFoundError(msg, username)
        return entries[0]

    def _build_failure(
        self, exc: LDAPVerifyError, username: str, logger: BoundLogger
    ) -> VerificationFailure:
        """Convert an exception to a verification failure and log it."""
        failure = VerificationFailure(
            reason=exc.reason,
            message=str(exc),
            username=username,
            detail=exc.detail,
            attribute=getattr(exc, "attribute", None),
        )
        logger = logger.bind(reason=failure.reason.value)
        if failure.is_configuration_error:
            logger.error("Cannot verify credentials", error=failure.message)
        elif failure.reason == VerificationFailureReason.directory_unreachable:
            logger.error("LDAP server unreachable", error=failure.detail)
        else:
            logger.info("Credentials rejected", error=failure.message)
        return failure

    def _build_success(
        self,
        credentials: Credentials,
        entry: LDAPEntry,
        logger: BoundLogger,
    ) -> VerificationSuccess:
        """Extract the canonical username and display name from an entry.

        Raises
        ------
        AttributeMissingError
            Raised if the mail attribute is configured but the entry does not
            have it.
        """
        mail_attribute = self._config.mail_attribute
        if mail_attribute:
            username = _get_value(entry, mail_attribute)
            if username is None:
                raise AttributeMissingError(
                    mail_attribute, credentials.username
                )
        else:
            username = credentials.username
        name = (
            credentials.name
            or _get_value(entry, "displayName")
            or _get_value(entry, "cn")
        )
        logger.info("Verified LDAP credentials", canonical_username=username)
        return VerificationSuccess(username=username, name=name)


def _get_value(entry: LDAPEntry, attribute: str) -> str | None:
    """Return the first value of an attribute, or `None` if absent."""
    if attribute not in entry or not entry[attribute]:
        return None
    return str(entry[attribute][0])

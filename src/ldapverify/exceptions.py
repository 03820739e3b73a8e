"""Exceptions for ldapverify.

These are raised inside the storage and service layers and converted to a
`~ldapverify.models.verify.VerificationFailure` before returning to the
caller, so they never escape
`~ldapverify.services.verify.VerifyService.verify`.
"""

from __future__ import annotations

from typing import ClassVar

from safir.slack.blockkit import SlackException

from .models.enums import VerificationFailureReason

__all__ = [
    "AttributeMissingError",
    "DirectoryUnreachableError",
    "LDAPConfigurationError",
    "LDAPSearchError",
    "LDAPVerifyError",
    "PasswordIncorrectError",
    "UserNotFoundError",
]


class LDAPVerifyError(SlackException):
    """Base class for failures to verify credentials.

    Parameters
    ----------
    message
        Human-readable error message.
    user
        Username whose credentials were being verified, if known.
    detail
        Error text from the LDAP server or client, if any.
    """

    reason: ClassVar[VerificationFailureReason]
    """The failure reason reported to the caller for this error."""

    def __init__(
        self,
        message: str,
        user: str | None = None,
        *,
        detail: str | None = None,
    ) -> None:
        super().__init__(message, user)
        self.detail = detail


class DirectoryUnreachableError(LDAPVerifyError):
    """The LDAP server could not be contacted."""

    reason = VerificationFailureReason.directory_unreachable


class LDAPConfigurationError(LDAPVerifyError):
    """The LDAP configuration is invalid.

    Raised for an unparseable server address and for a failed service (or
    anonymous) bind.
    """

    reason = VerificationFailureReason.configuration_invalid


class LDAPSearchError(LDAPVerifyError):
    """The LDAP server returned an error for a search."""

    reason = VerificationFailureReason.search_failed


class UserNotFoundError(LDAPVerifyError):
    """No LDAP entry matched the username."""

    reason = VerificationFailureReason.user_not_found


class PasswordIncorrectError(LDAPVerifyError):
    """Binding as the user with the supplied password failed."""

    reason = VerificationFailureReason.password_incorrect


class AttributeMissingError(LDAPVerifyError):
    """The user's entry does not contain a required attribute.

    Parameters
    ----------
    attribute
        Name of the missing attribute.
    user
        Username whose entry was missing the attribute.
    """

    reason = VerificationFailureReason.attribute_missing

    def __init__(self, attribute: str, user: str | None = None) -> None:
        msg = f"LDAP entry has no {attribute} attribute"
        super().__init__(msg, user)
        self.attribute = attribute

"""Enums used in ldapverify models."""

from __future__ import annotations

from enum import Enum

__all__ = ["VerificationFailureReason"]


class VerificationFailureReason(Enum):
    """Why a credential verification attempt failed."""

    directory_unreachable = "directory_unreachable"
    """The LDAP server could not be contacted."""

    configuration_invalid = "configuration_invalid"
    """The server address or the service bind credentials are wrong.

    This is an administrator-facing error and should never be reported to the
    user as an incorrect password.
    """

    search_failed = "search_failed"
    """The LDAP server returned an error for a search."""

    user_not_found = "user_not_found"
    """The search succeeded but found no entry for the username."""

    attribute_missing = "attribute_missing"
    """The user's entry does not have the configured mail attribute."""

    password_incorrect = "password_incorrect"
    """The user was found but binding with their password failed."""

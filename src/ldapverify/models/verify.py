"""Models for credential verification."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, Field, SecretStr

from .enums import VerificationFailureReason

__all__ = [
    "Credentials",
    "VerificationFailure",
    "VerificationOutcome",
    "VerificationSuccess",
]


class Credentials(BaseModel):
    """Username and password presented by a user logging in."""

    username: str = Field(
        ...,
        title="Username",
        description="Username as entered by the user, not yet verified",
    )

    password: SecretStr = Field(
        ..., title="Password", description="Password as entered by the user"
    )

    name: str | None = Field(
        None,
        title="Full name",
        description=(
            "Full name of the user if the caller already knows it. If set,"
            " it takes precedence over the name found in LDAP."
        ),
    )


@dataclass(frozen=True, slots=True)
class VerificationSuccess:
    """The credentials were valid."""

    username: str
    """Canonical username, from the mail attribute if one is configured."""

    name: str | None = None
    """Display name of the user, if known."""

    def merge_into(self, credentials: Credentials) -> Credentials:
        """Fill in a set of credentials with the verified identity.

        Parameters
        ----------
        credentials
            The credentials that were verified.

        Returns
        -------
        Credentials
            A copy of the credentials with the canonical username and the
            display name filled in.
        """
        update = {"username": self.username, "name": self.name}
        return credentials.model_copy(update=update)


@dataclass(frozen=True, slots=True)
class VerificationFailure:
    """The credentials could not be verified."""

    reason: VerificationFailureReason
    """Why verification failed."""

    message: str
    """Human-readable description of the failure."""

    username: str | None = None
    """Username whose verification failed."""

    detail: str | None = None
    """Error text from the LDAP server or client, if any."""

    attribute: str | None = None
    """Name of the missing attribute for ``attribute_missing`` failures."""

    @property
    def is_configuration_error(self) -> bool:
        """Whether this failure should be shown only to administrators.

        Configuration errors indicate that the server, the service account, or
        the directory schema do not match the configuration. Everything else
        is the result of talking to a working directory or of a network
        problem.
        """
        return self.reason in (
            VerificationFailureReason.configuration_invalid,
            VerificationFailureReason.attribute_missing,
            VerificationFailureReason.search_failed,
        )


VerificationOutcome = VerificationSuccess | VerificationFailure
"""Result of a verification attempt."""

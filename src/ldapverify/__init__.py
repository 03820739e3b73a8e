"""Verify user credentials against an LDAP directory."""

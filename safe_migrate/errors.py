"""
Exception hierarchy for safe-migrate.

Every failure the tool can surface derives from :class:`SafeMigrateError`
so the command-line runner can report it with a single handler.
"""

from __future__ import annotations


class SafeMigrateError(Exception):
    """Base class for all safe-migrate errors."""


class InvalidPhrase(SafeMigrateError):
    """The recovery phrase is malformed or fails its BIP-39 checksum."""


class DerivationFailure(SafeMigrateError):
    """A BIP-32 derivation step produced an invalid private key.

    Deterministic for a given phrase and index; try another account index.
    """


class SigningFailure(SafeMigrateError):
    """The digest cannot be signed (wrong length or degenerate signature)."""


class RelayError(SafeMigrateError):
    """The Safe relay service returned an error or an unreadable payload."""


class UnsupportedSafe(SafeMigrateError):
    """The Safe's version, owners or threshold do not allow migration."""


class Aborted(SafeMigrateError):
    """The operator declined a confirmation prompt."""

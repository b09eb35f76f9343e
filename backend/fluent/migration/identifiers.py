"""Validation for names that are interpolated into migration SQL.

Table and column names cannot be bound as parameters, so every name that
reaches a statement must pass one of these checks first.
"""

import re

from backend.fluent.migration.errors import InvalidIdentifierError

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_LOCALE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_-]*$")


def validate_identifier(name: str, kind: str = "identifier") -> str:
    """Return ``name`` if it is a plain SQL identifier.

    Raises:
        InvalidIdentifierError: If the name contains anything but letters,
            digits and underscores, or starts with a digit.
    """
    if not isinstance(name, str) or not _IDENTIFIER.match(name):
        raise InvalidIdentifierError(f"Invalid {kind} name: {name!r}")
    return name


def validate_locale(locale: str) -> str:
    """Return ``locale`` if it is safe to use as a column suffix."""
    if not isinstance(locale, str) or not _LOCALE.match(locale):
        raise InvalidIdentifierError(f"Invalid locale: {locale!r}")
    return locale

#!/usr/bin/env python3
# this_file: src/envtag/environments.py
"""Deployment environments and the operator's environment choice."""

from __future__ import annotations

from enum import Enum

ALL = "all"


class Environment(str, Enum):
    """Concrete deployment track with its own tag namespace."""

    PRODUCTION = "production"
    STAGING = "staging"
    DEVELOPMENT = "development"

    @property
    def default_prefix(self) -> str:
        """Return the tag prefix used when settings do not override it."""
        return _DEFAULT_PREFIXES[self]

    @property
    def default_field(self) -> str:
        """Return the descriptor field name used when settings do not override it."""
        return _DEFAULT_FIELDS[self]


_DEFAULT_PREFIXES = {
    Environment.PRODUCTION: "prod",
    Environment.STAGING: "pre",
    Environment.DEVELOPMENT: "dev",
}
_DEFAULT_FIELDS = {
    Environment.PRODUCTION: "version",
    Environment.STAGING: "version_pre",
    Environment.DEVELOPMENT: "version_dev",
}

ENVIRONMENT_CHOICES = (ALL, *(env.value for env in Environment))


def select_environments(choice: str) -> list[Environment]:
    """Expand an operator choice into the concrete environments it covers.

    Args:
        choice: ``"all"`` or one environment name (case-insensitive).

    Returns:
        list[Environment]: Every environment for ``"all"``, otherwise a
        single-item list.

    Raises:
        ValueError: If ``choice`` names no known environment.
    """
    normalized = choice.strip().lower()
    if normalized == ALL:
        return list(Environment)
    try:
        return [Environment(normalized)]
    except ValueError:
        raise ValueError(
            f"unknown environment '{choice}'; expected one of {', '.join(ENVIRONMENT_CHOICES)}"
        ) from None

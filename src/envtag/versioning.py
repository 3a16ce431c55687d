#!/usr/bin/env python3
# this_file: src/envtag/versioning.py
"""Version arithmetic and the ``{env}-v{version}-{YYYYMMDD}`` tag format.

The increment rule layers a manual carry on top of semantic versioning: a
patch number that reached 99 rolls into the minor slot, and a minor number
that reached 99 rolls into the major slot.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime

from semver import Version

from .environments import Environment

ROLLOVER = 99
DATE_FORMAT = "%Y%m%d"
SENTINEL_DATE = date(1900, 1, 1)
ZERO = Version(0, 0, 0)

_TAG_PATTERN = re.compile(
    r"^(?P<prefix>[^-]+)-v(?P<version>\d+\.\d+\.\d+)-(?P<date>\d{8})$"
)


@dataclass(frozen=True, slots=True)
class TagSpec:
    """A tag computed in memory, ready to be created in the repository."""

    environment: Environment
    version: Version
    date: date
    name: str


@dataclass(frozen=True, slots=True)
class ParsedTag:
    """Components recovered from a tag name."""

    prefix: str
    version: Version
    date: date


def parse_version(raw: str | None) -> Version:
    """Parse ``raw`` as a semantic version, treating ``None``/empty as ``0.0.0``.

    Raises:
        ValueError: If ``raw`` is not valid semver.
    """
    if raw is None or not str(raw).strip():
        return ZERO
    return Version.parse(str(raw).strip())


def increment(previous: Version | None) -> Version:
    """Return the version that follows ``previous`` under the rollover rule.

    Args:
        previous: Last released version; ``None`` counts as ``0.0.0``.

    Returns:
        Version: ``minor+1`` when patch reached 99, else ``major+1`` when
        minor reached 99, else ``patch+1``.
    """
    current = previous if previous is not None else ZERO
    if current.patch >= ROLLOVER:
        return current.bump_minor()
    if current.minor >= ROLLOVER:
        return current.bump_major()
    return current.bump_patch()


def format_date(day: date) -> str:
    """Render ``day`` as zero-padded ``YYYYMMDD``."""
    return day.strftime(DATE_FORMAT)


def format_tag(prefix: str, version: Version, day: date) -> str:
    """Build the canonical tag name ``{prefix}-v{version}-{YYYYMMDD}``."""
    return f"{prefix}-v{version}-{format_date(day)}"


def sentinel_tag(prefix: str) -> str:
    """Return the placeholder tag used when an environment has no tags yet."""
    return format_tag(prefix, ZERO, SENTINEL_DATE)


def parse_tag(name: str) -> ParsedTag:
    """Split a tag produced by :func:`format_tag` back into its parts.

    Raises:
        ValueError: If ``name`` does not follow the tag format.
    """
    match = _TAG_PATTERN.match(name.strip())
    if match is None:
        raise ValueError(f"tag '{name}' does not match '{{env}}-v{{X.Y.Z}}-{{YYYYMMDD}}'")
    day = datetime.strptime(match.group("date"), DATE_FORMAT).date()
    return ParsedTag(match.group("prefix"), Version.parse(match.group("version")), day)


def build_tag_spec(env: Environment, prefix: str, version: Version, day: date) -> TagSpec:
    """Bundle a computed version into a :class:`TagSpec` for ``env``."""
    return TagSpec(env, version, day, format_tag(prefix, version, day))

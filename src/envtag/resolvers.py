#!/usr/bin/env python3
# this_file: src/envtag/resolvers.py
"""Find the current version of an environment before it gets bumped."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date
from enum import Enum

from loguru import logger
from semver import Version

from .descriptor import DescriptorRecord
from .environments import Environment
from .versioning import ParsedTag, parse_tag, parse_version, sentinel_tag


class Baseline(str, Enum):
    """Where the current version is read from."""

    PACKAGE = "package"
    TAG = "tag"


class ResolutionError(ValueError):
    """Raised when an environment's baseline version cannot be determined."""

    def __init__(self, env: Environment, reason: str) -> None:
        self.environment = env
        super().__init__(f"{env.value}: {reason}")


@dataclass(frozen=True, slots=True)
class ResolvedBaseline:
    """Current version of one environment and where it came from."""

    environment: Environment
    version: Version
    source: str
    date: date | None = None


def latest_tag(tags: Sequence[str], prefix: str, order: str = "lexical") -> str | None:
    """Pick the newest tag in the ``prefix`` namespace.

    Args:
        tags: Tag names in repository listing order.
        prefix: Environment tag prefix; only ``"{prefix}-..."`` names qualify.
        order: ``"lexical"`` keeps listing order and takes the last entry, so
            ``v1.0.9`` beats ``v1.0.10``. ``"semver"`` compares parsed
            versions, then dates; unparseable names are ignored.

    Returns:
        str | None: The chosen tag, or ``None`` when no tag qualifies.
    """
    candidates = [tag for tag in tags if tag.startswith(f"{prefix}-")]
    if not candidates:
        return None
    if order == "lexical":
        return candidates[-1]

    parsed: list[tuple[ParsedTag, str]] = []
    for tag in candidates:
        try:
            parsed.append((parse_tag(tag), tag))
        except ValueError:
            logger.info("Skipping tag {}: not {{prefix}}-vX.Y.Z-YYYYMMDD", tag)
    if not parsed:
        return None
    return max(parsed, key=lambda item: (item[0].version, item[0].date))[1]


def resolve_from_tags(
    env: Environment, prefix: str, tags: Sequence[str], order: str = "lexical"
) -> ResolvedBaseline:
    """Resolve ``env``'s current version from existing tags.

    With no matching tag the sentinel ``{prefix}-v0.0.0-19000101`` is used.

    Raises:
        ResolutionError: If the latest matching tag cannot be parsed.
    """
    tag = latest_tag(tags, prefix, order) or sentinel_tag(prefix)
    logger.info("🏷  Latest tag for {}: {}", env.value, tag)
    try:
        parsed = parse_tag(tag)
    except ValueError as error:
        raise ResolutionError(env, str(error)) from error
    return ResolvedBaseline(env, parsed.version, tag, parsed.date)


def resolve_from_descriptor(
    env: Environment, field: str, record: DescriptorRecord
) -> ResolvedBaseline:
    """Resolve ``env``'s current version from the descriptor field ``field``.

    A missing field yields ``0.0.0``.

    Raises:
        ResolutionError: If the field holds something that is not semver.
    """
    raw = record.get(field)
    try:
        version = parse_version(raw)
    except ValueError as error:
        raise ResolutionError(env, f"{record.path.name} field '{field}': {error}") from error
    logger.info("📦  {} {} for {}: {}", record.path.name, field, env.value, version)
    return ResolvedBaseline(env, version, f"{record.path.name}:{field}")

#!/usr/bin/env python3
# this_file: src/envtag/writer.py
"""Create computed tags in the repository, one independent attempt per tag."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from loguru import logger

from .versioning import TagSpec


class TagTarget(Protocol):
    """Anything that can create a tag by name."""

    def create_tag(self, name: str) -> None: ...


@dataclass(frozen=True, slots=True)
class TagResult:
    """Outcome of creating one tag."""

    spec: TagSpec
    error: str | None = None

    @property
    def created(self) -> bool:
        return self.error is None


async def _create_one(repo: TagTarget, spec: TagSpec) -> TagResult:
    try:
        await asyncio.to_thread(repo.create_tag, spec.name)
    except Exception as error:
        logger.error("❎  Failed to create tag {}: {}", spec.name, error)
        return TagResult(spec, str(error))
    logger.success("🏷  Created local tag {} (not pushed yet)", spec.name)
    return TagResult(spec)


async def create_tags(repo: TagTarget, specs: Sequence[TagSpec]) -> list[TagResult]:
    """Attempt every tag in ``specs``; a failure never stops the others.

    Args:
        repo: Repository that creates tags.
        specs: Tags to create.

    Returns:
        list[TagResult]: One result per spec, in the order of ``specs``.
    """
    if not specs:
        return []
    logger.info("🔀  Creating {} local tag(s)...", len(specs))
    return list(await asyncio.gather(*(_create_one(repo, spec) for spec in specs)))

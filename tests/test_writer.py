#!/usr/bin/env python3
# this_file: tests/test_writer.py
"""Tests for per-tag creation and failure isolation."""

from __future__ import annotations

import asyncio
from datetime import date

from loguru import logger
from semver import Version

from envtag.environments import Environment
from envtag.versioning import build_tag_spec
from envtag.writer import create_tags

DAY = date(2026, 10, 19)


def test_create_tags_when_one_duplicate_then_sibling_still_created(make_repo) -> None:
    """A duplicate tag is reported on its own result; the other tag is still created."""
    repo = make_repo(["prod-v1.0.2-20261019"])
    specs = [
        build_tag_spec(Environment.PRODUCTION, "prod", Version(1, 0, 2), DAY),
        build_tag_spec(Environment.DEVELOPMENT, "dev", Version(0, 0, 1), DAY),
    ]

    results = asyncio.run(create_tags(repo, specs))

    assert [result.spec for result in results] == specs, "results keep input order"
    assert not results[0].created
    assert "already exists" in results[0].error
    assert results[1].created
    assert repo.created == ["dev-v0.0.1-20261019"]


def test_create_tags_when_failure_then_logged(make_repo) -> None:
    repo = make_repo(["pre-v0.0.1-20261019"])
    spec = build_tag_spec(Environment.STAGING, "pre", Version(0, 0, 1), DAY)
    messages: list[str] = []
    sink_id = logger.add(messages.append, level="ERROR")
    try:
        asyncio.run(create_tags(repo, [spec]))
    finally:
        logger.remove(sink_id)

    assert any("pre-v0.0.1-20261019" in message for message in messages)


def test_create_tags_when_no_specs_then_empty(make_repo) -> None:
    assert asyncio.run(create_tags(make_repo(), [])) == []

#!/usr/bin/env python3
# this_file: tests/test_versioning.py
"""Tests for version increments and the tag name format."""

from __future__ import annotations

from datetime import date

import pytest
from semver import Version

from envtag.environments import Environment
from envtag.versioning import (
    build_tag_spec,
    format_date,
    format_tag,
    increment,
    parse_tag,
    parse_version,
    sentinel_tag,
)


@pytest.mark.parametrize(
    ("previous", "expected"),
    [
        ("0.0.0", "0.0.1"),
        ("1.2.3", "1.2.4"),
        ("1.98.98", "1.98.99"),
        ("0.0.98", "0.0.99"),
    ],
)
def test_increment_when_below_rollover_then_patch_bumped(previous: str, expected: str) -> None:
    """Patch and minor below 99 bump the patch number only."""
    assert increment(Version.parse(previous)) == Version.parse(expected)


@pytest.mark.parametrize(
    ("previous", "expected"),
    [
        ("1.2.99", "1.3.0"),
        ("0.0.150", "0.1.0"),
        ("3.99.99", "3.100.0"),
    ],
)
def test_increment_when_patch_reaches_99_then_minor_bumped(previous: str, expected: str) -> None:
    """A patch of 99 or more carries into the minor number, even if minor is also 99."""
    assert increment(Version.parse(previous)) == Version.parse(expected)


@pytest.mark.parametrize(
    ("previous", "expected"),
    [
        ("1.99.0", "2.0.0"),
        ("0.120.5", "1.0.0"),
    ],
)
def test_increment_when_minor_reaches_99_then_major_bumped(previous: str, expected: str) -> None:
    """A minor of 99 or more (with patch below 99) carries into the major number."""
    assert increment(Version.parse(previous)) == Version.parse(expected)


def test_increment_when_previous_missing_then_starts_from_zero() -> None:
    assert increment(None) == Version(0, 0, 1)


def test_parse_version_when_empty_then_zero() -> None:
    assert parse_version(None) == Version(0, 0, 0)
    assert parse_version("  ") == Version(0, 0, 0)


def test_parse_version_when_malformed_then_value_error() -> None:
    with pytest.raises(ValueError):
        parse_version("1.2")


def test_format_date_when_single_digits_then_zero_padded() -> None:
    assert format_date(date(2024, 3, 7)) == "20240307"


def test_format_tag_when_called_then_canonical_name() -> None:
    assert format_tag("prod", Version(1, 0, 2), date(2023, 1, 9)) == "prod-v1.0.2-20230109"


def test_parse_tag_when_formatted_then_round_trips() -> None:
    """Parsing a formatted tag recovers prefix, version and date."""
    day = date(2026, 10, 19)
    parsed = parse_tag(format_tag("dev", Version(4, 12, 0), day))

    assert parsed.prefix == "dev"
    assert parsed.version == Version(4, 12, 0)
    assert parsed.date == day


@pytest.mark.parametrize(
    "name",
    ["prod-1.0.0-20230101", "prod-v1.0-20230101", "prod-v1.0.0", "release", "prod-v1.0.0-2023011"],
)
def test_parse_tag_when_malformed_then_value_error(name: str) -> None:
    with pytest.raises(ValueError):
        parse_tag(name)


def test_sentinel_tag_when_called_then_zero_version_in_1900() -> None:
    assert sentinel_tag("pre") == "pre-v0.0.0-19000101"


def test_build_tag_spec_when_called_then_name_matches_format() -> None:
    spec = build_tag_spec(Environment.STAGING, "pre", Version(2, 0, 0), date(2024, 12, 31))

    assert spec.environment is Environment.STAGING
    assert spec.name == "pre-v2.0.0-20241231"

#!/usr/bin/env python3
# this_file: src/envtag/settings.py
"""Load, validate, and persist ``envtag`` settings for a repository."""

from __future__ import annotations

import shutil
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

import tomli
import tomli_w

from .environments import Environment

SETTINGS_FILE_NAME = ".envtag.toml"
TAG_ORDERS = ("lexical", "semver")


@dataclass
class EnvironmentPrefs:
    """Tag prefix and descriptor field bound to one environment."""

    prefix: str
    field: str


def _default_environments() -> dict[Environment, EnvironmentPrefs]:
    return {env: EnvironmentPrefs(env.default_prefix, env.default_field) for env in Environment}


@dataclass
class EnvtagSettings:
    """Concrete settings object persisted to ``.envtag.toml``."""

    descriptor: str | None = None
    tag_order: str = "lexical"
    bump_descriptor: bool = False
    write_descriptor: bool = True
    push: bool = True
    push_tags: bool = False
    remote: str | None = None
    require_clean: bool = False
    environments: dict[Environment, EnvironmentPrefs] = field(
        default_factory=_default_environments
    )

    def prefix_for(self, env: Environment) -> str:
        """Return the tag prefix configured for ``env``."""
        return self.environments[env].prefix

    def field_for(self, env: Environment) -> str:
        """Return the descriptor field configured for ``env``."""
        return self.environments[env].field

    def validate(self) -> None:
        """Ensure ordering mode and environment bindings are usable.

        Raises:
            ValueError: If ``tag_order`` is unknown, a prefix is empty or
                contains a dash, or two environments share a prefix.
        """
        if self.tag_order not in TAG_ORDERS:
            raise ValueError(
                f"tag_order must be one of {', '.join(TAG_ORDERS)}, got '{self.tag_order}'"
            )
        seen: set[str] = set()
        for env, prefs in self.environments.items():
            if not prefs.prefix or "-" in prefs.prefix:
                raise ValueError(f"invalid tag prefix '{prefs.prefix}' for {env.value}")
            if not prefs.field:
                raise ValueError(f"descriptor field for {env.value} must be non-empty")
            if prefs.prefix in seen:
                raise ValueError(f"tag prefix '{prefs.prefix}' used by more than one environment")
            seen.add(prefs.prefix)

    def to_dict(self) -> dict[str, object]:
        """Serialise the settings into a TOML-friendly mapping.

        Optional values that are unset are omitted since TOML has no null.
        """
        payload: dict[str, object] = {
            "tag_order": self.tag_order,
            "bump_descriptor": self.bump_descriptor,
            "write_descriptor": self.write_descriptor,
            "push": self.push,
            "push_tags": self.push_tags,
            "require_clean": self.require_clean,
            "environments": {
                env.value: {"prefix": prefs.prefix, "field": prefs.field}
                for env, prefs in self.environments.items()
            },
        }
        if self.descriptor is not None:
            payload["descriptor"] = self.descriptor
        if self.remote is not None:
            payload["remote"] = self.remote
        return payload

    @classmethod
    def from_dict(cls, payload: dict[str, object]) -> EnvtagSettings:
        """Create :class:`EnvtagSettings` from a deserialised TOML mapping.

        Args:
            payload: Parsed ``.envtag.toml`` content.

        Returns:
            EnvtagSettings: Validated settings; missing keys take defaults.

        Raises:
            ValueError: If an environment table names an unknown environment
                or validation fails.
        """
        environments = _default_environments()
        for name, info in (payload.get("environments") or {}).items():
            try:
                env = Environment(name)
            except ValueError:
                raise ValueError(f"unknown environment '{name}' in settings") from None
            prefs = environments[env]
            environments[env] = EnvironmentPrefs(
                str(info.get("prefix", prefs.prefix)),
                str(info.get("field", prefs.field)),
            )
        descriptor = payload.get("descriptor")
        remote = payload.get("remote")
        settings = cls(
            descriptor=str(descriptor) if descriptor else None,
            tag_order=str(payload.get("tag_order", "lexical")),
            bump_descriptor=bool(payload.get("bump_descriptor", False)),
            write_descriptor=bool(payload.get("write_descriptor", True)),
            push=bool(payload.get("push", True)),
            push_tags=bool(payload.get("push_tags", False)),
            remote=str(remote) if remote else None,
            require_clean=bool(payload.get("require_clean", False)),
            environments=environments,
        )
        settings.validate()
        return settings


def settings_path(root: Path | None = None) -> Path:
    """Return the location of ``.envtag.toml`` under ``root`` (default: cwd)."""
    return (root or Path.cwd()) / SETTINGS_FILE_NAME


def load_settings(root: Path | None = None) -> EnvtagSettings:
    """Load repository settings, falling back to defaults when absent.

    Args:
        root: Repository root; defaults to the current working directory.

    Returns:
        EnvtagSettings: Persisted settings or defaults.
    """
    path = settings_path(root)
    if not path.exists():
        return EnvtagSettings()
    with open(path, "rb") as handle:
        payload = tomli.load(handle)
    return EnvtagSettings.from_dict(payload)


def save_settings(settings: EnvtagSettings, root: Path | None = None) -> Path:
    """Persist ``settings`` to disk, creating a timestamped backup first.

    Args:
        settings: Settings instance to write.
        root: Repository root; defaults to the current working directory.

    Returns:
        Path: Path to the written settings file.
    """
    settings.validate()
    target = settings_path(root)
    target.parent.mkdir(parents=True, exist_ok=True)
    if target.exists():
        backup = target.with_suffix(f"{target.suffix}.backup.{datetime.now():%Y%m%d_%H%M%S}")
        shutil.copy2(target, backup)
    with open(target, "wb") as handle:
        tomli_w.dump(settings.to_dict(), handle)
    return target

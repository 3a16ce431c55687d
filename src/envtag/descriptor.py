#!/usr/bin/env python3
# this_file: src/envtag/descriptor.py
"""Read and update per-environment version fields in a project descriptor.

A descriptor is either a JSON document such as ``package.json`` (fields live
at the top level) or a TOML document such as ``pyproject.toml`` (fields live
in ``[tool.envtag]`` and, for reads, fall back to ``[project]``).  Writes go
through a backup, write-to-temp, validate and replace sequence so a failed
write leaves the original file in place.  TOML documents are edited with
:mod:`tomlkit` and JSON documents keep their detected indentation, so only
the version fields change.
"""

from __future__ import annotations

import json
import re
import shutil
from collections.abc import Callable, Iterable, MutableMapping
from datetime import datetime
from pathlib import Path
from typing import Any

import tomli
import tomlkit
from loguru import logger

DEFAULT_CANDIDATES = ("package.json", "pyproject.toml")
TOML_TABLES = (("tool", "envtag"), ("project",))
_INDENT_PATTERN = re.compile(r"^([ \t]+)\S", re.MULTILINE)


class DescriptorError(RuntimeError):
    """Raised when the descriptor file is missing, unreadable, or invalid."""


def find_descriptor(root: Path, explicit: str | None = None) -> Path:
    """Locate the descriptor file for the repository at ``root``.

    Args:
        root: Repository root directory.
        explicit: Configured descriptor path, relative to ``root`` if not
            absolute.

    Returns:
        Path: The configured path, or the first existing default candidate.

    Raises:
        DescriptorError: If no descriptor can be found.
    """
    if explicit:
        path = Path(explicit)
        path = path if path.is_absolute() else root / path
        if not path.exists():
            raise DescriptorError(f"descriptor {path} does not exist")
        return path
    for name in DEFAULT_CANDIDATES:
        candidate = root / name
        if candidate.exists():
            return candidate
    raise DescriptorError(
        f"no project descriptor found in {root} (looked for {', '.join(DEFAULT_CANDIDATES)})"
    )


def _json_layout(text: str) -> tuple[str | int | None, bool]:
    """Return the indent and trailing-newline style of a JSON document."""
    match = _INDENT_PATTERN.search(text)
    if match is None:
        indent: str | int | None = None
    elif "\t" in match.group(1):
        indent = "\t"
    else:
        indent = len(match.group(1))
    return indent, text.endswith("\n")


class DescriptorRecord:
    """In-memory view of a descriptor file, loaded once per run."""

    def __init__(
        self,
        path: Path,
        data: MutableMapping[str, Any],
        indent: str | int | None = 2,
        trailing_newline: bool = True,
    ) -> None:
        self.path = path
        self.data = data
        self._indent = indent
        self._trailing_newline = trailing_newline

    @property
    def is_toml(self) -> bool:
        return self.path.suffix.lower() == ".toml"

    @classmethod
    def load(cls, path: Path) -> DescriptorRecord:
        """Parse ``path`` as JSON or TOML depending on its suffix.

        Raises:
            DescriptorError: If the file is missing or cannot be parsed.
        """
        try:
            text = path.read_text(encoding="utf-8")
            if path.suffix.lower() == ".toml":
                return cls(path, tomlkit.parse(text))
            data = json.loads(text)
        except FileNotFoundError as error:
            raise DescriptorError(f"descriptor {path} does not exist") from error
        except (OSError, ValueError) as error:
            raise DescriptorError(f"cannot read descriptor {path}: {error}") from error
        if not isinstance(data, dict):
            raise DescriptorError(f"descriptor {path} must contain an object at the top level")
        indent, trailing_newline = _json_layout(text)
        return cls(path, data, indent, trailing_newline)

    def _tables(self) -> Iterable[MutableMapping[str, Any]]:
        if not self.is_toml:
            yield self.data
            return
        for keys in TOML_TABLES:
            table: Any = self.data
            for key in keys:
                table = table.get(key) if isinstance(table, MutableMapping) else None
            if isinstance(table, MutableMapping):
                yield table

    def get(self, field: str) -> str | None:
        """Return the raw value stored under ``field``, or ``None`` when absent."""
        for table in self._tables():
            if field in table and table[field] is not None:
                return str(table[field])
        return None

    def set(self, field: str, value: str) -> None:
        """Store ``value`` under ``field`` in the table that already holds it.

        New TOML fields are created in ``[tool.envtag]``.
        """
        for table in self._tables():
            if field in table:
                table[field] = value
                return
        if not self.is_toml:
            self.data[field] = value
            return
        if "tool" not in self.data:
            self.data["tool"] = tomlkit.table(is_super_table=True)
        tool = self.data["tool"]
        if "envtag" not in tool:
            tool["envtag"] = tomlkit.table()
        tool["envtag"][field] = value

    def save(self) -> None:
        """Persist the record back to :attr:`path` with rollback on failure."""
        if self.is_toml:

            def write(path: Path) -> None:
                with open(path, "w", encoding="utf-8") as handle:
                    handle.write(tomlkit.dumps(self.data))

            _write_with_rollback(self.path, write, _validate_toml_file)
        else:

            def write(path: Path) -> None:
                with open(path, "w", encoding="utf-8") as handle:
                    json.dump(self.data, handle, indent=self._indent, ensure_ascii=False)
                    if self._trailing_newline:
                        handle.write("\n")

            _write_with_rollback(self.path, write, _validate_json_file)
        logger.debug("Descriptor {} saved", self.path)


def backup_file(path: Path) -> Path | None:
    """Copy ``path`` to a timestamped sibling; ``None`` when it does not exist."""
    if not path.exists():
        return None
    backup = path.with_suffix(f"{path.suffix}.backup.{datetime.now():%Y%m%d_%H%M%S}")
    shutil.copy2(path, backup)
    logger.debug("Backed up {} to {}", path, backup)
    return backup


def _write_with_rollback(
    target: Path,
    write_func: Callable[[Path], None],
    validate_func: Callable[[Path], None],
) -> None:
    """Write ``target`` via a validated temporary file, restoring on failure.

    The backup is removed whether or not the write succeeds.

    Raises:
        Exception: Whatever ``write_func`` or ``validate_func`` raised, after
            the original file has been restored.
    """
    backup = backup_file(target)
    tmp_path = target.with_suffix(target.suffix + ".tmp")
    if tmp_path.exists():
        tmp_path.unlink()
    try:
        write_func(tmp_path)
        validate_func(tmp_path)
        tmp_path.replace(target)
    except Exception:
        if tmp_path.exists():
            tmp_path.unlink()
        if backup and backup.exists():
            shutil.copy2(backup, target)
        raise
    finally:
        if backup and backup.exists():
            backup.unlink()


def _validate_json_file(path: Path) -> None:
    with open(path, encoding="utf-8") as handle:
        json.load(handle)


def _validate_toml_file(path: Path) -> None:
    with open(path, "rb") as handle:
        tomli.load(handle)

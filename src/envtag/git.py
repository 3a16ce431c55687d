#!/usr/bin/env python3
# this_file: src/envtag/git.py
"""Thin wrapper over the ``git`` command line for tag bookkeeping."""

from __future__ import annotations

import subprocess
from collections.abc import Sequence
from pathlib import Path

from loguru import logger


class GitError(RuntimeError):
    """Raised when a git command fails or git cannot be executed."""

    def __init__(self, args: Sequence[str], stderr: str = "") -> None:
        self.command = ["git", *args]
        self.stderr = stderr.strip()
        message = f"{' '.join(self.command)} failed"
        if self.stderr:
            message = f"{message}: {self.stderr}"
        super().__init__(message)


class GitRepository:
    """Run git commands against the work tree rooted at ``path``."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = path or Path.cwd()

    def _run(self, *args: str) -> str:
        """Execute ``git args`` and return stripped stdout.

        Raises:
            GitError: If git is missing or exits non-zero.
        """
        logger.debug("git {}", " ".join(args))
        try:
            result = subprocess.run(
                ["git", *args],
                cwd=self.path,
                capture_output=True,
                text=True,
                check=True,
            )
        except FileNotFoundError as error:
            raise GitError(args, f"git executable not found ({error})") from error
        except subprocess.CalledProcessError as error:
            raise GitError(args, error.stderr or "") from error
        return result.stdout.strip()

    def is_repository(self) -> bool:
        """Return ``True`` when ``path`` lies inside a git work tree."""
        try:
            return self._run("rev-parse", "--is-inside-work-tree") == "true"
        except GitError:
            return False

    def is_clean(self) -> bool:
        """Return ``True`` when ``git status --porcelain`` reports nothing."""
        return not self._run("status", "--porcelain")

    def list_tags(self) -> list[str]:
        """Return every tag name in byte-lexical refname order.

        The sort is explicit so a user's ``tag.sort`` config cannot reorder it.
        """
        output = self._run("tag", "--list", "--sort=refname")
        return [line.strip() for line in output.splitlines() if line.strip()]

    def create_tag(self, name: str) -> None:
        """Create a lightweight tag ``name`` at ``HEAD``."""
        self._run("tag", name)

    def push(self, remote: str | None = None) -> None:
        """Push the current branch, to ``remote`` when given."""
        if remote:
            self._run("push", remote)
        else:
            self._run("push")

    def push_tags(self, names: Sequence[str], remote: str | None = None) -> None:
        """Push the listed tags to ``remote`` (``origin`` when unset)."""
        if names:
            self._run("push", remote or "origin", *names)

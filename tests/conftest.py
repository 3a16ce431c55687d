# this_file: tests/conftest.py
"""Shared fixtures: an in-memory stand-in for :class:`envtag.git.GitRepository`."""

from __future__ import annotations

from pathlib import Path

import pytest

from envtag.git import GitError


class FakeRepository:
    """Record git operations in memory, mimicking git's failure modes."""

    def __init__(
        self,
        path: Path,
        tags: list[str] | None = None,
        *,
        repository: bool = True,
        clean: bool = True,
        list_error: bool = False,
        push_error: bool = False,
    ) -> None:
        self.path = path
        self.tags = list(tags or [])
        self.created: list[str] = []
        self.pushes: list[str | None] = []
        self.pushed_tags: list[list[str]] = []
        self._repository = repository
        self._clean = clean
        self._list_error = list_error
        self._push_error = push_error

    def is_repository(self) -> bool:
        return self._repository

    def is_clean(self) -> bool:
        return self._clean

    def list_tags(self) -> list[str]:
        if self._list_error:
            raise GitError(("tag", "--list"), "fatal: unable to read refs")
        return list(self.tags)

    def create_tag(self, name: str) -> None:
        if name in self.tags:
            raise GitError(("tag", name), f"fatal: tag '{name}' already exists")
        self.tags.append(name)
        self.created.append(name)

    def push(self, remote: str | None = None) -> None:
        if self._push_error:
            raise GitError(("push",), "fatal: no upstream configured")
        self.pushes.append(remote)

    def push_tags(self, names: list[str], remote: str | None = None) -> None:
        self.pushed_tags.append(list(names))


@pytest.fixture()
def make_repo(tmp_path: Path):
    """Return a factory building :class:`FakeRepository` objects rooted at ``tmp_path``."""

    def factory(tags: list[str] | None = None, **kwargs) -> FakeRepository:
        return FakeRepository(tmp_path, tags, **kwargs)

    return factory

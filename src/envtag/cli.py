#!/usr/bin/env python3
# this_file: src/envtag/cli.py
"""Command-line entrypoint for ``envtag``.

The CLI is implemented with :mod:`fire`.  Running ``envtag`` without a
command starts the interactive tagging flow; ``envtag run`` accepts optional
answers that skip the matching prompt.  Collaborators are injected through
factories so the commands can be exercised without a terminal or a real
repository.
"""

from __future__ import annotations

import sys
from collections.abc import Callable
from pathlib import Path

import fire
from fire.core import FireError
from loguru import logger

from . import __version__
from .environments import ENVIRONMENT_CHOICES
from .git import GitRepository
from .orchestrator import Repository, TagRun
from .prompts import ConsolePrompter, OperatorInput, ScriptedOperator
from .resolvers import Baseline
from .settings import EnvtagSettings, load_settings, save_settings, settings_path

LOG_FORMAT = "<level>{message}</level>"
HELP_FLAGS = ("-h", "--help")


def configure_logging(verbose: bool = False) -> None:
    """Replace loguru's default sink with a colourised stderr sink."""
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "INFO", format=LOG_FORMAT, colorize=True)


class _PartialOperator:
    """Use CLI answers where given and fall back to prompting otherwise."""

    def __init__(
        self, fallback: OperatorInput, baseline: str | None, environment: str | None
    ) -> None:
        self._fallback = fallback
        self._baseline = baseline
        self._environment = environment

    def choose_baseline(self) -> Baseline:
        if self._baseline is None:
            return self._fallback.choose_baseline()
        return Baseline(self._baseline)

    def choose_environment(self) -> str:
        if self._environment is None:
            return self._fallback.choose_environment()
        return self._environment


class EnvtagCLI:
    """Top-level Fire component exposing ``run``, ``init`` and ``version``."""

    def __init__(
        self,
        repo_factory: Callable[[Path], Repository] = GitRepository,
        settings_loader: Callable[[Path], EnvtagSettings] = load_settings,
        prompter_factory: Callable[[], OperatorInput] = ConsolePrompter,
    ) -> None:
        self._repo_factory = repo_factory
        self._settings_loader = settings_loader
        self._prompter_factory = prompter_factory

    def version(self) -> str:
        """Return the installed ``envtag`` version string."""
        return __version__

    def init(self, cwd: str | None = None) -> str:
        """Write a default ``.envtag.toml`` unless one already exists.

        Args:
            cwd: Repository root; defaults to the current directory.

        Returns:
            str: Path of the settings file and whether it was created.
        """
        root = Path(cwd) if cwd else Path.cwd()
        path = settings_path(root)
        if path.exists():
            return f"{path} already exists"
        return f"Wrote {save_settings(EnvtagSettings(), root)}"

    def run(
        self,
        baseline: str | None = None,
        env: str | None = None,
        cwd: str | None = None,
        verbose: bool = False,
    ) -> str:
        """Create the next environment tag(s), prompting for missing answers.

        Args:
            baseline: ``package`` (descriptor version) or ``tag`` (latest tag).
            env: ``all``, ``production``, ``staging`` or ``development``.
            cwd: Repository root; defaults to the current directory.
            verbose: Emit debug logging.

        Returns:
            str: Multi-line summary of created, failed and skipped tags.

        Raises:
            FireError: If ``baseline`` or ``env`` is not a known choice, or
                the settings file is invalid.
        """
        configure_logging(verbose)
        if baseline is not None and baseline not in {item.value for item in Baseline}:
            raise FireError("baseline must be one of package, tag")
        if env is not None and str(env).lower() not in ENVIRONMENT_CHOICES:
            raise FireError(f"env must be one of {', '.join(ENVIRONMENT_CHOICES)}")

        root = Path(cwd) if cwd else Path.cwd()
        try:
            settings = self._settings_loader(root)
        except ValueError as error:
            raise FireError(f"invalid settings: {error}") from error

        if baseline is not None and env is not None:
            operator: OperatorInput = ScriptedOperator(baseline, str(env))
        else:
            operator = _PartialOperator(
                self._prompter_factory(), baseline, None if env is None else str(env).lower()
            )
        try:
            report = TagRun(self._repo_factory(root), settings, operator).run()
        except (KeyboardInterrupt, EOFError):
            logger.error("🚨  No answer given; nothing was tagged")
            return "Aborted: no answer given"
        return report.summary()


def main() -> None:
    """Invoke Fire with :class:`EnvtagCLI`, defaulting to the ``run`` command."""
    argv = sys.argv[1:]
    if not argv or (argv[0].startswith("-") and argv[0] not in HELP_FLAGS):
        argv = ["run", *argv]
    fire.Fire(EnvtagCLI, command=argv, name="envtag")


if __name__ == "__main__":
    main()

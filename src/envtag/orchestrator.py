#!/usr/bin/env python3
# this_file: src/envtag/orchestrator.py
"""Drive one tagging run from the operator's choices to the final push.

A run walks through a fixed sequence of stages::

    AWAITING_BASELINE_CHOICE -> AWAITING_ENVIRONMENT_CHOICE -> RESOLVING
        -> COMPUTING -> WRITING -> PUSHING -> DONE

Setup problems detected while resolving (not a git work tree, dirty tree
when a clean one is required, unreadable descriptor or tag list) end the run
in ``ABORTED`` before any tag exists.  Problems with a single environment or
a single tag are recorded in the :class:`RunReport` and the rest of the run
carries on.  Push failures are logged and otherwise ignored.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from pathlib import Path
from typing import Protocol

from loguru import logger

from .descriptor import DescriptorError, DescriptorRecord, find_descriptor
from .environments import Environment, select_environments
from .git import GitError, GitRepository
from .prompts import ConsolePrompter, OperatorInput
from .resolvers import (
    Baseline,
    ResolutionError,
    ResolvedBaseline,
    resolve_from_descriptor,
    resolve_from_tags,
)
from .settings import EnvtagSettings
from .versioning import TagSpec, build_tag_spec, increment
from .writer import TagResult, create_tags


class Stage(str, Enum):
    """Stages of a tagging run."""

    AWAITING_BASELINE_CHOICE = "awaiting_baseline_choice"
    AWAITING_ENVIRONMENT_CHOICE = "awaiting_environment_choice"
    RESOLVING = "resolving"
    COMPUTING = "computing"
    WRITING = "writing"
    PUSHING = "pushing"
    DONE = "done"
    ABORTED = "aborted"


class SetupError(RuntimeError):
    """Raised when the repository is not in a state that allows tagging."""


class Repository(Protocol):
    """Git operations a tagging run needs."""

    path: Path

    def is_repository(self) -> bool: ...

    def is_clean(self) -> bool: ...

    def list_tags(self) -> list[str]: ...

    def create_tag(self, name: str) -> None: ...

    def push(self, remote: str | None = None) -> None: ...

    def push_tags(self, names: list[str], remote: str | None = None) -> None: ...


@dataclass
class RunReport:
    """Everything a run decided and did, stage by stage."""

    stage: Stage = Stage.AWAITING_BASELINE_CHOICE
    baseline: Baseline | None = None
    environments: list[Environment] = field(default_factory=list)
    baselines: dict[Environment, ResolvedBaseline] = field(default_factory=dict)
    failures: dict[Environment, str] = field(default_factory=dict)
    specs: list[TagSpec] = field(default_factory=list)
    results: list[TagResult] = field(default_factory=list)
    descriptor_updates: dict[str, str] = field(default_factory=dict)
    pushed: bool = False
    error: str | None = None

    @property
    def created(self) -> list[str]:
        return [result.spec.name for result in self.results if result.created]

    @property
    def failed(self) -> dict[str, str]:
        return {result.spec.name: result.error for result in self.results if not result.created}

    def summary(self) -> str:
        """Return a multi-line, human-readable account of the run."""
        if self.stage is Stage.ABORTED:
            return f"Aborted: {self.error}"
        lines = [f"Created {name}" for name in self.created]
        lines.extend(f"Failed {name}: {error}" for name, error in self.failed.items())
        lines.extend(f"Skipped {env.value}: {reason}" for env, reason in self.failures.items())
        lines.extend(f"Descriptor {key} = {value}" for key, value in self.descriptor_updates.items())
        if self.created:
            lines.append("Pushed" if self.pushed else "Not pushed; push manually")
        return "\n".join(lines) if lines else "No tags created"


class TagRun:
    """Single pass through the tagging state machine.

    Args:
        repo: Repository to read tags from and create tags in.
        settings: Tool settings; defaults apply when omitted.
        operator: Source of the baseline and environment choices.
        today: Clock used for the tag date stamp.
    """

    def __init__(
        self,
        repo: Repository | None = None,
        settings: EnvtagSettings | None = None,
        operator: OperatorInput | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.repo = repo or GitRepository()
        self.settings = settings or EnvtagSettings()
        self.operator = operator or ConsolePrompter()
        self._today = today

    def run(self) -> RunReport:
        """Execute the run synchronously and return its report."""
        return asyncio.run(self.run_async())

    async def run_async(self) -> RunReport:
        report = RunReport()
        report.baseline = Baseline(self.operator.choose_baseline())

        self._advance(report, Stage.AWAITING_ENVIRONMENT_CHOICE)
        report.environments = select_environments(self.operator.choose_environment())

        self._advance(report, Stage.RESOLVING)
        try:
            self._check_repository()
            source = await self._load_source(report.baseline)
        except (SetupError, GitError, DescriptorError) as error:
            return self._abort(report, error)

        resolved = await asyncio.gather(
            *(
                asyncio.to_thread(self._resolve, report.baseline, env, source)
                for env in report.environments
            ),
            return_exceptions=True,
        )
        for env, outcome in zip(report.environments, resolved):
            if isinstance(outcome, ResolutionError):
                logger.error("❎  {}", outcome)
                report.failures[env] = str(outcome)
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                report.baselines[env] = outcome

        self._advance(report, Stage.COMPUTING)
        day = self._today()
        report.specs = [
            self._compute(report.baseline, resolved_baseline, day)
            for resolved_baseline in report.baselines.values()
        ]

        self._advance(report, Stage.WRITING)
        report.results = await create_tags(self.repo, report.specs)
        if report.baseline is Baseline.PACKAGE and self.settings.write_descriptor:
            self._update_descriptor(report, source)

        self._advance(report, Stage.PUSHING)
        if self.settings.push and report.created:
            report.pushed = self._push(report.created)

        self._advance(report, Stage.DONE)
        return report

    def _advance(self, report: RunReport, stage: Stage) -> None:
        logger.debug("Stage {} -> {}", report.stage.value, stage.value)
        report.stage = stage

    def _abort(self, report: RunReport, error: Exception) -> RunReport:
        logger.error("🚨  {}", error)
        report.error = str(error)
        self._advance(report, Stage.ABORTED)
        return report

    def _check_repository(self) -> None:
        if not self.repo.is_repository():
            raise SetupError(f"{self.repo.path} is not inside a git work tree")
        if self.settings.require_clean and not self.repo.is_clean():
            raise SetupError("Working tree has uncommitted changes; commit them before tagging")

    async def _load_source(self, baseline: Baseline) -> list[str] | DescriptorRecord:
        if baseline is Baseline.TAG:
            return await asyncio.to_thread(self.repo.list_tags)
        path = find_descriptor(self.repo.path, self.settings.descriptor)
        return DescriptorRecord.load(path)

    def _resolve(
        self, baseline: Baseline, env: Environment, source: list[str] | DescriptorRecord
    ) -> ResolvedBaseline:
        if baseline is Baseline.TAG:
            return resolve_from_tags(
                env, self.settings.prefix_for(env), source, self.settings.tag_order
            )
        return resolve_from_descriptor(env, self.settings.field_for(env), source)

    def _compute(self, baseline: Baseline, resolved: ResolvedBaseline, day: date) -> TagSpec:
        version = resolved.version
        if baseline is Baseline.TAG or self.settings.bump_descriptor:
            version = increment(version)
        env = resolved.environment
        spec = build_tag_spec(env, self.settings.prefix_for(env), version, day)
        logger.info("🏷  Generated tag {}", spec.name)
        return spec

    def _update_descriptor(self, report: RunReport, record: DescriptorRecord) -> None:
        for result in report.results:
            if not result.created:
                continue
            key = self.settings.field_for(result.spec.environment)
            value = str(result.spec.version)
            if record.get(key) != value:
                record.set(key, value)
                report.descriptor_updates[key] = value
        if not report.descriptor_updates:
            return
        try:
            record.save()
        except (OSError, ValueError, TypeError) as error:
            logger.error("❎  Could not update {}: {}", record.path.name, error)
            report.descriptor_updates.clear()
            return
        for key, value in report.descriptor_updates.items():
            logger.success("📦  {} set {} = {}", record.path.name, key, value)

    def _push(self, names: list[str]) -> bool:
        remote = self.settings.remote
        try:
            self.repo.push(remote)
            if self.settings.push_tags:
                self.repo.push_tags(names, remote)
        except GitError as error:
            logger.warning("Push failed, push manually: {}", error)
            return False
        logger.success("Pushed to {}", remote or "the default remote")
        return True

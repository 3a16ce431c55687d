#!/usr/bin/env python3
# this_file: src/envtag/prompts.py
"""Operator input: the two questions asked before tagging."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Protocol

from .environments import ALL, ENVIRONMENT_CHOICES, select_environments
from .resolvers import Baseline

BASELINE_CHOICES: tuple[tuple[Baseline, str], ...] = (
    (Baseline.PACKAGE, "Use the version recorded in the project descriptor"),
    (Baseline.TAG, "Use the latest repository tag"),
)
DEFAULT_BASELINE = Baseline.TAG
DEFAULT_ENVIRONMENT = "staging"


class OperatorInput(Protocol):
    """Source of the operator's baseline and environment choices."""

    def choose_baseline(self) -> Baseline: ...

    def choose_environment(self) -> str: ...


class ScriptedOperator:
    """Answer both questions with fixed values."""

    def __init__(self, baseline: Baseline | str, environment: str) -> None:
        self.baseline = Baseline(baseline)
        select_environments(environment)
        self.environment = environment.strip().lower()

    def choose_baseline(self) -> Baseline:
        return self.baseline

    def choose_environment(self) -> str:
        return self.environment


class ConsolePrompter:
    """Ask the operator on the terminal using numbered choice lists.

    An empty answer picks the default. Anything that is neither a listed
    number nor a listed value is asked again.
    """

    def __init__(
        self,
        input_func: Callable[[str], str] = input,
        output_func: Callable[[str], None] = print,
    ) -> None:
        self._input = input_func
        self._output = output_func

    def _ask(self, question: str, labels: Sequence[str], values: Sequence[str], default: int) -> str:
        self._output(question)
        for index, label in enumerate(labels, start=1):
            marker = "*" if index - 1 == default else " "
            self._output(f" {marker} {index}) {label}")
        while True:
            answer = self._input(f"Choice [{default + 1}]: ").strip().lower()
            if not answer:
                return values[default]
            if answer.isdigit() and 1 <= int(answer) <= len(values):
                return values[int(answer) - 1]
            if answer in values:
                return answer
            self._output(f"Please enter a number between 1 and {len(values)}.")

    def choose_baseline(self) -> Baseline:
        values = [baseline.value for baseline, _ in BASELINE_CHOICES]
        labels = [label for _, label in BASELINE_CHOICES]
        default = values.index(DEFAULT_BASELINE.value)
        return Baseline(self._ask("Select the tag baseline:", labels, values, default))

    def choose_environment(self) -> str:
        values = list(ENVIRONMENT_CHOICES)
        labels = [f"{value} (every environment)" if value == ALL else value for value in values]
        return self._ask(
            "Select the environment:", labels, values, values.index(DEFAULT_ENVIRONMENT)
        )

"""Public package interface for ``envtag``.

``envtag`` creates environment-scoped, date-stamped version tags of the form
``{env}-v{version}-{YYYYMMDD}``.  The building blocks are exported here so
they can be scripted without going through the interactive CLI:

* Version arithmetic and tag formatting (``increment``, ``format_tag``,
  ``parse_tag``).
* Baseline resolution from tags or from the project descriptor.
* :class:`TagRun`, which strings everything together.
"""
# this_file: src/envtag/__init__.py

from .__version__ import __version__
from .descriptor import DescriptorError, DescriptorRecord
from .environments import Environment, select_environments
from .git import GitError, GitRepository
from .orchestrator import RunReport, Stage, TagRun
from .prompts import ConsolePrompter, ScriptedOperator
from .resolvers import Baseline, ResolutionError, resolve_from_descriptor, resolve_from_tags
from .settings import EnvtagSettings, load_settings
from .versioning import TagSpec, format_tag, increment, parse_tag
from .writer import TagResult, create_tags

__all__ = [
    "__version__",
    "Baseline",
    "ConsolePrompter",
    "DescriptorError",
    "DescriptorRecord",
    "Environment",
    "EnvtagSettings",
    "GitError",
    "GitRepository",
    "ResolutionError",
    "RunReport",
    "ScriptedOperator",
    "Stage",
    "TagResult",
    "TagRun",
    "TagSpec",
    "create_tags",
    "format_tag",
    "increment",
    "load_settings",
    "parse_tag",
    "resolve_from_descriptor",
    "resolve_from_tags",
    "select_environments",
]

# this_file: src/envtag/__version__.py
"""Package version for ``envtag``."""

__version__ = "0.1.0"

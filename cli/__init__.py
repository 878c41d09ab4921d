"""Command-line package for the raw location record cleaner."""

from importlib import import_module
from types import ModuleType


def __getattr__(name: str) -> ModuleType:
    if name == "app":
        return import_module("cli.app")
    raise AttributeError(name)

# The Typer application lives in ``cli.app`` and is not re-exported here, so
# ``cli.app`` keeps resolving to the module. Tests patch attributes such as
# ``cli.app.build_default_pipeline`` on that module path.

__all__ = []

"""Top-level ffhistory package.

Multi-season league history for Sleeper leagues: season chain discovery,
champion resolution, streaks, ranked records and advanced team metrics.
"""

from importlib import import_module as _imp

_SUBPACKAGES = ["api", "compute", "history", "cli"]

for _name in _SUBPACKAGES:
    _imp(f"ffhistory.{_name}")

__all__ = list(_SUBPACKAGES)

"""Top-level ffhistory package.

Multi-season league history for Sleeper fantasy leagues: season-chain
discovery, per-user aggregation across the chain, and derived team metrics.
"""

from importlib import import_module as _imp

_SUBPACKAGES = ["api", "compute", "history", "report", "cli"]

for _name in _SUBPACKAGES:
    _imp(f"ffhistory.{_name}")

__all__ = list(_SUBPACKAGES)

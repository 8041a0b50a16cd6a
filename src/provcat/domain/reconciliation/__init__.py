"""Reconciliation of incoming child collections against persisted state."""

from __future__ import annotations

from .differ import ChildDiff, assign_changed, diff_by_id, diff_by_natural_key

__all__ = [
    "ChildDiff",
    "assign_changed",
    "diff_by_id",
    "diff_by_natural_key",
]

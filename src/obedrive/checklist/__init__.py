"""Checklist catalog and reconciliation."""

from __future__ import annotations

from .catalog import LAB_CATALOG, THEORY_CATALOG, artifact_display_name, default_items
from .locks import KeyedLock
from .reconciler import ChecklistReconciler, ItemKey

__all__ = [
    "THEORY_CATALOG",
    "LAB_CATALOG",
    "artifact_display_name",
    "default_items",
    "KeyedLock",
    "ChecklistReconciler",
    "ItemKey",
]

"""Reconciliation of client rune pages and summoner spells."""

from .pages import PageReconciler, page_name, plan_cleanup, plan_eviction
from .spells import SpellReconciler, order_flash, reconcile_spells

__all__ = [
    "PageReconciler",
    "SpellReconciler",
    "order_flash",
    "page_name",
    "plan_cleanup",
    "plan_eviction",
    "reconcile_spells",
]

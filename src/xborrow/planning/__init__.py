from __future__ import annotations

from .planner import plan_deposit_and_borrow, plan_payback_and_withdraw
from .signatures import ensure_bounded_nesting, find_permits, needs_signature

__all__ = [
    "ensure_bounded_nesting",
    "find_permits",
    "needs_signature",
    "plan_deposit_and_borrow",
    "plan_payback_and_withdraw",
]

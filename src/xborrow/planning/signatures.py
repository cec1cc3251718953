"""Detection of the off-chain permits a plan depends on."""

from __future__ import annotations

from typing import Sequence

from ..domain import (
    PERMIT_PARAMS,
    PermitParams,
    RouterActionParams,
    XTransferWithCallParams,
)
from ..errors import InvalidNestingError


def ensure_bounded_nesting(actions: Sequence[RouterActionParams]) -> None:
    """Reject plans nesting X_TRANSFER_WITH_CALL more than one level deep.

    Raises:
        InvalidNestingError: If any ``inner_actions`` holds an X_TRANSFER_WITH_CALL
    """
    for index, action in enumerate(actions):
        if not isinstance(action, XTransferWithCallParams):
            continue
        for inner in action.inner_actions:
            if isinstance(inner, XTransferWithCallParams):
                raise InvalidNestingError(
                    f"Action #{index} nests an X_TRANSFER_WITH_CALL inside its "
                    "inner actions; only one level of nesting is allowed"
                )


def find_permits(actions: Sequence[RouterActionParams]) -> list[PermitParams]:
    """Return every permit of the plan in execution order, nested ones included."""
    ensure_bounded_nesting(actions)
    permits: list[PermitParams] = []
    for action in actions:
        if isinstance(action, PERMIT_PARAMS):
            permits.append(action)
        elif isinstance(action, XTransferWithCallParams):
            permits.extend(a for a in action.inner_actions if isinstance(a, PERMIT_PARAMS))
    return permits


def needs_signature(actions: Sequence[RouterActionParams]) -> bool:
    """Tell whether a permit signature must be obtained before encoding ``actions``."""
    ensure_bounded_nesting(actions)
    for action in actions:
        if isinstance(action, PERMIT_PARAMS):
            return True
        if isinstance(action, XTransferWithCallParams) and needs_signature(
            action.inner_actions
        ):
            return True
    return False

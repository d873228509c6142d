"""Draft completion rule and status transitions."""

from dataclasses import replace
from typing import Protocol, TypeVar

from .constants import DRAFT_STATUSES, STATUS_COMPLETED, STATUS_TRANSITIONS
from .errors import InvalidTransitionError


class CompletionSettings(Protocol):
    num_teams: int
    max_rounds: int
    status: str


D = TypeVar('D')


def is_draft_complete(draft: CompletionSettings, pick_count: int) -> bool:
    """
    Decide whether a draft is finished after a pick.

    With a round cap (max_rounds > 0) the draft is complete once
    num_teams * max_rounds picks exist, whatever the status says. A draft
    marked 'completed' before reaching its cap is reported as not complete.
    Without a cap, only an explicit 'completed' status counts.

    Args:
        draft: Draft settings (num_teams, max_rounds, status)
        pick_count: Number of picks recorded, including the latest one

    Returns:
        True if the draft is complete
    """
    if draft.max_rounds > 0:
        return pick_count >= draft.num_teams * draft.max_rounds

    return draft.status == STATUS_COMPLETED


def can_transition(current: str, target: str) -> bool:
    """Check whether a status change is allowed."""
    return target in STATUS_TRANSITIONS.get(current, set())


def transition(draft: D, target: str) -> D:
    """
    Return a copy of a draft dataclass moved to a new status.

    The setup -> active guard (exactly num_teams teams registered) is the
    caller's to enforce; this only checks the edge exists.

    Raises:
        InvalidTransitionError: If the edge is not in the state machine
    """
    current = draft.status  # type: ignore[attr-defined]
    if target not in DRAFT_STATUSES or not can_transition(current, target):
        raise InvalidTransitionError(current, target)
    return replace(draft, status=target)  # type: ignore[type-var]

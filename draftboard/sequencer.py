"""Pick validation against the current state of a draft."""

from typing import Iterable, Protocol

from .constants import STATUS_ACTIVE
from .errors import (
    DraftNotActiveError,
    DuplicatePlayerError,
    NonSequentialPickError,
    NoTeamAtPositionError,
    WrongTurnError,
)
from .snake import PositionedTeam, current_team


class ProposedPick(Protocol):
    team_id: int
    overall_pick: int


class DraftSettings(Protocol):
    num_teams: int
    status: str


def validate_pick(
    pick: ProposedPick,
    draft: DraftSettings,
    teams: Iterable[PositionedTeam],
    current_pick_count: int,
) -> None:
    """
    Validate a proposed pick against a snapshot of the draft.

    Checks run in a fixed order and the first failure is raised:
    1. Sequence - pick.overall_pick must be current_pick_count + 1
    2. Turn - pick.team_id must be the team on the clock for that pick
    3. Activity - the draft status must be 'active'

    Args:
        pick: Proposed pick (team_id, overall_pick)
        draft: Draft settings (num_teams, status)
        teams: Teams registered in the draft
        current_pick_count: Number of picks already recorded

    Raises:
        NonSequentialPickError: Pick number is stale, skipped or fabricated
        WrongTurnError: Another team is on the clock, or nobody holds the slot
        DraftNotActiveError: Draft is in setup, paused or completed
    """
    expected = current_pick_count + 1
    if pick.overall_pick != expected:
        raise NonSequentialPickError(expected, pick.overall_pick)

    try:
        on_the_clock = current_team(pick.overall_pick, draft.num_teams, teams)
    except NoTeamAtPositionError as e:
        raise WrongTurnError(pick.team_id) from e
    if on_the_clock.id != pick.team_id:
        raise WrongTurnError(pick.team_id, on_the_clock.id)

    if draft.status != STATUS_ACTIVE:
        raise DraftNotActiveError(draft.status)


def is_duplicate_player(player_id: int, drafted_player_ids: Iterable[int]) -> bool:
    """Check whether a player has already been drafted."""
    return player_id in set(drafted_player_ids)


def ensure_player_available(player_id: int, drafted_player_ids: Iterable[int]) -> None:
    """Raise DuplicatePlayerError if the player has already been drafted."""
    if is_duplicate_player(player_id, drafted_player_ids):
        raise DuplicatePlayerError(player_id)

"""Snake draft order calculation.

In a snake draft the order reverses every round: odd rounds run from draft
position 1 up to N, even rounds run from N back down to 1, so the team that
picks last in one round also picks first in the next.

Teams are resolved by their ``draft_position`` rather than by id or list
order, since positions can be reassigned independently of team identity.
"""

from typing import Iterable, Protocol, TypeVar

from .errors import InvalidInputError, NoTeamAtPositionError


class PositionedTeam(Protocol):
    id: int
    draft_position: int


T = TypeVar('T', bound=PositionedTeam)


def _check_inputs(pick_number: int, num_teams: int) -> None:
    if num_teams <= 0:
        raise InvalidInputError(f'invalid number of teams: {num_teams}')
    if pick_number < 1:
        raise InvalidInputError(f'invalid pick number: {pick_number}')


def round_of(pick_number: int, num_teams: int) -> int:
    """
    Round that a 1-based overall pick falls in.

    Args:
        pick_number: Overall pick number (1-based)
        num_teams: Number of teams in the draft

    Returns:
        Round number (1-based)

    Raises:
        InvalidInputError: If num_teams <= 0 or pick_number < 1
    """
    _check_inputs(pick_number, num_teams)
    return (pick_number + num_teams - 1) // num_teams


def current_position(pick_number: int, num_teams: int) -> int:
    """
    Draft position on the clock for an overall pick.

    Example (4 teams): picks 1..8 -> positions 1, 2, 3, 4, 4, 3, 2, 1

    Raises:
        InvalidInputError: If num_teams <= 0 or pick_number < 1
    """
    rnd = round_of(pick_number, num_teams)
    position_in_round = ((pick_number - 1) % num_teams) + 1

    if rnd % 2 == 1:
        return position_in_round
    return num_teams - position_in_round + 1


def pick_slot(pick_number: int, num_teams: int) -> tuple[int, int]:
    """Return (round, draft_position) for an overall pick."""
    return round_of(pick_number, num_teams), current_position(pick_number, num_teams)


def current_team(pick_number: int, num_teams: int, teams: Iterable[T]) -> T:
    """
    Team on the clock for an overall pick.

    Args:
        pick_number: Overall pick number (1-based)
        num_teams: Number of teams the draft is configured for
        teams: Teams in the draft (anything with ``id`` and ``draft_position``)

    Returns:
        The team whose draft_position matches the computed position

    Raises:
        InvalidInputError: If num_teams <= 0 or pick_number < 1
        NoTeamAtPositionError: If no team holds the computed position
    """
    position = current_position(pick_number, num_teams)

    # Rosters hold at most 14 teams
    for team in teams:
        if team.draft_position == position:
            return team

    raise NoTeamAtPositionError(position)

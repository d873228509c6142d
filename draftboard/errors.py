"""Exception types raised by the draft board.

Every error here is a per-request outcome that the caller maps to a
user-facing message; none of them is fatal to the process.
"""


class DraftBoardError(Exception):
    """Base class for all draft board errors."""


# Draft-turn engine


class InvalidInputError(DraftBoardError, ValueError):
    """Non-positive pick number or team count passed to the order calculator."""


class NoTeamAtPositionError(DraftBoardError):
    """No team holds the draft position that is on the clock."""

    def __init__(self, draft_position: int):
        self.draft_position = draft_position
        super().__init__(f'no team found for draft position {draft_position}')


class NonSequentialPickError(DraftBoardError):
    """Proposed pick number is not the next number in sequence."""

    def __init__(self, expected: int, got: int):
        self.expected = expected
        self.got = got
        super().__init__(f'pick number must be sequential (expected {expected}, got {got})')


class WrongTurnError(DraftBoardError):
    """Proposed team is not the team on the clock."""

    def __init__(self, team_id: int, expected_team_id: int | None = None):
        self.team_id = team_id
        self.expected_team_id = expected_team_id
        super().__init__("not this team's turn to pick")


class DraftNotActiveError(DraftBoardError):
    """Draft is in setup, paused or completed and cannot take picks."""

    def __init__(self, status: str):
        self.status = status
        super().__init__(f'draft is not accepting picks (status: {status})')


class DuplicatePlayerError(DraftBoardError):
    """Player has already been drafted in this draft."""

    def __init__(self, player_id: int):
        self.player_id = player_id
        super().__init__(f'player {player_id} has already been drafted')


class InvalidTransitionError(DraftBoardError):
    """Requested draft status change is not allowed."""

    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__(f'cannot move draft from {current} to {target}')


# Setup and lookups


class DraftSetupError(DraftBoardError):
    """Draft or team settings failed validation."""

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__('; '.join(self.errors))


class DraftNotFoundError(DraftBoardError, LookupError):
    def __init__(self, draft_id: int):
        self.draft_id = draft_id
        super().__init__(f'draft {draft_id} not found')


class TeamNotFoundError(DraftBoardError, LookupError):
    def __init__(self, team_id: int):
        self.team_id = team_id
        super().__init__(f'team {team_id} not found')


class PickNotFoundError(DraftBoardError, LookupError):
    def __init__(self, pick_id: int):
        self.pick_id = pick_id
        super().__init__(f'pick {pick_id} not found')


class PlayerNotFoundError(DraftBoardError, LookupError):
    def __init__(self, player_id: int):
        self.player_id = player_id
        super().__init__(f'player {player_id} not found')


class NoPickToUndoError(DraftBoardError):
    def __init__(self, draft_id: int):
        self.draft_id = draft_id
        super().__init__(f'no pick to undo in draft {draft_id}')


class StoreIntegrityError(DraftBoardError):
    """A write would break a uniqueness rule of the store."""

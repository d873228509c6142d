from .models import AuditEntry, Draft, OnTheClock, Pick, Player, Team
from .snake import current_position, current_team, pick_slot, round_of
from .sequencer import ensure_player_available, is_duplicate_player, validate_pick
from .completion import can_transition, is_draft_complete, transition
from .errors import (
    DraftBoardError,
    DraftNotActiveError,
    DraftNotFoundError,
    DraftSetupError,
    DuplicatePlayerError,
    InvalidInputError,
    InvalidTransitionError,
    NoPickToUndoError,
    NonSequentialPickError,
    NoTeamAtPositionError,
    PickNotFoundError,
    PlayerNotFoundError,
    StoreIntegrityError,
    TeamNotFoundError,
    WrongTurnError,
)
from .notifier import DraftEvent, DraftNotifier, Subscription
from .store import JsonDraftStore
from .service import DraftService, create_service

__all__ = [
    # Models
    'AuditEntry',
    'Draft',
    'OnTheClock',
    'Pick',
    'Player',
    'Team',
    # Snake order
    'round_of',
    'current_position',
    'current_team',
    'pick_slot',
    # Pick validation
    'validate_pick',
    'is_duplicate_player',
    'ensure_player_available',
    # Completion and status
    'is_draft_complete',
    'can_transition',
    'transition',
    # Errors
    'DraftBoardError',
    'DraftNotActiveError',
    'DraftNotFoundError',
    'DraftSetupError',
    'DuplicatePlayerError',
    'InvalidInputError',
    'InvalidTransitionError',
    'NoPickToUndoError',
    'NonSequentialPickError',
    'NoTeamAtPositionError',
    'PickNotFoundError',
    'PlayerNotFoundError',
    'StoreIntegrityError',
    'TeamNotFoundError',
    'WrongTurnError',
    # Live updates
    'DraftEvent',
    'DraftNotifier',
    'Subscription',
    # Storage and operations
    'JsonDraftStore',
    'DraftService',
    'create_service',
]

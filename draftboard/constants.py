"""Constants for the draft board."""

# Draft lifecycle states
STATUS_SETUP = 'setup'
STATUS_ACTIVE = 'active'
STATUS_PAUSED = 'paused'
STATUS_COMPLETED = 'completed'

DRAFT_STATUSES = (STATUS_SETUP, STATUS_ACTIVE, STATUS_PAUSED, STATUS_COMPLETED)

# Allowed status transitions (setup -> active is additionally guarded by roster size)
STATUS_TRANSITIONS = {
    STATUS_SETUP: {STATUS_ACTIVE},
    STATUS_ACTIVE: {STATUS_PAUSED, STATUS_COMPLETED},
    STATUS_PAUSED: {STATUS_ACTIVE, STATUS_COMPLETED},
    STATUS_COMPLETED: set(),
}

# League settings
MIN_TEAMS = 2
MAX_TEAMS = 14
MAX_TEAM_NAME_LENGTH = 50
MAX_BYE_WEEK = 18
DEFAULT_MAX_ROUNDS = 16

SCORING_FORMATS = ('Standard', 'Half-PPR', 'PPR')
DRAFT_TYPES = ('Redraft', 'Dynasty')

POSITIONS = ('QB', 'RB', 'WR', 'TE', 'K', 'D/ST', 'DL', 'LB', 'DB')

# Available player listing
MAX_SEARCH_LENGTH = 50
AVAILABLE_PLAYERS_LIMIT = 100

# Audit log action types
AUDIT_ACTIONS = ('pick', 'undo', 'trade', 'swap', 'pause', 'resume', 'complete', 'start')

# Broadcast event types
EVENT_PICK_MADE = 'pick-made'
EVENT_PICK_UNDONE = 'pick-undone'
EVENT_PICK_TRADED = 'pick-traded'
EVENT_DRAFT_STATUS = 'draft-status'
EVENT_DRAFT_COMPLETED = 'draft-completed'
EVENT_DRAFT_ORDER = 'draft-order'

# Subscriber mailbox capacity
DEFAULT_MAILBOX_SIZE = 16

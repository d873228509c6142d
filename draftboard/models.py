"""Data models for the draft board."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from .constants import (
    DEFAULT_MAX_ROUNDS,
    STATUS_ACTIVE,
    STATUS_COMPLETED,
    STATUS_PAUSED,
    STATUS_SETUP,
)


def utc_now() -> str:
    """Current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


@dataclass
class Draft:
    """Container for a draft's settings and lifecycle state."""
    name: str
    num_teams: int
    scoring_format: str = 'PPR'
    draft_type: str = 'Redraft'
    qb_setting: str = '1QB'
    max_rounds: int = DEFAULT_MAX_ROUNDS  # 0 means no fixed cap
    status: str = STATUS_SETUP
    id: int = 0
    created_at: str = field(default_factory=utc_now)

    @property
    def is_setup(self) -> bool:
        return self.status == STATUS_SETUP

    @property
    def is_active(self) -> bool:
        return self.status == STATUS_ACTIVE

    @property
    def is_paused(self) -> bool:
        return self.status == STATUS_PAUSED

    @property
    def is_completed(self) -> bool:
        return self.status == STATUS_COMPLETED

    @property
    def can_make_picks(self) -> bool:
        return self.status == STATUS_ACTIVE

    @property
    def total_picks(self) -> Optional[int]:
        """Number of picks in a full draft, or None when rounds are uncapped."""
        if self.max_rounds > 0:
            return self.num_teams * self.max_rounds
        return None


@dataclass
class Team:
    """Container for a team registered in a draft."""
    team_name: str
    draft_position: int  # 1-based slot, independent of id
    owner_name: str = ''
    draft_id: int = 0
    id: int = 0


@dataclass
class Pick:
    """Container for a recorded (or proposed) pick."""
    team_id: int
    overall_pick: int  # 1-based across the whole draft
    player_id: int = 0
    round: int = 0
    draft_id: int = 0
    is_traded: bool = False
    adp_rank: Optional[int] = None
    id: int = 0
    picked_at: str = field(default_factory=utc_now)


@dataclass
class Player:
    """Container for a draftable player and their rankings."""
    id: int
    name: str
    team: str
    position: str
    bye_week: Optional[int] = None
    dynasty_rank: Optional[int] = None
    sf_rank: Optional[int] = None
    std_rank: Optional[int] = None
    half_ppr_rank: Optional[int] = None
    ppr_rank: Optional[int] = None
    is_custom: bool = False

    def get_adp_rank(self, draft_type: str, scoring_format: str) -> Optional[int]:
        """Rank used as ADP for a draft of the given type and scoring format."""
        if draft_type == 'Dynasty':
            return self.dynasty_rank
        if scoring_format == 'PPR':
            return self.ppr_rank
        if scoring_format == 'Half-PPR':
            return self.half_ppr_rank
        return self.std_rank


@dataclass
class AuditEntry:
    """Container for one line of a draft's audit log."""
    draft_id: int
    action_type: str
    details: str = ''
    entity_id: Optional[int] = None
    id: int = 0
    performed_at: str = field(default_factory=utc_now)


@dataclass
class OnTheClock:
    """Summary of the next pick in a draft."""
    pick_number: int
    round: int
    team: Team

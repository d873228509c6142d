"""Pydantic schemas for JSON data validation."""

from pydantic import BaseModel, Field, field_validator, model_validator

from .constants import AUDIT_ACTIONS, DRAFT_STATUSES, DRAFT_TYPES, POSITIONS, SCORING_FORMATS


class DraftRecord(BaseModel):
    """Draft settings as stored on disk."""

    id: int = Field(..., ge=1)
    name: str = Field(..., min_length=1)
    num_teams: int = Field(..., ge=2, le=14)
    scoring_format: str
    draft_type: str
    qb_setting: str = '1QB'
    max_rounds: int = Field(..., ge=0)
    status: str
    created_at: str

    @field_validator('scoring_format')
    @classmethod
    def validate_scoring_format(cls, v):
        """Ensure scoring format is known."""
        if v not in SCORING_FORMATS:
            raise ValueError(f'Invalid scoring format: {v}')
        return v

    @field_validator('draft_type')
    @classmethod
    def validate_draft_type(cls, v):
        """Ensure draft type is known."""
        if v not in DRAFT_TYPES:
            raise ValueError(f'Invalid draft type: {v}')
        return v

    @field_validator('status')
    @classmethod
    def validate_status(cls, v):
        """Ensure status is a lifecycle state."""
        if v not in DRAFT_STATUSES:
            raise ValueError(f'Invalid draft status: {v}')
        return v

    class Config:
        extra = 'forbid'


class TeamRecord(BaseModel):
    """Team registered in a draft."""

    id: int = Field(..., ge=1)
    draft_id: int = Field(..., ge=1)
    team_name: str = Field(..., min_length=1, max_length=50)
    owner_name: str = ''
    draft_position: int = Field(..., ge=1, le=14)

    class Config:
        extra = 'forbid'


class PickRecord(BaseModel):
    """Recorded pick."""

    id: int = Field(..., ge=1)
    draft_id: int = Field(..., ge=1)
    team_id: int = Field(..., ge=1)
    player_id: int = Field(..., ge=1)
    round: int = Field(..., ge=1)
    overall_pick: int = Field(..., ge=1)
    is_traded: bool = False
    adp_rank: int | None = None
    picked_at: str

    class Config:
        extra = 'forbid'


class AuditRecord(BaseModel):
    """Audit log line."""

    id: int = Field(..., ge=1)
    draft_id: int = Field(..., ge=1)
    action_type: str
    entity_id: int | None = None
    details: str = ''
    performed_at: str

    @field_validator('action_type')
    @classmethod
    def validate_action(cls, v):
        """Ensure action type is known."""
        if v not in AUDIT_ACTIONS:
            raise ValueError(f'Invalid audit action: {v}')
        return v

    class Config:
        extra = 'forbid'


class DraftFile(BaseModel):
    """Complete drafts/draft_<id>.json file structure."""

    draft: DraftRecord
    teams: list[TeamRecord] = Field(default_factory=list)
    picks: list[PickRecord] = Field(default_factory=list)
    audit_log: list[AuditRecord] = Field(default_factory=list)
    # Next ids to hand out; they only grow so ids of deleted rows are never reused
    next_team_id: int = Field(1, ge=1)
    next_pick_id: int = Field(1, ge=1)
    next_audit_id: int = Field(1, ge=1)

    @field_validator('picks')
    @classmethod
    def validate_pick_sequence(cls, v):
        """Ensure overall pick numbers run 1..N with no gaps or repeats."""
        numbers = sorted(p.overall_pick for p in v)
        if numbers != list(range(1, len(numbers) + 1)):
            raise ValueError(f'Pick numbers are not contiguous from 1: {numbers}')
        players = [p.player_id for p in v]
        if len(players) != len(set(players)):
            raise ValueError('A player is drafted more than once')
        return v

    @model_validator(mode='after')
    def counters_past_existing_ids(self):
        """Files written without counters start them after the highest id present."""
        self.next_team_id = max(self.next_team_id, max((t.id for t in self.teams), default=0) + 1)
        self.next_pick_id = max(self.next_pick_id, max((p.id for p in self.picks), default=0) + 1)
        self.next_audit_id = max(self.next_audit_id, max((a.id for a in self.audit_log), default=0) + 1)
        return self

    class Config:
        extra = 'forbid'


class DraftSequence(BaseModel):
    """drafts/sequence.json: next draft id to assign."""

    next_draft_id: int = Field(1, ge=1)

    class Config:
        extra = 'forbid'


class PlayerRecord(BaseModel):
    """Draftable player."""

    id: int = Field(..., ge=1)
    name: str = Field(..., min_length=1)
    team: str
    position: str
    bye_week: int | None = Field(None, ge=1, le=18)
    dynasty_rank: int | None = None
    sf_rank: int | None = None
    std_rank: int | None = None
    half_ppr_rank: int | None = None
    ppr_rank: int | None = None
    is_custom: bool = False

    @field_validator('position')
    @classmethod
    def validate_position(cls, v):
        """Ensure position is valid."""
        if v not in POSITIONS:
            raise ValueError(f'Invalid position: {v}')
        return v

    class Config:
        extra = 'forbid'


class PlayersFile(BaseModel):
    """Complete players.json file structure."""

    players: list[PlayerRecord]

    class Config:
        extra = 'forbid'


class DraftBoardConfig(BaseModel):
    """Application configuration settings."""

    data_dir: str = 'data'
    default_max_rounds: int = Field(16, ge=0, le=30)
    mailbox_size: int = Field(16, ge=1, le=1024)
    log_level: str = Field('INFO', pattern=r'^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$')
    log_to_file: bool = False
    log_dir: str | None = None

    class Config:
        extra = 'forbid'

"""Validation functions for draft settings and team rosters."""

from .constants import (
    DRAFT_TYPES,
    MAX_BYE_WEEK,
    MAX_SEARCH_LENGTH,
    MAX_TEAM_NAME_LENGTH,
    MAX_TEAMS,
    MIN_TEAMS,
    POSITIONS,
    SCORING_FORMATS,
)
from .models import Draft, Player, Team


def validate_draft_settings(draft: Draft) -> list[str]:
    """
    Validate a draft's league settings.

    Checks:
    - Name present
    - League size between 2 and 14 teams
    - Known scoring format and draft type
    - Non-negative round cap

    Args:
        draft: Draft object to validate

    Returns:
        List of validation error messages (empty if valid)
    """
    errors = []

    if not draft.name or not draft.name.strip():
        errors.append('draft name is required')

    if not (MIN_TEAMS <= draft.num_teams <= MAX_TEAMS):
        errors.append(
            f'invalid league size {draft.num_teams} (must be between {MIN_TEAMS} and {MAX_TEAMS} teams)'
        )

    if draft.scoring_format not in SCORING_FORMATS:
        errors.append(
            f'invalid scoring format {draft.scoring_format!r} (must be {", ".join(SCORING_FORMATS)})'
        )

    if draft.draft_type not in DRAFT_TYPES:
        errors.append(f'invalid draft type {draft.draft_type!r} (must be {", ".join(DRAFT_TYPES)})')

    if draft.max_rounds < 0:
        errors.append(f'max rounds cannot be negative, got {draft.max_rounds}')

    return errors


def validate_team(team: Team, existing_teams: list[Team], num_teams: int) -> list[str]:
    """
    Validate a team being added to (or updated in) a draft.

    Checks:
    - Team name present and at most 50 characters
    - Draft position between 1 and num_teams
    - No other team in the draft has the same name or position

    Args:
        team: Team to validate (id 0 for a new team)
        existing_teams: Teams already registered in the draft
        num_teams: League size of the draft

    Returns:
        List of validation error messages (empty if valid)
    """
    errors = []

    name = team.team_name.strip() if team.team_name else ''
    if not name:
        errors.append('team name is required')
    elif len(name) > MAX_TEAM_NAME_LENGTH:
        errors.append(f'team name must be between 1 and {MAX_TEAM_NAME_LENGTH} characters')

    if not (1 <= team.draft_position <= num_teams):
        errors.append(f'draft position must be between 1 and {num_teams}, got {team.draft_position}')

    for other in existing_teams:
        if other.id == team.id:
            continue
        if name and other.team_name == name:
            errors.append(f'team name {name!r} already exists in this draft')
        if other.draft_position == team.draft_position:
            errors.append(f'draft position {team.draft_position} already assigned to {other.team_name}')

    return errors


def validate_roster_count(team_count: int, num_teams: int) -> list[str]:
    """Check that a draft has exactly num_teams teams before it starts."""
    if team_count != num_teams:
        return [f'must have exactly {num_teams} teams to start (have {team_count})']
    return []


def validate_position_filter(position: str) -> list[str]:
    """Check a player position (used for filters and new players)."""
    if position not in POSITIONS:
        return [f'invalid position {position!r} (must be one of {", ".join(POSITIONS)})']
    return []


def validate_search_query(query: str) -> list[str]:
    """Check a player name search string."""
    if len(query) > MAX_SEARCH_LENGTH:
        return [f'search query must be at most {MAX_SEARCH_LENGTH} characters']
    return []


def validate_custom_player(player: Player) -> list[str]:
    """
    Validate a player entered by hand.

    Checks:
    - Name present
    - Known position
    - Bye week, if given, between 1 and 18
    """
    errors = []

    if not player.name or not player.name.strip():
        errors.append('player name is required')

    errors.extend(validate_position_filter(player.position))

    if player.bye_week is not None and not (1 <= player.bye_week <= MAX_BYE_WEEK):
        errors.append(f'bye week must be between 1 and {MAX_BYE_WEEK}, got {player.bye_week}')

    return errors

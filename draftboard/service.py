"""Draft operations: setup, status changes and pick recording.

DraftService is the layer that feeds the draft-turn engine (snake,
sequencer, completion) consistent snapshots from the store, persists the
outcome and tells viewers about it.
"""

import logging
from pathlib import Path
from typing import Optional

from .completion import is_draft_complete, transition
from .config import get_config
from .constants import (
    AVAILABLE_PLAYERS_LIMIT,
    EVENT_DRAFT_COMPLETED,
    EVENT_DRAFT_ORDER,
    EVENT_DRAFT_STATUS,
    EVENT_PICK_MADE,
    EVENT_PICK_TRADED,
    EVENT_PICK_UNDONE,
    STATUS_ACTIVE,
    STATUS_COMPLETED,
    STATUS_PAUSED,
)
from .errors import (
    DraftBoardError,
    DraftNotActiveError,
    DraftSetupError,
    InvalidInputError,
    InvalidTransitionError,
    NoPickToUndoError,
)
from .models import AuditEntry, Draft, OnTheClock, Pick, Player, Team
from .notifier import DraftEvent, DraftNotifier, Subscription
from .schemas import DraftBoardConfig
from .sequencer import ensure_player_available, validate_pick
from .snake import current_team, pick_slot, round_of
from .store import JsonDraftStore
from .validators import (
    validate_custom_player,
    validate_draft_settings,
    validate_position_filter,
    validate_roster_count,
    validate_search_query,
    validate_team,
)

logger = logging.getLogger('draftboard.service')


class DraftService:
    """
    Draft board operations over a store and a notifier.

    Every operation that reads the pick count and then writes runs under the
    store's per-draft lock, so at most one pick is committed per overall
    pick number per draft.
    """

    def __init__(
        self,
        store: JsonDraftStore,
        notifier: Optional[DraftNotifier] = None,
        default_max_rounds: Optional[int] = None,
    ):
        """
        Initialize service.

        Args:
            store: Persistence for drafts, teams, picks and players
            notifier: Broadcast hub for live events (a private one if omitted)
            default_max_rounds: Round cap for drafts created without one
                (default: from config)
        """
        self.store = store
        self.notifier = notifier if notifier is not None else DraftNotifier()
        if default_max_rounds is None:
            default_max_rounds = get_config().default_max_rounds
        self.default_max_rounds = default_max_rounds

    # Drafts

    def create_draft(
        self,
        name: str,
        num_teams: int,
        scoring_format: str = 'PPR',
        draft_type: str = 'Redraft',
        max_rounds: Optional[int] = None,
        qb_setting: str = '1QB',
    ) -> Draft:
        """Create a draft in setup status."""
        draft = Draft(
            name=(name or '').strip(),
            num_teams=num_teams,
            scoring_format=scoring_format,
            draft_type=draft_type,
            qb_setting=qb_setting,
            max_rounds=self.default_max_rounds if max_rounds is None else max_rounds,
        )
        errors = validate_draft_settings(draft)
        if errors:
            raise DraftSetupError(errors)

        draft = self.store.create_draft(draft)
        logger.info(f'Created draft {draft.id} ({draft.name}, {draft.num_teams} teams)')
        return draft

    def get_draft(self, draft_id: int) -> Draft:
        return self.store.get_draft(draft_id)

    def list_drafts(self) -> list[Draft]:
        return self.store.list_drafts()

    def update_draft(
        self,
        draft_id: int,
        name: Optional[str] = None,
        num_teams: Optional[int] = None,
        scoring_format: Optional[str] = None,
        draft_type: Optional[str] = None,
        max_rounds: Optional[int] = None,
        qb_setting: Optional[str] = None,
    ) -> Draft:
        """
        Change league settings while the draft is in setup.

        Only the arguments given are changed. The result is validated like a
        new draft, and the league cannot shrink below a position that is
        already taken by a registered team.
        """
        with self.store.draft_lock(draft_id):
            draft = self.store.get_draft(draft_id)
            if not draft.is_setup:
                raise DraftSetupError(['draft settings can only be changed while the draft is in setup'])

            changes = {
                'name': name.strip() if name is not None else None,
                'num_teams': num_teams,
                'scoring_format': scoring_format,
                'draft_type': draft_type,
                'max_rounds': max_rounds,
                'qb_setting': qb_setting,
            }
            for field_name, value in changes.items():
                if value is not None:
                    setattr(draft, field_name, value)

            errors = validate_draft_settings(draft)
            highest = max((t.draft_position for t in self.store.get_teams(draft_id)), default=0)
            if highest > draft.num_teams:
                errors.append(f'a team already holds draft position {highest}')
            if errors:
                raise DraftSetupError(errors)

            self.store.update_draft(draft)
        logger.info(f'Updated settings of draft {draft_id}')
        return draft

    def delete_draft(self, draft_id: int) -> None:
        """Delete a draft with its teams and picks and disconnect its viewers."""
        with self.store.draft_lock(draft_id):
            self.store.delete_draft(draft_id)
        self.notifier.close_draft(draft_id)
        logger.info(f'Deleted draft {draft_id}')

    # Teams

    def add_team(self, draft_id: int, team_name: str, draft_position: int, owner_name: str = '') -> Team:
        """Register a team while the draft is in setup."""
        with self.store.draft_lock(draft_id):
            draft = self.store.get_draft(draft_id)
            if not draft.is_setup:
                raise DraftSetupError(['teams can only be added while the draft is in setup'])

            teams = self.store.get_teams(draft_id)
            team = Team(
                team_name=(team_name or '').strip(),
                draft_position=draft_position,
                owner_name=(owner_name or '').strip(),
                draft_id=draft_id,
            )
            errors = validate_team(team, teams, draft.num_teams)
            if len(teams) >= draft.num_teams:
                errors.append(f'draft already has {draft.num_teams} teams')
            if errors:
                raise DraftSetupError(errors)

            team = self.store.add_team(team)
        logger.info(f'Added team {team.team_name} at position {team.draft_position} to draft {draft_id}')
        return team

    def get_teams(self, draft_id: int) -> list[Team]:
        return self.store.get_teams(draft_id)

    def update_team(
        self,
        draft_id: int,
        team_id: int,
        team_name: Optional[str] = None,
        draft_position: Optional[int] = None,
        owner_name: Optional[str] = None,
    ) -> Team:
        """
        Rename a team or move it to a free draft position.

        Once every slot is filled, positions change with swap_positions.
        """
        with self.store.draft_lock(draft_id):
            draft = self.store.get_draft(draft_id)
            if draft.is_completed:
                raise DraftSetupError(['teams cannot be changed in a completed draft'])

            team = self.store.get_team(draft_id, team_id)
            if team_name is not None:
                team.team_name = team_name.strip()
            if draft_position is not None:
                team.draft_position = draft_position
            if owner_name is not None:
                team.owner_name = owner_name.strip()

            errors = validate_team(team, self.store.get_teams(draft_id), draft.num_teams)
            if errors:
                raise DraftSetupError(errors)
            self.store.update_team(team)
        return team

    def swap_positions(self, draft_id: int, team_a_id: int, team_b_id: int) -> tuple[Team, Team]:
        """
        Exchange the draft positions of two teams.

        Allowed until the draft completes. Picks already made keep their
        owners; the on-the-clock lookup goes by position, so every later pick
        follows the new order.

        Returns:
            The two teams with their new positions, in argument order
        """
        if team_a_id == team_b_id:
            raise InvalidInputError('cannot swap a team with itself')

        with self.store.draft_lock(draft_id):
            draft = self.store.get_draft(draft_id)
            if draft.is_completed:
                raise DraftSetupError(['teams cannot be changed in a completed draft'])
            team_a, team_b = self.store.swap_positions(draft_id, team_a_id, team_b_id)
            self.store.log(
                draft_id,
                'swap',
                team_a.id,
                f'{team_a.team_name} now picks at {team_a.draft_position}, '
                f'{team_b.team_name} at {team_b.draft_position}',
            )
            order = [t.id for t in self.store.get_teams(draft_id)]
        logger.info(f'Draft {draft_id}: swapped positions of {team_a.team_name} and {team_b.team_name}')

        self.notifier.publish(draft_id, DraftEvent(EVENT_DRAFT_ORDER, {'draft_id': draft_id, 'team_ids': order}))
        return team_a, team_b

    def delete_team(self, draft_id: int, team_id: int) -> None:
        """Remove a team while the draft is in setup."""
        with self.store.draft_lock(draft_id):
            draft = self.store.get_draft(draft_id)
            if not draft.is_setup:
                raise DraftSetupError(['teams can only be removed while the draft is in setup'])
            self.store.delete_team(draft_id, team_id)

    # Status changes

    def _change_status(
        self, draft: Draft, target: str, action: str, details: str
    ) -> tuple[Draft, list[DraftEvent]]:
        """Apply a transition under the caller's draft lock; returns the events to publish."""
        updated = transition(draft, target)
        self.store.update_draft(updated)
        self.store.log(draft.id, action, None, details)
        logger.info(f'Draft {draft.id}: {draft.status} -> {updated.status}')

        events = [DraftEvent(EVENT_DRAFT_STATUS, {'draft_id': draft.id, 'status': updated.status})]
        if updated.is_completed:
            events.append(DraftEvent(EVENT_DRAFT_COMPLETED, {'draft_id': draft.id}))
        return updated, events

    def _publish(self, draft_id: int, events: list[DraftEvent]) -> None:
        for event in events:
            self.notifier.publish(draft_id, event)

    def start_draft(self, draft_id: int) -> Draft:
        """Move a draft from setup to active once every slot has a team."""
        with self.store.draft_lock(draft_id):
            draft = self.store.get_draft(draft_id)
            if not draft.is_setup:
                raise InvalidTransitionError(draft.status, STATUS_ACTIVE)
            errors = validate_roster_count(self.store.count_teams(draft_id), draft.num_teams)
            if errors:
                raise DraftSetupError(errors)
            updated, events = self._change_status(draft, STATUS_ACTIVE, 'start', 'Draft started')
        self._publish(draft_id, events)
        return updated

    def pause_draft(self, draft_id: int) -> Draft:
        with self.store.draft_lock(draft_id):
            draft = self.store.get_draft(draft_id)
            updated, events = self._change_status(draft, STATUS_PAUSED, 'pause', 'Draft paused')
        self._publish(draft_id, events)
        return updated

    def resume_draft(self, draft_id: int) -> Draft:
        with self.store.draft_lock(draft_id):
            draft = self.store.get_draft(draft_id)
            if not draft.is_paused:
                raise InvalidTransitionError(draft.status, STATUS_ACTIVE)
            updated, events = self._change_status(draft, STATUS_ACTIVE, 'resume', 'Draft resumed')
        self._publish(draft_id, events)
        return updated

    def complete_draft(self, draft_id: int) -> Draft:
        with self.store.draft_lock(draft_id):
            draft = self.store.get_draft(draft_id)
            updated, events = self._change_status(draft, STATUS_COMPLETED, 'complete', 'Draft completed')
        self._publish(draft_id, events)
        return updated

    # Picks

    def make_pick(
        self,
        draft_id: int,
        player_id: int,
        team_id: Optional[int] = None,
        overall_pick: Optional[int] = None,
    ) -> Pick:
        """
        Record the next pick of a draft.

        The team and pick number default to whoever is on the clock; values
        supplied by a client are validated against the current state rather
        than trusted. If the pick fills the last slot the draft is completed.

        Args:
            draft_id: Draft to pick in
            player_id: Player being drafted
            team_id: Team the client believes is picking (optional)
            overall_pick: Pick number the client believes is next (optional)

        Returns:
            The recorded Pick

        Raises:
            DraftNotActiveError: Draft is not active
            NoTeamAtPositionError: Roster has no team at the slot on the clock
            PlayerNotFoundError: Unknown player
            DuplicatePlayerError: Player already drafted
            NonSequentialPickError: overall_pick is not the next number
            WrongTurnError: team_id is not on the clock
        """
        with self.store.draft_lock(draft_id):
            try:
                pick, player, team, completed = self._record_pick(draft_id, player_id, team_id, overall_pick)
            except DraftBoardError as e:
                logger.warning(f'Rejected pick of player {player_id} in draft {draft_id}: {e}')
                raise

        self.notifier.publish(
            draft_id,
            DraftEvent(
                EVENT_PICK_MADE,
                {
                    'pick_id': pick.id,
                    'player_id': player.id,
                    'player_name': player.name,
                    'team_id': team.id,
                    'team_name': team.team_name,
                    'round': pick.round,
                    'overall_pick': pick.overall_pick,
                },
            ),
        )
        if completed:
            self.notifier.publish(draft_id, DraftEvent(EVENT_DRAFT_COMPLETED, {'draft_id': draft_id}))
        return pick

    def _record_pick(
        self,
        draft_id: int,
        player_id: int,
        team_id: Optional[int],
        overall_pick: Optional[int],
    ) -> tuple[Pick, Player, Team, bool]:
        draft = self.store.get_draft(draft_id)
        if not draft.can_make_picks:
            raise DraftNotActiveError(draft.status)

        pick_count = self.store.count_picks(draft_id)
        teams = self.store.get_teams(draft_id)
        on_the_clock = current_team(pick_count + 1, draft.num_teams, teams)

        player = self.store.get_player(player_id)
        ensure_player_available(player_id, self.store.drafted_player_ids(draft_id))

        pick = Pick(
            draft_id=draft_id,
            team_id=on_the_clock.id if team_id is None else team_id,
            player_id=player_id,
            overall_pick=pick_count + 1 if overall_pick is None else overall_pick,
            adp_rank=player.get_adp_rank(draft.draft_type, draft.scoring_format),
        )
        validate_pick(pick, draft, teams, pick_count)
        pick.round = round_of(pick.overall_pick, draft.num_teams)

        pick = self.store.add_pick(pick)
        self.store.log(
            draft_id, 'pick', pick.id, f'{player.name} drafted by {on_the_clock.team_name}'
        )
        logger.info(
            f'Draft {draft_id} pick {pick.overall_pick} (round {pick.round}): '
            f'{on_the_clock.team_name} selects {player.name}'
        )

        completed = False
        if is_draft_complete(draft, pick_count + 1):
            updated = transition(draft, STATUS_COMPLETED)
            self.store.update_draft(updated)
            self.store.log(draft_id, 'complete', None, 'Draft auto-completed')
            logger.info(f'Draft {draft_id} completed after {pick_count + 1} picks')
            completed = True

        return pick, player, on_the_clock, completed

    def undo_pick(self, draft_id: int) -> Pick:
        """Remove the most recent pick of an active or paused draft."""
        with self.store.draft_lock(draft_id):
            draft = self.store.get_draft(draft_id)
            if draft.is_completed:
                raise DraftNotActiveError(draft.status)
            last = self.store.last_pick(draft_id)
            if last is None:
                raise NoPickToUndoError(draft_id)
            self.store.delete_pick(draft_id, last.id)
            self.store.log(draft_id, 'undo', last.id, f'Undid pick {last.overall_pick}')
        logger.info(f'Draft {draft_id}: undid pick {last.overall_pick}')

        self.notifier.publish(
            draft_id,
            DraftEvent(
                EVENT_PICK_UNDONE,
                {'pick_id': last.id, 'draft_id': draft_id, 'overall_pick': last.overall_pick},
            ),
        )
        return last

    def trade_pick(self, draft_id: int, pick_id: int, to_team_id: int, notes: str = '') -> Pick:
        """Give a recorded pick to another team of the same draft."""
        with self.store.draft_lock(draft_id):
            team = self.store.get_team(draft_id, to_team_id)
            pick = self.store.reassign_pick(draft_id, pick_id, to_team_id)
            self.store.log(
                draft_id, 'trade', pick.id, notes or f'Pick {pick.overall_pick} traded to {team.team_name}'
            )
        logger.info(f'Draft {draft_id}: pick {pick.overall_pick} traded to {team.team_name}')

        self.notifier.publish(
            draft_id,
            DraftEvent(
                EVENT_PICK_TRADED,
                {
                    'pick_id': pick.id,
                    'overall_pick': pick.overall_pick,
                    'team_id': team.id,
                    'team_name': team.team_name,
                },
            ),
        )
        return pick

    def get_picks(self, draft_id: int) -> list[Pick]:
        return self.store.get_picks(draft_id)

    def on_the_clock(self, draft_id: int) -> Optional[OnTheClock]:
        """
        Next pick of a draft and the team entitled to make it.

        Returns None once the draft is completed.

        Raises:
            NoTeamAtPositionError: If the roster has no team at that slot
        """
        draft = self.store.get_draft(draft_id)
        if draft.is_completed:
            return None
        pick_number = self.store.count_picks(draft_id) + 1
        rnd, _ = pick_slot(pick_number, draft.num_teams)
        team = current_team(pick_number, draft.num_teams, self.store.get_teams(draft_id))
        return OnTheClock(pick_number=pick_number, round=rnd, team=team)

    # Players

    def available_players(
        self,
        draft_id: int,
        position: Optional[str] = None,
        positions: Optional[list[str]] = None,
        search: str = '',
        limit: Optional[int] = AVAILABLE_PLAYERS_LIMIT,
    ) -> list[Player]:
        """
        Undrafted players, best ADP for the draft's format first.

        Args:
            draft_id: Draft whose picks are excluded
            position: Single position filter
            positions: Several positions; combined with position
            search: Case-insensitive substring of player name or NFL team
            limit: Maximum number of players (None for all)

        Raises:
            InvalidInputError: Unknown position or search longer than 50 characters
        """
        wanted = set(positions or [])
        if position is not None:
            wanted.add(position)
        errors = [e for p in sorted(wanted) for e in validate_position_filter(p)]
        errors.extend(validate_search_query(search or ''))
        if errors:
            raise InvalidInputError('; '.join(errors))

        draft = self.store.get_draft(draft_id)
        drafted = set(self.store.drafted_player_ids(draft_id))
        needle = (search or '').strip().lower()

        def matches(player: Player) -> bool:
            if player.id in drafted:
                return False
            if wanted and player.position not in wanted:
                return False
            return not needle or needle in player.name.lower() or needle in player.team.lower()

        def sort_key(player: Player) -> tuple[bool, int, str]:
            rank = player.get_adp_rank(draft.draft_type, draft.scoring_format)
            return (rank is None, rank or 0, player.name)

        players = sorted(filter(matches, self.store.list_players()), key=sort_key)
        return players if limit is None else players[:limit]

    def add_custom_player(
        self,
        name: str,
        position: str,
        team: str = '',
        bye_week: Optional[int] = None,
    ) -> Player:
        """Add a player missing from the rankings; custom players have no ranks."""
        player = Player(
            id=0,
            name=(name or '').strip(),
            team=(team or '').strip().upper(),
            position=position,
            bye_week=bye_week,
            is_custom=True,
        )
        errors = validate_custom_player(player)
        if errors:
            raise InvalidInputError('; '.join(errors))

        player = self.store.add_player(player)
        logger.info(f'Added custom player {player.id}: {player.name} ({player.position})')
        return player

    def audit_log(self, draft_id: int) -> list[AuditEntry]:
        return self.store.get_audit_log(draft_id)

    # Live updates

    def subscribe(self, draft_id: int) -> Subscription:
        """Subscribe to live events of an existing draft."""
        self.store.get_draft(draft_id)
        return self.notifier.subscribe(draft_id)


def create_service(
    config: Optional[DraftBoardConfig] = None,
    data_dir: Optional[Path | str] = None,
) -> DraftService:
    """
    Build a DraftService from configuration.

    Args:
        config: Settings to use (default: get_config())
        data_dir: Overrides config.data_dir
    """
    if config is None:
        config = get_config()
    store = JsonDraftStore(data_dir if data_dir is not None else config.data_dir)
    notifier = DraftNotifier(mailbox_size=config.mailbox_size)
    return DraftService(store, notifier, default_max_rounds=config.default_max_rounds)

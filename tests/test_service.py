"""Integration tests for draft operations."""

import threading

import pytest

from draftboard.errors import (
    DraftNotActiveError,
    DraftSetupError,
    DuplicatePlayerError,
    InvalidInputError,
    InvalidTransitionError,
    NoPickToUndoError,
    NonSequentialPickError,
    NoTeamAtPositionError,
    PlayerNotFoundError,
    TeamNotFoundError,
    WrongTurnError,
)
from draftboard.notifier import DraftNotifier
from draftboard.service import DraftService, create_service
from draftboard.schemas import DraftBoardConfig


class TestDraftSetup:
    """Tests for creating drafts and registering teams."""

    def test_create_draft(self, service):
        """Test a new draft starts in setup with the default round cap."""
        draft = service.create_draft('  Home League ', 10)
        assert draft.id == 1
        assert draft.name == 'Home League'
        assert draft.status == 'setup'
        assert draft.max_rounds == 16

    def test_create_uncapped_draft(self, service):
        """Test max_rounds=0 is kept as no cap."""
        draft = service.create_draft('Open', 8, max_rounds=0)
        assert draft.max_rounds == 0
        assert draft.total_picks is None

    def test_invalid_settings(self, service):
        """Test every invalid setting is reported."""
        with pytest.raises(DraftSetupError) as exc_info:
            service.create_draft('', 20, scoring_format='Points', draft_type='Keeper')
        assert len(exc_info.value.errors) == 4

    def test_add_teams(self, service):
        """Test teams are registered with their positions."""
        draft = service.create_draft('League', 2)
        service.add_team(draft.id, 'Second', 2)
        service.add_team(draft.id, 'First', 1)
        assert [t.team_name for t in service.get_teams(draft.id)] == ['First', 'Second']

    def test_duplicate_position_rejected(self, service):
        """Test two teams cannot share a draft position."""
        draft = service.create_draft('League', 4)
        service.add_team(draft.id, 'One', 1)
        with pytest.raises(DraftSetupError, match='already assigned'):
            service.add_team(draft.id, 'Two', 1)

    def test_too_many_teams(self, service):
        """Test a full draft refuses more teams."""
        draft = service.create_draft('League', 2)
        service.add_team(draft.id, 'One', 1)
        service.add_team(draft.id, 'Two', 2)
        with pytest.raises(DraftSetupError):
            service.add_team(draft.id, 'Three', 2)

    def test_start_requires_full_roster(self, service):
        """Test a draft cannot start until every slot has a team."""
        draft = service.create_draft('League', 3)
        service.add_team(draft.id, 'One', 1)
        with pytest.raises(DraftSetupError, match='exactly 3 teams'):
            service.start_draft(draft.id)
        assert service.get_draft(draft.id).is_setup

    def test_no_teams_added_after_start(self, service, active_draft):
        """Test the roster is frozen once the draft starts."""
        with pytest.raises(DraftSetupError):
            service.add_team(active_draft.id, 'Latecomer', 1)
        with pytest.raises(DraftSetupError):
            service.delete_team(active_draft.id, 1)

    def test_delete_team_in_setup(self, service):
        """Test removing a team during setup."""
        draft = service.create_draft('League', 2)
        team = service.add_team(draft.id, 'One', 1)
        service.delete_team(draft.id, team.id)
        assert service.get_teams(draft.id) == []

    def test_update_team_position(self, service):
        """Test moving a team to a free slot and rejecting a taken one."""
        draft = service.create_draft('League', 3)
        team = service.add_team(draft.id, 'One', 1)
        service.add_team(draft.id, 'Two', 2)
        updated = service.update_team(draft.id, team.id, draft_position=3, team_name='Uno')
        assert updated.draft_position == 3
        assert updated.team_name == 'Uno'
        with pytest.raises(DraftSetupError):
            service.update_team(draft.id, team.id, draft_position=2)


class TestStatusChanges:
    """Tests for start, pause, resume and complete."""

    def test_start(self, active_draft):
        """Test the fixture draft is active."""
        assert active_draft.is_active

    def test_pause_and_resume(self, service, active_draft):
        """Test active <-> paused."""
        assert service.pause_draft(active_draft.id).is_paused
        assert service.resume_draft(active_draft.id).is_active

    def test_resume_requires_paused(self, service, active_draft):
        """Test resuming an active draft is refused."""
        with pytest.raises(InvalidTransitionError):
            service.resume_draft(active_draft.id)

    def test_start_twice(self, service, active_draft):
        """Test start only works from setup."""
        with pytest.raises(InvalidTransitionError):
            service.start_draft(active_draft.id)

    def test_nothing_leaves_completed(self, service, active_draft):
        """Test a completed draft cannot be paused or resumed."""
        service.complete_draft(active_draft.id)
        with pytest.raises(InvalidTransitionError):
            service.pause_draft(active_draft.id)
        with pytest.raises(InvalidTransitionError):
            service.resume_draft(active_draft.id)

    def test_audit_trail(self, service, active_draft):
        """Test status changes are written to the audit log."""
        service.pause_draft(active_draft.id)
        service.resume_draft(active_draft.id)
        actions = [a.action_type for a in service.audit_log(active_draft.id)]
        assert actions == ['resume', 'pause', 'start']


class TestMakePick:
    """Tests for recording picks."""

    def test_snake_order(self, service, active_draft):
        """Test picks follow positions 1-4 then 4-1 (team ids 4,3,2,1,1,2,3,4)."""
        teams = []
        for player_id in range(1, 9):
            pick = service.make_pick(active_draft.id, player_id)
            teams.append(pick.team_id)
        assert teams == [4, 3, 2, 1, 1, 2, 3, 4]

    def test_pick_fields(self, service, active_draft):
        """Test round, overall pick and ADP are recorded."""
        for player_id in range(1, 6):
            pick = service.make_pick(active_draft.id, player_id)
        assert pick.overall_pick == 5
        assert pick.round == 2
        assert pick.adp_rank == 96  # PPR rank of player 5

    def test_auto_complete(self, service, active_draft):
        """Test the draft completes when the last slot is filled."""
        for player_id in range(1, 8):
            service.make_pick(active_draft.id, player_id)
        assert service.get_draft(active_draft.id).is_active
        service.make_pick(active_draft.id, 8)
        assert service.get_draft(active_draft.id).is_completed
        assert service.on_the_clock(active_draft.id) is None
        with pytest.raises(DraftNotActiveError):
            service.make_pick(active_draft.id, 9)

    def test_uncapped_draft_runs_until_completed(self, service):
        """Test a draft without a round cap keeps going."""
        draft = service.create_draft('Open', 2, max_rounds=0)
        service.add_team(draft.id, 'A', 1)
        service.add_team(draft.id, 'B', 2)
        service.start_draft(draft.id)
        for player_id in range(1, 41):
            service.make_pick(draft.id, player_id)
        assert service.get_draft(draft.id).is_active
        service.complete_draft(draft.id)
        assert service.get_draft(draft.id).is_completed

    def test_duplicate_player(self, service, active_draft):
        """Test a player can only be drafted once."""
        service.make_pick(active_draft.id, 25)
        with pytest.raises(DuplicatePlayerError):
            service.make_pick(active_draft.id, 25)
        assert len(service.get_picks(active_draft.id)) == 1

    def test_unknown_player(self, service, active_draft):
        """Test drafting a player who does not exist."""
        with pytest.raises(PlayerNotFoundError):
            service.make_pick(active_draft.id, 5000)

    def test_paused_draft(self, service, active_draft):
        """Test a paused draft takes no picks."""
        service.pause_draft(active_draft.id)
        with pytest.raises(DraftNotActiveError):
            service.make_pick(active_draft.id, 1)

    def test_client_pick_number_checked(self, service, active_draft):
        """Test a stale pick number from the client is rejected."""
        service.make_pick(active_draft.id, 1)
        service.make_pick(active_draft.id, 2)
        with pytest.raises(NonSequentialPickError):
            service.make_pick(active_draft.id, 3, overall_pick=5)
        assert service.make_pick(active_draft.id, 3, overall_pick=3).overall_pick == 3

    def test_client_team_checked(self, service, active_draft):
        """Test a team picking out of turn is rejected."""
        with pytest.raises(WrongTurnError):
            service.make_pick(active_draft.id, 1, team_id=1)
        assert service.make_pick(active_draft.id, 1, team_id=4).team_id == 4

    def test_on_the_clock(self, service, active_draft):
        """Test the next pick summary."""
        service.make_pick(active_draft.id, 1)
        clock = service.on_the_clock(active_draft.id)
        assert clock.pick_number == 2
        assert clock.round == 1
        assert clock.team.team_name == 'Charlie'

        for player_id in range(2, 5):
            service.make_pick(active_draft.id, player_id)
        clock = service.on_the_clock(active_draft.id)
        assert (clock.pick_number, clock.round, clock.team.team_name) == (5, 2, 'Alpha')

    def test_on_the_clock_incomplete_roster(self, service):
        """Test an incomplete roster cannot say whose turn it is."""
        draft = service.create_draft('League', 4)
        service.add_team(draft.id, 'Two', 2)
        service.add_team(draft.id, 'Three', 3)
        with pytest.raises(NoTeamAtPositionError):
            service.on_the_clock(draft.id)

    def test_concurrent_picks_one_winner_per_slot(self, service, active_draft):
        """Test racing submissions for the same slot commit at most one pick."""
        results = []
        barrier = threading.Barrier(4)

        def submit(player_id):
            barrier.wait()
            try:
                service.make_pick(active_draft.id, player_id, overall_pick=1)
                results.append('ok')
            except NonSequentialPickError:
                results.append('rejected')

        threads = [threading.Thread(target=submit, args=(pid,)) for pid in (11, 12, 13, 14)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=10)

        assert sorted(results) == ['ok', 'rejected', 'rejected', 'rejected']
        picks = service.get_picks(active_draft.id)
        assert [p.overall_pick for p in picks] == [1]


class TestUndoAndTrade:
    """Tests for undoing and trading picks."""

    def test_undo_last_pick(self, service, active_draft):
        """Test undo removes the latest pick and frees the player."""
        service.make_pick(active_draft.id, 1)
        service.make_pick(active_draft.id, 2)
        undone = service.undo_pick(active_draft.id)
        assert undone.overall_pick == 2
        assert service.on_the_clock(active_draft.id).pick_number == 2
        assert service.make_pick(active_draft.id, 2).overall_pick == 2

    def test_undo_nothing(self, service, active_draft):
        """Test undo before any pick."""
        with pytest.raises(NoPickToUndoError):
            service.undo_pick(active_draft.id)

    def test_undo_completed_draft(self, service, active_draft):
        """Test a completed draft keeps its picks."""
        for player_id in range(1, 9):
            service.make_pick(active_draft.id, player_id)
        with pytest.raises(DraftNotActiveError):
            service.undo_pick(active_draft.id)

    def test_trade_keeps_round_and_number(self, service, active_draft):
        """Test trading a pick changes only its owner."""
        for player_id in range(1, 6):
            pick = service.make_pick(active_draft.id, player_id)
        traded = service.trade_pick(active_draft.id, pick.id, 3, notes='Deadline deal')
        assert traded.team_id == 3
        assert traded.is_traded
        assert traded.round == pick.round == 2
        assert traded.overall_pick == pick.overall_pick == 5
        assert service.audit_log(active_draft.id)[0].details == 'Deadline deal'

    def test_trade_does_not_change_turn_order(self, service, active_draft):
        """Test the next team on the clock ignores traded picks."""
        first = service.make_pick(active_draft.id, 1)
        service.trade_pick(active_draft.id, first.id, 1)
        assert service.on_the_clock(active_draft.id).team.id == 3

    def test_trade_to_unknown_team(self, service, active_draft):
        """Test the receiving team must be in the draft."""
        pick = service.make_pick(active_draft.id, 1)
        with pytest.raises(TeamNotFoundError):
            service.trade_pick(active_draft.id, pick.id, 77)


class TestAvailablePlayers:
    """Tests for the available player list."""

    def test_excludes_drafted(self, service, active_draft):
        """Test drafted players are not listed."""
        service.make_pick(active_draft.id, 100)
        ids = [p.id for p in service.available_players(active_draft.id)]
        assert 100 not in ids
        assert len(ids) == 99

    def test_ordered_by_format_rank(self, service, active_draft):
        """Test a PPR draft lists the best PPR rank first."""
        players = service.available_players(active_draft.id)
        assert players[0].id == 100

    def test_dynasty_unranked_last(self, service):
        """Test players without a dynasty rank sort last."""
        draft = service.create_draft('Dynasty', 2, draft_type='Dynasty')
        players = service.available_players(draft.id)
        assert players[0].id == 1
        assert all(p.id % 10 == 0 for p in players[-10:])

    def test_position_filter(self, service, active_draft):
        """Test filtering by position."""
        players = service.available_players(active_draft.id, position='QB')
        assert players and all(p.position == 'QB' for p in players)
        with pytest.raises(InvalidInputError):
            service.available_players(active_draft.id, position='XX')


class TestLiveUpdates:
    """Tests for events pushed to viewers."""

    def test_pick_and_completion_events(self, service, active_draft):
        """Test viewers see each pick and the completion."""
        with service.subscribe(active_draft.id) as sub:
            for player_id in range(1, 9):
                service.make_pick(active_draft.id, player_id)
            events = sub.drain()

        types = [e.type for e in events]
        assert types.count('pick-made') == 8
        assert types[-1] == 'draft-completed'
        first = events[0].data
        assert first['overall_pick'] == 1
        assert first['team_name'] == 'Delta'
        assert first['player_name'] == 'Player 1'

    def test_status_events(self, service, active_draft):
        """Test pause and resume are broadcast."""
        with service.subscribe(active_draft.id) as sub:
            service.pause_draft(active_draft.id)
            service.resume_draft(active_draft.id)
            statuses = [e.data['status'] for e in sub.drain()]
        assert statuses == ['paused', 'active']

    def test_undo_and_trade_events(self, service, active_draft):
        """Test undo and trade are broadcast."""
        first = service.make_pick(active_draft.id, 1)
        with service.subscribe(active_draft.id) as sub:
            service.trade_pick(active_draft.id, first.id, 2)
            service.undo_pick(active_draft.id)
            types = [e.type for e in sub.drain()]
        assert types == ['pick-traded', 'pick-undone']

    def test_rejected_pick_not_broadcast(self, service, active_draft):
        """Test nothing is sent for a rejected pick."""
        with service.subscribe(active_draft.id) as sub:
            with pytest.raises(WrongTurnError):
                service.make_pick(active_draft.id, 1, team_id=1)
            assert sub.get(timeout=0) is None

    def test_delete_disconnects_viewers(self, service, active_draft):
        """Test deleting a draft closes its subscriptions."""
        sub = service.subscribe(active_draft.id)
        assert [d.id for d in service.list_drafts()] == [active_draft.id]
        service.delete_draft(active_draft.id)
        assert sub.closed
        assert service.notifier.active_drafts() == []
        assert service.list_drafts() == []


class TestCreateService:
    """Tests for building a service from configuration."""

    def test_uses_config(self, tmp_path):
        """Test data dir, mailbox size and round cap come from config."""
        config = DraftBoardConfig(data_dir=str(tmp_path), default_max_rounds=12, mailbox_size=3)
        service = create_service(config)
        assert service.store.data_dir == tmp_path
        assert service.notifier.mailbox_size == 3
        assert service.create_draft('Configured', 4).max_rounds == 12

    def test_data_dir_override(self, tmp_path):
        """Test an explicit data dir wins over the configured one."""
        config = DraftBoardConfig(data_dir=str(tmp_path / 'configured'))
        service = create_service(config, data_dir=tmp_path / 'override')
        assert service.store.data_dir == tmp_path / 'override'
        assert service.notifier.mailbox_size == config.mailbox_size


class TestIdsAfterUndo:
    """Tests that an undone pick's id is not reused."""

    def test_new_pick_gets_new_id(self, service, active_draft):
        """Test the audit log and events tell the undone and the new pick apart."""
        with service.subscribe(active_draft.id) as sub:
            undone = service.make_pick(active_draft.id, 1)
            service.undo_pick(active_draft.id)
            redone = service.make_pick(active_draft.id, 2)
            events = sub.drain()

        assert redone.id != undone.id
        assert redone.overall_pick == undone.overall_pick == 1
        assert [(e.type, e.data['pick_id']) for e in events] == [
            ('pick-made', undone.id),
            ('pick-undone', undone.id),
            ('pick-made', redone.id),
        ]
        log = [(a.action_type, a.entity_id) for a in service.audit_log(active_draft.id)]
        assert log[:3] == [('pick', redone.id), ('undo', undone.id), ('pick', undone.id)]

    def test_deleted_draft_id_not_reused(self, service):
        """Test a draft created after deleting the newest one gets a new id."""
        service.create_draft('A', 2)
        second = service.create_draft('B', 2)
        service.delete_draft(second.id)
        assert service.create_draft('C', 2).id == second.id + 1


class TestSwapPositions:
    """Tests for exchanging draft positions."""

    def test_later_picks_follow_new_order(self, service, active_draft):
        """Test made picks keep their team and the clock follows the swap."""
        first = service.make_pick(active_draft.id, 1)
        assert first.team_id == 4  # Delta at position 1

        with service.subscribe(active_draft.id) as sub:
            alpha, delta = service.swap_positions(active_draft.id, 1, 4)
            event = sub.get(timeout=0)
        assert (alpha.draft_position, delta.draft_position) == (1, 4)
        assert event.type == 'draft-order'
        assert event.data['team_ids'] == [1, 3, 2, 4]

        assert service.get_picks(active_draft.id)[0].team_id == 4
        assert service.on_the_clock(active_draft.id).team.team_name == 'Charlie'
        service.make_pick(active_draft.id, 2)
        service.make_pick(active_draft.id, 3)
        clock = service.on_the_clock(active_draft.id)
        assert (clock.pick_number, clock.team.team_name) == (4, 'Delta')
        for player_id in range(4, 8):
            service.make_pick(active_draft.id, player_id)
        assert service.on_the_clock(active_draft.id).team.team_name == 'Alpha'

    def test_swap_in_setup(self, service):
        """Test swapping before the draft starts."""
        draft = service.create_draft('League', 2)
        one = service.add_team(draft.id, 'One', 1)
        two = service.add_team(draft.id, 'Two', 2)
        service.swap_positions(draft.id, one.id, two.id)
        assert [t.team_name for t in service.get_teams(draft.id)] == ['Two', 'One']

    def test_swap_rejected(self, service, active_draft):
        """Test swapping with itself, with an unknown team or after completion."""
        with pytest.raises(InvalidInputError):
            service.swap_positions(active_draft.id, 1, 1)
        with pytest.raises(TeamNotFoundError):
            service.swap_positions(active_draft.id, 1, 99)
        service.complete_draft(active_draft.id)
        with pytest.raises(DraftSetupError):
            service.swap_positions(active_draft.id, 1, 2)

    def test_swap_audited(self, service, active_draft):
        """Test swaps are written to the audit log."""
        service.swap_positions(active_draft.id, 2, 3)
        entry = service.audit_log(active_draft.id)[0]
        assert entry.action_type == 'swap'
        assert 'Bravo now picks at 2' in entry.details


class TestUpdateDraft:
    """Tests for editing draft settings."""

    def test_update_settings(self, service):
        """Test changed settings are validated and saved."""
        draft = service.create_draft('League', 4)
        updated = service.update_draft(
            draft.id, name=' Renamed ', num_teams=6, scoring_format='Standard', max_rounds=0
        )
        assert updated.name == 'Renamed'
        stored = service.get_draft(draft.id)
        assert (stored.num_teams, stored.scoring_format, stored.max_rounds) == (6, 'Standard', 0)
        assert stored.draft_type == 'Redraft'

    def test_invalid_settings(self, service):
        """Test invalid values are rejected and nothing is saved."""
        draft = service.create_draft('League', 4)
        with pytest.raises(DraftSetupError):
            service.update_draft(draft.id, scoring_format='Points')
        with pytest.raises(DraftSetupError):
            service.update_draft(draft.id, num_teams=20)
        assert service.get_draft(draft.id).scoring_format == 'PPR'

    def test_cannot_shrink_below_taken_position(self, service):
        """Test the league cannot shrink past a registered team's slot."""
        draft = service.create_draft('League', 4)
        service.add_team(draft.id, 'Last', 4)
        with pytest.raises(DraftSetupError, match='position 4'):
            service.update_draft(draft.id, num_teams=3)

    def test_setup_only(self, service, active_draft):
        """Test settings are frozen once the draft starts."""
        with pytest.raises(DraftSetupError):
            service.update_draft(active_draft.id, name='Too Late')


class TestCustomPlayersAndFilters:
    """Tests for custom players and available player filters."""

    def test_add_custom_player(self, service, active_draft):
        """Test a custom player can be found and drafted."""
        player = service.add_custom_player('Walk On', 'WR', team='fa', bye_week=9)
        assert (player.id, player.team, player.is_custom) == (101, 'FA', True)

        found = service.available_players(active_draft.id, search='walk')
        assert [p.id for p in found] == [101]
        assert service.make_pick(active_draft.id, 101).adp_rank is None

    def test_custom_player_validated(self, service):
        """Test custom players need a name, a known position and a real bye week."""
        with pytest.raises(InvalidInputError):
            service.add_custom_player('Nobody', 'OL')
        with pytest.raises(InvalidInputError):
            service.add_custom_player('', 'QB')
        with pytest.raises(InvalidInputError):
            service.add_custom_player('Late Bye', 'QB', bye_week=19)

    def test_search(self, service, active_draft):
        """Test search matches player names case-insensitively."""
        ids = {p.id for p in service.available_players(active_draft.id, search='PLAYER 1')}
        assert ids == {1, 100} | set(range(10, 20))

    def test_search_too_long(self, service, active_draft):
        """Test searches are capped at 50 characters."""
        assert service.available_players(active_draft.id, search='x' * 50) == []
        with pytest.raises(InvalidInputError):
            service.available_players(active_draft.id, search='x' * 51)

    def test_several_positions(self, service, active_draft):
        """Test filtering by more than one position."""
        players = service.available_players(active_draft.id, positions=['QB', 'RB'])
        assert {p.position for p in players} == {'QB', 'RB'}
        assert len(players) == 50
        with pytest.raises(InvalidInputError):
            service.available_players(active_draft.id, positions=['QB', 'XX'])

    def test_limit(self, service, active_draft):
        """Test the list is capped at 100 unless told otherwise."""
        service.add_custom_player('Walk On', 'WR')
        assert len(service.available_players(active_draft.id)) == 100
        assert len(service.available_players(active_draft.id, limit=None)) == 101
        assert len(service.available_players(active_draft.id, limit=5)) == 5


class LockCheckingNotifier(DraftNotifier):
    """Records whether another thread could take the draft lock at publish time."""

    def __init__(self, store):
        super().__init__()
        self.store = store
        self.lock_free = []

    def publish(self, draft_id, event):
        acquired = threading.Event()

        def take_lock():
            with self.store.draft_lock(draft_id):
                acquired.set()

        worker = threading.Thread(target=take_lock, daemon=True)
        worker.start()
        worker.join(timeout=1)
        self.lock_free.append((event.type, acquired.is_set()))
        return super().publish(draft_id, event)


class TestPublishOutsideLock:
    """Tests that events go out after the draft lock is released."""

    def test_all_events(self, store):
        """Test status, pick, swap, trade and undo events."""
        notifier = LockCheckingNotifier(store)
        service = DraftService(store, notifier, default_max_rounds=1)
        draft = service.create_draft('League', 2)
        service.add_team(draft.id, 'One', 1)
        service.add_team(draft.id, 'Two', 2)
        service.start_draft(draft.id)
        service.pause_draft(draft.id)
        service.resume_draft(draft.id)
        pick = service.make_pick(draft.id, 1)
        service.swap_positions(draft.id, 1, 2)
        service.trade_pick(draft.id, pick.id, 2)
        service.undo_pick(draft.id)
        service.complete_draft(draft.id)

        types = [t for t, _ in notifier.lock_free]
        assert 'draft-status' in types
        assert 'draft-completed' in types
        assert all(free for _, free in notifier.lock_free)

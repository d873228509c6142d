"""JSON-file persistence for drafts, teams, picks and players.

Layout under the data directory:

    players.json            - draftable players (PlayersFile)
    drafts/sequence.json    - next draft id (DraftSequence)
    drafts/draft_<id>.json  - one draft with its teams, picks and audit log (DraftFile)

Keeping a draft and everything it owns in one file makes deleting a draft a
cascade by construction. Writes that would put the same overall pick or the
same player into a draft twice are refused with StoreIntegrityError.
Ids come from counters that only grow, so a deleted draft, team, pick or
audit entry never has its id handed out again.
"""

import logging
import re
import threading
from contextlib import contextmanager
from dataclasses import asdict
from pathlib import Path
from typing import Iterator, Optional

from .errors import (
    DraftNotFoundError,
    PickNotFoundError,
    PlayerNotFoundError,
    StoreIntegrityError,
    TeamNotFoundError,
)
from .models import AuditEntry, Draft, Pick, Player, Team
from .schemas import (
    AuditRecord,
    DraftFile,
    DraftRecord,
    DraftSequence,
    PickRecord,
    PlayerRecord,
    PlayersFile,
    TeamRecord,
)
from .utils import load_json, save_json

logger = logging.getLogger('draftboard.store')

DRAFT_FILE_PATTERN = re.compile(r'^draft_(\d+)\.json$')


class JsonDraftStore:
    """
    Draft repository backed by JSON files.

    Every method that mutates a draft loads its file, applies the change and
    writes it back. Callers that need read-validate-write to be atomic hold
    draft_lock(draft_id) around the whole sequence.
    """

    def __init__(self, data_dir: Path | str):
        self.data_dir = Path(data_dir)
        self.drafts_dir = self.data_dir / 'drafts'
        self.players_path = self.data_dir / 'players.json'
        self._locks: dict[int, threading.RLock] = {}
        self._locks_guard = threading.Lock()
        self._create_lock = threading.Lock()
        self._players: Optional[dict[int, Player]] = None
        self._players_lock = threading.Lock()

    # Locking

    @contextmanager
    def draft_lock(self, draft_id: int) -> Iterator[None]:
        """Hold the lock serialising writes to one draft."""
        with self._locks_guard:
            lock = self._locks.get(draft_id)
            if lock is None:
                lock = threading.RLock()
                self._locks[draft_id] = lock
        with lock:
            yield

    # File helpers

    def _draft_path(self, draft_id: int) -> Path:
        return self.drafts_dir / f'draft_{draft_id}.json'

    @property
    def _sequence_path(self) -> Path:
        return self.drafts_dir / 'sequence.json'

    def _load(self, draft_id: int) -> DraftFile:
        path = self._draft_path(draft_id)
        if not path.exists():
            raise DraftNotFoundError(draft_id)
        return load_json(path, schema=DraftFile)

    def _save(self, draft_file: DraftFile) -> None:
        save_json(self._draft_path(draft_file.draft.id), draft_file)

    def _draft_ids(self) -> list[int]:
        if not self.drafts_dir.exists():
            return []
        ids = []
        for path in self.drafts_dir.iterdir():
            match = DRAFT_FILE_PATTERN.match(path.name)
            if match:
                ids.append(int(match.group(1)))
        return sorted(ids)

    # Drafts

    def create_draft(self, draft: Draft) -> Draft:
        """Persist a new draft and return it with its assigned id."""
        with self._create_lock:
            sequence = (
                load_json(self._sequence_path, schema=DraftSequence)
                if self._sequence_path.exists()
                else DraftSequence()
            )
            ids = self._draft_ids()
            draft.id = max(sequence.next_draft_id, (ids[-1] + 1) if ids else 1)
            save_json(self._sequence_path, DraftSequence(next_draft_id=draft.id + 1))
            record = DraftRecord.model_validate(asdict(draft))
            self._save(DraftFile(draft=record))
        logger.debug(f'Created draft file for draft {draft.id}')
        return draft

    def get_draft(self, draft_id: int) -> Draft:
        return Draft(**self._load(draft_id).draft.model_dump())

    def list_drafts(self) -> list[Draft]:
        """All drafts, newest first."""
        drafts = [self.get_draft(draft_id) for draft_id in self._draft_ids()]
        return sorted(drafts, key=lambda d: (d.created_at, d.id), reverse=True)

    def update_draft(self, draft: Draft) -> None:
        draft_file = self._load(draft.id)
        draft_file.draft = DraftRecord.model_validate(asdict(draft))
        self._save(draft_file)

    def delete_draft(self, draft_id: int) -> None:
        """Delete a draft together with its teams, picks and audit log."""
        path = self._draft_path(draft_id)
        if not path.exists():
            raise DraftNotFoundError(draft_id)
        path.unlink()
        logger.debug(f'Deleted draft file for draft {draft_id}')

    # Teams

    def add_team(self, team: Team) -> Team:
        draft_file = self._load(team.draft_id)
        team.id = draft_file.next_team_id
        draft_file.next_team_id += 1
        draft_file.teams.append(TeamRecord.model_validate(asdict(team)))
        self._save(draft_file)
        return team

    def get_teams(self, draft_id: int) -> list[Team]:
        """Teams of a draft ordered by draft position."""
        teams = [Team(**t.model_dump()) for t in self._load(draft_id).teams]
        return sorted(teams, key=lambda t: t.draft_position)

    def get_team(self, draft_id: int, team_id: int) -> Team:
        for team in self.get_teams(draft_id):
            if team.id == team_id:
                return team
        raise TeamNotFoundError(team_id)

    def count_teams(self, draft_id: int) -> int:
        return len(self._load(draft_id).teams)

    def update_team(self, team: Team) -> None:
        draft_file = self._load(team.draft_id)
        for i, record in enumerate(draft_file.teams):
            if record.id == team.id:
                draft_file.teams[i] = TeamRecord.model_validate(asdict(team))
                self._save(draft_file)
                return
        raise TeamNotFoundError(team.id)

    def swap_positions(self, draft_id: int, team_a_id: int, team_b_id: int) -> tuple[Team, Team]:
        """Exchange the draft positions of two teams in a single write."""
        draft_file = self._load(draft_id)
        by_id = {t.id: t for t in draft_file.teams}
        for team_id in (team_a_id, team_b_id):
            if team_id not in by_id:
                raise TeamNotFoundError(team_id)

        a, b = by_id[team_a_id], by_id[team_b_id]
        swapped = {
            a.id: a.model_copy(update={'draft_position': b.draft_position}),
            b.id: b.model_copy(update={'draft_position': a.draft_position}),
        }
        draft_file.teams = [swapped.get(t.id, t) for t in draft_file.teams]
        self._save(draft_file)
        return Team(**swapped[a.id].model_dump()), Team(**swapped[b.id].model_dump())

    def delete_team(self, draft_id: int, team_id: int) -> None:
        """Delete a team that owns no picks."""
        draft_file = self._load(draft_id)
        if not any(t.id == team_id for t in draft_file.teams):
            raise TeamNotFoundError(team_id)
        if any(p.team_id == team_id for p in draft_file.picks):
            raise StoreIntegrityError(f'team {team_id} owns picks and cannot be deleted')
        draft_file.teams = [t for t in draft_file.teams if t.id != team_id]
        self._save(draft_file)

    # Picks

    def add_pick(self, pick: Pick) -> Pick:
        """
        Record a pick.

        Raises:
            StoreIntegrityError: If the overall pick number or the player is
                already used in this draft
        """
        draft_file = self._load(pick.draft_id)
        for existing in draft_file.picks:
            if existing.overall_pick == pick.overall_pick:
                raise StoreIntegrityError(
                    f'overall pick {pick.overall_pick} already recorded in draft {pick.draft_id}'
                )
            if existing.player_id == pick.player_id:
                raise StoreIntegrityError(
                    f'player {pick.player_id} already drafted in draft {pick.draft_id}'
                )
        pick.id = draft_file.next_pick_id
        draft_file.next_pick_id += 1
        draft_file.picks.append(PickRecord.model_validate(asdict(pick)))
        self._save(draft_file)
        return pick

    def get_picks(self, draft_id: int) -> list[Pick]:
        """Picks of a draft in overall order."""
        picks = [Pick(**p.model_dump()) for p in self._load(draft_id).picks]
        return sorted(picks, key=lambda p: p.overall_pick)

    def get_pick(self, draft_id: int, pick_id: int) -> Pick:
        for pick in self.get_picks(draft_id):
            if pick.id == pick_id:
                return pick
        raise PickNotFoundError(pick_id)

    def last_pick(self, draft_id: int) -> Optional[Pick]:
        picks = self.get_picks(draft_id)
        return picks[-1] if picks else None

    def count_picks(self, draft_id: int) -> int:
        return len(self._load(draft_id).picks)

    def drafted_player_ids(self, draft_id: int) -> list[int]:
        return [p.player_id for p in self._load(draft_id).picks]

    def reassign_pick(self, draft_id: int, pick_id: int, team_id: int) -> Pick:
        """Move a pick to another team; round and overall pick stay as recorded."""
        draft_file = self._load(draft_id)
        for i, record in enumerate(draft_file.picks):
            if record.id == pick_id:
                updated = record.model_copy(update={'team_id': team_id, 'is_traded': True})
                draft_file.picks[i] = updated
                self._save(draft_file)
                return Pick(**updated.model_dump())
        raise PickNotFoundError(pick_id)

    def delete_pick(self, draft_id: int, pick_id: int) -> None:
        """Delete a pick. Only the most recent pick may be removed."""
        draft_file = self._load(draft_id)
        if not any(p.id == pick_id for p in draft_file.picks):
            raise PickNotFoundError(pick_id)
        last = max(draft_file.picks, key=lambda p: p.overall_pick)
        if last.id != pick_id:
            raise StoreIntegrityError(f'pick {pick_id} is not the last pick in draft {draft_id}')
        draft_file.picks = [p for p in draft_file.picks if p.id != pick_id]
        self._save(draft_file)

    # Audit log

    def log(self, draft_id: int, action_type: str, entity_id: Optional[int], details: str) -> AuditEntry:
        draft_file = self._load(draft_id)
        entry = AuditEntry(
            draft_id=draft_id,
            action_type=action_type,
            entity_id=entity_id,
            details=details,
            id=draft_file.next_audit_id,
        )
        draft_file.next_audit_id += 1
        draft_file.audit_log.append(AuditRecord.model_validate(asdict(entry)))
        self._save(draft_file)
        return entry

    def get_audit_log(self, draft_id: int) -> list[AuditEntry]:
        """Audit entries of a draft, newest first."""
        entries = [AuditEntry(**a.model_dump()) for a in self._load(draft_id).audit_log]
        return sorted(entries, key=lambda a: a.id, reverse=True)

    # Players

    def _load_players(self) -> dict[int, Player]:
        if self._players is None:
            if self.players_path.exists():
                players_file = load_json(self.players_path, schema=PlayersFile)
                self._players = {p.id: Player(**p.model_dump()) for p in players_file.players}
            else:
                logger.warning(f'Players file not found: {self.players_path}')
                self._players = {}
        return self._players

    def get_player(self, player_id: int) -> Player:
        player = self._load_players().get(player_id)
        if player is None:
            raise PlayerNotFoundError(player_id)
        return player

    def list_players(self) -> list[Player]:
        return list(self._load_players().values())

    def save_players(self, players: list[Player]) -> None:
        """Replace the players file."""
        with self._players_lock:
            self._write_players(players)

    def add_player(self, player: Player) -> Player:
        """Append a player to players.json and return it with its assigned id."""
        with self._players_lock:
            players = self.list_players()
            player.id = max((p.id for p in players), default=0) + 1
            self._write_players(players + [player])
        logger.debug(f'Added player {player.id} ({player.name})')
        return player

    def _write_players(self, players: list[Player]) -> None:
        records = [PlayerRecord.model_validate(asdict(p)) for p in players]
        save_json(self.players_path, PlayersFile(players=records))
        self._players = {p.id: p for p in players}

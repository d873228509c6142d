"""Shared fixtures for draft board tests."""

import json

import pytest

from draftboard.notifier import DraftNotifier
from draftboard.service import DraftService
from draftboard.store import JsonDraftStore


@pytest.fixture
def data_dir(tmp_path):
    """Create temporary data directory with a players file."""
    data_dir = tmp_path / 'data'
    data_dir.mkdir()

    positions = ['QB', 'RB', 'WR', 'TE']
    players = {
        'players': [
            {
                'id': i,
                'name': f'Player {i}',
                'team': 'KC',
                'position': positions[i % len(positions)],
                'std_rank': i,
                'half_ppr_rank': i,
                # PPR ranks run in reverse so format-specific ordering is visible
                'ppr_rank': 101 - i,
                'dynasty_rank': None if i % 10 == 0 else i * 2,
            }
            for i in range(1, 101)
        ]
    }
    with open(data_dir / 'players.json', 'w') as f:
        json.dump(players, f, indent=2)

    return data_dir


@pytest.fixture
def store(data_dir):
    return JsonDraftStore(data_dir)


@pytest.fixture
def notifier():
    return DraftNotifier(mailbox_size=32)


@pytest.fixture
def service(store, notifier):
    return DraftService(store, notifier, default_max_rounds=16)


@pytest.fixture
def active_draft(service):
    """A started 4-team, 2-round draft. Team ids 1-4 sit at positions 4, 3, 2, 1."""
    draft = service.create_draft('Test League', 4, max_rounds=2)
    for i, name in enumerate(['Alpha', 'Bravo', 'Charlie', 'Delta'], start=1):
        service.add_team(draft.id, name, 5 - i, owner_name=f'Owner {i}')
    return service.start_draft(draft.id)

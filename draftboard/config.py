"""Application configuration management."""

import os
from functools import lru_cache
from pathlib import Path

from .schemas import DraftBoardConfig
from .utils import load_json

CONFIG_ENV_VAR = 'DRAFTBOARD_CONFIG'


def get_config_path() -> Path:
    """Location of the config file, overridable with DRAFTBOARD_CONFIG."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override)
    return Path(__file__).parent.parent / 'data' / 'draftboard_config.json'


@lru_cache(maxsize=1)
def get_config() -> DraftBoardConfig:
    """
    Load configuration from data/draftboard_config.json.

    Configuration is cached after first load. A missing file yields the
    defaults; a malformed one is an error.

    Returns:
        DraftBoardConfig object with validated settings

    Raises:
        ValueError: If config file has invalid structure

    Example:
        from draftboard.config import get_config
        config = get_config()
        print(f"Data directory: {config.data_dir}")
    """
    config_path = get_config_path()
    if not config_path.exists():
        return DraftBoardConfig()
    return load_json(config_path, schema=DraftBoardConfig)


def get_default_max_rounds() -> int:
    """Get the round cap used when a draft is created without one."""
    return get_config().default_max_rounds


def get_mailbox_size() -> int:
    """Get the per-subscriber mailbox capacity."""
    return get_config().mailbox_size


def clear_config_cache() -> None:
    """
    Clear the configuration cache.

    Use this if the config file (or DRAFTBOARD_CONFIG) changes at runtime.
    """
    get_config.cache_clear()

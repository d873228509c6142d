"""JSON file helpers shared by the store and config loader."""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

M = TypeVar('M', bound=BaseModel)
logger = logging.getLogger('draftboard.utils')


def read_json(path: Path | str) -> Any:
    """Parse a JSON file, naming the file in any decode error."""
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f'File not found: {path}')

    with path.open(encoding='utf-8') as f:
        try:
            return json.load(f)
        except json.JSONDecodeError as e:
            logger.error(f'{path} is not valid JSON (line {e.lineno}, column {e.colno})')
            raise json.JSONDecodeError(f'Invalid JSON in {path}: {e.msg}', e.doc, e.pos) from e


def load_json(path: Path | str, schema: type[M] | None = None) -> Any | M:
    """
    Read a JSON file, optionally validating it into a pydantic model.

    Args:
        path: File to read
        schema: Model class for the file's top-level object

    Raises:
        FileNotFoundError: If the file is missing
        json.JSONDecodeError: If the file is not JSON
        ValueError: If the contents do not match schema

    Example:
        from draftboard.schemas import DraftFile
        draft_file = load_json('data/drafts/draft_1.json', schema=DraftFile)
    """
    data = read_json(path)
    if schema is None:
        return data

    try:
        return schema.model_validate(data)
    except ValidationError as e:
        logger.error(f'{path} failed {schema.__name__} validation ({e.error_count()} errors)')
        raise ValueError(f'Schema validation failed for {path}:\n{e}') from e


def save_json(path: Path | str, data: BaseModel | Any, indent: int = 2) -> None:
    """
    Write JSON atomically.

    Content goes to a temp file in the target directory which then replaces
    the target, so a concurrent reader sees either the old or the new file.
    Pydantic models are dumped with model_dump().
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = data.model_dump() if isinstance(data, BaseModel) else data

    fd, tmp_name = tempfile.mkstemp(prefix=f'.{path.name}.', suffix='.tmp', dir=path.parent)
    try:
        with os.fdopen(fd, 'w', encoding='utf-8') as f:
            json.dump(payload, f, indent=indent, ensure_ascii=False)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    logger.debug(f'Wrote {path}')

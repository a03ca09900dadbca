"""
Module: storage.file_locking

Purpose:
    Project record files shared between server processes. Readers take a
    shared portalocker lock; creation and rewrites take an exclusive one
    held across the whole read-transform-write.

Key Functions:
    - file_lock: Lock an open handle for the duration of a block
    - read_record: Parse a JSON record under a shared lock
    - create_record: Write a new record, refusing to overwrite
    - rewrite_record: Transform a record in place under an exclusive lock

Dependencies:
    - portalocker: Cross-platform file locking

Used By:
    - storage.repository.JsonProjectRepository
"""

from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import IO, Any, Callable, Dict, Iterator

import portalocker

logger = logging.getLogger(__name__)

Record = Dict[str, Any]


@contextmanager
def file_lock(handle: IO, *, shared: bool = False) -> Iterator[IO]:
    """
    Hold a portalocker lock on an open file.

    Args:
        handle: Open file object
        shared: LOCK_SH when True (readers), LOCK_EX otherwise

    Example:
        >>> with open(path, "r", encoding="utf-8") as f, file_lock(f, shared=True):
        ...     data = f.read()
    """
    portalocker.lock(handle, portalocker.LOCK_SH if shared else portalocker.LOCK_EX)
    try:
        yield handle
    finally:
        portalocker.unlock(handle)


def _dump(record: Record, handle: IO) -> None:
    json.dump(record, handle, indent=2, ensure_ascii=False)
    handle.flush()


def read_record(path: Path) -> Record:
    """
    Read a record; writers are excluded while the shared lock is held.

    Raises:
        FileNotFoundError: If the record does not exist
        ValueError: If the file is not valid JSON
    """
    with open(path, "r", encoding="utf-8") as f, file_lock(f, shared=True):
        return json.load(f)


def create_record(path: Path, record: Record) -> None:
    """
    Write a new record.

    Raises:
        FileExistsError: If a record already exists at path
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "x", encoding="utf-8") as f, file_lock(f):
        _dump(record, f)
    logger.debug(f"Created record {path.name}")


def rewrite_record(path: Path, transform: Callable[[Record], Record]) -> Record:
    """
    Replace a record with ``transform(current)`` while holding LOCK_EX.

    The file is only truncated after ``transform`` returns, so an
    exception from it leaves the record untouched.

    Args:
        path: Existing record
        transform: Pure function from the current record to the new one

    Returns:
        The record as written

    Raises:
        FileNotFoundError: If the record does not exist
    """
    with open(path, "r+", encoding="utf-8") as f, file_lock(f):
        current = json.load(f)
        updated = transform(current)
        f.seek(0)
        f.truncate()
        _dump(updated, f)
    return updated

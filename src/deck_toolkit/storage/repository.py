"""
Module: storage.repository

Purpose:
    Narrow persistence interface for the project aggregate. Every
    mutation runs as one read → pure change → write critical section per
    project, which makes the aspect-ratio lock check and the ratio write
    atomic against a concurrent image recording.

Key Classes:
    - ProjectRepository: Abstract interface
    - InMemoryProjectRepository: Process-local store (tests, embedding)
    - JsonProjectRepository: One JSON document per project, guarded by
      portalocker so several server processes can share a data directory

Dependencies:
    - portalocker (via storage.file_locking)
    - core.utils.serialization

Used By:
    - service.ProjectService: All mutations
    - export.controller: Snapshot reads
"""

from __future__ import annotations

import logging
import re
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Dict, Iterator, List, Optional

from deck_toolkit.core.errors import ConcurrentModificationError, DeckError, ProjectNotFoundError
from deck_toolkit.core.models import Project
from deck_toolkit.core.utils import deserialize_project, serialize_project

from .file_locking import create_record, read_record, rewrite_record

logger = logging.getLogger(__name__)

Mutator = Callable[[Project], Project]

_PROJECT_ID_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_-]{0,127}$")


class _ProjectLocks:
    """Registry of per-project re-entrant locks."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: Dict[str, threading.RLock] = {}

    @contextmanager
    def hold(self, project_id: str) -> Iterator[None]:
        with self._guard:
            lock = self._locks.setdefault(project_id, threading.RLock())
        with lock:
            yield

    def discard(self, project_id: str) -> None:
        with self._guard:
            self._locks.pop(project_id, None)


class ProjectRepository(ABC):
    """
    Abstract project store.

    Implementations must make ``update`` atomic per project: the mutator
    sees the latest committed state and no other update for the same
    project can commit in between.
    """

    def __init__(self) -> None:
        self._locks = _ProjectLocks()

    @abstractmethod
    def get(self, project_id: str) -> Project:
        """
        Load a project.

        Raises:
            ProjectNotFoundError: If the project does not exist
        """

    @abstractmethod
    def add(self, project: Project) -> Project:
        """
        Store a new project.

        Returns:
            The stored project (version 1)

        Raises:
            ValueError: If a project with the same id exists
        """

    @abstractmethod
    def update(
        self,
        project_id: str,
        mutator: Mutator,
        *,
        expected_version: Optional[int] = None,
    ) -> Project:
        """
        Apply a pure change to a project atomically.

        Args:
            project_id: Project to change
            mutator: Function from current project to updated project;
                any exception it raises aborts the update with no write
            expected_version: Optional optimistic-concurrency check

        Returns:
            The stored project after the change

        Raises:
            ProjectNotFoundError: If the project does not exist
            ConcurrentModificationError: If expected_version is stale
        """

    @abstractmethod
    def delete(self, project_id: str) -> None:
        """
        Remove a project and its pages.

        Raises:
            ProjectNotFoundError: If the project does not exist
        """

    @abstractmethod
    def list_projects(self) -> List[Project]:
        """All projects, newest first."""

    def _apply(
        self,
        current: Project,
        mutator: Mutator,
        expected_version: Optional[int],
    ) -> Project:
        if expected_version is not None and expected_version != current.version:
            raise ConcurrentModificationError(current.id, expected_version, current.version)
        updated = mutator(current)
        if updated is current:
            return current
        if updated.id != current.id:
            raise ValueError(f"mutator changed project id {current.id} -> {updated.id}")
        return updated.with_version(current.version + 1)


class InMemoryProjectRepository(ProjectRepository):
    """
    Process-local repository.

    Projects are frozen, so storing the instances directly is safe.
    """

    def __init__(self) -> None:
        super().__init__()
        self._projects: Dict[str, Project] = {}

    def get(self, project_id: str) -> Project:
        try:
            return self._projects[project_id]
        except KeyError:
            raise ProjectNotFoundError(project_id) from None

    def add(self, project: Project) -> Project:
        with self._locks.hold(project.id):
            if project.id in self._projects:
                raise ValueError(f"Project already exists: {project.id}")
            stored = project.with_version(1)
            self._projects[project.id] = stored
            return stored

    def update(
        self,
        project_id: str,
        mutator: Mutator,
        *,
        expected_version: Optional[int] = None,
    ) -> Project:
        with self._locks.hold(project_id):
            current = self.get(project_id)
            updated = self._apply(current, mutator, expected_version)
            self._projects[project_id] = updated
            return updated

    def delete(self, project_id: str) -> None:
        with self._locks.hold(project_id):
            if self._projects.pop(project_id, None) is None:
                raise ProjectNotFoundError(project_id)
        self._locks.discard(project_id)

    def list_projects(self) -> List[Project]:
        return sorted(self._projects.values(), key=lambda p: p.created_at, reverse=True)


class JsonProjectRepository(ProjectRepository):
    """
    File-backed repository: ``<root>/<project_id>.json`` per project.

    Example:
        >>> repo = JsonProjectRepository(Path("data/projects"))
        >>> stored = repo.add(Project.create("Demo", "4:3"))
        >>> repo.get(stored.id).image_aspect_ratio.value
        '4:3'
    """

    def __init__(self, root: Path) -> None:
        super().__init__()
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    def _path(self, project_id: str) -> Path:
        if not isinstance(project_id, str) or not _PROJECT_ID_RE.match(project_id):
            raise ProjectNotFoundError(str(project_id))
        return self.root / f"{project_id}.json"

    def get(self, project_id: str) -> Project:
        path = self._path(project_id)
        try:
            data = read_record(path)
        except FileNotFoundError:
            raise ProjectNotFoundError(project_id) from None
        return deserialize_project(data)

    def add(self, project: Project) -> Project:
        path = self._path(project.id)
        stored = project.with_version(1)
        with self._locks.hold(project.id):
            try:
                create_record(path, serialize_project(stored))
            except FileExistsError:
                raise ValueError(f"Project already exists: {project.id}") from None
        logger.debug(f"Stored new project {project.id} at {path}")
        return stored

    def update(
        self,
        project_id: str,
        mutator: Mutator,
        *,
        expected_version: Optional[int] = None,
    ) -> Project:
        path = self._path(project_id)

        def modifier(data: dict) -> dict:
            current = deserialize_project(data)
            return serialize_project(self._apply(current, mutator, expected_version))

        with self._locks.hold(project_id):
            try:
                written = rewrite_record(path, modifier)
            except FileNotFoundError:
                raise ProjectNotFoundError(project_id) from None
        return deserialize_project(written)

    def delete(self, project_id: str) -> None:
        path = self._path(project_id)
        with self._locks.hold(project_id):
            try:
                path.unlink()
            except FileNotFoundError:
                raise ProjectNotFoundError(project_id) from None
        self._locks.discard(project_id)
        logger.debug(f"Deleted project record {path}")

    def list_projects(self) -> List[Project]:
        projects = []
        for path in sorted(self.root.glob("*.json")):
            try:
                projects.append(deserialize_project(read_record(path)))
            except (ValueError, TypeError, KeyError, AttributeError, OSError, DeckError) as e:
                logger.warning(f"Skipping unreadable project record {path.name}: {e}")
        return sorted(projects, key=lambda p: p.created_at, reverse=True)

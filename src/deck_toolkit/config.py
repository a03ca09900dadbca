"""
Module: config

Purpose:
    Application configuration for the HTTP server: where project records
    and stored files live, the public base URL used in download links,
    and export settings.

Key Classes:
    - AppConfig: Immutable server configuration

Dependencies:
    - os (std): Environment variables

Used By:
    - api.app: create_app()
    - run_server.py: Launcher
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from deck_toolkit.export.config import ExportConfig

ENV_DATA_DIR = "DECK_DATA_DIR"
ENV_UPLOADS_DIR = "DECK_UPLOADS_DIR"
ENV_PUBLIC_BASE_URL = "DECK_PUBLIC_BASE_URL"
ENV_LOG_LEVEL = "DECK_LOG_LEVEL"

DEFAULT_DATA_DIR = Path("data")
DEFAULT_LOG_LEVEL = "INFO"


@dataclass(frozen=True)
class AppConfig:
    """
    Server configuration (immutable).

    Attributes:
        data_dir: Root for project records (``<data_dir>/projects``)
        uploads_dir: Root for stored files; defaults to ``<data_dir>/uploads``
        public_base_url: Prefix for absolute download URLs; None uses the
            request host
        log_level: Level name for the package logger
        export: Export settings

    Example:
        >>> config = AppConfig(data_dir=Path("/tmp/deck"))
        >>> config.projects_dir
        PosixPath('/tmp/deck/projects')
    """

    data_dir: Path = DEFAULT_DATA_DIR
    uploads_dir: Optional[Path] = None
    public_base_url: Optional[str] = None
    log_level: str = DEFAULT_LOG_LEVEL
    export: ExportConfig = field(default_factory=ExportConfig)

    def __post_init__(self) -> None:
        """Normalize paths and validate on construction."""
        object.__setattr__(self, "data_dir", Path(self.data_dir))
        if self.uploads_dir is None:
            object.__setattr__(self, "uploads_dir", self.data_dir / "uploads")
        else:
            object.__setattr__(self, "uploads_dir", Path(self.uploads_dir))

        if self.public_base_url is not None:
            url = self.public_base_url.strip().rstrip("/")
            if url and not url.startswith(("http://", "https://")):
                raise ValueError(f"public_base_url must be http(s): {self.public_base_url!r}")
            object.__setattr__(self, "public_base_url", url or None)

        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(f"Unknown log level: {self.log_level!r}")

    @property
    def projects_dir(self) -> Path:
        return self.data_dir / "projects"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> AppConfig:
        """
        Build configuration from environment variables.

        Reads DECK_DATA_DIR, DECK_UPLOADS_DIR, DECK_PUBLIC_BASE_URL and
        DECK_LOG_LEVEL; unset or empty variables fall back to defaults.
        """
        env = os.environ if environ is None else environ

        def read(name: str) -> Optional[str]:
            value = env.get(name)
            return value.strip() if value and value.strip() else None

        data_dir = read(ENV_DATA_DIR)
        uploads_dir = read(ENV_UPLOADS_DIR)
        return cls(
            data_dir=Path(data_dir) if data_dir else DEFAULT_DATA_DIR,
            uploads_dir=Path(uploads_dir) if uploads_dir else None,
            public_base_url=read(ENV_PUBLIC_BASE_URL),
            log_level=read(ENV_LOG_LEVEL) or DEFAULT_LOG_LEVEL,
        )

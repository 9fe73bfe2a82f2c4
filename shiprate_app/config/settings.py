"""
Basic settings and logging configuration for the ShipRate backend.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path


@dataclass(slots=True)
class Settings:
    """Application-level settings."""

    project_root: Path
    data_dir: Path
    db_path: Path

    @classmethod
    def default(cls) -> "Settings":
        """Create default settings based on the current file location."""
        project_root = Path(__file__).resolve().parents[2]
        return cls.from_data_dir(project_root / "shiprate_app_data", project_root=project_root)

    @classmethod
    def from_data_dir(cls, data_dir: Path, project_root: Path | None = None) -> "Settings":
        """Settings rooted at an explicit data directory (CLI ``--data-dir``, tests)."""
        data_dir = Path(data_dir)
        data_dir.mkdir(parents=True, exist_ok=True)
        db_path = data_dir / "shiprate.db"
        if project_root is None:
            project_root = Path(__file__).resolve().parents[2]
        return cls(project_root=project_root, data_dir=data_dir, db_path=db_path)


def init_logging(settings: Settings, level: int = logging.INFO) -> None:
    """Configure basic logging to a log file in the data directory."""
    log_file = settings.data_dir / "shiprate.log"

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        handlers=[
            logging.FileHandler(log_file, encoding="utf-8"),
        ],
    )

    logging.getLogger(__name__).info("Logging initialized. DB at %s", settings.db_path)

"""Walk the ~/.claude/projects log store and prune session files by date."""

import logging
import os
import stat
from datetime import datetime, timezone
from pathlib import Path
from typing import NamedTuple

from .config import CLAUDE_DIR_ENV, CLAUDE_DIR_NAME, PROJECTS_DIR_NAME, SESSION_FILE_SUFFIX
from .dates import format_instant

logger = logging.getLogger(__name__)


class ProjectDir(NamedTuple):
    """An encoded project directory and the project path it stands for."""

    name: str
    project_path: str
    path: Path


class SessionFile(NamedTuple):
    """A session log file; its stem is the session id."""

    session_id: str
    path: Path


def get_claude_dir() -> Path:
    """Get the Claude configuration directory."""
    override = os.environ.get(CLAUDE_DIR_ENV)
    if override:
        return Path(override).expanduser()
    return Path.home() / CLAUDE_DIR_NAME


def get_projects_dir() -> Path:
    """Get the projects directory containing conversation history."""
    return get_claude_dir() / PROJECTS_DIR_NAME


def decode_project_path(dir_name: str) -> str:
    """Decode an escaped directory name (dashes become slashes, no leading slash)."""
    decoded = dir_name.replace("-", "/")
    if decoded.startswith("/"):
        decoded = decoded[1:]
    return decoded


def list_project_dirs() -> list[ProjectDir]:
    """List all project directories, sorted by directory name.

    A missing projects directory yields an empty list.
    """
    projects_dir = get_projects_dir()
    if not projects_dir.is_dir():
        return []

    try:
        children = sorted(projects_dir.iterdir())
    except OSError as e:
        logger.warning(f"Failed to list {projects_dir}: {e}")
        return []

    projects = []
    for entry in children:
        try:
            mode = entry.stat().st_mode
        except OSError as e:
            logger.warning(f"Failed to stat {entry}: {e}")
            continue
        if stat.S_ISDIR(mode):
            projects.append(ProjectDir(entry.name, decode_project_path(entry.name), entry))
    return projects


def list_session_files(project_dir: Path) -> list[SessionFile]:
    """List the session log files in one project directory."""
    try:
        files = sorted(project_dir.glob(f"*{SESSION_FILE_SUFFIX}"))
    except OSError as e:
        logger.warning(f"Failed to list {project_dir}: {e}")
        return []
    return [SessionFile(f.stem, f) for f in files if f.is_file()]


def _stat_time(seconds: float) -> str:
    return format_instant(datetime.fromtimestamp(seconds, tz=timezone.utc))


def last_modified(path: Path) -> str | None:
    """Modification time of a file as a UTC instant string, or None if unreadable."""
    try:
        return _stat_time(path.stat().st_mtime)
    except (OSError, OverflowError, ValueError) as e:
        logger.warning(f"Failed to stat {path}: {e}")
        return None


def should_skip_file(path: Path, start: str | None = None, end: str | None = None) -> bool:
    """
    Decide from file metadata alone whether a file can be left unread.

    The file's content was written no earlier than its creation time and no
    later than its modification time. It is skipped only when that span lies
    entirely outside [start, end]. Where the platform does not report a
    creation time the lower end of the span is unknown, so the end bound is
    never used to prune.

    Args:
        path: Session log file.
        start: Window start as a UTC instant string, or None.
        end: Window end as a UTC instant string, or None.

    Returns:
        True if the file cannot contain records inside the window.
    """
    if not start and not end:
        return False

    try:
        st = path.stat()
        newest = _stat_time(st.st_mtime)
        birthtime = getattr(st, "st_birthtime", None)
        oldest = min(_stat_time(birthtime), newest) if birthtime else None
    except (OSError, OverflowError, ValueError) as e:
        logger.warning(f"Failed to get file stats for {path}: {e}")
        return False

    if end and oldest is not None and oldest > end:
        logger.debug(f"Skipping {path}: created {oldest} after {end}")
        return True
    if start and newest < start:
        logger.debug(f"Skipping {path}: last modified {newest} before {start}")
        return True
    return False

"""Query engine over the conversation log store.

Every call re-walks ~/.claude/projects; nothing is cached between calls.
Timestamps are compared as ISO-8601 UTC strings throughout, so "newest
first" is a reverse string sort.
"""

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from datetime import tzinfo

from .config import (
    DEFAULT_HISTORY_LIMIT,
    DEFAULT_HISTORY_OFFSET,
    DEFAULT_MESSAGE_TYPES,
    DEFAULT_SEARCH_LIMIT,
    MESSAGE_TYPES,
)
from .dates import normalize_date, resolve_timezone
from .loader import (
    ProjectDir,
    SessionFile,
    last_modified,
    list_project_dirs,
    list_session_files,
    should_skip_file,
)
from .models import (
    ConversationEntry,
    ConversationHistory,
    Pagination,
    ProjectInfo,
    SessionInfo,
)
from .parser import parse_session_file

logger = logging.getLogger(__name__)

EPOCH = "1970-01-01T00:00:00.000Z"


def normalize_window(
    start_date: str | None, end_date: str | None, timezone: str | None = None
) -> tuple[str | None, str | None]:
    """Normalize optional date filters to inclusive UTC instant bounds."""
    start = normalize_date(start_date, False, timezone) if start_date else None
    end = normalize_date(end_date, True, timezone) if end_date else None
    return start, end


def _in_window(timestamp: str, start: str | None, end: str | None) -> bool:
    if start and timestamp < start:
        return False
    if end and timestamp > end:
        return False
    return True


def _newest_first(entries: Iterable[ConversationEntry]) -> list[ConversationEntry]:
    return sorted(entries, key=lambda e: e.timestamp, reverse=True)


def _iter_session_files(
    project_path: str | None = None, session_id: str | None = None
) -> Iterator[tuple[ProjectDir, SessionFile]]:
    """Enumerate (project, session file) pairs, optionally narrowed by path or id."""
    for project in list_project_dirs():
        if project_path and project.project_path != project_path:
            continue
        for session_file in list_session_files(project.path):
            if session_id and session_file.session_id != session_id:
                continue
            yield project, session_file


def load_entries(
    start: str | None = None,
    end: str | None = None,
    zone: tzinfo | None = None,
    project_path: str | None = None,
    session_id: str | None = None,
) -> list[ConversationEntry]:
    """
    Load entries from every session file that may overlap [start, end].

    Files are pruned on metadata first, then read with line-level date
    filtering. The result is unordered.
    """
    entries: list[ConversationEntry] = []
    for project, session_file in _iter_session_files(project_path, session_id):
        if should_skip_file(session_file.path, start, end):
            continue
        entries.extend(
            parse_session_file(session_file.path, project.project_path, start, end, zone)
        )
    return entries


def _resolve_message_types(message_types: Iterable[str] | None) -> tuple[str, ...]:
    if not message_types:
        return DEFAULT_MESSAGE_TYPES
    types = tuple(message_types)
    unknown = sorted(set(types) - set(MESSAGE_TYPES))
    if unknown:
        raise ValueError(
            f"Unknown message type(s): {', '.join(unknown)}. "
            f"Expected any of: {', '.join(MESSAGE_TYPES)}"
        )
    return types


def get_conversation_history(
    session_id: str | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
    limit: int = DEFAULT_HISTORY_LIMIT,
    offset: int = DEFAULT_HISTORY_OFFSET,
    message_types: Iterable[str] | None = None,
    timezone: str | None = None,
) -> ConversationHistory:
    """
    Get a page of conversation history, newest first.

    Args:
        session_id: Only entries from this session
        start_date: Inclusive start; bare date or ISO 8601 instant
        end_date: Inclusive end; bare date or ISO 8601 instant
        limit: Page size
        offset: Number of entries to skip
        message_types: Entry types to include (default: user only)
        timezone: IANA timezone for bare dates and display fields

    Returns:
        ConversationHistory with the page of entries and pagination info
        computed over the whole filtered set
    """
    if limit < 1:
        raise ValueError(f"limit must be at least 1, got {limit}")
    if offset < 0:
        raise ValueError(f"offset must not be negative, got {offset}")

    allowed_types = _resolve_message_types(message_types)
    start, end = normalize_window(start_date, end_date, timezone)

    entries = load_entries(start, end, resolve_timezone(timezone), session_id=session_id)
    if session_id:
        entries = [e for e in entries if e.session_id == session_id]
    entries = [e for e in entries if e.type in allowed_types]
    # The parser filters lines too; this pass keeps the bounds exact
    entries = [e for e in entries if _in_window(e.timestamp, start, end)]

    entries = _newest_first(entries)
    total_count = len(entries)

    return ConversationHistory(
        entries=entries[offset : offset + limit],
        pagination=Pagination(
            total_count=total_count,
            limit=limit,
            offset=offset,
            has_more=offset + limit < total_count,
        ),
    )


def search_conversations(
    query: str,
    limit: int = DEFAULT_SEARCH_LIMIT,
    project_path: str | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
    timezone: str | None = None,
) -> list[ConversationEntry]:
    """
    Search conversation content for a case-insensitive substring.

    Args:
        query: Text to look for
        limit: Maximum number of results
        project_path: Only entries from this decoded project path
        start_date: Inclusive start; bare date or ISO 8601 instant
        end_date: Inclusive end; bare date or ISO 8601 instant
        timezone: IANA timezone for bare dates and display fields

    Returns:
        Matching entries, newest first, at most ``limit`` of them
    """
    if not query:
        raise ValueError("Search query is required")
    if limit < 1:
        raise ValueError(f"limit must be at least 1, got {limit}")

    start, end = normalize_window(start_date, end_date, timezone)
    entries = load_entries(start, end, resolve_timezone(timezone), project_path=project_path)

    query_lower = query.lower()
    matched = [e for e in entries if query_lower in e.content.lower()]
    if project_path:
        matched = [e for e in matched if e.project_path == project_path]
    matched = [e for e in matched if _in_window(e.timestamp, start, end)]

    return _newest_first(matched)[:limit]


@dataclass
class _ProjectTally:
    session_ids: set[str] = field(default_factory=set)
    message_count: int = 0
    last_activity_time: str = EPOCH


def list_projects() -> list[ProjectInfo]:
    """
    List all projects with aggregate counts.

    Directories decoding to the same project path are merged. Projects are
    returned sorted by project path.
    """
    tallies: dict[str, _ProjectTally] = {}

    for project in list_project_dirs():
        tally = tallies.setdefault(project.project_path, _ProjectTally())
        for session_file in list_session_files(project.path):
            tally.session_ids.add(session_file.session_id)

            modified = last_modified(session_file.path)
            if modified and modified > tally.last_activity_time:
                tally.last_activity_time = modified

            tally.message_count += sum(
                1 for _ in parse_session_file(session_file.path, project.project_path)
            )

    return [
        ProjectInfo(
            project_path=project_path,
            session_count=len(tally.session_ids),
            message_count=tally.message_count,
            last_activity_time=tally.last_activity_time,
        )
        for project_path, tally in sorted(tallies.items())
    ]


def summarize_session(
    project: ProjectDir, session_file: SessionFile, zone: tzinfo | None = None
) -> SessionInfo | None:
    """
    Compute statistics for one session file in a single streaming pass.

    Returns None if the file has no usable entries.
    """
    start_time = end_time = None
    message_count = user_count = assistant_count = 0

    for entry in parse_session_file(session_file.path, project.project_path, zone=zone):
        message_count += 1
        if entry.type == "user":
            user_count += 1
        elif entry.type == "assistant":
            assistant_count += 1
        if start_time is None or entry.timestamp < start_time:
            start_time = entry.timestamp
        if end_time is None or entry.timestamp > end_time:
            end_time = entry.timestamp

    if message_count == 0:
        return None

    return SessionInfo(
        session_id=session_file.session_id,
        project_path=project.project_path,
        start_time=start_time,
        end_time=end_time,
        message_count=message_count,
        user_message_count=user_count,
        assistant_message_count=assistant_count,
    )


def list_sessions(
    project_path: str | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
    timezone: str | None = None,
) -> list[SessionInfo]:
    """
    List sessions, newest start first.

    A session is included when its [startTime, endTime] span overlaps the
    requested window at all, boundaries inclusive.

    Args:
        project_path: Only sessions of this decoded project path
        start_date: Inclusive start; bare date or ISO 8601 instant
        end_date: Inclusive end; bare date or ISO 8601 instant
        timezone: IANA timezone for bare dates
    """
    start, end = normalize_window(start_date, end_date, timezone)
    zone = resolve_timezone(timezone)

    sessions = []
    for project, session_file in _iter_session_files(project_path):
        info = summarize_session(project, session_file, zone)
        if info is None:
            continue
        if start and info.end_time < start:
            continue
        if end and info.start_time > end:
            continue
        sessions.append(info)

    sessions.sort(key=lambda s: s.start_time, reverse=True)
    return sessions

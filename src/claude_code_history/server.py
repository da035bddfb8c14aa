"""FastMCP server for Claude Code History."""

from typing import Literal

from mcp.server.fastmcp import FastMCP

from .config import DEFAULT_HISTORY_LIMIT, DEFAULT_HISTORY_OFFSET, DEFAULT_SEARCH_LIMIT
from .query import (
    get_conversation_history as _get_conversation_history,
    list_projects as _list_projects,
    list_sessions as _list_sessions,
    search_conversations as _search_conversations,
)

MessageType = Literal["user", "assistant", "system", "result"]

# Create the MCP server
mcp = FastMCP("claude-code-history")


# Tools are registered in the order they are meant to be used


@mcp.tool()
def list_projects() -> dict:
    """
    List all projects with Claude Code conversation history.

    Start here to explore available data.

    Returns:
        projects: one item per project with projectPath, sessionCount,
        messageCount and lastActivityTime
    """
    return {"projects": [p.to_api() for p in _list_projects()]}


@mcp.tool()
def list_sessions(
    projectPath: str | None = None,
    startDate: str | None = None,
    endDate: str | None = None,
    timezone: str | None = None,
) -> dict:
    """
    List conversation sessions for a project or date range.

    Use after list_projects to find specific sessions. A session is listed
    if any part of it falls inside the date range.

    Args:
        projectPath: Filter by specific project path (optional)
        startDate: Start date, YYYY-MM-DD or ISO 8601 (optional)
        endDate: End date, YYYY-MM-DD or ISO 8601 (optional)
        timezone: Timezone for date filtering, e.g. "Asia/Tokyo" or "UTC".
            Defaults to the system timezone.

    Returns:
        sessions: newest first, with sessionId, projectPath, startTime,
        endTime and message counts
    """
    sessions = _list_sessions(
        project_path=projectPath,
        start_date=startDate,
        end_date=endDate,
        timezone=timezone,
    )
    return {"sessions": [s.to_api() for s in sessions]}


@mcp.tool()
def get_conversation_history(
    sessionId: str | None = None,
    startDate: str | None = None,
    endDate: str | None = None,
    limit: int = DEFAULT_HISTORY_LIMIT,
    offset: int = DEFAULT_HISTORY_OFFSET,
    messageTypes: list[MessageType] | None = None,
    timezone: str | None = None,
) -> dict:
    """
    Get paginated conversation history, newest first.

    Use after exploring with list_projects/list_sessions for targeted data.

    Args:
        sessionId: Specific session ID to get history for (optional)
        startDate: Start date, YYYY-MM-DD or ISO 8601 (optional)
        endDate: End date, YYYY-MM-DD or ISO 8601 (optional)
        limit: Maximum number of entries to return (default: 20)
        offset: Number of entries to skip for pagination (default: 0)
        messageTypes: Message types to include. Defaults to ["user"] to reduce
            data volume; use ["user", "assistant"] to include Claude responses.
        timezone: Timezone for date filtering, e.g. "Asia/Tokyo" or "UTC".
            Defaults to the system timezone.

    Returns:
        entries and pagination (total_count, limit, offset, has_more)
    """
    history = _get_conversation_history(
        session_id=sessionId,
        start_date=startDate,
        end_date=endDate,
        limit=limit,
        offset=offset,
        message_types=messageTypes,
        timezone=timezone,
    )
    return history.to_api()


@mcp.tool()
def search_conversations(
    query: str,
    limit: int = DEFAULT_SEARCH_LIMIT,
    projectPath: str | None = None,
    startDate: str | None = None,
    endDate: str | None = None,
    timezone: str | None = None,
) -> dict:
    """
    Search through conversation history by content.

    Useful for finding specific topics across all conversations. Matching
    is a case-insensitive substring match.

    Args:
        query: Search query to find in conversation content
        limit: Maximum number of results to return (default: 30)
        projectPath: Only search this project path (optional)
        startDate: Start date, YYYY-MM-DD or ISO 8601 (optional)
        endDate: End date, YYYY-MM-DD or ISO 8601 (optional)
        timezone: Timezone for date filtering, e.g. "Asia/Tokyo" or "UTC".
            Defaults to the system timezone.

    Returns:
        query and results, newest first
    """
    results = _search_conversations(
        query,
        limit=limit,
        project_path=projectPath,
        start_date=startDate,
        end_date=endDate,
        timezone=timezone,
    )
    return {"query": query, "results": [e.to_api() for e in results]}


def main():
    """Run the MCP server."""
    mcp.run()


if __name__ == "__main__":
    main()

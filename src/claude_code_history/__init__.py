"""Claude Code History - Query Claude Code conversation logs."""

from .dates import normalize_date
from .models import (
    ConversationEntry,
    ConversationHistory,
    Pagination,
    ProjectInfo,
    SessionInfo,
    SkippedLine,
    SkipReason,
)
from .query import (
    get_conversation_history,
    list_projects,
    list_sessions,
    search_conversations,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "normalize_date",
    "get_conversation_history",
    "search_conversations",
    "list_projects",
    "list_sessions",
    "ConversationEntry",
    "ConversationHistory",
    "Pagination",
    "ProjectInfo",
    "SessionInfo",
    "SkippedLine",
    "SkipReason",
]

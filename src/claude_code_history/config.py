"""Centralized configuration constants for Claude Code History."""

# Storage layout
CLAUDE_DIR_ENV = "CLAUDE_HISTORY_DIR"
CLAUDE_DIR_NAME = ".claude"
PROJECTS_DIR_NAME = "projects"
SESSION_FILE_SUFFIX = ".jsonl"

# Message types
MESSAGE_TYPES = ("user", "assistant", "system", "result")
DEFAULT_MESSAGE_TYPES = ("user",)

# Query defaults
DEFAULT_HISTORY_LIMIT = 20
DEFAULT_HISTORY_OFFSET = 0
DEFAULT_SEARCH_LIMIT = 30

# Day boundaries used when a bare calendar date is given
START_OF_DAY = "00:00:00.000"
END_OF_DAY = "23:59:59.999"

# Display
DISPLAY_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"
DISPLAY_DATE_FORMAT = "%Y-%m-%d"

"""Pydantic data models for Claude Code History."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ApiModel(BaseModel):
    """Base for models returned to tool callers (camelCase on the wire)."""

    model_config = ConfigDict(populate_by_name=True)

    def to_api(self) -> dict:
        """Serialize with wire aliases, dropping unset optional fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class MessagePayload(BaseModel):
    """The ``message`` object embedded in a raw log line."""

    model_config = ConfigDict(extra="allow")

    role: str | None = None
    content: str | list[Any] | None = None
    model: str | None = None
    usage: dict[str, Any] | None = None


class RawMessage(BaseModel):
    """One JSON line of a session log file, as written by Claude Code."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    type: str
    timestamp: str
    session_id: str | None = Field(default=None, alias="sessionId")
    uuid: str = ""
    parent_uuid: str | None = Field(default=None, alias="parentUuid")
    message: MessagePayload | None = None
    request_id: str | None = Field(default=None, alias="requestId")

    # Present on "result" records only
    total_cost_usd: float | None = None
    num_turns: int | None = None
    duration_ms: int | None = None
    is_error: bool | None = None
    subtype: str | None = None


class EntryMetadata(ApiModel):
    """Model/usage details carried alongside an entry."""

    usage: dict[str, Any] | None = None
    model: str | None = None
    request_id: str | None = Field(default=None, alias="requestId")
    total_cost_usd: float | None = Field(default=None, alias="totalCostUsd")
    num_turns: int | None = Field(default=None, alias="numTurns")
    duration_ms: int | None = Field(default=None, alias="durationMs")
    is_error: bool | None = Field(default=None, alias="isError")
    error_type: str | None = Field(default=None, alias="errorType")


class ConversationEntry(ApiModel):
    """A normalized, displayable record derived from one raw log line."""

    session_id: str = Field(alias="sessionId")
    timestamp: str  # ISO-8601 UTC, compared as a string
    type: str
    content: str
    project_path: str = Field(alias="projectPath")
    uuid: str = ""
    formatted_time: str | None = Field(default=None, alias="formattedTime")
    local_date: str | None = Field(default=None, alias="localDate")
    metadata: EntryMetadata | None = None


class Pagination(BaseModel):
    """Paging window over a filtered result set."""

    total_count: int
    limit: int
    offset: int
    has_more: bool


class ConversationHistory(ApiModel):
    """Response from get_conversation_history."""

    entries: list[ConversationEntry]
    pagination: Pagination


class ProjectInfo(ApiModel):
    """Aggregate counts for one project directory."""

    project_path: str = Field(alias="projectPath")
    session_count: int = Field(default=0, alias="sessionCount")
    message_count: int = Field(default=0, alias="messageCount")
    last_activity_time: str = Field(alias="lastActivityTime")


class SessionInfo(ApiModel):
    """Per-session statistics computed from the session's entries."""

    session_id: str = Field(alias="sessionId")
    project_path: str = Field(alias="projectPath")
    start_time: str = Field(alias="startTime")
    end_time: str = Field(alias="endTime")
    message_count: int = Field(default=0, alias="messageCount")
    user_message_count: int = Field(default=0, alias="userMessageCount")
    assistant_message_count: int = Field(default=0, alias="assistantMessageCount")


class SkipReason(str, Enum):
    """Why a unit of log data was dropped during a scan."""

    INVALID_JSON = "invalid_json"
    INVALID_RECORD = "invalid_record"
    UNREADABLE_FILE = "unreadable_file"


class SkippedLine(BaseModel):
    """A line (or whole file, with line_number 0) that could not be used."""

    path: str
    line_number: int
    reason: SkipReason
    detail: str = ""

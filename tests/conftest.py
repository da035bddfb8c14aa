"""Pytest fixtures for Claude Code History tests."""

import json
import os
from datetime import datetime
from unittest.mock import patch

import pytest


def set_mtime(path, timestamp):
    """Set a file's access and modification time to an ISO-8601 instant."""
    seconds = datetime.fromisoformat(timestamp.replace("Z", "+00:00")).timestamp()
    os.utime(path, (seconds, seconds))


def write_jsonl(path, records):
    """
    Write records (dicts, or raw strings for malformed lines) as JSONL.

    The file's mtime is set to the newest record timestamp, as if the
    session had just been appended to.
    """
    with open(path, "w") as f:
        for record in records:
            line = record if isinstance(record, str) else json.dumps(record)
            f.write(line + "\n")

    timestamps = [
        r["timestamp"] for r in records if isinstance(r, dict) and isinstance(r.get("timestamp"), str)
    ]
    if timestamps:
        set_mtime(path, max(timestamps))


def make_message(
    msg_type,
    timestamp,
    content,
    uuid,
    session_id="session-001",
    message_extra=None,
    **extra,
):
    """Build a raw log record the way Claude Code writes it."""
    record = {
        "parentUuid": None,
        "isSidechain": False,
        "userType": "external",
        "cwd": "/Users/test/myproject",
        "sessionId": session_id,
        "version": "1.0.33",
        "type": msg_type,
        "message": {"role": msg_type, "content": content, **(message_extra or {})},
        "uuid": uuid,
        "timestamp": timestamp,
    }
    record.update(extra)
    return record


@pytest.fixture
def temp_claude_dir(tmp_path):
    """Create a temporary ~/.claude directory structure."""
    claude_dir = tmp_path / ".claude"
    projects_dir = claude_dir / "projects"
    projects_dir.mkdir(parents=True)
    return claude_dir


@pytest.fixture
def sample_project(temp_claude_dir):
    """Create a sample project with two sessions."""
    project_dir = temp_claude_dir / "projects" / "-Users-test-myproject"
    project_dir.mkdir(parents=True)

    write_jsonl(
        project_dir / "session-001.jsonl",
        [
            make_message(
                "user",
                "2025-06-30T10:00:00.000Z",
                "Fix the bug in the authentication module",
                "msg-001",
            ),
            make_message(
                "assistant",
                "2025-06-30T10:00:05.000Z",
                [
                    {
                        "type": "text",
                        "text": "I'll help you fix the authentication bug.",
                    }
                ],
                "msg-002",
                message_extra={
                    "model": "claude-sonnet-4-20250514",
                    "usage": {"input_tokens": 10, "output_tokens": 20},
                },
                requestId="req-002",
            ),
            make_message(
                "user",
                "2025-06-30T10:01:00.000Z",
                "The login function returns None",
                "msg-003",
            ),
            make_message(
                "assistant",
                "2025-06-30T10:01:10.000Z",
                [
                    {"type": "text", "text": "Let me read the file."},
                    {"type": "tool_use", "id": "tool-1", "name": "Read", "input": {}},
                ],
                "msg-004",
            ),
        ],
    )
    write_jsonl(
        project_dir / "session-002.jsonl",
        [
            make_message(
                "user",
                "2025-07-02T09:00:00.000Z",
                "Add JWT authentication to the API",
                "msg-005",
                session_id="session-002",
            ),
            make_message(
                "assistant",
                "2025-07-02T09:00:10.000Z",
                [{"type": "text", "text": "I'll implement JWT authentication."}],
                "msg-006",
                session_id="session-002",
            ),
        ],
    )

    return project_dir


@pytest.fixture
def second_project(temp_claude_dir):
    """Create a second project with one session."""
    project_dir = temp_claude_dir / "projects" / "-Users-test-other"
    project_dir.mkdir(parents=True)

    write_jsonl(
        project_dir / "session-101.jsonl",
        [
            make_message(
                "user",
                "2025-07-01T12:00:00.000Z",
                "Refactor the BUG tracker",
                "msg-101",
                session_id="session-101",
            ),
        ],
    )
    return project_dir


@pytest.fixture
def mock_claude_dir(temp_claude_dir, sample_project, second_project):
    """Patch the claude directory to use the populated temp directory."""
    with patch("claude_code_history.loader.get_claude_dir", return_value=temp_claude_dir):
        yield temp_claude_dir


@pytest.fixture
def empty_claude_dir(tmp_path):
    """Patch the claude directory to one that has no projects directory."""
    claude_dir = tmp_path / "fresh" / ".claude"
    with patch("claude_code_history.loader.get_claude_dir", return_value=claude_dir):
        yield claude_dir

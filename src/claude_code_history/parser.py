"""Stream session log files into normalized conversation entries."""

import json
import logging
from collections.abc import Iterator
from datetime import tzinfo
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from .dates import format_local
from .models import (
    ConversationEntry,
    EntryMetadata,
    RawMessage,
    SkippedLine,
    SkipReason,
)

logger = logging.getLogger(__name__)


def _flatten_block(block: Any) -> str:
    if isinstance(block, str):
        return block
    if isinstance(block, dict) and block.get("type", "text") == "text":
        text = block.get("text")
        if isinstance(text, str):
            return text
    # Non-text blocks (tool_use, tool_result, images, ...) are kept verbatim
    return json.dumps(block, separators=(",", ":"), ensure_ascii=False)


def flatten_content(content: str | list[Any] | None) -> str:
    """
    Flatten message content into a single string.

    String content is returned unchanged. Block lists are joined with a
    single space: text blocks contribute their text, plain strings
    themselves, anything else its compact JSON form.
    """
    if content is None:
        return ""
    if isinstance(content, str):
        return content
    return " ".join(_flatten_block(block) for block in content)


def _build_metadata(raw: RawMessage) -> EntryMetadata:
    message = raw.message
    return EntryMetadata(
        usage=message.usage if message else None,
        model=message.model if message else None,
        request_id=raw.request_id,
        total_cost_usd=raw.total_cost_usd,
        num_turns=raw.num_turns,
        duration_ms=raw.duration_ms,
        is_error=raw.is_error,
        error_type=raw.subtype if raw.type == "result" else None,
    )


def to_entry(
    raw: RawMessage, session_id: str, project_path: str, zone: tzinfo | None = None
) -> ConversationEntry:
    """Convert a raw log record into a ConversationEntry."""
    formatted_time, local_date = format_local(raw.timestamp, zone)
    return ConversationEntry(
        session_id=session_id,
        timestamp=raw.timestamp,
        type=raw.type,
        content=flatten_content(raw.message.content if raw.message else None),
        project_path=project_path,
        uuid=raw.uuid,
        formatted_time=formatted_time,
        local_date=local_date,
        metadata=_build_metadata(raw),
    )


def scan_session_file(
    path: Path,
    project_path: str,
    start: str | None = None,
    end: str | None = None,
    zone: tzinfo | None = None,
) -> Iterator[ConversationEntry | SkippedLine]:
    """
    Read a session file line by line.

    Each call reopens the file. Lines outside [start, end] are dropped
    before their content is flattened. Lines that cannot be used produce a
    SkippedLine instead of an entry, so one bad line never ends the scan.

    Args:
        path: Session log file; its stem is the session id.
        project_path: Decoded project path for the enclosing directory.
        start: Inclusive lower bound as a UTC instant string, or None.
        end: Inclusive upper bound as a UTC instant string, or None.
        zone: Timezone for the display fields; None means host local time.

    Yields:
        ConversationEntry for each retained record, SkippedLine for each
        malformed line (or once, with line_number 0, if the file can't be read).
    """
    session_id = path.stem
    line_num = 0

    try:
        with open(path, encoding="utf-8", errors="replace") as f:
            for line_num, line in enumerate(f, 1):
                line = line.strip()
                if not line:
                    continue
                try:
                    data = json.loads(line)
                except json.JSONDecodeError as e:
                    yield SkippedLine(
                        path=str(path),
                        line_number=line_num,
                        reason=SkipReason.INVALID_JSON,
                        detail=str(e),
                    )
                    continue

                timestamp = data.get("timestamp") if isinstance(data, dict) else None
                if not isinstance(timestamp, str):
                    yield SkippedLine(
                        path=str(path),
                        line_number=line_num,
                        reason=SkipReason.INVALID_RECORD,
                        detail="missing timestamp",
                    )
                    continue

                # Cheap rejection before validating and flattening content
                if start and timestamp < start:
                    continue
                if end and timestamp > end:
                    continue

                try:
                    raw = RawMessage.model_validate(data)
                except ValidationError as e:
                    yield SkippedLine(
                        path=str(path),
                        line_number=line_num,
                        reason=SkipReason.INVALID_RECORD,
                        detail=str(e),
                    )
                    continue

                yield to_entry(raw, session_id, project_path, zone)
    except OSError as e:
        yield SkippedLine(
            path=str(path),
            line_number=line_num,
            reason=SkipReason.UNREADABLE_FILE,
            detail=str(e),
        )


def parse_session_file(
    path: Path,
    project_path: str,
    start: str | None = None,
    end: str | None = None,
    zone: tzinfo | None = None,
) -> Iterator[ConversationEntry]:
    """Like scan_session_file, but yields entries only and logs what was skipped."""
    for item in scan_session_file(path, project_path, start, end, zone):
        if isinstance(item, SkippedLine):
            if item.reason is SkipReason.UNREADABLE_FILE:
                logger.warning(f"Error reading file {item.path}: {item.detail}")
            else:
                logger.debug(
                    f"Skipping {item.path}:{item.line_number} ({item.reason.value}): {item.detail}"
                )
            continue
        yield item

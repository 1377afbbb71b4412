"""Validation of session rows before they reach the calendar engine.

The engine assumes `end_time > start_time` and parseable timestamps. Rows
that break either rule are rejected here, with a reason, instead of being
rendered as degenerate blocks.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from loguru import logger
from pydantic import ValidationError

from studio_calendar.calendar.types import Session


@dataclass(frozen=True)
class RejectedSession:
    session_id: str | None
    reason: str


@dataclass
class IngestResult:
    accepted: list[Session] = field(default_factory=list)
    rejected: list[RejectedSession] = field(default_factory=list)


def _row_id(row: Mapping[str, Any] | Session) -> str | None:
    if isinstance(row, Session):
        return row.id
    value = row.get("id")
    return str(value) if value is not None else None


def ingest_sessions(rows: Iterable[Mapping[str, Any] | Session]) -> IngestResult:
    """Validate raw session rows.

    Args:
        rows: Mappings with Session fields (timestamps as datetimes or ISO
            strings) or already-built Session objects

    Returns:
        IngestResult with accepted sessions in input order and rejections
    """
    result = IngestResult()
    for row in rows:
        try:
            session = row if isinstance(row, Session) else Session.model_validate(row)
        except ValidationError as e:
            fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
            result.rejected.append(RejectedSession(session_id=_row_id(row), reason=f"invalid fields: {fields}"))
            continue

        if session.end_time <= session.start_time:
            result.rejected.append(RejectedSession(session_id=session.id, reason="end_time must be after start_time"))
            continue

        result.accepted.append(session)

    for rejected in result.rejected:
        logger.warning(f"[INGEST] Rejected session id={rejected.session_id}: {rejected.reason}")
    logger.debug(f"[INGEST] Accepted {len(result.accepted)} sessions, rejected {len(result.rejected)}")
    return result

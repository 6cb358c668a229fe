from __future__ import annotations

import dataclasses
import enum
import uuid
from datetime import date, datetime
from typing import TYPE_CHECKING, Any

from sqlmodel import SQLModel

from leave_tracker.models.audit import AuditLog

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from leave_tracker.models.enums import AuditAction, AuditEntityType

# Actor recorded for unattended runs (worker, batch rebuilds).
SYSTEM_ACTOR_ID = uuid.UUID(int=0)


def _json_safe(value: Any) -> Any:
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, enum.Enum):
        return value.value
    return value


def to_audit_dict(obj: SQLModel | Any) -> dict[str, Any]:
    """Serialize a SQLModel instance or dataclass to a JSON-safe dict for audit logging."""
    raw = obj.model_dump() if isinstance(obj, SQLModel) else dataclasses.asdict(obj)
    return {key: _json_safe(value) for key, value in raw.items()}


async def write_audit_log(
    session: AsyncSession,
    *,
    actor_id: uuid.UUID,
    entity_type: AuditEntityType,
    entity_key: str,
    action: AuditAction,
    before_json: dict[str, Any] | None = None,
    after_json: dict[str, Any] | None = None,
) -> AuditLog:
    """Add an immutable audit log entry to the caller's transaction."""
    entry = AuditLog(
        actor_id=actor_id,
        entity_type=entity_type.value,
        entity_key=entity_key,
        action=action.value,
        before_json=before_json,
        after_json=after_json,
    )
    session.add(entry)
    return entry

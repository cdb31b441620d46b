"""Audit recorder: appends admin mutations to the audit trail and reads it back."""

from __future__ import annotations

import json
import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from civictrack.models import AuditAction, AuditLog, User
from civictrack.schemas.admin import AuditEntryOut

logger = logging.getLogger(__name__)

DEFAULT_LIST_LIMIT = 200


def serialize_details(details: Any) -> str | None:
    """
    Serialize details to a JSON string.

    Returns None for empty details or when serialization fails (circular or
    unserializable values); the failure is logged, never raised.
    """
    if details is None:
        return None
    try:
        return json.dumps(details, sort_keys=True)
    except (TypeError, ValueError, RecursionError) as e:
        logger.warning("Audit details could not be serialized: %s", e)
        return None


def record_audit(
    db: Session,
    actor_id: int,
    action: AuditAction | str,
    entity_type: str,
    entity_id: int | None = None,
    details: Any = None,
) -> AuditLog:
    """
    Append one audit entry to the caller's session.

    The entry is committed together with the mutation it describes, so either
    both are stored or neither is.
    """
    entry = AuditLog(
        admin_user_id=actor_id,
        action=AuditAction(action).value,
        entity_type=entity_type,
        entity_id=entity_id,
        details=serialize_details(details),
    )
    db.add(entry)
    db.flush()
    logger.info(
        "Audit: actor=%s action=%s entity=%s/%s",
        actor_id,
        entry.action,
        entity_type,
        entity_id,
    )
    return entry


def list_audit_entries(
    db: Session,
    limit: int = DEFAULT_LIST_LIMIT,
    *,
    actor_id: int | None = None,
    action: AuditAction | str | None = None,
    entity_type: str | None = None,
    max_limit: int = DEFAULT_LIST_LIMIT,
) -> list[AuditEntryOut]:
    """Return audit entries newest first, each joined with the actor's email."""
    limit = max(1, min(limit, max_limit))
    stmt = (
        select(AuditLog, User.email)
        .outerjoin(User, User.id == AuditLog.admin_user_id)
        .order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
        .limit(limit)
    )
    if actor_id is not None:
        stmt = stmt.where(AuditLog.admin_user_id == actor_id)
    if action is not None:
        stmt = stmt.where(AuditLog.action == AuditAction(action).value)
    if entity_type is not None:
        stmt = stmt.where(AuditLog.entity_type == entity_type)
    return [
        AuditEntryOut(
            id=entry.id,
            admin_user_id=entry.admin_user_id,
            admin_email=email,
            action=entry.action,
            entity_type=entry.entity_type,
            entity_id=entry.entity_id,
            details=entry.details,
            created_at=entry.created_at,
        )
        for entry, email in db.execute(stmt).all()
    ]

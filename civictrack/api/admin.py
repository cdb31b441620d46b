"""Admin-only CRUD endpoints. Every mutation is committed together with its audit entry."""

import json
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from civictrack.api.deps import require_admin
from civictrack.core.config import settings
from civictrack.core.database import get_db
from civictrack.core.errors import Conflict, NotFound, ValidationError
from civictrack.models import AuditAction, Category, Issue, Setting, User
from civictrack.models.issue import STATUS_RESOLVED
from civictrack.schemas.admin import (
    AuditEntryOut,
    CategoryCreate,
    CategoryOut,
    CategorySummary,
    CategoryUpdate,
    IssueUpdate,
    OkResponse,
    StatsResponse,
    UserListItem,
    UserUpdate,
)
from civictrack.schemas.auth import CurrentIdentity
from civictrack.schemas.issues import IssueOut
from civictrack.services import users
from civictrack.services.audit import list_audit_entries, record_audit

router = APIRouter(dependencies=[Depends(require_admin)])

AdminIdentity = Annotated[CurrentIdentity, Depends(require_admin)]
DbSession = Annotated[Session, Depends(get_db)]

ADMIN_ISSUE_LIST_LIMIT = 500
RECENT_ACTIVITY_LIMIT = 20


def _count(db: Session, model: Any, *criteria: Any) -> int:
    return db.execute(select(func.count()).select_from(model).where(*criteria)).scalar_one()


def _check_category(db: Session, category_id: int | None) -> None:
    if category_id is not None and db.get(Category, category_id) is None:
        raise ValidationError("Unknown category_id")


@router.get("/stats", response_model=StatsResponse)
def get_stats(db: DbSession) -> StatsResponse:
    """Dashboard counts, categories and the latest audit activity."""
    categories = db.execute(select(Category).order_by(Category.name)).scalars()
    return StatsResponse(
        total_users=_count(db, User),
        total_issues=_count(db, Issue),
        resolved_issues=_count(db, Issue, Issue.status == STATUS_RESOLVED),
        pending_issues=_count(db, Issue, Issue.status != STATUS_RESOLVED),
        categories=[CategorySummary.model_validate(c) for c in categories],
        recent_activity=list_audit_entries(db, RECENT_ACTIVITY_LIMIT),
    )


# Users


@router.get("/users", response_model=list[UserListItem])
def list_users(db: DbSession) -> list[UserListItem]:
    rows = db.execute(select(User).order_by(User.created_at.desc(), User.id.desc())).scalars()
    return [UserListItem.model_validate(u) for u in rows]


@router.patch("/users/{user_id}", response_model=OkResponse)
def update_user(
    user_id: int,
    body: UserUpdate,
    admin: AdminIdentity,
    db: DbSession,
) -> OkResponse:
    """Change name, role or active flag. The new role applies at the user's next login."""
    user = users.find_by_id(db, user_id)
    if user is None:
        raise NotFound("User not found")
    changes = body.model_dump(exclude_unset=True)
    users.update_mutable_fields(db, user, role=body.role, name=body.name, active=body.active)
    record_audit(db, admin.id, AuditAction.UPDATE_USER, "user", user_id, changes)
    db.commit()
    return OkResponse()


@router.delete("/users/{user_id}", response_model=OkResponse)
def delete_user(user_id: int, admin: AdminIdentity, db: DbSession) -> OkResponse:
    """Delete a user. 404 if absent, 409 for the caller's own account or a user with audit history."""
    user = users.find_by_id(db, user_id)
    if user is None:
        raise NotFound("User not found")
    if user_id == admin.id:
        raise Conflict("Cannot delete your own account")
    users.delete_user(db, user)
    record_audit(db, admin.id, AuditAction.DELETE_USER, "user", user_id)
    db.commit()
    return OkResponse()


# Issues


@router.get("/issues", response_model=list[IssueOut])
def list_issues(
    db: DbSession,
    status: str | None = None,
    category_id: int | None = None,
    q: str | None = None,
) -> list[IssueOut]:
    """Filter by status, category and free text over title, description and city."""
    stmt = select(Issue)
    if status:
        stmt = stmt.where(Issue.status == status)
    if category_id is not None:
        stmt = stmt.where(Issue.category_id == category_id)
    if q:
        pattern = f"%{q}%"
        stmt = stmt.where(
            or_(
                Issue.title.like(pattern),
                Issue.description.like(pattern),
                Issue.city.like(pattern),
            )
        )
    stmt = stmt.order_by(Issue.reported_date.desc(), Issue.id.desc()).limit(ADMIN_ISSUE_LIST_LIMIT)
    return [IssueOut.model_validate(i) for i in db.execute(stmt).scalars()]


@router.patch("/issues/{issue_id}", response_model=OkResponse)
def update_issue(
    issue_id: int,
    body: IssueUpdate,
    admin: AdminIdentity,
    db: DbSession,
) -> OkResponse:
    issue = db.get(Issue, issue_id)
    if issue is None:
        raise NotFound("Issue not found")
    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    _check_category(db, changes.get("category_id"))
    for field, value in changes.items():
        setattr(issue, field, value)
    record_audit(db, admin.id, AuditAction.UPDATE_ISSUE, "issue", issue_id, changes)
    db.commit()
    return OkResponse()


@router.delete("/issues/{issue_id}", response_model=OkResponse)
def delete_issue(issue_id: int, admin: AdminIdentity, db: DbSession) -> OkResponse:
    issue = db.get(Issue, issue_id)
    if issue is None:
        raise NotFound("Issue not found")
    db.delete(issue)
    record_audit(db, admin.id, AuditAction.DELETE_ISSUE, "issue", issue_id)
    db.commit()
    return OkResponse()


# Categories


def _category_name_taken(db: Session, name: str, exclude_id: int | None = None) -> bool:
    stmt = select(Category.id).where(Category.name == name)
    if exclude_id is not None:
        stmt = stmt.where(Category.id != exclude_id)
    return db.execute(stmt).first() is not None


def _flush_category(db: Session) -> None:
    """Flush pending category changes, mapping a lost race on the unique name to Conflict."""
    try:
        db.flush()
    except IntegrityError as e:
        db.rollback()
        raise Conflict("Category already exists") from e


@router.get("/categories", response_model=list[CategoryOut])
def list_categories(db: DbSession) -> list[CategoryOut]:
    rows = db.execute(select(Category).order_by(Category.name)).scalars()
    return [CategoryOut.model_validate(c) for c in rows]


@router.post("/categories", response_model=CategoryOut)
def create_category(body: CategoryCreate, admin: AdminIdentity, db: DbSession) -> CategoryOut:
    if _category_name_taken(db, body.name):
        raise Conflict("Category already exists")
    category = Category(name=body.name, description=body.description)
    db.add(category)
    _flush_category(db)
    record_audit(db, admin.id, AuditAction.CREATE_CATEGORY, "category", category.id, {"name": body.name})
    db.commit()
    db.refresh(category)
    return CategoryOut.model_validate(category)


@router.patch("/categories/{category_id}", response_model=OkResponse)
def update_category(
    category_id: int,
    body: CategoryUpdate,
    admin: AdminIdentity,
    db: DbSession,
) -> OkResponse:
    category = db.get(Category, category_id)
    if category is None:
        raise NotFound("Category not found")
    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    if "name" in changes and _category_name_taken(db, changes["name"], exclude_id=category_id):
        raise Conflict("Category already exists")
    for field, value in changes.items():
        setattr(category, field, value)
    _flush_category(db)
    record_audit(db, admin.id, AuditAction.UPDATE_CATEGORY, "category", category_id, changes)
    db.commit()
    return OkResponse()


@router.delete("/categories/{category_id}", response_model=OkResponse)
def delete_category(category_id: int, admin: AdminIdentity, db: DbSession) -> OkResponse:
    """Delete a category; issues in it keep a null category."""
    category = db.get(Category, category_id)
    if category is None:
        raise NotFound("Category not found")
    db.delete(category)
    record_audit(db, admin.id, AuditAction.DELETE_CATEGORY, "category", category_id)
    db.commit()
    return OkResponse()


# Settings


@router.get("/settings", response_model=dict[str, str | None])
def get_settings_map(db: DbSession) -> dict[str, str | None]:
    return {row.key: row.value for row in db.execute(select(Setting)).scalars()}


@router.put("/settings", response_model=OkResponse)
def put_settings(
    admin: AdminIdentity,
    db: DbSession,
    body: Annotated[dict[str, Any], Body()],
) -> OkResponse:
    """Upsert keys; lists, objects and booleans are stored as JSON, everything else as text."""
    for key, value in body.items():
        if isinstance(value, (dict, list, bool)):
            stored = json.dumps(value)
        elif value is None:
            stored = None
        else:
            stored = str(value)
        setting = db.get(Setting, key)
        if setting is None:
            db.add(Setting(key=key, value=stored))
        else:
            setting.value = stored
    record_audit(db, admin.id, AuditAction.UPDATE_SETTINGS, "settings", None, body)
    db.commit()
    return OkResponse()


# Audit log (read-only)


@router.get("/audit-logs", response_model=list[AuditEntryOut])
def get_audit_logs(
    db: DbSession,
    limit: Annotated[int, Query(ge=1)] = 200,
    action: AuditAction | None = None,
    entity_type: str | None = None,
    admin_user_id: int | None = None,
) -> list[AuditEntryOut]:
    """Newest first, each entry with the acting admin's email."""
    return list_audit_entries(
        db,
        limit,
        actor_id=admin_user_id,
        action=action,
        entity_type=entity_type,
        max_limit=settings.AUDIT_LOG_MAX_LIMIT,
    )

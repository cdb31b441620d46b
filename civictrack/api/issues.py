"""Public issue endpoints: list recent issues and report a new one."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from civictrack.core.database import get_db
from civictrack.core.errors import ValidationError
from civictrack.models import Category, Issue, User
from civictrack.models.issue import STATUS_REPORTED
from civictrack.schemas.issues import IssueCreate, IssueOut

router = APIRouter()

PUBLIC_LIST_LIMIT = 200


@router.get("", response_model=list[IssueOut])
def list_issues(db: Annotated[Session, Depends(get_db)]) -> list[IssueOut]:
    rows = db.execute(
        select(Issue).order_by(Issue.reported_date.desc(), Issue.id.desc()).limit(PUBLIC_LIST_LIMIT)
    ).scalars()
    return [IssueOut.model_validate(issue) for issue in rows]


@router.post("", response_model=IssueOut)
def create_issue(
    body: IssueCreate,
    db: Annotated[Session, Depends(get_db)],
) -> IssueOut:
    """Report an issue. Missing title is rejected with 400."""
    if body.category_id is not None and db.get(Category, body.category_id) is None:
        raise ValidationError("Unknown category_id")
    if body.reporter_user_id is not None and db.get(User, body.reporter_user_id) is None:
        raise ValidationError("Unknown reporter_user_id")
    data = body.model_dump()
    data["status"] = data["status"] or STATUS_REPORTED
    issue = Issue(**data)
    db.add(issue)
    db.commit()
    db.refresh(issue)
    return IssueOut.model_validate(issue)

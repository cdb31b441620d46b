"""ORM model for citizen-reported issues."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, func

from civictrack.models.base import Base

STATUS_REPORTED = "reported"
STATUS_RESOLVED = "resolved"


class Issue(Base):
    """
    One reported civic issue.

    reporter_user_id and category_id are nulled when the referenced row is deleted.
    """

    __tablename__ = "issues"

    id = Column(Integer, primary_key=True, autoincrement=True)
    reporter_user_id = Column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    type = Column(String(255), nullable=True)
    priority = Column(String(32), nullable=True)
    title = Column(String(1024), nullable=False)
    description = Column(Text, nullable=True)
    address = Column(String(1024), nullable=True)
    city = Column(String(255), nullable=True)
    landmark = Column(String(1024), nullable=True)
    status = Column(
        String(32), nullable=False, default=STATUS_REPORTED, server_default=STATUS_REPORTED, index=True
    )
    reported_date = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    contact = Column(String(255), nullable=True)
    upvotes = Column(Integer, nullable=False, default=0, server_default="0")
    gps_location = Column(String(255), nullable=True)
    category_id = Column(
        Integer, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True, index=True
    )

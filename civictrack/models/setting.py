"""ORM model for the admin key-value settings store."""

from sqlalchemy import Column, String, Text

from civictrack.models.base import Base


class Setting(Base):
    __tablename__ = "settings"

    key = Column(String(255), primary_key=True)
    value = Column(Text, nullable=True)

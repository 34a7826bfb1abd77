"""
SQLAlchemy mixins for fuzzy-searchable entities.

Every searchable entity declares its own trigram table explicitly:

    class UserTrigram(TrigramEntryMixin, Base):
        __tablename__ = "user_trigrams"
        record_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
"""
from sqlalchemy import Column, DateTime, Integer, String, UniqueConstraint
from sqlalchemy.orm import declared_attr


class TrigramEntryMixin:
    """One (record_id, token) row; subclasses add record_id typed like the entity's key."""

    id = Column(Integer, primary_key=True, autoincrement=True)
    token = Column(String(3), nullable=False, index=True)

    @declared_attr
    def __table_args__(cls):
        return (UniqueConstraint("record_id", "token", name=f"uq_{cls.__tablename__}_record_token"),)


class SoftDeleteMixin:
    """Rows with deleted_at set are hidden from fuzzy search results."""

    deleted_at = Column(DateTime(timezone=True), nullable=True)

    @classmethod
    def not_deleted(cls):
        return cls.deleted_at.is_(None)

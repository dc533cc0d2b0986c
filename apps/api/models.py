from sqlalchemy import Column, Integer, CheckConstraint, ForeignKey, Text, JSON, Index, UniqueConstraint
from sqlalchemy.orm import relationship
from core.config import settings
from core.database import Base


def _tracked_names_clause() -> str:
    quoted = ", ".join("'" + name.replace("'", "''") + "'" for name in settings.tracked_user_names)
    return f"name IN ({quoted})"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    name = Column(Text, unique=True, nullable=False)
    created_at = Column(Text, nullable=False)  # ISO-8601 UTC

    checkins = relationship("CheckIn", back_populates="user")
    research_entries = relationship("ResearchEntry", back_populates="user")

    __table_args__ = (
        CheckConstraint(_tracked_names_clause(), name="ck_users_tracked_name"),
    )

    def __repr__(self) -> str:
        return f"<User {self.id} {self.name}>"


class CheckIn(Base):
    """One attendance record per user per UTC day."""

    __tablename__ = "checkins"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    day = Column(Text, nullable=False)  # YYYY-MM-DD (UTC)
    note = Column(Text, nullable=True)
    created_at = Column(Text, nullable=False)  # overwritten on repeat check-in

    user = relationship("User", back_populates="checkins")

    __table_args__ = (
        UniqueConstraint("user_id", "day", name="uq_checkins_user_day"),
        Index("idx_checkins_user_day", "user_id", "day"),
    )


class ResearchEntry(Base):
    """
    A logged piece of market research.

    Any number per user per day. Only the owner may edit or delete it.
    """

    __tablename__ = "research_entries"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    day = Column(Text, nullable=False)
    title = Column(Text, nullable=False)
    summary = Column(Text, nullable=False)
    tickers = Column(Text, nullable=True)  # "BTC,ETH"
    links = Column(JSON, nullable=False, default=list)  # ordered list of http(s) URLs
    confidence = Column(Integer, nullable=True)  # 1-5
    minutes_spent = Column(Integer, nullable=True)  # 0-1440
    created_at = Column(Text, nullable=False)

    user = relationship("User", back_populates="research_entries")

    __table_args__ = (
        CheckConstraint("confidence BETWEEN 1 AND 5", name="ck_research_confidence"),
        CheckConstraint("minutes_spent BETWEEN 0 AND 1440", name="ck_research_minutes"),
        Index("idx_re_user_day", "user_id", "day"),
        Index("idx_re_day", "day"),
    )


class AuditLogEntry(Base):
    """
    Append-only audit log for every state change.

    Written in the same transaction as the change it records; never updated
    or deleted by application code.
    """

    __tablename__ = "audit_log"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, nullable=True)
    action = Column(Text, nullable=False)  # e.g. checkin.upsert | research.create
    entity_type = Column(Text, nullable=True)
    entity_id = Column(Integer, nullable=True)
    meta = Column(JSON, nullable=False, default=dict)
    created_at = Column(Text, nullable=False)

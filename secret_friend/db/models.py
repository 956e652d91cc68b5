from __future__ import annotations

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import false, func

Base = declarative_base()


class Event(Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True)
    title = Column(String(191), nullable=False)
    description = Column(String(191), nullable=False)
    status = Column(Boolean, nullable=False, default=False, server_default=false())
    grouped = Column(Boolean, nullable=False, default=False, server_default=false())
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    drawn_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, status={self.status}, grouped={self.grouped})>"


class EventGroup(Base):
    __tablename__ = "event_groups"

    id = Column(Integer, primary_key=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(191), nullable=False)

    def __repr__(self) -> str:
        return f"<EventGroup(id={self.id}, event_id={self.event_id}, name={self.name})>"


class EventPerson(Base):
    __tablename__ = "event_people"

    id = Column(Integer, primary_key=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    group_id = Column(Integer, ForeignKey("event_groups.id", ondelete="RESTRICT"), nullable=False)
    name = Column(String(191), nullable=False)
    cpf = Column(String(32), nullable=False)
    recipient_token = Column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint("event_id", "cpf", name="uq_event_people_event_cpf"),
    )

    def __repr__(self) -> str:
        # recipient_token stays out of logs
        return (
            "<EventPerson(id={0}, event_id={1}, group_id={2}, drawn={3})>"
        ).format(self.id, self.event_id, self.group_id, self.recipient_token is not None)

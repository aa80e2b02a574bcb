"""
Audit log: one immutable row per mutating action or authentication event.
"""

from datetime import datetime

from sqlalchemy import Column, DateTime, Index, Integer, String, Text, event

from app.db.session import Base


class AuditLog(Base):
    __tablename__ = "audit_log"
    __table_args__ = (
        Index("ix_audit_log_username_timestamp", "username", "timestamp"),
        Index("ix_audit_log_entity", "entity", "entity_id"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(50), nullable=True)
    ip = Column(String(45), nullable=True)
    action = Column(String(50), nullable=False)
    entity = Column(String(100), nullable=True)
    entity_id = Column(Integer, nullable=True)
    payload_json = Column(Text, nullable=True)
    timestamp = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False, index=True)


@event.listens_for(AuditLog, "before_update")
def _reject_update(mapper, connection, target) -> None:
    raise RuntimeError(f"Audit log entry {target.id} is write-once and cannot be updated")


@event.listens_for(AuditLog, "before_delete")
def _reject_delete(mapper, connection, target) -> None:
    raise RuntimeError(f"Audit log entry {target.id} is write-once and cannot be deleted")

"""
Referral Audit Ledger
=====================
Append-only record of every facade call. How the call was resolved
(``status``) and, for refused insertions, which graph rule refused it
(``rejection_reason``) are real columns so that refusals can be counted and
filtered without decoding payloads. Inputs and outputs are kept as JSON for
replay.

Only the ledger is stored here. The referral graph itself lives in memory.
"""

from datetime import datetime
import json
import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy import Column, String, Float, DateTime, Text, create_engine, func
from sqlalchemy.orm import Session, sessionmaker

from models.base import Base
from models.referral_results import RejectionReason
from api.response_envelope import ResponseStatus


class AuditRecord(Base):
    __tablename__ = "referral_audit_log"

    id = Column(String, primary_key=True)
    operation = Column(String, nullable=False, index=True)
    algorithm_version = Column(String, nullable=False)
    status = Column(String, nullable=False, index=True)  # ResponseStatus value
    rejection_reason = Column(String, nullable=True)  # RejectionReason value, refusals only
    request_json = Column(Text, nullable=False)
    response_json = Column(Text, nullable=True)
    duration_ms = Column(Float, nullable=False)
    caller_identity = Column(String, nullable=True)
    recorded_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    error_detail = Column(Text, nullable=True)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "operation": self.operation,
            "algorithm_version": self.algorithm_version,
            "status": self.status,
            "rejection_reason": self.rejection_reason,
            "duration_ms": self.duration_ms,
            "caller_identity": self.caller_identity,
            "recorded_at": self.recorded_at.isoformat() if self.recorded_at else None,
            "error_detail": self.error_detail,
        }

    def __repr__(self) -> str:
        return f"<AuditRecord(op={self.operation}, status={self.status}, reason={self.rejection_reason})>"


class AuditLedger:
    def __init__(self, session: Session):
        self.session = session

    def record(
        self,
        operation: str,
        algorithm_version: str,
        status: ResponseStatus,
        request_payload: Dict[str, Any],
        response_payload: Any,
        duration_ms: float,
        caller_identity: Optional[str] = None,
        rejection_reason: Optional[RejectionReason] = None,
        error_detail: Optional[str] = None,
    ) -> AuditRecord:
        """Add and commit one ledger row."""
        row = AuditRecord(
            id=str(uuid.uuid4()),
            operation=operation,
            algorithm_version=algorithm_version,
            status=status.value,
            rejection_reason=rejection_reason.value if rejection_reason else None,
            request_json=json.dumps(request_payload, default=str),
            response_json=None if response_payload is None else json.dumps(response_payload, default=str),
            duration_ms=duration_ms,
            caller_identity=caller_identity,
            error_detail=error_detail,
        )
        self.session.add(row)
        self.session.commit()
        return row

    def entries(
        self,
        operation: Optional[str] = None,
        status: Optional[ResponseStatus] = None,
        since: Optional[datetime] = None,
        limit: int = 50,
    ) -> List[AuditRecord]:
        """Newest first."""
        q = self.session.query(AuditRecord)
        if operation:
            q = q.filter(AuditRecord.operation == operation)
        if status is not None:
            q = q.filter(AuditRecord.status == ResponseStatus(status).value)
        if since:
            q = q.filter(AuditRecord.recorded_at >= since)
        return q.order_by(AuditRecord.recorded_at.desc()).limit(limit).all()

    def refusal_counts(self) -> Dict[RejectionReason, int]:
        rows = (
            self.session.query(AuditRecord.rejection_reason, func.count(AuditRecord.id))
            .filter(AuditRecord.status == ResponseStatus.REFUSED.value)
            .group_by(AuditRecord.rejection_reason)
            .all()
        )
        return {RejectionReason(reason): count for reason, count in rows}


def init_db(db_url: str = "sqlite:///:memory:"):
    engine = create_engine(db_url)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)

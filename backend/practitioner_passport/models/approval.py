from sqlalchemy import Column, String, DateTime, Text, ForeignKey
from datetime import datetime

from practitioner_passport.core.database import Base
from practitioner_passport.core.types import GUID, generate_uuid


class Approval(Base):
    """Generic sign-off record pointing at an item by (item_type, item_id)"""
    __tablename__ = "approvals"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    student_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    mentor_id = Column(GUID, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    # qualification, session, activity, application, other
    item_type = Column(String(20), nullable=False)
    item_id = Column(String(36), nullable=False, index=True)

    status = Column(String(20), default="pending", nullable=False)  # pending, approved, rejected
    feedback = Column(Text, nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<Approval {self.item_type}:{self.item_id}>"

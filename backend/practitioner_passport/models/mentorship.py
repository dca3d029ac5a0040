from sqlalchemy import Column, DateTime, Text, ForeignKey
from datetime import datetime

from practitioner_passport.core.database import Base
from practitioner_passport.core.types import GUID, generate_uuid


class MentorStudentAssignment(Base):
    """Mentor <-> student link; a student has at most one mentor"""
    __tablename__ = "mentor_student_assignments"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    mentor_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)

    assigned_date = Column(DateTime, default=datetime.utcnow, nullable=False)
    notes = Column(Text, nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<MentorStudentAssignment {self.mentor_id}->{self.student_id}>"

"""
Student portfolio items that go through mentor/admin sign-off:
qualifications, teaching sessions, activities and profile documents.
"""
from sqlalchemy import Column, String, DateTime, Integer, Text, ForeignKey
from datetime import datetime

from practitioner_passport.core.database import Base
from practitioner_passport.core.types import GUID, generate_uuid


class Qualification(Base):
    """Qualification model (degree, certificate, license, course)"""
    __tablename__ = "qualifications"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    student_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    title = Column(String(255), nullable=False)
    issuing_organization = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    date_obtained = Column(DateTime, nullable=True)
    expiry_date = Column(DateTime, nullable=True)
    certificate_url = Column(Text, nullable=True)
    type = Column(String(50), default="certificate", nullable=False)

    # Verification
    verification_status = Column(String(20), default="pending", nullable=False, index=True)
    feedback = Column(Text, nullable=True)
    verified_by = Column(GUID, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<Qualification {self.title}>"


class TeachingSession(Base):
    """Teaching session delivered by a student; sign-off lives in approvals"""
    __tablename__ = "sessions"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    student_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    date = Column(DateTime, nullable=False, default=datetime.utcnow)
    duration = Column(Integer, nullable=False, default=60)  # minutes
    location = Column(String(255), nullable=True)
    session_type = Column(String(50), default="classroom", nullable=False)
    reflection = Column(Text, nullable=True)
    status = Column(String(20), default="planned", nullable=False)  # planned, completed, cancelled

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<TeachingSession {self.title}>"


class StudentActivity(Base):
    """Professional development activity (workshop, project, seminar...)"""
    __tablename__ = "student_activities"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    student_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    activity_type = Column(String(50), default="other", nullable=False)
    location = Column(String(255), nullable=True)
    date_completed = Column(DateTime, nullable=True)
    evidence_url = Column(Text, nullable=True)

    # Verification
    status = Column(String(20), default="pending", nullable=False, index=True)  # pending, approved, rejected
    rejection_reason = Column(Text, nullable=True)
    verified_by = Column(GUID, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<StudentActivity {self.title}>"


class ProfileVerification(Base):
    """Identity/profile document submitted for verification"""
    __tablename__ = "profile_verifications"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    student_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    document_url = Column(Text, nullable=True)
    status = Column(String(20), default="pending", nullable=False)  # pending, verified, rejected
    rejection_reason = Column(Text, nullable=True)
    verified_by = Column(GUID, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    # Timestamps
    submitted_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, nullable=True)

    def __repr__(self):
        return f"<ProfileVerification {self.id}>"

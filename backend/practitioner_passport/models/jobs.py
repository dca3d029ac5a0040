from sqlalchemy import Column, String, DateTime, Text, ForeignKey
from datetime import datetime

from practitioner_passport.core.database import Base
from practitioner_passport.core.types import GUID, generate_uuid


class JobPost(Base):
    """Job post students can apply to"""
    __tablename__ = "job_posts"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    company_name = Column(String(255), nullable=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    location = Column(String(255), nullable=True)
    deadline = Column(DateTime, nullable=True)
    status = Column(String(20), default="active", nullable=False)  # active, closed, draft

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<JobPost {self.title}>"


class Application(Base):
    """Student application to a job post"""
    __tablename__ = "applications"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    job_post_id = Column(GUID, ForeignKey("job_posts.id", ondelete="CASCADE"), nullable=False)
    student_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # pending, reviewed, shortlisted, rejected, accepted
    status = Column(String(20), default="pending", nullable=False, index=True)
    resume_url = Column(Text, nullable=True)
    cover_letter = Column(Text, nullable=True)
    feedback = Column(Text, nullable=True)
    reviewed_by = Column(GUID, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<Application {self.id}>"

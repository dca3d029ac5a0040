from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime


class ActivitySummary(BaseModel):
    """Source-specific details mapped onto a common shape"""
    title: Optional[str] = None
    type: str
    location: Optional[str] = None
    description: Optional[str] = None


class StudentSummary(BaseModel):
    id: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None


class UnifiedVerificationRecord(BaseModel):
    """One verifiable item, whatever table it came from"""
    id: str
    type: str  # Qualification, Session, Activity, Application, Profile
    title: Optional[str] = None
    user: Optional[str] = None
    date: Optional[datetime] = None
    priority: str
    description: Optional[str] = None
    attachments: List[str] = Field(default_factory=list)
    status: str
    activity: ActivitySummary
    student: StudentSummary


class VerificationUpdate(BaseModel):
    """PATCH /verifications body"""
    id: Optional[str] = None
    status: Optional[str] = None
    feedback: Optional[str] = None
    type: Optional[str] = None


class VerificationUpdateResponse(BaseModel):
    success: bool
    message: str
    id: Optional[str] = None
    type: Optional[str] = None
    status: Optional[str] = None


class VerificationCounts(BaseModel):
    """Pending items per source"""
    qualifications: int = 0
    sessions: int = 0
    activities: int = 0
    applications: int = 0
    profiles: int = 0
    total: int = 0
    failed_sources: List[str] = Field(default_factory=list)

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime


class AssignmentCreate(BaseModel):
    """POST /mentor-assignments body (camelCase on the wire)"""
    mentor_id: Optional[str] = Field(None, alias="mentorId")
    student_id: Optional[str] = Field(None, alias="studentId")
    notes: Optional[str] = None

    class Config:
        populate_by_name = True


class AssignmentResponse(BaseModel):
    success: bool
    message: str
    id: Optional[str] = None
    replaced_mentor_id: Optional[str] = None
    removed: Optional[bool] = None


class MenteeItem(BaseModel):
    student_id: str
    name: Optional[str] = None
    email: Optional[str] = None
    assigned_date: datetime
    notes: Optional[str] = None


class MentorRef(BaseModel):
    id: str
    name: Optional[str] = None
    email: Optional[str] = None
    assigned_date: Optional[datetime] = None


class MentorSummary(BaseModel):
    id: str
    name: Optional[str] = None
    email: Optional[str] = None


class MentorWithStudents(BaseModel):
    mentor: MentorSummary
    students: List[MenteeItem] = Field(default_factory=list)

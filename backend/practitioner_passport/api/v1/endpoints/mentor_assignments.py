"""
Mentor assignment API endpoints
"""
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from practitioner_passport.core.database import get_db
from practitioner_passport.core.exceptions import AuthorizationError
from practitioner_passport.models.user import User, UserRole
from practitioner_passport.modules.auth.dependencies import get_current_admin, get_current_user
from practitioner_passport.schemas.mentorship import (
    AssignmentCreate,
    AssignmentResponse,
    MenteeItem,
    MentorRef,
    MentorWithStudents,
)
from practitioner_passport.services.mentor_assignments import MentorAssignmentService

router = APIRouter(prefix="/mentor-assignments", tags=["Mentor Assignments"])


@router.get("", response_model=List[MentorWithStudents])
async def list_assignments(
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """All assignments grouped by mentor"""
    service = MentorAssignmentService(db)
    return await service.list_assignments()


@router.post("", response_model=AssignmentResponse)
async def assign_mentor(
    payload: AssignmentCreate,
    response: Response,
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """Assign a student to a mentor, replacing any existing mentor"""
    service = MentorAssignmentService(db)
    result = await service.assign(payload.mentor_id, payload.student_id, payload.notes)
    if result.pop("created"):
        response.status_code = status.HTTP_201_CREATED
    return result


@router.delete("/{student_id}", response_model=AssignmentResponse)
async def unassign_mentor(
    student_id: str,
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    service = MentorAssignmentService(db)
    return await service.unassign(student_id)


@router.get("/mentors/{mentor_id}/students", response_model=List[MenteeItem])
async def list_mentees(
    mentor_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    if current_user.role != UserRole.ADMIN and str(current_user.id) != mentor_id:
        raise AuthorizationError("Only admins or the mentor themselves can list these students")
    service = MentorAssignmentService(db)
    return await service.list_students_for_mentor(mentor_id)


@router.get("/students/{student_id}/mentor", response_model=Optional[MentorRef])
async def get_student_mentor(
    student_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """The student's mentor, or null when none is assigned"""
    if current_user.role == UserRole.STUDENT and str(current_user.id) != student_id:
        raise AuthorizationError("Students can only view their own mentor")
    service = MentorAssignmentService(db)
    return await service.get_mentor_for_student(student_id)

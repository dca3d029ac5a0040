"""
Mentor-Student Assignment Service
Maintains the mentor <-> student relation (one mentor per student)
"""

from collections import OrderedDict
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from practitioner_passport.core.exceptions import StorageError, ValidationError
from practitioner_passport.core.logging_config import logger
from practitioner_passport.models import MentorStudentAssignment, User, UserRole
from practitioner_passport.services.repository import Repository


class MentorAssignmentService:
    """Service for mentor-student assignment operations"""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.repository = Repository(db)

    async def _require_user_with_role(self, user_id: str, role: UserRole, field: str) -> User:
        user = await self.repository.get(User, user_id)
        if user is None or user.role != role:
            raise ValidationError(f"Invalid {role.value}: '{user_id}'", field=field)
        return user

    # =====================================================
    # WRITES
    # =====================================================

    async def assign(self, mentor_id: Optional[str], student_id: Optional[str],
                     notes: Optional[str] = None) -> Dict[str, Any]:
        """
        Assign a student to a mentor.

        A student already assigned to the same mentor gets the notes and
        assigned date refreshed. A student assigned to someone else is moved
        to the new mentor and the previous mentor is reported back.
        """
        if not mentor_id or not student_id:
            raise ValidationError("Missing required fields: mentorId and studentId are required",
                                  field="mentorId" if not mentor_id else "studentId")

        await self._require_user_with_role(mentor_id, UserRole.MENTOR, "mentorId")
        await self._require_user_with_role(student_id, UserRole.STUDENT, "studentId")

        existing = await self.repository.find_one(
            MentorStudentAssignment,
            MentorStudentAssignment.student_id == str(student_id),
        )
        now = datetime.utcnow()

        if existing is None:
            assignment = await self.repository.insert(
                MentorStudentAssignment,
                mentor_id=str(mentor_id),
                student_id=str(student_id),
                notes=notes,
                assigned_date=now,
            )
            await self.repository.commit()
            logger.log_assignment_event("created", str(student_id), str(mentor_id))
            return {
                "success": True,
                "created": True,
                "message": "Student successfully assigned to mentor",
                "id": str(assignment.id),
                "replaced_mentor_id": None,
            }

        previous_mentor_id = str(existing.mentor_id)
        replaced = previous_mentor_id != str(mentor_id)

        existing.mentor_id = str(mentor_id)
        existing.notes = notes
        existing.assigned_date = now
        existing.updated_at = now
        await self.repository.commit()

        logger.log_assignment_event(
            "replaced" if replaced else "updated",
            str(student_id),
            str(mentor_id),
            previous_mentor_id=previous_mentor_id if replaced else None,
        )
        return {
            "success": True,
            "created": False,
            "message": "Student reassigned to new mentor" if replaced else "Mentor-student assignment updated",
            "id": str(existing.id),
            "replaced_mentor_id": previous_mentor_id if replaced else None,
        }

    async def unassign(self, student_id: Optional[str]) -> Dict[str, Any]:
        """Remove a student's mentor; unassigning a student with no mentor is a no-op"""
        if not student_id:
            raise ValidationError("Missing student ID", field="studentId")
        await self._require_user_with_role(student_id, UserRole.STUDENT, "studentId")

        existing = await self.repository.find_one(
            MentorStudentAssignment,
            MentorStudentAssignment.student_id == str(student_id),
        )
        if existing is None:
            return {
                "success": True,
                "removed": False,
                "message": "Student has no mentor assigned",
            }

        mentor_id = str(existing.mentor_id)
        await self.repository.delete(existing)
        await self.repository.commit()

        logger.log_assignment_event("removed", str(student_id), mentor_id)
        return {
            "success": True,
            "removed": True,
            "message": "Student successfully unassigned from mentor",
        }

    # =====================================================
    # READS
    # =====================================================

    async def list_students_for_mentor(self, mentor_id: str) -> List[Dict[str, Any]]:
        await self._require_user_with_role(mentor_id, UserRole.MENTOR, "mentorId")
        try:
            result = await self.db.execute(
                select(MentorStudentAssignment, User)
                .join(User, User.id == MentorStudentAssignment.student_id)
                .where(MentorStudentAssignment.mentor_id == str(mentor_id))
                .order_by(User.name)
            )
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to list students for mentor: {e}", operation="list") from e

        return [
            {
                "student_id": str(assignment.student_id),
                "name": student.name,
                "email": student.email,
                "assigned_date": assignment.assigned_date,
                "notes": assignment.notes,
            }
            for assignment, student in result.all()
        ]

    async def get_mentor_for_student(self, student_id: str) -> Optional[Dict[str, Any]]:
        await self._require_user_with_role(student_id, UserRole.STUDENT, "studentId")
        try:
            result = await self.db.execute(
                select(MentorStudentAssignment, User)
                .join(User, User.id == MentorStudentAssignment.mentor_id)
                .where(MentorStudentAssignment.student_id == str(student_id))
            )
            row = result.first()
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to load mentor for student: {e}", operation="get") from e

        if row is None:
            return None
        assignment, mentor = row
        return {
            "id": str(mentor.id),
            "name": mentor.name,
            "email": mentor.email,
            "assigned_date": assignment.assigned_date,
        }

    async def list_assignments(self) -> List[Dict[str, Any]]:
        """All assignments grouped by mentor"""
        mentor = aliased(User)
        student = aliased(User)
        try:
            result = await self.db.execute(
                select(MentorStudentAssignment, mentor, student)
                .join(mentor, mentor.id == MentorStudentAssignment.mentor_id)
                .join(student, student.id == MentorStudentAssignment.student_id)
                .order_by(mentor.name, student.name)
            )
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to list assignments: {e}", operation="list") from e

        grouped: "OrderedDict[str, Dict[str, Any]]" = OrderedDict()
        for assignment, mentor_user, student_user in result.all():
            entry = grouped.setdefault(str(mentor_user.id), {
                "mentor": {
                    "id": str(mentor_user.id),
                    "name": mentor_user.name,
                    "email": mentor_user.email,
                },
                "students": [],
            })
            entry["students"].append({
                "student_id": str(student_user.id),
                "name": student_user.name,
                "email": student_user.email,
                "assigned_date": assignment.assigned_date,
                "notes": assignment.notes,
            })
        return list(grouped.values())

"""
Unit Tests for MentorAssignmentService
Tests for: assign/replace, idempotent unassign, user validation, queries, storage errors
"""
import pytest
from sqlalchemy import func, select, text

from practitioner_passport.core.exceptions import StorageError, ValidationError
from practitioner_passport.models import MentorStudentAssignment, UserRole
from practitioner_passport.services.mentor_assignments import MentorAssignmentService


async def assignment_count(session, student_id) -> int:
    return await session.scalar(
        select(func.count()).select_from(MentorStudentAssignment)
        .where(MentorStudentAssignment.student_id == str(student_id))
    )


class TestAssign:
    """Test creating and replacing assignments"""

    async def test_assign_new(self, db_session, mentor_user, student_user):
        service = MentorAssignmentService(db_session)

        result = await service.assign(str(mentor_user.id), str(student_user.id), notes="Autumn cohort")

        assert result["success"] is True
        assert result["created"] is True
        assert result["replaced_mentor_id"] is None
        mentor = await service.get_mentor_for_student(str(student_user.id))
        assert mentor["id"] == str(mentor_user.id)
        assert mentor["name"] == mentor_user.name

    async def test_reassign_replaces_mentor(self, db_session, factory, student_user):
        mentor_a = await factory.user(UserRole.MENTOR)
        mentor_b = await factory.user(UserRole.MENTOR)
        service = MentorAssignmentService(db_session)

        await service.assign(str(mentor_a.id), str(student_user.id))
        result = await service.assign(str(mentor_b.id), str(student_user.id))

        assert result["created"] is False
        assert result["replaced_mentor_id"] == str(mentor_a.id)
        assert (await service.get_mentor_for_student(str(student_user.id)))["id"] == str(mentor_b.id)
        assert await assignment_count(db_session, student_user.id) == 1
        assert await service.list_students_for_mentor(str(mentor_a.id)) == []

    async def test_same_mentor_refreshes_notes(self, db_session, mentor_user, student_user):
        service = MentorAssignmentService(db_session)

        await service.assign(str(mentor_user.id), str(student_user.id), notes="first")
        result = await service.assign(str(mentor_user.id), str(student_user.id), notes="second")

        assert result["replaced_mentor_id"] is None
        assert result["message"] == "Mentor-student assignment updated"
        mentees = await service.list_students_for_mentor(str(mentor_user.id))
        assert [m["notes"] for m in mentees] == ["second"]
        assert await assignment_count(db_session, student_user.id) == 1

    @pytest.mark.parametrize("mentor_id,student_id", [(None, "s"), ("m", None), ("", "")])
    async def test_missing_ids(self, db_session, mentor_id, student_id):
        with pytest.raises(ValidationError):
            await MentorAssignmentService(db_session).assign(mentor_id, student_id)

    async def test_mentor_must_have_mentor_role(self, db_session, factory, student_user):
        not_a_mentor = await factory.user(UserRole.STUDENT)

        with pytest.raises(ValidationError) as exc_info:
            await MentorAssignmentService(db_session).assign(str(not_a_mentor.id), str(student_user.id))

        assert exc_info.value.details["field"] == "mentorId"

    async def test_student_must_have_student_role(self, db_session, mentor_user, admin_user):
        with pytest.raises(ValidationError) as exc_info:
            await MentorAssignmentService(db_session).assign(str(mentor_user.id), str(admin_user.id))

        assert exc_info.value.details["field"] == "studentId"

    async def test_unknown_users(self, db_session, mentor_user):
        with pytest.raises(ValidationError):
            await MentorAssignmentService(db_session).assign(str(mentor_user.id), "no-such-student")


class TestUnassign:
    """Test removing assignments"""

    async def test_unassign_twice_is_idempotent(self, db_session, mentor_user, student_user):
        service = MentorAssignmentService(db_session)
        await service.assign(str(mentor_user.id), str(student_user.id))

        first = await service.unassign(str(student_user.id))
        second = await service.unassign(str(student_user.id))

        assert first["success"] is True and first["removed"] is True
        assert second["success"] is True and second["removed"] is False
        assert await service.get_mentor_for_student(str(student_user.id)) is None

    async def test_unassign_requires_student_id(self, db_session):
        with pytest.raises(ValidationError):
            await MentorAssignmentService(db_session).unassign("")

    async def test_unassign_unknown_student(self, db_session):
        with pytest.raises(ValidationError) as exc_info:
            await MentorAssignmentService(db_session).unassign("00000000-0000-0000-0000-000000000000")

        assert exc_info.value.details["field"] == "studentId"

    async def test_unassign_student_without_mentor(self, db_session, student_user):
        result = await MentorAssignmentService(db_session).unassign(str(student_user.id))

        assert result["success"] is True
        assert result["removed"] is False


class TestQueries:
    """Test read operations"""

    async def test_list_students_for_mentor(self, db_session, factory, mentor_user):
        alice = await factory.user(UserRole.STUDENT, name="Alice Adams")
        bob = await factory.user(UserRole.STUDENT, name="Bob Brown")
        await factory.assignment(mentor_user, bob, notes="needs support")
        await factory.assignment(mentor_user, alice)

        mentees = await MentorAssignmentService(db_session).list_students_for_mentor(str(mentor_user.id))

        assert [m["name"] for m in mentees] == ["Alice Adams", "Bob Brown"]
        assert mentees[1]["notes"] == "needs support"
        assert mentees[0]["student_id"] == str(alice.id)
        assert mentees[0]["assigned_date"] is not None

    async def test_mentor_for_unassigned_student(self, db_session, student_user):
        assert await MentorAssignmentService(db_session).get_mentor_for_student(str(student_user.id)) is None

    async def test_list_assignments_grouped_by_mentor(self, db_session, factory):
        anna = await factory.user(UserRole.MENTOR, name="Anna Mentor")
        zed = await factory.user(UserRole.MENTOR, name="Zed Mentor")
        s1 = await factory.user(UserRole.STUDENT, name="Student One")
        s2 = await factory.user(UserRole.STUDENT, name="Student Two")
        s3 = await factory.user(UserRole.STUDENT, name="Student Three")
        await factory.assignment(zed, s1)
        await factory.assignment(anna, s2)
        await factory.assignment(anna, s3)

        groups = await MentorAssignmentService(db_session).list_assignments()

        assert [g["mentor"]["name"] for g in groups] == ["Anna Mentor", "Zed Mentor"]
        assert groups[0]["mentor"]["id"] == str(anna.id)
        assert [s["name"] for s in groups[0]["students"]] == ["Student Three", "Student Two"]
        assert groups[1]["students"][0]["student_id"] == str(s1.id)

    async def test_list_students_for_unknown_mentor(self, db_session):
        with pytest.raises(ValidationError) as exc_info:
            await MentorAssignmentService(db_session).list_students_for_mentor("no-such-mentor")

        assert exc_info.value.details["field"] == "mentorId"

    async def test_list_students_for_non_mentor(self, db_session, student_user):
        with pytest.raises(ValidationError):
            await MentorAssignmentService(db_session).list_students_for_mentor(str(student_user.id))

    async def test_mentor_for_unknown_student(self, db_session):
        with pytest.raises(ValidationError) as exc_info:
            await MentorAssignmentService(db_session).get_mentor_for_student("no-such-student")

        assert exc_info.value.details["field"] == "studentId"


class TestStorageErrors:
    """Store failures propagate to the caller"""

    async def test_assign_without_assignment_table(self, db_session, mentor_user, student_user):
        mentor_id, student_id = str(mentor_user.id), str(student_user.id)
        await db_session.execute(text("DROP TABLE mentor_student_assignments"))
        await db_session.commit()

        with pytest.raises(StorageError) as exc_info:
            await MentorAssignmentService(db_session).assign(mentor_id, student_id)

        assert exc_info.value.status_code == 503

    async def test_list_assignments_without_assignment_table(self, db_session):
        await db_session.execute(text("DROP TABLE mentor_student_assignments"))
        await db_session.commit()

        with pytest.raises(StorageError) as exc_info:
            await MentorAssignmentService(db_session).list_assignments()

        assert exc_info.value.details["operation"] == "list"

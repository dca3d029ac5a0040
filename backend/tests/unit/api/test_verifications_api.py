"""
Unit Tests for Verification API endpoints
Tests for: role gating, listing headers, PATCH validation and error bodies
"""
import pytest
from sqlalchemy import select, text

from practitioner_passport.models import Qualification, UserRole

API = "/api/v1/verifications"


class TestListVerificationsEndpoint:
    """GET /verifications"""

    async def test_requires_authentication(self, client):
        response = await client.get(API)

        assert response.status_code in (401, 403)

    async def test_students_are_forbidden(self, client, student_headers):
        response = await client.get(API, headers=student_headers)

        assert response.status_code == 403

    async def test_admin_sees_all_pending(self, client, factory, student_user, admin_headers):
        qualification = await factory.qualification(student_user)
        await factory.activity(student_user)

        response = await client.get(API, headers=admin_headers)

        assert response.status_code == 200
        assert response.headers["X-Verification-Listing"] == "ok"
        assert "X-Verification-Failed-Sources" not in response.headers
        data = response.json()
        assert [item["type"] for item in data] == ["Qualification", "Activity"]
        assert data[0]["id"] == str(qualification.id)
        assert data[0]["student"]["email"] == student_user.email
        assert data[0]["priority"] in ("High", "Medium", "Low")

    async def test_mentor_is_scoped_to_own_students(self, client, factory, mentor_user, mentor_headers):
        mine = await factory.user(UserRole.STUDENT)
        other = await factory.user(UserRole.STUDENT)
        await factory.assignment(mentor_user, mine)
        mine_item = await factory.qualification(mine)
        await factory.qualification(other)

        response = await client.get(API, headers=mentor_headers)

        assert response.status_code == 200
        assert [item["id"] for item in response.json()] == [str(mine_item.id)]

    async def test_mentor_cannot_ask_for_another_mentor(self, client, factory, mentor_headers):
        someone_else = await factory.user(UserRole.MENTOR)

        response = await client.get(API, params={"mentor_id": str(someone_else.id)}, headers=mentor_headers)

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "NOT_AUTHORIZED"

    async def test_type_and_status_query_params(self, client, factory, student_user, admin_headers):
        rejected = await factory.activity(student_user, status="rejected")
        await factory.activity(student_user)
        await factory.qualification(student_user, status="rejected")

        response = await client.get(API, params={"type": "activities", "status": "rejected"}, headers=admin_headers)

        assert response.status_code == 200
        assert [item["id"] for item in response.json()] == [str(rejected.id)]

    async def test_unknown_type_query_param(self, client, admin_headers):
        response = await client.get(API, params={"type": "competencies"}, headers=admin_headers)

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_VERIFICATION_TYPE"

    async def test_admin_can_scope_by_mentor(self, client, factory, mentor_user, admin_headers):
        mine = await factory.user(UserRole.STUDENT)
        await factory.assignment(mentor_user, mine)
        mine_item = await factory.activity(mine)
        await factory.activity(await factory.user(UserRole.STUDENT))

        response = await client.get(API, params={"mentor_id": str(mentor_user.id)}, headers=admin_headers)

        assert [item["id"] for item in response.json()] == [str(mine_item.id)]

    async def test_empty_queue_serves_sample(self, client, admin_headers):
        response = await client.get(API, headers=admin_headers)

        assert response.status_code == 200
        assert response.headers["X-Verification-Listing"] == "sample"
        assert len(response.json()) == 3

    async def test_partial_listing_headers(self, client, db_session, factory, student_user, admin_headers):
        await factory.qualification(student_user)
        await db_session.execute(text("DROP TABLE profile_verifications"))
        await db_session.commit()

        response = await client.get(API, headers=admin_headers)

        assert response.status_code == 200
        assert response.headers["X-Verification-Listing"] == "partial"
        assert response.headers["X-Verification-Failed-Sources"] == "profile"


class TestCountsEndpoint:
    """GET /verifications/counts"""

    async def test_counts(self, client, factory, student_user, admin_headers):
        await factory.qualification(student_user)
        await factory.session_approval(student_user)

        response = await client.get(f"{API}/counts", headers=admin_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["qualifications"] == 1
        assert data["sessions"] == 1
        assert data["total"] == 2


class TestDetailEndpoint:
    """GET /verifications/{type}/{id}"""

    async def test_detail(self, client, factory, student_user, admin_headers):
        activity = await factory.activity(student_user)

        response = await client.get(f"{API}/activity/{activity.id}", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["title"] == "Behaviour Management Workshop"

    async def test_detail_not_found(self, client, admin_headers):
        response = await client.get(f"{API}/qualification/missing", headers=admin_headers)

        assert response.status_code == 404
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == "VERIFICATION_NOT_FOUND"

    async def test_detail_unknown_type(self, client, admin_headers):
        response = await client.get(f"{API}/competency/abc", headers=admin_headers)

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_VERIFICATION_TYPE"


class TestPatchEndpoint:
    """PATCH /verifications"""

    async def test_verify_records_caller_as_verifier(self, client, db_session, factory, student_user,
                                                     mentor_user, mentor_headers):
        qualification = await factory.qualification(student_user)
        qualification_id = str(qualification.id)
        mentor_id = str(mentor_user.id)

        response = await client.patch(API, json={
            "id": qualification_id,
            "type": "qualification",
            "status": "verified",
            "feedback": "Checked with issuer",
        }, headers=mentor_headers)

        assert response.status_code == 200
        assert response.json()["success"] is True
        assert response.json()["message"] == f"Verification {qualification_id} updated to verified"
        row = (await db_session.execute(
            select(Qualification.verification_status, Qualification.verified_by)
            .where(Qualification.id == qualification_id)
        )).one()
        assert row.verification_status == "verified"
        assert row.verified_by == mentor_id

    @pytest.mark.parametrize("body", [
        {"status": "verified", "type": "qualification"},
        {"id": "abc", "type": "qualification"},
    ])
    async def test_missing_fields(self, client, admin_headers, body):
        response = await client.patch(API, json=body, headers=admin_headers)

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    async def test_invalid_status(self, client, admin_headers):
        response = await client.patch(API, json={"id": "abc", "type": "activity", "status": "done"},
                                      headers=admin_headers)

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_VERIFICATION_STATUS"

    async def test_unknown_id(self, client, admin_headers):
        response = await client.patch(API, json={"id": "nope", "type": "activity", "status": "rejected"},
                                      headers=admin_headers)

        assert response.status_code == 404

    async def test_students_cannot_verify(self, client, student_headers):
        response = await client.patch(API, json={"id": "abc", "status": "verified"}, headers=student_headers)

        assert response.status_code == 403

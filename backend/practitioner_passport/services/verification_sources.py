"""
Verification source registry.

Every verifiable item lives in its own table with its own column names and
status vocabulary. A SourceSpec describes one of those tables so the
aggregator and the mutator can dispatch on VerificationType instead of
branching on strings.
"""

import enum
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from sqlalchemy import Select, select
from sqlalchemy.orm import aliased

from practitioner_passport.core.exceptions import (
    InvalidVerificationStatusError,
    InvalidVerificationTypeError,
)
from practitioner_passport.models import (
    Application,
    Approval,
    JobPost,
    ProfileVerification,
    Qualification,
    StudentActivity,
    TeachingSession,
    User,
)


class VerificationType(str, enum.Enum):
    QUALIFICATION = "qualification"
    SESSION = "session"
    ACTIVITY = "activity"
    APPLICATION = "application"
    PROFILE = "profile"
    GENERIC = "generic"


class VerificationOutcome(str, enum.Enum):
    """Caller-facing target status, mapped per table"""
    VERIFIED = "verified"
    REJECTED = "rejected"


_OUTCOME_ALIASES = {
    "verified": VerificationOutcome.VERIFIED,
    "verify": VerificationOutcome.VERIFIED,
    "approved": VerificationOutcome.VERIFIED,
    "approve": VerificationOutcome.VERIFIED,
    "accepted": VerificationOutcome.VERIFIED,
    "rejected": VerificationOutcome.REJECTED,
    "reject": VerificationOutcome.REJECTED,
}


# Row formatter: (row, priority) -> record dict
RowFormatter = Callable[[Any, str], Dict[str, Any]]
QueryBuilder = Callable[[], Select]


@dataclass(frozen=True)
class SourceSpec:
    verification_type: VerificationType
    label: str
    model: Any
    status_column: str
    pending_value: str
    verified_value: str
    rejected_value: str
    feedback_column: str
    verifier_column: str
    created_column: str = "created_at"
    owner_column: str = "student_id"
    # Column the caller-supplied item id is matched against
    key_column: str = "id"
    fixed_filters: Tuple[Tuple[str, str], ...] = ()
    # Key is shared by resubmissions; only the newest row is addressed
    latest_only: bool = False
    # profile_verifications are listed whatever their status
    pending_only: bool = True
    listed: bool = True
    count_key: str = ""
    build_query: Optional[QueryBuilder] = None
    format_row: Optional[RowFormatter] = None

    def column(self, name: str):
        return getattr(self.model, name)

    def status_for(self, outcome: VerificationOutcome) -> str:
        if outcome == VerificationOutcome.VERIFIED:
            return self.verified_value
        return self.rejected_value

    def key_criteria(self, item_id: str) -> List[Any]:
        if self.latest_only:
            inner = aliased(self.model)
            latest = (
                select(inner.id)
                .where(getattr(inner, self.key_column) == str(item_id))
                .where(*(getattr(inner, name) == value for name, value in self.fixed_filters))
                .order_by(getattr(inner, self.created_column).desc())
                .limit(1)
                .scalar_subquery()
            )
            return [self.column("id") == latest]
        criteria = [self.column(self.key_column) == str(item_id)]
        criteria.extend(self.column(name) == value for name, value in self.fixed_filters)
        return criteria


def _student(user: Optional[User]) -> Dict[str, Optional[str]]:
    if user is None:
        return {"id": None, "name": None, "email": None}
    return {"id": str(user.id), "name": user.name, "email": user.email}


# ---------------------------------------------------------------------------
# Qualification
# ---------------------------------------------------------------------------

def _qualification_query() -> Select:
    return select(Qualification, User).join(User, User.id == Qualification.student_id)


def _format_qualification(row, priority: str) -> Dict[str, Any]:
    qualification, user = row
    return {
        "id": str(qualification.id),
        "type": "Qualification",
        "title": qualification.title,
        "user": user.name if user else None,
        "date": qualification.created_at,
        "priority": priority,
        "description": qualification.description,
        "attachments": [qualification.certificate_url] if qualification.certificate_url else [],
        "status": qualification.verification_status,
        "activity": {
            "title": qualification.title,
            "type": "Qualification",
            "location": qualification.issuing_organization,
            "description": qualification.description,
        },
        "student": _student(user),
    }


# ---------------------------------------------------------------------------
# Session (sign-off stored in approvals)
# ---------------------------------------------------------------------------

def _session_query() -> Select:
    return (
        select(Approval, User, TeachingSession)
        .join(User, User.id == Approval.student_id)
        .outerjoin(TeachingSession, TeachingSession.id == Approval.item_id)
        .where(Approval.item_type == "session")
    )


def _format_session(row, priority: str) -> Dict[str, Any]:
    approval, user, session = row
    title = session.title if session else "Teaching session"
    description = session.description if session else approval.feedback
    return {
        "id": str(approval.item_id),
        "type": "Session",
        "title": title,
        "user": user.name if user else None,
        "date": approval.created_at,
        "priority": priority,
        "description": description,
        "attachments": [],
        "status": approval.status,
        "activity": {
            "title": title,
            "type": session.session_type if session else "Session",
            "location": session.location if session else None,
            "description": description,
        },
        "student": _student(user),
    }


# ---------------------------------------------------------------------------
# Activity
# ---------------------------------------------------------------------------

def _activity_query() -> Select:
    return select(StudentActivity, User).join(User, User.id == StudentActivity.student_id)


def _format_activity(row, priority: str) -> Dict[str, Any]:
    activity, user = row
    return {
        "id": str(activity.id),
        "type": "Activity",
        "title": activity.title,
        "user": user.name if user else None,
        "date": activity.created_at,
        "priority": priority,
        "description": activity.description,
        "attachments": [activity.evidence_url] if activity.evidence_url else [],
        "status": activity.status,
        "activity": {
            "title": activity.title,
            "type": activity.activity_type,
            "location": activity.location,
            "description": activity.description,
        },
        "student": _student(user),
    }


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------

def _application_query() -> Select:
    return (
        select(Application, User, JobPost)
        .join(User, User.id == Application.student_id)
        .outerjoin(JobPost, JobPost.id == Application.job_post_id)
    )


def _format_application(row, priority: str) -> Dict[str, Any]:
    application, user, job = row
    title = job.title if job else "Job application"
    return {
        "id": str(application.id),
        "type": "Application",
        "title": title,
        "user": user.name if user else None,
        "date": application.created_at,
        "priority": priority,
        "description": application.cover_letter,
        "attachments": [application.resume_url] if application.resume_url else [],
        "status": application.status,
        "activity": {
            "title": title,
            "type": "Application",
            "location": job.location if job else None,
            "description": job.description if job else None,
        },
        "student": _student(user),
    }


# ---------------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------------

def _profile_query() -> Select:
    return select(ProfileVerification, User).join(User, User.id == ProfileVerification.student_id)


def _format_profile(row, priority: str) -> Dict[str, Any]:
    profile, user = row
    title = f"Profile verification: {user.name}" if user else "Profile verification"
    return {
        "id": str(profile.id),
        "type": "Profile",
        "title": title,
        "user": user.name if user else None,
        "date": profile.submitted_at,
        "priority": priority,
        "description": "Identity document submitted for profile verification",
        "attachments": [profile.document_url] if profile.document_url else [],
        "status": profile.status,
        "activity": {
            "title": title,
            "type": "Profile",
            "location": None,
            "description": profile.rejection_reason,
        },
        "student": _student(user),
    }


# ---------------------------------------------------------------------------
# Generic approval (detail view and mutation only)
# ---------------------------------------------------------------------------

def _approval_query() -> Select:
    return select(Approval, User).join(User, User.id == Approval.student_id)


def _format_approval(row, priority: str) -> Dict[str, Any]:
    approval, user = row
    title = f"{approval.item_type.capitalize()} approval"
    return {
        "id": str(approval.id),
        "type": "Approval",
        "title": title,
        "user": user.name if user else None,
        "date": approval.created_at,
        "priority": priority,
        "description": approval.feedback,
        "attachments": [],
        "status": approval.status,
        "activity": {
            "title": title,
            "type": approval.item_type,
            "location": None,
            "description": approval.feedback,
        },
        "student": _student(user),
    }


SOURCES: Dict[VerificationType, SourceSpec] = {
    VerificationType.QUALIFICATION: SourceSpec(
        verification_type=VerificationType.QUALIFICATION,
        label="Qualification",
        model=Qualification,
        status_column="verification_status",
        pending_value="pending",
        verified_value="verified",
        rejected_value="rejected",
        feedback_column="feedback",
        verifier_column="verified_by",
        count_key="qualifications",
        build_query=_qualification_query,
        format_row=_format_qualification,
    ),
    VerificationType.SESSION: SourceSpec(
        verification_type=VerificationType.SESSION,
        label="Session",
        model=Approval,
        status_column="status",
        pending_value="pending",
        verified_value="approved",
        rejected_value="rejected",
        feedback_column="feedback",
        verifier_column="mentor_id",
        key_column="item_id",
        fixed_filters=(("item_type", "session"),),
        latest_only=True,
        count_key="sessions",
        build_query=_session_query,
        format_row=_format_session,
    ),
    VerificationType.ACTIVITY: SourceSpec(
        verification_type=VerificationType.ACTIVITY,
        label="Activity",
        model=StudentActivity,
        status_column="status",
        pending_value="pending",
        verified_value="approved",
        rejected_value="rejected",
        feedback_column="rejection_reason",
        verifier_column="verified_by",
        count_key="activities",
        build_query=_activity_query,
        format_row=_format_activity,
    ),
    VerificationType.APPLICATION: SourceSpec(
        verification_type=VerificationType.APPLICATION,
        label="Application",
        model=Application,
        status_column="status",
        pending_value="pending",
        verified_value="accepted",
        rejected_value="rejected",
        feedback_column="feedback",
        verifier_column="reviewed_by",
        count_key="applications",
        build_query=_application_query,
        format_row=_format_application,
    ),
    VerificationType.PROFILE: SourceSpec(
        verification_type=VerificationType.PROFILE,
        label="Profile",
        model=ProfileVerification,
        status_column="status",
        pending_value="pending",
        verified_value="verified",
        rejected_value="rejected",
        feedback_column="rejection_reason",
        verifier_column="verified_by",
        created_column="submitted_at",
        pending_only=False,
        count_key="profiles",
        build_query=_profile_query,
        format_row=_format_profile,
    ),
    VerificationType.GENERIC: SourceSpec(
        verification_type=VerificationType.GENERIC,
        label="Approval",
        model=Approval,
        status_column="status",
        pending_value="pending",
        verified_value="approved",
        rejected_value="rejected",
        feedback_column="feedback",
        verifier_column="mentor_id",
        listed=False,
        build_query=_approval_query,
        format_row=_format_approval,
    ),
}

# Order the aggregator concatenates sources in
LISTED_SOURCES: List[SourceSpec] = [spec for spec in SOURCES.values() if spec.listed]


def _type_aliases() -> Dict[str, VerificationType]:
    aliases: Dict[str, VerificationType] = {}
    for vtype, spec in SOURCES.items():
        aliases[vtype.value] = vtype
        aliases[spec.label.lower()] = vtype
        if spec.count_key:
            aliases[spec.count_key] = vtype
    aliases["approval"] = VerificationType.GENERIC
    aliases["approvals"] = VerificationType.GENERIC
    aliases["qualifications"] = VerificationType.QUALIFICATION
    aliases["profile_verification"] = VerificationType.PROFILE
    aliases["profile_verifications"] = VerificationType.PROFILE
    return aliases


TYPE_ALIASES = _type_aliases()


def resolve_verification_type(value: Optional[str]) -> VerificationType:
    """Map a caller-supplied discriminator onto a VerificationType.

    Matching is case-insensitive and accepts singular, plural and the display
    labels used in listings. A missing value selects the generic approval
    table.
    """
    if value is None or not str(value).strip():
        return VerificationType.GENERIC
    key = str(value).strip().lower()
    try:
        return TYPE_ALIASES[key]
    except KeyError:
        raise InvalidVerificationTypeError(value, [t.value for t in VerificationType])


def resolve_outcome(value: Optional[str]) -> VerificationOutcome:
    key = str(value).strip().lower() if value is not None else ""
    try:
        return _OUTCOME_ALIASES[key]
    except KeyError:
        raise InvalidVerificationStatusError(value, [o.value for o in VerificationOutcome])


def get_source(verification_type: VerificationType) -> SourceSpec:
    return SOURCES[verification_type]


__all__ = [
    "VerificationType",
    "VerificationOutcome",
    "SourceSpec",
    "SOURCES",
    "LISTED_SOURCES",
    "TYPE_ALIASES",
    "resolve_verification_type",
    "resolve_outcome",
    "get_source",
]

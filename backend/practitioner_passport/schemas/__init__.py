from practitioner_passport.schemas.verification import (
    ActivitySummary,
    StudentSummary,
    UnifiedVerificationRecord,
    VerificationUpdate,
    VerificationUpdateResponse,
    VerificationCounts,
)
from practitioner_passport.schemas.mentorship import (
    AssignmentCreate,
    AssignmentResponse,
    MenteeItem,
    MentorRef,
    MentorSummary,
    MentorWithStudents,
)

__all__ = [
    "ActivitySummary",
    "StudentSummary",
    "UnifiedVerificationRecord",
    "VerificationUpdate",
    "VerificationUpdateResponse",
    "VerificationCounts",
    "AssignmentCreate",
    "AssignmentResponse",
    "MenteeItem",
    "MentorRef",
    "MentorSummary",
    "MentorWithStudents",
]

from practitioner_passport.services.repository import Repository
from practitioner_passport.services.priority import (
    Priority,
    PriorityPolicy,
    recency_priority,
    make_recency_policy,
)
from practitioner_passport.services.verification_sources import (
    VerificationType,
    VerificationOutcome,
    SOURCES,
    resolve_verification_type,
    resolve_outcome,
)
from practitioner_passport.services.verification_aggregator import (
    VerificationAggregator,
    VerificationListing,
    ListingStatus,
    sample_verifications,
)
from practitioner_passport.services.verification_mutator import VerificationMutator
from practitioner_passport.services.mentor_assignments import MentorAssignmentService

__all__ = [
    "Repository",
    # Priority
    "Priority",
    "PriorityPolicy",
    "recency_priority",
    "make_recency_policy",
    # Verification workflow
    "VerificationType",
    "VerificationOutcome",
    "SOURCES",
    "resolve_verification_type",
    "resolve_outcome",
    "VerificationAggregator",
    "VerificationListing",
    "ListingStatus",
    "sample_verifications",
    "VerificationMutator",
    # Mentorship
    "MentorAssignmentService",
]

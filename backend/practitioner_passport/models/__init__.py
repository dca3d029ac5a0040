# Re-export all models for convenient imports
from practitioner_passport.models.user import User, UserRole
from practitioner_passport.models.portfolio import (
    Qualification,
    TeachingSession,
    StudentActivity,
    ProfileVerification,
)
from practitioner_passport.models.jobs import JobPost, Application
from practitioner_passport.models.approval import Approval
from practitioner_passport.models.mentorship import MentorStudentAssignment

__all__ = [
    # User
    "User",
    "UserRole",
    # Portfolio
    "Qualification",
    "TeachingSession",
    "StudentActivity",
    "ProfileVerification",
    # Jobs
    "JobPost",
    "Application",
    # Sign-off
    "Approval",
    # Mentorship
    "MentorStudentAssignment",
]

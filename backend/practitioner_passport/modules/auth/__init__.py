# Authentication module

from practitioner_passport.modules.auth.dependencies import (
    get_current_user,
    get_current_reviewer,
    get_current_admin,
)

__all__ = [
    "get_current_user",
    "get_current_reviewer",
    "get_current_admin",
]

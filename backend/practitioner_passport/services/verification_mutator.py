"""
Verification Mutator
Applies a reviewer's decision to exactly one verifiable item
"""

from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from practitioner_passport.core.exceptions import ValidationError, VerificationNotFoundError
from practitioner_passport.core.logging_config import logger
from practitioner_passport.services.repository import Repository
from practitioner_passport.services.verification_sources import (
    get_source,
    resolve_outcome,
    resolve_verification_type,
)


class VerificationMutator:
    """Write side of the verification workflow"""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.repository = Repository(db)

    async def set_verification_status(
        self,
        item_id: Optional[str],
        verification_type: Optional[str],
        status: Optional[str],
        feedback: Optional[str] = None,
        verifier_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Move one item to verified or rejected.

        The type discriminator picks the table; a missing type targets the
        generic approvals table by row id. The status is translated into the
        table's own vocabulary (e.g. "verified" is stored as "approved" for
        activities and "accepted" for applications). Feedback and verifier are
        written only when given.

        Raises ValidationError for a missing id/status or an unknown type or
        status, VerificationNotFoundError when no row matches.
        """
        if not item_id:
            raise ValidationError("Missing required field: id", field="id")
        if not status:
            raise ValidationError("Missing required field: status", field="status")

        spec = get_source(resolve_verification_type(verification_type))
        outcome = resolve_outcome(status)
        stored_status = spec.status_for(outcome)

        values: Dict[str, Any] = {
            spec.status_column: stored_status,
            "updated_at": datetime.utcnow(),
        }
        if feedback is not None:
            values[spec.feedback_column] = feedback
        if verifier_id is not None:
            values[spec.verifier_column] = str(verifier_id)

        updated = await self.repository.update_where(spec.model, spec.key_criteria(item_id), values)
        if updated == 0:
            await self.db.rollback()
            raise VerificationNotFoundError(spec.verification_type.value, item_id)

        await self.repository.commit()

        logger.log_verification_event(
            spec.verification_type.value,
            str(item_id),
            stored_status,
            verifier_id=str(verifier_id) if verifier_id else None,
        )

        return {
            "success": True,
            "message": f"Verification {item_id} updated to {outcome.value}",
            "id": str(item_id),
            "type": spec.verification_type.value,
            "status": stored_status,
        }

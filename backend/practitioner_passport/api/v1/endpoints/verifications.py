"""
Verification API endpoints
Unified review queue for mentors and admins
"""
from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from practitioner_passport.core.database import get_db
from practitioner_passport.core.exceptions import AuthorizationError
from practitioner_passport.models.user import User, UserRole
from practitioner_passport.modules.auth.dependencies import get_current_reviewer
from practitioner_passport.schemas.verification import (
    UnifiedVerificationRecord,
    VerificationCounts,
    VerificationUpdate,
    VerificationUpdateResponse,
)
from practitioner_passport.services.verification_aggregator import VerificationAggregator
from practitioner_passport.services.verification_mutator import VerificationMutator

router = APIRouter(prefix="/verifications", tags=["Verifications"])

LISTING_HEADER = "X-Verification-Listing"
FAILED_SOURCES_HEADER = "X-Verification-Failed-Sources"


def _resolve_scope(current_user: User, mentor_id: Optional[str]) -> Optional[str]:
    """Mentors only ever see their own students; admins may pick a mentor"""
    if current_user.role == UserRole.MENTOR:
        if mentor_id and mentor_id != str(current_user.id):
            raise AuthorizationError("Mentors can only view their own students' verifications")
        return str(current_user.id)
    return mentor_id


@router.get("", response_model=List[UnifiedVerificationRecord])
async def list_verifications(
    response: Response,
    mentor_id: Optional[str] = Query(None, description="Limit to students assigned to this mentor"),
    verification_type: Optional[str] = Query(
        None, alias="type", description="all, qualifications, sessions, activities, applications or profiles"
    ),
    status: Optional[str] = Query(None, description="pending, verified or rejected; defaults to pending"),
    current_user: User = Depends(get_current_reviewer),
    db: AsyncSession = Depends(get_db)
):
    """
    Pending verifications from every source, newest first within each source.
    ?type= narrows to one source and ?status= lists verified or rejected items
    instead.

    The X-Verification-Listing header carries ok, partial, empty or sample;
    X-Verification-Failed-Sources lists any source that could not be read.
    """
    aggregator = VerificationAggregator(db)
    listing = await aggregator.list_pending_verifications(
        _resolve_scope(current_user, mentor_id),
        verification_type=verification_type,
        status=status,
    )

    response.headers[LISTING_HEADER] = listing.status.value
    if listing.failed_sources:
        response.headers[FAILED_SOURCES_HEADER] = ",".join(listing.failed_sources)
    return listing.records


@router.get("/counts", response_model=VerificationCounts)
async def verification_counts(
    mentor_id: Optional[str] = Query(None),
    current_user: User = Depends(get_current_reviewer),
    db: AsyncSession = Depends(get_db)
):
    """Pending item count per source"""
    aggregator = VerificationAggregator(db)
    return await aggregator.count_pending_verifications(_resolve_scope(current_user, mentor_id))


@router.get("/{verification_type}/{item_id}", response_model=UnifiedVerificationRecord)
async def get_verification(
    verification_type: str,
    item_id: str,
    current_user: User = Depends(get_current_reviewer),
    db: AsyncSession = Depends(get_db)
):
    aggregator = VerificationAggregator(db)
    return await aggregator.get_verification(verification_type, item_id)


@router.patch("", response_model=VerificationUpdateResponse)
async def update_verification(
    update: VerificationUpdate,
    current_user: User = Depends(get_current_reviewer),
    db: AsyncSession = Depends(get_db)
):
    """Verify or reject one item; type defaults to the generic approvals table"""
    mutator = VerificationMutator(db)
    return await mutator.set_verification_status(
        update.id,
        update.type,
        update.status,
        feedback=update.feedback,
        verifier_id=str(current_user.id),
    )

"""
Verification Aggregator
Builds the unified review queue from every verifiable source table
"""

import asyncio
import enum
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional, Union

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from practitioner_passport.core.config import settings
from practitioner_passport.core.exceptions import (
    InvalidVerificationStatusError,
    InvalidVerificationTypeError,
    StorageError,
    VerificationNotFoundError,
)
from practitioner_passport.core.logging_config import logger
from practitioner_passport.models import MentorStudentAssignment
from practitioner_passport.schemas.verification import UnifiedVerificationRecord
from practitioner_passport.services.priority import Priority, PriorityPolicy, recency_priority
from practitioner_passport.services.repository import Repository
from practitioner_passport.services.verification_sources import (
    LISTED_SOURCES,
    SourceSpec,
    VerificationOutcome,
    get_source,
    resolve_outcome,
    resolve_verification_type,
)


class ListingStatus(str, enum.Enum):
    OK = "ok"            # every source answered
    PARTIAL = "partial"  # at least one source failed, others produced records
    EMPTY = "empty"      # nothing pending
    SAMPLE = "sample"    # nothing pending, demo sample served instead


PENDING = "pending"

# Status filter: PENDING or a reviewer outcome, mapped onto each table's vocabulary
StatusFilter = Union[str, VerificationOutcome]


def resolve_status_filter(value: Optional[str]) -> Optional[StatusFilter]:
    """None (or blank) keeps each source's default pending filter"""
    if value is None or not str(value).strip():
        return None
    if str(value).strip().lower() == PENDING:
        return PENDING
    try:
        return resolve_outcome(value)
    except InvalidVerificationStatusError:
        raise InvalidVerificationStatusError(value, [PENDING] + [o.value for o in VerificationOutcome])


def _stored_status(spec: SourceSpec, status_filter: StatusFilter) -> str:
    if status_filter == PENDING:
        return spec.pending_value
    return spec.status_for(status_filter)


def select_sources(verification_type: Optional[str]) -> List[SourceSpec]:
    """Listed sources for a type filter; None, blank or "all" selects every source"""
    if verification_type is None or str(verification_type).strip().lower() in ("", "all"):
        return LISTED_SOURCES
    spec = get_source(resolve_verification_type(verification_type))
    if not spec.listed:
        raise InvalidVerificationTypeError(
            verification_type, ["all"] + [s.verification_type.value for s in LISTED_SOURCES]
        )
    return [spec]


@dataclass
class VerificationListing:
    records: List[UnifiedVerificationRecord] = field(default_factory=list)
    status: ListingStatus = ListingStatus.OK
    failed_sources: List[str] = field(default_factory=list)

    @property
    def is_sample(self) -> bool:
        return self.status == ListingStatus.SAMPLE


def sample_verifications(now: Optional[datetime] = None) -> List[UnifiedVerificationRecord]:
    """Three demo records shown when the queue would otherwise be empty"""
    now = now or datetime.utcnow()
    samples = [
        {
            "id": "sample-1",
            "type": "Qualification",
            "title": "Postgraduate Certificate in Education",
            "user": "Jane Smith",
            "date": now - timedelta(days=1),
            "priority": "High",
            "description": "PGCE certificate awaiting verification",
            "attachments": ["pgce-certificate.pdf"],
            "status": "pending",
            "activity": {
                "title": "Postgraduate Certificate in Education",
                "type": "Qualification",
                "location": "University of Education",
                "description": "PGCE certificate awaiting verification",
            },
            "student": {"id": "sample-student-1", "name": "Jane Smith", "email": "jane.smith@example.com"},
        },
        {
            "id": "sample-2",
            "type": "Session",
            "title": "Year 9 Mathematics Lesson",
            "user": "John Doe",
            "date": now - timedelta(days=4),
            "priority": "Medium",
            "description": "Observed lesson on quadratic equations",
            "attachments": [],
            "status": "pending",
            "activity": {
                "title": "Year 9 Mathematics Lesson",
                "type": "classroom",
                "location": "Room 12",
                "description": "Observed lesson on quadratic equations",
            },
            "student": {"id": "sample-student-2", "name": "John Doe", "email": "john.doe@example.com"},
        },
        {
            "id": "sample-3",
            "type": "Activity",
            "title": "Behaviour Management Workshop",
            "user": "Alex Johnson",
            "date": now - timedelta(days=10),
            "priority": "Low",
            "description": "Half-day CPD workshop",
            "attachments": ["workshop-attendance.pdf"],
            "status": "pending",
            "activity": {
                "title": "Behaviour Management Workshop",
                "type": "workshop",
                "location": "Training Centre",
                "description": "Half-day CPD workshop",
            },
            "student": {"id": "sample-student-3", "name": "Alex Johnson", "email": "alex.johnson@example.com"},
        },
    ]
    return [UnifiedVerificationRecord(**sample) for sample in samples]


class VerificationAggregator:
    """Read side of the verification workflow"""

    def __init__(
        self,
        db: AsyncSession,
        priority_policy: Optional[PriorityPolicy] = None,
        clock: Optional[Callable[[], datetime]] = None,
        sample_fallback: Optional[bool] = None,
    ):
        self.db = db
        self.repository = Repository(db)
        self.priority_policy = priority_policy or recency_priority
        self.clock = clock or datetime.utcnow
        self.sample_fallback = (
            settings.VERIFICATION_SAMPLE_FALLBACK if sample_fallback is None else sample_fallback
        )

    # =====================================================
    # QUERY BUILDING
    # =====================================================

    def _scoped(self, stmt, spec: SourceSpec, mentor_id: Optional[str]):
        if mentor_id is None:
            return stmt
        mentees = select(MentorStudentAssignment.student_id).where(
            MentorStudentAssignment.mentor_id == str(mentor_id)
        )
        return stmt.where(spec.column(spec.owner_column).in_(mentees))

    def _listing_query(self, spec: SourceSpec, mentor_id: Optional[str],
                       status_filter: Optional[StatusFilter] = None):
        stmt = spec.build_query()
        if status_filter is not None:
            stmt = stmt.where(spec.column(spec.status_column) == _stored_status(spec, status_filter))
        elif spec.pending_only:
            stmt = stmt.where(spec.column(spec.status_column) == spec.pending_value)
        stmt = self._scoped(stmt, spec, mentor_id)
        return stmt.order_by(spec.column(spec.created_column).desc())

    def _count_query(self, spec: SourceSpec, mentor_id: Optional[str]):
        stmt = (
            select(func.count())
            .select_from(spec.model)
            .where(spec.column(spec.status_column) == spec.pending_value)
        )
        for name, value in spec.fixed_filters:
            stmt = stmt.where(spec.column(name) == value)
        return self._scoped(stmt, spec, mentor_id)

    async def _execute(self, stmt):
        # rows updated by bulk UPDATE statements must not come back stale from the identity map
        stmt = stmt.execution_options(populate_existing=True)
        return await asyncio.wait_for(
            self.db.execute(stmt),
            timeout=settings.DB_QUERY_TIMEOUT_SECONDS,
        )

    def _to_record(self, spec: SourceSpec, row: Any, now: datetime) -> UnifiedVerificationRecord:
        created_at = getattr(row[0], spec.created_column)
        priority = Priority(self.priority_policy(created_at, now))
        return UnifiedVerificationRecord(**spec.format_row(row, priority.value))

    async def _source_failed(self, spec: SourceSpec, error: Exception, failed: List[str]) -> None:
        failed.append(spec.verification_type.value)
        logger.warning(
            f"Verification source '{spec.verification_type.value}' failed: {type(error).__name__}: {error}",
            extra={
                "event_type": "verification_source_failed",
                "verification_type": spec.verification_type.value,
                "error_type": type(error).__name__,
            }
        )
        try:
            await self.db.rollback()
        except SQLAlchemyError:
            logger.debug("Rollback after failed source query also failed", exc_info=True)

    # =====================================================
    # PUBLIC OPERATIONS
    # =====================================================

    async def list_pending_verifications(
        self,
        mentor_id: Optional[str] = None,
        verification_type: Optional[str] = None,
        status: Optional[str] = None,
    ) -> VerificationListing:
        """
        Unified list of pending items, newest first within each source.

        Sources are concatenated in the order Qualification, Session, Activity,
        Application, Profile. verification_type narrows the listing to one
        source ("all" or None keeps every source). status (pending, verified or
        rejected) replaces the default pending filter, profiles included. A
        failing source is skipped and reported in failed_sources. The sample
        fallback only applies to the unfiltered listing.

        Raises ValidationError for an unknown type or status, StorageError when
        the store cannot be opened.
        """
        sources = select_sources(verification_type)
        status_filter = resolve_status_filter(status)
        filtered = len(sources) != len(LISTED_SOURCES) or status_filter is not None

        await self.repository.ping()

        start = time.perf_counter()
        now = self.clock()
        records: List[UnifiedVerificationRecord] = []
        failed: List[str] = []

        for spec in sources:
            try:
                result = await self._execute(self._listing_query(spec, mentor_id, status_filter))
                rows = result.all()
            except (SQLAlchemyError, asyncio.TimeoutError) as e:
                await self._source_failed(spec, e, failed)
                continue
            records.extend(self._to_record(spec, row, now) for row in rows)

        logger.log_performance(
            "list_pending_verifications",
            (time.perf_counter() - start) * 1000,
            record_count=len(records),
            failed_sources=failed,
        )

        if records:
            status = ListingStatus.PARTIAL if failed else ListingStatus.OK
            return VerificationListing(records=records, status=status, failed_sources=failed)

        if self.sample_fallback and not filtered:
            logger.info(
                "No verification records available, serving sample list",
                extra={"event_type": "verification_sample_fallback", "failed_sources": failed},
            )
            return VerificationListing(
                records=sample_verifications(now),
                status=ListingStatus.SAMPLE,
                failed_sources=failed,
            )
        return VerificationListing(records=[], status=ListingStatus.EMPTY, failed_sources=failed)

    async def count_pending_verifications(self, mentor_id: Optional[str] = None) -> Dict[str, Any]:
        """Pending item count per source plus the total"""
        await self.repository.ping()

        counts: Dict[str, Any] = {}
        failed: List[str] = []
        for spec in LISTED_SOURCES:
            try:
                result = await self._execute(self._count_query(spec, mentor_id))
                counts[spec.count_key] = result.scalar_one()
            except (SQLAlchemyError, asyncio.TimeoutError) as e:
                await self._source_failed(spec, e, failed)
                counts[spec.count_key] = 0

        counts["total"] = sum(counts[spec.count_key] for spec in LISTED_SOURCES)
        counts["failed_sources"] = failed
        return counts

    async def get_verification(self, verification_type: str, item_id: str) -> UnifiedVerificationRecord:
        """Detail view of a single item, whatever its current status"""
        spec = get_source(resolve_verification_type(verification_type))
        stmt = spec.build_query().where(*spec.key_criteria(item_id))
        try:
            result = await self._execute(stmt)
            row = result.first()
        except (SQLAlchemyError, asyncio.TimeoutError) as e:
            raise StorageError(f"Failed to load {spec.label} '{item_id}': {e}", operation="get") from e

        if row is None:
            raise VerificationNotFoundError(spec.verification_type.value, item_id)
        return self._to_record(spec, row, self.clock())

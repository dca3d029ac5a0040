"""
Practitioner Passport - Test Configuration and Fixtures
"""
import os
from datetime import datetime
from typing import AsyncGenerator, Optional

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from faker import Faker

# Set testing environment
os.environ['ENVIRONMENT'] = 'testing'
os.environ['DATABASE_URL'] = 'sqlite+aiosqlite:///./test_passport.db'
os.environ['JWT_SECRET_KEY'] = 'test-jwt-secret-key-for-testing'
os.environ['VERIFICATION_SAMPLE_FALLBACK'] = 'true'

from practitioner_passport.main import app
from practitioner_passport.core.database import Base, create_engine_for_url, get_db
from practitioner_passport.core.security import create_access_token
from practitioner_passport.models import (
    Application,
    Approval,
    JobPost,
    MentorStudentAssignment,
    ProfileVerification,
    Qualification,
    StudentActivity,
    TeachingSession,
    User,
    UserRole,
)

fake = Faker()

# Test database setup
TEST_DATABASE_URL = 'sqlite+aiosqlite:///./test_passport.db'
test_engine = create_engine_for_url(TEST_DATABASE_URL)
TestSessionLocal = async_sessionmaker(
    bind=test_engine,
    class_=AsyncSession,
    expire_on_commit=False
)

# Fixed "now" so priorities are deterministic
NOW = datetime(2024, 6, 15, 12, 0, 0)


@pytest.fixture(scope='function')
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test"""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session
        await session.rollback()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database override"""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


def auth_headers_for(user: User) -> dict:
    """Bearer header for any stored user"""
    token = create_access_token({
        'sub': str(user.id),
        'email': user.email,
        'role': user.role.value
    })
    return {'Authorization': f'Bearer {token}'}


class PortfolioFactory:
    """Inserts users and verifiable items; every helper commits"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _save(self, obj):
        self.session.add(obj)
        await self.session.commit()
        await self.session.refresh(obj)
        return obj

    async def user(self, role: UserRole = UserRole.STUDENT, name: Optional[str] = None) -> User:
        return await self._save(User(
            email=fake.unique.email(),
            name=name or fake.name(),
            role=role,
        ))

    async def qualification(self, student: User, created_at: datetime = NOW,
                            status: str = 'pending', **kwargs) -> Qualification:
        return await self._save(Qualification(
            student_id=student.id,
            title=kwargs.pop('title', 'Postgraduate Certificate in Education'),
            issuing_organization=kwargs.pop('issuing_organization', fake.company()),
            certificate_url=kwargs.pop('certificate_url', 'https://files.example.com/cert.pdf'),
            verification_status=status,
            created_at=created_at,
            **kwargs
        ))

    async def session_approval(self, student: User, created_at: datetime = NOW,
                               status: str = 'pending') -> Approval:
        teaching = await self._save(TeachingSession(
            student_id=student.id,
            title='Year 9 Mathematics',
            location='Room 12',
            date=created_at,
            status='completed',
        ))
        return await self._save(Approval(
            student_id=student.id,
            item_type='session',
            item_id=str(teaching.id),
            status=status,
            created_at=created_at,
        ))

    async def resubmission(self, approval: Approval, created_at: datetime = NOW,
                           status: str = 'pending') -> Approval:
        """A further approval row for the same session"""
        return await self._save(Approval(
            student_id=approval.student_id,
            item_type=approval.item_type,
            item_id=approval.item_id,
            status=status,
            created_at=created_at,
        ))

    async def activity(self, student: User, created_at: datetime = NOW,
                       status: str = 'pending') -> StudentActivity:
        return await self._save(StudentActivity(
            student_id=student.id,
            title='Behaviour Management Workshop',
            activity_type='workshop',
            location='Training Centre',
            evidence_url='https://files.example.com/evidence.pdf',
            status=status,
            created_at=created_at,
        ))

    async def application(self, student: User, created_at: datetime = NOW,
                          status: str = 'pending') -> Application:
        job = await self._save(JobPost(
            company_name=fake.company(),
            title='Newly Qualified Teacher',
            description='Secondary maths post',
            location='Leeds',
        ))
        return await self._save(Application(
            job_post_id=job.id,
            student_id=student.id,
            status=status,
            resume_url='https://files.example.com/cv.pdf',
            cover_letter='I would like to apply',
            created_at=created_at,
        ))

    async def profile(self, student: User, submitted_at: datetime = NOW,
                      status: str = 'pending') -> ProfileVerification:
        return await self._save(ProfileVerification(
            student_id=student.id,
            document_url='https://files.example.com/passport.png',
            status=status,
            submitted_at=submitted_at,
        ))

    async def assignment(self, mentor: User, student: User, notes: Optional[str] = None) -> MentorStudentAssignment:
        return await self._save(MentorStudentAssignment(
            mentor_id=mentor.id,
            student_id=student.id,
            notes=notes,
        ))


@pytest.fixture
def factory(db_session: AsyncSession) -> PortfolioFactory:
    return PortfolioFactory(db_session)


@pytest.fixture
async def student_user(factory: PortfolioFactory) -> User:
    return await factory.user(UserRole.STUDENT)


@pytest.fixture
async def mentor_user(factory: PortfolioFactory) -> User:
    return await factory.user(UserRole.MENTOR)


@pytest.fixture
async def admin_user(factory: PortfolioFactory) -> User:
    return await factory.user(UserRole.ADMIN)


@pytest.fixture
def student_headers(student_user: User) -> dict:
    return auth_headers_for(student_user)


@pytest.fixture
def mentor_headers(mentor_user: User) -> dict:
    return auth_headers_for(mentor_user)


@pytest.fixture
def admin_headers(admin_user: User) -> dict:
    return auth_headers_for(admin_user)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def fixed_clock():
    return lambda: NOW


@pytest.fixture
def make_headers():
    return auth_headers_for


@pytest.fixture
def session_factory():
    """Session factory bound to the test database, for code that opens its own sessions"""
    return TestSessionLocal

from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from tinylearn.api.auth import create_access_token, get_password_hash
from tinylearn.api.dependencies import get_clock, get_notifier
from tinylearn.api.main import app
from tinylearn.models.database import create_tables, drop_tables, get_db
from tinylearn.models.database_models import AccountStatus, Lesson, LessonCategory, UserRole
from tinylearn.models.repositories import (
    AchievementRepository, AssignmentRepository, LessonRepository, MessageRepository,
    ProgressRepository, StudentParentRepository, SubmissionRepository, UserRepository
)
from tinylearn.services.assignments import AssignmentService
from tinylearn.services.messaging import MessagingService
from tinylearn.services.notifications import Notifier
from tinylearn.services.progress import ProgressService
from tinylearn.services.submissions import SubmissionService
from tinylearn.services.users import UserService

PASSWORD = "Password1"
START = datetime(2025, 3, 10, 9, 0, 0)


class FakeClock:
    def __init__(self, now: datetime = START):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


class RecordingNotifier(Notifier):
    def __init__(self, fail: bool = False):
        self.events = []
        self.fail = fail

    def notify(self, user_id, event, payload):
        if self.fail:
            raise RuntimeError("notification backend unavailable")
        self.events.append((user_id, event, payload))
        return True


@pytest.fixture
def engine():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    create_tables(bind=engine)
    yield engine
    drop_tables(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    yield session
    session.close()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(role=UserRole.STUDENT, first_name=None, status=AccountStatus.APPROVED, **fields):
        counter["n"] += 1
        n = counter["n"]
        return UserRepository(db).create(
            first_name=first_name or f"{role.value.title()}{n}",
            last_name="Tester",
            email=fields.pop("email", f"{role.value}{n}@example.com"),
            hashed_password=get_password_hash(PASSWORD),
            role=role,
            account_status=status,
            **fields,
        )
    return _make


@pytest.fixture
def teacher(make_user):
    return make_user(UserRole.TEACHER)


@pytest.fixture
def student(make_user):
    return make_user(UserRole.STUDENT)


@pytest.fixture
def parent(make_user):
    return make_user(UserRole.PARENT)


@pytest.fixture
def admin(make_user):
    return make_user(UserRole.ADMIN)


@pytest.fixture
def make_lesson(db):
    def _make(creator, title="Counting to ten", category=LessonCategory.MATH, **fields):
        return LessonRepository(db).create(
            title=title, category=category, age_group=fields.pop("age_group", "5-7"),
            created_by=creator.id, **fields
        )
    return _make


@pytest.fixture
def lesson(make_lesson, teacher) -> Lesson:
    return make_lesson(teacher)


# ---------- services wired to the test session ----------

@pytest.fixture
def assignment_service(db, clock):
    return AssignmentService(AssignmentRepository(db), SubmissionRepository(db), UserRepository(db),
                             LessonRepository(db), clock=clock)


@pytest.fixture
def submission_service(db, clock):
    return SubmissionService(SubmissionRepository(db), AssignmentRepository(db), clock=clock)


@pytest.fixture
def progress_service(db, clock):
    return ProgressService(ProgressRepository(db), LessonRepository(db), StudentParentRepository(db),
                           UserRepository(db), clock=clock)


@pytest.fixture
def messaging_service(db, clock, notifier):
    return MessagingService(MessageRepository(db), UserRepository(db), StudentParentRepository(db),
                            notifier=notifier, clock=clock)


@pytest.fixture
def user_service(db, clock):
    return UserService(UserRepository(db), StudentParentRepository(db), LessonRepository(db),
                       AchievementRepository(db), clock=clock)


# ---------- HTTP ----------

@pytest.fixture
def client(db, clock, notifier):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_notifier] = lambda: notifier
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    def _headers(user):
        token = create_access_token({"sub": user.email, "role": user.role.value, "uid": user.id})
        return {"Authorization": f"Bearer {token}"}
    return _headers

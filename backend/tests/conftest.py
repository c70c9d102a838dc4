import os

# Point the module-level engine at a throwaway database before the app is imported.
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite://")
os.environ.setdefault("CREATE_TABLES_ON_STARTUP", "false")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from timetable.api.deps import get_db  # noqa: E402
from timetable.db.base import Base  # noqa: E402
from timetable.main import app  # noqa: E402
from timetable.models.class_group import ClassGroup  # noqa: E402
from timetable.models.subject import Subject  # noqa: E402
from timetable.models.teacher import Teacher  # noqa: E402
import timetable.models  # noqa: E402,F401


@pytest.fixture()
def session_factory():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield factory
    engine.dispose()


@pytest.fixture()
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def seed_roster(session):
    """Two class groups, three subjects and three teachers with fixed ids."""
    math = Subject(id="sub-math", name="Mathematics", description="Maths", hours_per_week=4)
    physics = Subject(id="sub-physics", name="Physics", description="Physics", hours_per_week=3)
    cs = Subject(id="sub-cs", name="Computer Science", description="IT", hours_per_week=3)
    session.add_all([math, physics, cs])
    session.add_all(
        [
            ClassGroup(id="cg-10a", name="10A", grade=10),
            ClassGroup(id="cg-11a", name="11A", grade=11),
        ]
    )
    session.add_all(
        [
            Teacher(id="t-smith", name="John Smith", employee_number="T001", subjects=[math, physics]),
            Teacher(id="t-lopez", name="Maria Lopez", employee_number="T002", subjects=[cs]),
            Teacher(id="t-idle", name="Sam Idle", employee_number="T003", subjects=[]),
        ]
    )
    session.commit()
    return {
        "class_groups": ["cg-10a", "cg-11a"],
        "subjects": {"math": "sub-math", "physics": "sub-physics", "cs": "sub-cs"},
        "teachers": {"smith": "t-smith", "lopez": "t-lopez", "idle": "t-idle"},
    }


@pytest.fixture()
def roster(db_session):
    return seed_roster(db_session)


@pytest.fixture()
def shared_file_sessions(tmp_path):
    """Session factory over a file database, one connection per session."""
    engine = create_engine(
        f"sqlite+pysqlite:///{tmp_path / 'timetable.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    with factory() as session:
        seed_roster(session)
    yield factory
    engine.dispose()

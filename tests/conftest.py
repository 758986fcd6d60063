import sys
import os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import asyncio
import uuid

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from app.core.database import Base, get_db
from app.core.cache import cache
from app.core.config import settings
from app.core.constants import CourseStatusEnum, UserRoleEnum
from app.core.security import get_password_hash
from app.crud.course import course as crud_course
from app.crud.enrollment import enrollment as crud_enrollment
from app.crud.lecture import lecture as crud_lecture
from app.crud.organization import organization as crud_organization
from app.crud.section import section as crud_section
from app.crud.user import user as crud_user
from app.utils import deps as deps_utils
import main

TEST_PASSWORD = "testpass123"

test_db_url = settings.TEST_DATABASE_URL or "sqlite:///./test.db"

@pytest.fixture(scope="session")
def database_engine():
    if test_db_url.startswith("sqlite"):
        engine = create_engine(test_db_url, connect_args={"check_same_thread": False})
    else:
        engine = create_engine(test_db_url)
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()
    if test_db_url.startswith("sqlite") and os.path.exists("./test.db"):
        os.remove("./test.db")

@pytest.fixture(scope="function")
def db_session(database_engine):
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=database_engine)
    db = SessionLocal()
    try:
        yield db
    finally:
        db.rollback()
        db.close()

@pytest.fixture(scope="function")
def client(db_session):
    # Re-initialize the app for each test function to ensure a clean state
    from importlib import reload
    reload(main)
    asyncio.run(cache.clear())
    main.app.dependency_overrides[get_db] = lambda: db_session
    main.app.dependency_overrides[deps_utils.get_db] = lambda: db_session
    main.app.dependency_overrides[deps_utils.get_transactional_db] = lambda: db_session
    with TestClient(main.app) as test_client:
        yield test_client


@pytest.fixture
def organization_factory(db_session):
    def _organization_factory(name=None, max_learners=50, billing_enabled=False):
        suffix = uuid.uuid4().hex[:8]
        return crud_organization.create(
            db_session,
            obj_in={
                "name": name or f"Acme {suffix}",
                "slug": f"acme-{suffix}",
                "max_learners": max_learners,
                "billing_enabled": billing_enabled,
            },
        )
    return _organization_factory


@pytest.fixture
def user_factory(db_session):
    def _user_factory(role=UserRoleEnum.LEARNER, organization=None, full_name=None, email=None, is_active=True):
        return crud_user.create(
            db_session,
            obj_in={
                "full_name": full_name or f"Test {role.value.title()}",
                "email": email or f"{role.value.lower()}-{uuid.uuid4()}@test.com",
                "hashed_password": get_password_hash(TEST_PASSWORD),
                "role": role,
                "organization_id": organization.id if organization else None,
                "is_active": is_active,
            },
        )
    return _user_factory


@pytest.fixture
def course_factory(db_session, user_factory):
    """Builds a course with one section per entry of `lectures_per_section`."""
    def _course_factory(
        lectures_per_section=(3,),
        instructor=None,
        title=None,
        cpd_points=0,
        status=CourseStatusEnum.PUBLISHED,
        is_free=True,
        price=0,
    ):
        instructor = instructor or user_factory(UserRoleEnum.INSTRUCTOR, full_name="Ada Instructor")
        title = title or f"Course {uuid.uuid4().hex[:8]}"
        course = crud_course.create(
            db_session,
            obj_in={
                "title": title,
                "slug": f"{title.lower().replace(' ', '-')}-{uuid.uuid4().hex[:6]}",
                "status": status,
                "is_free": is_free,
                "price": price,
                "cpd_points": cpd_points,
                "instructor_id": instructor.id,
            },
        )
        for section_position, lecture_count in enumerate(lectures_per_section):
            section = crud_section.create(
                db_session,
                obj_in={"title": f"Section {section_position + 1}", "position": section_position, "course_id": course.id},
            )
            for lecture_position in range(lecture_count):
                crud_lecture.create(
                    db_session,
                    obj_in={
                        "title": f"Lecture {section_position + 1}.{lecture_position + 1}",
                        "position": lecture_position,
                        "section_id": section.id,
                    },
                )
        return crud_course.get(db_session, id=course.id)
    return _course_factory


@pytest.fixture
def enroll(db_session):
    def _enroll(user, course):
        return crud_enrollment.create(
            db_session, obj_in={"user_id": user.id, "course_id": course.id, "progress": 0}
        )
    return _enroll


@pytest.fixture
def auth_headers(client):
    def _auth_headers(user, password=TEST_PASSWORD):
        response = client.post("/auth/login", json={"email": user.email, "password": password})
        body = response.json()
        token = body.get("data", {}).get("token", {}).get("access_token")
        assert token, f"Login failed or token missing: {body}"
        return {"Authorization": f"Bearer {token}"}
    return _auth_headers


@pytest.fixture
def lecture_ids():
    def _lecture_ids(course):
        return [lecture.id for section in course.sections for lecture in section.lectures]
    return _lecture_ids

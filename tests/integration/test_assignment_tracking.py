from datetime import timedelta

from app.core.constants import AssignmentStatusEnum, UserRoleEnum
from app.crud.course_assignment import course_assignment as crud_assignment
from app.utils.dates import utcnow
from tests.helpers.asserts import api_call, complete_lecture


def _assign(client, headers, learner, course, deadline=None):
    payload = {"learner_id": learner.id, "course_id": course.id}
    if deadline is not None:
        payload["deadline"] = deadline.isoformat()
    return api_call(client, "POST", "/assignments", headers=headers, json=payload, expected_status=201)["data"]


def test_assignment_status_follows_learner_progress(client, db_session, organization_factory, user_factory, course_factory, auth_headers, lecture_ids):
    organization = organization_factory()
    admin = user_factory(UserRoleEnum.CORPORATE_ADMIN, organization=organization)
    learner = user_factory(UserRoleEnum.LEARNER, organization=organization)
    course = course_factory(lectures_per_section=(2,))
    admin_headers = auth_headers(admin)
    learner_headers = auth_headers(learner)

    assignment = _assign(client, admin_headers, learner, course)
    assert assignment["status"] == AssignmentStatusEnum.ASSIGNED.value

    # Assignment implies enrollment
    progress = api_call(client, "GET", f"/courses/{course.id}/progress", headers=learner_headers)["data"]
    assert progress["assigned_by_id"] == admin.id

    first, second = lecture_ids(course)
    complete_lecture(client, learner_headers, first)
    views = api_call(client, "GET", "/assignments", headers=admin_headers)["data"]
    assert views[0]["effective_status"] == AssignmentStatusEnum.IN_PROGRESS.value
    assert views[0]["progress"] == 50

    complete_lecture(client, learner_headers, second)
    views = api_call(client, "GET", "/assignments", headers=learner_headers)["data"]
    assert views[0]["effective_status"] == AssignmentStatusEnum.COMPLETED.value
    assert views[0]["completed_at"] is not None

    # Completion stays stamped but the assignment tracks current progress
    complete_lecture(client, learner_headers, second, is_completed=False)
    views = api_call(client, "GET", "/assignments", headers=learner_headers)["data"]
    assert views[0]["effective_status"] == AssignmentStatusEnum.IN_PROGRESS.value
    assert views[0]["completed_at"] is not None


def test_overdue_is_derived_at_read_time(client, db_session, organization_factory, user_factory, course_factory, auth_headers, lecture_ids):
    organization = organization_factory()
    admin = user_factory(UserRoleEnum.CORPORATE_ADMIN, organization=organization)
    late_learner = user_factory(UserRoleEnum.LEARNER, organization=organization)
    on_time_learner = user_factory(UserRoleEnum.LEARNER, organization=organization)
    course = course_factory(lectures_per_section=(1,))
    admin_headers = auth_headers(admin)

    late = _assign(client, admin_headers, late_learner, course, deadline=utcnow() - timedelta(days=1))
    _assign(client, admin_headers, on_time_learner, course, deadline=utcnow() + timedelta(days=7))

    overdue = api_call(client, "GET", "/assignments?status=OVERDUE", headers=admin_headers)["data"]
    assert [view["id"] for view in overdue] == [late["id"]]

    stored = crud_assignment.get(db_session, id=late["id"])
    db_session.refresh(stored)
    assert stored.status == AssignmentStatusEnum.ASSIGNED

    summary = api_call(client, "GET", "/assignments/summary", headers=admin_headers)["data"]
    assert summary == {"all": 2, "assigned": 1, "in_progress": 0, "completed": 0, "overdue": 1}

    # Finishing late clears the overdue flag
    complete_lecture(client, auth_headers(late_learner), lecture_ids(course)[0])
    summary = api_call(client, "GET", "/assignments/summary", headers=admin_headers)["data"]
    assert summary["overdue"] == 0
    assert summary["completed"] == 1


def test_assignments_sorted_by_deadline_with_missing_last(client, organization_factory, user_factory, course_factory, auth_headers):
    organization = organization_factory()
    admin = user_factory(UserRoleEnum.CORPORATE_ADMIN, organization=organization)
    headers = auth_headers(admin)
    learners = [user_factory(UserRoleEnum.LEARNER, organization=organization) for _ in range(3)]
    course = course_factory(lectures_per_section=(1,))

    no_deadline = _assign(client, headers, learners[0], course)
    later = _assign(client, headers, learners[1], course, deadline=utcnow() + timedelta(days=10))
    sooner = _assign(client, headers, learners[2], course, deadline=utcnow() + timedelta(days=2))

    views = api_call(client, "GET", "/assignments?sort=deadline", headers=headers)["data"]

    assert [view["id"] for view in views] == [sooner["id"], later["id"], no_deadline["id"]]


def test_assignments_scoped_to_organization(client, organization_factory, user_factory, course_factory, auth_headers):
    acme = organization_factory()
    globex = organization_factory()
    acme_admin = user_factory(UserRoleEnum.CORPORATE_ADMIN, organization=acme)
    globex_admin = user_factory(UserRoleEnum.CORPORATE_ADMIN, organization=globex)
    course = course_factory(lectures_per_section=(1,))

    _assign(client, auth_headers(acme_admin), user_factory(UserRoleEnum.LEARNER, organization=acme), course)

    assert api_call(client, "GET", "/assignments", headers=auth_headers(globex_admin))["data"] == []
    assert len(api_call(client, "GET", "/assignments", headers=auth_headers(acme_admin))["data"]) == 1

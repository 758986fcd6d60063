from app.core.constants import UserRoleEnum
from app.crud.enrollment import enrollment as crud_enrollment
from tests.helpers.asserts import api_call, assert_error, complete_lecture


def test_three_lecture_course_reaches_completion_only_at_100(client, db_session, user_factory, course_factory, enroll, auth_headers, lecture_ids):
    learner = user_factory(UserRoleEnum.LEARNER)
    course = course_factory(lectures_per_section=(3,))
    enroll(learner, course)
    headers = auth_headers(learner)
    first, second, third = lecture_ids(course)

    result = complete_lecture(client, headers, first)
    assert result["course_progress"] == 33
    assert result["completed_at"] is None

    result = complete_lecture(client, headers, second)
    assert result["course_progress"] == 67
    assert result["completed_at"] is None

    result = complete_lecture(client, headers, third)
    assert result["course_progress"] == 100
    assert result["completed_at"] is not None

    progress = api_call(client, "GET", f"/courses/{course.id}/progress", headers=headers)["data"]
    assert progress["progress"] == 100
    assert progress["completed_at"] == result["completed_at"]


def test_repeated_completion_does_not_double_count(client, user_factory, course_factory, enroll, auth_headers, lecture_ids):
    learner = user_factory(UserRoleEnum.LEARNER)
    course = course_factory(lectures_per_section=(2,))
    enroll(learner, course)
    headers = auth_headers(learner)
    first, _ = lecture_ids(course)

    complete_lecture(client, headers, first)
    result = complete_lecture(client, headers, first)

    assert result["course_progress"] == 50
    rows = api_call(client, "GET", f"/courses/{course.id}/lecture-progress", headers=headers)["data"]
    assert len(rows) == 1


def test_heartbeat_updates_position_without_completing(client, user_factory, course_factory, enroll, auth_headers, lecture_ids):
    learner = user_factory(UserRoleEnum.LEARNER)
    course = course_factory(lectures_per_section=(2,))
    enroll(learner, course)
    headers = auth_headers(learner)
    first, _ = lecture_ids(course)

    body = api_call(
        client, "POST", f"/lectures/{first}/progress", headers=headers,
        json={"watched_duration": 120, "last_position": 95}
    )["data"]

    assert body["course_progress"] == 0
    assert body["progress"]["is_completed"] is False
    assert body["progress"]["watched_duration"] == 120
    assert body["progress"]["last_position"] == 95


def test_progress_requires_enrollment(client, user_factory, course_factory, auth_headers, lecture_ids):
    learner = user_factory(UserRoleEnum.LEARNER)
    course = course_factory(lectures_per_section=(1,))
    headers = auth_headers(learner)

    response = client.post(f"/lectures/{lecture_ids(course)[0]}/progress", headers=headers, json={"is_completed": True})
    assert_error(response, 403, "FORBIDDEN")

    response = client.post("/lectures/999999/progress", headers=headers, json={"is_completed": True})
    assert_error(response, 404, "NOT_FOUND", "Lecture not found")


def test_certificate_is_a_snapshot_of_the_course(client, db_session, user_factory, course_factory, enroll, auth_headers, lecture_ids):
    instructor = user_factory(UserRoleEnum.INSTRUCTOR, full_name="Grace Hopper")
    learner = user_factory(UserRoleEnum.LEARNER)
    course = course_factory(lectures_per_section=(2, 1), instructor=instructor, cpd_points=10, title="Compilers 101")
    enroll(learner, course)
    headers = auth_headers(learner)

    for lecture_id in lecture_ids(course):
        complete_lecture(client, headers, lecture_id)

    response = client.post("/certificates", headers=headers, json={"course_id": course.id})
    assert response.status_code == 201, response.text
    issued = response.json()["data"]
    assert issued["course_name"] == "Compilers 101"
    assert issued["instructor_name"] == "Grace Hopper"
    assert issued["cpd_points"] == 10
    assert issued["certificate_id"].startswith("CERT-")

    api_call(
        client, "PUT", f"/courses/{course.id}", headers=auth_headers(instructor),
        json={"title": "Compilers 201", "cpd_points": 25}
    )

    detail = api_call(client, "GET", f"/certificates/{issued['id']}", headers=headers)["data"]
    assert detail["course_name"] == "Compilers 101"
    assert detail["cpd_points"] == 10

    again = client.post("/certificates", headers=headers, json={"course_id": course.id})
    assert again.status_code == 200
    assert again.json()["data"]["certificate_id"] == issued["certificate_id"]

    listed = api_call(client, "GET", "/certificates", headers=headers)["data"]
    assert [c["certificate_id"] for c in listed] == [issued["certificate_id"]]


def test_certificate_requires_completion(client, user_factory, course_factory, enroll, auth_headers, lecture_ids):
    learner = user_factory(UserRoleEnum.LEARNER)
    outsider = user_factory(UserRoleEnum.LEARNER)
    course = course_factory(lectures_per_section=(2,))
    enroll(learner, course)
    headers = auth_headers(learner)
    complete_lecture(client, headers, lecture_ids(course)[0])

    response = client.post("/certificates", headers=headers, json={"course_id": course.id})
    assert_error(response, 400, "BAD_REQUEST", "Course not completed yet")

    response = client.post("/certificates", headers=auth_headers(outsider), json={"course_id": course.id})
    assert_error(response, 403, "FORBIDDEN")

    response = client.post("/certificates", headers=headers, json={"course_id": 999999})
    assert_error(response, 404, "NOT_FOUND")


def test_certificate_download_renders_html(client, user_factory, course_factory, enroll, auth_headers, lecture_ids):
    learner = user_factory(UserRoleEnum.LEARNER, full_name="Lin Learner")
    other = user_factory(UserRoleEnum.LEARNER)
    course = course_factory(lectures_per_section=(1,), title="Safety Basics")
    enroll(learner, course)
    headers = auth_headers(learner)
    complete_lecture(client, headers, lecture_ids(course)[0])
    certificate = client.post("/certificates", headers=headers, json={"course_id": course.id}).json()["data"]

    response = client.get(f"/certificates/{certificate['id']}/download", headers=headers)

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert "Lin Learner" in response.text
    assert "Safety Basics" in response.text
    assert certificate["certificate_id"] in response.text

    response = client.get(f"/certificates/{certificate['id']}", headers=auth_headers(other))
    assert_error(response, 403, "FORBIDDEN")


def test_completion_is_sticky_when_a_lecture_is_unmarked(client, db_session, user_factory, course_factory, enroll, auth_headers, lecture_ids):
    learner = user_factory(UserRoleEnum.LEARNER)
    course = course_factory(lectures_per_section=(2,))
    enroll(learner, course)
    headers = auth_headers(learner)
    first, second = lecture_ids(course)

    complete_lecture(client, headers, first)
    completed = complete_lecture(client, headers, second)
    assert completed["course_progress"] == 100

    regressed = complete_lecture(client, headers, second, is_completed=False)

    assert regressed["course_progress"] == 50
    assert regressed["completed_at"] == completed["completed_at"]
    response = client.post("/certificates", headers=headers, json={"course_id": course.id})
    assert response.status_code == 201


def test_completion_cleared_when_not_sticky(client, db_session, monkeypatch, user_factory, course_factory, enroll, auth_headers, lecture_ids):
    from app.core.config import settings
    monkeypatch.setattr(settings, "COMPLETION_IS_STICKY", False)

    learner = user_factory(UserRoleEnum.LEARNER)
    course = course_factory(lectures_per_section=(2,))
    enroll(learner, course)
    headers = auth_headers(learner)
    first, second = lecture_ids(course)

    complete_lecture(client, headers, first)
    complete_lecture(client, headers, second)
    regressed = complete_lecture(client, headers, second, is_completed=False)

    assert regressed["course_progress"] == 50
    assert regressed["completed_at"] is None


def test_issued_certificate_keeps_completion_when_not_sticky(client, db_session, monkeypatch, user_factory, course_factory, enroll, auth_headers, lecture_ids):
    from app.core.config import settings
    monkeypatch.setattr(settings, "COMPLETION_IS_STICKY", False)

    learner = user_factory(UserRoleEnum.LEARNER)
    course = course_factory(lectures_per_section=(2,))
    enroll(learner, course)
    headers = auth_headers(learner)
    first, second = lecture_ids(course)

    complete_lecture(client, headers, first)
    completed = complete_lecture(client, headers, second)
    api_call(client, "POST", "/certificates", headers=headers, json={"course_id": course.id}, expected_status=201)

    regressed = complete_lecture(client, headers, second, is_completed=False)

    assert regressed["course_progress"] == 50
    assert regressed["completed_at"] == completed["completed_at"]
    certificates = api_call(client, "GET", "/certificates", headers=headers)["data"]
    assert len(certificates) == 1


def test_new_lecture_lowers_progress_of_existing_learners(client, db_session, user_factory, course_factory, enroll, auth_headers, lecture_ids):
    instructor = user_factory(UserRoleEnum.INSTRUCTOR)
    learner = user_factory(UserRoleEnum.LEARNER)
    course = course_factory(lectures_per_section=(2,), instructor=instructor)
    enroll(learner, course)
    headers = auth_headers(learner)
    for lecture_id in lecture_ids(course):
        complete_lecture(client, headers, lecture_id)

    section_id = course.sections[0].id
    api_call(
        client, "POST", f"/courses/{course.id}/sections/{section_id}/lectures",
        headers=auth_headers(instructor), json={"title": "Bonus lecture"}, expected_status=201
    )

    enrollment = crud_enrollment.get_by_user_and_course(db_session, user_id=learner.id, course_id=course.id)
    db_session.refresh(enrollment)
    assert enrollment.progress == 67
    assert enrollment.completed_at is not None

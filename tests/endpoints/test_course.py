from app.core.constants import UserRoleEnum
from tests.helpers.asserts import api_call, assert_error


def test_instructor_builds_a_course(client, user_factory, auth_headers):
    instructor = user_factory(UserRoleEnum.INSTRUCTOR)
    headers = auth_headers(instructor)

    course = api_call(
        client, "POST", "/courses", headers=headers,
        json={"title": "Intro to SQL", "cpd_points": 4, "status": "PUBLISHED"},
        expected_status=201
    )["data"]
    assert course["slug"].startswith("intro-to-sql")
    assert course["instructor_id"] == instructor.id

    section = api_call(
        client, "POST", f"/courses/{course['id']}/sections", headers=headers,
        json={"title": "Basics"}, expected_status=201
    )["data"]
    for title in ("SELECT", "JOIN"):
        api_call(
            client, "POST", f"/courses/{course['id']}/sections/{section['id']}/lectures", headers=headers,
            json={"title": title, "video_duration": 300}, expected_status=201
        )

    detail = api_call(client, "GET", f"/courses/{course['id']}", headers=headers)["data"]
    assert detail["total_lectures"] == 2
    assert [l["title"] for l in detail["sections"][0]["lectures"]] == ["SELECT", "JOIN"]
    assert [l["position"] for l in detail["sections"][0]["lectures"]] == [0, 1]


def test_duplicate_title_gets_unique_slug(client, user_factory, auth_headers):
    headers = auth_headers(user_factory(UserRoleEnum.INSTRUCTOR))

    first = api_call(client, "POST", "/courses", headers=headers, json={"title": "Same Title"}, expected_status=201)["data"]
    second = api_call(client, "POST", "/courses", headers=headers, json={"title": "Same Title"}, expected_status=201)["data"]

    assert first["slug"] != second["slug"]


def test_only_owner_can_edit_course(client, user_factory, course_factory, auth_headers):
    course = course_factory()
    other_instructor = user_factory(UserRoleEnum.INSTRUCTOR)

    response = client.put(f"/courses/{course.id}", headers=auth_headers(other_instructor), json={"title": "Hijacked"})

    assert_error(response, 403, "FORBIDDEN")


def test_learners_cannot_create_courses(client, user_factory, auth_headers):
    learner = user_factory(UserRoleEnum.LEARNER)

    response = client.post("/courses", headers=auth_headers(learner), json={"title": "Nope"})

    assert_error(response, 403, "FORBIDDEN")


def test_draft_courses_hidden_from_learners(client, user_factory, course_factory, auth_headers):
    from app.core.constants import CourseStatusEnum
    instructor = user_factory(UserRoleEnum.INSTRUCTOR)
    draft = course_factory(status=CourseStatusEnum.DRAFT, instructor=instructor)
    learner = user_factory(UserRoleEnum.LEARNER)

    assert_error(client.get(f"/courses/{draft.id}", headers=auth_headers(learner)), 404, "NOT_FOUND")
    api_call(client, "GET", f"/courses/{draft.id}", headers=auth_headers(instructor))

    published = api_call(client, "GET", "/courses", headers=auth_headers(learner))["data"]
    assert draft.id not in [c["id"] for c in published]


def test_deleting_a_lecture_recomputes_progress(client, db_session, user_factory, course_factory, enroll, auth_headers, lecture_ids):
    instructor = user_factory(UserRoleEnum.INSTRUCTOR)
    learner = user_factory(UserRoleEnum.LEARNER)
    course = course_factory(lectures_per_section=(3,), instructor=instructor)
    enroll(learner, course)
    learner_headers = auth_headers(learner)
    first, second, third = lecture_ids(course)
    for lecture_id in (first, second):
        api_call(client, "POST", f"/lectures/{lecture_id}/progress", headers=learner_headers, json={"is_completed": True})

    response = client.delete(
        f"/courses/{course.id}/sections/{course.sections[0].id}/lectures/{third}", headers=auth_headers(instructor)
    )
    assert response.status_code == 204

    progress = api_call(client, "GET", f"/courses/{course.id}/progress", headers=learner_headers)["data"]
    assert progress["progress"] == 100
    assert progress["completed_at"] is not None


def test_deleting_a_section_recomputes_progress(client, db_session, user_factory, course_factory, enroll, auth_headers, lecture_ids):
    instructor = user_factory(UserRoleEnum.INSTRUCTOR)
    learner = user_factory(UserRoleEnum.LEARNER)
    course = course_factory(lectures_per_section=(2, 2), instructor=instructor)
    enroll(learner, course)
    learner_headers = auth_headers(learner)
    first, second, _, _ = lecture_ids(course)
    for lecture_id in (first, second):
        api_call(client, "POST", f"/lectures/{lecture_id}/progress", headers=learner_headers, json={"is_completed": True})
    before = api_call(client, "GET", f"/courses/{course.id}/progress", headers=learner_headers)["data"]
    assert before["progress"] == 50

    response = client.delete(f"/courses/{course.id}/sections/{course.sections[1].id}", headers=auth_headers(instructor))
    assert response.status_code == 204

    progress = api_call(client, "GET", f"/courses/{course.id}/progress", headers=learner_headers)["data"]
    assert progress["progress"] == 100
    assert progress["completed_at"] is not None
    detail = api_call(client, "GET", f"/courses/{course.id}", headers=auth_headers(instructor))["data"]
    assert [s["id"] for s in detail["sections"]] == [course.sections[0].id]
    assert detail["total_lectures"] == 2


def test_deleting_a_section_closes_position_gap(client, user_factory, course_factory, auth_headers):
    instructor = user_factory(UserRoleEnum.INSTRUCTOR)
    course = course_factory(lectures_per_section=(1, 1, 1), instructor=instructor)
    headers = auth_headers(instructor)
    first, middle, last = [s.id for s in course.sections]

    assert client.delete(f"/courses/{course.id}/sections/{middle}", headers=headers).status_code == 204

    detail = api_call(client, "GET", f"/courses/{course.id}", headers=headers)["data"]
    assert [(s["id"], s["position"]) for s in detail["sections"]] == [(first, 0), (last, 1)]


def test_update_section_and_lecture(client, user_factory, course_factory, auth_headers, lecture_ids):
    instructor = user_factory(UserRoleEnum.INSTRUCTOR)
    course = course_factory(lectures_per_section=(1,), instructor=instructor)
    headers = auth_headers(instructor)
    section_id = course.sections[0].id
    lecture_id = lecture_ids(course)[0]

    section = api_call(
        client, "PUT", f"/courses/{course.id}/sections/{section_id}", headers=headers, json={"title": "Getting started"}
    )["data"]
    assert section["title"] == "Getting started"

    lecture = api_call(
        client, "PUT", f"/courses/{course.id}/sections/{section_id}/lectures/{lecture_id}", headers=headers,
        json={"title": "Welcome", "lecture_type": "TEXT"}
    )["data"]
    assert lecture["title"] == "Welcome"
    assert lecture["lecture_type"] == "TEXT"
    assert lecture["position"] == 0


def test_update_lecture_in_wrong_section_is_not_found(client, user_factory, course_factory, auth_headers, lecture_ids):
    instructor = user_factory(UserRoleEnum.INSTRUCTOR)
    course = course_factory(lectures_per_section=(1, 1), instructor=instructor)
    lecture_in_first = lecture_ids(course)[0]

    response = client.put(
        f"/courses/{course.id}/sections/{course.sections[1].id}/lectures/{lecture_in_first}",
        headers=auth_headers(instructor), json={"title": "Moved"}
    )

    assert_error(response, 404, "NOT_FOUND", "Lecture not found")


def test_reorder_sections_and_lectures(client, user_factory, course_factory, auth_headers, lecture_ids):
    instructor = user_factory(UserRoleEnum.INSTRUCTOR)
    course = course_factory(lectures_per_section=(3, 1), instructor=instructor)
    headers = auth_headers(instructor)
    first_section, second_section = [s.id for s in course.sections]
    a, b, c, _ = lecture_ids(course)

    reordered = api_call(
        client, "PUT", f"/courses/{course.id}/sections/reorder", headers=headers,
        json={"ordered_ids": [second_section, first_section]}
    )["data"]
    assert [s["id"] for s in reordered["sections"]] == [second_section, first_section]

    section = api_call(
        client, "PUT", f"/courses/{course.id}/sections/{first_section}/lectures/reorder", headers=headers,
        json={"ordered_ids": [c, a, b]}
    )["data"]
    assert [(l["id"], l["position"]) for l in section["lectures"]] == [(c, 0), (a, 1), (b, 2)]


def test_reorder_must_list_every_section_once(client, user_factory, course_factory, auth_headers):
    instructor = user_factory(UserRoleEnum.INSTRUCTOR)
    course = course_factory(lectures_per_section=(1, 1), instructor=instructor)
    first_section = course.sections[0].id

    response = client.put(
        f"/courses/{course.id}/sections/reorder", headers=auth_headers(instructor),
        json={"ordered_ids": [first_section, first_section]}
    )
    assert_error(response, 400, "BAD_REQUEST", "exactly once")

    response = client.put(
        f"/courses/{course.id}/sections/reorder", headers=auth_headers(instructor), json={"ordered_ids": []}
    )
    assert_error(response, 400, "VALIDATION_ERROR")


def test_only_owner_can_restructure_course(client, user_factory, course_factory, auth_headers):
    course = course_factory(lectures_per_section=(1,))
    other_headers = auth_headers(user_factory(UserRoleEnum.INSTRUCTOR))
    section_id = course.sections[0].id

    assert_error(client.delete(f"/courses/{course.id}/sections/{section_id}", headers=other_headers), 403, "FORBIDDEN")
    assert_error(
        client.put(f"/courses/{course.id}/sections/reorder", headers=other_headers, json={"ordered_ids": [section_id]}),
        403, "FORBIDDEN"
    )


def test_delete_course_without_enrollments(client, user_factory, course_factory, auth_headers):
    instructor = user_factory(UserRoleEnum.INSTRUCTOR)
    course = course_factory(lectures_per_section=(2,), instructor=instructor)
    headers = auth_headers(instructor)

    assert client.delete(f"/courses/{course.id}", headers=headers).status_code == 204

    assert_error(client.get(f"/courses/{course.id}", headers=headers), 404, "NOT_FOUND")


def test_delete_course_with_enrollments_is_rejected(client, user_factory, course_factory, enroll, auth_headers):
    instructor = user_factory(UserRoleEnum.INSTRUCTOR)
    course = course_factory(instructor=instructor)
    enroll(user_factory(UserRoleEnum.LEARNER), course)

    response = client.delete(f"/courses/{course.id}", headers=auth_headers(instructor))

    assert_error(response, 400, "BAD_REQUEST", "Archive it instead")


def test_health(client):
    assert client.get("/health").json()["status"] == "ok"

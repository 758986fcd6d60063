from app.core.constants import CourseStatusEnum, UserRoleEnum
from tests.helpers.asserts import api_call, assert_error


def test_enroll_in_free_course(client, user_factory, course_factory, auth_headers):
    learner = user_factory(UserRoleEnum.LEARNER)
    course = course_factory(lectures_per_section=(2,))
    headers = auth_headers(learner)

    body = api_call(client, "POST", "/enrollments", headers=headers, json={"course_id": course.id}, expected_status=201)
    assert body["data"]["progress"] == 0
    assert body["data"]["completed_at"] is None

    mine = api_call(client, "GET", "/enrollments/me", headers=headers)["data"]
    assert [e["course_id"] for e in mine] == [course.id]


def test_enroll_twice_conflicts(client, user_factory, course_factory, auth_headers):
    learner = user_factory(UserRoleEnum.LEARNER)
    course = course_factory()
    headers = auth_headers(learner)
    client.post("/enrollments", headers=headers, json={"course_id": course.id})

    response = client.post("/enrollments", headers=headers, json={"course_id": course.id})

    assert_error(response, 409, "CONFLICT", "Already enrolled")


def test_paid_course_requires_payment(client, user_factory, course_factory, auth_headers):
    learner = user_factory(UserRoleEnum.LEARNER)
    course = course_factory(is_free=False, price=49)

    response = client.post("/enrollments", headers=auth_headers(learner), json={"course_id": course.id})

    assert_error(response, 402, "PAYMENT_REQUIRED")


def test_draft_course_is_not_enrollable(client, user_factory, course_factory, auth_headers):
    learner = user_factory(UserRoleEnum.LEARNER)
    course = course_factory(status=CourseStatusEnum.DRAFT)

    response = client.post("/enrollments", headers=auth_headers(learner), json={"course_id": course.id})

    assert_error(response, 404, "NOT_FOUND")


def test_enrollment_requires_authentication(client, course_factory):
    course = course_factory()

    response = client.post("/enrollments", json={"course_id": course.id})

    assert_error(response, 401, "UNAUTHORIZED")

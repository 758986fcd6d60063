from datetime import datetime
from types import SimpleNamespace

import pytest

from app.services.progress import calculate_progress_percent, detect_completion


@pytest.mark.parametrize(
    "completed,total,expected",
    [
        (0, 3, 0),
        (1, 3, 33),
        (2, 3, 67),
        (3, 3, 100),
        (1, 2, 50),
        (1, 8, 13),  # 12.5 rounds half-up
        (5, 8, 63),  # 62.5 rounds half-up
        (0, 0, 0),
    ],
)
def test_calculate_progress_percent(completed, total, expected):
    assert calculate_progress_percent(completed, total) == expected


def test_progress_percent_is_clamped():
    assert calculate_progress_percent(5, 3) == 100
    assert calculate_progress_percent(-1, 3) == 0


def _enrollment(completed_at=None):
    return SimpleNamespace(id=1, completed_at=completed_at)


def test_completion_is_stamped_once_at_100():
    now = datetime(2026, 3, 1, 12, 0)
    enrollment = _enrollment()

    assert detect_completion(enrollment, 67, now) is False
    assert enrollment.completed_at is None

    assert detect_completion(enrollment, 100, now) is True
    assert enrollment.completed_at == now

    later = datetime(2026, 3, 2, 12, 0)
    assert detect_completion(enrollment, 100, later) is False
    assert enrollment.completed_at == now


def test_completion_survives_regression_when_sticky():
    first = datetime(2026, 3, 1, 12, 0)
    enrollment = _enrollment(completed_at=first)

    detect_completion(enrollment, 50, datetime(2026, 3, 5), sticky=True)

    assert enrollment.completed_at == first


def test_completion_cleared_on_regression_when_not_sticky():
    enrollment = _enrollment(completed_at=datetime(2026, 3, 1, 12, 0))

    detect_completion(enrollment, 50, datetime(2026, 3, 5), sticky=False)

    assert enrollment.completed_at is None


def test_completion_kept_when_certificate_issued_even_if_not_sticky():
    first = datetime(2026, 3, 1, 12, 0)
    enrollment = _enrollment(completed_at=first)

    detect_completion(enrollment, 50, datetime(2026, 3, 5), sticky=False, has_certificate=True)

    assert enrollment.completed_at == first

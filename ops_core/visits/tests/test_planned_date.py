from datetime import date, timedelta

import pytest
from django.core.exceptions import ValidationError

from ops_core.visits.validators import validate_planned_date

TODAY = date(2025, 3, 10)


def test_yesterday_is_rejected():
    with pytest.raises(ValidationError) as exc:
        validate_planned_date(TODAY - timedelta(days=1), today=TODAY)
    assert exc.value.code == "planned_date_in_past"


def test_today_is_accepted():
    validate_planned_date(TODAY, today=TODAY)


def test_a_week_ahead_is_accepted():
    validate_planned_date(TODAY + timedelta(days=7), today=TODAY)


def test_defaults_to_local_date():
    with pytest.raises(ValidationError):
        validate_planned_date(date(2000, 1, 1))


def test_setting_allows_past_dates(settings):
    settings.VISITS_ALLOW_PAST_PLANNED_DATE = True
    validate_planned_date(TODAY - timedelta(days=30), today=TODAY)

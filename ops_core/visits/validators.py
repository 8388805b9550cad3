# backend/ops_core/visits/validators.py
from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional

from django.conf import settings
from django.core.exceptions import ValidationError
from django.utils import timezone

from ops_core.visits.models import VisitOutcome, VisitType


def validate_planned_date(planned_date: date, *, today: Optional[date] = None) -> None:
    """
    A visit cannot be planned for a day that has already passed.
    Today is allowed. VISITS_ALLOW_PAST_PLANNED_DATE turns the check off
    (backfilling historic data).
    """
    if getattr(settings, "VISITS_ALLOW_PAST_PLANNED_DATE", False):
        return

    today = today or timezone.localdate()
    if planned_date < today:
        raise ValidationError(
            "Planned date cannot be in the past.",
            code="planned_date_in_past",
        )


def validate_visit_type(value: str) -> None:
    if value not in VisitType.values:
        raise ValidationError(
            f"Invalid visit type '{value}'. Allowed: {', '.join(VisitType.values)}.",
            code="invalid_visit_type",
        )


def validate_outcome(value: str) -> None:
    if value not in VisitOutcome.values:
        raise ValidationError(
            f"Invalid outcome '{value}'. Allowed: {', '.join(VisitOutcome.values)}.",
            code="invalid_outcome",
        )


def validate_coordinates(latitude: Optional[Decimal], longitude: Optional[Decimal]) -> None:
    if (latitude is None) != (longitude is None):
        raise ValidationError("Latitude and longitude must be provided together.", code="invalid_location")
    if latitude is None:
        return
    if not Decimal("-90") <= Decimal(latitude) <= Decimal("90"):
        raise ValidationError("Latitude must be between -90 and 90.", code="invalid_location")
    if not Decimal("-180") <= Decimal(longitude) <= Decimal("180"):
        raise ValidationError("Longitude must be between -180 and 180.", code="invalid_location")

# backend/ops_core/visits/services.py

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, time, timedelta
from decimal import Decimal
from typing import Any, Iterable, Mapping, Optional
from uuid import UUID

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from ops_core.audit.services import AuditService
from ops_core.common.permissions import is_admin
from ops_core.common.sanitize import sanitize_list, sanitize_text
from ops_core.customers.models import Customer
from ops_core.customers.selectors import customer_in_tenant
from ops_core.iam.services.membership import assigned_rep_ids, is_sales_rep_of_tenant
from ops_core.visits.models import Visit, VisitStatus, VisitType
from ops_core.visits.transitions import InvalidStatusTransitionError, assert_transition
from ops_core.visits.validators import (
    validate_coordinates,
    validate_outcome,
    validate_planned_date,
    validate_visit_type,
)

logger = logging.getLogger(__name__)

# Coordinate columns hold 8 decimal places.
_COORD_PLACES = Decimal("0.00000001")


@dataclass(frozen=True)
class Location:
    latitude: Decimal
    longitude: Decimal

    @classmethod
    def from_values(cls, latitude, longitude) -> Optional["Location"]:
        """
        None when neither coordinate was sent.
        """
        if latitude is None and longitude is None:
            return None
        lat = Decimal(str(latitude)).quantize(_COORD_PLACES) if latitude is not None else None
        lon = Decimal(str(longitude)).quantize(_COORD_PLACES) if longitude is not None else None
        validate_coordinates(lat, lon)
        return cls(latitude=lat, longitude=lon)


class VisitService:
    """
    Visit write-model operations.

    Notes:
    - Lifecycle: planned -> in_progress -> completed, planned/in_progress -> cancelled,
      planned -> missed. Guard lives in ops_core.visits.transitions.
    - Every mutation locks the row, checks the guard, then writes status, dependent
      fields and the audit event in one transaction.
    """

    UPDATABLE_FIELDS = frozenset({"planned_date", "planned_time", "notes", "tags", "visit_type"})

    # -------------------------
    # Internal helpers
    # -------------------------
    @staticmethod
    def _get_locked(*, tenant_id: UUID, visit_id: UUID) -> Visit:
        return Visit.objects.select_for_update().get(id=visit_id, tenant_id=tenant_id)

    @staticmethod
    def _guard(visit: Visit, to_status: str, *, actor_user_id: Optional[int]) -> str:
        """
        Returns the status the visit is leaving.
        """
        from_status = visit.status
        try:
            assert_transition(from_status, to_status)
        except InvalidStatusTransitionError:
            logger.warning(
                "Rejected visit transition visit=%s tenant=%s %s -> %s actor=%s",
                visit.id,
                visit.tenant_id,
                from_status,
                to_status,
                actor_user_id,
            )
            raise
        return from_status

    @staticmethod
    def _audit(
        visit: Visit,
        event_code: str,
        *,
        actor_user_id: Optional[int],
        metadata: Optional[dict] = None,
    ) -> None:
        AuditService.log(
            event_code=event_code,
            entity_type="Visit",
            entity_id=visit.id,
            tenant_id=visit.tenant_id,
            actor_user_id=actor_user_id,
            metadata=metadata,
        )

    @staticmethod
    def _log_transition(visit: Visit, from_status: str, *, actor_user_id: Optional[int]) -> None:
        logger.info(
            "Visit transition visit=%s tenant=%s %s -> %s actor=%s",
            visit.id,
            visit.tenant_id,
            from_status,
            visit.status,
            actor_user_id,
        )

    @staticmethod
    def _check_customer(*, tenant_id: UUID, customer_id: UUID) -> None:
        if not customer_in_tenant(tenant_id=tenant_id, customer_id=customer_id):
            raise Customer.DoesNotExist("Customer not found in this tenant.")

    @staticmethod
    def _check_assignable_rep(*, tenant_id: UUID, actor_user_id: int, rep_id: int) -> None:
        """
        Only active sales reps of the tenant can own a visit. Non-admins may
        only assign reps they supervise.
        """
        if not is_sales_rep_of_tenant(user_id=rep_id, tenant_id=tenant_id):
            raise ValidationError("Assigned user is not an active sales rep of this tenant.", code="invalid_sales_rep")

        actor = get_user_model().objects.filter(pk=actor_user_id).first()
        if is_admin(actor):
            return
        if rep_id not in assigned_rep_ids(supervisor_id=actor_user_id, tenant_id=tenant_id):
            raise ValidationError("Sales rep is not assigned to you.", code="rep_not_assigned")

    @staticmethod
    def _now_hhmm() -> time:
        return timezone.localtime().time().replace(second=0, microsecond=0)

    # -------------------------
    # Create
    # -------------------------
    @staticmethod
    @transaction.atomic
    def create_visit(
        *,
        tenant_id: UUID,
        actor_user_id: int,
        customer_id: UUID,
        planned_date: date,
        sales_rep_id: Optional[int] = None,
        planned_time: Optional[time] = None,
        visit_type: str = VisitType.SCHEDULED,
        notes: Optional[str] = None,
        tags: Optional[Iterable[str]] = None,
    ) -> Visit:
        """
        Schedule a visit in `planned`.
        Without sales_rep_id the actor owns the visit.
        """
        VisitService._check_customer(tenant_id=tenant_id, customer_id=customer_id)
        validate_planned_date(planned_date)
        validate_visit_type(visit_type)

        rep_id = sales_rep_id or actor_user_id
        if rep_id != actor_user_id:
            VisitService._check_assignable_rep(tenant_id=tenant_id, actor_user_id=actor_user_id, rep_id=rep_id)

        visit = Visit.objects.create(
            tenant_id=tenant_id,
            customer_id=customer_id,
            sales_rep_id=rep_id,
            visit_type=visit_type,
            status=VisitStatus.PLANNED,
            planned_date=planned_date,
            planned_time=planned_time,
            notes=sanitize_text(notes) or None,
            tags=sanitize_list(list(tags)) if tags is not None else [],
        )

        VisitService._audit(
            visit,
            "visit.created",
            actor_user_id=actor_user_id,
            metadata={"status": visit.status, "sales_rep_id": rep_id, "planned_date": planned_date.isoformat()},
        )
        logger.info("Visit created visit=%s tenant=%s rep=%s", visit.id, tenant_id, rep_id)
        return visit

    @staticmethod
    @transaction.atomic
    def create_quick_visit(
        *,
        tenant_id: UUID,
        actor_user_id: int,
        customer_id: UUID,
        outcome: str,
        planned_date: Optional[date] = None,
        planned_time: Optional[time] = None,
        location: Optional[Location] = None,
        photo: Optional[str] = None,
        outcome_notes: Optional[str] = None,
        no_order_reason: Optional[str] = None,
        follow_up_reason: Optional[str] = None,
        follow_up_date: Optional[date] = None,
        follow_up_time: Optional[time] = None,
    ) -> Visit:
        """
        Record an ad-hoc visit that already happened.

        Created directly as `completed`; started/completed are both now and a
        single location (if any) is used for start and end.
        """
        VisitService._check_customer(tenant_id=tenant_id, customer_id=customer_id)
        validate_outcome(outcome)

        ts = timezone.now()
        today = timezone.localdate()
        planned_date = planned_date or today
        validate_planned_date(planned_date, today=today)
        if planned_date > today:
            raise ValidationError("A quick visit cannot be dated in the future.", code="planned_date_in_future")

        photos = sanitize_list([photo]) if photo else []

        visit = Visit.objects.create(
            tenant_id=tenant_id,
            customer_id=customer_id,
            sales_rep_id=actor_user_id,
            visit_type=VisitType.AD_HOC,
            status=VisitStatus.COMPLETED,
            outcome=outcome,
            planned_date=planned_date,
            planned_time=planned_time or VisitService._now_hhmm(),
            started_at=ts,
            completed_at=ts,
            start_latitude=location.latitude if location else None,
            start_longitude=location.longitude if location else None,
            end_latitude=location.latitude if location else None,
            end_longitude=location.longitude if location else None,
            photos=photos,
            outcome_notes=sanitize_text(outcome_notes) or None,
            no_order_reason=sanitize_text(no_order_reason) or None,
            follow_up_reason=sanitize_text(follow_up_reason) or None,
            follow_up_date=follow_up_date,
            follow_up_time=follow_up_time,
        )

        VisitService._audit(
            visit,
            "visit.quick_recorded",
            actor_user_id=actor_user_id,
            metadata={"status": visit.status, "outcome": outcome},
        )
        logger.info("Quick visit recorded visit=%s tenant=%s outcome=%s", visit.id, tenant_id, outcome)
        return visit

    # -------------------------
    # Workflow
    # planned -> in_progress -> completed
    # planned/in_progress -> cancelled
    # -------------------------
    @staticmethod
    @transaction.atomic
    def start_visit(
        *,
        tenant_id: UUID,
        visit_id: UUID,
        actor_user_id: Optional[int] = None,
        location: Optional[Location] = None,
    ) -> Visit:
        visit = VisitService._get_locked(tenant_id=tenant_id, visit_id=visit_id)
        from_status = VisitService._guard(visit, VisitStatus.IN_PROGRESS, actor_user_id=actor_user_id)

        visit.status = VisitStatus.IN_PROGRESS
        visit.started_at = timezone.now()
        if location is not None:
            visit.start_latitude = location.latitude
            visit.start_longitude = location.longitude

        visit.save(update_fields=["status", "started_at", "start_latitude", "start_longitude", "updated_at"])

        VisitService._audit(
            visit,
            "visit.started",
            actor_user_id=actor_user_id,
            metadata={"from": from_status, "to": visit.status},
        )
        VisitService._log_transition(visit, from_status, actor_user_id=actor_user_id)
        return visit

    @staticmethod
    @transaction.atomic
    def complete_visit(
        *,
        tenant_id: UUID,
        visit_id: UUID,
        outcome: str,
        actor_user_id: Optional[int] = None,
        location: Optional[Location] = None,
        outcome_notes: Optional[str] = None,
        photos: Optional[list[str]] = None,
        order_id: Optional[UUID] = None,
        no_order_reason: Optional[str] = None,
        follow_up_reason: Optional[str] = None,
        follow_up_date: Optional[date] = None,
        follow_up_time: Optional[time] = None,
    ) -> Visit:
        visit = VisitService._get_locked(tenant_id=tenant_id, visit_id=visit_id)
        from_status = VisitService._guard(visit, VisitStatus.COMPLETED, actor_user_id=actor_user_id)
        validate_outcome(outcome)

        visit.status = VisitStatus.COMPLETED
        visit.completed_at = timezone.now()
        visit.outcome = outcome
        visit.outcome_notes = sanitize_text(outcome_notes) or None
        if photos is not None:
            visit.photos = sanitize_list(photos)
        visit.order_id = order_id
        visit.no_order_reason = sanitize_text(no_order_reason) or None
        visit.follow_up_reason = sanitize_text(follow_up_reason) or None
        visit.follow_up_date = follow_up_date
        visit.follow_up_time = follow_up_time
        if location is not None:
            visit.end_latitude = location.latitude
            visit.end_longitude = location.longitude

        visit.save(
            update_fields=[
                "status",
                "completed_at",
                "outcome",
                "outcome_notes",
                "photos",
                "order_id",
                "no_order_reason",
                "follow_up_reason",
                "follow_up_date",
                "follow_up_time",
                "end_latitude",
                "end_longitude",
                "updated_at",
            ]
        )

        VisitService._audit(
            visit,
            "visit.completed",
            actor_user_id=actor_user_id,
            metadata={"from": from_status, "to": visit.status, "outcome": outcome},
        )
        VisitService._log_transition(visit, from_status, actor_user_id=actor_user_id)
        return visit

    @staticmethod
    @transaction.atomic
    def cancel_visit(
        *,
        tenant_id: UUID,
        visit_id: UUID,
        actor_user_id: Optional[int] = None,
        reason: Optional[str] = None,
    ) -> Visit:
        """
        planned/in_progress -> cancelled.
        A cancelled visit cannot be cancelled again (same transition error).
        """
        visit = VisitService._get_locked(tenant_id=tenant_id, visit_id=visit_id)
        from_status = VisitService._guard(visit, VisitStatus.CANCELLED, actor_user_id=actor_user_id)

        visit.status = VisitStatus.CANCELLED
        visit.cancel_reason = sanitize_text(reason) or None
        visit.save(update_fields=["status", "cancel_reason", "updated_at"])

        VisitService._audit(
            visit,
            "visit.cancelled",
            actor_user_id=actor_user_id,
            metadata={"from": from_status, "to": visit.status, "reason": visit.cancel_reason},
        )
        VisitService._log_transition(visit, from_status, actor_user_id=actor_user_id)
        return visit

    @staticmethod
    @transaction.atomic
    def update_visit(
        *,
        tenant_id: UUID,
        visit_id: UUID,
        changes: Mapping[str, Any],
        actor_user_id: Optional[int] = None,
    ) -> Visit:
        """
        Reschedule / edit a visit that has not started yet.

        `changes` holds only the fields the caller sent; notes=None clears notes.
        """
        unknown = set(changes) - VisitService.UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Fields cannot be updated: {', '.join(sorted(unknown))}.")

        visit = VisitService._get_locked(tenant_id=tenant_id, visit_id=visit_id)
        if visit.status != VisitStatus.PLANNED:
            logger.warning(
                "Rejected visit update visit=%s tenant=%s status=%s actor=%s",
                visit.id,
                visit.tenant_id,
                visit.status,
                actor_user_id,
            )
            raise InvalidStatusTransitionError(
                visit.status,
                visit.status,
                message=f"Only planned visits can be updated (current status '{visit.status}').",
            )

        update_fields: list[str] = []

        if "planned_date" in changes:
            planned_date = changes["planned_date"]
            if planned_date is None:
                raise ValidationError("Planned date is required.")
            validate_planned_date(planned_date)
            visit.planned_date = planned_date
            update_fields.append("planned_date")

        if "planned_time" in changes:
            visit.planned_time = changes["planned_time"]
            update_fields.append("planned_time")

        if "visit_type" in changes:
            validate_visit_type(changes["visit_type"])
            visit.visit_type = changes["visit_type"]
            update_fields.append("visit_type")

        if "notes" in changes:
            visit.notes = sanitize_text(changes["notes"]) or None
            update_fields.append("notes")

        if "tags" in changes:
            tags = changes["tags"]
            visit.tags = sanitize_list(list(tags)) if tags is not None else []
            update_fields.append("tags")

        if not update_fields:
            return visit

        update_fields.append("updated_at")
        visit.save(update_fields=update_fields)

        VisitService._audit(
            visit,
            "visit.updated",
            actor_user_id=actor_user_id,
            metadata={"fields": [f for f in update_fields if f != "updated_at"]},
        )
        return visit

    # -------------------------
    # Sweep
    # -------------------------
    @staticmethod
    @transaction.atomic
    def mark_missed(
        *,
        tenant_id: Optional[UUID] = None,
        as_of: Optional[date] = None,
        actor_user_id: Optional[int] = None,
    ) -> int:
        """
        planned visits dated before `as_of` (default today) -> missed.
        tenant_id=None sweeps every tenant. Returns how many were marked.
        """
        today = timezone.localdate()
        as_of = as_of or today
        if as_of > today:
            raise ValidationError("as_of cannot be in the future.", code="as_of_in_future")
        cutoff = as_of - timedelta(days=1)

        qs = Visit.objects.select_for_update().filter(
            status=VisitStatus.PLANNED,
            planned_date__lte=cutoff,
        )
        if tenant_id is not None:
            qs = qs.filter(tenant_id=tenant_id)

        count = 0
        for visit in qs.order_by("planned_date"):
            from_status = VisitService._guard(visit, VisitStatus.MISSED, actor_user_id=actor_user_id)
            visit.status = VisitStatus.MISSED
            visit.save(update_fields=["status", "updated_at"])

            VisitService._audit(
                visit,
                "visit.missed",
                actor_user_id=actor_user_id,
                metadata={"from": from_status, "to": visit.status, "as_of": as_of.isoformat()},
            )
            count += 1

        logger.info("Marked %s planned visit(s) as missed tenant=%s as_of=%s", count, tenant_id or "*", as_of)
        return count

# backend/ops_core/visits/selectors.py
from __future__ import annotations

from datetime import date, timedelta
from typing import Any
from uuid import UUID

from django.core.exceptions import ValidationError
from django.db.models import Count, Q, QuerySet

from ops_core.common.permissions import ADMIN_ROLES, ROLE_SALES_REP, ROLE_SUPERVISOR, user_roles
from ops_core.iam.services.membership import assigned_rep_ids
from ops_core.visits.filters import VisitFilter
from ops_core.visits.models import Visit, VisitOutcome, VisitStatus


class VisitSelector:
    class NotFound(Exception):
        pass

    @staticmethod
    def get_visit(*, tenant_id: UUID, visit_id: UUID) -> Visit:
        try:
            return Visit.objects.select_related("customer").get(id=visit_id, tenant_id=tenant_id)
        except (Visit.DoesNotExist, ValidationError):
            # malformed ids are just as absent as unknown ones
            raise VisitSelector.NotFound()

    @staticmethod
    def visible_visits(*, tenant_id: UUID, user) -> QuerySet[Visit]:
        """
        Role visibility inside a tenant:
        - admins: every visit
        - supervisor: visits of reps whose profile names them as supervisor
        - sales rep: own visits
        - anyone else: nothing
        """
        qs = Visit.objects.filter(tenant_id=tenant_id).select_related("customer")
        roles = user_roles(user)

        if roles & ADMIN_ROLES:
            return qs

        cond = Q()
        if ROLE_SUPERVISOR in roles:
            rep_ids = assigned_rep_ids(supervisor_id=user.id, tenant_id=tenant_id)
            if rep_ids:
                cond |= Q(sales_rep_id__in=rep_ids)
        if ROLE_SALES_REP in roles:
            cond |= Q(sales_rep_id=user.id)

        if not cond:
            return qs.none()
        return qs.filter(cond)

    @staticmethod
    def list_visits(*, tenant_id: UUID, user, params: Any) -> QuerySet[Visit]:
        f = VisitFilter(params, queryset=VisitSelector.visible_visits(tenant_id=tenant_id, user=user))
        if not f.is_valid():
            raise ValidationError(
                "; ".join(f"{field}: {' '.join(str(m) for m in msgs)}" for field, msgs in f.errors.items())
            )
        return f.qs.order_by("-planned_date", "-created_at")

    @staticmethod
    def today_visits(*, tenant_id: UUID, user, day: date) -> tuple[list[Visit], dict[str, int]]:
        qs = VisitSelector.visible_visits(tenant_id=tenant_id, user=user).filter(planned_date=day)
        visits = list(qs.order_by("planned_time", "created_at"))

        stats = {
            "total": len(visits),
            "completed": sum(1 for v in visits if v.status == VisitStatus.COMPLETED),
            "in_progress": sum(1 for v in visits if v.status == VisitStatus.IN_PROGRESS),
            "planned": sum(1 for v in visits if v.status == VisitStatus.PLANNED),
        }
        return visits, stats

    @staticmethod
    def visit_stats(*, tenant_id: UUID, user, today: date) -> dict[str, dict[str, int]]:
        """
        Dashboard counters. The week runs Monday..Sunday around `today`.
        """
        qs = VisitSelector.visible_visits(tenant_id=tenant_id, user=user)

        week_start = today - timedelta(days=today.weekday())
        week_end = week_start + timedelta(days=6)

        today_counts = qs.filter(planned_date=today).aggregate(
            total=Count("id"),
            completed=Count("id", filter=Q(status=VisitStatus.COMPLETED)),
            in_progress=Count("id", filter=Q(status=VisitStatus.IN_PROGRESS)),
        )
        week_counts = qs.filter(planned_date__gte=week_start, planned_date__lte=week_end).aggregate(
            total=Count("id"),
            completed=Count("id", filter=Q(status=VisitStatus.COMPLETED)),
            orders_placed=Count("id", filter=Q(outcome=VisitOutcome.ORDER_PLACED)),
        )
        return {"today": today_counts, "week": week_counts}

    @staticmethod
    def follow_up_summary(*, tenant_id: UUID, user, today: date, top: int = 5) -> dict[str, Any]:
        qs = VisitSelector.visible_visits(tenant_id=tenant_id, user=user).filter(
            outcome=VisitOutcome.FOLLOW_UP,
        )

        counts = qs.aggregate(
            due_today=Count("id", filter=Q(follow_up_date=today)),
            overdue=Count("id", filter=Q(follow_up_date__lt=today)),
            upcoming=Count("id", filter=Q(follow_up_date__gt=today)),
        )

        top_due = qs.filter(follow_up_date__lte=today).order_by("follow_up_date", "created_at")[:top]
        counts["top_due"] = [
            {
                "id": v.id,
                "customer_id": v.customer_id,
                "customer_name": v.customer.name,
                "follow_up_date": v.follow_up_date,
            }
            for v in top_due
        ]
        return counts

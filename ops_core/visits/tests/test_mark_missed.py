from datetime import timedelta
from io import StringIO

import pytest
from django.core.exceptions import ValidationError
from django.core.management import call_command
from django.core.management.base import CommandError

from ops_core.audit.models import AuditEvent
from ops_core.visits.models import VisitStatus
from ops_core.visits.services import VisitService

pytestmark = pytest.mark.django_db


def test_only_past_planned_visits_are_marked(make_visit, today):
    stale = make_visit(planned_date=today - timedelta(days=2))
    due_today = make_visit(planned_date=today)
    started = make_visit(planned_date=today - timedelta(days=2), status=VisitStatus.IN_PROGRESS)

    assert VisitService.mark_missed(as_of=today) == 1

    stale.refresh_from_db()
    due_today.refresh_from_db()
    started.refresh_from_db()
    assert stale.status == VisitStatus.MISSED
    assert due_today.status == VisitStatus.PLANNED
    assert started.status == VisitStatus.IN_PROGRESS

    event = AuditEvent.objects.get(entity_id=stale.id, event_code="visit.missed")
    assert event.metadata["from"] == VisitStatus.PLANNED


def test_running_twice_marks_nothing_new(make_visit, today):
    make_visit(planned_date=today - timedelta(days=1))

    assert VisitService.mark_missed(as_of=today) == 1
    assert VisitService.mark_missed(as_of=today) == 0


def test_command_respects_tenant_filter(make_visit, tenant, other_tenant, other_customer, foreign_rep, today):
    ours = make_visit(planned_date=today - timedelta(days=1))
    theirs = make_visit(
        tenant_id=other_tenant.id,
        customer=other_customer,
        sales_rep=foreign_rep,
        planned_date=today - timedelta(days=1),
    )

    out = StringIO()
    call_command("mark_missed_visits", "--tenant-id", str(tenant.id), stdout=out)

    assert "Marked as missed: 1" in out.getvalue()
    ours.refresh_from_db()
    theirs.refresh_from_db()
    assert ours.status == VisitStatus.MISSED
    assert theirs.status == VisitStatus.PLANNED


def test_command_as_of(make_visit, today):
    old = make_visit(planned_date=today - timedelta(days=3))
    recent = make_visit(planned_date=today - timedelta(days=1))

    out = StringIO()
    call_command("mark_missed_visits", "--as-of", (today - timedelta(days=2)).isoformat(), stdout=out)

    assert "Marked as missed: 1" in out.getvalue()
    old.refresh_from_db()
    recent.refresh_from_db()
    assert old.status == VisitStatus.MISSED
    assert recent.status == VisitStatus.PLANNED


def test_future_as_of_is_rejected(make_visit, today):
    upcoming = make_visit(planned_date=today + timedelta(days=5))

    with pytest.raises(ValidationError):
        VisitService.mark_missed(as_of=today + timedelta(days=30))
    with pytest.raises(CommandError):
        call_command("mark_missed_visits", "--as-of", (today + timedelta(days=30)).isoformat(), stdout=StringIO())

    upcoming.refresh_from_db()
    assert upcoming.status == VisitStatus.PLANNED


@pytest.mark.parametrize(
    "args",
    [
        ["--tenant-id", "nope"],
        ["--as-of", "yesterday"],
        ["--as-of", "2025-02-30"],
    ],
)
def test_command_rejects_bad_arguments(args):
    with pytest.raises(CommandError):
        call_command("mark_missed_visits", *args, stdout=StringIO())

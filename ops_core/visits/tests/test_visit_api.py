from datetime import timedelta

import pytest
from rest_framework.test import APIClient

from ops_core.iam.models import UserRole
from ops_core.tests.helpers import make_user, scoped
from ops_core.visits.models import Visit, VisitOutcome, VisitStatus

pytestmark = pytest.mark.django_db

BASE = "/api/v1/visits/"


def detail_url(visit, action=None):
    url = f"{BASE}{visit.id}/"
    return f"{url}{action}/" if action else url


def assert_error(resp, status_code, code):
    assert resp.status_code == status_code, resp.content
    body = resp.json()
    assert body["error"]["code"] == code
    assert body["error"]["request_id"]
    return body["error"]


# ----------------------------
# Create
# ----------------------------
def test_rep_creates_visit_owned_by_themselves(client_for, tenant, customer, sales_rep, other_rep, today):
    resp = client_for(sales_rep).post(
        BASE,
        {
            "customer_id": str(customer.id),
            "planned_date": (today + timedelta(days=7)).isoformat(),
            "sales_rep_id": other_rep.id,
            "notes": "intro\x07 ",
        },
        format="json",
        **scoped(tenant),
    )

    assert resp.status_code == 201, resp.content
    body = resp.json()
    assert body["status"] == VisitStatus.PLANNED
    assert body["sales_rep_id"] == sales_rep.id
    assert body["customer_name"] == customer.name
    assert body["notes"] == "intro"


def test_supervisor_assigns_visit_to_rep(client_for, tenant, customer, supervisor, sales_rep, today):
    resp = client_for(supervisor).post(
        BASE,
        {"customer_id": str(customer.id), "planned_date": today.isoformat(), "sales_rep_id": sales_rep.id},
        format="json",
        **scoped(tenant),
    )
    assert resp.status_code == 201, resp.content
    assert resp.json()["sales_rep_id"] == sales_rep.id


def test_create_with_past_planned_date_is_validation_error(client_for, tenant, customer, sales_rep, today):
    resp = client_for(sales_rep).post(
        BASE,
        {"customer_id": str(customer.id), "planned_date": (today - timedelta(days=1)).isoformat()},
        format="json",
        **scoped(tenant),
    )
    err = assert_error(resp, 400, "validation_error")
    assert "past" in err["message"]
    assert not Visit.objects.exists()


def test_create_for_unknown_customer_is_not_found(client_for, tenant, other_customer, sales_rep, today):
    resp = client_for(sales_rep).post(
        BASE,
        {"customer_id": str(other_customer.id), "planned_date": today.isoformat()},
        format="json",
        **scoped(tenant),
    )
    assert_error(resp, 404, "not_found")


def test_quick_visit(client_for, tenant, customer, sales_rep):
    resp = client_for(sales_rep).post(
        f"{BASE}quick/",
        {
            "customer_id": str(customer.id),
            "outcome": VisitOutcome.NO_ORDER,
            "no_order_reason": "stock full",
            "latitude": 41.3,
            "longitude": 69.2,
        },
        format="json",
        **scoped(tenant),
    )
    assert resp.status_code == 201, resp.content
    body = resp.json()
    assert body["status"] == VisitStatus.COMPLETED
    assert body["visit_type"] == "ad_hoc"
    assert body["no_order_reason"] == "stock full"


# ----------------------------
# Workflow
# ----------------------------
def test_full_lifecycle_and_repeat_start_rejected(client_for, tenant, planned_visit, sales_rep):
    c = client_for(sales_rep)
    h = scoped(tenant)

    resp = c.post(detail_url(planned_visit, "start"), {"latitude": 41.0, "longitude": 69.0}, format="json", **h)
    assert resp.status_code == 200, resp.content
    assert resp.json()["status"] == VisitStatus.IN_PROGRESS
    assert resp.json()["started_at"] is not None

    resp = c.post(detail_url(planned_visit, "start"), {}, format="json", **h)
    err = assert_error(resp, 400, "invalid_status_transition")
    assert "in_progress" in err["message"]

    resp = c.post(
        detail_url(planned_visit, "complete"),
        {"outcome": VisitOutcome.ORDER_PLACED, "photos": ["p1.jpg"]},
        format="json",
        **h,
    )
    assert resp.status_code == 200, resp.content
    assert resp.json()["status"] == VisitStatus.COMPLETED
    assert resp.json()["photos"] == ["p1.jpg"]

    resp = c.post(detail_url(planned_visit, "cancel"), {"reason": "too late"}, format="json", **h)
    assert_error(resp, 400, "invalid_status_transition")

    planned_visit.refresh_from_db()
    assert planned_visit.status == VisitStatus.COMPLETED


def test_double_cancel_second_call_fails(client_for, tenant, planned_visit, sales_rep):
    c = client_for(sales_rep)
    h = scoped(tenant)

    resp = c.post(detail_url(planned_visit, "cancel"), {"reason": "closed"}, format="json", **h)
    assert resp.status_code == 200
    assert resp.json()["cancel_reason"] == "closed"

    resp = c.post(detail_url(planned_visit, "cancel"), {"reason": "again"}, format="json", **h)
    assert_error(resp, 400, "invalid_status_transition")


def test_start_with_half_a_location_is_rejected(client_for, tenant, planned_visit, sales_rep):
    resp = client_for(sales_rep).post(
        detail_url(planned_visit, "start"),
        {"latitude": 41.0},
        format="json",
        **scoped(tenant),
    )
    assert_error(resp, 400, "validation_error")

    planned_visit.refresh_from_db()
    assert planned_visit.status == VisitStatus.PLANNED


def test_start_with_out_of_range_latitude_is_rejected(client_for, tenant, planned_visit, sales_rep):
    resp = client_for(sales_rep).post(
        detail_url(planned_visit, "start"),
        {"latitude": 95.0, "longitude": 10.0},
        format="json",
        **scoped(tenant),
    )
    assert_error(resp, 400, "validation_error")


def test_patch_updates_planned_visit_only(client_for, tenant, make_visit, sales_rep, today):
    c = client_for(sales_rep)
    h = scoped(tenant)
    visit = make_visit()

    resp = c.patch(
        detail_url(visit),
        {"notes": "bring\x1f catalogue", "planned_date": (today + timedelta(days=3)).isoformat()},
        format="json",
        **h,
    )
    assert resp.status_code == 200, resp.content
    assert resp.json()["notes"] == "bring catalogue"

    started = make_visit(status=VisitStatus.IN_PROGRESS)
    resp = c.patch(detail_url(started), {"notes": "x"}, format="json", **h)
    assert_error(resp, 400, "invalid_status_transition")


# ----------------------------
# Permissions
# ----------------------------
def test_rep_cannot_touch_another_reps_visit(client_for, tenant, make_visit, sales_rep, other_rep):
    visit = make_visit(sales_rep=other_rep)

    resp = client_for(sales_rep).post(detail_url(visit, "start"), {}, format="json", **scoped(tenant))
    assert_error(resp, 403, "permission_denied")

    resp = client_for(sales_rep).get(detail_url(visit), **scoped(tenant))
    assert_error(resp, 403, "permission_denied")


def test_supervisor_acts_only_on_assigned_reps(client_for, tenant, make_visit, supervisor, sales_rep, other_rep):
    assigned = make_visit(sales_rep=sales_rep)
    unassigned = make_visit(sales_rep=other_rep)
    c = client_for(supervisor)
    h = scoped(tenant)

    resp = c.post(detail_url(assigned, "start"), {}, format="json", **h)
    assert resp.status_code == 200

    resp = c.post(detail_url(unassigned, "start"), {}, format="json", **h)
    assert_error(resp, 403, "permission_denied")


def test_tenant_admin_can_act_on_any_visit(client_for, tenant, make_visit, tenant_admin, other_rep):
    visit = make_visit(sales_rep=other_rep)
    resp = client_for(tenant_admin).post(detail_url(visit, "cancel"), {}, format="json", **scoped(tenant))
    assert resp.status_code == 200


def test_warehouse_role_has_no_visit_access(client_for, tenant, warehouse_user):
    resp = client_for(warehouse_user).get(BASE, **scoped(tenant))
    assert_error(resp, 403, "permission_denied")


def test_mark_missed_requires_supervising_role(client_for, tenant, make_visit, sales_rep, supervisor, today):
    stale = make_visit(planned_date=today - timedelta(days=2))
    h = scoped(tenant)

    resp = client_for(sales_rep).post(f"{BASE}mark-missed/", {}, format="json", **h)
    assert_error(resp, 403, "permission_denied")

    resp = client_for(supervisor).post(f"{BASE}mark-missed/", {}, format="json", **h)
    assert resp.status_code == 200, resp.content
    assert resp.json() == {"marked_as_missed": 1}

    stale.refresh_from_db()
    assert stale.status == VisitStatus.MISSED


def test_mark_missed_rejects_future_as_of(client_for, tenant, make_visit, supervisor, today):
    upcoming = make_visit(planned_date=today + timedelta(days=5))

    resp = client_for(supervisor).post(
        f"{BASE}mark-missed/",
        {"as_of": (today + timedelta(days=30)).isoformat()},
        format="json",
        **scoped(tenant),
    )
    assert_error(resp, 400, "validation_error")

    upcoming.refresh_from_db()
    assert upcoming.status == VisitStatus.PLANNED


def test_supervisor_cannot_assign_unsupervised_rep(client_for, tenant, customer, supervisor, other_rep, today):
    resp = client_for(supervisor).post(
        BASE,
        {"customer_id": str(customer.id), "planned_date": today.isoformat(), "sales_rep_id": other_rep.id},
        format="json",
        **scoped(tenant),
    )
    assert_error(resp, 400, "validation_error")
    assert not Visit.objects.exists()


# ----------------------------
# Scope + envelope
# ----------------------------
def test_missing_scope_header(client_for, sales_rep):
    resp = client_for(sales_rep).get(BASE)
    err = assert_error(resp, 400, "validation_error")
    assert "Missing scope header" in err["message"]


def test_scope_of_foreign_tenant_is_forbidden(client_for, other_tenant, sales_rep):
    resp = client_for(sales_rep).get(BASE, **scoped(other_tenant))
    assert_error(resp, 403, "permission_denied")


def test_suspended_tenant_is_forbidden(client_for, suspended_tenant):
    rep = make_user("rep-suspended", tenant=suspended_tenant, role=UserRole.SALES_REP)
    resp = client_for(rep).get(BASE, **scoped(suspended_tenant))
    assert_error(resp, 403, "permission_denied")


def test_unknown_visit_is_not_found(client_for, tenant, sales_rep):
    resp = client_for(sales_rep).get(f"{BASE}00000000-0000-0000-0000-000000000000/", **scoped(tenant))
    assert_error(resp, 404, "not_found")


def test_unauthenticated_request(tenant):
    resp = APIClient().get(BASE, **scoped(tenant))
    assert_error(resp, 401, "not_authenticated")


# ----------------------------
# Reads
# ----------------------------
def test_list_is_paginated_and_filtered(client_for, tenant, make_visit, sales_rep):
    make_visit()
    make_visit(status=VisitStatus.CANCELLED)

    resp = client_for(sales_rep).get(BASE, {"status": "cancelled"}, **scoped(tenant))
    assert resp.status_code == 200
    body = resp.json()
    assert set(body) == {"count", "next", "previous", "results"}
    assert body["count"] == 1
    assert body["results"][0]["status"] == VisitStatus.CANCELLED


def test_list_with_invalid_filter(client_for, tenant, sales_rep):
    resp = client_for(sales_rep).get(BASE, {"start_date": "yesterday"}, **scoped(tenant))
    assert_error(resp, 400, "validation_error")


def test_today_stats_and_followups(client_for, tenant, make_visit, sales_rep, today):
    make_visit(planned_date=today)
    make_visit(
        planned_date=today,
        status=VisitStatus.COMPLETED,
        outcome=VisitOutcome.FOLLOW_UP,
        follow_up_date=today,
    )
    c = client_for(sales_rep)
    h = scoped(tenant)

    resp = c.get(f"{BASE}today/", **h)
    assert resp.status_code == 200
    assert resp.json()["stats"] == {"total": 2, "completed": 1, "in_progress": 0, "planned": 1}

    resp = c.get(f"{BASE}stats/", **h)
    assert resp.status_code == 200
    assert resp.json()["today"]["total"] == 2

    resp = c.get(f"{BASE}followups/summary/", **h)
    assert resp.status_code == 200
    assert resp.json()["due_today"] == 1
    assert len(resp.json()["top_due"]) == 1

    resp = c.get(f"{BASE}today/", {"date": "2025-02-30"}, **h)
    assert_error(resp, 400, "validation_error")


# ----------------------------
# JWT
# ----------------------------
def test_bearer_token_flow_applies_scope(tenant, other_tenant, sales_rep, planned_visit):
    c = APIClient()
    resp = c.post("/api/v1/auth/token/", {"username": "rep1", "password": "pass123"}, format="json")
    assert resp.status_code == 200, resp.content
    access = resp.json()["access"]

    c.credentials(HTTP_AUTHORIZATION=f"Bearer {access}")

    resp = c.get(detail_url(planned_visit), **scoped(tenant))
    assert resp.status_code == 200
    assert resp.json()["id"] == str(planned_visit.id)

    resp = c.get(BASE, **scoped(other_tenant))
    assert_error(resp, 403, "permission_denied")

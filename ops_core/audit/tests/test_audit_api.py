import pytest

from ops_core.audit.models import AuditEvent
from ops_core.audit.services import AuditService
from ops_core.tests.helpers import scoped
from ops_core.visits.services import VisitService

pytestmark = pytest.mark.django_db

URL = "/api/v1/audit/events/"


def test_admin_reads_visit_trail(client_for, tenant, tenant_admin, planned_visit, sales_rep):
    VisitService.start_visit(tenant_id=tenant.id, visit_id=planned_visit.id, actor_user_id=sales_rep.id)
    VisitService.cancel_visit(tenant_id=tenant.id, visit_id=planned_visit.id, actor_user_id=sales_rep.id)

    res = client_for(tenant_admin).get(URL, {"entity_id": str(planned_visit.id)}, **scoped(tenant))
    assert res.status_code == 200, res.content

    body = res.json()
    assert body["count"] == 2
    by_code = {row["event_code"]: row for row in body["results"]}
    assert set(by_code) == {"visit.started", "visit.cancelled"}
    assert by_code["visit.cancelled"]["actor_user_id"] == sales_rep.id
    assert by_code["visit.cancelled"]["metadata"]["to"] == "cancelled"


def test_trail_is_tenant_scoped(client_for, tenant, other_tenant, tenant_admin, planned_visit):
    AuditService.log(
        event_code="visit.started",
        entity_type="Visit",
        entity_id=planned_visit.id,
        tenant_id=other_tenant.id,
        actor_user_id=None,
    )

    res = client_for(tenant_admin).get(URL, **scoped(tenant))
    assert res.status_code == 200
    assert res.json()["count"] == 0
    assert AuditEvent.objects.count() == 1


def test_event_code_filter(client_for, tenant, tenant_admin, planned_visit):
    VisitService.start_visit(tenant_id=tenant.id, visit_id=planned_visit.id)

    res = client_for(tenant_admin).get(URL, {"event_code": "visit.completed"}, **scoped(tenant))
    assert res.json()["count"] == 0


def test_bad_entity_id_is_validation_error(client_for, tenant, tenant_admin):
    res = client_for(tenant_admin).get(URL, {"entity_id": "xyz"}, **scoped(tenant))
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "validation_error"


@pytest.mark.parametrize("who", ["sales_rep", "supervisor"])
def test_field_roles_cannot_read_trail(request, client_for, tenant, who):
    user = request.getfixturevalue(who)
    res = client_for(user).get(URL, **scoped(tenant))
    assert res.status_code == 403
    assert res.json()["error"]["code"] == "permission_denied"

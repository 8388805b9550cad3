import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from ops_core.tests.helpers import scoped

pytestmark = pytest.mark.django_db

ME = "/api/v1/me/"


def test_me_requires_auth():
    res = APIClient().get(ME)
    assert res.status_code == 401
    assert res.json()["error"]["code"] == "not_authenticated"


def test_me_without_scope_header(client_for, sales_rep, tenant, supervisor):
    res = client_for(sales_rep).get(ME)
    assert res.status_code == 200

    body = res.json()
    assert body["user"]["id"] == sales_rep.id
    assert body["roles"] == ["SALES_REP"]
    assert body["profile"]["tenant_id"] == str(tenant.id)
    assert body["profile"]["supervisor_id"] == supervisor.id
    assert body["active_scope"] is None


def test_me_with_own_tenant_header(client_for, sales_rep, tenant):
    res = client_for(sales_rep).get(ME, **scoped(tenant))
    assert res.status_code == 200
    assert res.json()["active_scope"] == {"tenant_id": str(tenant.id)}


def test_me_with_foreign_tenant_header_is_forbidden(client_for, sales_rep, other_tenant):
    res = client_for(sales_rep).get(ME, **scoped(other_tenant))
    assert res.status_code == 403
    assert res.json()["error"]["code"] == "permission_denied"


def test_bearer_token_with_foreign_scope_is_blocked(sales_rep, other_tenant):
    """
    force_authenticate skips authentication classes; use a real token so
    ScopedJWTAuthentication enforces the header.
    """
    client = APIClient()
    access = str(RefreshToken.for_user(sales_rep).access_token)
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {access}")

    res = client.get("/api/v1/visits/", **scoped(other_tenant))
    assert res.status_code == 403
    assert res.json()["error"]["code"] == "permission_denied"

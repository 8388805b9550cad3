# ops_core/conftest.py
from datetime import timedelta

import pytest
from django.utils import timezone
from rest_framework.test import APIClient

from ops_core.customers.models import Customer
from ops_core.iam.models import UserRole
from ops_core.tenants.models import Tenant, TenantStatus
from ops_core.tests.helpers import make_user
from ops_core.visits.models import Visit, VisitStatus


@pytest.fixture
def tenant(db):
    return Tenant.objects.create(name="Test Tenant", subdomain="test-tenant")


@pytest.fixture
def other_tenant(db):
    return Tenant.objects.create(name="Other Tenant", subdomain="other-tenant")


@pytest.fixture
def suspended_tenant(db):
    return Tenant.objects.create(name="Suspended", subdomain="suspended", status=TenantStatus.SUSPENDED)


@pytest.fixture
def tenant_admin(tenant):
    return make_user("admin1", tenant=tenant, role=UserRole.TENANT_ADMIN)


@pytest.fixture
def supervisor(tenant):
    return make_user("super1", tenant=tenant, role=UserRole.SUPERVISOR)


@pytest.fixture
def lonely_supervisor(tenant):
    return make_user("super2", tenant=tenant, role=UserRole.SUPERVISOR)


@pytest.fixture
def sales_rep(tenant, supervisor):
    return make_user("rep1", tenant=tenant, role=UserRole.SALES_REP, supervisor=supervisor)


@pytest.fixture
def other_rep(tenant):
    # Same tenant, no supervisor.
    return make_user("rep2", tenant=tenant, role=UserRole.SALES_REP)


@pytest.fixture
def warehouse_user(tenant):
    return make_user("wh1", tenant=tenant, role=UserRole.WAREHOUSE)


@pytest.fixture
def foreign_rep(other_tenant):
    return make_user("rep-other", tenant=other_tenant, role=UserRole.SALES_REP)


@pytest.fixture
def customer(tenant):
    return Customer.objects.create(tenant_id=tenant.id, name="Corner Shop", phone="+998900000000")


@pytest.fixture
def other_customer(other_tenant):
    return Customer.objects.create(tenant_id=other_tenant.id, name="Elsewhere Market")


@pytest.fixture
def today():
    return timezone.localdate()


@pytest.fixture
def make_visit(tenant, customer, sales_rep, today):
    """
    Insert a visit row directly (any status), bypassing the service.
    """

    def _make(**overrides):
        values = {
            "tenant_id": tenant.id,
            "customer": customer,
            "sales_rep": sales_rep,
            "status": VisitStatus.PLANNED,
            "planned_date": today + timedelta(days=1),
        }
        values.update(overrides)
        return Visit.objects.create(**values)

    return _make


@pytest.fixture
def planned_visit(make_visit):
    return make_visit()


@pytest.fixture
def client_for():
    def _client(user):
        c = APIClient()
        c.force_authenticate(user=user)
        return c

    return _client

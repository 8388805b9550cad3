# ops_core/tests/helpers.py
from django.contrib.auth import get_user_model

from ops_core.iam.models import UserProfile


def scoped(tenant):
    """
    Scope header as the DRF test client expects it (HTTP_ prefix).
    """
    return {"HTTP_X_TENANT_ID": str(tenant.id)}


def make_user(username: str, *, tenant=None, role=None, supervisor=None, **extra):
    User = get_user_model()
    user = User.objects.create_user(username=username, password="pass123", **extra)
    if tenant is not None and role is not None:
        UserProfile.objects.create(user=user, tenant=tenant, role=role, supervisor=supervisor)
    return user

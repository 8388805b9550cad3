from io import StringIO

import pytest
from django.contrib.auth.models import Group
from django.core.management import call_command

from ops_core.common.permissions import ALL_ROLES


@pytest.mark.django_db
def test_ensure_roles_is_idempotent():
    out = StringIO()
    call_command("ensure_roles", stdout=out)
    assert f"Newly created: {len(ALL_ROLES)}" in out.getvalue()

    out = StringIO()
    call_command("ensure_roles", stdout=out)
    assert "Newly created: 0" in out.getvalue()

    assert set(Group.objects.values_list("name", flat=True)) == set(ALL_ROLES)

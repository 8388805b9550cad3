import pytest
from django.core.exceptions import ValidationError as DjangoValidationError
from django.test import RequestFactory

from ops_core.common.api.exceptions import (
    InvalidStatusTransition,
    api_exception_handler,
    django_validation_message,
)


def _context():
    return {"request": RequestFactory().get("/api/v1/visits/"), "view": None}


@pytest.mark.django_db
def test_unhandled_error_becomes_server_error_envelope():
    resp = api_exception_handler(RuntimeError("db exploded"), _context())

    assert resp.status_code == 500
    err = resp.data["error"]
    assert err["code"] == "server_error"
    assert err["message"] == "Unexpected server error."
    assert "db exploded" not in str(resp.data)
    assert err["request_id"]


@pytest.mark.django_db
def test_invalid_status_transition_envelope():
    resp = api_exception_handler(InvalidStatusTransition("Cannot go from completed to cancelled."), _context())

    assert resp.status_code == 400
    assert resp.data["error"]["code"] == "invalid_status_transition"
    assert resp.data["error"]["message"] == "Cannot go from completed to cancelled."
    assert resp.data["error"]["details"] is None


@pytest.mark.django_db
def test_request_id_is_stable_per_request():
    ctx = _context()
    first = api_exception_handler(InvalidStatusTransition(), ctx)
    second = api_exception_handler(InvalidStatusTransition(), ctx)

    assert first.data["error"]["request_id"] == second.data["error"]["request_id"]


def test_django_validation_message_flattens():
    assert django_validation_message(DjangoValidationError("Bad %(x)s", params={"x": "date"})) == "Bad date"
    assert django_validation_message(DjangoValidationError(["one", "two"])) == "one; two"

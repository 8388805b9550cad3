# ops_core/api/urls.py
from __future__ import annotations

from django.urls import path
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from ops_core.audit.api.views import AuditEventViewSet
from ops_core.iam.api.me import MeView
from ops_core.visits.api.views import VisitViewSet

router = DefaultRouter()

router.register(r"visits", VisitViewSet, basename="visits")
router.register(r"audit/events", AuditEventViewSet, basename="audit-events")

urlpatterns = [
    # Auth + /me
    path("auth/token/", TokenObtainPairView.as_view(), name="token-obtain"),
    path("auth/token/refresh/", TokenRefreshView.as_view(), name="token-refresh"),
    path("me/", MeView.as_view(), name="me"),

    *router.urls,
]

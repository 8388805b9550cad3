# backend/ops_core/visits/api/views.py
from __future__ import annotations

from django.core.exceptions import ValidationError as DjangoValidationError
from django.utils import timezone
from django.utils.dateparse import parse_date
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound, ValidationError as DRFValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ops_core.common.api.exceptions import InvalidStatusTransition, django_validation_message
from ops_core.common.api.pagination import paginate
from ops_core.common.permissions import ROLE_SUPERVISOR, is_admin, user_roles
from ops_core.common.scope import require_tenant_id
from ops_core.customers.models import Customer
from ops_core.visits.api.serializers import (
    CancelVisitSerializer,
    CompleteVisitSerializer,
    FollowUpSummaryResponseSerializer,
    MarkMissedResponseSerializer,
    MarkMissedSerializer,
    QuickVisitSerializer,
    StartVisitSerializer,
    TodayVisitsResponseSerializer,
    VisitCreateSerializer,
    VisitSerializer,
    VisitStatsResponseSerializer,
    VisitUpdateSerializer,
)
from ops_core.visits.models import Visit
from ops_core.visits.permissions import VisitPermission
from ops_core.visits.selectors import VisitSelector
from ops_core.visits.services import Location, VisitService
from ops_core.visits.transitions import InvalidStatusTransitionError

LIST_PARAMETERS = [
    OpenApiParameter("start_date", OpenApiTypes.DATE, OpenApiParameter.QUERY, required=False),
    OpenApiParameter("end_date", OpenApiTypes.DATE, OpenApiParameter.QUERY, required=False),
    OpenApiParameter("status", OpenApiTypes.STR, OpenApiParameter.QUERY, required=False),
    OpenApiParameter("customer_id", OpenApiTypes.UUID, OpenApiParameter.QUERY, required=False),
    OpenApiParameter("sales_rep_id", OpenApiTypes.INT, OpenApiParameter.QUERY, required=False),
    OpenApiParameter("page", OpenApiTypes.INT, OpenApiParameter.QUERY, required=False),
    OpenApiParameter("limit", OpenApiTypes.INT, OpenApiParameter.QUERY, required=False),
]


class VisitViewSet(viewsets.ViewSet):
    """
    Thin API layer:
    - scope resolution
    - request validation (serializers)
    - calls selectors for reads
    - calls services for writes
    - maps domain errors onto DRF exceptions
    """

    permission_classes = [IsAuthenticated, VisitPermission]

    def _get_object(self, request, pk) -> Visit:
        tenant_id = require_tenant_id(request)
        try:
            visit = VisitSelector.get_visit(tenant_id=tenant_id, visit_id=pk)
        except VisitSelector.NotFound:
            raise NotFound("Visit not found in this tenant.")
        self.check_object_permissions(request, visit)
        return visit

    @staticmethod
    def _call(fn, **kwargs):
        try:
            return fn(**kwargs)
        except InvalidStatusTransitionError as e:
            raise InvalidStatusTransition(django_validation_message(e))
        except DjangoValidationError as e:
            raise DRFValidationError(django_validation_message(e))
        except Customer.DoesNotExist:
            raise NotFound("Customer not found in this tenant.")
        except Visit.DoesNotExist:
            raise NotFound("Visit not found in this tenant.")

    @staticmethod
    def _validated(serializer_class, request, **kwargs) -> dict:
        ser = serializer_class(data=request.data, **kwargs)
        ser.is_valid(raise_exception=True)
        return ser.validated_data

    @staticmethod
    def _respond(visit: Visit, http_status=status.HTTP_200_OK) -> Response:
        visit = Visit.objects.select_related("customer").get(pk=visit.pk)
        return Response(VisitSerializer(visit).data, status=http_status)

    # ----------------------------
    # Reads
    # ----------------------------
    @extend_schema(tags=["Visits"], parameters=LIST_PARAMETERS, responses={200: VisitSerializer(many=True)})
    def list(self, request):
        tenant_id = require_tenant_id(request)
        try:
            qs = VisitSelector.list_visits(tenant_id=tenant_id, user=request.user, params=request.query_params)
        except DjangoValidationError as e:
            raise DRFValidationError(django_validation_message(e))
        return paginate(request, qs, VisitSerializer)

    @extend_schema(tags=["Visits"], responses={200: VisitSerializer})
    def retrieve(self, request, pk=None):
        return Response(VisitSerializer(self._get_object(request, pk)).data)

    @extend_schema(
        tags=["Visits"],
        parameters=[OpenApiParameter("date", OpenApiTypes.DATE, OpenApiParameter.QUERY, required=False)],
        responses={200: TodayVisitsResponseSerializer},
    )
    @action(detail=False, methods=["get"])
    def today(self, request):
        tenant_id = require_tenant_id(request)

        raw = request.query_params.get("date")
        day = timezone.localdate()
        if raw:
            try:
                day = parse_date(raw)
            except ValueError:
                day = None
            if day is None:
                raise DRFValidationError({"date": ["Invalid date. Use YYYY-MM-DD."]})

        visits, stats = VisitSelector.today_visits(tenant_id=tenant_id, user=request.user, day=day)
        return Response({"date": day, "results": VisitSerializer(visits, many=True).data, "stats": stats})

    @extend_schema(tags=["Visits"], responses={200: VisitStatsResponseSerializer})
    @action(detail=False, methods=["get"])
    def stats(self, request):
        tenant_id = require_tenant_id(request)
        data = VisitSelector.visit_stats(tenant_id=tenant_id, user=request.user, today=timezone.localdate())
        return Response(data)

    @extend_schema(tags=["Visits"], responses={200: FollowUpSummaryResponseSerializer})
    @action(detail=False, methods=["get"], url_path="followups/summary", url_name="followups-summary")
    def followups_summary(self, request):
        tenant_id = require_tenant_id(request)
        data = VisitSelector.follow_up_summary(tenant_id=tenant_id, user=request.user, today=timezone.localdate())
        return Response(FollowUpSummaryResponseSerializer(data).data)

    # ----------------------------
    # Create
    # ----------------------------
    @extend_schema(tags=["Visits"], request=VisitCreateSerializer, responses={201: VisitSerializer})
    def create(self, request):
        tenant_id = require_tenant_id(request)
        data = self._validated(VisitCreateSerializer, request)

        # Reps always own what they schedule; supervisors/admins may assign.
        sales_rep_id = data.get("sales_rep_id")
        if not (is_admin(request.user) or ROLE_SUPERVISOR in user_roles(request.user)):
            sales_rep_id = None

        visit = self._call(
            VisitService.create_visit,
            tenant_id=tenant_id,
            actor_user_id=request.user.id,
            customer_id=data["customer_id"],
            planned_date=data["planned_date"],
            sales_rep_id=sales_rep_id,
            planned_time=data.get("planned_time"),
            visit_type=data["visit_type"],
            notes=data.get("notes"),
            tags=data.get("tags"),
        )
        return self._respond(visit, status.HTTP_201_CREATED)

    @extend_schema(tags=["Visits"], request=QuickVisitSerializer, responses={201: VisitSerializer})
    @action(detail=False, methods=["post"])
    def quick(self, request):
        tenant_id = require_tenant_id(request)
        data = self._validated(QuickVisitSerializer, request)

        visit = self._call(
            VisitService.create_quick_visit,
            tenant_id=tenant_id,
            actor_user_id=request.user.id,
            customer_id=data["customer_id"],
            outcome=data["outcome"],
            planned_date=data.get("planned_date"),
            planned_time=data.get("planned_time"),
            location=Location.from_values(data.get("latitude"), data.get("longitude")),
            photo=data.get("photo"),
            outcome_notes=data.get("outcome_notes"),
            no_order_reason=data.get("no_order_reason"),
            follow_up_reason=data.get("follow_up_reason"),
            follow_up_date=data.get("follow_up_date"),
            follow_up_time=data.get("follow_up_time"),
        )
        return self._respond(visit, status.HTTP_201_CREATED)

    # ----------------------------
    # Workflow
    # ----------------------------
    @extend_schema(tags=["Visits"], request=StartVisitSerializer, responses={200: VisitSerializer})
    @action(detail=True, methods=["post"])
    def start(self, request, pk=None):
        visit = self._get_object(request, pk)
        data = self._validated(StartVisitSerializer, request)

        visit = self._call(
            VisitService.start_visit,
            tenant_id=visit.tenant_id,
            visit_id=visit.id,
            actor_user_id=request.user.id,
            location=Location.from_values(data.get("latitude"), data.get("longitude")),
        )
        return self._respond(visit)

    @extend_schema(tags=["Visits"], request=CompleteVisitSerializer, responses={200: VisitSerializer})
    @action(detail=True, methods=["post"])
    def complete(self, request, pk=None):
        visit = self._get_object(request, pk)
        data = self._validated(CompleteVisitSerializer, request)

        visit = self._call(
            VisitService.complete_visit,
            tenant_id=visit.tenant_id,
            visit_id=visit.id,
            actor_user_id=request.user.id,
            outcome=data["outcome"],
            location=Location.from_values(data.get("latitude"), data.get("longitude")),
            outcome_notes=data.get("outcome_notes"),
            photos=data.get("photos"),
            order_id=data.get("order_id"),
            no_order_reason=data.get("no_order_reason"),
            follow_up_reason=data.get("follow_up_reason"),
            follow_up_date=data.get("follow_up_date"),
            follow_up_time=data.get("follow_up_time"),
        )
        return self._respond(visit)

    @extend_schema(tags=["Visits"], request=CancelVisitSerializer, responses={200: VisitSerializer})
    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):
        visit = self._get_object(request, pk)
        data = self._validated(CancelVisitSerializer, request)

        visit = self._call(
            VisitService.cancel_visit,
            tenant_id=visit.tenant_id,
            visit_id=visit.id,
            actor_user_id=request.user.id,
            reason=data.get("reason"),
        )
        return self._respond(visit)

    @extend_schema(tags=["Visits"], request=VisitUpdateSerializer, responses={200: VisitSerializer})
    def partial_update(self, request, pk=None):
        visit = self._get_object(request, pk)
        changes = self._validated(VisitUpdateSerializer, request, partial=True)

        visit = self._call(
            VisitService.update_visit,
            tenant_id=visit.tenant_id,
            visit_id=visit.id,
            actor_user_id=request.user.id,
            changes=dict(changes),
        )
        return self._respond(visit)

    # ----------------------------
    # Sweep (supervisors/admins)
    # ----------------------------
    @extend_schema(tags=["Visits"], request=MarkMissedSerializer, responses={200: MarkMissedResponseSerializer})
    @action(detail=False, methods=["post"], url_path="mark-missed", url_name="mark-missed")
    def mark_missed(self, request):
        tenant_id = require_tenant_id(request)
        data = self._validated(MarkMissedSerializer, request)

        count = self._call(
            VisitService.mark_missed,
            tenant_id=tenant_id,
            as_of=data.get("as_of"),
            actor_user_id=request.user.id,
        )
        return Response({"marked_as_missed": count}, status=status.HTTP_200_OK)

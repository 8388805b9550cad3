# backend/ops_core/visits/api/serializers.py
from __future__ import annotations

from django.utils import timezone
from rest_framework import serializers

from ops_core.visits.models import Visit, VisitOutcome, VisitType


class VisitSerializer(serializers.ModelSerializer):
    customer_id = serializers.UUIDField(read_only=True)
    customer_name = serializers.CharField(source="customer.name", read_only=True)
    sales_rep_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = Visit
        fields = [
            "id",
            "tenant_id",
            "customer_id",
            "customer_name",
            "sales_rep_id",
            "visit_type",
            "status",
            "outcome",
            "planned_date",
            "planned_time",
            "started_at",
            "completed_at",
            "start_latitude",
            "start_longitude",
            "end_latitude",
            "end_longitude",
            "notes",
            "tags",
            "outcome_notes",
            "photos",
            "no_order_reason",
            "follow_up_reason",
            "follow_up_date",
            "follow_up_time",
            "cancel_reason",
            "order_id",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class LocationInputSerializer(serializers.Serializer):
    """
    Optional GPS fix. Both coordinates or neither.
    """
    latitude = serializers.FloatField(required=False, allow_null=True, min_value=-90, max_value=90)
    longitude = serializers.FloatField(required=False, allow_null=True, min_value=-180, max_value=180)

    def validate(self, attrs):
        attrs = super().validate(attrs)
        if (attrs.get("latitude") is None) != (attrs.get("longitude") is None):
            raise serializers.ValidationError("Latitude and longitude must be provided together.")
        return attrs


class VisitCreateSerializer(serializers.Serializer):
    customer_id = serializers.UUIDField()
    sales_rep_id = serializers.IntegerField(required=False, allow_null=True)
    visit_type = serializers.ChoiceField(choices=VisitType.choices, required=False, default=VisitType.SCHEDULED)
    planned_date = serializers.DateField()
    planned_time = serializers.TimeField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    tags = serializers.ListField(child=serializers.CharField(allow_blank=True), required=False, allow_null=True)


class QuickVisitSerializer(LocationInputSerializer):
    customer_id = serializers.UUIDField()
    outcome = serializers.ChoiceField(choices=VisitOutcome.choices)
    planned_date = serializers.DateField(required=False, allow_null=True)
    planned_time = serializers.TimeField(required=False, allow_null=True)
    photo = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    outcome_notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    no_order_reason = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    follow_up_reason = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    follow_up_date = serializers.DateField(required=False, allow_null=True)
    follow_up_time = serializers.TimeField(required=False, allow_null=True)


class StartVisitSerializer(LocationInputSerializer):
    pass


class CompleteVisitSerializer(LocationInputSerializer):
    outcome = serializers.ChoiceField(choices=VisitOutcome.choices)
    outcome_notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    photos = serializers.ListField(child=serializers.CharField(allow_blank=True), required=False, allow_null=True)
    order_id = serializers.UUIDField(required=False, allow_null=True)
    no_order_reason = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    follow_up_reason = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    follow_up_date = serializers.DateField(required=False, allow_null=True)
    follow_up_time = serializers.TimeField(required=False, allow_null=True)


class CancelVisitSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class VisitUpdateSerializer(serializers.Serializer):
    """
    PATCH body. Only the keys present are applied.
    """
    planned_date = serializers.DateField(required=False)
    planned_time = serializers.TimeField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    tags = serializers.ListField(child=serializers.CharField(allow_blank=True), required=False, allow_null=True)
    visit_type = serializers.ChoiceField(choices=VisitType.choices, required=False)


class MarkMissedSerializer(serializers.Serializer):
    as_of = serializers.DateField(required=False, allow_null=True)

    def validate_as_of(self, value):
        # missed is terminal; a future cutoff would close visits not yet due
        if value is not None and value > timezone.localdate():
            raise serializers.ValidationError("as_of cannot be in the future.")
        return value


# ---- response shapes (OpenAPI) ----

class TodayStatsSerializer(serializers.Serializer):
    total = serializers.IntegerField()
    completed = serializers.IntegerField()
    in_progress = serializers.IntegerField()
    planned = serializers.IntegerField()


class TodayVisitsResponseSerializer(serializers.Serializer):
    date = serializers.DateField()
    results = VisitSerializer(many=True)
    stats = TodayStatsSerializer()


class _DayCountsSerializer(serializers.Serializer):
    total = serializers.IntegerField()
    completed = serializers.IntegerField()
    in_progress = serializers.IntegerField()


class _WeekCountsSerializer(serializers.Serializer):
    total = serializers.IntegerField()
    completed = serializers.IntegerField()
    orders_placed = serializers.IntegerField()


class VisitStatsResponseSerializer(serializers.Serializer):
    today = _DayCountsSerializer()
    week = _WeekCountsSerializer()


class FollowUpDueSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    customer_id = serializers.UUIDField()
    customer_name = serializers.CharField()
    follow_up_date = serializers.DateField()


class FollowUpSummaryResponseSerializer(serializers.Serializer):
    due_today = serializers.IntegerField()
    overdue = serializers.IntegerField()
    upcoming = serializers.IntegerField()
    top_due = FollowUpDueSerializer(many=True)


class MarkMissedResponseSerializer(serializers.Serializer):
    marked_as_missed = serializers.IntegerField()

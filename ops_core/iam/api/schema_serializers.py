# backend/ops_core/iam/api/schema_serializers.py
from __future__ import annotations

from rest_framework import serializers


class MeUserSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    username = serializers.CharField(allow_null=True, required=False)
    email = serializers.EmailField(allow_null=True, required=False)
    is_superuser = serializers.BooleanField()


class MeProfileSerializer(serializers.Serializer):
    tenant_id = serializers.UUIDField()
    tenant_name = serializers.CharField()
    tenant_subdomain = serializers.CharField()
    tenant_status = serializers.CharField()
    role = serializers.CharField()
    supervisor_id = serializers.IntegerField(allow_null=True)


class ActiveScopeSerializer(serializers.Serializer):
    tenant_id = serializers.UUIDField()


class MeResponseSerializer(serializers.Serializer):
    user = MeUserSerializer()
    profile = MeProfileSerializer(allow_null=True)
    roles = serializers.ListField(child=serializers.CharField())
    active_scope = ActiveScopeSerializer(allow_null=True, required=False)

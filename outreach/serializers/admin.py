from rest_framework import serializers

from .campaigns import DIRECTIONS
from .organizations import OfficeHoursSerializer


class OrganizationListQuerySerializer(serializers.Serializer):
    limit = serializers.IntegerField(required=False, min_value=1, max_value=100, default=50)
    offset = serializers.IntegerField(required=False, min_value=0, default=0)
    search = serializers.CharField(required=False, allow_blank=True, max_length=128)


class OrganizationCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=256)
    externalId = serializers.CharField(max_length=256)
    phone = serializers.CharField(max_length=20, required=False, allow_blank=True)
    timezone = serializers.CharField(max_length=50, required=False)
    concurrentCallLimit = serializers.IntegerField(min_value=1, max_value=100, required=False)
    isSuperAdmin = serializers.BooleanField(required=False, default=False)
    officeHours = OfficeHoursSerializer(required=False)


class RecentCallsQuerySerializer(serializers.Serializer):
    limit = serializers.IntegerField(required=False, min_value=1, max_value=100, default=50)
    offset = serializers.IntegerField(required=False, min_value=0, default=0)


class CampaignCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=256)
    description = serializers.CharField(required=False, allow_blank=True)
    orgId = serializers.UUIDField()
    agentId = serializers.CharField(max_length=256)
    llmId = serializers.CharField(max_length=256)
    direction = serializers.ChoiceField(choices=DIRECTIONS)
    basePrompt = serializers.CharField()
    voicemailMessage = serializers.CharField(required=False, allow_blank=True)
    variablesConfig = serializers.DictField(required=False, default=dict)
    analysisConfig = serializers.DictField(required=False, default=dict)
    requestId = serializers.UUIDField(required=False)

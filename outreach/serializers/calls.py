from rest_framework import serializers

from outreach.models import Call, Campaign


class CallListQuerySerializer(serializers.Serializer):
    limit = serializers.IntegerField(required=False, min_value=1, max_value=200, default=50)
    offset = serializers.IntegerField(required=False, min_value=0, default=0)
    patientId = serializers.UUIDField(required=False)
    runId = serializers.UUIDField(required=False)
    campaignId = serializers.UUIDField(required=False)
    status = serializers.ChoiceField(choices=[c for c, _ in Call.STATUS_CHOICES], required=False)
    direction = serializers.ChoiceField(choices=[c for c, _ in Campaign.DIRECTION_CHOICES], required=False)
    search = serializers.CharField(required=False, allow_blank=True, max_length=128)


class PatientCallsQuerySerializer(serializers.Serializer):
    patientId = serializers.UUIDField()
    limit = serializers.IntegerField(required=False, min_value=1, max_value=100, default=10)


class ManualCallCreateSerializer(serializers.Serializer):
    patientId = serializers.UUIDField()
    agentId = serializers.CharField(max_length=256)
    campaignId = serializers.UUIDField(required=False, allow_null=True)
    variables = serializers.DictField(required=False, default=dict)

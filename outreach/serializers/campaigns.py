import bleach
from rest_framework import serializers

from outreach.models import Campaign, CampaignRequest

DIRECTIONS = [c for c, _ in Campaign.DIRECTION_CHOICES]


class ExampleSheetSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=256)
    url = serializers.URLField(max_length=512)
    fileType = serializers.CharField(max_length=64)


class CampaignRequestCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=256)
    description = serializers.CharField()
    mainGoal = serializers.CharField(required=False, allow_blank=True)
    desiredAnalysis = serializers.ListField(child=serializers.CharField(max_length=256), required=False)
    direction = serializers.ChoiceField(choices=DIRECTIONS, default='outbound')
    exampleSheets = ExampleSheetSerializer(many=True, required=False)

    def validate_name(self, v):
        v = bleach.clean(v.strip(), strip=True)
        if not v:
            raise serializers.ValidationError('This field may not be blank.')
        return v

    def validate_description(self, v):
        return bleach.clean(v.strip(), strip=True)


class CampaignRequestProcessSerializer(serializers.Serializer):
    requestId = serializers.UUIDField()
    status = serializers.ChoiceField(choices=['approved', 'rejected', 'completed', 'in_progress'])
    adminNotes = serializers.CharField(required=False, allow_blank=True)
    resultingCampaignId = serializers.UUIDField(required=False)


class CampaignRequestListQuerySerializer(serializers.Serializer):
    status = serializers.ChoiceField(
        choices=['all'] + [c for c, _ in CampaignRequest.STATUS_CHOICES], required=False, default='all'
    )
    limit = serializers.IntegerField(required=False, min_value=1, max_value=200, default=50)
    offset = serializers.IntegerField(required=False, min_value=0, default=0)

import base64
import binascii

from django.conf import settings
from rest_framework import serializers


class RunListQuerySerializer(serializers.Serializer):
    campaignId = serializers.UUIDField()
    limit = serializers.IntegerField(required=False, min_value=1, max_value=100, default=20)
    offset = serializers.IntegerField(required=False, min_value=0, default=0)


class RunRowsQuerySerializer(serializers.Serializer):
    runId = serializers.UUIDField()
    limit = serializers.IntegerField(required=False, min_value=1, max_value=500, default=50)
    offset = serializers.IntegerField(required=False, min_value=0, default=0)
    filter = serializers.CharField(required=False, allow_blank=True, max_length=128)


class RunCreateSerializer(serializers.Serializer):
    campaignId = serializers.UUIDField()
    name = serializers.CharField(max_length=256)
    customPrompt = serializers.CharField(required=False, allow_blank=True)
    customVoicemailMessage = serializers.CharField(required=False, allow_blank=True)
    scheduledAt = serializers.DateTimeField(required=False, allow_null=True)
    metadata = serializers.DictField(required=False)


class RunActionSerializer(serializers.Serializer):
    runId = serializers.UUIDField()


class RunUploadSerializer(serializers.Serializer):
    """A CSV patient list, sent as text or as a ``data:`` URL."""
    runId = serializers.UUIDField()
    fileName = serializers.CharField(max_length=255)
    fileContent = serializers.CharField(trim_whitespace=False)

    def validate_fileName(self, v):
        if not v.lower().endswith('.csv'):
            raise serializers.ValidationError('Only CSV files are supported')
        return v

    def validate_fileContent(self, v):
        if v.startswith('data:'):
            _, _, payload = v.partition(',')
            try:
                raw = base64.b64decode(payload, validate=True)
            except (binascii.Error, ValueError):
                raise serializers.ValidationError('Invalid base64 content')
        else:
            raw = v.encode('utf-8')
        if len(raw) > settings.RUN_UPLOAD_MAX_BYTES:
            raise serializers.ValidationError('File is too large')
        try:
            text = raw.decode('utf-8-sig')
        except UnicodeDecodeError:
            raise serializers.ValidationError('File must be UTF-8 text')
        if not text.strip():
            raise serializers.ValidationError('File is empty')
        return text

import bleach
from django.utils.dateparse import parse_date, parse_datetime
from rest_framework import serializers


def _clean(v):
    return bleach.clean((v or '').strip(), strip=True)


class PatientCreateSerializer(serializers.Serializer):
    # Everything is optional at the boundary; absent values are coalesced
    # to "" by the action before the service sees them.
    firstName = serializers.CharField(max_length=256, required=False, allow_blank=True)
    lastName = serializers.CharField(max_length=256, required=False, allow_blank=True)
    dob = serializers.CharField(max_length=32, required=False, allow_blank=True)
    primaryPhone = serializers.CharField(max_length=20, required=False, allow_blank=True)
    secondaryPhone = serializers.CharField(max_length=20, required=False, allow_blank=True)
    emrIdInOrg = serializers.CharField(max_length=256, required=False, allow_blank=True)

    def validate_firstName(self, v):
        return _clean(v)

    def validate_lastName(self, v):
        return _clean(v)

    def validate_dob(self, v):
        v = (v or '').strip()
        if not v:
            return v
        try:
            parsed = parse_date(v)
            if parsed is None:
                dt = parse_datetime(v)
                parsed = dt.date() if dt else None
        except ValueError:
            # well formed but impossible, e.g. 2020-02-30
            parsed = None
        if parsed is None:
            raise serializers.ValidationError('Invalid date format')
        return parsed.isoformat()

    def validate_primaryPhone(self, v):
        v = _clean(v)
        if v and len(v) < 10:
            raise serializers.ValidationError('Ensure this field has at least 10 characters.')
        return v

    def validate_secondaryPhone(self, v):
        return _clean(v)


class PatientListQuerySerializer(serializers.Serializer):
    limit = serializers.IntegerField(required=False, min_value=1, max_value=200, default=50)
    offset = serializers.IntegerField(required=False, min_value=0, default=0)
    search = serializers.CharField(required=False, allow_blank=True, max_length=128)

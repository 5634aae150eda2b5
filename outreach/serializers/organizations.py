from rest_framework import serializers

from outreach.services.invitations import INVITATION_ROLES

WEEKDAYS = ('monday', 'tuesday', 'wednesday', 'thursday', 'friday', 'saturday', 'sunday')


class OfficeHoursDaySerializer(serializers.Serializer):
    start = serializers.RegexField(r'^\d{2}:\d{2}$')
    end = serializers.RegexField(r'^\d{2}:\d{2}$')


class OfficeHoursSerializer(serializers.Serializer):
    monday = OfficeHoursDaySerializer()
    tuesday = OfficeHoursDaySerializer()
    wednesday = OfficeHoursDaySerializer()
    thursday = OfficeHoursDaySerializer()
    friday = OfficeHoursDaySerializer()
    saturday = OfficeHoursDaySerializer(required=False, allow_null=True)
    sunday = OfficeHoursDaySerializer(required=False, allow_null=True)


class OrganizationUpdateSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    name = serializers.CharField(max_length=256, required=False)
    phone = serializers.CharField(max_length=20, required=False, allow_blank=True)
    timezone = serializers.CharField(max_length=50, required=False)
    officeHours = OfficeHoursSerializer(required=False)
    concurrentCallLimit = serializers.IntegerField(min_value=1, max_value=100, required=False)


class MembersQuerySerializer(serializers.Serializer):
    organizationId = serializers.UUIDField(required=False)
    limit = serializers.IntegerField(required=False, min_value=1, max_value=200, default=50)
    offset = serializers.IntegerField(required=False, min_value=0, default=0)


class InviteSerializer(serializers.Serializer):
    emailAddress = serializers.EmailField()
    role = serializers.ChoiceField(choices=list(INVITATION_ROLES), default='member')


class RevokeInvitationSerializer(serializers.Serializer):
    invitationId = serializers.CharField(max_length=256)

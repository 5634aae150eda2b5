from rest_framework import serializers


class IdInputSerializer(serializers.Serializer):
    id = serializers.UUIDField()

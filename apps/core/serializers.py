from rest_framework import serializers


class ErrorSerializer(serializers.Serializer):
    """Standard error response serializer."""
    error = serializers.CharField()
    code = serializers.CharField()
    details = serializers.JSONField(required=False)

from rest_framework import serializers


class HealthReportSerializer(serializers.Serializer):
    status = serializers.CharField()
    description = serializers.CharField()

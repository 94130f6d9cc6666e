"""
Serializers for analytics query parameters and request bodies.
"""
from rest_framework import serializers


class CommaSeparatedListField(serializers.Field):
    """Accepts "a, b,c" (or a list) and yields ['a', 'b', 'c'] without blanks."""

    def to_internal_value(self, data):
        if data is None:
            return []
        if isinstance(data, (list, tuple)):
            parts = []
            for item in data:
                parts.extend(str(item).split(','))
        elif isinstance(data, str):
            parts = data.split(',')
        else:
            raise serializers.ValidationError('Expected a comma-separated string.')
        return [p.strip() for p in parts if p.strip()]

    def to_representation(self, value):
        return list(value or [])


class AnalyticsFilterSerializer(serializers.Serializer):
    """
    Optional record filters shared by the analytics endpoints.
    Each filter is a case-insensitive substring match; empty means "everything".
    """
    companies = CommaSeparatedListField(required=False, default=list)
    roles = CommaSeparatedListField(required=False, default=list)
    industries = CommaSeparatedListField(required=False, default=list)
    include_archived = serializers.BooleanField(required=False, default=False)


class PredictionRequestSerializer(serializers.Serializer):
    include_archived = serializers.BooleanField(required=False, default=False)

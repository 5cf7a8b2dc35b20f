from rest_framework import serializers

from .models import ReceiptRange, RangeStatus
from .services.range_management import RangeAction


class ReceiptRangeSerializer(serializers.ModelSerializer):
    """Range with its computed ``remaining`` count."""

    remaining = serializers.IntegerField(read_only=True)

    class Meta:
        model = ReceiptRange
        fields = [
            'range_id',
            'alias',
            'year',
            'start',
            'end',
            'next_number',
            'remaining',
            'status',
            'version',
            'created_by',
            'created_at',
            'updated_at',
            'locked_by',
            'locked_at',
        ]


class ReceiptRangeCreateSerializer(serializers.Serializer):
    """
    Input for range creation.

    Bounds are only type-checked here; ``create_range`` applies the range
    rules so that each one is reported with its own error code.
    """
    alias = serializers.CharField(max_length=100)
    year = serializers.IntegerField()
    start = serializers.IntegerField()
    end = serializers.IntegerField()
    suffix = serializers.CharField(max_length=2, required=False, allow_blank=True)


class RangeListQuerySerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=RangeStatus.choices, required=False)
    year = serializers.IntegerField(required=False)


class RangeStatusActionSerializer(serializers.Serializer):
    action = serializers.CharField(max_length=20, help_text=f"One of: {', '.join(RangeAction.ALL)}")

from rest_framework import serializers

from apps.donors.serializers import DonorInfoSerializer

from .models import Donation


class PaymentSerializer(serializers.Serializer):
    mode = serializers.CharField(max_length=10)
    ref = serializers.CharField(max_length=100, required=False, allow_blank=True)
    bank = serializers.CharField(max_length=100, required=False, allow_blank=True)


class DonationCreateSerializer(serializers.Serializer):
    """
    Input for donation creation.

    Amounts and payment mode are only shape-checked here; ``create_donation``
    applies the business rules and reports them with its own error codes.
    """
    donor = DonorInfoSerializer()
    breakup = serializers.DictField(allow_empty=True)
    payment = PaymentSerializer()
    date = serializers.DateField(required=False, allow_null=True)
    eligible_80g = serializers.BooleanField(required=False, default=True)
    flexible_mode = serializers.BooleanField(required=False, default=False)


class DonationSerializer(serializers.ModelSerializer):
    """Issued receipt with its donor snapshot."""

    donor_id = serializers.CharField(source='donor.donor_id', read_only=True)

    class Meta:
        model = Donation
        fields = [
            'receipt_no',
            'range_id',
            'date',
            'donor_id',
            'donor_name',
            'donor_mobile',
            'donor_email',
            'donor_pan_masked',
            'donor_address',
            'breakup',
            'payment_mode',
            'payment_ref',
            'payment_bank',
            'eligible_80g',
            'total',
            'created_by',
            'created_at',
        ]
        read_only_fields = fields


class DonationResultSerializer(serializers.Serializer):
    receipt_no = serializers.CharField()
    donor_id = serializers.CharField()
    total = serializers.DecimalField(max_digits=12, decimal_places=2)
    created_at = serializers.DateTimeField()
    range_id = serializers.CharField()
    is_new_donor = serializers.BooleanField()


class ReceiptListQuerySerializer(serializers.Serializer):
    """
    Validate receipt listing query parameters.

    Exactly one filter is required:
        date: Receipts of one day
        start_date + end_date: Receipts of a date range (max 31 days)
        donor_id: Receipts of one donor
        range_id: Receipts drawn from one range
    """
    date = serializers.DateField(required=False)
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)
    donor_id = serializers.CharField(max_length=32, required=False)
    range_id = serializers.CharField(max_length=8, required=False)

    def validate(self, data):
        has_start = 'start_date' in data
        has_end = 'end_date' in data
        if has_start != has_end:
            raise serializers.ValidationError('start_date and end_date must be given together')

        filters = [
            'date' in data,
            has_start,
            'donor_id' in data,
            'range_id' in data,
        ]
        if sum(filters) != 1:
            raise serializers.ValidationError(
                'Provide exactly one of: date, start_date + end_date, donor_id, range_id'
            )
        return data


class ExportQuerySerializer(serializers.Serializer):
    """Dates stay strings; ``build_export`` checks the yyyy-mm-dd format and span."""
    start_date = serializers.CharField(max_length=10)
    end_date = serializers.CharField(max_length=10)
    range_id = serializers.CharField(max_length=8, required=False, allow_blank=True)


class ExportResultSerializer(serializers.Serializer):
    format = serializers.CharField()
    file_name = serializers.CharField()
    content = serializers.CharField(trim_whitespace=False)
    record_count = serializers.IntegerField()
    start_date = serializers.CharField()
    end_date = serializers.CharField()

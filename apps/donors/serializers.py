from rest_framework import serializers

from apps.receipts.models import Donation

from .models import Donor
from .services.donor_search import SearchType


class AddressSerializer(serializers.Serializer):
    line1 = serializers.CharField(max_length=200, required=False, allow_blank=True)
    line2 = serializers.CharField(max_length=200, required=False, allow_blank=True)
    city = serializers.CharField(max_length=100, required=False, allow_blank=True)
    state = serializers.CharField(max_length=100, required=False, allow_blank=True)
    pincode = serializers.CharField(max_length=10, required=False, allow_blank=True)
    country = serializers.CharField(max_length=100, required=False, allow_blank=True)


class DonorInfoSerializer(serializers.Serializer):
    """
    Donor details as submitted with a donation.

    Only shape is checked here; identifier formats are validated by
    ``validate_donor_info`` so the API and the services report the same errors.
    """
    name = serializers.CharField(max_length=200)
    mobile = serializers.CharField(max_length=20, required=False, allow_blank=True)
    email = serializers.CharField(max_length=254, required=False, allow_blank=True)
    pan = serializers.CharField(max_length=20, required=False, allow_blank=True)
    address = AddressSerializer(required=False)


class DonorSerializer(serializers.ModelSerializer):
    """Donor profile; identifiers are only exposed masked."""

    class Meta:
        model = Donor
        fields = [
            'donor_id',
            'name',
            'mobile_masked',
            'email_masked',
            'pan_masked',
            'address',
            'lifetime_total',
            'donation_count',
            'last_donation_date',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class RecentReceiptSerializer(serializers.ModelSerializer):

    class Meta:
        model = Donation
        fields = ['receipt_no', 'date', 'total', 'payment_mode', 'breakup']
        read_only_fields = fields


class DonorResolutionSerializer(serializers.Serializer):
    donor_id = serializers.CharField()
    is_new = serializers.BooleanField()
    existing_profile = DonorSerializer(allow_null=True)


class DonorSearchQuerySerializer(serializers.Serializer):
    """
    Validate donor search query parameters.

    Query Parameters:
        query (str): Phone, PAN, email or name
        type (str): Optional, detected from ``query`` when omitted
    """
    query = serializers.CharField(max_length=254)
    type = serializers.ChoiceField(choices=SearchType.ALL, required=False)


class DonorSearchResultSerializer(serializers.Serializer):
    donor = DonorSerializer()
    search_type = serializers.CharField()
    recent_receipts = RecentReceiptSerializer(many=True)


class DonorNameMatchSerializer(serializers.Serializer):
    donor = DonorSerializer()
    score = serializers.IntegerField()

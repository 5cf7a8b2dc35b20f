import pytest
from decimal import Decimal
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from apps.core.models import OrgMembership
from apps.donors.models import AliasType, Donor, DonorAlias
from apps.donors.services import hash_pan, hash_email, mask_pan, mask_phone, mask_email


ORG_ID = 'TEST-TEMPLE'
OTHER_ORG_ID = 'OTHER-TEMPLE'


@pytest.fixture
def org_id():
    return ORG_ID


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def staff_user(db):
    """Create and return a temple staff user belonging to the test org."""
    user = get_user_model().objects.create_user(
        username='counter1',
        password='TestPass123!',
    )
    OrgMembership.objects.create(user=user, org_id=ORG_ID)
    return user


@pytest.fixture
def authenticated_client(api_client, staff_user):
    """Return API client authenticated as staff user, scoped to the test org."""
    refresh = RefreshToken.for_user(staff_user)
    api_client.credentials(
        HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}',
        HTTP_X_ORG_ID=ORG_ID,
    )
    return api_client


@pytest.fixture
def make_donor(db):
    """Factory creating a donor together with its aliases."""

    def _make_donor(
        donor_id='D_aaaaaaaaaaaa',
        name='Ramesh Kulkarni',
        phone='+919876543210',
        pan=None,
        email=None,
        org_id=ORG_ID,
    ):
        donor = Donor.objects.create(
            org_id=org_id,
            donor_id=donor_id,
            name=name,
            mobile_masked=mask_phone(phone) if phone else '',
            pan_masked=mask_pan(pan) if pan else '',
            email_masked=mask_email(email) if email else '',
            phone_e164=phone or '',
            pan_hash=hash_pan(pan) if pan else '',
            email_hash=hash_email(email) if email else '',
            lifetime_total=Decimal('0.00'),
        )
        if phone:
            DonorAlias.objects.create(org_id=org_id, alias_type=AliasType.PHONE, alias_value=phone, donor=donor)
        if pan:
            DonorAlias.objects.create(org_id=org_id, alias_type=AliasType.PAN, alias_value=hash_pan(pan), donor=donor)
        if email:
            DonorAlias.objects.create(org_id=org_id, alias_type=AliasType.EMAIL, alias_value=hash_email(email), donor=donor)
        return donor

    return _make_donor

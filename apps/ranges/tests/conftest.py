import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from apps.core.models import OrgMembership
from apps.ranges.models import RangeStatus, ReceiptRange


ORG_ID = 'TEST-TEMPLE'
OTHER_ORG_ID = 'OTHER-TEMPLE'


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def staff_user(db):
    """Create and return a temple staff user belonging to the test org."""
    user = get_user_model().objects.create_user(
        username='office1',
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
def make_range(db):
    """Factory creating a range directly in the given status."""

    def _make_range(
        range_id='2025-A',
        alias='Book 1',
        year=2025,
        start=1,
        end=100,
        next_number=None,
        status=RangeStatus.ACTIVE,
        org_id=ORG_ID,
    ):
        return ReceiptRange.objects.create(
            org_id=org_id,
            range_id=range_id,
            alias=alias,
            year=year,
            start=start,
            end=end,
            next_number=start if next_number is None else next_number,
            status=status,
        )

    return _make_range


@pytest.fixture
def active_range(make_range):
    """Active range 2025-A covering 1-100."""
    return make_range()

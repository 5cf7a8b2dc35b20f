import pytest
from django.contrib.auth import get_user_model
from django.utils import timezone
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from apps.core.models import OrgMembership
from apps.ranges.models import RangeStatus, ReceiptRange


ORG_ID = 'TEST-TEMPLE'
OTHER_ORG_ID = 'OTHER-TEMPLE'

# Donations always draw from the range of the current year
YEAR = timezone.localdate().year


def day(month, day_of_month):
    """ISO date in the current year."""
    return f'{YEAR}-{month:02d}-{day_of_month:02d}'


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
def make_range(db):
    """Factory creating a range of the current year directly in the given status."""

    def _make_range(
        suffix='A',
        start=1,
        end=100,
        status=RangeStatus.ACTIVE,
        org_id=ORG_ID,
    ):
        return ReceiptRange.objects.create(
            org_id=org_id,
            range_id=f'{YEAR}-{suffix}',
            alias=f'Book {suffix}',
            year=YEAR,
            start=start,
            end=end,
            next_number=start,
            status=status,
        )

    return _make_range


@pytest.fixture
def active_range(make_range):
    """Active range <year>-A covering 1-100."""
    return make_range()


@pytest.fixture
def donation_request():
    """Factory for a valid create_donation request."""

    def _donation_request(
        name='Ramesh Kulkarni',
        mobile='9876543210',
        pan=None,
        email=None,
        breakup=None,
        mode='CASH',
        date=None,
        **extra
    ):
        donor = {'name': name}
        if mobile:
            donor['mobile'] = mobile
        if pan:
            donor['pan'] = pan
        if email:
            donor['email'] = email

        request = {
            'donor': donor,
            'breakup': breakup if breakup is not None else {'Annadan': 500},
            'payment': {'mode': mode},
        }
        if date:
            request['date'] = date
        request.update(extra)
        return request

    return _donation_request

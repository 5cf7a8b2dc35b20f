"""Request helpers shared by the API views."""

from django.conf import settings

from apps.donors.services.normalization import normalize_org_id

ORG_HEADER = 'X-Org-Id'


def get_request_org_id(request) -> str:
    """
    Organization the request is scoped to.

    Taken from the ``X-Org-Id`` header, falling back to
    ``TEMPLE_DEFAULT_ORG_ID`` from settings.
    """
    org_id = normalize_org_id(request.headers.get(ORG_HEADER))
    return org_id or normalize_org_id(settings.TEMPLE_DEFAULT_ORG_ID)


def get_request_actor(request) -> str:
    """Username recorded as creator/locker of records."""
    user = getattr(request, 'user', None)
    if user is not None and user.is_authenticated:
        return user.get_username()
    return 'system'

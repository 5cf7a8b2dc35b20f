from rest_framework import permissions

from apps.core.models import OrgMembership
from apps.core.requests import get_request_org_id


class IsOrgMember(permissions.BasePermission):
    """
    Permission: User must be a member of the organization the request is scoped to.

    Superusers may work on any organization.
    """

    message = 'You are not a member of this organization.'

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        if user.is_superuser:
            return True
        return OrgMembership.objects.filter(
            user=user,
            org_id=get_request_org_id(request),
        ).exists()

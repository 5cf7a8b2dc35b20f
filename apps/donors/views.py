from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework import status
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes

from apps.core.permissions import IsOrgMember
from apps.core.requests import get_request_org_id
from apps.core.serializers import ErrorSerializer
from .serializers import (
    DonorInfoSerializer,
    DonorSerializer,
    DonorResolutionSerializer,
    DonorSearchQuerySerializer,
    DonorSearchResultSerializer,
    DonorNameMatchSerializer,
)
from .services import (
    SearchType,
    get_donor,
    resolve_donor,
    search_donor_by_identifier,
    search_donors_by_name,
    DonorValidationError,
    DonorNotFoundError,
)


@extend_schema(
    parameters=[
        OpenApiParameter('query', OpenApiTypes.STR, description='Phone, PAN, email or name'),
        OpenApiParameter('type', OpenApiTypes.STR, description="'phone', 'pan', 'email' or 'name'; detected if omitted"),
    ],
    responses={
        200: DonorSearchResultSerializer,
        400: ErrorSerializer,
        404: ErrorSerializer,
    },
    description="Find a donor by phone, PAN or email, or rank donors by name.",
    tags=['donors'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsOrgMember])
def search_donor(request):
    """Search donors - thin HTTP handler."""
    query_serializer = DonorSearchQuerySerializer(data=request.query_params)
    query_serializer.is_valid(raise_exception=True)
    params = query_serializer.validated_data
    org_id = get_request_org_id(request)

    try:
        if params.get('type') == SearchType.NAME:
            matches = search_donors_by_name(org_id=org_id, name=params['query'])
            data = [{'donor': donor, 'score': score} for donor, score in matches]
            return Response(DonorNameMatchSerializer(data, many=True).data)

        result = search_donor_by_identifier(
            org_id=org_id,
            query=params['query'],
            search_type=params.get('type'),
        )
    except DonorValidationError as e:
        return Response(e.to_dict(), status=status.HTTP_400_BAD_REQUEST)
    except DonorNotFoundError as e:
        return Response(e.to_dict(), status=status.HTTP_404_NOT_FOUND)

    return Response(DonorSearchResultSerializer(result).data)


@extend_schema(
    request=DonorInfoSerializer,
    responses={
        200: DonorResolutionSerializer,
        400: ErrorSerializer,
    },
    description="Resolve donor details to an existing or a new donor ID without saving anything.",
    tags=['donors'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated, IsOrgMember])
def resolve(request):
    """Resolve donor identity - thin HTTP handler."""
    serializer = DonorInfoSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        resolution = resolve_donor(
            org_id=get_request_org_id(request),
            donor_info=serializer.validated_data,
        )
    except DonorValidationError as e:
        return Response(e.to_dict(), status=status.HTTP_400_BAD_REQUEST)

    return Response(DonorResolutionSerializer(resolution).data)


@extend_schema(
    responses={
        200: DonorSerializer,
        404: ErrorSerializer,
    },
    description="Get a donor profile.",
    tags=['donors'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsOrgMember])
def donor_detail(request, donor_id):
    """Get donor profile - thin HTTP handler."""
    try:
        donor = get_donor(org_id=get_request_org_id(request), donor_id=donor_id)
    except DonorNotFoundError as e:
        return Response(e.to_dict(), status=status.HTTP_404_NOT_FOUND)

    return Response(DonorSerializer(donor).data)

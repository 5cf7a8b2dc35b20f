from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework import status
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes

from apps.core.permissions import IsOrgMember
from apps.core.requests import get_request_actor, get_request_org_id
from apps.core.serializers import ErrorSerializer
from .serializers import (
    ReceiptRangeSerializer,
    ReceiptRangeCreateSerializer,
    RangeListQuerySerializer,
    RangeStatusActionSerializer,
)
from .services import (
    create_range,
    get_range,
    list_ranges,
    transition_range,
    RangeServiceError,
    RangeValidationError,
    RangeNotFoundError,
    InvalidActionError,
    InvalidStatusTransitionError,
)


def range_error_status(error: RangeServiceError) -> int:
    """HTTP status for a range service error."""
    if isinstance(error, (RangeValidationError, InvalidActionError, InvalidStatusTransitionError)):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(error, RangeNotFoundError):
        return status.HTTP_404_NOT_FOUND
    return status.HTTP_409_CONFLICT


@extend_schema(
    methods=['GET'],
    parameters=[
        OpenApiParameter('status', OpenApiTypes.STR, description='Filter by status'),
        OpenApiParameter('year', OpenApiTypes.INT, description='Filter by year'),
    ],
    responses={200: ReceiptRangeSerializer(many=True)},
    description="List receipt ranges, newest year first.",
    tags=['ranges'],
)
@extend_schema(
    methods=['POST'],
    request=ReceiptRangeCreateSerializer,
    responses={
        201: ReceiptRangeSerializer,
        400: ErrorSerializer,
        409: ErrorSerializer,
    },
    description="Create a receipt range in draft status.",
    tags=['ranges'],
)
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsOrgMember])
def range_list(request):
    """List or create ranges - thin HTTP handler."""
    org_id = get_request_org_id(request)

    if request.method == 'GET':
        query_serializer = RangeListQuerySerializer(data=request.query_params)
        query_serializer.is_valid(raise_exception=True)
        params = query_serializer.validated_data

        ranges = list_ranges(org_id=org_id, status=params.get('status'), year=params.get('year'))
        return Response({
            'ranges': ReceiptRangeSerializer(ranges, many=True).data,
            'count': len(ranges),
        })

    serializer = ReceiptRangeCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        receipt_range = create_range(
            org_id=org_id,
            created_by=get_request_actor(request),
            **serializer.validated_data
        )
    except RangeServiceError as e:
        return Response(e.to_dict(), status=range_error_status(e))

    return Response(
        ReceiptRangeSerializer(receipt_range).data,
        status=status.HTTP_201_CREATED
    )


@extend_schema(
    responses={
        200: ReceiptRangeSerializer,
        400: ErrorSerializer,
        404: ErrorSerializer,
    },
    description="Get a single receipt range.",
    tags=['ranges'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsOrgMember])
def range_detail(request, range_id):
    """Get range - thin HTTP handler."""
    try:
        receipt_range = get_range(org_id=get_request_org_id(request), range_id=range_id)
    except RangeServiceError as e:
        return Response(e.to_dict(), status=range_error_status(e))

    return Response(ReceiptRangeSerializer(receipt_range).data)


@extend_schema(
    request=RangeStatusActionSerializer,
    responses={
        200: ReceiptRangeSerializer,
        400: ErrorSerializer,
        404: ErrorSerializer,
        409: ErrorSerializer,
    },
    description="Change range status: activate, lock, unlock or archive.",
    tags=['ranges'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated, IsOrgMember])
def range_status(request, range_id):
    """Transition range status - thin HTTP handler."""
    serializer = RangeStatusActionSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        receipt_range = transition_range(
            org_id=get_request_org_id(request),
            range_id=range_id,
            action=serializer.validated_data['action'],
            user=get_request_actor(request),
        )
    except RangeServiceError as e:
        return Response(e.to_dict(), status=range_error_status(e))

    return Response(ReceiptRangeSerializer(receipt_range).data)

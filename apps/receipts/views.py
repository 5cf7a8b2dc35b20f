from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from rest_framework import status
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes

from apps.core.permissions import IsOrgMember
from apps.core.requests import get_request_actor, get_request_org_id
from apps.core.serializers import ErrorSerializer
from apps.donors.services import DonorServiceError, DonorValidationError
from .serializers import (
    DonationCreateSerializer,
    DonationSerializer,
    DonationResultSerializer,
    ReceiptListQuerySerializer,
    ExportQuerySerializer,
    ExportResultSerializer,
)
from .services import (
    build_export,
    create_donation,
    get_receipt,
    list_receipts_by_date,
    list_receipts_by_date_range,
    list_receipts_by_donor,
    list_receipts_by_range,
    ReceiptServiceError,
    DonationValidationError,
    InvalidDateRangeError,
    ReceiptAllocationError,
    ReceiptNotFoundError,
)


class ReceiptPagination(PageNumberPagination):
    """Custom pagination for receipts."""
    page_size = 50
    page_size_query_param = 'page_size'
    max_page_size = 200


def receipt_error_status(error) -> int:
    """HTTP status for a receipt or donor service error."""
    if isinstance(error, (DonorValidationError, DonationValidationError, InvalidDateRangeError)):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(error, ReceiptNotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(error, ReceiptAllocationError):
        if error.code == 'ALLOCATION_CONFLICT':
            return status.HTTP_503_SERVICE_UNAVAILABLE
        return status.HTTP_409_CONFLICT
    return status.HTTP_500_INTERNAL_SERVER_ERROR


@extend_schema(
    methods=['GET'],
    parameters=[
        OpenApiParameter('date', OpenApiTypes.DATE, description='Receipts of one day'),
        OpenApiParameter('start_date', OpenApiTypes.DATE, description='Range start (with end_date)'),
        OpenApiParameter('end_date', OpenApiTypes.DATE, description='Range end (max 31 days)'),
        OpenApiParameter('donor_id', OpenApiTypes.STR, description='Receipts of a donor'),
        OpenApiParameter('range_id', OpenApiTypes.STR, description='Receipts of a range'),
    ],
    responses={200: DonationSerializer(many=True), 400: ErrorSerializer},
    description="List receipts, newest first. Exactly one filter is required.",
    tags=['receipts'],
)
@extend_schema(
    methods=['POST'],
    request=DonationCreateSerializer,
    responses={
        201: DonationResultSerializer,
        400: ErrorSerializer,
        409: ErrorSerializer,
        503: ErrorSerializer,
    },
    description="Record a donation and issue the next receipt number from the active range.",
    tags=['receipts'],
)
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsOrgMember])
def receipt_list(request):
    """List receipts or create a donation - thin HTTP handler."""
    org_id = get_request_org_id(request)

    if request.method == 'GET':
        query_serializer = ReceiptListQuerySerializer(data=request.query_params)
        query_serializer.is_valid(raise_exception=True)
        params = query_serializer.validated_data

        try:
            if 'date' in params:
                receipts = list_receipts_by_date(org_id=org_id, on_date=params['date'])
            elif 'start_date' in params:
                receipts = list_receipts_by_date_range(
                    org_id=org_id,
                    start_date=params['start_date'],
                    end_date=params['end_date'],
                )
            elif 'donor_id' in params:
                receipts = list_receipts_by_donor(org_id=org_id, donor_id=params['donor_id'])
            else:
                receipts = list_receipts_by_range(org_id=org_id, range_id=params['range_id'])
        except ReceiptServiceError as e:
            return Response(e.to_dict(), status=receipt_error_status(e))

        paginator = ReceiptPagination()
        page = paginator.paginate_queryset(receipts, request)
        return paginator.get_paginated_response(DonationSerializer(page, many=True).data)

    serializer = DonationCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        result = create_donation(
            org_id=org_id,
            request=serializer.validated_data,
            created_by=get_request_actor(request),
        )
    except (DonorServiceError, ReceiptServiceError) as e:
        return Response(e.to_dict(), status=receipt_error_status(e))

    return Response(
        DonationResultSerializer(result).data,
        status=status.HTTP_201_CREATED
    )


@extend_schema(
    responses={
        200: DonationSerializer,
        404: ErrorSerializer,
    },
    description="Get a receipt by number.",
    tags=['receipts'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsOrgMember])
def receipt_detail(request, receipt_no):
    """Get receipt - thin HTTP handler."""
    try:
        receipt = get_receipt(org_id=get_request_org_id(request), receipt_no=receipt_no)
    except ReceiptServiceError as e:
        return Response(e.to_dict(), status=receipt_error_status(e))

    return Response(DonationSerializer(receipt).data)


@extend_schema(
    parameters=[
        OpenApiParameter('start_date', OpenApiTypes.STR, description='yyyy-mm-dd', required=True),
        OpenApiParameter('end_date', OpenApiTypes.STR, description='yyyy-mm-dd, at most 1 year after start', required=True),
        OpenApiParameter('range_id', OpenApiTypes.STR, description='Only receipts of this range'),
    ],
    responses={
        200: ExportResultSerializer,
        400: ErrorSerializer,
    },
    description="Export receipts of a date range as a Tally CSV.",
    tags=['receipts'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsOrgMember])
def receipt_export(request):
    """Export receipts - thin HTTP handler."""
    query_serializer = ExportQuerySerializer(data=request.query_params)
    query_serializer.is_valid(raise_exception=True)
    params = query_serializer.validated_data

    try:
        result = build_export(
            org_id=get_request_org_id(request),
            start_date=params['start_date'],
            end_date=params['end_date'],
            range_id=params.get('range_id') or None,
        )
    except ReceiptServiceError as e:
        return Response(e.to_dict(), status=receipt_error_status(e))

    return Response(ExportResultSerializer(result).data)

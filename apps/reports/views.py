from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework import status
from django.shortcuts import get_object_or_404
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes
from apps.accounts.permissions import IsChairmanOrAdmin
from apps.markets.models import Market
from apps.markets.scope import resolve_caller_scope
from .aggregation import LevyAggregates
from .chairman import get_chairman_dashboard
from .dashboard import build_dashboard, get_filter_options
from .export import build_export_report
from .exceptions import (
    ReportServiceError,
    MarketNotFoundError,
    ChairmanNotFoundError,
)
from .serializers import (
    # Input serializers
    DashboardQuerySerializer,
    ExportQuerySerializer,
    MarketStatsQuerySerializer,
    ChairmanDashboardQuerySerializer,
    # Response serializers
    DashboardResponseSerializer,
    FilterOptionsSerializer,
    ExportReportSerializer,
    MarketStatsSerializer,
    ChairmanDashboardSerializer,
    ErrorSerializer,
)


def report_error_response(exc):
    """Translate a report error into an HTTP response."""
    if isinstance(exc, (MarketNotFoundError, ChairmanNotFoundError)):
        return Response({'error': str(exc)}, status=status.HTTP_404_NOT_FOUND)
    return Response({'error': str(exc)}, status=status.HTTP_400_BAD_REQUEST)


def _market_for_caller(request, market_id):
    """Return (market, None) or (None, 403 response)."""
    market = get_object_or_404(Market, id=market_id)
    scope = resolve_caller_scope(request.user)
    if not scope.can_access_market(market.id):
        return None, Response(
            {'error': 'You can only report on your own market.'},
            status=status.HTTP_403_FORBIDDEN
        )
    return market, None


@extend_schema(
    parameters=[
        OpenApiParameter('lga', OpenApiTypes.STR, description='Local government name'),
        OpenApiParameter('market', OpenApiTypes.STR, description='Market name'),
        OpenApiParameter('time_frame', OpenApiTypes.STR, description='today, this_week, this_month, this_year, last_six_months, custom', default='this_month'),
        OpenApiParameter('year', OpenApiTypes.INT, description='Whole calendar year (overrides time_frame)'),
        OpenApiParameter('start_date', OpenApiTypes.DATE, description='First day (YYYY-MM-DD), custom time frame'),
        OpenApiParameter('end_date', OpenApiTypes.DATE, description='Last day (YYYY-MM-DD), custom time frame'),
    ],
    responses={200: DashboardResponseSerializer, 400: ErrorSerializer},
    description="Market count, revenue, monthly levy chart, compliance and collection totals.",
    tags=['reports'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsChairmanOrAdmin])
def dashboard(request):
    """Levy dashboard - thin HTTP handler."""
    query_serializer = DashboardQuerySerializer(data=request.query_params)
    query_serializer.is_valid(raise_exception=True)
    params = query_serializer.validated_data

    try:
        data = build_dashboard(
            lga_filter=params.get('lga'),
            market_filter=params.get('market'),
            timeframe=params.get('time_frame'),
            year=params.get('year'),
            start_date=params.get('start_date'),
            end_date=params.get('end_date'),
            scope=resolve_caller_scope(request.user),
        )
    except ReportServiceError as e:
        return report_error_response(e)

    return Response(data)


@extend_schema(
    responses={200: FilterOptionsSerializer},
    description="LGAs, markets, payment years and time frames available to the dashboard filters.",
    tags=['reports'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsChairmanOrAdmin])
def filter_options(request):
    """Dashboard filter options - thin HTTP handler."""
    return Response(get_filter_options(scope=resolve_caller_scope(request.user)))


@extend_schema(
    parameters=[
        OpenApiParameter('start_date', OpenApiTypes.DATE, description='Start date (YYYY-MM-DD), default first of month'),
        OpenApiParameter('end_date', OpenApiTypes.DATE, description='End date (YYYY-MM-DD), default today'),
        OpenApiParameter('market', OpenApiTypes.UUID, description='Only this market'),
        OpenApiParameter('lga', OpenApiTypes.UUID, description='Only markets of this local government'),
        OpenApiParameter('time_zone', OpenApiTypes.STR, description='IANA time zone for the report date', default='UTC'),
    ],
    responses={200: ExportReportSerializer, 400: ErrorSerializer, 403: ErrorSerializer, 404: ErrorSerializer},
    description="Data for a downloadable levy report over a date window.",
    tags=['reports'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsChairmanOrAdmin])
def export_report(request):
    """Export report - thin HTTP handler."""
    query_serializer = ExportQuerySerializer(data=request.query_params)
    query_serializer.is_valid(raise_exception=True)
    params = query_serializer.validated_data

    scope = resolve_caller_scope(request.user)
    market_id = params.get('market')
    if not scope.is_admin:
        # Chairmen always export their own market
        if market_id and market_id != scope.market_id:
            return Response(
                {'error': 'You can only report on your own market.'},
                status=status.HTTP_403_FORBIDDEN
            )
        if scope.market_id is None:
            return Response(
                {'error': 'You are not assigned to a market.'},
                status=status.HTTP_403_FORBIDDEN
            )
        market_id = scope.market_id

    try:
        data = build_export_report(
            start_date=params['start_date'],
            end_date=params['end_date'],
            market_id=market_id,
            lga_id=params.get('lga'),
            time_zone=params.get('time_zone'),
        )
    except ReportServiceError as e:
        return report_error_response(e)

    return Response(data)


@extend_schema(
    parameters=[
        OpenApiParameter('start_date', OpenApiTypes.DATE, description='Start date (YYYY-MM-DD), default first of month'),
        OpenApiParameter('end_date', OpenApiTypes.DATE, description='End date (YYYY-MM-DD), default today'),
        OpenApiParameter('all_time', OpenApiTypes.BOOL, description='Ignore the window and use all payments'),
    ],
    responses={200: MarketStatsSerializer, 403: ErrorSerializer, 404: ErrorSerializer},
    description="Revenue and trader compliance for one market.",
    tags=['reports'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsChairmanOrAdmin])
def market_stats(request, market_id):
    """Market stats - thin HTTP handler."""
    query_serializer = MarketStatsQuerySerializer(data=request.query_params)
    query_serializer.is_valid(raise_exception=True)
    params = query_serializer.validated_data

    market, denied = _market_for_caller(request, market_id)
    if denied:
        return denied

    if params.get('all_time'):
        start_date = end_date = None
    else:
        start_date, end_date = params['start_date'], params['end_date']

    try:
        data = LevyAggregates.compute_market_stats(market.id, start_date, end_date)
    except ReportServiceError as e:
        return report_error_response(e)

    return Response(data)


@extend_schema(
    request=None,
    responses={200: MarketStatsSerializer, 403: ErrorSerializer, 404: ErrorSerializer},
    description="Recompute the cached revenue and compliance figures stored on a market.",
    tags=['reports'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated, IsChairmanOrAdmin])
def refresh_market(request, market_id):
    """Refresh market snapshot - thin HTTP handler."""
    market, denied = _market_for_caller(request, market_id)
    if denied:
        return denied

    try:
        market = LevyAggregates.refresh_market_snapshot(market.id)
    except ReportServiceError as e:
        return report_error_response(e)

    return Response({
        'market_id': market.id,
        'total_revenue': market.total_revenue,
        'transaction_count': market.levy_payments.paid().count(),
        'total_traders': market.total_traders,
        'compliant_traders': market.compliant_traders,
        'non_compliant_traders': market.non_compliant_traders,
        'compliance_rate': float(market.compliance_rate),
    })


@extend_schema(
    parameters=[
        OpenApiParameter('chairman', OpenApiTypes.UUID, description='Chairman to report on (admins only)'),
    ],
    responses={200: ChairmanDashboardSerializer, 400: ErrorSerializer, 404: ErrorSerializer},
    description="Today's, this week's and this month's revenue and headcounts for a chairman's market.",
    tags=['reports'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsChairmanOrAdmin])
def chairman_dashboard(request):
    """Chairman dashboard - thin HTTP handler."""
    query_serializer = ChairmanDashboardQuerySerializer(data=request.query_params)
    query_serializer.is_valid(raise_exception=True)

    scope = resolve_caller_scope(request.user)
    if scope.is_admin:
        chairman_id = query_serializer.validated_data.get('chairman')
        if chairman_id is None:
            return Response(
                {'error': 'chairman is required'},
                status=status.HTTP_400_BAD_REQUEST
            )
    else:
        chairman_id = scope.chairman_id
        if chairman_id is None:
            return Response(
                {'error': 'No chairman profile for this account.'},
                status=status.HTTP_404_NOT_FOUND
            )

    try:
        data = get_chairman_dashboard(chairman_id=chairman_id)
    except ReportServiceError as e:
        return report_error_response(e)

    return Response(data)

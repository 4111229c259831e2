from rest_framework import viewsets, status
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from django.shortcuts import get_object_or_404
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes
from apps.accounts.models import UserRole
from apps.accounts.permissions import IsChairmanOrAdmin
from apps.markets.exceptions import InvalidQRCodeError
from apps.markets.models import Trader, GoodBoy
from apps.markets.scope import resolve_caller_scope
from apps.markets.services import TraderQRCode
from .models import LevySetup, LevyPayment
from .serializers import (
    # Input serializers
    LevySetupQuerySerializer,
    ConfigureLevySetupSerializer,
    ResolveSetupQuerySerializer,
    LevyPaymentFilterSerializer,
    RecordPaymentSerializer,
    ScanPaymentSerializer,
    FailPaymentSerializer,
    DateWindowQuerySerializer,
    # Response serializers
    LevySetupSerializer,
    LevyPaymentSerializer,
    TraderLevyBreakdownSerializer,
    CollectorSummarySerializer,
    ErrorSerializer,
)
from .permissions import CanConfigureLevies, CanRecordLevyPayments
from .services import (
    LevyServiceError,
    LevyNotFoundError,
    ConfigurationMissingError,
    LevySetupConflictError,
    resolve_active_setup,
    list_active_setups,
    get_setup_history,
    configure_levy_setup,
    deactivate_levy_setup,
    record_payment,
    record_payment_by_qr,
    confirm_payment,
    fail_payment,
    get_trader_levy_breakdown,
    get_collector_summary,
)


def levy_error_response(exc):
    """Translate a levy service error into an HTTP response."""
    body = {'error': str(exc)}
    if isinstance(exc, LevyNotFoundError):
        return Response(body, status=status.HTTP_404_NOT_FOUND)
    if isinstance(exc, LevySetupConflictError):
        return Response(body, status=status.HTTP_409_CONFLICT)
    if isinstance(exc, ConfigurationMissingError):
        body['code'] = 'levy_not_configured'
    return Response(body, status=status.HTTP_400_BAD_REQUEST)


def _forbidden(message):
    return Response({'error': message}, status=status.HTTP_403_FORBIDDEN)


# =============================================================================
# Levy setups
# =============================================================================

@extend_schema(
    methods=['GET'],
    parameters=[
        OpenApiParameter('market', OpenApiTypes.UUID, description='Market (defaults to your own)'),
        OpenApiParameter('include_inactive', OpenApiTypes.BOOL, description='Include superseded rates'),
    ],
    responses={200: LevySetupSerializer(many=True), 400: ErrorSerializer, 403: ErrorSerializer},
    description="List the active levy rate per occupancy type and frequency of a market.",
    tags=['levies'],
)
@extend_schema(
    methods=['POST'],
    request=ConfigureLevySetupSerializer,
    responses={201: LevySetupSerializer, 400: ErrorSerializer, 403: ErrorSerializer, 409: ErrorSerializer},
    description="Set a market's levy rate. The previous active rate of the same triple is deactivated.",
    tags=['levies'],
)
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, CanConfigureLevies])
def levy_setups(request):
    """List or configure levy setups - thin HTTP handler."""
    scope = resolve_caller_scope(request.user)

    if request.method == 'POST':
        serializer = ConfigureLevySetupSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        if not scope.can_access_market(data['market']):
            return _forbidden('You can only configure levies for your own market.')

        try:
            setup = configure_levy_setup(
                market_id=data['market'],
                amount=data['amount'],
                frequency=data['frequency'],
                occupancy_type=data.get('occupancy_type'),
                chairman_id=scope.chairman_id,
                created_by=request.user,
            )
        except LevyServiceError as e:
            return levy_error_response(e)

        return Response(LevySetupSerializer(setup).data, status=status.HTTP_201_CREATED)

    query_serializer = LevySetupQuerySerializer(data=request.query_params)
    query_serializer.is_valid(raise_exception=True)
    params = query_serializer.validated_data

    market_id = params.get('market') or scope.market_id
    if market_id is None:
        return Response({'error': 'market is required'}, status=status.HTTP_400_BAD_REQUEST)
    if not scope.can_access_market(market_id):
        return _forbidden('You can only view levies of your own market.')

    if params['include_inactive']:
        setups = get_setup_history(market_id=market_id).select_related('market')
    else:
        setups = list_active_setups(market_id=market_id)
    return Response(LevySetupSerializer(setups, many=True).data)


@extend_schema(
    request=None,
    responses={200: LevySetupSerializer, 403: ErrorSerializer, 404: ErrorSerializer},
    description="Deactivate a levy setup. History is kept.",
    tags=['levies'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated, IsChairmanOrAdmin])
def deactivate_setup(request, setup_id):
    """Deactivate a levy setup - thin HTTP handler."""
    setup = get_object_or_404(LevySetup, id=setup_id)
    scope = resolve_caller_scope(request.user)
    if not scope.can_access_market(setup.market_id):
        return _forbidden('You can only change levies of your own market.')

    try:
        setup = deactivate_levy_setup(setup_id=setup.id)
    except LevyServiceError as e:
        return levy_error_response(e)

    return Response(LevySetupSerializer(setup).data)


@extend_schema(
    parameters=[
        OpenApiParameter('market', OpenApiTypes.UUID, required=True),
        OpenApiParameter('occupancy_type', OpenApiTypes.STR, required=True),
        OpenApiParameter('frequency', OpenApiTypes.STR),
    ],
    responses={200: LevySetupSerializer, 403: ErrorSerializer, 404: ErrorSerializer},
    description="Find the levy setup that governs a market, occupancy type and optional frequency.",
    tags=['levies'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def resolve_setup(request):
    """Resolve the active levy setup - thin HTTP handler."""
    query_serializer = ResolveSetupQuerySerializer(data=request.query_params)
    query_serializer.is_valid(raise_exception=True)
    params = query_serializer.validated_data

    scope = resolve_caller_scope(request.user)
    if not scope.can_access_market(params['market']):
        return _forbidden('You can only view levies of your own market.')

    setup = resolve_active_setup(
        market_id=params['market'],
        occupancy_type=params['occupancy_type'],
        frequency=params.get('frequency'),
    )
    if setup is None:
        return Response({
            'error': 'Levy is not configured for this market and occupancy type',
            'code': 'levy_not_configured',
        }, status=status.HTTP_404_NOT_FOUND)

    return Response(LevySetupSerializer(setup).data)


# =============================================================================
# Levy payments
# =============================================================================

class LevyPaymentPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class LevyPaymentViewSet(viewsets.GenericViewSet):
    """
    Levy collections.

    list: Payments visible to the caller (filterable)
    retrieve: Get one payment
    create: Record a collection
    scan: Record a collection for a trader identified by QR payload
    confirm: Pending -> paid
    fail: Pending -> failed
    """

    serializer_class = LevyPaymentSerializer
    permission_classes = [IsAuthenticated, CanRecordLevyPayments]
    pagination_class = LevyPaymentPagination
    lookup_value_regex = '[0-9a-fA-F-]{32,36}'

    def get_permissions(self):
        if self.action in ['confirm', 'fail']:
            return [IsAuthenticated(), IsChairmanOrAdmin()]
        return super().get_permissions()

    def get_queryset(self):
        scope = resolve_caller_scope(self.request.user)
        queryset = LevyPayment.objects.collections().select_related('trader', 'market')
        if scope.is_admin:
            return queryset
        if scope.role == UserRole.TRADER:
            return queryset.filter(trader_id=scope.trader_id)
        if scope.role == UserRole.GOODBOY:
            return queryset.filter(good_boy_id=scope.good_boy_id)
        return queryset.filter(market_id=scope.market_id)

    def _collector_for(self, scope, requested):
        # Collectors always record as themselves
        if scope.role == UserRole.GOODBOY:
            return scope.good_boy_id
        return requested

    @extend_schema(
        parameters=[
            OpenApiParameter('market', OpenApiTypes.UUID),
            OpenApiParameter('trader', OpenApiTypes.UUID),
            OpenApiParameter('good_boy', OpenApiTypes.UUID),
            OpenApiParameter('status', OpenApiTypes.STR),
            OpenApiParameter('date_from', OpenApiTypes.DATE),
            OpenApiParameter('date_to', OpenApiTypes.DATE),
        ],
        responses={200: LevyPaymentSerializer(many=True)},
        tags=['levies'],
    )
    def list(self, request):
        filter_serializer = LevyPaymentFilterSerializer(data=request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data

        queryset = self.get_queryset()
        if 'market' in params:
            queryset = queryset.filter(market_id=params['market'])
        if 'trader' in params:
            queryset = queryset.filter(trader_id=params['trader'])
        if 'good_boy' in params:
            queryset = queryset.filter(good_boy_id=params['good_boy'])
        if 'status' in params:
            queryset = queryset.filter(status=params['status'])
        if 'date_from' in params:
            queryset = queryset.filter(payment_date__date__gte=params['date_from'])
        if 'date_to' in params:
            queryset = queryset.filter(payment_date__date__lte=params['date_to'])

        page = self.paginate_queryset(queryset)
        return self.get_paginated_response(LevyPaymentSerializer(page, many=True).data)

    @extend_schema(responses={200: LevyPaymentSerializer, 404: ErrorSerializer}, tags=['levies'])
    def retrieve(self, request, pk=None):
        payment = get_object_or_404(self.get_queryset(), id=pk)
        return Response(LevyPaymentSerializer(payment).data)

    @extend_schema(
        request=RecordPaymentSerializer,
        responses={201: LevyPaymentSerializer, 400: ErrorSerializer, 403: ErrorSerializer, 404: ErrorSerializer},
        description="Record a levy collection. Amount defaults to the trader's rate.",
        tags=['levies'],
    )
    def create(self, request):
        serializer = RecordPaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        scope = resolve_caller_scope(request.user)
        if not scope.can_access_market(data['market']):
            return _forbidden('You can only record payments in your own market.')

        try:
            payment = record_payment(
                trader_id=data['trader'],
                market_id=data['market'],
                good_boy_id=self._collector_for(scope, data.get('good_boy')),
                amount=data.get('amount'),
                payment_method=data['payment_method'],
                transaction_reference=data.get('transaction_reference'),
                incentive_amount=data.get('incentive_amount'),
                notes=data.get('notes', ''),
                collection_date=data.get('collection_date'),
            )
        except LevyServiceError as e:
            return levy_error_response(e)

        return Response(LevyPaymentSerializer(payment).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        request=ScanPaymentSerializer,
        responses={201: LevyPaymentSerializer, 400: ErrorSerializer, 403: ErrorSerializer, 404: ErrorSerializer},
        description="Record a levy collection for the trader whose QR code was scanned.",
        tags=['levies'],
    )
    @action(detail=False, methods=['post'])
    def scan(self, request):
        serializer = ScanPaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        scope = resolve_caller_scope(request.user)
        try:
            trader_id = TraderQRCode.parse_payload(data['qr_payload'])
        except InvalidQRCodeError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        trader = get_object_or_404(Trader, id=trader_id)
        if not scope.can_access_market(trader.market_id):
            return _forbidden('You can only record payments in your own market.')

        try:
            payment = record_payment_by_qr(
                qr_payload=data['qr_payload'],
                good_boy_id=self._collector_for(scope, data.get('good_boy')),
                amount=data.get('amount'),
                payment_method=data['payment_method'],
                notes=data.get('notes', ''),
            )
        except LevyServiceError as e:
            return levy_error_response(e)

        return Response(LevyPaymentSerializer(payment).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        request=None,
        responses={200: LevyPaymentSerializer, 400: ErrorSerializer, 404: ErrorSerializer},
        description="Confirm a pending payment.",
        tags=['levies'],
    )
    @action(detail=True, methods=['post'])
    def confirm(self, request, pk=None):
        payment = get_object_or_404(self.get_queryset(), id=pk)
        try:
            payment = confirm_payment(payment_id=payment.id, confirmed_by=request.user)
        except LevyServiceError as e:
            return levy_error_response(e)
        return Response(LevyPaymentSerializer(payment).data)

    @extend_schema(
        request=FailPaymentSerializer,
        responses={200: LevyPaymentSerializer, 400: ErrorSerializer, 404: ErrorSerializer},
        description="Reject a pending payment.",
        tags=['levies'],
    )
    @action(detail=True, methods=['post'])
    def fail(self, request, pk=None):
        serializer = FailPaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        payment = get_object_or_404(self.get_queryset(), id=pk)
        try:
            payment = fail_payment(payment_id=payment.id, reason=serializer.validated_data['reason'])
        except LevyServiceError as e:
            return levy_error_response(e)
        return Response(LevyPaymentSerializer(payment).data)


# =============================================================================
# Positions
# =============================================================================

@extend_schema(
    responses={200: TraderLevyBreakdownSerializer, 403: ErrorSerializer, 404: ErrorSerializer},
    description="What a trader has paid, what is outstanding and when the next levy is due.",
    tags=['levies'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def trader_breakdown(request, trader_id):
    """Trader levy breakdown - thin HTTP handler."""
    trader = get_object_or_404(Trader, id=trader_id)
    scope = resolve_caller_scope(request.user)
    if scope.role == UserRole.TRADER and scope.trader_id != trader.id:
        return _forbidden('You can only view your own levies.')
    if not scope.can_access_market(trader.market_id):
        return _forbidden('You can only view traders of your own market.')

    try:
        data = get_trader_levy_breakdown(trader_id=trader.id)
    except LevyServiceError as e:
        return levy_error_response(e)
    return Response(data)


@extend_schema(
    parameters=[
        OpenApiParameter('start_date', OpenApiTypes.DATE, description='Start date (YYYY-MM-DD)'),
        OpenApiParameter('end_date', OpenApiTypes.DATE, description='End date (YYYY-MM-DD)'),
    ],
    responses={200: CollectorSummarySerializer, 403: ErrorSerializer, 404: ErrorSerializer},
    description="Paid collections taken by a collector in a date window, plus today's.",
    tags=['levies'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def collector_summary(request, good_boy_id):
    """Collector summary - thin HTTP handler."""
    good_boy = get_object_or_404(GoodBoy, id=good_boy_id)
    scope = resolve_caller_scope(request.user)
    if scope.role == UserRole.GOODBOY and scope.good_boy_id != good_boy.id:
        return _forbidden('You can only view your own collections.')
    if not scope.can_access_market(good_boy.market_id):
        return _forbidden('You can only view collectors of your own market.')

    query_serializer = DateWindowQuerySerializer(data=request.query_params)
    query_serializer.is_valid(raise_exception=True)
    params = query_serializer.validated_data

    try:
        data = get_collector_summary(
            good_boy_id=good_boy.id,
            start_date=params['start_date'],
            end_date=params['end_date'],
        )
    except LevyServiceError as e:
        return levy_error_response(e)
    return Response(data)

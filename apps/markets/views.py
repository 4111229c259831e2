from django.db.models import Q
from django.http import HttpResponse
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes
from apps.accounts.permissions import IsChairmanOrAdmin
from .models import Market, Trader
from .scope import resolve_caller_scope
from .serializers import (
    MarketFilterSerializer,
    TraderFilterSerializer,
    TraderCreateSerializer,
    MarketSerializer,
    TraderSerializer,
)
from .services import register_trader, TraderQRCode
from .exceptions import (
    MarketNotFoundError,
    CaretakerNotFoundError,
    DuplicateTINError,
    InvalidLevyOverrideError,
)


class MarketPagination(PageNumberPagination):
    """Pagination for market and trader listings."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class MarketViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Markets visible to the caller.

    list: Admins see every market, everyone else only their own
    retrieve: Get a single market with its snapshot fields
    """

    serializer_class = MarketSerializer
    lookup_value_regex = '[0-9a-fA-F-]{32,36}'
    permission_classes = [IsAuthenticated]
    pagination_class = MarketPagination

    def get_queryset(self):
        queryset = Market.objects.select_related('local_government', 'chairman')
        queryset = resolve_caller_scope(self.request.user).restrict_markets(queryset)

        if self.action != 'list':
            return queryset

        filter_serializer = MarketFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data

        if params.get('lga'):
            queryset = queryset.filter(local_government__name__iexact=params['lga'])
        if params.get('search'):
            queryset = queryset.filter(name__icontains=params['search'])

        return queryset


class TraderViewSet(viewsets.GenericViewSet):
    """
    Traders of the markets visible to the caller.

    list: Filter by market, caretaker, occupancy type or search text
    retrieve: Get a trader with building line items
    create: Register a trader (chairmen and admins)
    qr: PNG of the trader's QR code
    """

    serializer_class = TraderSerializer
    lookup_value_regex = '[0-9a-fA-F-]{32,36}'
    permission_classes = [IsAuthenticated]
    pagination_class = MarketPagination

    def get_permissions(self):
        if self.action == 'create':
            return [IsAuthenticated(), IsChairmanOrAdmin()]
        return super().get_permissions()

    def get_queryset(self):
        scope = resolve_caller_scope(self.request.user)
        queryset = Trader.objects.select_related('market').prefetch_related('building_types')
        if not scope.is_admin:
            queryset = queryset.filter(market_id=scope.market_id)
        return queryset

    @extend_schema(
        parameters=[
            OpenApiParameter('market', OpenApiTypes.UUID),
            OpenApiParameter('caretaker', OpenApiTypes.UUID),
            OpenApiParameter('occupancy_type', OpenApiTypes.STR),
            OpenApiParameter('search', OpenApiTypes.STR),
        ],
        responses={200: TraderSerializer(many=True)},
        tags=['markets'],
    )
    def list(self, request):
        filter_serializer = TraderFilterSerializer(data=request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data

        queryset = self.get_queryset()
        if 'market' in params:
            queryset = queryset.filter(market_id=params['market'])
        if 'caretaker' in params:
            queryset = queryset.filter(caretaker_id=params['caretaker'])
        if 'occupancy_type' in params:
            queryset = queryset.filter(occupancy_type=params['occupancy_type'])
        if params.get('search'):
            term = params['search']
            queryset = queryset.filter(
                Q(business_name__icontains=term)
                | Q(trader_name__icontains=term)
                | Q(tin__icontains=term)
            )

        page = self.paginate_queryset(queryset)
        serializer = TraderSerializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    @extend_schema(responses={200: TraderSerializer}, tags=['markets'])
    def retrieve(self, request, pk=None):
        trader = self.get_queryset().filter(id=pk).first()
        if trader is None:
            raise NotFound('Trader not found.')
        return Response(TraderSerializer(trader).data)

    @extend_schema(
        request=TraderCreateSerializer,
        responses={201: TraderSerializer},
        tags=['markets'],
    )
    def create(self, request):
        serializer = TraderCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        scope = resolve_caller_scope(request.user)
        if not scope.can_access_market(data['market']):
            return Response(
                {'error': 'You can only register traders in your own market.'},
                status=status.HTTP_403_FORBIDDEN
            )

        try:
            trader = register_trader(
                market_id=data['market'],
                trader_name=data['trader_name'],
                business_name=data['business_name'],
                business_type=data.get('business_type', ''),
                tin=data['tin'],
                occupancy_type=data['occupancy_type'],
                caretaker_id=data.get('caretaker'),
                section_id=data.get('section'),
                building_types=data.get('building_types'),
                levy_amount=data.get('levy_amount'),
                levy_frequency=data.get('levy_frequency'),
            )
        except MarketNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except (CaretakerNotFoundError, DuplicateTINError, InvalidLevyOverrideError) as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(TraderSerializer(trader).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        responses={(200, 'image/png'): OpenApiTypes.BINARY},
        description="QR code image collectors scan to identify the trader.",
        tags=['markets'],
    )
    @action(detail=True, methods=['get'])
    def qr(self, request, pk=None):
        trader = self.get_queryset().filter(id=pk).first()
        if trader is None:
            raise NotFound('Trader not found.')
        png = TraderQRCode.render_png(trader.qr_code or TraderQRCode.build_payload(trader))
        return HttpResponse(png, content_type='image/png')

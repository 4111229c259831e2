from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'markets'

# traders must be registered before the empty prefix
router = DefaultRouter()
router.register(r'traders', views.TraderViewSet, basename='trader')
router.register(r'', views.MarketViewSet, basename='market')

urlpatterns = [
    # GET  /api/markets/                  - List markets
    # GET  /api/markets/{id}/             - Market detail
    # GET  /api/markets/traders/          - List traders
    # POST /api/markets/traders/          - Register trader
    # GET  /api/markets/traders/{id}/     - Trader detail
    # GET  /api/markets/traders/{id}/qr/  - Trader QR code PNG
    path('', include(router.urls)),
]

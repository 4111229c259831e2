from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'levies'

router = DefaultRouter()
router.register(r'payments', views.LevyPaymentViewSet, basename='payment')

urlpatterns = [
    # Levy setups
    path('setups/', views.levy_setups, name='setups'),
    path('setups/resolve/', views.resolve_setup, name='setup-resolve'),
    path('setups/<uuid:setup_id>/deactivate/', views.deactivate_setup, name='setup-deactivate'),

    # Positions
    path('traders/<uuid:trader_id>/breakdown/', views.trader_breakdown, name='trader-breakdown'),
    path('collectors/<uuid:good_boy_id>/summary/', views.collector_summary, name='collector-summary'),

    # Payment routes
    # GET  /api/levies/payments/               - List payments
    # POST /api/levies/payments/               - Record payment
    # POST /api/levies/payments/scan/          - Record payment from QR payload
    # GET  /api/levies/payments/{id}/          - Payment detail
    # POST /api/levies/payments/{id}/confirm/  - Pending -> paid
    # POST /api/levies/payments/{id}/fail/     - Pending -> failed
    path('', include(router.urls)),
]

from django.urls import path
from . import views

app_name = 'reports'

urlpatterns = [
    # Admin / chairman dashboard
    path('dashboard/', views.dashboard, name='dashboard'),
    path('filter-options/', views.filter_options, name='filter-options'),

    # Export
    path('export/', views.export_report, name='export'),

    # Single market
    path('markets/<uuid:market_id>/stats/', views.market_stats, name='market-stats'),
    path('markets/<uuid:market_id>/refresh/', views.refresh_market, name='market-refresh'),

    # Chairman
    path('chairman/dashboard/', views.chairman_dashboard, name='chairman-dashboard'),
]

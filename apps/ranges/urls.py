from django.urls import path
from . import views

app_name = 'ranges'

urlpatterns = [
    # GET  /api/ranges/                   - List ranges (?status=&year=)
    # POST /api/ranges/                   - Create range (draft)
    path('', views.range_list, name='range-list'),

    # GET  /api/ranges/{range_id}/        - Get range
    path('<str:range_id>/', views.range_detail, name='range-detail'),

    # POST /api/ranges/{range_id}/status/ - activate | lock | unlock | archive
    path('<str:range_id>/status/', views.range_status, name='range-status'),
]

from django.urls import path
from . import views

app_name = 'receipts'

urlpatterns = [
    # GET  /api/receipts/?date=|start_date=&end_date=|donor_id=|range_id=
    # POST /api/receipts/                    - Create donation
    path('', views.receipt_list, name='receipt-list'),

    # GET  /api/receipts/export/?start_date=&end_date=&range_id=
    path('export/', views.receipt_export, name='receipt-export'),

    # GET  /api/receipts/{receipt_no}/
    path('<str:receipt_no>/', views.receipt_detail, name='receipt-detail'),
]

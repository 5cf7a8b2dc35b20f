from django.urls import path
from . import views

app_name = 'donors'

urlpatterns = [
    path('search/', views.search_donor, name='donor-search'),
    path('resolve/', views.resolve, name='donor-resolve'),
    path('<str:donor_id>/', views.donor_detail, name='donor-detail'),
]

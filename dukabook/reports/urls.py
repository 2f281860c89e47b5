from django.urls import path

from . import views

urlpatterns = [
    path('reports/dashboard/', views.reports_dashboard, name='reports-dashboard'),
    path('reports/summary/', views.reports_summary, name='reports-summary'),
    path('reports/export/', views.reports_export, name='reports-export'),
]

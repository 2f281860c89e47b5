"""
URL configuration for the dukabook project.

Every app mounts its endpoints under /api/v1/.
"""
from django.contrib import admin
from django.urls import path, include

admin.site.site_header = "Dukabook Admin Panel"
admin.site.site_title = "Dukabook Admin Portal"
admin.site.index_title = "Inventory, sales and debtors"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include('dukabook.core.urls')),
    path('api/v1/', include('dukabook.catalog.urls')),
    path('api/v1/', include('dukabook.sales.urls')),
    path('api/v1/', include('dukabook.parties.urls')),
    path('api/v1/', include('dukabook.expenses.urls')),
    path('api/v1/', include('dukabook.inventory.urls')),
    path('api/v1/', include('dukabook.reports.urls')),
]

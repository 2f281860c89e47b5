import csv
import logging

from django.http import HttpResponse
from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from .periods import PRESETS, DEFAULT_PRESET, get_period
from .services import build_dashboard, build_period_summary, current_sales

logger = logging.getLogger('dukabook.reports')

EXPORT_HEADERS = [
    'sale_number', 'created_at', 'customer_name', 'payment_method',
    'subtotal', 'tax_amount', 'discount_amount', 'total',
]


def _get_preset(request):
    preset = request.query_params.get('preset', DEFAULT_PRESET).lower()
    if preset not in PRESETS:
        return None
    return preset


def _invalid_preset_response():
    return Response(
        {'error': f"Invalid preset. Choose one of: {', '.join(PRESETS)}"},
        status=status.HTTP_400_BAD_REQUEST
    )


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def reports_dashboard(request):
    """Today's and this week's headline numbers, top sellers and low stock"""
    return Response(build_dashboard(timezone.localdate()))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def reports_summary(request):
    """Sales, profit and transactions for a preset period against the previous one"""
    preset = _get_preset(request)
    if preset is None:
        return _invalid_preset_response()
    return Response(build_period_summary(preset, timezone.localdate()))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def reports_export(request):
    """Download the sales of a preset period as CSV"""
    preset = _get_preset(request)
    if preset is None:
        return _invalid_preset_response()

    today = timezone.localdate()
    sales = current_sales(get_period(preset, today)).order_by('created_at', 'id')

    response = HttpResponse(content_type='text/csv')
    response['Content-Disposition'] = f'attachment; filename="sales-{preset}-{today.isoformat()}.csv"'
    writer = csv.writer(response)
    writer.writerow(EXPORT_HEADERS)
    count = 0
    for sale in sales.iterator():
        writer.writerow([
            sale.sale_number,
            timezone.localtime(sale.created_at).strftime('%Y-%m-%d %H:%M:%S'),
            sale.customer_name or '',
            sale.payment_method,
            sale.subtotal,
            sale.tax_amount,
            sale.discount_amount,
            sale.total,
        ])
        count += 1

    logger.info(f"Exported {count} sales for preset {preset}")
    return response

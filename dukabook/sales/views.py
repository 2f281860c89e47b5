import logging

from django.db.models import Count
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from dukabook.core.utils import create_audit_log
from dukabook.inventory.services import InsufficientStockError
from .filters import SaleFilter
from .models import Sale
from .serializers import SaleSerializer, SaleListSerializer, SaleCreateSerializer
from .services import record_sale, delete_sale, get_sales_summary, InvalidSaleError

logger = logging.getLogger('dukabook.sales')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def sale_list_create(request):
    """List sales (latest first) or record a new sale"""
    if request.method == 'GET':
        queryset = Sale.objects.annotate(annotated_item_count=Count('items')).order_by('-created_at', '-id')
        filterset = SaleFilter(request.query_params, queryset=queryset)
        if not filterset.is_valid():
            return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)
        serializer = SaleListSerializer(filterset.qs, many=True)
        return Response(serializer.data)

    serializer = SaleCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = dict(serializer.validated_data)
    items = data.pop('items')
    try:
        sale = record_sale(items, user=request.user, **data)
    except (InsufficientStockError, InvalidSaleError) as e:
        logger.warning(f"Sale refused: {e}")
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(
        request=request,
        action='sale_record',
        model_name='Sale',
        object_id=str(sale.id),
        object_name=sale.sale_number,
        changes={
            'total': str(sale.total),
            'payment_method': sale.payment_method,
            'items': [{'product': item['product'].id, 'quantity': item['quantity']} for item in items],
        }
    )
    sale = Sale.objects.prefetch_related('items').get(pk=sale.pk)
    return Response(SaleSerializer(sale).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'DELETE'])
@permission_classes([IsAuthenticated])
def sale_detail(request, pk):
    """Retrieve a sale with its items, or delete it and restock"""
    sale = get_object_or_404(Sale.objects.prefetch_related('items'), pk=pk)

    if request.method == 'GET':
        return Response(SaleSerializer(sale).data)

    sale_id = str(sale.id)
    sale_number = sale.sale_number
    total = str(sale.total)
    items = delete_sale(sale, user=request.user)
    create_audit_log(
        request=request,
        action='sale_delete',
        model_name='Sale',
        object_id=sale_id,
        object_name=sale_number,
        changes={
            'total': total,
            'restocked': [{'product': item.product_id, 'quantity': item.quantity} for item in items],
        }
    )
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def sale_summary(request):
    """Today's and this month's sales figures plus the latest sale"""
    summary = get_sales_summary()
    latest = summary.pop('latest_sale')
    summary['latest_sale'] = SaleListSerializer(latest).data if latest else None
    return Response(summary)

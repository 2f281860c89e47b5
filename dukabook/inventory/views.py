import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated

from dukabook.core.utils import create_audit_log
from .filters import InventoryTransactionFilter
from .models import InventoryTransaction
from .serializers import InventoryTransactionSerializer, StockAdjustmentSerializer, StockLevelSerializer
from .services import (
    adjust_stock, initialize_inventory, get_inventory_overview, get_stock_levels,
    InsufficientStockError, InventoryInitializationError,
)

logger = logging.getLogger('dukabook.inventory')

DEFAULT_TRANSACTION_LIMIT = 50


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def inventory_overview(request):
    """Stock counts, inventory value and recent movements"""
    overview = get_inventory_overview()
    overview['recent_movements'] = InventoryTransactionSerializer(overview['recent_movements'], many=True).data
    return Response(overview)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def stock_levels(request):
    """Every product with its quantity, threshold and stock status"""
    levels = get_stock_levels()
    status_filter = request.query_params.get('stock_status', None)
    if status_filter:
        levels = [level for level in levels if level['stock_status'] == status_filter]
    return Response(StockLevelSerializer(levels, many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def transaction_list(request):
    """List stock movements, latest first"""
    filterset = InventoryTransactionFilter(
        request.query_params, queryset=InventoryTransaction.objects.select_related('product').all()
    )
    if not filterset.is_valid():
        return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)

    try:
        limit = int(request.query_params.get('limit', DEFAULT_TRANSACTION_LIMIT))
    except ValueError:
        return Response({'error': 'limit must be an integer'}, status=status.HTTP_400_BAD_REQUEST)

    serializer = InventoryTransactionSerializer(filterset.qs[:max(limit, 1)], many=True)
    return Response(serializer.data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def inventory_initialize(request):
    """Create the opening 'purchase' movement for every product with stock"""
    try:
        movements = initialize_inventory(user=request.user)
    except InventoryInitializationError as e:
        logger.warning(f"Inventory initialization refused: {e}")
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(
        request=request,
        action='stock_initialize',
        model_name='InventoryTransaction',
        object_id='initial',
        object_name='Initial stock',
        changes={'movements': len(movements)}
    )
    return Response({'created': len(movements)}, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def stock_adjustment_create(request):
    """Stock in or stock out for one product"""
    serializer = StockAdjustmentSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    try:
        product, movement = adjust_stock(
            data['product'].pk,
            data['adjustment_type'],
            data['quantity'],
            data['reason'],
            notes=data.get('notes'),
            user=request.user,
        )
    except InsufficientStockError as e:
        logger.warning(str(e))
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(
        request=request,
        action='stock_adjust',
        model_name='Product',
        object_id=str(product.id),
        object_name=product.name,
        changes={
            'adjustment_type': data['adjustment_type'],
            'quantity': data['quantity'],
            'reason': data['reason'],
            'notes': data.get('notes'),
            'new_stock_quantity': product.quantity,
        }
    )
    return Response({
        'transaction': InventoryTransactionSerializer(movement).data,
        'product_id': product.id,
        'quantity': product.quantity,
    }, status=status.HTTP_201_CREATED)

import logging

from django.db.models import Sum, F, DecimalField, ExpressionWrapper
from django.http import HttpResponse
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from decimal import Decimal

from dukabook.core.utils import create_audit_log
from .bulk_import import (
    build_template_csv, parse_csv, preview_rows, import_products,
    ImportValidationError, TEMPLATE_FILENAME,
)
from .filters import ProductFilter, filter_by_stock_status
from .models import Category, Product
from .serializers import (
    CategorySerializer, ProductSerializer, ProductSummarySerializer, categories_with_counts,
)
from .utils import LOW_STOCK, OUT_OF_STOCK

logger = logging.getLogger('dukabook.catalog')

TRACKED_PRODUCT_FIELDS = ['name', 'sku', 'buying_price', 'selling_price', 'quantity', 'low_stock_threshold']


def _snapshot(product):
    return {field: str(getattr(product, field)) for field in TRACKED_PRODUCT_FIELDS}


# Category views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def category_list_create(request):
    """List all categories or create a new category"""
    if request.method == 'GET':
        categories = categories_with_counts()
        serializer = CategorySerializer(categories, many=True)
        return Response(serializer.data)
    else:
        serializer = CategorySerializer(data=request.data)
        if serializer.is_valid():
            serializer.save(created_by=request.user)
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def category_detail(request, pk):
    """Retrieve, update or delete a category"""
    category = get_object_or_404(Category, pk=pk)

    if request.method == 'GET':
        serializer = CategorySerializer(category)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = CategorySerializer(category, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        # Products keep existing with no category
        category.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# Product views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def product_list_create(request):
    """List all products or create a new product"""
    if request.method == 'GET':
        queryset = Product.objects.select_related('category').all()
        filterset = ProductFilter(request.query_params, queryset=queryset)
        if not filterset.is_valid():
            return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)
        serializer = ProductSerializer(filterset.qs, many=True)
        return Response(serializer.data)
    else:
        serializer = ProductSerializer(data=request.data, context={'user': request.user})
        if serializer.is_valid():
            product = serializer.save(created_by=request.user)
            create_audit_log(
                request=request,
                action='create',
                model_name='Product',
                object_id=str(product.id),
                object_name=product.name,
                changes=_snapshot(product)
            )
            logger.info(f"Product created: {product.name} ({product.sku})")
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def product_detail(request, pk):
    """Retrieve, update or delete a product"""
    product = get_object_or_404(Product.objects.select_related('category'), pk=pk)

    if request.method == 'GET':
        serializer = ProductSerializer(product)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = ProductSerializer(
            product, data=request.data, partial=request.method == 'PATCH',
            context={'user': request.user}
        )
        if serializer.is_valid():
            old_data = _snapshot(product)
            serializer.save()
            new_data = _snapshot(product)
            changes = {k: {'old': old_data[k], 'new': new_data[k]} for k in old_data if old_data[k] != new_data[k]}
            if changes:
                create_audit_log(
                    request=request,
                    action='update',
                    model_name='Product',
                    object_id=str(product.id),
                    object_name=product.name,
                    changes=changes
                )
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        product_id = str(product.id)
        product_name = product.name
        product_sku = product.sku
        product.delete()
        create_audit_log(
            request=request,
            action='delete',
            model_name='Product',
            object_id=product_id,
            object_name=product_name,
            changes={'name': product_name, 'sku': product_sku}
        )
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def product_summary(request):
    """Headline numbers for the products screen"""
    products = Product.objects.all()
    stock_value = products.aggregate(
        total=Sum(ExpressionWrapper(F('selling_price') * F('quantity'), output_field=DecimalField(max_digits=20, decimal_places=2)))
    )['total'] or Decimal('0.00')
    recent = Product.objects.select_related('category').order_by('-created_at')[:5]
    return Response({
        'total_products': products.count(),
        'total_stock_value': stock_value,
        'low_stock_count': filter_by_stock_status(products, LOW_STOCK).count(),
        'out_of_stock_count': filter_by_stock_status(products, OUT_OF_STOCK).count(),
        'recent_products': ProductSummarySerializer(recent, many=True).data,
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def product_import_template(request):
    """Download the CSV template for bulk import"""
    response = HttpResponse(build_template_csv(), content_type='text/csv; charset=utf-8')
    response['Content-Disposition'] = f'attachment; filename="{TEMPLATE_FILENAME}"'
    return response


def _read_csv_text(request):
    upload = request.FILES.get('file')
    if upload is not None:
        return upload.read().decode('utf-8-sig')
    return request.data.get('csv', '') or ''


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def product_bulk_import(request):
    """
    Import products from a CSV file.

    Accepts a multipart `file` upload or a `csv` text field. With
    ?dry_run=true the parsed rows and errors are returned and nothing is
    written.
    """
    try:
        text = _read_csv_text(request)
    except UnicodeDecodeError:
        return Response({'errors': ['File must be UTF-8 encoded CSV']}, status=status.HTTP_400_BAD_REQUEST)

    parsed = parse_csv(text)

    if request.query_params.get('dry_run', '').lower() == 'true':
        return Response({
            'headers': parsed['headers'],
            'rows': preview_rows(parsed),
            'row_count': len(parsed['rows']),
            'errors': parsed['errors'],
        })

    try:
        created = import_products(parsed, user=request.user)
    except ImportValidationError as e:
        logger.warning(f"Bulk import refused: {len(e.errors)} error(s)")
        return Response({'errors': e.errors}, status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(
        request=request,
        action='bulk_import',
        model_name='Product',
        object_id='bulk',
        object_name=f"{len(created)} products",
        changes={'count': len(created)}
    )
    return Response({'imported': len(created)}, status=status.HTTP_201_CREATED)

from rest_framework import serializers

from dukabook.catalog.models import Product
from .models import InventoryTransaction
from .services import ADJUSTMENT_REASON_CHOICES


class InventoryTransactionSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True)
    transaction_type_display = serializers.CharField(source='get_transaction_type_display', read_only=True)

    class Meta:
        model = InventoryTransaction
        fields = ['id', 'product', 'product_name', 'transaction_type', 'transaction_type_display',
                  'quantity', 'reference_id', 'notes', 'created_by', 'created_at']


class StockAdjustmentSerializer(serializers.Serializer):
    ADJUSTMENT_TYPE_CHOICES = [
        ('in', 'Stock In'),
        ('out', 'Stock Out'),
    ]

    product = serializers.PrimaryKeyRelatedField(queryset=Product.objects.all())
    adjustment_type = serializers.ChoiceField(choices=ADJUSTMENT_TYPE_CHOICES)
    quantity = serializers.IntegerField(min_value=1)
    reason = serializers.ChoiceField(choices=ADJUSTMENT_REASON_CHOICES)
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class StockLevelSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    name = serializers.CharField()
    sku = serializers.CharField(allow_null=True)
    category_name = serializers.CharField(allow_null=True)
    quantity = serializers.IntegerField()
    unit = serializers.CharField()
    low_stock_threshold = serializers.IntegerField()
    stock_status = serializers.CharField()
    updated_at = serializers.DateTimeField()

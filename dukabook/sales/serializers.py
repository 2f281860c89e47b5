from rest_framework import serializers
from decimal import Decimal

from dukabook.catalog.models import Product
from .models import Sale, SaleItem


class SaleItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = SaleItem
        fields = ['id', 'product', 'product_name', 'quantity', 'unit_price', 'line_total', 'notes', 'created_at']


class SaleSerializer(serializers.ModelSerializer):
    items = SaleItemSerializer(many=True, read_only=True)
    item_count = serializers.SerializerMethodField()

    class Meta:
        model = Sale
        fields = ['id', 'sale_number', 'customer_name', 'customer_phone', 'customer_email',
                  'payment_method', 'tax_rate', 'subtotal', 'discount_amount', 'tax_amount', 'total',
                  'notes', 'items', 'item_count', 'created_by', 'created_at', 'updated_at']

    def get_item_count(self, obj):
        return len(obj.items.all())


class SaleListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for the sales list"""
    item_count = serializers.SerializerMethodField()

    class Meta:
        model = Sale
        fields = ['id', 'sale_number', 'customer_name', 'customer_phone', 'payment_method', 'total', 'item_count', 'created_at']

    def get_item_count(self, obj):
        annotated = getattr(obj, 'annotated_item_count', None)
        if annotated is not None:
            return annotated
        return obj.items.count()


class SaleItemInputSerializer(serializers.Serializer):
    product = serializers.PrimaryKeyRelatedField(queryset=Product.objects.all())
    quantity = serializers.IntegerField(min_value=1)
    unit_price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.00'), required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class SaleCreateSerializer(serializers.Serializer):
    customer_name = serializers.CharField(max_length=200, required=False, allow_blank=True, allow_null=True)
    customer_phone = serializers.CharField(max_length=20, required=False, allow_blank=True, allow_null=True)
    customer_email = serializers.EmailField(required=False, allow_blank=True, allow_null=True)
    payment_method = serializers.ChoiceField(choices=Sale.PAYMENT_METHOD_CHOICES, default='Cash')
    tax_rate = serializers.DecimalField(max_digits=5, decimal_places=2, min_value=Decimal('0.00'), max_value=Decimal('100.00'), default=Decimal('0.00'))
    discount_amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.00'), default=Decimal('0.00'))
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    items = SaleItemInputSerializer(many=True)

    def validate_items(self, value):
        if not value:
            raise serializers.ValidationError('Add at least one sale item.')
        return value

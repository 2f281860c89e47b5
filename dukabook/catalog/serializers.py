from django.db.models import Count
from rest_framework import serializers

from .models import Category, Product


class CategorySerializer(serializers.ModelSerializer):
    product_count = serializers.SerializerMethodField()

    class Meta:
        model = Category
        fields = ['id', 'name', 'description', 'product_count', 'created_at', 'updated_at']

    def get_product_count(self, obj):
        annotated = getattr(obj, 'annotated_product_count', None)
        if annotated is not None:
            return annotated
        return obj.products.count()

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('Category name is required.')
        queryset = Category.objects.filter(name__iexact=value)
        if self.instance is not None:
            queryset = queryset.exclude(pk=self.instance.pk)
        if queryset.exists():
            raise serializers.ValidationError('A category with this name already exists.')
        return value


def categories_with_counts():
    return Category.objects.annotate(annotated_product_count=Count('products')).order_by('name')


class ProductSerializer(serializers.ModelSerializer):
    category_name = serializers.CharField(source='category.name', read_only=True, default=None)
    # For writing: accept a category id, or a name that is resolved or created
    category_id = serializers.PrimaryKeyRelatedField(
        queryset=Category.objects.all(),
        source='category',
        write_only=True,
        required=False,
        allow_null=True
    )
    category_input = serializers.CharField(
        write_only=True, required=False, allow_blank=True, allow_null=True,
    )
    sku = serializers.CharField(max_length=100, required=False, allow_blank=True, allow_null=True)
    stock_status = serializers.CharField(read_only=True)
    profit = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    margin = serializers.DecimalField(max_digits=20, decimal_places=2, read_only=True)

    class Meta:
        model = Product
        fields = [
            'id', 'name', 'category', 'category_id', 'category_name', 'category_input',
            'sku', 'barcode', 'description', 'buying_price', 'selling_price',
            'quantity', 'unit', 'low_stock_threshold', 'image_url',
            'stock_status', 'profit', 'margin', 'created_by', 'created_at', 'updated_at',
        ]
        read_only_fields = ['category', 'created_by', 'created_at', 'updated_at']

    def to_internal_value(self, data):
        # `category_name` is read-only on output but accepted on input
        if hasattr(data, 'get') and data.get('category_name') is not None and 'category_input' not in data:
            data = data.copy()
            data['category_input'] = data.get('category_name')
        return super().to_internal_value(data)

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('Product name is required.')
        return value

    def validate_sku(self, value):
        if value is None:
            return None
        value = value.strip()
        if not value:
            return None
        queryset = Product.objects.filter(sku=value)
        if self.instance is not None:
            queryset = queryset.exclude(pk=self.instance.pk)
        if queryset.exists():
            raise serializers.ValidationError('A product with this SKU already exists.')
        return value

    def validate_buying_price(self, value):
        if value < 0:
            raise serializers.ValidationError('Cost price cannot be negative.')
        return value

    def validate_selling_price(self, value):
        if value < 0:
            raise serializers.ValidationError('Selling price cannot be negative.')
        return value

    def validate_low_stock_threshold(self, value):
        if value < 0:
            raise serializers.ValidationError('Low stock threshold cannot be negative.')
        return value

    def validate(self, attrs):
        category_name = attrs.pop('category_input', None)
        if category_name and category_name.strip() and 'category' not in attrs:
            attrs['category'] = resolve_category(category_name, self.context.get('user'))
        return attrs


def resolve_category(name, user=None):
    """Find a category by name (case-insensitive), creating it when missing"""
    name = name.strip()
    category = Category.objects.filter(name__iexact=name).first()
    if category is None:
        category = Category.objects.create(name=name, created_by=user)
    return category


class ProductSummarySerializer(serializers.ModelSerializer):
    category_name = serializers.CharField(source='category.name', read_only=True, default=None)
    stock_status = serializers.CharField(read_only=True)

    class Meta:
        model = Product
        fields = ['id', 'name', 'sku', 'category_name', 'quantity', 'unit', 'selling_price', 'stock_status', 'created_at']

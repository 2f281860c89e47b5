from rest_framework import serializers
from decimal import Decimal

from .models import Debtor, Payment, Supplier


class DebtorSerializer(serializers.ModelSerializer):
    available_credit = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    credit_ratio = serializers.SerializerMethodField()
    risk_level = serializers.CharField(read_only=True)
    effective_due_date = serializers.DateField(read_only=True)
    is_overdue = serializers.BooleanField(read_only=True)

    class Meta:
        model = Debtor
        fields = [
            'id', 'name', 'phone', 'email', 'address', 'credit_limit', 'outstanding_balance',
            'due_date', 'notes', 'is_active', 'payment_type', 'installment_amount',
            'payment_frequency', 'custom_schedule', 'available_credit', 'credit_ratio',
            'risk_level', 'effective_due_date', 'is_overdue', 'created_by', 'created_at', 'updated_at',
        ]
        read_only_fields = ['created_by', 'created_at', 'updated_at']

    def get_credit_ratio(self, obj):
        return round(float(obj.credit_ratio), 4)

    def validate_credit_limit(self, value):
        if value < 0:
            raise serializers.ValidationError('Credit limit cannot be negative.')
        return value

    def validate_outstanding_balance(self, value):
        if value < 0:
            raise serializers.ValidationError('Outstanding balance cannot be negative.')
        return value

    def validate_installment_amount(self, value):
        if value is not None and value < 0:
            raise serializers.ValidationError('Installment amount cannot be negative.')
        return value

    def validate(self, attrs):
        payment_type = attrs.get('payment_type', self.instance.payment_type if self.instance else 'FULL')
        # Schedule fields only apply to their own payment type
        if payment_type != 'INSTALLMENT':
            attrs['installment_amount'] = None
            attrs['payment_frequency'] = None
        if payment_type != 'CUSTOM':
            attrs['custom_schedule'] = None
        return attrs


class PaymentSerializer(serializers.ModelSerializer):
    debtor_name = serializers.CharField(source='debtor.name', read_only=True)

    class Meta:
        model = Payment
        fields = ['id', 'debtor', 'debtor_name', 'amount', 'payment_method', 'reference_number',
                  'notes', 'created_by', 'created_at']
        read_only_fields = ['debtor', 'created_by', 'created_at']

    def validate_amount(self, value):
        if value <= 0:
            raise serializers.ValidationError('Payment amount must be greater than 0.')
        return value


class AddDebtSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'))
    due_date = serializers.DateField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class SupplierSerializer(serializers.ModelSerializer):
    categories = serializers.ListField(
        child=serializers.CharField(max_length=100, allow_blank=False),
        allow_empty=False,
        error_messages={'empty': 'Select at least one category.'},
    )
    website = serializers.URLField(required=False, allow_blank=True)
    payment_terms = serializers.CharField(max_length=50, required=False, default='Net 30')

    class Meta:
        model = Supplier
        fields = [
            'id', 'name', 'contact_person', 'email', 'phone', 'address', 'city', 'country',
            'postal_code', 'tax_id', 'website', 'categories', 'status', 'payment_terms', 'notes',
            'created_by', 'created_at', 'updated_at',
        ]
        read_only_fields = ['created_by', 'created_at', 'updated_at']

    def validate(self, attrs):
        if 'categories' in attrs:
            attrs['categories'] = [c.strip() for c in attrs['categories'] if c.strip()]
            if not attrs['categories']:
                raise serializers.ValidationError({'categories': ['Select at least one category.']})
        return attrs

import django_filters

from .models import InventoryTransaction


class InventoryTransactionFilter(django_filters.FilterSet):
    product = django_filters.NumberFilter(field_name='product_id')
    type = django_filters.ChoiceFilter(field_name='transaction_type', choices=InventoryTransaction.TRANSACTION_TYPE_CHOICES)

    class Meta:
        model = InventoryTransaction
        fields = ['product', 'type']

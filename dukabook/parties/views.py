import logging

from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from dukabook.core.utils import create_audit_log
from .filters import DebtorFilter, SupplierFilter
from .models import Debtor, Supplier
from .serializers import DebtorSerializer, PaymentSerializer, AddDebtSerializer, SupplierSerializer
from .services import record_payment, add_debt, get_debtor_summary, OverpaymentError

logger = logging.getLogger('dukabook.parties')


# Debtor views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def debtor_list_create(request):
    """List debtors (search, status filter) or create a new debtor"""
    if request.method == 'GET':
        filterset = DebtorFilter(request.query_params, queryset=Debtor.objects.all())
        if not filterset.is_valid():
            return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)
        serializer = DebtorSerializer(filterset.qs, many=True)
        return Response(serializer.data)
    else:
        serializer = DebtorSerializer(data=request.data)
        if serializer.is_valid():
            debtor = serializer.save(created_by=request.user)
            create_audit_log(
                request=request,
                action='create',
                model_name='Debtor',
                object_id=str(debtor.id),
                object_name=debtor.name,
                changes={
                    'credit_limit': str(debtor.credit_limit),
                    'outstanding_balance': str(debtor.outstanding_balance),
                    'payment_type': debtor.payment_type,
                }
            )
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def debtor_detail(request, pk):
    """Retrieve, update or delete a debtor"""
    debtor = get_object_or_404(Debtor, pk=pk)

    if request.method == 'GET':
        serializer = DebtorSerializer(debtor)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = DebtorSerializer(debtor, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        debtor_id = str(debtor.id)
        debtor_name = debtor.name
        outstanding = str(debtor.outstanding_balance)
        debtor.delete()
        create_audit_log(
            request=request,
            action='delete',
            model_name='Debtor',
            object_id=debtor_id,
            object_name=debtor_name,
            changes={'outstanding_balance': outstanding}
        )
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def debtor_summary(request):
    """Total outstanding, high risk count and today's payments"""
    return Response(get_debtor_summary())


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def debtor_add_debt(request, pk):
    """Add more debt to an existing debtor"""
    debtor = get_object_or_404(Debtor, pk=pk)
    serializer = AddDebtSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    old_balance = debtor.outstanding_balance
    data = serializer.validated_data
    debtor = add_debt(debtor.pk, data['amount'], due_date=data.get('due_date'), notes=data.get('notes'))
    create_audit_log(
        request=request,
        action='debt_add',
        model_name='Debtor',
        object_id=str(debtor.id),
        object_name=debtor.name,
        changes={
            'amount': str(data['amount']),
            'outstanding_balance': {'old': str(old_balance), 'new': str(debtor.outstanding_balance)},
        }
    )
    return Response(DebtorSerializer(debtor).data)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def debtor_payments(request, pk):
    """List a debtor's payments (latest first) or record a payment"""
    debtor = get_object_or_404(Debtor, pk=pk)

    if request.method == 'GET':
        payments = debtor.payments.select_related('debtor').all()
        serializer = PaymentSerializer(payments, many=True)
        return Response(serializer.data)

    serializer = PaymentSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    try:
        debtor, payment = record_payment(
            debtor.pk,
            data['amount'],
            payment_method=data.get('payment_method', 'Cash'),
            reference_number=data.get('reference_number'),
            notes=data.get('notes'),
            user=request.user,
        )
    except OverpaymentError as e:
        logger.warning(str(e))
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(
        request=request,
        action='payment_add',
        model_name='Payment',
        object_id=str(payment.id),
        object_name=debtor.name,
        changes={
            'amount': str(payment.amount),
            'payment_method': payment.payment_method,
            'outstanding_balance': str(debtor.outstanding_balance),
        }
    )
    return Response({
        'payment': PaymentSerializer(payment).data,
        'debtor': DebtorSerializer(debtor).data,
    }, status=status.HTTP_201_CREATED)


# Supplier views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def supplier_list_create(request):
    """List all suppliers or create a new supplier"""
    if request.method == 'GET':
        filterset = SupplierFilter(request.query_params, queryset=Supplier.objects.all())
        if not filterset.is_valid():
            return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)
        serializer = SupplierSerializer(filterset.qs, many=True)
        return Response(serializer.data)
    else:
        serializer = SupplierSerializer(data=request.data)
        if serializer.is_valid():
            serializer.save(created_by=request.user)
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def supplier_detail(request, pk):
    """Retrieve, update or delete a supplier"""
    supplier = get_object_or_404(Supplier, pk=pk)

    if request.method == 'GET':
        serializer = SupplierSerializer(supplier)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = SupplierSerializer(supplier, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        supplier.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)

from django.db.models import Sum, Count
from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from decimal import Decimal

from dukabook.core.utils import create_audit_log
from .filters import ExpenseFilter
from .models import Expense
from .serializers import ExpenseSerializer


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def expense_list_create(request):
    """List expenses (newest expense date first) or record a new expense"""
    if request.method == 'GET':
        filterset = ExpenseFilter(request.query_params, queryset=Expense.objects.all())
        if not filterset.is_valid():
            return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)
        serializer = ExpenseSerializer(filterset.qs, many=True)
        return Response(serializer.data)
    else:
        serializer = ExpenseSerializer(data=request.data)
        if serializer.is_valid():
            expense = serializer.save(created_by=request.user)
            create_audit_log(
                request=request,
                action='create',
                model_name='Expense',
                object_id=str(expense.id),
                object_name=f"{expense.category} {expense.expense_date}",
                changes={'amount': str(expense.amount), 'category': expense.category}
            )
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def expense_detail(request, pk):
    """Retrieve, update or delete an expense"""
    expense = get_object_or_404(Expense, pk=pk)

    if request.method == 'GET':
        serializer = ExpenseSerializer(expense)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = ExpenseSerializer(expense, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        expense_id = str(expense.id)
        description = f"{expense.category} {expense.expense_date}"
        amount = str(expense.amount)
        expense.delete()
        create_audit_log(
            request=request,
            action='delete',
            model_name='Expense',
            object_id=expense_id,
            object_name=description,
            changes={'amount': amount}
        )
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def expense_summary(request):
    """Total, this month, today and per-category expense totals"""
    today = timezone.localdate()
    expenses = Expense.objects.all()
    totals = expenses.aggregate(total=Sum('amount'), count=Count('id'))
    this_month = expenses.filter(
        expense_date__year=today.year, expense_date__month=today.month
    ).aggregate(total=Sum('amount'))['total']
    today_total = expenses.filter(expense_date=today).aggregate(total=Sum('amount'))['total']
    breakdown = expenses.values('category').annotate(total=Sum('amount'), count=Count('id')).order_by('-total')

    return Response({
        'total': totals['total'] or Decimal('0.00'),
        'this_month': this_month or Decimal('0.00'),
        'today': today_total or Decimal('0.00'),
        'count': totals['count'] or 0,
        'category_breakdown': [
            {'category': row['category'], 'total': row['total'], 'count': row['count']}
            for row in breakdown
        ],
    })

"""
Receivables, payables and the cash drawer.
"""
import logging
from datetime import date
from decimal import Decimal, InvalidOperation

from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import Sum
from django.utils import timezone

from salon.core.exceptions import NotFoundError, PersistenceError, ValidationError

from .models import CashSession, Payable, Receivable
from .payments import PaymentMethod

logger = logging.getLogger(__name__)

CENTS = Decimal('0.01')


def sum_amount(queryset, field='amount'):
    """Sum of a money column, always with two decimal places"""
    total = queryset.aggregate(total=Sum(field))['total'] or 0
    return Decimal(total).quantize(CENTS)


def parse_amount(value, field='amount'):
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f'Invalid {field}: {value!r}')
    if amount < 0:
        raise ValidationError(f'The {field} cannot be negative.')
    return amount.quantize(CENTS)


def parse_due_date(value):
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        raise ValidationError(f'Invalid due date: {value!r}')


def _get(model, pk, label, for_update=False):
    queryset = model.objects.select_for_update() if for_update else model.objects
    try:
        return queryset.get(pk=pk)
    except (model.DoesNotExist, ValueError, TypeError):
        raise NotFoundError(f'{label} {pk} not found')


def create_receivable(description, amount, due_date, client=None, service_date=None):
    """Register money owed to the salon outside the appointment flow"""
    if not description:
        raise ValidationError('Description is required.')
    try:
        receivable = Receivable.objects.create(
            client=client,
            client_name=client.name if client else '',
            description=description,
            amount=parse_amount(amount),
            due_date=parse_due_date(due_date),
            service_date=service_date,
        )
    except DatabaseError as exc:
        logger.error(f"Failed to create receivable '{description}': {exc}")
        raise PersistenceError('Could not create the receivable') from exc
    logger.info(f'Receivable {receivable.pk} created: {description} ({receivable.amount})')
    return receivable


def mark_receivable_paid(receivable_id, method=None):
    """
    Settle a receivable

    When the receivable comes from an appointment, the appointment is marked
    paid in the same transaction.
    """
    if method and method not in PaymentMethod.values:
        raise ValidationError(f'Unknown payment method: {method!r}')

    now = timezone.now()
    try:
        with transaction.atomic():
            receivable = _get(Receivable, receivable_id, 'Receivable', for_update=True)
            receivable.status = Receivable.STATUS_PAID
            receivable.paid_at = now
            if method:
                receivable.payment_method = method
            receivable.save(update_fields=['status', 'paid_at', 'payment_method', 'updated_at'])

            appointment = receivable.appointment
            if appointment is not None:
                appointment.payment_status = appointment.PAYMENT_PAID
                appointment.paid_at = now
                if method:
                    appointment.payment_method = method
                appointment.save(update_fields=['payment_status', 'paid_at', 'payment_method', 'updated_at'])
    except DatabaseError as exc:
        logger.error(f'Failed to settle receivable {receivable_id}: {exc}')
        raise PersistenceError(f'Could not settle receivable {receivable_id}') from exc

    logger.info(f'Receivable {receivable.pk} paid')
    return receivable


def create_payable(description, amount, due_date, category='General'):
    if not description:
        raise ValidationError('Description is required.')
    try:
        payable = Payable.objects.create(
            description=description,
            category=category or 'General',
            amount=parse_amount(amount),
            due_date=parse_due_date(due_date),
        )
    except DatabaseError as exc:
        logger.error(f"Failed to create payable '{description}': {exc}")
        raise PersistenceError('Could not create the payable') from exc
    logger.info(f'Payable {payable.pk} created: {description} ({payable.amount})')
    return payable


def mark_payable_paid(payable_id):
    payable = _get(Payable, payable_id, 'Payable')
    payable.status = Payable.STATUS_PAID
    payable.paid_at = timezone.now()
    try:
        payable.save(update_fields=['status', 'paid_at'])
    except DatabaseError as exc:
        raise PersistenceError(f'Could not settle payable {payable_id}') from exc
    logger.info(f'Payable {payable.pk} paid')
    return payable


def current_cash_session():
    return CashSession.objects.filter(status=CashSession.STATUS_OPEN).first()


def open_cash_session(user, opening_amount):
    """Open the cash drawer; only one session may be open at a time"""
    amount = parse_amount(opening_amount, 'opening amount')
    try:
        with transaction.atomic():
            if CashSession.objects.select_for_update().filter(status=CashSession.STATUS_OPEN).exists():
                raise ValidationError('A cash session is already open.')
            session = CashSession.objects.create(opening_amount=amount, opened_by=user)
    except IntegrityError:
        # Lost the race against another open
        raise ValidationError('A cash session is already open.')
    except DatabaseError as exc:
        logger.error(f'Failed to open cash session: {exc}')
        raise PersistenceError('Could not open the cash session') from exc

    logger.info(f'Cash session {session.pk} opened by {user} with {amount}')
    return session


def close_cash_session(session_id, user, closing_amount):
    amount = parse_amount(closing_amount, 'closing amount')
    try:
        with transaction.atomic():
            session = _get(CashSession, session_id, 'Cash session', for_update=True)
            if session.status != CashSession.STATUS_OPEN:
                raise ValidationError('This cash session is already closed.')
            session.closing_amount = amount
            session.closed_by = user
            session.closed_at = timezone.now()
            session.status = CashSession.STATUS_CLOSED
            session.save()
    except DatabaseError as exc:
        logger.error(f'Failed to close cash session {session_id}: {exc}')
        raise PersistenceError(f'Could not close cash session {session_id}') from exc

    logger.info(f'Cash session {session.pk} closed by {user} with {amount}')
    return session


def finance_overview(as_of=None):
    """
    Headline numbers for the finance screen

    Balance counts paid money only: paid receivables minus paid payables.
    Monthly revenue is the sum of receivables paid in the month of `as_of`.
    """
    as_of = as_of or timezone.localdate()
    paid_income = sum_amount(Receivable.objects.filter(status=Receivable.STATUS_PAID))
    paid_expense = sum_amount(Payable.objects.filter(status=Payable.STATUS_PAID))

    return {
        'income_total': sum_amount(Receivable.objects.all()),
        'income_received': paid_income,
        'income_pending': sum_amount(Receivable.objects.pending()),
        'expense_total': sum_amount(Payable.objects.all()),
        'expense_paid': paid_expense,
        'expense_pending': sum_amount(Payable.objects.filter(status=Payable.STATUS_PENDING)),
        'balance': paid_income - paid_expense,
        'monthly_revenue': sum_amount(
            Receivable.objects.filter(
                status=Receivable.STATUS_PAID,
                paid_at__year=as_of.year,
                paid_at__month=as_of.month,
            )
        ),
        'overdue_count': Receivable.objects.overdue(as_of).count(),
    }

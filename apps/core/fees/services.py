
from __future__ import annotations

import calendar
import logging
from decimal import Decimal, ROUND_HALF_UP

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Count, Sum
from django.utils import timezone

from apps.core.notifications.dispatch import enqueue
from apps.core.notifications.services import notify_roles, notify_uids
from apps.core.students.models import Student
from apps.core.utils.documents import build_document_page, image_to_pdf_bytes

from .models import FeeLedger, FeePayment

logger = logging.getLogger(__name__)


def _to_decimal(value) -> Decimal:
    return Decimal(str(value or '0'))


def _quantize(value) -> Decimal:
    return _to_decimal(value).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)


def _add_months(value, months):
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def _student_uid(student: Student):
    return student.user.uid if student.user_id else None


def create_fee_ledger(*, student: Student, total_fees=None, due_date=None):
    total = settings.DEFAULT_TOTAL_FEES if total_fees is None else total_fees
    return FeeLedger.objects.create(
        student=student,
        total_fees=_quantize(total),
        amount_paid=Decimal('0.00'),
        due_date=due_date or _add_months(timezone.localdate(), settings.FEE_DUE_MONTHS),
        student_name=student.name,
        college_id=student.college_id,
        program=student.program,
        branch=student.branch,
    )


def sync_ledger_student_fields(student: Student):
    FeeLedger.objects.filter(student=student).update(
        student_name=student.name,
        college_id=student.college_id,
        program=student.program,
        branch=student.branch,
    )


def payment_as_dict(payment: FeePayment):
    return {
        'id': payment.pk,
        'amount': _quantize(payment.amount),
        'reference': payment.reference,
        'date': payment.date,
        'recorded_by': payment.recorded_by,
        'notes': payment.notes,
        'status': payment.status,
    }


def ledger_as_dict(ledger: FeeLedger, include_history=True):
    data = {
        'id': ledger.pk,
        'student_id': ledger.student.doc_id,
        'student_name': ledger.student_name,
        'college_id': ledger.college_id,
        'program': ledger.program,
        'branch': ledger.branch,
        'total_fees': _quantize(ledger.total_fees),
        'amount_paid': _quantize(ledger.amount_paid),
        'balance': _quantize(ledger.balance),
        'due_date': ledger.due_date,
        'status': ledger.status,
    }
    if include_history:
        data['payment_history'] = [payment_as_dict(payment) for payment in ledger.payments.all()]
    return data


def get_ledger_for_student(student: Student) -> FeeLedger:
    ledger = FeeLedger.objects.select_related('student').filter(student=student).first()
    if ledger is None:
        raise ValidationError(f"No fee record found for {student.college_id}.")
    return ledger


@transaction.atomic
def record_payment(*, ledger_id, amount, reference='', notes='', recorded_by='admin', payment_date=None):
    ledger = FeeLedger.objects.select_for_update().select_related('student__user').filter(pk=ledger_id).first()
    if ledger is None:
        raise ValidationError('Fee record not found.')

    amount = _quantize(amount)
    if amount <= 0:
        raise ValidationError('Payment amount must be greater than zero.')

    ledger.amount_paid = _quantize(ledger.amount_paid + amount)
    ledger.save(update_fields=['amount_paid', 'updated_at'])

    payment = FeePayment.objects.create(
        ledger=ledger,
        amount=amount,
        reference=(reference or '')[:120],
        date=payment_date or timezone.now(),
        recorded_by=recorded_by,
        notes=(notes or '')[:255],
        status=FeePayment.STATUS_SUCCESS,
    )

    uid = _student_uid(ledger.student)
    if uid:
        notify_uids(
            [uid],
            title='Fee Payment Recorded',
            message=f"A payment of INR {amount} has been recorded. Remaining balance: INR {_quantize(ledger.balance)}.",
            type='info',
            link='/student/fees',
        )
    return payment


@transaction.atomic
def submit_payment_confirmation(*, student: Student, amount, reference, payment_date=None, notes=''):
    ledger = get_ledger_for_student(student)

    amount = _quantize(amount)
    if amount <= 0:
        raise ValidationError('Payment amount must be greater than zero.')
    reference = (reference or '').strip()
    if not reference:
        raise ValidationError('A transaction reference is required.')

    payment = FeePayment.objects.create(
        ledger=ledger,
        amount=amount,
        reference=reference[:120],
        date=payment_date or timezone.now(),
        recorded_by='student',
        notes=(notes or '')[:255],
        status=FeePayment.STATUS_PENDING_CONFIRMATION,
    )

    enqueue(
        'email.send',
        subject='Payment submitted for confirmation',
        body=(
            f"Dear {student.name},\n\n"
            f"We have received your payment confirmation of INR {amount} (reference {payment.reference}). "
            "The accounts office will verify it shortly.\n"
        ),
        recipients=[student.email],
    )
    notify_roles(
        'admin',
        title='Payment Confirmation Submitted',
        message=f"{student.name} ({student.college_id}) submitted a payment of INR {amount} for confirmation.",
        type='task',
        link='/admin/fees',
    )
    return payment


@transaction.atomic
def review_payment_confirmation(*, payment_id, approve: bool, reviewed_by='admin'):
    payment = FeePayment.objects.select_for_update().select_related('ledger').filter(pk=payment_id).first()
    if payment is None:
        raise ValidationError('Payment not found.')
    if payment.status != FeePayment.STATUS_PENDING_CONFIRMATION:
        raise ValidationError('Only payments awaiting confirmation can be reviewed.')

    ledger = FeeLedger.objects.select_for_update().select_related('student__user').get(pk=payment.ledger_id)
    if approve:
        payment.status = FeePayment.STATUS_SUCCESS
        payment.recorded_by = reviewed_by
        ledger.amount_paid = _quantize(ledger.amount_paid + payment.amount)
        ledger.save(update_fields=['amount_paid', 'updated_at'])
        title = 'Payment Confirmed'
        message = f"Your payment of INR {_quantize(payment.amount)} has been confirmed."
    else:
        payment.status = FeePayment.STATUS_REJECTED
        title = 'Payment Not Confirmed'
        message = (
            f"Your payment of INR {_quantize(payment.amount)} (reference {payment.reference}) "
            "could not be verified. Please contact the accounts office."
        )
    payment.save(update_fields=['status', 'recorded_by'])

    uid = _student_uid(ledger.student)
    if uid:
        notify_uids([uid], title=title, message=message, type='alert' if not approve else 'info', link='/student/fees')
    return payment


def get_fee_records(*, program=None, branch=None, status=None):
    ledgers = FeeLedger.objects.select_related('student').prefetch_related('payments')
    if program:
        ledgers = ledgers.filter(program=program)
    if branch:
        ledgers = ledgers.filter(branch=branch)

    records = [ledger_as_dict(ledger) for ledger in ledgers.order_by('college_id')]
    if status:
        records = [record for record in records if record['status'] == status]
    return records


def get_fee_summary():
    totals = FeeLedger.objects.aggregate(
        total_fees=Sum('total_fees'),
        total_collected=Sum('amount_paid'),
        ledgers=Count('id'),
    )
    total_fees = _quantize(totals['total_fees'])
    collected = _quantize(totals['total_collected'])

    by_status = {FeeLedger.STATUS_PAID: 0, FeeLedger.STATUS_PENDING: 0, FeeLedger.STATUS_OVERDUE: 0}
    today = timezone.localdate()
    for ledger in FeeLedger.objects.only('total_fees', 'amount_paid', 'due_date'):
        by_status[ledger.status_on(today)] += 1

    return {
        'total_fees': total_fees,
        'total_collected': collected,
        'total_outstanding': _quantize(total_fees - collected),
        'ledger_count': totals['ledgers'] or 0,
        'by_status': by_status,
    }


def get_student_fee_details(student: Student):
    return ledger_as_dict(get_ledger_for_student(student))


def _invoice_number(college_id, index):
    return f"INV-{(college_id or '')[-4:]}-{index}"


def get_student_invoices(student: Student):
    ledger = get_ledger_for_student(student)
    payments = ledger.payments.filter(status=FeePayment.STATUS_SUCCESS).order_by('date', 'id')
    return [
        {
            'invoice_number': _invoice_number(ledger.college_id, index),
            'payment_id': payment.pk,
            'date': payment.date,
            'amount': _quantize(payment.amount),
            'reference': payment.reference,
            'status': payment.status,
        }
        for index, payment in enumerate(payments, start=1)
    ]


def _find_invoice(student: Student, invoice_number):
    for invoice in get_student_invoices(student):
        if invoice['invoice_number'] == invoice_number:
            return invoice
    raise ValidationError(f"Invoice {invoice_number} not found.")


def build_invoice_image(*, ledger: FeeLedger, invoice):
    return build_document_page(
        'College ERP - Fee Invoice',
        [
            f"Invoice No: {invoice['invoice_number']}",
            f"Date: {invoice['date']:%Y-%m-%d}",
            f"Student: {ledger.student_name} ({ledger.college_id})",
            f"Program: {ledger.program} / {ledger.branch}",
        ],
        table_header=['Description', 'Reference', 'Amount (INR)'],
        table_rows=[['Tuition fee payment', invoice['reference'] or '-', invoice['amount']]],
        footer_lines=[
            f"Total fees: INR {_quantize(ledger.total_fees)}",
            f"Paid to date: INR {_quantize(ledger.amount_paid)}",
            f"Balance: INR {_quantize(ledger.balance)}",
        ],
    )


def generate_invoice_pdf(*, student: Student, invoice_number) -> bytes:
    ledger = get_ledger_for_student(student)
    invoice = _find_invoice(student, invoice_number)
    return image_to_pdf_bytes([build_invoice_image(ledger=ledger, invoice=invoice)])


def send_invoice_by_email(*, student: Student, invoice_number):
    _find_invoice(student, invoice_number)
    return enqueue('fees.email_invoice', student_id=student.pk, invoice_number=invoice_number)

from django.http import HttpResponse
from django.views.decorators.http import require_GET, require_POST

from apps.core.students.services import get_student_for_user
from apps.core.users.audit import log_audit_event
from apps.core.users.decorators import role_required
from apps.core.utils.actions import action_failure, action_success, form_errors, json_action, request_data

from .forms import FeeFilterForm, PaymentConfirmationForm, PaymentReviewForm, RecordPaymentForm
from .services import (
    get_fee_records,
    get_fee_summary,
    get_student_fee_details,
    get_student_invoices,
    generate_invoice_pdf,
    record_payment,
    review_payment_confirmation,
    send_invoice_by_email,
    submit_payment_confirmation,
)


@require_GET
@role_required('admin')
@json_action
def fee_record_list(request):
    form = FeeFilterForm(request.GET)
    if not form.is_valid():
        return action_failure(form_errors(form))
    return action_success(
        records=get_fee_records(
            program=form.cleaned_data['program'],
            branch=form.cleaned_data['branch'],
            status=form.cleaned_data['status'],
        ),
    )


@require_GET
@role_required('admin')
@json_action
def fee_summary(request):
    return action_success(summary=get_fee_summary())


@require_POST
@role_required('admin')
@json_action
def fee_record_payment(request, ledger_id):
    form = RecordPaymentForm(request_data(request))
    if not form.is_valid():
        return action_failure(form_errors(form))

    payment = record_payment(
        ledger_id=ledger_id,
        amount=form.cleaned_data['amount'],
        reference=form.cleaned_data['reference'],
        notes=form.cleaned_data['notes'],
        payment_date=form.cleaned_data['payment_date'],
    )
    log_audit_event(request, 'fees.payment_recorded', target=payment, details=f"Amount={payment.amount}")
    return action_success('Payment recorded successfully.', payment_id=payment.pk)


@require_POST
@role_required('admin')
@json_action
def fee_review_payment(request, payment_id):
    form = PaymentReviewForm(request_data(request))
    if not form.is_valid():
        return action_failure(form_errors(form))

    payment = review_payment_confirmation(payment_id=payment_id, approve=form.cleaned_data['approve'])
    log_audit_event(request, 'fees.payment_reviewed', target=payment, details=f"Status={payment.status}")
    return action_success(f"Payment marked as {payment.status}.", payment_status=payment.status)


@require_GET
@role_required('student')
@json_action
def my_fees(request):
    student = get_student_for_user(request.user)
    return action_success(fees=get_student_fee_details(student))


@require_GET
@role_required('student')
@json_action
def my_invoices(request):
    student = get_student_for_user(request.user)
    return action_success(invoices=get_student_invoices(student))


@require_POST
@role_required('student')
@json_action
def my_payment_confirmation(request):
    form = PaymentConfirmationForm(request_data(request))
    if not form.is_valid():
        return action_failure(form_errors(form))

    student = get_student_for_user(request.user)
    payment = submit_payment_confirmation(
        student=student,
        amount=form.cleaned_data['amount'],
        reference=form.cleaned_data['reference'],
        notes=form.cleaned_data['notes'],
        payment_date=form.cleaned_data['payment_date'],
    )
    return action_success('Payment submitted for confirmation.', payment_id=payment.pk)


@require_GET
@role_required('student')
@json_action
def my_invoice_pdf(request, invoice_number):
    student = get_student_for_user(request.user)
    pdf_bytes = generate_invoice_pdf(student=student, invoice_number=invoice_number)
    response = HttpResponse(pdf_bytes, content_type='application/pdf')
    response['Content-Disposition'] = f'attachment; filename="{invoice_number}.pdf"'
    return response


@require_POST
@role_required('student')
@json_action
def my_invoice_email(request, invoice_number):
    student = get_student_for_user(request.user)
    send_invoice_by_email(student=student, invoice_number=invoice_number)
    return action_success(f"Invoice {invoice_number} will be emailed to {student.email}.")

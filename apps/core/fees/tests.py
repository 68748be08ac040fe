from datetime import date
from decimal import Decimal

from django.core import mail
from django.core.exceptions import ValidationError
from django.test import TestCase
from django.urls import reverse

from apps.core.notifications.models import Notification
from apps.core.utils.testing import make_admin, make_student

from .models import FeeLedger, FeePayment
from .services import (
    create_fee_ledger,
    generate_invoice_pdf,
    get_fee_records,
    get_fee_summary,
    get_student_invoices,
    record_payment,
    review_payment_confirmation,
    send_invoice_by_email,
    submit_payment_confirmation,
)


class FeeBaseTestCase(TestCase):
    def setUp(self):
        self.student = make_student(name='Asha Rao', college_id='BT24CS0007')
        self.ledger = create_fee_ledger(student=self.student, total_fees=Decimal('1000'))


class RecordPaymentTests(FeeBaseTestCase):
    def test_payment_updates_balance_and_notifies(self):
        with self.captureOnCommitCallbacks(execute=True):
            payment = record_payment(ledger_id=self.ledger.pk, amount='250.005', reference='TXN-1')

        self.ledger.refresh_from_db()
        self.assertEqual(payment.amount, Decimal('250.01'))
        self.assertEqual(self.ledger.amount_paid, Decimal('250.01'))
        self.assertEqual(self.ledger.balance, Decimal('749.99'))
        self.assertEqual(self.ledger.status, FeeLedger.STATUS_PENDING)
        self.assertTrue(Notification.objects.filter(recipient=self.student.user, title='Fee Payment Recorded').exists())

    def test_full_payment_marks_ledger_paid(self):
        record_payment(ledger_id=self.ledger.pk, amount=1000)
        self.ledger.refresh_from_db()
        self.assertEqual(self.ledger.status, FeeLedger.STATUS_PAID)

    def test_invalid_amounts_and_ledgers_are_rejected(self):
        with self.assertRaisesMessage(ValidationError, 'greater than zero'):
            record_payment(ledger_id=self.ledger.pk, amount=0)
        with self.assertRaisesMessage(ValidationError, 'greater than zero'):
            record_payment(ledger_id=self.ledger.pk, amount='-5')
        with self.assertRaisesMessage(ValidationError, 'not found'):
            record_payment(ledger_id=999999, amount=10)
        self.assertFalse(FeePayment.objects.exists())

    def test_overdue_status_follows_due_date(self):
        self.ledger.due_date = date(2020, 1, 1)
        self.ledger.save()
        self.assertEqual(self.ledger.status_on(date(2020, 1, 2)), FeeLedger.STATUS_OVERDUE)
        self.assertEqual(self.ledger.status_on(date(2020, 1, 1)), FeeLedger.STATUS_PENDING)


class PaymentConfirmationTests(FeeBaseTestCase):
    def setUp(self):
        super().setUp()
        self.admin = make_admin()

    def test_submission_is_pending_until_approved(self):
        with self.captureOnCommitCallbacks(execute=True):
            payment = submit_payment_confirmation(student=self.student, amount=400, reference='UPI-77')

        self.ledger.refresh_from_db()
        self.assertEqual(payment.status, FeePayment.STATUS_PENDING_CONFIRMATION)
        self.assertEqual(self.ledger.amount_paid, Decimal('0.00'))
        self.assertEqual(len(mail.outbox), 1)
        self.assertTrue(Notification.objects.filter(recipient=self.admin.user, title='Payment Confirmation Submitted').exists())

        review_payment_confirmation(payment_id=payment.pk, approve=True)

        self.ledger.refresh_from_db()
        self.assertEqual(self.ledger.amount_paid, Decimal('400.00'))
        with self.assertRaisesMessage(ValidationError, 'awaiting confirmation'):
            review_payment_confirmation(payment_id=payment.pk, approve=True)

    def test_rejection_leaves_the_balance(self):
        payment = submit_payment_confirmation(student=self.student, amount=400, reference='UPI-77')

        review_payment_confirmation(payment_id=payment.pk, approve=False)

        payment.refresh_from_db()
        self.ledger.refresh_from_db()
        self.assertEqual(payment.status, FeePayment.STATUS_REJECTED)
        self.assertEqual(self.ledger.amount_paid, Decimal('0.00'))

    def test_reference_is_required(self):
        with self.assertRaisesMessage(ValidationError, 'reference'):
            submit_payment_confirmation(student=self.student, amount=400, reference='  ')

    def test_review_endpoint_reports_payment_status(self):
        payment = submit_payment_confirmation(student=self.student, amount=400, reference='UPI-77')
        self.client.force_login(self.admin.user)

        response = self.client.post(reverse('fee_review_payment', args=[payment.pk]), data={'approve': 'on'})

        self.assertEqual(response.status_code, 200, response.content)
        self.assertEqual(response.json()['payment_status'], FeePayment.STATUS_SUCCESS)


class FeeReportTests(FeeBaseTestCase):
    def test_summary_and_records(self):
        other = make_student(name='Vikram Shah', branch='ECE')
        other_ledger = create_fee_ledger(student=other, total_fees=500)
        record_payment(ledger_id=other_ledger.pk, amount=500)
        record_payment(ledger_id=self.ledger.pk, amount=100)

        summary = get_fee_summary()

        self.assertEqual(summary['total_fees'], Decimal('1500.00'))
        self.assertEqual(summary['total_collected'], Decimal('600.00'))
        self.assertEqual(summary['total_outstanding'], Decimal('900.00'))
        self.assertEqual(summary['by_status'][FeeLedger.STATUS_PAID], 1)
        self.assertEqual([row['college_id'] for row in get_fee_records(status='Paid')], [other.college_id])
        self.assertEqual(len(get_fee_records(branch='CSE')), 1)


class InvoiceTests(FeeBaseTestCase):
    def setUp(self):
        super().setUp()
        record_payment(ledger_id=self.ledger.pk, amount=300, reference='TXN-1')
        pending = submit_payment_confirmation(student=self.student, amount=50, reference='UPI-2')
        self.assertEqual(pending.status, FeePayment.STATUS_PENDING_CONFIRMATION)

    def test_only_successful_payments_are_invoiced(self):
        invoices = get_student_invoices(self.student)

        self.assertEqual([invoice['invoice_number'] for invoice in invoices], ['INV-0007-1'])
        self.assertEqual(invoices[0]['amount'], Decimal('300.00'))

    def test_invoice_pdf_and_email(self):
        self.assertTrue(generate_invoice_pdf(student=self.student, invoice_number='INV-0007-1').startswith(b'%PDF'))
        with self.assertRaisesMessage(ValidationError, 'not found'):
            generate_invoice_pdf(student=self.student, invoice_number='INV-0007-9')

        mail.outbox.clear()
        with self.captureOnCommitCallbacks(execute=True):
            send_invoice_by_email(student=self.student, invoice_number='INV-0007-1')

        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].attachments[0][0], 'INV-0007-1.pdf')

    def test_student_downloads_invoice(self):
        self.client.force_login(self.student.user)

        response = self.client.get(reverse('my_invoice_pdf', args=['INV-0007-1']))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response['Content-Type'], 'application/pdf')

from decimal import Decimal

from django.db import models
from django.utils import timezone

from apps.core.students.models import Student


class FeeLedger(models.Model):
    """One per student. Balance and status are derived on read, never stored."""

    STATUS_PAID = 'Paid'
    STATUS_PENDING = 'Pending'
    STATUS_OVERDUE = 'Overdue'

    student = models.OneToOneField(Student, on_delete=models.CASCADE, related_name='fee_ledger')
    total_fees = models.DecimalField(max_digits=12, decimal_places=2)
    amount_paid = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    due_date = models.DateField()

    student_name = models.CharField(max_length=150)
    college_id = models.CharField(max_length=32)
    program = models.CharField(max_length=80, blank=True)
    branch = models.CharField(max_length=80, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['college_id']

    def __str__(self):
        return f"{self.college_id} fees"

    @property
    def balance(self):
        return (self.total_fees or Decimal('0.00')) - (self.amount_paid or Decimal('0.00'))

    def status_on(self, as_of_date=None):
        if self.balance <= 0:
            return self.STATUS_PAID
        as_of_date = as_of_date or timezone.localdate()
        if self.due_date and as_of_date > self.due_date:
            return self.STATUS_OVERDUE
        return self.STATUS_PENDING

    @property
    def status(self):
        return self.status_on()


class FeePayment(models.Model):
    STATUS_SUCCESS = 'Success'
    STATUS_PENDING_CONFIRMATION = 'Pending Confirmation'
    STATUS_REJECTED = 'Rejected'
    STATUS_CHOICES = (
        (STATUS_SUCCESS, 'Success'),
        (STATUS_PENDING_CONFIRMATION, 'Pending Confirmation'),
        (STATUS_REJECTED, 'Rejected'),
    )

    ledger = models.ForeignKey(FeeLedger, on_delete=models.CASCADE, related_name='payments')
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    reference = models.CharField(max_length=120, blank=True)
    date = models.DateTimeField(default=timezone.now)
    recorded_by = models.CharField(max_length=60, default='admin')
    notes = models.CharField(max_length=255, blank=True)
    status = models.CharField(max_length=30, choices=STATUS_CHOICES, default=STATUS_SUCCESS)

    class Meta:
        ordering = ['date', 'id']

    def __str__(self):
        return f"{self.ledger.college_id} {self.amount} [{self.status}]"

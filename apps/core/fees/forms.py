from decimal import Decimal

from django import forms


class RecordPaymentForm(forms.Form):
    amount = forms.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'))
    reference = forms.CharField(max_length=120, required=False)
    notes = forms.CharField(max_length=255, required=False)
    payment_date = forms.DateTimeField(required=False)


class PaymentConfirmationForm(forms.Form):
    amount = forms.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'))
    reference = forms.CharField(max_length=120)
    notes = forms.CharField(max_length=255, required=False)
    payment_date = forms.DateTimeField(required=False)


class PaymentReviewForm(forms.Form):
    approve = forms.BooleanField(required=False)


class FeeFilterForm(forms.Form):
    program = forms.CharField(required=False)
    branch = forms.CharField(required=False)
    status = forms.ChoiceField(
        required=False,
        choices=(('', 'All'), ('Paid', 'Paid'), ('Pending', 'Pending'), ('Overdue', 'Overdue')),
    )

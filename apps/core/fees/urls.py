from django.urls import path

from .views import (
    fee_record_list,
    fee_record_payment,
    fee_review_payment,
    fee_summary,
    my_fees,
    my_invoice_email,
    my_invoice_pdf,
    my_invoices,
    my_payment_confirmation,
)

urlpatterns = [
    path('', fee_record_list, name='fee_record_list'),
    path('summary/', fee_summary, name='fee_summary'),
    path('<int:ledger_id>/payments/', fee_record_payment, name='fee_record_payment'),
    path('payments/<int:payment_id>/review/', fee_review_payment, name='fee_review_payment'),

    path('me/', my_fees, name='my_fees'),
    path('me/invoices/', my_invoices, name='my_invoices'),
    path('me/confirm-payment/', my_payment_confirmation, name='my_payment_confirmation'),
    path('me/invoices/<str:invoice_number>/pdf/', my_invoice_pdf, name='my_invoice_pdf'),
    path('me/invoices/<str:invoice_number>/email/', my_invoice_email, name='my_invoice_email'),
]

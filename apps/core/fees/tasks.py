from django.conf import settings
from django.core.mail import EmailMessage

from apps.core.notifications.dispatch import register
from apps.core.students.models import Student

from .services import generate_invoice_pdf


@register('fees.email_invoice')
def email_invoice(*, student_id, invoice_number):
    student = Student.objects.get(pk=student_id)
    pdf_bytes = generate_invoice_pdf(student=student, invoice_number=invoice_number)
    message = EmailMessage(
        subject=f"Invoice {invoice_number}",
        body=f"Dear {student.name},\n\nPlease find attached invoice {invoice_number}.\n",
        from_email=settings.DEFAULT_FROM_EMAIL,
        to=[student.email],
    )
    message.attach(f"{invoice_number}.pdf", pdf_bytes, 'application/pdf')
    message.send(fail_silently=False)

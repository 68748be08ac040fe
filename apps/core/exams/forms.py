from decimal import Decimal

from django import forms

from apps.core.academics.models import Course

from .models import ExamSchedule


class ExamScheduleForm(forms.Form):
    exam_session_name = forms.CharField(max_length=120)
    course = forms.ModelChoiceField(queryset=Course.objects.all(), to_field_name='course_id')
    year = forms.IntegerField(min_value=1, max_value=6)
    date = forms.DateField()
    start_time = forms.TimeField()
    end_time = forms.TimeField()
    room = forms.CharField(max_length=60, required=False)
    status = forms.ChoiceField(choices=ExamSchedule.STATUS_CHOICES, required=False)


class ExamEntryForm(forms.Form):
    course_id = forms.CharField(max_length=20)
    date = forms.DateField()
    start_time = forms.TimeField()
    end_time = forms.TimeField()
    room = forms.CharField(max_length=60, required=False)


class ExamSessionForm(forms.Form):
    exam_session_name = forms.CharField(max_length=120)
    program = forms.CharField(max_length=80)
    branch = forms.CharField(max_length=80)
    year = forms.IntegerField(min_value=1, max_value=6)
    semester = forms.IntegerField(min_value=1, max_value=12)
    min_attendance = forms.DecimalField(max_digits=5, decimal_places=2, min_value=0, max_value=100, required=False)
    max_dues = forms.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False)

    def clean(self):
        cleaned_data = super().clean()
        if cleaned_data.get('min_attendance') is None:
            cleaned_data['min_attendance'] = Decimal('75.00')
        if cleaned_data.get('max_dues') is None:
            cleaned_data['max_dues'] = Decimal('0.00')
        return cleaned_data


def clean_exam_entries(rows):
    """Validate a list of raw exam rows; returns (entries, error message)."""
    if not isinstance(rows, list) or not rows:
        return None, 'Expected a non-empty "exams" list.'
    entries = []
    for index, row in enumerate(rows, start=1):
        form = ExamEntryForm(row if isinstance(row, dict) else {})
        if not form.is_valid():
            messages = '; '.join(f"{field}: {' '.join(errors)}" for field, errors in form.errors.items())
            return None, f"Exam {index}: {messages}"
        entries.append(form.cleaned_data)
    return entries, None


class ExamFilterForm(forms.Form):
    program = forms.CharField(required=False)
    branch = forms.CharField(required=False)
    year = forms.IntegerField(min_value=1, required=False)
    semester = forms.IntegerField(min_value=1, required=False)
    status = forms.ChoiceField(choices=(('', 'All'),) + ExamSchedule.STATUS_CHOICES, required=False)


class HallTicketQueryForm(forms.Form):
    semester = forms.IntegerField(min_value=1, max_value=12, required=False)

from django import forms

from .models import Complaint, Hostel


class HostelForm(forms.Form):
    name = forms.CharField(max_length=120)
    type = forms.ChoiceField(choices=Hostel.TYPE_CHOICES, required=False)
    status = forms.ChoiceField(choices=Hostel.STATUS_CHOICES, required=False)
    warden_name = forms.CharField(max_length=120, required=False)
    warden_contact = forms.CharField(max_length=20, required=False)
    warden_email = forms.EmailField(required=False)
    warden_office_location = forms.CharField(max_length=120, required=False)
    amenities = forms.JSONField(required=False)
    rules_highlight = forms.JSONField(required=False)

    def __init__(self, data=None, *args, partial=False, **kwargs):
        super().__init__(data, *args, **kwargs)
        if partial:
            submitted = set(data or {})
            for name in list(self.fields):
                if name not in submitted:
                    del self.fields[name]

    def clean(self):
        cleaned_data = super().clean()
        for field in ('amenities', 'rules_highlight'):
            value = cleaned_data.get(field)
            if value is not None and not isinstance(value, list):
                self.add_error(field, 'Expected a list of strings.')
        return cleaned_data

    def hostel_fields(self):
        return {
            name: value
            for name, value in self.cleaned_data.items()
            if value not in (None, '') or name in ('warden_name', 'warden_contact', 'warden_email', 'warden_office_location')
        }


class RoomForm(forms.Form):
    room_number = forms.CharField(max_length=20)
    capacity = forms.IntegerField(min_value=1, max_value=12)
    room_type = forms.CharField(max_length=30, required=False)
    floor = forms.IntegerField(required=False)


class AllocationForm(forms.Form):
    room_number = forms.CharField(max_length=20)
    student_id = forms.CharField(max_length=32)


class RemovalForm(forms.Form):
    student_id = forms.CharField(max_length=32)


class ComplaintForm(forms.Form):
    issue = forms.CharField(max_length=2000)


class ComplaintStatusForm(forms.Form):
    status = forms.ChoiceField(choices=Complaint.STATUS_CHOICES)

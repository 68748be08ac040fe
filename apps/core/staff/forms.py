from django import forms

from apps.core.users.models import User

from .models import StaffProfile, Teacher


class StaffCreateForm(forms.Form):
    role = forms.ChoiceField(choices=((User.ROLE_TEACHER, 'Teacher'), (User.ROLE_ADMIN, 'Admin')))
    name = forms.CharField(max_length=150)
    email = forms.EmailField()
    dob = forms.DateField()
    department = forms.CharField(max_length=120, required=False)
    position = forms.CharField(max_length=120, required=False)
    program = forms.CharField(max_length=80, required=False)
    phone = forms.CharField(max_length=20, required=False)
    office_location = forms.CharField(max_length=120, required=False)
    qualifications = forms.CharField(max_length=255, required=False)
    specialization = forms.CharField(max_length=255, required=False)
    date_of_joining = forms.DateField(required=False)

    def clean(self):
        cleaned_data = super().clean()
        if cleaned_data.get('role') == User.ROLE_TEACHER and not cleaned_data.get('department'):
            self.add_error('department', 'Department is required for teachers.')
        return cleaned_data


class AdminRegistrationForm(forms.Form):
    name = forms.CharField(max_length=150)
    email = forms.EmailField()
    password = forms.CharField(min_length=6, strip=False)
    signup_code = forms.CharField(max_length=120)
    phone = forms.CharField(max_length=20, required=False)


class StaffUpdateForm(forms.Form):
    """Only submitted fields are validated and applied."""

    name = forms.CharField(max_length=150)
    email = forms.EmailField()
    department = forms.CharField(max_length=120)
    position = forms.CharField(max_length=120, required=False)
    program = forms.CharField(max_length=80, required=False)
    status = forms.ChoiceField(choices=StaffProfile.STATUS_CHOICES)
    phone = forms.CharField(max_length=20, required=False)
    office_location = forms.CharField(max_length=120, required=False)
    qualifications = forms.CharField(max_length=255, required=False)
    specialization = forms.CharField(max_length=255, required=False)
    dob = forms.DateField(required=False)
    date_of_joining = forms.DateField(required=False)

    def __init__(self, data=None, *args, **kwargs):
        super().__init__(data, *args, **kwargs)
        submitted = set(data or {})
        for name in list(self.fields):
            if name not in submitted:
                del self.fields[name]

    def changes(self):
        return {name: self.cleaned_data[name] for name in self.fields}


class StaffFilterForm(forms.Form):
    role = forms.ChoiceField(
        choices=(('', 'All'), (User.ROLE_TEACHER, 'Teacher'), (User.ROLE_ADMIN, 'Admin')),
        required=False,
    )
    department = forms.CharField(required=False)
    status = forms.ChoiceField(choices=(('', 'All'),) + Teacher.STATUS_CHOICES, required=False)
    program = forms.CharField(required=False)

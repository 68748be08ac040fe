from django import forms

from .models import Student


class StudentCreateForm(forms.Form):
    name = forms.CharField(max_length=150)
    email = forms.EmailField()
    program = forms.CharField(max_length=80)
    branch = forms.CharField(max_length=80)
    batch = forms.CharField(max_length=20)
    dob = forms.DateField()
    year = forms.IntegerField(min_value=1, max_value=6, required=False)
    semester = forms.IntegerField(min_value=1, max_value=12, required=False)
    gender = forms.ChoiceField(choices=(('', '---'),) + Student.GENDER_CHOICES, required=False)
    phone = forms.CharField(max_length=20, required=False)
    address = forms.CharField(required=False)
    type = forms.ChoiceField(choices=Student.TYPE_CHOICES, required=False)
    emergency_contact_name = forms.CharField(max_length=120, required=False)
    emergency_contact_phone = forms.CharField(max_length=20, required=False)
    emergency_contact_address = forms.CharField(required=False)
    total_fees = forms.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False)

    def service_kwargs(self):
        data = dict(self.cleaned_data)
        data['year'] = data.get('year') or 1
        data['semester'] = data.get('semester') or 1
        data['student_type'] = data.pop('type') or Student.TYPE_DAY_SCHOLAR
        return data


class StudentRegistrationForm(forms.Form):
    name = forms.CharField(max_length=150)
    email = forms.EmailField()
    password = forms.CharField(min_length=6, strip=False)
    college_id = forms.CharField(max_length=32)
    program = forms.CharField(max_length=80)
    branch = forms.CharField(max_length=80)
    batch = forms.CharField(max_length=20)
    year = forms.IntegerField(min_value=1, max_value=6, required=False)
    semester = forms.IntegerField(min_value=1, max_value=12, required=False)
    dob = forms.DateField(required=False)
    phone = forms.CharField(max_length=20, required=False)


class StudentUpdateForm(forms.ModelForm):
    """Partial update: only the fields present in the request are applied."""

    class Meta:
        model = Student
        fields = [
            'name',
            'email',
            'program',
            'branch',
            'batch',
            'year',
            'semester',
            'section',
            'dob',
            'gender',
            'phone',
            'address',
            'status',
            'type',
            'emergency_contact_name',
            'emergency_contact_phone',
            'emergency_contact_address',
        ]

    def __init__(self, data=None, *args, **kwargs):
        super().__init__(data, *args, **kwargs)
        submitted = set(data or {})
        for name in list(self.fields):
            if name not in submitted:
                del self.fields[name]

    def changes(self):
        return {name: self.cleaned_data[name] for name in self.fields}


class CohortFilterForm(forms.Form):
    program = forms.CharField(required=False)
    branch = forms.CharField(required=False)
    year = forms.IntegerField(min_value=1, required=False)
    section = forms.CharField(max_length=4, required=False)
    status = forms.ChoiceField(choices=(('', 'All'),) + Student.STATUS_CHOICES, required=False)
    search = forms.CharField(max_length=100, required=False)

from django import forms

from .models import Application, Opportunity


class OpportunityForm(forms.Form):
    type = forms.ChoiceField(choices=Opportunity.TYPE_CHOICES)
    company = forms.CharField(max_length=150)
    role = forms.CharField(max_length=150)
    ctc_stipend = forms.CharField(max_length=60, required=False)
    location = forms.CharField(max_length=120, required=False)
    duration = forms.CharField(max_length=60, required=False)
    description = forms.CharField(max_length=5000, required=False)
    skills = forms.JSONField(required=False)
    eligibility = forms.CharField(max_length=255, required=False)
    status = forms.ChoiceField(choices=Opportunity.STATUS_CHOICES, required=False)

    def __init__(self, data=None, *args, partial=False, **kwargs):
        super().__init__(data, *args, **kwargs)
        if partial:
            submitted = set(data or {})
            for name in list(self.fields):
                if name not in submitted:
                    del self.fields[name]

    def clean_skills(self):
        skills = self.cleaned_data.get('skills')
        if skills is not None and not isinstance(skills, list):
            raise forms.ValidationError('Expected a list of strings.')
        return skills

    def opportunity_fields(self):
        return {name: value for name, value in self.cleaned_data.items() if value is not None and value != ''}


class ApplicationStatusForm(forms.Form):
    status = forms.ChoiceField(choices=Application.STATUS_CHOICES)

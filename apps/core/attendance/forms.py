from django import forms


class AttendanceSlotForm(forms.Form):
    date = forms.DateField()
    period = forms.IntegerField(min_value=1, max_value=12)


class AttendanceReportForm(forms.Form):
    limit = forms.IntegerField(required=False, min_value=1, max_value=50000)


def entries_from_data(data):
    """Entries come as a JSON ``entries`` object or as ``status_<student_id>`` form fields."""
    entries = data.get('entries')
    if isinstance(entries, dict):
        return {str(key): str(value) for key, value in entries.items()}
    return {
        key[len('status_'):]: value
        for key, value in data.items()
        if key.startswith('status_') and key != 'status_'
    }

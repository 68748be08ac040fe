from django import forms


class MarkReadForm(forms.Form):
    ids = forms.CharField(required=False)

    def clean_ids(self):
        raw = self.cleaned_data.get('ids') or ''
        ids = []
        for part in raw.split(','):
            part = part.strip()
            if not part:
                continue
            if not part.isdigit():
                raise forms.ValidationError('Notification ids must be numeric.')
            ids.append(int(part))
        return ids

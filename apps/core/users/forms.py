from django import forms


class LoginForm(forms.Form):
    email = forms.EmailField()
    password = forms.CharField(strip=False)


class PasswordResetRequestForm(forms.Form):
    email = forms.EmailField()


class NotificationPreferencesForm(forms.Form):
    enabled = forms.BooleanField(required=False)

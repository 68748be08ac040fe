from django import forms

from .services import MAX_MESSAGE_LENGTH


class MessageForm(forms.Form):
    text = forms.CharField(max_length=MAX_MESSAGE_LENGTH)


class MessageQueryForm(forms.Form):
    after = forms.IntegerField(min_value=0, required=False)
    limit = forms.IntegerField(min_value=1, max_value=200, required=False)

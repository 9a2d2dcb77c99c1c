from django import forms

from .models import Payable, Receivable


class ReceivableForm(forms.ModelForm):
    class Meta:
        model = Receivable
        fields = ['client', 'description', 'amount', 'due_date', 'service_date']

    def clean_amount(self):
        amount = self.cleaned_data['amount']
        if amount < 0:
            raise forms.ValidationError('The amount cannot be negative.')
        return amount


class PayableForm(forms.ModelForm):
    class Meta:
        model = Payable
        fields = ['description', 'category', 'amount', 'due_date']

    def clean_amount(self):
        amount = self.cleaned_data['amount']
        if amount < 0:
            raise forms.ValidationError('The amount cannot be negative.')
        return amount

from django import forms

from .certification import parse_month_year
from .exceptions import ChecklistValidationError
from .storage import decode_data_url


class CertificationForm(forms.Form):
    last_certification_date = forms.DateField(
        label="Última certificación", required=False,
        widget=forms.DateInput(attrs={'type': 'date', 'class': 'form-control'}))
    next_certification = forms.CharField(
        label="Próxima certificación", required=False,
        widget=forms.TextInput(attrs={'type': 'month', 'class': 'form-control', 'placeholder': 'AAAA-MM'}))
    certification_dates_unreadable = forms.BooleanField(label="Fechas no legibles", required=False)

    def clean(self):
        cleaned_data = super().clean()
        unreadable = cleaned_data.get('certification_dates_unreadable')
        raw = cleaned_data.get('next_certification')

        if unreadable:
            cleaned_data['next_month'], cleaned_data['next_year'] = None, None
            return cleaned_data

        if not raw:
            raise forms.ValidationError(
                "Indica la próxima certificación o marca las fechas como no legibles.",
                code='required')
        try:
            cleaned_data['next_month'], cleaned_data['next_year'] = parse_month_year(raw)
        except ChecklistValidationError as exc:
            self.add_error('next_certification', exc.message)
        return cleaned_data


class SignatureForm(forms.Form):
    """
    Signer name plus the drawn signature, either as the data URL a
    signature pad produces or as an uploaded image.
    """
    signer_name = forms.CharField(label="Nombre de quien firma", max_length=200)
    signature_data = forms.CharField(required=False, widget=forms.HiddenInput)
    signature_file = forms.ImageField(required=False, label="Imagen de firma")

    def clean_signer_name(self):
        name = self.cleaned_data['signer_name'].strip()
        if not name:
            raise forms.ValidationError("Debes ingresar el nombre de quien firma.")
        return name

    def clean(self):
        cleaned_data = super().clean()
        upload = cleaned_data.get('signature_file')
        data_url = cleaned_data.get('signature_data')
        if upload:
            cleaned_data['signature_image'] = upload
        elif data_url:
            try:
                cleaned_data['signature_image'] = decode_data_url(data_url)
            except ChecklistValidationError as exc:
                self.add_error('signature_data', exc.message)
        else:
            raise forms.ValidationError("Debes dibujar la firma.", code='required')
        return cleaned_data
